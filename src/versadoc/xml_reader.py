"""Loading definition documents from XML resources."""

import logging
from typing import Optional, Union

from lxml import etree

from versadoc.context import ReaderContext
from versadoc.delegate import NamespaceHandler
from versadoc.document_reader import DocumentDefinitionReader
from versadoc.domain import Element
from versadoc.environment import Environment
from versadoc.errors import DefinitionStoreError
from versadoc.events import ReaderEventListener
from versadoc.problems import CollectingProblemReporter, ProblemReporter
from versadoc.registry import DefinitionRegistry
from versadoc.resources import Resource, ResourceLoader

__all__ = ["XmlDefinitionReader", "parse_document"]

logger = logging.getLogger(__name__)


def parse_document(data: bytes, description: str = "XML document") -> Element:
    """Parse XML bytes into an :class:`Element` tree.

    Comments and processing instructions are dropped; entities are not
    expanded and nothing is fetched over the network.

    Raises:
        DefinitionStoreError: If the document is not well-formed.
    """
    parser = etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        remove_comments=True,
        remove_pis=True,
    )
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as e:
        raise DefinitionStoreError(
            f"Line {e.lineno} in XML document from {description} is invalid: {e}"
        ) from e
    return _to_element(root)


def _to_element(node) -> Element:
    qname = etree.QName(node)
    children = []
    if node.text:
        children.append(node.text)
    for child in node:
        if isinstance(child.tag, str):
            children.append(_to_element(child))
        if child.tail:
            children.append(child.tail)
    return Element(
        qname.localname,
        qname.namespace,
        dict(node.attrib),
        tuple(children),
        node.sourceline,
    )


class XmlDefinitionReader:
    """
    Reads XML documents into a registry, following their imports.

    One reader tracks the resources it is currently loading in order to
    detect import cycles, so it must not be shared between threads.

    Args:
        registry: Receives every definition and alias read.
        environment: Decides profiles and resolves placeholders.
        resource_loader: Resolves location strings into resources.
        problem_reporter: Receives recoverable problems from every document.
        event_listener: Receives registration events from every document.
        namespace_handlers: Handlers for custom namespaces, keyed by URI.
        document_reader: Walks each parsed document.
    """

    def __init__(
        self,
        registry: DefinitionRegistry,
        environment: Optional[Environment] = None,
        resource_loader: Optional[ResourceLoader] = None,
        problem_reporter: Optional[ProblemReporter] = None,
        event_listener: Optional[ReaderEventListener] = None,
        namespace_handlers: Optional[dict[str, NamespaceHandler]] = None,
        document_reader: Optional[DocumentDefinitionReader] = None,
    ):
        self.registry = registry
        self.environment = environment or Environment()
        self.resource_loader = resource_loader or ResourceLoader()
        self.problem_reporter = problem_reporter or CollectingProblemReporter()
        self.event_listener = event_listener or ReaderEventListener()
        self.namespace_handlers = namespace_handlers or {}
        self.document_reader = document_reader or DocumentDefinitionReader()
        self._currently_loading: set[Resource] = set()

    def load_definitions(
        self,
        location: Union[str, Resource],
        actual_resources: Optional[list[Resource]] = None,
    ) -> int:
        """Load the definitions found at a location.

        Args:
            location: A location string (which may be a pattern) or a resource.
            actual_resources: If given, every resource loaded from a location
                string is appended to it, unless already present.

        Returns:
            The number of definitions added to the registry.

        Raises:
            DefinitionStoreError: If a resource is missing, unreadable,
                malformed or already being loaded further up the import chain.
        """
        if isinstance(location, Resource):
            return self._load_resource(location)

        count = 0
        for resource in self.resource_loader.get_resources(location):
            count += self._load_resource(resource)
            if actual_resources is not None and resource not in actual_resources:
                actual_resources.append(resource)
        logger.debug("Loaded %d definitions from location [%s]", count, location)
        return count

    def _load_resource(self, resource: Resource) -> int:
        if resource in self._currently_loading:
            raise DefinitionStoreError(
                f"Detected cyclic loading of {resource.description} - check your import definitions"
            )
        if not resource.exists():
            raise DefinitionStoreError(f"{resource.description} does not exist")

        logger.debug("Loading XML definitions from %s", resource.description)
        self._currently_loading.add(resource)
        try:
            try:
                data = resource.read_bytes()
            except OSError as e:
                raise DefinitionStoreError(
                    f"Could not read XML document from {resource.description}"
                ) from e
            root = parse_document(data, resource.description)
            return self.register_document(root, resource)
        finally:
            self._currently_loading.discard(resource)

    def register_document(self, root: Element, resource: Resource) -> int:
        """Register the definitions of an already parsed document."""
        count_before = len(self.registry)
        self.document_reader.register_definitions(root, self.create_context(resource))
        return len(self.registry) - count_before

    def create_context(self, resource: Resource) -> ReaderContext:
        return ReaderContext(
            resource,
            self.registry,
            self.environment,
            self,
            self.problem_reporter,
            self.event_listener,
            self.namespace_handlers,
        )
