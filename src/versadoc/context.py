"""The parsing context threaded through the traversal of one document."""

from typing import TYPE_CHECKING, Optional

from versadoc.domain import (
    AliasDefinition,
    ComponentDefinition,
    DefaultsDefinition,
    Element,
    ImportDefinition,
    Problem,
    SourceLocation,
)
from versadoc.environment import Environment
from versadoc.errors import ReaderStateError
from versadoc.events import ReaderEventListener
from versadoc.problems import CollectingProblemReporter, ProblemReporter
from versadoc.registry import DefinitionRegistry
from versadoc.resources import Resource

if TYPE_CHECKING:
    from versadoc.delegate import NamespaceHandler
    from versadoc.xml_reader import XmlDefinitionReader

__all__ = ["ReaderContext"]


class ReaderContext:
    """
    Everything a document reader needs besides the document itself: the
    resource being read, the environment deciding profiles and placeholders,
    the registry receiving definitions, the reader used to load imports,
    and the sinks for problems and events.

    Args:
        resource: The resource the document was read from.
        registry: Receives definitions and aliases.
        environment: Decides profiles and resolves placeholders.
        reader: Loads imported locations. Optional, but imports fail with
            :class:`ReaderStateError` without one.
        problem_reporter: Receives recoverable problems.
        event_listener: Receives registration events.
        namespace_handlers: Handlers for custom namespaces, keyed by URI.
    """

    def __init__(
        self,
        resource: Resource,
        registry: DefinitionRegistry,
        environment: Optional[Environment] = None,
        reader: Optional["XmlDefinitionReader"] = None,
        problem_reporter: Optional[ProblemReporter] = None,
        event_listener: Optional[ReaderEventListener] = None,
        namespace_handlers: Optional[dict[str, "NamespaceHandler"]] = None,
    ):
        self.resource = resource
        self.registry = registry
        self.environment = environment or Environment()
        self._reader = reader
        self.problem_reporter = problem_reporter or CollectingProblemReporter()
        self.event_listener = event_listener or ReaderEventListener()
        self.namespace_handlers = namespace_handlers or {}

    @property
    def reader(self) -> "XmlDefinitionReader":
        if self._reader is None:
            raise ReaderStateError(
                f"No definition reader available for {self.resource.description}"
            )
        return self._reader

    def extract_source(self, element: Element) -> SourceLocation:
        return SourceLocation(self.resource.description, element.line)

    def _problem(self, message, element, cause) -> Problem:
        return Problem(message, element, cause, self.resource.description)

    def error(
        self,
        message: str,
        element: Optional[Element] = None,
        cause: Optional[BaseException] = None,
    ):
        self.problem_reporter.error(self._problem(message, element, cause))

    def warning(
        self,
        message: str,
        element: Optional[Element] = None,
        cause: Optional[BaseException] = None,
    ):
        self.problem_reporter.warning(self._problem(message, element, cause))

    def fire_defaults_registered(self, defaults: DefaultsDefinition):
        self.event_listener.defaults_registered(defaults)

    def fire_import_processed(self, location: str, actual_resources, source):
        self.event_listener.import_processed(
            ImportDefinition(location, tuple(actual_resources), source)
        )

    def fire_alias_registered(self, name: str, alias: str, source):
        self.event_listener.alias_registered(AliasDefinition(name, alias, source))

    def fire_component_registered(self, component: ComponentDefinition):
        self.event_listener.component_registered(component)
