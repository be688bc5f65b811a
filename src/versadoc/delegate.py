"""
Per-scope helper that turns individual elements into definitions.

Each nesting level of a document gets its own :class:`DefinitionParserDelegate`,
holding the ``default-*`` attributes declared at that level. Defaults that a
level leaves unset are looked up in the enclosing level's defaults.
"""

import logging
from fnmatch import fnmatchcase
from typing import Optional

from versadoc import elements
from versadoc.context import ReaderContext
from versadoc.domain import Definition, DefinitionHolder, Element, PropertyValue
from versadoc.elements import is_default_namespace, tokenize

__all__ = ["DocumentDefaults", "DefinitionParserDelegate", "NamespaceHandler"]

logger = logging.getLogger(__name__)

DEFAULT_ATTRIBUTES = {
    "lazy_init": "default-lazy-init",
    "autowire": "default-autowire",
    "autowire_candidates": "default-autowire-candidates",
    "init_method": "default-init-method",
    "destroy_method": "default-destroy-method",
    "merge": "default-merge",
}

AUTOWIRE_MODES = ("no", "byName", "byType", "constructor")
BOOLEAN_VALUES = ("true", "false")


class DocumentDefaults:
    """Default attribute values for one scope, with fallback to the enclosing scope."""

    def __init__(
        self,
        values: dict[str, Optional[str]],
        parent: Optional["DocumentDefaults"] = None,
    ):
        self.values = values
        self._parent = parent

    @classmethod
    def from_element(
        cls, root: Element, parent: Optional["DocumentDefaults"] = None
    ) -> "DocumentDefaults":
        values = {}
        for key, attribute in DEFAULT_ATTRIBUTES.items():
            value = root.get(attribute)
            values[key] = None if value in ("", elements.DEFAULT_VALUE) else value
        return cls(values, parent)

    def resolve(self, key: str) -> Optional[str]:
        value = self.values.get(key)
        if value is not None:
            return value
        if self._parent:
            return self._parent.resolve(key)
        return None

    def resolved(self) -> dict[str, Optional[str]]:
        return {key: self.resolve(key) for key in DEFAULT_ATTRIBUTES}


class NamespaceHandler:
    """Handles elements and attributes of one custom namespace.

    Subclasses override :meth:`parse` for top-level custom elements and
    :meth:`decorate` for custom attributes or child elements found on a
    ``bean`` element.
    """

    def parse(
        self, element: Element, delegate: "DefinitionParserDelegate"
    ) -> Optional[Definition]:
        delegate.context.error(
            f"{type(self).__name__} does not support element <{element.tag}>", element
        )
        return None

    def decorate(
        self,
        element: Element,
        holder: DefinitionHolder,
        delegate: "DefinitionParserDelegate",
        attribute: Optional[str] = None,
    ) -> DefinitionHolder:
        return holder


class DefinitionParserDelegate:
    """
    Parses ``bean`` elements and routes custom-namespace content to its handler.

    Args:
        context: The context of the document being read.
        root: The ``beans`` element opening this scope.
        parent: The delegate of the enclosing scope, if any.
    """

    def __init__(
        self,
        context: ReaderContext,
        root: Element,
        parent: Optional["DefinitionParserDelegate"] = None,
    ):
        self.context = context
        self.parent = parent
        self.defaults = DocumentDefaults.from_element(
            root, parent.defaults if parent else None
        )
        self._used_names: set[str] = set()

    def is_default_namespace(self, element: Element) -> bool:
        return is_default_namespace(element)

    def parse_definition_element(self, element: Element) -> Optional[DefinitionHolder]:
        """Parse a ``bean`` element.

        Returns:
            The parsed definition with its name and aliases, or None if a
            problem was reported for the element.
        """
        aliases = tokenize(element.get(elements.NAME_ATTRIBUTE))
        name = element.get(elements.ID_ATTRIBUTE)
        if not name and aliases:
            name = aliases.pop(0)
            logger.debug("No id specified - using '%s' as name and %s as aliases", name, aliases)

        class_name = element.get(elements.CLASS_ATTRIBUTE) or None
        if not name and not class_name:
            self.context.error(
                "Definition requires either an 'id', a 'name' or a 'class'", element
            )
            return None

        if not self._check_name_uniqueness(name, aliases, element):
            return None

        definition = self._parse_definition(element, class_name, name)
        if definition is None:
            return None

        if not name:
            name = self._generate_name(class_name)
        return DefinitionHolder(name, definition, tuple(aliases))

    def _check_name_uniqueness(self, name: str, aliases: list[str], element: Element) -> bool:
        found = next(
            (n for n in [name, *aliases] if n and n in self._used_names), None
        )
        if found is not None:
            self.context.error(
                f"Name '{found}' is already used in this <beans> element", element
            )
            return False
        self._used_names.update(n for n in [name, *aliases] if n)
        return True

    def _generate_name(self, class_name: str) -> str:
        index = 0
        while f"{class_name}#{index}" in self.context.registry:
            index += 1
        return f"{class_name}#{index}"

    def _parse_definition(
        self, element: Element, class_name: Optional[str], name: str
    ) -> Optional[Definition]:
        lazy_init = self._attribute_or_default(element, elements.LAZY_INIT_ATTRIBUTE, "lazy_init", "false")
        if lazy_init not in BOOLEAN_VALUES:
            self.context.error(f"Invalid lazy-init value '{lazy_init}'", element)
            return None

        autowire = self._attribute_or_default(element, elements.AUTOWIRE_ATTRIBUTE, "autowire", "no")
        if autowire not in AUTOWIRE_MODES:
            self.context.error(f"Invalid autowire mode '{autowire}'", element)
            return None

        definition = Definition(
            class_name=class_name,
            scope=element.get(elements.SCOPE_ATTRIBUTE) or "singleton",
            lazy_init=lazy_init == "true",
            autowire=autowire,
            autowire_candidate=self._autowire_candidate(element, name),
            init_method=self._method_name(element, elements.INIT_METHOD_ATTRIBUTE, "init_method"),
            destroy_method=self._method_name(element, elements.DESTROY_METHOD_ATTRIBUTE, "destroy_method"),
            depends_on=tokenize(element.get(elements.DEPENDS_ON_ATTRIBUTE)),
            resource_description=self.context.resource.description,
        )

        for child in element.element_children():
            if not self.is_default_namespace(child):
                continue
            if child.tag == elements.DESCRIPTION_ELEMENT:
                definition.description = child.text().strip()
            elif child.tag == elements.PROPERTY_ELEMENT:
                self._parse_property(child, definition)
            elif child.tag == elements.CONSTRUCTOR_ARG_ELEMENT:
                value = self._parse_value(child)
                if value is not None:
                    definition.constructor_args.append(value)
        return definition

    def _attribute_or_default(self, element, attribute, default_key, fallback) -> str:
        value = element.get(attribute)
        if not value or value == elements.DEFAULT_VALUE:
            value = self.defaults.resolve(default_key) or fallback
        return value

    def _method_name(self, element, attribute, default_key) -> Optional[str]:
        if element.has(attribute):
            return element.get(attribute) or None
        return self.defaults.resolve(default_key)

    def _autowire_candidate(self, element: Element, name: str) -> bool:
        value = element.get(elements.AUTOWIRE_CANDIDATE_ATTRIBUTE)
        if value and value != elements.DEFAULT_VALUE:
            return value == "true"
        patterns = self.defaults.resolve("autowire_candidates")
        if patterns and name:
            return any(fnmatchcase(name, pattern) for pattern in tokenize(patterns, ","))
        return True

    def _parse_property(self, element: Element, definition: Definition):
        name = element.get(elements.NAME_ATTRIBUTE)
        if not name:
            self.context.error("Tag 'property' must have a 'name' attribute", element)
            return
        if any(p.name == name for p in definition.properties):
            self.context.error(f"Multiple 'property' definitions for property '{name}'", element)
            return
        value = self._parse_value(element)
        if value is not None:
            definition.properties.append(value)

    def _parse_value(self, element: Element) -> Optional[PropertyValue]:
        has_value = element.has(elements.VALUE_ATTRIBUTE)
        has_ref = element.has(elements.REF_ATTRIBUTE)
        if has_value == has_ref:
            self.context.error(
                f"<{element.tag}> must specify exactly one of 'value' or 'ref'", element
            )
            return None
        if has_ref:
            ref = element.get(elements.REF_ATTRIBUTE)
            if not ref:
                self.context.error(f"<{element.tag}> contains empty 'ref' attribute", element)
                return None
            return PropertyValue(element.get(elements.NAME_ATTRIBUTE) or None, ref=ref)
        return PropertyValue(
            element.get(elements.NAME_ATTRIBUTE) or None,
            value=element.get(elements.VALUE_ATTRIBUTE),
        )

    def decorate_if_required(
        self, element: Element, holder: DefinitionHolder
    ) -> DefinitionHolder:
        """Let custom-namespace attributes and child elements enrich a parsed definition."""
        decorated = holder
        for attribute in element.attributes:
            if attribute.startswith("{"):
                namespace = attribute[1:].partition("}")[0]
                decorated = self._decorate(namespace, element, decorated, attribute)
        for child in element.element_children():
            if not self.is_default_namespace(child):
                decorated = self._decorate(child.namespace, child, decorated, None)
        return decorated

    def _decorate(self, namespace, node, holder, attribute) -> DefinitionHolder:
        if is_default_namespace(namespace):
            return holder
        handler = self.context.namespace_handlers.get(namespace)
        if handler is None:
            logger.debug("No namespace handler found for decorating with [%s]", namespace)
            return holder
        return handler.decorate(node, holder, self, attribute)

    def parse_custom_element(self, element: Element) -> Optional[Definition]:
        handler = self.context.namespace_handlers.get(element.namespace)
        if handler is None:
            self.context.error(
                f"Unable to locate namespace handler for namespace [{element.namespace}]",
                element,
            )
            return None
        return handler.parse(element, self)
