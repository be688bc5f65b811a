"""Domain models used throughout the framework."""

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union

__all__ = [
    "Element",
    "Node",
    "Definition",
    "DefinitionHolder",
    "PropertyValue",
    "ImportDefinition",
    "AliasDefinition",
    "ComponentDefinition",
    "DefaultsDefinition",
    "SourceLocation",
    "Problem",
]


@dataclass(frozen=True)
class Element:
    """A read-only node of a parsed definition document.

    Attributes:
        tag: The local name of the element, e.g. ``"bean"``.
        namespace: The namespace URI of the element, or None when it has none.
        attributes: Attribute values keyed by (local) attribute name. Attributes
            from a foreign namespace are keyed ``"{uri}name"``.
        children: Child nodes in document order; text appears as plain strings.
        line: The source line of the element, where known.
    """

    tag: str
    namespace: Optional[str] = None
    attributes: dict[str, str] = field(default_factory=dict)
    children: tuple["Node", ...] = ()
    line: Optional[int] = None

    def get(self, name: str) -> str:
        """Return the attribute value, or an empty string when it is absent."""
        return self.attributes.get(name, "")

    def has(self, name: str) -> bool:
        return name in self.attributes

    def element_children(self) -> Iterator["Element"]:
        return (child for child in self.children if isinstance(child, Element))

    def text(self) -> str:
        return "".join(child for child in self.children if isinstance(child, str))


Node = Union[Element, str]


@dataclass(frozen=True)
class PropertyValue:
    """A property or constructor argument; exactly one of value/ref is set."""

    name: Optional[str]
    value: Optional[str] = None
    ref: Optional[str] = None


@dataclass
class Definition:
    """
    The construction recipe for one named component.

    Definitions are plain data: nothing here is ever instantiated.
    Namespace decorators may add entries to ``attributes`` or replace the
    definition wholesale.
    """

    class_name: Optional[str] = None
    scope: str = "singleton"
    lazy_init: bool = False
    autowire: str = "no"
    autowire_candidate: bool = True
    init_method: Optional[str] = None
    destroy_method: Optional[str] = None
    depends_on: list[str] = field(default_factory=list)
    properties: list[PropertyValue] = field(default_factory=list)
    constructor_args: list[PropertyValue] = field(default_factory=list)
    description: Optional[str] = None
    attributes: dict[str, Any] = field(default_factory=dict)
    resource_description: Optional[str] = None


@dataclass(frozen=True)
class DefinitionHolder:
    """A definition together with the name and aliases it is registered under."""

    name: str
    definition: Definition
    aliases: tuple[str, ...] = ()


@dataclass(frozen=True)
class SourceLocation:
    """Where in which resource an element was declared."""

    resource_description: Optional[str]
    line: Optional[int]

    def __str__(self) -> str:
        if self.line is None:
            return str(self.resource_description)
        return f"{self.resource_description}, line {self.line}"


@dataclass(frozen=True)
class ImportDefinition:
    location: str
    actual_resources: tuple[Any, ...]
    source: Optional[SourceLocation]


@dataclass(frozen=True)
class AliasDefinition:
    name: str
    alias: str
    source: Optional[SourceLocation]


@dataclass(frozen=True)
class ComponentDefinition:
    holder: DefinitionHolder
    source: Optional[SourceLocation] = None

    @property
    def name(self) -> str:
        return self.holder.name


@dataclass(frozen=True)
class DefaultsDefinition:
    values: dict[str, Optional[str]]
    source: Optional[SourceLocation]


@dataclass(frozen=True)
class Problem:
    """A recoverable configuration problem reported against one element.

    Attributes:
        message: Human readable description of what went wrong.
        element: The offending element, if any.
        cause: The underlying exception, if any.
        resource_description: Description of the resource being read.
    """

    message: str
    element: Optional[Element] = None
    cause: Optional[BaseException] = None
    resource_description: Optional[str] = None

    def __str__(self) -> str:
        text = f"Configuration problem: {self.message}"
        if self.resource_description:
            text += f"\nOffending resource: {self.resource_description}"
        if self.element is not None and self.element.line is not None:
            text += f" (line {self.element.line})"
        return text
