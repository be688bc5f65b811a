"""Names of the elements and attributes understood in the default namespace."""

from enum import Enum

from versadoc.domain import Element

__all__ = [
    "DEFAULT_NAMESPACE",
    "MULTI_VALUE_ATTRIBUTE_DELIMITERS",
    "ElementKind",
    "is_default_namespace",
    "tokenize",
]

DEFAULT_NAMESPACE = "http://versadoc.dev/schema/beans"

MULTI_VALUE_ATTRIBUTE_DELIMITERS = ",; "

# document level
PROFILE_ATTRIBUTE = "profile"
RESOURCE_ATTRIBUTE = "resource"
NAME_ATTRIBUTE = "name"
ALIAS_ATTRIBUTE = "alias"

# definition level
ID_ATTRIBUTE = "id"
CLASS_ATTRIBUTE = "class"
SCOPE_ATTRIBUTE = "scope"
LAZY_INIT_ATTRIBUTE = "lazy-init"
AUTOWIRE_ATTRIBUTE = "autowire"
AUTOWIRE_CANDIDATE_ATTRIBUTE = "autowire-candidate"
INIT_METHOD_ATTRIBUTE = "init-method"
DESTROY_METHOD_ATTRIBUTE = "destroy-method"
DEPENDS_ON_ATTRIBUTE = "depends-on"
VALUE_ATTRIBUTE = "value"
REF_ATTRIBUTE = "ref"

PROPERTY_ELEMENT = "property"
CONSTRUCTOR_ARG_ELEMENT = "constructor-arg"
DESCRIPTION_ELEMENT = "description"

DEFAULT_VALUE = "default"


class ElementKind(Enum):
    """The default-namespace elements a document reader acts upon."""

    IMPORT = "import"
    ALIAS = "alias"
    BEAN = "bean"
    BEANS = "beans"
    OTHER = None

    @classmethod
    def of(cls, element: Element) -> "ElementKind":
        """Classify an element by its local name; unknown names map to OTHER."""
        try:
            return cls(element.tag)
        except ValueError:
            return cls.OTHER


def is_default_namespace(element_or_uri) -> bool:
    uri = element_or_uri.namespace if isinstance(element_or_uri, Element) else element_or_uri
    return not uri or uri == DEFAULT_NAMESPACE


def tokenize(text: str, delimiters: str = MULTI_VALUE_ATTRIBUTE_DELIMITERS) -> list[str]:
    """Split text on any of the delimiter characters, dropping empty tokens.

    Example:
        >>> tokenize("dev, test;;qa")
        ['dev', 'test', 'qa']
    """
    tokens = []
    current = []
    for char in text:
        if char in delimiters:
            tokens.append("".join(current))
            current = []
        else:
            current.append(char)
    tokens.append("".join(current))
    return [token.strip() for token in tokens if token.strip()]
