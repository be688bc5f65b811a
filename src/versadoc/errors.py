__all__ = [
    "VersadocError",
    "DefinitionStoreError",
    "DefinitionOverrideError",
    "AliasRegistrationError",
    "DefinitionParsingError",
    "PlaceholderResolutionError",
    "ReaderStateError",
]


class VersadocError(Exception):
    """Base class for errors raised while loading definition documents."""

    pass


class DefinitionStoreError(VersadocError):
    """Raised when definitions cannot be loaded from, or stored for, a resource."""

    pass


class DefinitionOverrideError(DefinitionStoreError):
    """Raised when a definition name is already taken and overriding is disabled."""

    pass


class AliasRegistrationError(DefinitionStoreError):
    """Raised when an alias conflicts with an existing alias or would form a cycle."""

    pass


class DefinitionParsingError(DefinitionStoreError):
    """Raised by fail-fast problem reporting; carries the reported problem."""

    def __init__(self, problem):
        super().__init__(str(problem))
        self.problem = problem


class PlaceholderResolutionError(VersadocError, ValueError):
    """Raised when a required ``${...}`` placeholder has no value."""

    pass


class ReaderStateError(VersadocError, RuntimeError):
    """Raised when a reader collaborator is requested before it has been supplied."""

    pass
