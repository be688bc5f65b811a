"""In-memory storage of named definitions and their aliases."""

import logging
from typing import Optional

from versadoc.domain import Definition, DefinitionHolder
from versadoc.errors import (
    AliasRegistrationError,
    DefinitionOverrideError,
    DefinitionStoreError,
)

__all__ = ["DefinitionRegistry", "register_holder"]

logger = logging.getLogger(__name__)


class DefinitionRegistry:
    """Registry for definitions, supporting aliases and an overriding policy.

    Args:
        allow_overriding: Whether a later registration may replace an earlier
            one under the same name (and whether an alias may be repointed).
    """

    def __init__(self, allow_overriding: bool = True):
        self.allow_overriding = allow_overriding
        self._definitions: dict[str, Definition] = {}
        self._aliases: dict[str, str] = {}

    def register_definition(self, name: str, definition: Definition):
        """Register a definition under a name.

        Raises:
            DefinitionStoreError: If the name is empty.
            DefinitionOverrideError: If the name is taken and overriding is disabled.
        """
        if not name:
            raise DefinitionStoreError("Definition name must not be empty")

        existing = self._definitions.get(name)
        if existing is not None:
            if not self.allow_overriding:
                raise DefinitionOverrideError(
                    f"Cannot register definition '{name}': "
                    f"there is already a definition bound to that name"
                )
            if existing is not definition:
                logger.info("Overriding definition for name '%s'", name)
        self._definitions[name] = definition

    def register_alias(self, name: str, alias: str):
        """Register an alternate name for a definition name.

        Raises:
            AliasRegistrationError: If the alias already points at another
                name while overriding is disabled, or if it would form a cycle.
        """
        if not name or not alias:
            raise AliasRegistrationError("Name and alias must not be empty")

        if alias == name:
            self._aliases.pop(alias, None)
            return

        registered_name = self._aliases.get(alias)
        if registered_name == name:
            return
        if registered_name is not None:
            if not self.allow_overriding:
                raise AliasRegistrationError(
                    f"Cannot define alias '{alias}' for name '{name}': "
                    f"it is already registered for name '{registered_name}'"
                )
            logger.info(
                "Overriding alias '%s' definition for registered name '%s' with new target name '%s'",
                alias,
                registered_name,
                name,
            )
        if self._resolves_to(name, alias):
            raise AliasRegistrationError(
                f"Cannot register alias '{alias}' for name '{name}': "
                f"circular reference - '{name}' is a direct or indirect alias "
                f"for '{alias}' already"
            )
        self._aliases[alias] = name

    def _resolves_to(self, name: str, target: str) -> bool:
        seen = set()
        while name in self._aliases and name not in seen:
            seen.add(name)
            name = self._aliases[name]
            if name == target:
                return True
        return False

    def canonical_name(self, name: str) -> str:
        while name in self._aliases:
            name = self._aliases[name]
        return name

    def get_definition(self, name: str) -> Optional[Definition]:
        """Look up a definition by its name or by any of its aliases."""
        return self._definitions.get(self.canonical_name(name))

    def aliases(self, name: str) -> list[str]:
        """Return every alias resolving, directly or indirectly, to name."""
        return [alias for alias in self._aliases if self.canonical_name(alias) == name]

    def is_alias(self, name: str) -> bool:
        return name in self._aliases

    @property
    def definition_names(self) -> list[str]:
        return list(self._definitions)

    def __contains__(self, name: str) -> bool:
        return self.canonical_name(name) in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


def register_holder(registry: DefinitionRegistry, holder: DefinitionHolder):
    """Register a holder's definition under its name, then each of its aliases."""
    registry.register_definition(holder.name, holder.definition)
    for alias in holder.aliases:
        registry.register_alias(holder.name, alias)
