"""Profile selection and ``${...}`` placeholder resolution."""

import logging
import os
from collections.abc import Mapping
from typing import Iterable, Optional

from versadoc.errors import PlaceholderResolutionError

__all__ = ["Environment", "ACTIVE_PROFILES_PROPERTY"]

logger = logging.getLogger(__name__)

ACTIVE_PROFILES_PROPERTY = "versadoc.profiles.active"

PLACEHOLDER_PREFIX = "${"
PLACEHOLDER_SUFFIX = "}"
VALUE_SEPARATOR = ":"


class Environment:
    """
    Decides which profiles are accepted and resolves placeholders against a
    mapping of properties (``os.environ`` unless one is supplied).

    Args:
        active_profiles: Profiles explicitly switched on. When None, they are
            read from the comma separated ``versadoc.profiles.active`` property.
        default_profiles: Profiles treated as active while no profile is.
        properties: Values available to ``${...}`` placeholders.
    """

    def __init__(
        self,
        active_profiles: Optional[Iterable[str]] = None,
        default_profiles: Iterable[str] = ("default",),
        properties: Optional[Mapping[str, str]] = None,
    ):
        self.properties = os.environ if properties is None else properties
        if active_profiles is None:
            configured = self.properties.get(ACTIVE_PROFILES_PROPERTY, "")
            active_profiles = [p for p in configured.split(",") if p.strip()]
        self.active_profiles = frozenset(p.strip() for p in active_profiles)
        self.default_profiles = frozenset(default_profiles)

    def accepts_profiles(self, profiles: Iterable[str]) -> bool:
        """Check whether any of the given profiles is accepted.

        A profile is accepted when it is active (or, while nothing is active,
        when it is a default profile). A ``!``-prefixed profile is accepted
        when the named profile is not accepted.

        Raises:
            ValueError: If a profile name is blank.

        Example:
            >>> env = Environment(["dev"], properties={})
            >>> env.accepts_profiles(["prod", "dev"])  # True
            >>> env.accepts_profiles(["!dev"])         # False
        """
        for profile in profiles:
            if not profile or not profile.strip():
                raise ValueError("Invalid profile: must contain text")
            if profile.startswith("!"):
                if not self._is_profile_active(profile[1:]):
                    return True
            elif self._is_profile_active(profile):
                return True
        return False

    def _is_profile_active(self, profile: str) -> bool:
        if not profile.strip():
            raise ValueError("Invalid profile: must contain text")
        if self.active_profiles:
            return profile in self.active_profiles
        return profile in self.default_profiles

    def resolve_required_placeholders(self, text: str) -> str:
        """Replace every ``${key}`` or ``${key:default}`` in text.

        Raises:
            PlaceholderResolutionError: If a key has neither a value nor a default.
        """
        return self._resolve(text, strict=True, visiting=set())

    def resolve_placeholders(self, text: str) -> str:
        """Like :meth:`resolve_required_placeholders`, but leaves unknown keys in place."""
        return self._resolve(text, strict=False, visiting=set())

    def _resolve(self, text: str, strict: bool, visiting: set[str]) -> str:
        result = []
        position = 0
        while True:
            start = text.find(PLACEHOLDER_PREFIX, position)
            if start == -1:
                result.append(text[position:])
                return "".join(result)
            end = _find_placeholder_end(text, start)
            if end == -1:
                result.append(text[position:])
                return "".join(result)

            result.append(text[position:start])
            placeholder = text[start + len(PLACEHOLDER_PREFIX) : end]
            value = self._resolve_placeholder(placeholder, text, strict, visiting)
            if value is None:
                value = text[start : end + len(PLACEHOLDER_SUFFIX)]
            result.append(value)
            position = end + len(PLACEHOLDER_SUFFIX)

    def _resolve_placeholder(
        self, placeholder: str, text: str, strict: bool, visiting: set[str]
    ) -> Optional[str]:
        # keys may themselves contain placeholders, e.g. ${config.${env}}
        placeholder = self._resolve(placeholder, strict, visiting)
        if placeholder in visiting:
            raise PlaceholderResolutionError(
                f"Circular placeholder reference '{placeholder}' in value \"{text}\""
            )

        key, separator, default = placeholder.partition(VALUE_SEPARATOR)
        value = self.properties.get(key)
        if value is None and separator:
            value = default
        if value is None:
            if strict:
                raise PlaceholderResolutionError(
                    f"Could not resolve placeholder '{key}' in value \"{text}\""
                )
            logger.debug("Leaving unresolved placeholder '%s' in place", key)
            return None

        visiting.add(placeholder)
        try:
            return self._resolve(value, strict, visiting)
        finally:
            visiting.discard(placeholder)


def _find_placeholder_end(text: str, start: int) -> int:
    index = start + len(PLACEHOLDER_PREFIX)
    depth = 0
    while index < len(text):
        if text.startswith(PLACEHOLDER_SUFFIX, index):
            if depth == 0:
                return index
            depth -= 1
            index += len(PLACEHOLDER_SUFFIX)
        elif text.startswith(PLACEHOLDER_PREFIX, index):
            depth += 1
            index += len(PLACEHOLDER_PREFIX)
        else:
            index += 1
    return -1
