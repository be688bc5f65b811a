from typing import Mapping, Optional

from versadoc.environment import Environment
from versadoc.problems import (
    CollectingProblemReporter,
    FailFastProblemReporter,
    ProblemReporter,
)
from versadoc.registry import DefinitionRegistry
from versadoc.xml_reader import XmlDefinitionReader


def load_registry(
    *locations: str,
    profiles: Optional[set[str]] = None,
    properties: Optional[Mapping[str, str]] = None,
    fail_fast: bool = False,
) -> tuple[DefinitionRegistry, ProblemReporter]:
    """
    Read definition documents into a fresh registry.

    Args:
        locations: Locations of the documents to read, in order.
        profiles: Active profile names. If None, they come from the
            ``versadoc.profiles.active`` property.
        properties: Values for ``${...}`` placeholders; defaults to the
            process environment.
        fail_fast: Raise on the first problem instead of collecting problems.

    Returns:
        The populated registry and the reporter holding any problems found.

    Raises:
        DefinitionStoreError: If a top-level location cannot be loaded, or on
            the first problem when ``fail_fast`` is set.
        PlaceholderResolutionError: If an import names an unknown property.
    """
    registry = DefinitionRegistry()
    reporter = FailFastProblemReporter() if fail_fast else CollectingProblemReporter()
    reader = XmlDefinitionReader(
        registry,
        environment=Environment(profiles, properties=properties),
        problem_reporter=reporter,
    )
    for location in locations:
        reader.load_definitions(location)
    return registry, reporter
