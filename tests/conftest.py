from textwrap import dedent
from typing import Optional

import pytest

from versadoc.context import ReaderContext
from versadoc.document_reader import DocumentDefinitionReader
from versadoc.environment import Environment
from versadoc.errors import DefinitionStoreError
from versadoc.events import RecordingEventListener
from versadoc.problems import CollectingProblemReporter
from versadoc.registry import DefinitionRegistry
from versadoc.resources import ByteArrayResource, Resource, apply_relative_path
from versadoc.xml_reader import parse_document


class StubResource(Resource):
    """A resource living at a made-up path; it exists if its path is listed."""

    def __init__(self, path: str, existing: frozenset = frozenset()):
        self.path = path
        self.existing = existing
        self.description = f"stub [{path}]"

    def exists(self) -> bool:
        return self.path in self.existing

    def read_bytes(self) -> bytes:
        return b"<beans/>"

    @property
    def url(self) -> str:
        return f"stub:{self.path}"

    def create_relative(self, relative_path: str) -> "StubResource":
        return StubResource(apply_relative_path(self.path, relative_path), self.existing)

    def __eq__(self, other) -> bool:
        return isinstance(other, StubResource) and other.path == self.path

    def __hash__(self) -> int:
        return hash(self.path)


class FakeReader:
    """Records what it is asked to load instead of reading anything."""

    def __init__(self, resources_by_location: Optional[dict] = None, failing=()):
        self.resources_by_location = resources_by_location or {}
        self.failing = set(failing)
        self.loaded = []

    def load_definitions(self, location, actual_resources=None) -> int:
        self.loaded.append(location)
        if location in self.failing:
            raise DefinitionStoreError(f"cannot load {location}")
        if isinstance(location, Resource):
            return 1
        resources = self.resources_by_location.get(location, [])
        for resource in resources:
            if actual_resources is not None and resource not in actual_resources:
                actual_resources.append(resource)
        return len(resources)


@pytest.fixture
def registry() -> DefinitionRegistry:
    return DefinitionRegistry()


@pytest.fixture
def listener() -> RecordingEventListener:
    return RecordingEventListener()


@pytest.fixture
def reporter() -> CollectingProblemReporter:
    return CollectingProblemReporter()


@pytest.fixture
def fake_reader() -> FakeReader:
    return FakeReader()


@pytest.fixture
def make_context(registry, listener, reporter, fake_reader):
    def make(
        resource: Optional[Resource] = None,
        profiles=(),
        properties: Optional[dict] = None,
        namespace_handlers: Optional[dict] = None,
    ) -> ReaderContext:
        return ReaderContext(
            resource or ByteArrayResource(b"", "test document"),
            registry,
            Environment(profiles, properties=properties or {}),
            fake_reader,
            reporter,
            listener,
            namespace_handlers,
        )

    return make


@pytest.fixture
def read(make_context):
    """Read an XML string with a fresh DocumentDefinitionReader."""

    def read_document(xml: str, **context_args) -> ReaderContext:
        context = make_context(**context_args)
        root = parse_document(dedent(xml).strip().encode())
        DocumentDefinitionReader().register_definitions(root, context)
        return context

    return read_document
