import logging

import pytest

from versadoc.context import ReaderContext
from versadoc.delegate import NamespaceHandler
from versadoc.document_reader import DocumentDefinitionReader
from versadoc.domain import Definition
from versadoc.environment import Environment
from versadoc.errors import PlaceholderResolutionError, ReaderStateError
from versadoc.resources import ByteArrayResource
from versadoc.xml_reader import parse_document

from conftest import StubResource

UTIL_NAMESPACE = "http://example.com/util"

PROD_DOCUMENT = """
<beans profile="prod">
    <alias name="svc" alias="service"/>
    <bean id="svc" class="app.Service"/>
</beans>
"""


def error_messages(reporter):
    return [problem.message for problem in reporter.errors]


def test_accepted_profile_registers_alias_and_definition(read, registry, listener):
    read(PROD_DOCUMENT, profiles=["prod"])

    assert "svc" in registry
    assert registry.canonical_name("service") == "svc"
    assert [(a.name, a.alias) for a in listener.aliases] == [("svc", "service")]
    assert [c.name for c in listener.components] == ["svc"]


def test_rejected_profile_skips_the_whole_document(read, registry, listener, reporter, caplog):
    caplog.set_level(logging.DEBUG, logger="versadoc.document_reader")

    read(PROD_DOCUMENT, profiles=["dev"])

    assert len(registry) == 0
    assert not registry.is_alias("service")
    assert listener.aliases == []
    assert listener.components == []
    assert listener.defaults == []
    assert reporter.errors == []
    skips = [r for r in caplog.records if "Skipped definitions" in r.getMessage()]
    assert len(skips) == 1


@pytest.mark.parametrize(
    "profile, active, accepted",
    [
        ("dev; prod", ["prod"], True),
        ("dev,qa", ["prod"], False),
        ("dev qa", ["qa"], True),
        ("!prod", ["prod"], False),
        ("!prod", ["dev"], True),
        ("default", [], True),
        ("   ", ["dev"], True),
    ],
)
def test_profile_attribute_lists_alternatives(read, registry, profile, active, accepted):
    read(
        f"""
        <beans profile="{profile}">
            <bean id="a" class="app.A"/>
        </beans>
        """,
        profiles=active,
    )

    assert ("a" in registry) == accepted


@pytest.mark.parametrize("profile", ["!", ", ;"])
def test_unusable_profile_is_reported_and_skips_document(read, registry, reporter, profile):
    read(
        f"""
        <beans profile="{profile}">
            <bean id="a" class="app.A"/>
        </beans>
        """
    )

    assert len(registry) == 0
    assert error_messages(reporter) == [f"Invalid profile specification [{profile}]"]


def test_nested_document_with_rejected_profile_is_skipped(read, registry):
    read(
        """
        <beans>
            <bean id="first" class="app.A"/>
            <beans profile="dev">
                <bean id="dev_only" class="app.B"/>
            </beans>
            <beans profile="prod">
                <bean id="prod_only" class="app.C"/>
            </beans>
            <bean id="last" class="app.D"/>
        </beans>
        """,
        profiles=["prod"],
    )

    assert registry.definition_names == ["first", "prod_only", "last"]


@pytest.mark.parametrize("nested_profile", ["dev", "prod"])
def test_siblings_after_nested_document_use_enclosing_defaults(read, registry, nested_profile):
    read(
        f"""
        <beans default-lazy-init="true">
            <beans profile="{nested_profile}" default-lazy-init="false">
                <bean id="nested" class="app.A"/>
            </beans>
            <bean id="later" class="app.B"/>
        </beans>
        """,
        profiles=["prod"],
    )

    assert registry.get_definition("later").lazy_init is True


def test_nested_document_inherits_and_overrides_defaults(read, registry):
    read(
        """
        <beans default-lazy-init="true" default-init-method="setup">
            <beans default-init-method="start">
                <beans>
                    <bean id="inner" class="app.Inner"/>
                </beans>
            </beans>
            <bean id="outer" class="app.Outer"/>
        </beans>
        """
    )

    inner = registry.get_definition("inner")
    outer = registry.get_definition("outer")
    assert inner.lazy_init is True
    assert inner.init_method == "start"
    assert outer.init_method == "setup"


def test_defaults_event_fired_per_scope(read, listener):
    read(
        """
        <beans default-autowire="byName">
            <beans default-autowire="byType"/>
        </beans>
        """
    )

    assert [d.values["autowire"] for d in listener.defaults] == ["byName", "byType"]


def test_explicit_default_namespace_is_recognised(read, registry):
    read(
        """
        <beans xmlns="http://versadoc.dev/schema/beans">
            <bean id="a" class="app.A"/>
        </beans>
        """
    )

    assert "a" in registry


def test_unrecognised_default_elements_are_ignored(read, registry, reporter):
    read(
        """
        <beans>
            <description>Application services</description>
            <bean id="a" class="app.A"/>
        </beans>
        """
    )

    assert "a" in registry
    assert reporter.errors == []


@pytest.mark.parametrize(
    "attributes, expected_errors",
    [
        ('alias="service"', ["Name must not be empty"]),
        ('name="svc"', ["Alias must not be empty"]),
        ('name="" alias=""', ["Name must not be empty", "Alias must not be empty"]),
        ("", ["Name must not be empty", "Alias must not be empty"]),
    ],
)
def test_alias_requires_name_and_alias(
    read, registry, reporter, listener, monkeypatch, attributes, expected_errors
):
    calls = []
    monkeypatch.setattr(registry, "register_alias", lambda name, alias: calls.append(name))

    read(f"<beans><alias {attributes}/></beans>")

    assert error_messages(reporter) == expected_errors
    assert calls == []
    assert listener.aliases == []


def test_alias_rejected_by_registry_is_reported(read, registry, reporter, listener):
    read(
        """
        <beans>
            <alias name="a" alias="b"/>
            <alias name="b" alias="a"/>
            <bean id="a" class="app.A"/>
        </beans>
        """
    )

    assert error_messages(reporter) == [
        "Failed to register alias 'a' for definition with name 'b'"
    ]
    assert [(a.name, a.alias) for a in listener.aliases] == [("a", "b")]
    assert "a" in registry


def test_alias_event_carries_source(read, listener):
    read(
        """
        <beans>
            <alias name="svc" alias="service"/>
        </beans>
        """
    )

    source = listener.aliases[0].source
    assert source.line == 2
    assert "test document" in source.resource_description


def test_definition_rejected_by_registry_is_reported(read, registry, reporter, listener):
    registry.allow_overriding = False

    read(
        """
        <beans>
            <bean id="a" class="app.A"/>
            <beans>
                <bean id="a" class="app.B"/>
            </beans>
            <bean id="b" class="app.C"/>
        </beans>
        """
    )

    assert error_messages(reporter) == ["Failed to register definition with name 'a'"]
    assert registry.get_definition("a").class_name == "app.A"
    assert [c.name for c in listener.components] == ["a", "b"]


def test_unparseable_definition_is_skipped(read, registry, reporter, listener):
    read(
        """
        <beans>
            <bean/>
            <bean id="b" class="app.B"/>
        </beans>
        """
    )

    assert error_messages(reporter) == [
        "Definition requires either an 'id', a 'name' or a 'class'"
    ]
    assert registry.definition_names == ["b"]
    assert [c.name for c in listener.components] == ["b"]


def test_definition_registered_with_its_aliases(read, registry, listener):
    read('<beans><bean id="db" name="database, store" class="app.Db"/></beans>')

    assert sorted(registry.aliases("db")) == ["database", "store"]
    assert listener.components[0].holder.aliases == ("database", "store")


def test_import_with_empty_resource_is_reported(read, reporter, listener, registry):
    read(
        """
        <beans>
            <import resource=" "/>
            <bean id="a" class="app.A"/>
        </beans>
        """
    )

    assert error_messages(reporter) == ["Resource location must not be empty"]
    assert listener.imports == []
    assert "a" in registry


def test_absolute_import_reports_every_loaded_resource(read, fake_reader, listener):
    loaded = [StubResource("conf/a.xml"), StubResource("conf/b.xml")]
    fake_reader.resources_by_location["file:///conf/*.xml"] = loaded

    read('<beans><import resource="file:///conf/*.xml"/></beans>')

    assert fake_reader.loaded == ["file:///conf/*.xml"]
    imported = listener.imports[0]
    assert imported.location == "file:///conf/*.xml"
    assert list(imported.actual_resources) == loaded


def test_absolute_import_failure_is_reported(read, fake_reader, reporter, listener, registry):
    fake_reader.failing.add("package:app.conf/missing.xml")

    read(
        """
        <beans>
            <import resource="package:app.conf/missing.xml"/>
            <bean id="a" class="app.A"/>
        </beans>
        """
    )

    assert error_messages(reporter) == [
        "Failed to import definitions from URL location [package:app.conf/missing.xml]"
    ]
    assert listener.imports[0].actual_resources == ()
    assert "a" in registry


def test_relative_import_loads_existing_sibling(read, fake_reader, listener):
    base = StubResource("conf/app.xml", frozenset({"conf/db.xml"}))

    read('<beans><import resource="db.xml"/></beans>', resource=base)

    assert fake_reader.loaded == [StubResource("conf/db.xml")]
    assert listener.imports[0].actual_resources == (StubResource("conf/db.xml"),)


def test_relative_import_falls_back_to_location_derived_from_base_url(
    read, fake_reader, listener
):
    fallback = [StubResource("elsewhere/db.xml")]
    fake_reader.resources_by_location["stub:conf/db.xml"] = fallback

    read(
        '<beans><import resource="db.xml"/></beans>',
        resource=StubResource("conf/app.xml"),
    )

    assert fake_reader.loaded == ["stub:conf/db.xml"]
    assert list(listener.imports[0].actual_resources) == fallback


def test_relative_import_fallback_may_resolve_nothing(read, fake_reader, listener, reporter):
    read(
        '<beans><import resource="db.xml"/></beans>',
        resource=StubResource("conf/app.xml"),
    )

    assert reporter.errors == []
    assert listener.imports[0].actual_resources == ()
    assert [p.message for p in reporter.warnings] == [
        "No resources found at relative location [db.xml]"
    ]


def test_relative_import_failure_is_reported(read, fake_reader, reporter, listener):
    base = StubResource("conf/app.xml", frozenset({"conf/db.xml"}))
    fake_reader.failing.add(StubResource("conf/db.xml"))

    read('<beans><import resource="db.xml"/></beans>', resource=base)

    assert error_messages(reporter) == [
        "Failed to import definitions from relative location [db.xml]"
    ]
    assert listener.imports[0].actual_resources == ()


def test_relative_import_without_current_location_is_reported(read, reporter, listener):
    read('<beans><import resource="db.xml"/></beans>', resource=ByteArrayResource(b""))

    assert error_messages(reporter) == ["Failed to resolve current resource location"]
    assert isinstance(reporter.errors[0].cause, OSError)
    assert listener.imports[0].location == "db.xml"
    assert listener.imports[0].actual_resources == ()


def test_malformed_location_is_treated_as_relative(read, fake_reader, reporter):
    read(
        '<beans><import resource="http://[::1/db.xml"/></beans>',
        resource=StubResource("conf/app.xml"),
    )

    assert reporter.errors == []
    assert fake_reader.loaded == ["stub:conf/http://[::1/db.xml"]


def test_import_location_placeholders_are_resolved(read, fake_reader, listener):
    read(
        '<beans><import resource="${CONF}/db.xml"/></beans>',
        properties={"CONF": "file:///etc/app"},
    )

    assert fake_reader.loaded == ["file:///etc/app/db.xml"]
    assert listener.imports[0].location == "file:///etc/app/db.xml"


def test_unresolvable_import_placeholder_aborts_reading(read, registry, listener):
    with pytest.raises(PlaceholderResolutionError, match="HOME"):
        read(
            """
            <beans>
                <bean id="before" class="app.A"/>
                <import resource="${HOME}/extra.xml"/>
                <bean id="after" class="app.B"/>
            </beans>
            """
        )

    assert registry.definition_names == ["before"]
    assert listener.imports == []


def test_import_without_reader_is_a_state_error(registry):
    context = ReaderContext(
        ByteArrayResource(b""), registry, Environment([], properties={})
    )
    root = parse_document(b'<beans><import resource="file:///a.xml"/></beans>')

    with pytest.raises(ReaderStateError, match="No definition reader"):
        DocumentDefinitionReader().register_definitions(root, context)


class RecordingHandler(NamespaceHandler):
    def __init__(self):
        self.parsed = []

    def parse(self, element, delegate):
        self.parsed.append(element.tag)
        definition = Definition(class_name=element.get("class"))
        delegate.context.registry.register_definition(element.get("id"), definition)
        return definition

    def decorate(self, element, holder, delegate, attribute=None):
        holder.definition.attributes["cache"] = element.get(attribute)
        return holder


def test_custom_elements_are_handed_to_namespace_handler(read, registry):
    handler = RecordingHandler()

    read(
        f"""
        <beans xmlns:util="{UTIL_NAMESPACE}">
            <util:constant id="pi" class="math.pi"/>
            <bean id="a" class="app.A" util:cache="true"/>
        </beans>
        """,
        namespace_handlers={UTIL_NAMESPACE: handler},
    )

    assert handler.parsed == ["constant"]
    assert "pi" in registry
    assert registry.get_definition("a").attributes == {"cache": "true"}


def test_custom_root_is_not_descended(read, registry):
    handler = RecordingHandler()

    read(
        f"""
        <util:list xmlns:util="{UTIL_NAMESPACE}" id="things" class="builtins.list">
            <bean id="nested" class="app.A"/>
        </util:list>
        """,
        namespace_handlers={UTIL_NAMESPACE: handler},
    )

    assert handler.parsed == ["list"]
    assert registry.definition_names == ["things"]


def test_unknown_namespace_is_reported(read, reporter, registry):
    read(
        f"""
        <beans xmlns:util="{UTIL_NAMESPACE}">
            <util:constant id="pi"/>
            <bean id="a" class="app.A"/>
        </beans>
        """
    )

    assert error_messages(reporter) == [
        f"Unable to locate namespace handler for namespace [{UTIL_NAMESPACE}]"
    ]
    assert "a" in registry


def test_pre_and_post_processing_hooks_wrap_each_scope(make_context):
    calls = []

    class HookedReader(DocumentDefinitionReader):
        def pre_process(self, root, context):
            calls.append(("pre", root.get("id")))

        def post_process(self, root, context):
            calls.append(("post", root.get("id")))

    root = parse_document(b'<beans id="outer"><beans id="inner"/></beans>')
    HookedReader().register_definitions(root, make_context())

    assert calls == [("pre", "outer"), ("pre", "inner"), ("post", "inner"), ("post", "outer")]


def test_custom_profile_delimiters(make_context, registry):
    root = parse_document(b'<beans profile="dev|prod"><bean id="a" class="app.A"/></beans>')

    DocumentDefinitionReader(profile_delimiters="|").register_definitions(
        root, make_context(profiles=["prod"])
    )

    assert "a" in registry


def test_one_reader_serves_many_documents(make_context, registry):
    reader = DocumentDefinitionReader()
    for document in (b'<beans><bean id="a" class="app.A"/></beans>', b'<beans><bean id="b" class="app.B"/></beans>'):
        reader.register_definitions(parse_document(document), make_context())

    assert registry.definition_names == ["a", "b"]


def test_absolute_import_resolving_nothing_is_a_warning(read, reporter, listener):
    read('<beans><import resource="file:///conf/none-*.xml"/></beans>')

    assert reporter.errors == []
    assert [p.message for p in reporter.warnings] == [
        "No resources found at URL location [file:///conf/none-*.xml]"
    ]
    assert listener.imports[0].actual_resources == ()
