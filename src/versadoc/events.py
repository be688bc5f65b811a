"""Listeners notified as a document reader registers things."""

from versadoc.domain import (
    AliasDefinition,
    ComponentDefinition,
    DefaultsDefinition,
    ImportDefinition,
)

__all__ = ["ReaderEventListener", "RecordingEventListener"]


class ReaderEventListener:
    """Listener base class; every notification is a no-op."""

    def defaults_registered(self, defaults: DefaultsDefinition):
        pass

    def import_processed(self, import_definition: ImportDefinition):
        pass

    def alias_registered(self, alias_definition: AliasDefinition):
        pass

    def component_registered(self, component_definition: ComponentDefinition):
        pass


class RecordingEventListener(ReaderEventListener):
    """Keeps every event it receives, in order of arrival."""

    def __init__(self):
        self.defaults: list[DefaultsDefinition] = []
        self.imports: list[ImportDefinition] = []
        self.aliases: list[AliasDefinition] = []
        self.components: list[ComponentDefinition] = []

    def defaults_registered(self, defaults: DefaultsDefinition):
        self.defaults.append(defaults)

    def import_processed(self, import_definition: ImportDefinition):
        self.imports.append(import_definition)

    def alias_registered(self, alias_definition: AliasDefinition):
        self.aliases.append(alias_definition)

    def component_registered(self, component_definition: ComponentDefinition):
        self.components.append(component_definition)
