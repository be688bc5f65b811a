"""
Reading definitions out of a parsed document.

:class:`DocumentDefinitionReader` walks a ``beans`` element and everything
nested in it, registering what it finds:

    - ``import`` loads further documents through the context's reader
    - ``alias`` registers an alternate name
    - ``bean`` registers a definition parsed by the scope's delegate
    - ``beans`` opens a nested scope, optionally guarded by ``profile``

Elements from other namespaces are handed to the delegate. Problems with a
single element are reported to the context and reading carries on with its
siblings. Two failures abort more than one element: a nested document whose
profiles are all rejected is skipped whole, and an import location with an
unresolvable placeholder raises out of the reader.

All per-document state (context and current delegate) is passed down the
recursion, so a single reader may be shared freely.
"""

import logging
from typing import Optional

from versadoc.context import ReaderContext
from versadoc.delegate import DefinitionParserDelegate
from versadoc.domain import ComponentDefinition, DefaultsDefinition, Element
from versadoc.elements import (
    ALIAS_ATTRIBUTE,
    MULTI_VALUE_ATTRIBUTE_DELIMITERS,
    NAME_ATTRIBUTE,
    PROFILE_ATTRIBUTE,
    RESOURCE_ATTRIBUTE,
    ElementKind,
    tokenize,
)
from versadoc.errors import DefinitionStoreError
from versadoc.registry import register_holder
from versadoc.resources import Resource, apply_relative_path, is_absolute_location

__all__ = ["DocumentDefinitionReader"]

logger = logging.getLogger(__name__)


class DocumentDefinitionReader:
    """
    Registers the definitions, aliases and imports of one document.

    Args:
        profile_delimiters: Characters separating the names in a ``profile``
            attribute.
    """

    def __init__(self, profile_delimiters: str = MULTI_VALUE_ATTRIBUTE_DELIMITERS):
        self.profile_delimiters = profile_delimiters

    def register_definitions(self, root: Element, context: ReaderContext):
        """Read the document rooted at root into the context's registry."""
        self._process_scope(root, context, None)

    def create_delegate(
        self,
        context: ReaderContext,
        root: Element,
        parent: Optional[DefinitionParserDelegate],
    ) -> DefinitionParserDelegate:
        return DefinitionParserDelegate(context, root, parent)

    def pre_process(self, root: Element, context: ReaderContext):
        """Hook run before the children of a scope are read."""

    def post_process(self, root: Element, context: ReaderContext):
        """Hook run after the children of a scope are read."""

    def _process_scope(
        self,
        root: Element,
        context: ReaderContext,
        parent: Optional[DefinitionParserDelegate],
    ):
        delegate = self.create_delegate(context, root, parent)

        if delegate.is_default_namespace(root) and not self._profiles_accepted(root, context):
            return

        context.fire_defaults_registered(
            DefaultsDefinition(delegate.defaults.resolved(), context.extract_source(root))
        )
        self.pre_process(root, context)
        self._dispatch_children(root, context, delegate)
        self.post_process(root, context)

    def _profiles_accepted(self, root: Element, context: ReaderContext) -> bool:
        profile_spec = root.get(PROFILE_ATTRIBUTE)
        if not profile_spec.strip():
            return True

        profiles = tokenize(profile_spec, self.profile_delimiters)
        try:
            if not profiles:
                raise ValueError("no profile names given")
            accepted = context.environment.accepts_profiles(profiles)
        except ValueError as e:
            context.error(f"Invalid profile specification [{profile_spec}]", root, e)
            return False

        if not accepted:
            logger.debug(
                "Skipped definitions due to specified profiles [%s] not matching: %s",
                profile_spec,
                context.resource.description,
            )
        return accepted

    def _dispatch_children(
        self,
        root: Element,
        context: ReaderContext,
        delegate: DefinitionParserDelegate,
    ):
        if not delegate.is_default_namespace(root):
            delegate.parse_custom_element(root)
            return

        for element in root.element_children():
            if delegate.is_default_namespace(element):
                self._dispatch_default(element, context, delegate)
            else:
                delegate.parse_custom_element(element)

    def _dispatch_default(
        self,
        element: Element,
        context: ReaderContext,
        delegate: DefinitionParserDelegate,
    ):
        kind = ElementKind.of(element)
        if kind is ElementKind.IMPORT:
            self._import_resource(element, context)
        elif kind is ElementKind.ALIAS:
            self._register_alias(element, context)
        elif kind is ElementKind.BEAN:
            self._register_definition(element, context, delegate)
        elif kind is ElementKind.BEANS:
            self._process_scope(element, context, delegate)

    def _import_resource(self, element: Element, context: ReaderContext):
        """
        Load the definitions of the document named by an ``import`` element.

        Absolute locations are handed to the reader as they are. Relative ones
        are first tried next to the current resource; if nothing exists there,
        the location is resolved against the current resource's URL instead.

        Raises:
            PlaceholderResolutionError: If the location names an unknown property.
        """
        location = element.get(RESOURCE_ATTRIBUTE)
        if not location.strip():
            context.error("Resource location must not be empty", element)
            return

        location = context.environment.resolve_required_placeholders(location)
        actual_resources: list[Resource] = []

        if is_absolute_location(location):
            try:
                count = context.reader.load_definitions(location, actual_resources)
                logger.debug("Imported %d definitions from URL location [%s]", count, location)
                if not actual_resources:
                    context.warning(f"No resources found at URL location [{location}]", element)
            except DefinitionStoreError as e:
                context.error(
                    f"Failed to import definitions from URL location [{location}]", element, e
                )
        else:
            try:
                relative = context.resource.create_relative(location)
                if relative.exists():
                    count = context.reader.load_definitions(relative)
                    actual_resources.append(relative)
                else:
                    base_location = context.resource.url
                    count = context.reader.load_definitions(
                        apply_relative_path(base_location, location), actual_resources
                    )
                logger.debug(
                    "Imported %d definitions from relative location [%s]", count, location
                )
                if not actual_resources:
                    context.warning(
                        f"No resources found at relative location [{location}]", element
                    )
            except OSError as e:
                context.error("Failed to resolve current resource location", element, e)
            except DefinitionStoreError as e:
                context.error(
                    f"Failed to import definitions from relative location [{location}]",
                    element,
                    e,
                )

        context.fire_import_processed(
            location, actual_resources, context.extract_source(element)
        )

    def _register_alias(self, element: Element, context: ReaderContext):
        name = element.get(NAME_ATTRIBUTE)
        alias = element.get(ALIAS_ATTRIBUTE)
        valid = True
        if not name.strip():
            context.error("Name must not be empty", element)
            valid = False
        if not alias.strip():
            context.error("Alias must not be empty", element)
            valid = False
        if not valid:
            return

        try:
            context.registry.register_alias(name, alias)
        except DefinitionStoreError as e:
            context.error(
                f"Failed to register alias '{alias}' for definition with name '{name}'",
                element,
                e,
            )
            return
        context.fire_alias_registered(name, alias, context.extract_source(element))

    def _register_definition(
        self,
        element: Element,
        context: ReaderContext,
        delegate: DefinitionParserDelegate,
    ):
        holder = delegate.parse_definition_element(element)
        if holder is None:
            return

        holder = delegate.decorate_if_required(element, holder)
        try:
            register_holder(context.registry, holder)
        except DefinitionStoreError as e:
            context.error(
                f"Failed to register definition with name '{holder.name}'", element, e
            )
            return
        context.fire_component_registered(
            ComponentDefinition(holder, context.extract_source(element))
        )
