"""Versadoc: declarative component definitions read from XML documents.

Versadoc reads ``beans`` documents, the XML format popularised by Spring, into a
registry of named definitions. Nothing is instantiated: the result is plain data
describing each component, its aliases and its construction recipe, ready to be
handed to whatever builds the components.

Key Features:
    - ``bean``, ``alias``, ``import`` and nested ``beans`` elements
    - Profile-guarded nested documents (``<beans profile="dev, !ci">``)
    - Inherited ``default-*`` attributes across nesting levels
    - Relative, absolute, package and glob import locations with ``${...}`` placeholders
    - Per-element error recovery with pluggable problem reporting
    - Namespace handlers for custom elements and decorating attributes

Basic Usage:
    >>> from versadoc.builders import load_registry
    >>>
    >>> registry, problems = load_registry("conf/app.xml", profiles={"dev"})
    >>> registry.get_definition("dataSource").class_name
    'app.db.PooledDataSource'

The package consists of several modules:
    - document_reader: Traversal of one document (imports, aliases, definitions, nesting)
    - xml_reader: XML parsing and resource loading
    - delegate: Scoped parsing of individual elements
    - environment: Profile selection and placeholder resolution
    - resources: Resource types and location handling
    - registry: Definition and alias storage
    - builders: High-level loading functions
    - errors: Framework-specific exceptions
"""
