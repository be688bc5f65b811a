"""
Resources are the documents definitions are read from.

A location string is turned into zero, one or many resources by a
:class:`ResourceLoader`. Supported forms:

    - ``package:some.package/path/file.xml`` for data shipped inside a package
    - ``file:///abs/path.xml`` URLs
    - plain filesystem paths
    - glob patterns (``conf/*.xml``) in either of the two previous forms
"""

import glob
import importlib.resources
import os
import posixpath
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit
from urllib.request import url2pathname

from versadoc.errors import DefinitionStoreError

__all__ = [
    "Resource",
    "FileResource",
    "ByteArrayResource",
    "PackageResource",
    "ResourceLoader",
    "is_url",
    "is_absolute_location",
    "apply_relative_path",
]

PACKAGE_URL_PREFIX = "package:"
FILE_URL_PREFIX = "file:"
URL_PREFIXES = (PACKAGE_URL_PREFIX, FILE_URL_PREFIX)
GLOB_CHARACTERS = "*?["


class Resource:
    """A single document that may or may not exist."""

    description: str = "resource"

    def exists(self) -> bool:
        raise NotImplementedError

    def read_bytes(self) -> bytes:
        raise NotImplementedError

    @property
    def url(self) -> str:
        raise OSError(f"{self.description} cannot be resolved to URL")

    def create_relative(self, relative_path: str) -> "Resource":
        raise OSError(f"Cannot create a relative resource for {self.description}")

    def __str__(self) -> str:
        return self.description


class FileResource(Resource):
    def __init__(self, path):
        self.path = Path(os.path.normpath(Path(path).absolute()))
        self.description = f"file [{self.path}]"

    def exists(self) -> bool:
        return self.path.is_file()

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    @property
    def url(self) -> str:
        return self.path.as_uri()

    def create_relative(self, relative_path: str) -> "FileResource":
        return FileResource(self.path.parent / relative_path.lstrip("/"))

    def __eq__(self, other) -> bool:
        return isinstance(other, FileResource) and self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)


class ByteArrayResource(Resource):
    """In-memory document content. Always exists; has no URL."""

    def __init__(self, data: bytes, description: Optional[str] = None):
        self.data = data
        self.description = (
            f"Byte array resource [{description or 'resource loaded from byte array'}]"
        )

    def exists(self) -> bool:
        return True

    def read_bytes(self) -> bytes:
        return self.data

    def __eq__(self, other) -> bool:
        return isinstance(other, ByteArrayResource) and other.data == self.data

    def __hash__(self) -> int:
        return hash(self.data)


class PackageResource(Resource):
    """A file shipped inside an importable package."""

    def __init__(self, package: str, path: str):
        self.package = package
        self.path = posixpath.normpath(path.lstrip("/"))
        self.description = f"package resource [{self.package}/{self.path}]"

    def _traversable(self):
        return importlib.resources.files(self.package).joinpath(self.path)

    def exists(self) -> bool:
        try:
            return self._traversable().is_file()
        except (ImportError, TypeError, ValueError):
            return False

    def read_bytes(self) -> bytes:
        try:
            return self._traversable().read_bytes()
        except (ImportError, TypeError, ValueError) as e:
            raise FileNotFoundError(f"{self.description} cannot be opened") from e

    @property
    def url(self) -> str:
        return f"{PACKAGE_URL_PREFIX}{self.package}/{self.path}"

    def create_relative(self, relative_path: str) -> "PackageResource":
        return PackageResource(self.package, apply_relative_path(self.path, relative_path))

    def __eq__(self, other) -> bool:
        return isinstance(other, PackageResource) and (
            (self.package, self.path) == (other.package, other.path)
        )

    def __hash__(self) -> int:
        return hash((self.package, self.path))


class ResourceLoader:
    """Turns location strings into resources."""

    def get_resource(self, location: str) -> Resource:
        if location.startswith(PACKAGE_URL_PREFIX):
            package, _, path = location[len(PACKAGE_URL_PREFIX) :].partition("/")
            if not path or not _is_package_name(package):
                raise DefinitionStoreError(
                    f"Package location [{location}] must have the form package:<package>/<path>"
                )
            return PackageResource(package, path)
        return FileResource(_to_path(location))

    def get_resources(self, location: str) -> list[Resource]:
        """Resolve a location, expanding glob patterns into every matching file.

        Returns:
            The matching resources in sorted order; a pattern matching nothing
            yields an empty list, while a plain location always yields one
            resource, which may not exist.
        """
        if location.startswith(PACKAGE_URL_PREFIX) or not _is_pattern(location):
            return [self.get_resource(location)]
        return [
            FileResource(match)
            for match in sorted(glob.glob(_to_path(location), recursive=True))
            if Path(match).is_file()
        ]


def _is_package_name(name: str) -> bool:
    return bool(name) and all(part.isidentifier() for part in name.split("."))


def _to_path(location: str) -> str:
    if location.startswith(FILE_URL_PREFIX):
        return url2pathname(urlsplit(location).path)
    return location


def _is_pattern(location: str) -> bool:
    return any(char in location for char in GLOB_CHARACTERS)


def is_url(location: str) -> bool:
    """Check for one of the location prefixes the loader understands natively."""
    return location.startswith(URL_PREFIXES)


def is_absolute_location(location: str) -> bool:
    """
    Decide whether a location stands on its own or is relative to the
    document that mentions it.

    Locations the loader recognises are absolute; otherwise a location is
    absolute when it parses as a URI with a scheme. Single character schemes
    are taken to be drive letters. Anything that fails to parse is relative.
    """
    if is_url(location):
        return True
    try:
        scheme = urlsplit(location.replace(" ", "%20")).scheme
    except ValueError:
        return False
    return len(scheme) > 1


def apply_relative_path(path: str, relative_path: str) -> str:
    """Replace the last segment of path with relative_path.

    Example:
        >>> apply_relative_path("file:/conf/app.xml", "db.xml")
        'file:/conf/db.xml'
    """
    separator_index = path.rfind("/")
    if separator_index == -1:
        return relative_path
    new_path = path[:separator_index]
    if not relative_path.startswith("/"):
        new_path += "/"
    return new_path + relative_path
