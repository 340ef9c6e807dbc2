"""
Exception types raised and reported by ora_tools.

Fatal errors abort the whole import or export and are raised. Per-layer
import failures are reported as :py:class:`LayerImportError` values in
:py:attr:`~ora_tools.api.importer.ImportResult.errors` instead.
"""

import os
from typing import Any, Optional


def describe(fp: Any) -> str:
    """Human readable name of a path or file-like object."""
    if isinstance(fp, bytes):
        return fp.decode("utf-8", "replace")
    if isinstance(fp, str):
        return fp
    name = getattr(fp, "name", None)
    if isinstance(name, str):
        return name
    try:
        return os.fspath(fp)  # type: ignore[no-any-return]
    except TypeError:
        return repr(fp)


class OpenRasterError(Exception):
    """Base class of all ora_tools errors."""


class ArchiveOpenError(OpenRasterError):
    """The source is unreadable or is not a valid zip archive."""

    def __init__(self, path: Any, cause: Optional[BaseException] = None):
        self.path = describe(path)
        self.cause = cause
        super().__init__("Failed to open OpenRaster archive %s: %s" % (self.path, cause))


class ArchiveCreateError(OpenRasterError):
    """The destination archive cannot be created or written."""

    def __init__(
        self,
        path: Any,
        entry: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.path = describe(path)
        self.entry = entry
        self.cause = cause
        if entry is None:
            message = "Failed to create OpenRaster archive %s: %s" % (self.path, cause)
        else:
            message = "Failed to write %s to OpenRaster archive %s: %s" % (
                entry,
                self.path,
                cause,
            )
        super().__init__(message)


class ManifestParseError(OpenRasterError):
    """The ``stack.xml`` manifest is missing or malformed."""

    def __init__(self, reason: str, path: Any = None):
        self.path = None if path is None else describe(path)
        self.reason = reason
        if self.path is None:
            super().__init__(reason)
        else:
            super().__init__("%s: %s" % (self.path, reason))


class DimensionParseError(ManifestParseError):
    """The ``w`` or ``h`` attribute of the image element is invalid."""


class EmptyStackError(OpenRasterError):
    """There are no layers to read or write."""


class LayerImportError(OpenRasterError):
    """
    A single layer failed to import. The rest of the import goes on.

    .. py:attribute:: index

        Position of the layer element in the manifest, top to bottom.

    .. py:attribute:: name

        Layer name.

    .. py:attribute:: src

        Archive entry the layer refers to.

    .. py:attribute:: cause

        Underlying exception.
    """

    def __init__(
        self,
        index: int,
        name: str,
        src: str,
        cause: Optional[BaseException] = None,
    ):
        self.index = index
        self.name = name
        self.src = src
        self.cause = cause
        super().__init__(
            'Could not import layer "%s" from %s: %s' % (name, src, cause)
        )
