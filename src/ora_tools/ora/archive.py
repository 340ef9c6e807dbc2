"""
Archive reader and writer.

An OpenRaster file is a zip archive. The ``mimetype`` entry comes first and
is stored uncompressed so that the file type can be sniffed from a fixed
offset; everything else is deflate-compressed.
"""

import logging
import os
import time
import zipfile
from types import TracebackType
from typing import Any, BinaryIO, Optional, Union

from ora_tools.constants import MIMETYPE, Entry
from ora_tools.errors import ArchiveCreateError, ArchiveOpenError, ManifestParseError
from ora_tools.ora.manifest import Manifest

logger = logging.getLogger(__name__)

PathOrFile = Union[BinaryIO, str, bytes, os.PathLike]


def _normalize(fp: PathOrFile) -> Any:
    # zipfile takes str or PathLike paths but not bytes.
    if isinstance(fp, bytes):
        return os.fsdecode(fp)
    return fp


class ArchiveReader:
    """
    Read access to an OpenRaster archive.

    Example::

        with ArchiveReader('example.ora') as archive:
            manifest = archive.read_manifest()
            data = archive.read(manifest.layers[0].src)

    :param fp: filename or file-like object.
    :raises ArchiveOpenError: if the source is unreadable or not a zip file.
    """

    def __init__(self, fp: PathOrFile):
        self._fp = fp
        try:
            self._zip = zipfile.ZipFile(_normalize(fp), "r")
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveOpenError(fp, e) from e

    @property
    def fp(self) -> PathOrFile:
        """Source path or file-like object."""
        return self._fp

    def namelist(self) -> list[str]:
        """Names of all the entries in archive order."""
        return self._zip.namelist()

    def __contains__(self, name: object) -> bool:
        try:
            self._zip.getinfo(name)  # type: ignore[arg-type]
        except KeyError:
            return False
        return True

    def read(self, name: str) -> bytes:
        """
        Read the whole content of an entry.

        :raises KeyError: if there is no such entry.
        """
        logger.debug("Reading %s", name)
        return self._zip.read(name)

    def read_mimetype(self) -> Optional[str]:
        """Content of the ``mimetype`` entry, or `None` if it is absent."""
        if Entry.MIMETYPE.value not in self:
            return None
        return self.read(Entry.MIMETYPE.value).decode("ascii", "replace").strip()

    def read_manifest(self) -> Manifest:
        """
        Parse and validate the ``stack.xml`` manifest.

        :raises ManifestParseError: if the manifest is missing or malformed.
        :raises DimensionParseError: if the canvas size is invalid.
        :raises EmptyStackError: if the manifest has no layers.
        """
        try:
            data = self.read(Entry.STACK_XML.value)
        except KeyError as e:
            raise ManifestParseError(
                "Missing %s entry" % Entry.STACK_XML.value, self._fp
            ) from e
        return Manifest.frombytes(data)

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> "ArchiveReader":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return "%s(%r)" % (self.__class__.__name__, self._fp)


class ArchiveWriter:
    """
    Write access to a new OpenRaster archive.

    Example::

        with ArchiveWriter('example.ora') as archive:
            archive.write_mimetype()
            archive.write('data/layer0.png', png_bytes)
            archive.write_manifest(manifest)

    :param fp: filename or file-like object. Existing files are overwritten.
    :param compression: compression method of the entries except
        ``mimetype``, default :py:data:`zipfile.ZIP_DEFLATED`.
    :raises ArchiveCreateError: if the destination cannot be created.
    """

    def __init__(self, fp: PathOrFile, compression: int = zipfile.ZIP_DEFLATED):
        self._fp = fp
        self._compression = compression
        try:
            self._zip = zipfile.ZipFile(_normalize(fp), "w", compression=compression)
        except OSError as e:
            raise ArchiveCreateError(fp, cause=e) from e

    @property
    def fp(self) -> PathOrFile:
        """Destination path or file-like object."""
        return self._fp

    def namelist(self) -> list[str]:
        """Names of the entries written so far."""
        return self._zip.namelist()

    def write(self, name: str, data: bytes, compress: bool = True) -> None:
        """
        Write an entry.

        :param name: entry name.
        :param data: entry content.
        :param compress: whether to compress the entry.
        :raises ArchiveCreateError: on I/O failure.
        """
        info = zipfile.ZipInfo(name, date_time=time.localtime(time.time())[:6])
        info.compress_type = self._compression if compress else zipfile.ZIP_STORED
        # Readable entries on extraction; zipfile leaves permissions empty.
        info.external_attr = 0o100644 << 16
        logger.debug("Writing %s (%d bytes)", name, len(data))
        try:
            self._zip.writestr(info, data)
        except (OSError, ValueError) as e:
            raise ArchiveCreateError(self._fp, name, e) from e

    def write_mimetype(self) -> None:
        """
        Write the ``mimetype`` entry. It must be the first entry.

        :raises ValueError: if other entries were already written.
        """
        if self.namelist():
            raise ValueError("mimetype must be the first entry of the archive")
        self.write(Entry.MIMETYPE.value, MIMETYPE.encode("ascii"), compress=False)

    def write_manifest(self, manifest: Manifest) -> None:
        """Write the ``stack.xml`` manifest."""
        self.write(Entry.STACK_XML.value, manifest.tobytes())

    def close(self) -> None:
        """
        Finish the archive.

        :raises ArchiveCreateError: on I/O failure.
        """
        try:
            self._zip.close()
        except OSError as e:
            raise ArchiveCreateError(self._fp, cause=e) from e

    def __enter__(self) -> "ArchiveWriter":
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return "%s(%r)" % (self.__class__.__name__, self._fp)
