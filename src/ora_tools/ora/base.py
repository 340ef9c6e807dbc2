"""
Base data structures intended for inheritance.

All the manifest records in this subpackage inherit from
:py:class:`~ora_tools.ora.base.BaseElement`, which maps an attrs_ class onto
an :py:mod:`xml.etree.ElementTree` element.

.. _attrs: https://www.attrs.org/en/stable/index.html
"""

import logging
import xml.etree.ElementTree as ET
from enum import Enum
from typing import Any, ClassVar, TypeVar

from attrs import fields, validate

from ora_tools.errors import ManifestParseError
from ora_tools.ora.xml_utils import to_bytes

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="BaseElement")


class BaseElement:
    """
    Base element of the manifest structures.

    .. py:attribute:: tag

        XML tag name of the element.

    .. py:classmethod:: read(cls, element)

        Read the record from an :py:class:`xml.etree.ElementTree.Element`.

    .. py:method:: write(self)

        Write the record to a new :py:class:`xml.etree.ElementTree.Element`.

    .. py:classmethod:: frombytes(self, data, *args, **kwargs)

        Read the record from XML bytes.

    .. py:method:: tobytes(self)

        Write the record to indented UTF-8 XML bytes.

    .. py:method:: validate(self)

        Validate the attributes.
    """

    tag: ClassVar[str] = ""

    @classmethod
    def read(cls: type[T], element: ET.Element, **kwargs: Any) -> T:
        raise NotImplementedError()

    def write(self, **kwargs: Any) -> ET.Element:
        raise NotImplementedError()

    @classmethod
    def frombytes(cls: type[T], data: bytes, *args: Any, **kwargs: Any) -> T:
        try:
            element = ET.fromstring(data)
        except ET.ParseError as e:
            raise ManifestParseError("Malformed XML: %s" % e) from e
        if element.tag != cls.tag:
            raise ManifestParseError(
                "Expected <%s> root element, got <%s>" % (cls.tag, element.tag)
            )
        return cls.read(element, *args, **kwargs)

    def tobytes(self, *args: Any, **kwargs: Any) -> bytes:
        return to_bytes(self.write(*args, **kwargs))

    def validate(self) -> None:
        return validate(self)  # type: ignore[arg-type]

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("{name}(...)".format(name=self.__class__.__name__))
            return

        with p.group(2, "{name}(".format(name=self.__class__.__name__), ")"):
            p.breakable("")
            field_list = [f for f in fields(self.__class__) if f.repr]  # type: ignore[arg-type]
            for idx, field_item in enumerate(field_list):
                if idx:
                    p.text(",")
                    p.breakable()
                p.text("{field}=".format(field=field_item.name))
                value = getattr(self, field_item.name)
                if isinstance(value, Enum):
                    p.text(value.name)
                else:
                    p.pretty(value)
            p.breakable("")
