"""
Attribute parsing and formatting utilities for the manifest.

Numbers are always parsed and formatted locale-invariant: ``int``, ``float``
and ``%``-formatting never consult the process locale, so a period is the
decimal separator everywhere.
"""

import math
import re
import xml.etree.ElementTree as ET
from typing import Optional, Union

_INTEGER = re.compile(r"[+-]?[0-9]+")
_DECIMAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def get_attribute(element: ET.Element, key: str, default: str) -> str:
    """
    Get an attribute value, falling back to ``default`` when the attribute
    is absent or empty.
    """
    value = element.get(key)
    if not value:
        return default
    return value


def parse_int(value: str) -> int:
    """
    Parse a decimal integer such as ``"-12"``. Only ASCII digits are
    accepted; surrounding whitespace is ignored.
    """
    text = value.strip()
    if not _INTEGER.fullmatch(text):
        raise ValueError("invalid integer: %r" % value)
    return int(text, 10)


def parse_float(value: str) -> float:
    """
    Parse a decimal number such as ``"0.75"``. Only ASCII digits and a
    period are accepted; surrounding whitespace is ignored.
    """
    text = value.strip()
    if not _DECIMAL.fullmatch(text):
        raise ValueError("invalid decimal number: %r" % value)
    result = float(text)
    if not math.isfinite(result):
        raise ValueError("could not convert string to a finite float: %r" % value)
    return result


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def format_opacity(value: float) -> str:
    """Opacity with exactly two decimal digits, e.g. ``"0.50"``."""
    return "%.2f" % value


def format_number(value: Union[int, float]) -> str:
    """Shortest representation of a number, e.g. ``"1"`` for ``1.0``."""
    return "%g" % value


def find_first(element: ET.Element, tag: str) -> Optional[ET.Element]:
    """First descendant (or self) with ``tag`` in document order."""
    return next(element.iter(tag), None)


def to_bytes(element: ET.Element) -> bytes:
    """Serialize ``element`` as indented UTF-8 XML with a declaration."""
    tree = ET.ElementTree(element)
    ET.indent(tree)
    return ET.tostring(element, encoding="UTF-8", xml_declaration=True)
