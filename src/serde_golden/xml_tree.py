"""Mapping between builtins trees and XML element trees.

Encoding rules:

- mapping keys become child elements; keys prefixed with ``@`` become
  attributes and the ``#text`` key becomes the element text
- sequence items become ``<item>`` children
- ``None`` mapping values are omitted and decode back as ``None`` for
  required nullable fields; ``None`` sequence items are rejected
- text must only use characters allowed by XML 1.0
- booleans render as ``true`` / ``false``

XML text carries no types, so decoding walks the element tree next to
``msgspec.inspect.type_info`` of the target and yields strings that a lax
``msgspec.convert`` coerces into the declared field types.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Mapping, Sequence

import msgspec
from msgspec import inspect as mi

ITEM_TAG = "item"
ATTRIBUTE_PREFIX = "@"
TEXT_KEY = "#text"

_NAME_RE = re.compile(r"^[A-Za-z_][\w.\-]*$")
_INVALID_CHAR_RE = re.compile("[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")

_FieldedType = mi.StructType | mi.DataclassType | mi.TypedDictType
_SequenceType = mi.ListType | mi.VarTupleType | mi.SetType | mi.FrozenSetType


def root_tag(value: object) -> str:
    """Return the root element tag for a value.

    Parameters
    ----------
    value
        Value being encoded.

    Returns
    -------
    str
        The value's type name, or ``value`` for None.
    """
    if value is None:
        return "value"
    return type(value).__name__


def build_element(tag: str, payload: object) -> ET.Element:
    """Build an element tree from a builtins payload.

    Parameters
    ----------
    tag
        Tag of the element to build.
    payload
        Builtins tree (mappings, sequences, scalars).

    Returns
    -------
    xml.etree.ElementTree.Element
        Element holding the payload.

    Raises
    ------
    ValueError
        Raised when a mapping key is not a valid XML name.
    """
    element = ET.Element(_xml_name(tag))
    _fill(element, payload)
    return element


def _fill(element: ET.Element, payload: object) -> None:
    if payload is None:
        return
    if isinstance(payload, Mapping):
        for key, value in payload.items():
            name = str(key)
            if value is None:
                continue
            if name == TEXT_KEY:
                element.text = _scalar_text(value)
            elif name.startswith(ATTRIBUTE_PREFIX):
                element.set(_xml_name(name[1:]), _scalar_text(value))
            else:
                child = ET.SubElement(element, _xml_name(name))
                _fill(child, value)
        return
    if isinstance(payload, Sequence) and not isinstance(payload, (str, bytes)):
        for index, item in enumerate(payload):
            if item is None:
                msg = f"XML cannot represent None at item {index} of <{element.tag}>"
                raise ValueError(msg)
            child = ET.SubElement(element, ITEM_TAG)
            _fill(child, item)
        return
    element.text = _scalar_text(payload)


def _scalar_text(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value)
    bad = _INVALID_CHAR_RE.search(text)
    if bad is not None:
        msg = f"Character {bad.group()!r} at offset {bad.start()} is not allowed in XML 1.0 text"
        raise ValueError(msg)
    return text


def _xml_name(name: str) -> str:
    if not _NAME_RE.match(name):
        msg = f"{name!r} is not a valid XML element or attribute name"
        raise ValueError(msg)
    return name


def dump(element: ET.Element, *, indent: int = 2) -> bytes:
    """Serialize an element tree to indented UTF-8 bytes.

    Parameters
    ----------
    element
        Root element.
    indent
        Indentation width; zero disables pretty printing.

    Returns
    -------
    bytes
        XML document ending with a newline.
    """
    if indent > 0:
        ET.indent(element, space=" " * indent)
    text = ET.tostring(element, encoding="unicode")
    return f"{text}\n".encode()


def canonical(buf: bytes) -> str:
    """Return the C14N 2.0 form of a document without indentation whitespace.

    Whitespace-only text and tails inside elements that have children are
    dropped. Leaf text is kept verbatim, so padded values stay significant.

    Parameters
    ----------
    buf
        XML document bytes.

    Returns
    -------
    str
        Canonical XML text.
    """
    root = ET.fromstring(buf)
    for element in root.iter():
        if len(element) and element.text is not None and not element.text.strip():
            element.text = None
        for child in element:
            if child.tail is not None and not child.tail.strip():
                child.tail = None
    return ET.canonicalize(ET.tostring(root, encoding="unicode"), strip_text=False)


def element_to_builtins(
    element: ET.Element,
    target_type: object,
    *,
    forbid_unknown_fields: bool = False,
) -> object:
    """Convert an element tree into builtins shaped for ``target_type``.

    Parameters
    ----------
    element
        Root element of a reference document.
    target_type
        Type the result will be converted into.
    forbid_unknown_fields
        Whether elements absent from the target shape are an error.

    Returns
    -------
    object
        Builtins tree ready for ``msgspec.convert(..., strict=False)``.
    """
    walker = _Walker(forbid_unknown_fields=forbid_unknown_fields)
    return walker.walk(element, mi.type_info(target_type), "$")


class _Walker:
    def __init__(self, *, forbid_unknown_fields: bool) -> None:
        self.forbid_unknown_fields = forbid_unknown_fields

    def walk(self, element: ET.Element, info: mi.Type, path: str) -> object:
        while isinstance(info, mi.Metadata):
            info = info.type
        if isinstance(info, mi.UnionType):
            return self._walk_union(element, info, path)
        if isinstance(info, mi.NoneType):
            return None
        if isinstance(info, _FieldedType):
            if isinstance(info, mi.StructType) and info.array_like:
                return [self.walk(child, mi.AnyType(), path) for child in element]
            return self._walk_fields(element, info, path)
        if isinstance(info, _SequenceType):
            return [
                self.walk(child, info.item_type, f"{path}[{index}]")
                for index, child in enumerate(element)
            ]
        if isinstance(info, mi.TupleType):
            return [
                self.walk(child, item_type, f"{path}[{index}]")
                for index, (child, item_type) in enumerate(
                    zip(element, info.item_types, strict=False)
                )
            ]
        if isinstance(info, mi.NamedTupleType):
            return [
                self.walk(child, field.type, f"{path}[{index}]")
                for index, (child, field) in enumerate(zip(element, info.fields, strict=False))
            ]
        if isinstance(info, mi.DictType):
            return {
                child.tag: self.walk(child, info.value_type, f"{path}.{child.tag}")
                for child in element
            }
        if isinstance(info, (mi.AnyType, mi.CustomType)):
            return _generic(element)
        return element.text or ""

    def _walk_fields(self, element: ET.Element, info: mi.Type, path: str) -> dict[str, object]:
        fields = {field.encode_name: field for field in info.fields}  # type: ignore[attr-defined]
        tag_field = info.tag_field if isinstance(info, mi.StructType) else None
        payload: dict[str, object] = {}
        for name, value in element.attrib.items():
            if name in fields:
                payload[name] = value
            else:
                self._unknown(name, path)
        for child in element:
            field = fields.get(child.tag)
            if field is None:
                if child.tag == tag_field:
                    payload[child.tag] = child.text or ""
                else:
                    self._unknown(child.tag, path)
                continue
            payload[child.tag] = self.walk(child, field.type, f"{path}.{child.tag}")
        # None values are never written, so a missing nullable field was None.
        for name, field in fields.items():
            if name not in payload and field.required and _is_nullable(field.type):
                payload[name] = None
        return payload

    def _walk_union(self, element: ET.Element, info: mi.UnionType, path: str) -> object:
        members = [member for member in info.types if not isinstance(member, mi.NoneType)]
        if not members:
            return None
        if len(element) or element.attrib:
            structured = [member for member in members if not _is_scalar(member)]
            if structured:
                return self.walk(element, _pick_tagged(element, structured), path)
        scalars = [member for member in members if _is_scalar(member)]
        return self.walk(element, (scalars or members)[0], path)

    def _unknown(self, name: str, path: str) -> None:
        if self.forbid_unknown_fields:
            msg = f"Object contains unknown field `{name}` - at `{path}`"
            raise msgspec.ValidationError(msg)


def _pick_tagged(element: ET.Element, members: list[mi.Type]) -> mi.Type:
    for member in members:
        if isinstance(member, mi.StructType) and member.tag_field is not None:
            tag = element.findtext(member.tag_field)
            if tag is not None and tag == str(member.tag):
                return member
    return members[0]


def _is_nullable(info: mi.Type) -> bool:
    while isinstance(info, mi.Metadata):
        info = info.type
    if isinstance(info, mi.NoneType):
        return True
    return isinstance(info, mi.UnionType) and any(
        isinstance(member, mi.NoneType) for member in info.types
    )


def _is_scalar(info: mi.Type) -> bool:
    while isinstance(info, mi.Metadata):
        info = info.type
    return not isinstance(
        info,
        _FieldedType
        | _SequenceType
        | mi.TupleType
        | mi.NamedTupleType
        | mi.DictType
        | mi.AnyType
        | mi.CustomType,
    )


def _generic(element: ET.Element) -> object:
    children = list(element)
    if not children and not element.attrib:
        return element.text or ""
    if children and not element.attrib and all(child.tag == ITEM_TAG for child in children):
        return [_generic(child) for child in children]
    payload: dict[str, object] = {
        f"{ATTRIBUTE_PREFIX}{name}": value for name, value in element.attrib.items()
    }
    text = (element.text or "").strip()
    if text:
        payload[TEXT_KEY] = text
    for child in children:
        payload[child.tag] = _generic(child)
    return payload


__all__ = [
    "ATTRIBUTE_PREFIX",
    "ITEM_TAG",
    "TEXT_KEY",
    "build_element",
    "canonical",
    "dump",
    "element_to_builtins",
    "root_tag",
]
