"""Codec strategies for golden round-trip assertions.

A ``CodecStrategy`` pairs an encoder factory with a decoder factory and a
format-aware equivalence check. The verifier only ever talks to strategies,
so callers can swap indentation, ordering or strictness per format without
touching the verifier.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import partial
from typing import Final, Literal, Protocol, TypeAlias, TypeVar

import msgspec
import yaml

from serde_golden import xml_tree
from serde_golden.hooks import make_dec_hook, make_enc_hook, to_builtins
from serde_golden.strict import reject_unknown_fields

JSON: Final = "json"
YAML: Final = "yaml"
XML: Final = "xml"

DEFAULT_INDENT = 2

T = TypeVar("T")

Order: TypeAlias = Literal["deterministic", "sorted"] | None


class Encoder(Protocol):
    """Configured encoder producing reference bytes."""

    def encode(self, value: object) -> bytes:
        """Serialize ``value`` into bytes."""
        ...


class Decoder(Protocol):
    """Configured decoder rebuilding values from reference bytes."""

    def decode(self, buf: bytes, target_type: type[T]) -> T:
        """Deserialize ``buf`` into a fresh ``target_type`` instance."""
        ...


@dataclass(frozen=True)
class CodecStrategy:
    """Encoder and decoder factories for one serialization format."""

    format: str
    make_encoder: Callable[[], Encoder]
    make_decoder: Callable[[], Decoder]
    equivalent: Callable[[bytes, bytes], bool]


def trees_equal(left: object, right: object) -> bool:
    """Return True when two builtins trees are structurally equal.

    Mapping key order is ignored. Integers and floats compare by value, so
    ``1`` equals ``1.0``. Booleans never compare equal to numbers, which plain
    ``==`` would allow.

    Parameters
    ----------
    left
        First builtins tree.
    right
        Second builtins tree.

    Returns
    -------
    bool
        True when the trees match.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        if left.keys() != right.keys():
            return False
        return all(trees_equal(value, right[key]) for key, value in left.items())
    if isinstance(left, list) and isinstance(right, list):
        if len(left) != len(right):
            return False
        return all(trees_equal(a, b) for a, b in zip(left, right, strict=True))
    if isinstance(left, int | float) and isinstance(right, int | float):
        return left == right
    return type(left) is type(right) and left == right


# -----------------------------------------------------------------------------
# JSON
# -----------------------------------------------------------------------------


class JsonEncoder:
    """msgspec JSON encoder with pretty printing."""

    def __init__(self, *, indent: int = DEFAULT_INDENT, order: Order = "deterministic") -> None:
        self.indent = indent
        self._encoder = msgspec.json.Encoder(enc_hook=make_enc_hook(JSON), order=order)

    def encode(self, value: object) -> bytes:
        raw = self._encoder.encode(value)
        if self.indent > 0:
            raw = msgspec.json.format(raw, indent=self.indent)
        return raw + b"\n"


class JsonDecoder:
    """msgspec JSON decoder rejecting unknown fields."""

    def __init__(self, *, forbid_unknown_fields: bool = True) -> None:
        self.forbid_unknown_fields = forbid_unknown_fields
        self._dec_hook = make_dec_hook(JSON)

    def decode(self, buf: bytes, target_type: type[T]) -> T:
        payload = msgspec.json.decode(buf)
        if self.forbid_unknown_fields:
            reject_unknown_fields(payload, target_type)
        return msgspec.convert(payload, type=target_type, strict=True, dec_hook=self._dec_hook)


def json_equivalent(left: bytes, right: bytes) -> bool:
    """Return True when two JSON documents decode to equal trees."""
    try:
        return trees_equal(msgspec.json.decode(left), msgspec.json.decode(right))
    except msgspec.DecodeError:
        return False


def json_strategy(
    *,
    indent: int = DEFAULT_INDENT,
    order: Order = "deterministic",
    forbid_unknown_fields: bool = True,
) -> CodecStrategy:
    """Return the JSON codec strategy.

    Parameters
    ----------
    indent
        Pretty-print indentation width; zero writes compact JSON.
    order
        msgspec ordering policy for mappings and sets.
    forbid_unknown_fields
        Whether decoding rejects fields absent from the target shape.

    Returns
    -------
    CodecStrategy
        Configured JSON strategy.
    """
    return CodecStrategy(
        format=JSON,
        make_encoder=partial(JsonEncoder, indent=indent, order=order),
        make_decoder=partial(JsonDecoder, forbid_unknown_fields=forbid_unknown_fields),
        equivalent=json_equivalent,
    )


# -----------------------------------------------------------------------------
# YAML
# -----------------------------------------------------------------------------


class YamlEncoder:
    """PyYAML safe dumper over msgspec builtins."""

    def __init__(self, *, indent: int = DEFAULT_INDENT, order: Order = "deterministic") -> None:
        self.indent = indent
        self.order = order

    def encode(self, value: object) -> bytes:
        payload = to_builtins(value, fmt=YAML, order=self.order)
        text = yaml.dump(
            payload,
            Dumper=yaml.SafeDumper,
            indent=self.indent,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
        return text.encode("utf-8")


class YamlDecoder:
    """PyYAML safe loader feeding msgspec conversion."""

    def __init__(self, *, forbid_unknown_fields: bool = True) -> None:
        self.forbid_unknown_fields = forbid_unknown_fields
        self._dec_hook = make_dec_hook(YAML)

    def decode(self, buf: bytes, target_type: type[T]) -> T:
        payload = yaml.safe_load(buf)
        if self.forbid_unknown_fields:
            reject_unknown_fields(payload, target_type)
        return msgspec.convert(payload, type=target_type, strict=True, dec_hook=self._dec_hook)


def yaml_equivalent(left: bytes, right: bytes) -> bool:
    """Return True when two YAML documents load to equal trees."""
    try:
        return trees_equal(yaml.safe_load(left), yaml.safe_load(right))
    except yaml.YAMLError:
        return False


def yaml_strategy(
    *,
    indent: int = DEFAULT_INDENT,
    order: Order = "deterministic",
    forbid_unknown_fields: bool = True,
) -> CodecStrategy:
    """Return the YAML codec strategy.

    Parameters
    ----------
    indent
        Block indentation width.
    order
        msgspec ordering policy for mappings and sets.
    forbid_unknown_fields
        Whether decoding rejects fields absent from the target shape.

    Returns
    -------
    CodecStrategy
        Configured YAML strategy.
    """
    return CodecStrategy(
        format=YAML,
        make_encoder=partial(YamlEncoder, indent=indent, order=order),
        make_decoder=partial(YamlDecoder, forbid_unknown_fields=forbid_unknown_fields),
        equivalent=yaml_equivalent,
    )


# -----------------------------------------------------------------------------
# XML
# -----------------------------------------------------------------------------


class XmlEncoder:
    """ElementTree encoder over msgspec builtins."""

    def __init__(self, *, indent: int = DEFAULT_INDENT, order: Order = "deterministic") -> None:
        self.indent = indent
        self.order = order

    def encode(self, value: object) -> bytes:
        payload = to_builtins(value, fmt=XML, order=self.order)
        element = xml_tree.build_element(xml_tree.root_tag(value), payload)
        return xml_tree.dump(element, indent=self.indent)


class XmlDecoder:
    """ElementTree decoder with lax msgspec conversion.

    Unknown elements are skipped unless ``forbid_unknown_fields`` is set.
    """

    def __init__(self, *, forbid_unknown_fields: bool = False) -> None:
        self.forbid_unknown_fields = forbid_unknown_fields
        self._dec_hook = make_dec_hook(XML)

    def decode(self, buf: bytes, target_type: type[T]) -> T:
        root = ET.fromstring(buf)
        payload = xml_tree.element_to_builtins(
            root,
            target_type,
            forbid_unknown_fields=self.forbid_unknown_fields,
        )
        return msgspec.convert(payload, type=target_type, strict=False, dec_hook=self._dec_hook)


def xml_equivalent(left: bytes, right: bytes) -> bool:
    """Return True when two XML documents share one canonical form."""
    try:
        return xml_tree.canonical(left) == xml_tree.canonical(right)
    except (ET.ParseError, UnicodeDecodeError):
        return False


def xml_strategy(
    *,
    indent: int = DEFAULT_INDENT,
    order: Order = "deterministic",
    forbid_unknown_fields: bool = False,
) -> CodecStrategy:
    """Return the XML codec strategy.

    Parameters
    ----------
    indent
        Pretty-print indentation width; zero writes a single line.
    order
        msgspec ordering policy for mappings and sets.
    forbid_unknown_fields
        Whether decoding rejects elements absent from the target shape.

    Returns
    -------
    CodecStrategy
        Configured XML strategy.
    """
    return CodecStrategy(
        format=XML,
        make_encoder=partial(XmlEncoder, indent=indent, order=order),
        make_decoder=partial(XmlDecoder, forbid_unknown_fields=forbid_unknown_fields),
        equivalent=xml_equivalent,
    )


def default_strategies() -> dict[str, CodecStrategy]:
    """Return the default strategy for every built-in format.

    Returns
    -------
    dict[str, CodecStrategy]
        Strategies keyed by format name.
    """
    return {
        JSON: json_strategy(),
        YAML: yaml_strategy(),
        XML: xml_strategy(),
    }


__all__ = [
    "DEFAULT_INDENT",
    "JSON",
    "XML",
    "YAML",
    "CodecStrategy",
    "Decoder",
    "Encoder",
    "JsonDecoder",
    "JsonEncoder",
    "XmlDecoder",
    "XmlEncoder",
    "YamlDecoder",
    "YamlEncoder",
    "default_strategies",
    "json_equivalent",
    "json_strategy",
    "trees_equal",
    "xml_equivalent",
    "xml_strategy",
    "yaml_equivalent",
    "yaml_strategy",
]
