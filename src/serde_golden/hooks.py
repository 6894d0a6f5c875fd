"""Custom marshal hooks and msgspec hook plumbing."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol, Self, TypeAlias, runtime_checkable

import msgspec

EncHook: TypeAlias = Callable[[object], object]
DecHook: TypeAlias = Callable[[Any, object], object]


@runtime_checkable
class GoldenMarshaler(Protocol):
    """Shape that hand-codes its own builtins representation per format.

    ``marshal_golden`` returns a builtins tree (dicts, lists, scalars) that
    the format's encoder writes as-is. ``unmarshal_golden`` receives the
    builtins tree decoded from the reference and rebuilds the shape.
    """

    def marshal_golden(self, fmt: str) -> object:
        """Return the builtins representation of ``self`` for ``fmt``."""
        ...

    @classmethod
    def unmarshal_golden(cls, fmt: str, payload: object) -> Self:
        """Rebuild an instance from a decoded builtins payload."""
        ...


def has_custom_marshaling(tp: object) -> bool:
    """Return True when a type implements the custom marshal hooks.

    Parameters
    ----------
    tp
        Candidate type.

    Returns
    -------
    bool
        True when both hook methods are present.
    """
    return callable(getattr(tp, "marshal_golden", None)) and callable(
        getattr(tp, "unmarshal_golden", None)
    )


def make_enc_hook(fmt: str) -> EncHook:
    """Return a msgspec ``enc_hook`` for one format.

    Parameters
    ----------
    fmt
        Format name passed through to custom hooks.

    Returns
    -------
    EncHook
        Hook converting unsupported objects into builtins.
    """

    def _enc_hook(obj: object) -> object:
        if has_custom_marshaling(type(obj)):
            return obj.marshal_golden(fmt)  # type: ignore[attr-defined]
        if isinstance(obj, Path):
            return obj.as_posix()
        msg = f"Encoding objects of type {type(obj).__qualname__} is unsupported"
        raise NotImplementedError(msg)

    return _enc_hook


def make_dec_hook(fmt: str) -> DecHook:
    """Return a msgspec ``dec_hook`` for one format.

    Parameters
    ----------
    fmt
        Format name passed through to custom hooks.

    Returns
    -------
    DecHook
        Hook rebuilding custom types from builtins.
    """

    def _dec_hook(type_hint: Any, obj: object) -> object:
        if has_custom_marshaling(type_hint):
            return type_hint.unmarshal_golden(fmt, obj)
        if type_hint is Path and isinstance(obj, str):
            return Path(obj)
        name = getattr(type_hint, "__qualname__", type_hint)
        msg = f"Decoding objects of type {name} is unsupported"
        raise NotImplementedError(msg)

    return _dec_hook


def to_builtins(obj: object, *, fmt: str, order: str | None = "deterministic") -> object:
    """Convert an object into a builtins tree using the format's hooks.

    Parameters
    ----------
    obj
        Object to convert.
    fmt
        Format name used by custom hooks.
    order
        msgspec ordering policy for mappings and sets.

    Returns
    -------
    object
        Builtins representation.
    """
    return msgspec.to_builtins(
        obj,
        str_keys=True,
        order=order,  # type: ignore[arg-type]
        enc_hook=make_enc_hook(fmt),
    )


__all__ = [
    "DecHook",
    "EncHook",
    "GoldenMarshaler",
    "has_custom_marshaling",
    "make_dec_hook",
    "make_enc_hook",
    "to_builtins",
]
