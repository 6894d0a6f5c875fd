"""Unknown-field rejection for decoded builtins trees.

msgspec only rejects unknown fields on structs declared with
``forbid_unknown_fields=True`` and never on dataclasses or TypedDicts. The
golden decoders want the stricter behavior regardless of how the target shape
was declared, so the check walks the builtins tree next to
``msgspec.inspect.type_info`` before conversion.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

import msgspec
from msgspec import inspect as mi

_FieldedType = mi.StructType | mi.DataclassType | mi.TypedDictType
_SequenceType = mi.ListType | mi.VarTupleType | mi.SetType | mi.FrozenSetType


def reject_unknown_fields(payload: object, target_type: object) -> None:
    """Raise when ``payload`` carries fields absent from ``target_type``.

    Parameters
    ----------
    payload
        Builtins tree decoded from a reference artifact.
    target_type
        Type the payload will be converted into.

    Raises
    ------
    msgspec.ValidationError
        Raised on the first unknown field, with its path in the payload.
    """
    _check(payload, mi.type_info(target_type), "$")


def _unwrap(info: mi.Type) -> mi.Type:
    while isinstance(info, mi.Metadata):
        info = info.type
    return info


def _check(payload: object, info: mi.Type, path: str) -> None:
    info = _unwrap(info)
    if isinstance(info, mi.UnionType):
        _check_union(payload, info, path)
        return
    if isinstance(info, _FieldedType):
        _check_fields(payload, info, path)
        return
    if isinstance(info, (mi.NamedTupleType, mi.TupleType)):
        _check_tuple(payload, info, path)
        return
    if isinstance(info, _SequenceType):
        if isinstance(payload, Sequence) and not isinstance(payload, str):
            for index, item in enumerate(payload):
                _check(item, info.item_type, f"{path}[{index}]")
        return
    if isinstance(info, mi.DictType) and isinstance(payload, Mapping):
        for key, value in payload.items():
            _check(value, info.value_type, f"{path}[{key!r}]")


def _check_fields(payload: object, info: _FieldedType, path: str) -> None:
    if isinstance(info, mi.StructType) and info.array_like:
        return
    if not isinstance(payload, Mapping):
        return
    fields = {field.encode_name: field for field in info.fields}
    tag_field = info.tag_field if isinstance(info, mi.StructType) else None
    for key, value in payload.items():
        field = fields.get(key)
        if field is None:
            if key == tag_field:
                continue
            msg = f"Object contains unknown field `{key}` - at `{path}`"
            raise msgspec.ValidationError(msg)
        _check(value, field.type, f"{path}.{key}")


def _check_tuple(payload: object, info: mi.NamedTupleType | mi.TupleType, path: str) -> None:
    if not isinstance(payload, Sequence) or isinstance(payload, str):
        return
    if isinstance(info, mi.NamedTupleType):
        item_types = tuple(field.type for field in info.fields)
    else:
        item_types = info.item_types
    for index, (item, item_type) in enumerate(zip(payload, item_types, strict=False)):
        _check(item, item_type, f"{path}[{index}]")


def _check_union(payload: object, info: mi.UnionType, path: str) -> None:
    candidates = [
        member
        for member in (_unwrap(member) for member in info.types)
        if _accepts(payload, member)
    ]
    # Ambiguous unions are left to msgspec's own validation.
    if len(candidates) == 1:
        _check(payload, candidates[0], path)


def _accepts(payload: object, info: mi.Type) -> bool:
    if isinstance(info, mi.StructType) and info.tag_field is not None:
        return isinstance(payload, Mapping) and payload.get(info.tag_field) == info.tag
    if isinstance(info, _FieldedType | mi.DictType):
        return isinstance(payload, Mapping)
    if isinstance(info, _SequenceType | mi.TupleType | mi.NamedTupleType):
        return isinstance(payload, Sequence) and not isinstance(payload, str)
    return False


__all__ = ["reject_unknown_fields"]
