"""Golden round-trip verifier.

Each assertion runs the same protocol for every format:

1. encode the value and normalize its line breaks
2. in update mode, record the encoding as the new reference
3. read and normalize the reference
4. compare encoding and reference with the format's equivalence check
5. decode the reference into a fresh instance of the expected shape
6. compare the decoded instance with the expected value

Encode, decode, missing-reference and usage errors raise immediately. The two
comparisons only record failures, so both always run before the call reports.
"""

from __future__ import annotations

import difflib
import logging
import pprint
import types
import xml.etree.ElementTree as ET
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Self, TypeAlias

import msgspec
import yaml
from msgspec import inspect as mi

from serde_golden.codecs import JSON, XML, YAML, CodecStrategy, default_strategies
from serde_golden.errors import (
    DecodeFailure,
    EncodeFailure,
    Failure,
    GoldenMismatchError,
    GoldenUsageError,
    ReferenceNotFoundError,
    decoded_mismatch,
    serialized_mismatch,
)
from serde_golden.env import UPDATE_ENV_VAR
from serde_golden.hooks import has_custom_marshaling
from serde_golden.normalize import normalize_line_breaks
from serde_golden.store import ArtifactName, artifact_name, join_scope

if TYPE_CHECKING:
    from types import TracebackType

    from serde_golden.store import ReferenceStore

_LOGGER = logging.getLogger(__name__)

_ENCODE_ERRORS = (msgspec.EncodeError, yaml.YAMLError, TypeError, ValueError)
_DECODE_ERRORS = (msgspec.DecodeError, yaml.YAMLError, ET.ParseError, TypeError, ValueError)
_NOT_SHAPES = (type, types.ModuleType, types.FunctionType, types.BuiltinFunctionType)


class _Same:
    def __repr__(self) -> str:
        return "SAME"


SAME: Any = _Same()


@dataclass(frozen=True)
class GoldenConfig:
    """Immutable verifier configuration."""

    strategies: Mapping[str, CodecStrategy] = field(default_factory=default_strategies)
    normalize_line_breaks: bool = True
    artifact_prefix: str = "golden"

    def __post_init__(self) -> None:
        object.__setattr__(self, "strategies", types.MappingProxyType(dict(self.strategies)))

    def strategy(self, fmt: str) -> CodecStrategy:
        """Return the codec strategy registered for ``fmt``.

        Raises
        ------
        GoldenUsageError
            Raised when no strategy is registered for the format.
        """
        strategy = self.strategies.get(fmt)
        if strategy is None:
            known = ", ".join(sorted(self.strategies))
            msg = f"Unknown golden format {fmt!r}; configured formats: {known}."
            raise GoldenUsageError(msg)
        return strategy

    def with_strategy(self, strategy: CodecStrategy) -> GoldenConfig:
        """Return a copy with ``strategy`` registered under its format.

        Returns
        -------
        GoldenConfig
            New configuration; ``self`` is unchanged.
        """
        strategies = dict(self.strategies)
        strategies[strategy.format] = strategy
        return replace(self, strategies=strategies)


DEFAULT_CONFIG = GoldenConfig()


class RoundTripReport(msgspec.Struct, frozen=True, kw_only=True):
    """Outcome of one round-trip assertion."""

    artifact: ArtifactName
    format: str
    encoded: bytes
    reference: bytes
    decoded: Any
    recorded: bool
    failures: tuple[Failure, ...] = ()

    @property
    def ok(self) -> bool:
        """Return True when no comparison failed."""
        return not self.failures


Recorder: TypeAlias = Callable[[Failure], None]


class RoundTripVerifier:
    """Assert that values round-trip through golden reference artifacts."""

    def __init__(self, store: ReferenceStore, config: GoldenConfig = DEFAULT_CONFIG) -> None:
        self.store = store
        self.config = config

    def case(self, scope: str) -> GoldenCase:
        """Return a failure-accumulating case bound to ``scope``."""
        return GoldenCase(self, scope)

    def marshaling(
        self,
        scope: str,
        fmt: str,
        value: object,
        *,
        target_type: Any = None,
        recorder: Recorder | None = None,
    ) -> RoundTripReport:
        """Assert ``value`` survives a round trip through the reference unchanged.

        Returns
        -------
        RoundTripReport
            Outcome of the assertion.
        """
        return self.marshaling_p(
            scope,
            fmt,
            value,
            SAME,
            target_type=target_type,
            recorder=recorder,
        )

    def marshaling_p(
        self,
        scope: str,
        fmt: str,
        value: object,
        expected: object,
        *,
        target_type: Any = None,
        recorder: Recorder | None = None,
    ) -> RoundTripReport:
        """Assert ``value`` encodes to the reference and the reference decodes to ``expected``.

        Parameters
        ----------
        scope
            Hierarchical identity of the calling test.
        fmt
            Format name, e.g. ``json``.
        value
            Value to encode.
        expected
            Value the reference must decode to. ``SAME`` means ``value``.
        target_type
            Decode target; defaults to ``type(expected)``.
        recorder
            Callback receiving comparison failures. Without one, failures
            raise ``GoldenMismatchError`` once both comparisons ran.

        Returns
        -------
        RoundTripReport
            Outcome of the assertion.

        Raises
        ------
        GoldenMismatchError
            Raised for comparison failures when no recorder is given.
        """
        if expected is SAME:
            expected = value
        strategy = self.config.strategy(fmt)
        name = artifact_name(scope, fmt, prefix=self.config.artifact_prefix)
        failures: list[Failure] = []

        encoded = self._normalize(self._encode(strategy, value))
        recorded = self.store.is_update_mode()
        if recorded:
            _LOGGER.info("Updating golden reference %s", name)
            self.store.write(name, encoded)

        reference = self._normalize(self._read(name))
        if not strategy.equivalent(reference, encoded):
            failures.append(
                serialized_mismatch(
                    artifact=str(name),
                    fmt=fmt,
                    message=_serialized_message(reference, encoded),
                )
            )

        target = _decode_target(expected, target_type)
        decoded = self._decode(strategy, reference, target, name)
        if decoded != expected:
            failures.append(
                decoded_mismatch(
                    artifact=str(name),
                    fmt=fmt,
                    message=_decoded_message(expected, decoded),
                )
            )

        report = RoundTripReport(
            artifact=name,
            format=fmt,
            encoded=encoded,
            reference=reference,
            decoded=decoded,
            recorded=recorded,
            failures=tuple(failures),
        )
        if failures:
            if recorder is None:
                raise GoldenMismatchError(report.failures)
            for failure in failures:
                recorder(failure)
        return report

    def json_marshaling(self, scope: str, value: object, **kwargs: Any) -> RoundTripReport:
        """Assert ``value`` round-trips through its JSON reference."""
        return self.marshaling(scope, JSON, value, **kwargs)

    def json_marshaling_p(
        self, scope: str, value: object, expected: object, **kwargs: Any
    ) -> RoundTripReport:
        """Assert ``value`` encodes to the JSON reference, which decodes to ``expected``."""
        return self.marshaling_p(scope, JSON, value, expected, **kwargs)

    def yaml_marshaling(self, scope: str, value: object, **kwargs: Any) -> RoundTripReport:
        """Assert ``value`` round-trips through its YAML reference."""
        return self.marshaling(scope, YAML, value, **kwargs)

    def yaml_marshaling_p(
        self, scope: str, value: object, expected: object, **kwargs: Any
    ) -> RoundTripReport:
        """Assert ``value`` encodes to the YAML reference, which decodes to ``expected``."""
        return self.marshaling_p(scope, YAML, value, expected, **kwargs)

    def xml_marshaling(self, scope: str, value: object, **kwargs: Any) -> RoundTripReport:
        """Assert ``value`` round-trips through its XML reference."""
        return self.marshaling(scope, XML, value, **kwargs)

    def xml_marshaling_p(
        self, scope: str, value: object, expected: object, **kwargs: Any
    ) -> RoundTripReport:
        """Assert ``value`` encodes to the XML reference, which decodes to ``expected``."""
        return self.marshaling_p(scope, XML, value, expected, **kwargs)

    def _normalize(self, data: bytes) -> bytes:
        if self.config.normalize_line_breaks:
            return normalize_line_breaks(data)
        return data

    def _encode(self, strategy: CodecStrategy, value: object) -> bytes:
        try:
            encoded = strategy.make_encoder().encode(value)
        except _ENCODE_ERRORS as exc:
            msg = (
                f"Failed to {strategy.format.upper()} marshal "
                f"{_shape_name(type(value))}: {value!r}: {exc}"
            )
            raise EncodeFailure(msg) from exc
        _LOGGER.debug(
            "Encoded %s as %d %s bytes",
            _shape_name(type(value)),
            len(encoded),
            strategy.format,
        )
        return encoded

    def _read(self, name: ArtifactName) -> bytes:
        if not self.store.exists(name):
            msg = (
                f"No reference artifact found for {name}; "
                f"run in update mode ({UPDATE_ENV_VAR}=1) to create it."
            )
            raise ReferenceNotFoundError(msg)
        return self.store.read(name)

    def _decode(
        self,
        strategy: CodecStrategy,
        reference: bytes,
        target: Any,
        name: ArtifactName,
    ) -> object:
        try:
            decoded = strategy.make_decoder().decode(reference, target)
        except _DECODE_ERRORS as exc:
            msg = (
                f"Failed to {strategy.format.upper()} unmarshal "
                f"{_shape_name(target)} from {name}: {exc}"
            )
            raise DecodeFailure(msg) from exc
        _LOGGER.debug("Decoded %s from %s", _shape_name(target), name)
        return decoded


class GoldenCase:
    """Round-trip assertions bound to one scope that accumulate failures.

    Comparison failures are collected instead of raised so every assertion
    in a test body runs. Leaving the ``with`` block, or calling ``check``,
    raises ``GoldenMismatchError`` with everything collected.
    """

    def __init__(
        self,
        verifier: RoundTripVerifier,
        scope: str,
        failures: list[Failure] | None = None,
    ) -> None:
        self.verifier = verifier
        self.scope = join_scope(scope)
        self.failures: list[Failure] = [] if failures is None else failures

    def subcase(self, name: str) -> GoldenCase:
        """Return a nested case sharing this case's failures."""
        return GoldenCase(self.verifier, join_scope(self.scope, name), self.failures)

    def marshaling(self, fmt: str, value: object, **kwargs: Any) -> RoundTripReport:
        """Assert ``value`` round-trips through its ``fmt`` reference in this scope.

        Returns
        -------
        RoundTripReport
            Outcome of the assertion; failures are collected, not raised.
        """
        return self.verifier.marshaling(
            self.scope, fmt, value, recorder=self.failures.append, **kwargs
        )

    def marshaling_p(
        self, fmt: str, value: object, expected: object, **kwargs: Any
    ) -> RoundTripReport:
        """Assert ``value`` encodes to the ``fmt`` reference, which decodes to ``expected``.

        Returns
        -------
        RoundTripReport
            Outcome of the assertion; failures are collected, not raised.
        """
        return self.verifier.marshaling_p(
            self.scope, fmt, value, expected, recorder=self.failures.append, **kwargs
        )

    def json_marshaling(self, value: object, **kwargs: Any) -> RoundTripReport:
        """Collect a JSON round-trip assertion."""
        return self.marshaling(JSON, value, **kwargs)

    def json_marshaling_p(self, value: object, expected: object, **kwargs: Any) -> RoundTripReport:
        """Collect a JSON assertion against a separate expected value."""
        return self.marshaling_p(JSON, value, expected, **kwargs)

    def yaml_marshaling(self, value: object, **kwargs: Any) -> RoundTripReport:
        """Collect a YAML round-trip assertion."""
        return self.marshaling(YAML, value, **kwargs)

    def yaml_marshaling_p(self, value: object, expected: object, **kwargs: Any) -> RoundTripReport:
        """Collect a YAML assertion against a separate expected value."""
        return self.marshaling_p(YAML, value, expected, **kwargs)

    def xml_marshaling(self, value: object, **kwargs: Any) -> RoundTripReport:
        """Collect an XML round-trip assertion."""
        return self.marshaling(XML, value, **kwargs)

    def xml_marshaling_p(self, value: object, expected: object, **kwargs: Any) -> RoundTripReport:
        """Collect an XML assertion against a separate expected value."""
        return self.marshaling_p(XML, value, expected, **kwargs)

    def check(self) -> None:
        """Raise when any assertion in this case failed.

        Raises
        ------
        GoldenMismatchError
            Raised with every collected failure.
        """
        if self.failures:
            raise GoldenMismatchError(tuple(self.failures))

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.check()


def _decode_target(expected: object, target_type: Any) -> Any:
    if target_type is not None:
        return target_type
    if expected is None or isinstance(expected, _NOT_SHAPES):
        msg = (
            "Only values with a decodable shape can be asserted; "
            f"{_shape_name(type(expected))} is not one."
        )
        raise GoldenUsageError(msg)
    target = type(expected)
    if has_custom_marshaling(target):
        return target
    try:
        info = mi.type_info(target)
    except TypeError as exc:
        msg = f"{_shape_name(target)} is not a decodable shape: {exc}"
        raise GoldenUsageError(msg) from exc
    if isinstance(info, mi.CustomType):
        msg = (
            f"{_shape_name(target)} is not a decodable shape; declare it as a "
            "msgspec.Struct or dataclass, or implement marshal_golden/unmarshal_golden."
        )
        raise GoldenUsageError(msg)
    return target


def _shape_name(tp: object) -> str:
    if isinstance(tp, type):
        return f"{tp.__module__}.{tp.__qualname__}"
    return repr(tp)


def _text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _serialized_message(reference: bytes, encoded: bytes) -> str:
    diff = difflib.unified_diff(
        _text(reference).splitlines(keepends=True),
        _text(encoded).splitlines(keepends=True),
        fromfile="reference",
        tofile="encoded",
    )
    return "encoded value does not match reference artifact\n" + "".join(diff)


def _decoded_message(expected: object, decoded: object) -> str:
    return (
        "unmarshaling from golden file does not match expected object\n"
        f"expected: {pprint.pformat(expected)}\n"
        f"actual:   {pprint.pformat(decoded)}"
    )


__all__ = [
    "DEFAULT_CONFIG",
    "SAME",
    "GoldenCase",
    "GoldenConfig",
    "Recorder",
    "RoundTripReport",
    "RoundTripVerifier",
]
