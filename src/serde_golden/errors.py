"""Error taxonomy for golden round-trip assertions."""

from __future__ import annotations

from typing import Literal

import msgspec

FailureKind = Literal["serialized", "decoded"]


class GoldenError(Exception):
    """Base error for golden round-trip failures."""


class EncodeFailure(GoldenError, TypeError):
    """Encoding a value under test failed."""


class DecodeFailure(GoldenError, ValueError):
    """Decoding a reference artifact into the expected shape failed."""


class ReferenceNotFoundError(GoldenError, LookupError):
    """No reference artifact exists and update mode is off."""


class GoldenUsageError(GoldenError, TypeError):
    """The caller broke the verifier's contract."""


class Failure(msgspec.Struct, frozen=True, kw_only=True):
    """Single recorded assertion failure."""

    kind: FailureKind
    artifact: str
    format: str
    message: str

    def render(self) -> str:
        """Return a human readable block for this failure.

        Returns
        -------
        str
            Header line followed by the failure message.
        """
        return f"[{self.format}] {self.artifact}: {self.message}"


def serialized_mismatch(*, artifact: str, fmt: str, message: str) -> Failure:
    """Return a failure for a serialized-form mismatch.

    Returns
    -------
    Failure
        Failure record of kind ``serialized``.
    """
    return Failure(kind="serialized", artifact=artifact, format=fmt, message=message)


def decoded_mismatch(*, artifact: str, fmt: str, message: str) -> Failure:
    """Return a failure for a decoded-object mismatch.

    Returns
    -------
    Failure
        Failure record of kind ``decoded``.
    """
    return Failure(kind="decoded", artifact=artifact, format=fmt, message=message)


class GoldenMismatchError(GoldenError, AssertionError):
    """One or more recorded round-trip assertions failed."""

    def __init__(self, failures: tuple[Failure, ...]) -> None:
        self.failures = failures
        count = len(failures)
        noun = "assertion" if count == 1 else "assertions"
        body = "\n\n".join(failure.render() for failure in failures)
        super().__init__(f"{count} golden {noun} failed:\n\n{body}")


__all__ = [
    "DecodeFailure",
    "EncodeFailure",
    "Failure",
    "FailureKind",
    "GoldenError",
    "GoldenMismatchError",
    "GoldenUsageError",
    "ReferenceNotFoundError",
    "decoded_mismatch",
    "serialized_mismatch",
]
