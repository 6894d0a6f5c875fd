"""Golden-file round-trip assertions for serialized values.

Each assertion encodes a value, compares the encoding with a recorded
reference artifact, then decodes the reference and compares the result with
the expected value. References are re-recorded when the store reports update
mode (``GOLDEN_UPDATE=1``).
"""

from serde_golden.codecs import (
    JSON,
    XML,
    YAML,
    CodecStrategy,
    default_strategies,
    json_strategy,
    xml_strategy,
    yaml_strategy,
)
from serde_golden.env import UPDATE_ENV_VAR, truthy, update_mode_from_env
from serde_golden.errors import (
    DecodeFailure,
    EncodeFailure,
    Failure,
    GoldenError,
    GoldenMismatchError,
    GoldenUsageError,
    ReferenceNotFoundError,
)
from serde_golden.hooks import GoldenMarshaler
from serde_golden.normalize import normalize_line_breaks
from serde_golden.store import (
    ArtifactName,
    InMemoryReferenceStore,
    ReferenceStore,
    artifact_name,
    join_scope,
)
from serde_golden.verifier import (
    DEFAULT_CONFIG,
    SAME,
    GoldenCase,
    GoldenConfig,
    RoundTripReport,
    RoundTripVerifier,
)

__all__ = [
    "DEFAULT_CONFIG",
    "JSON",
    "SAME",
    "UPDATE_ENV_VAR",
    "XML",
    "YAML",
    "ArtifactName",
    "CodecStrategy",
    "DecodeFailure",
    "EncodeFailure",
    "Failure",
    "GoldenCase",
    "GoldenConfig",
    "GoldenError",
    "GoldenMarshaler",
    "GoldenMismatchError",
    "GoldenUsageError",
    "InMemoryReferenceStore",
    "ReferenceNotFoundError",
    "ReferenceStore",
    "RoundTripReport",
    "RoundTripVerifier",
    "artifact_name",
    "default_strategies",
    "join_scope",
    "json_strategy",
    "normalize_line_breaks",
    "truthy",
    "update_mode_from_env",
    "xml_strategy",
    "yaml_strategy",
]
