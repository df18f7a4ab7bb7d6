"""Discrete-time sequence operators with offline and streaming execution."""

from importlib import metadata

from .config import RunConfig, load_config, validate_config, validate_config_file
from .errors import (
    UNAVAILABLE,
    IndexOutOfRangeError,
    InvalidArgumentError,
    InvalidStateError,
    OutOfMemoryError,
    SeqOpsError,
    UnsupportedOperationError,
)
from .operators import OperatorKind, OperatorSpec
from .pipeline import run_binary, run_config, run_corr_window, run_finite, run_stream
from .samples import format_samples, ingest_samples, read_finite, read_two_sequences
from .service import create_app
from .streaming.capability import capability_table, is_streamable
from .streaming.correlation import CorrelationEngine
from .streaming.engine import StepEngine, stream_transform
from .streaming.service import StreamingService
from .transforms import apply_binary, apply_operator, rolling_correlation

try:
    __version__ = metadata.version("seqops")
except metadata.PackageNotFoundError:  # pragma: no cover - fallback for editable installs
    __version__ = "0.4.0"

__all__ = [
    "UNAVAILABLE",
    "SeqOpsError",
    "InvalidArgumentError",
    "OutOfMemoryError",
    "InvalidStateError",
    "IndexOutOfRangeError",
    "UnsupportedOperationError",
    "OperatorKind",
    "OperatorSpec",
    "apply_operator",
    "apply_binary",
    "rolling_correlation",
    "is_streamable",
    "capability_table",
    "StepEngine",
    "stream_transform",
    "CorrelationEngine",
    "StreamingService",
    "load_config",
    "validate_config",
    "validate_config_file",
    "RunConfig",
    "read_finite",
    "read_two_sequences",
    "ingest_samples",
    "format_samples",
    "run_finite",
    "run_stream",
    "run_corr_window",
    "run_binary",
    "run_config",
    "create_app",
    "__version__",
]
