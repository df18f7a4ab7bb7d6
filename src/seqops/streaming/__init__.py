from .buffering import RingBuffer, SlidingWindow
from .capability import CAUSAL_BOUNDED, capability_table, is_streamable, streamable_operators
from .correlation import CorrelationEngine, correlate_windows, stream_correlation
from .engine import EngineStatus, StepEngine, StepResult, stream_transform
from .service import StreamingService, StreamSummary
from .sources import PairSource, SimulatedSource, TokenSource, ValuesSource, build_source
from .state import OperatorState, build_state

__all__ = [
    "RingBuffer",
    "SlidingWindow",
    "CAUSAL_BOUNDED",
    "capability_table",
    "is_streamable",
    "streamable_operators",
    "CorrelationEngine",
    "correlate_windows",
    "stream_correlation",
    "EngineStatus",
    "StepEngine",
    "StepResult",
    "stream_transform",
    "StreamingService",
    "StreamSummary",
    "PairSource",
    "SimulatedSource",
    "TokenSource",
    "ValuesSource",
    "build_source",
    "OperatorState",
    "build_state",
]
