"""FastAPI service exposing the offline and streaming operators."""

from __future__ import annotations

from importlib import metadata
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException

from .config import validate_config
from .errors import SeqOpsError, is_unavailable
from .operators import OperatorSpec
from .pipeline import run_binary, run_corr_window, run_finite, run_stream
from .streaming.capability import capability_table, is_streamable

try:
    __version__ = metadata.version("seqops")
except metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = "0.4.0"


def _spec(operator: str, amount: int, fill: float) -> OperatorSpec:
    try:
        return OperatorSpec.from_mapping({"operator": operator, "amount": amount, "fill": fill})
    except SeqOpsError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _json_floats(values: List[float]) -> List[Optional[float]]:
    return [None if is_unavailable(v) else v for v in values]


def create_app() -> FastAPI:
    app = FastAPI(title="seqops API", version=__version__)

    @app.get("/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/version")
    def version() -> Dict[str, str]:
        return {"version": __version__}

    @app.get("/capability")
    def capability() -> Dict[str, Any]:
        return {"operators": capability_table()}

    @app.post("/validate")
    def validate(config: Dict[str, Any]) -> Dict[str, Any]:
        return validate_config(config).as_dict()

    @app.post("/transform")
    def transform(
        operator: str = Body(...),
        samples: List[float] = Body(...),
        amount: int = Body(0),
        fill: float = Body(0.0),
    ) -> Dict[str, Any]:
        spec = _spec(operator, amount, fill)
        try:
            return run_finite(spec, samples)
        except SeqOpsError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    @app.post("/stream")
    def stream(
        operator: str = Body(...),
        samples: List[float] = Body(...),
        amount: int = Body(0),
        fill: float = Body(0.0),
        unbounded: bool = Body(True),
    ) -> Dict[str, Any]:
        spec = _spec(operator, amount, fill)
        if not is_streamable(spec.kind, unbounded):
            return {**spec.describe(), "online": False, "outputs": None}
        try:
            return run_stream(spec, {"type": "values", "values": samples}, unbounded=unbounded)
        except SeqOpsError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    @app.post("/correlate")
    def correlate(
        a: List[float] = Body(...),
        b: List[float] = Body(...),
        window: int = Body(...),
        min_samples: Optional[int] = Body(None),
    ) -> Dict[str, Any]:
        if len(a) != len(b):
            raise HTTPException(status_code=400, detail=f"series lengths differ ({len(a)} and {len(b)})")
        try:
            result = run_corr_window(zip(a, b), window, min_samples=min_samples)
        except SeqOpsError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        result["coefficients"] = _json_floats(result["coefficients"])
        return result

    @app.post("/binary")
    def binary(
        operation: str = Body(...),
        a: List[float] = Body(...),
        b: List[float] = Body(...),
    ) -> Dict[str, Any]:
        try:
            return run_binary(operation, a, b)
        except SeqOpsError as exc:
            raise HTTPException(status_code=400, detail=str(exc))

    return app
