"""FastAPI entrypoint exposing the tool catalog over HTTP."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import Body, FastAPI, HTTPException

from o2o_analyzer.agent.dispatcher import Dispatcher
from o2o_analyzer.config import AnalyzerConfig


def create_app(
    config: AnalyzerConfig | None = None,
    *,
    dispatcher: Dispatcher | None = None,
) -> FastAPI:
    config = config or AnalyzerConfig.from_env()
    dispatcher = dispatcher or Dispatcher.from_config(config)

    app = FastAPI(title="O2O Laravel Analyzer", version="2.0.0")
    app.state.dispatcher = dispatcher

    @app.get("/health")
    def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "base_path_configured": not config.is_placeholder,
            "tool_count": len(dispatcher.list_capabilities()),
            "trace_count": len(dispatcher.trace_store.list_recent(limit=1000)),
            **_route_cache_health(dispatcher),
        }

    @app.get("/tools")
    def tools() -> dict[str, Any]:
        return {
            "items": [descriptor.model_dump() for descriptor in dispatcher.list_capabilities()]
        }

    @app.post("/tools/{name}")
    def invoke(name: str, args: dict[str, Any] | None = Body(default=None)) -> dict[str, Any]:
        return asdict(dispatcher.invoke(name, args or {}))

    @app.get("/traces")
    def traces(limit: int = 20) -> dict[str, Any]:
        records = [asdict(record) for record in dispatcher.trace_store.list_recent(limit=limit)]
        return {"items": records}

    @app.get("/traces/{trace_id}")
    def trace_detail(trace_id: int) -> dict[str, Any]:
        try:
            record = dispatcher.trace_store.get(trace_id)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return asdict(record)

    @app.get("/metrics")
    def metrics() -> dict[str, Any]:
        return dispatcher.trace_store.summary()

    return app


def _route_cache_health(dispatcher: Dispatcher) -> dict[str, Any]:
    # Age stays None until the first route lookup fills the cache.
    if dispatcher.engine is None:
        return {"route_cache_age_ms": None, "route_cache_fresh": False}
    cache = dispatcher.engine.route_cache
    return {"route_cache_age_ms": cache.age_ms(), "route_cache_fresh": cache.is_fresh()}


app = create_app()
