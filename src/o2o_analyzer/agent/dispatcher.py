"""Transport-facing boundary: list tools, invoke one, never raise."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from o2o_analyzer.agent.registry import ToolDescriptor, ToolRegistry
from o2o_analyzer.agent.tools import register_builtin_tools
from o2o_analyzer.config import AnalyzerConfig
from o2o_analyzer.errors import AnalyzerError, InternalError
from o2o_analyzer.obs.tracing import Timer, TraceStore
from o2o_analyzer.query.engine import QueryEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToolResult:
    """Outcome of one invocation as seen by a transport.

    `error_kind` keeps the failure category (`usage`, `not_found`,
    `collaborator`, `internal`) for callers that need more than the flag.
    """

    text: str
    is_error: bool = False
    error_kind: str | None = None


class Dispatcher:
    def __init__(
        self,
        registry: ToolRegistry,
        *,
        trace_store: TraceStore | None = None,
        engine: QueryEngine | None = None,
    ) -> None:
        self.registry = registry
        self.engine = engine
        self.trace_store = trace_store or TraceStore()
        self.registry.set_observer(self.trace_store.record)
        self._descriptors = registry.descriptors()

    @classmethod
    def from_config(
        cls,
        config: AnalyzerConfig,
        *,
        engine: QueryEngine | None = None,
        trace_store: TraceStore | None = None,
    ) -> "Dispatcher":
        engine = engine or QueryEngine(config)
        registry = ToolRegistry()
        register_builtin_tools(registry, engine)
        return cls(registry, trace_store=trace_store, engine=engine)

    def list_capabilities(self) -> list[ToolDescriptor]:
        return list(self._descriptors)

    def invoke(self, name: str, args: dict[str, Any] | None = None) -> ToolResult:
        """Run one tool and fold any failure into an error result."""

        with Timer() as timer:
            try:
                text = self.registry.execute(name, dict(args or {}))
            except AnalyzerError as exc:
                logger.warning("tool %s failed (%s): %s", name, exc.kind, exc)
                return _error_result(name, exc)
            except Exception as exc:
                logger.exception("tool %s raised unexpectedly", name)
                wrapped = InternalError(str(exc) or exc.__class__.__name__)
                return _error_result(name, wrapped)
        logger.info("tool %s completed in %.1f ms", name, timer.elapsed_ms)
        return ToolResult(text=text)


def _error_result(name: str, exc: AnalyzerError) -> ToolResult:
    return ToolResult(
        text=f"Error executing {name}: {exc}",
        is_error=True,
        error_kind=exc.kind,
    )
