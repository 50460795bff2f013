"""`php artisan` collaborators: the route table and table descriptions."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from o2o_analyzer.config import AnalyzerConfig
from o2o_analyzer.errors import CollaboratorError
from o2o_analyzer.external.process import ProcessOutput, run_process
from o2o_analyzer.types import RouteRecord

logger = logging.getLogger(__name__)

Runner = Callable[..., ProcessOutput]


def parse_routes(raw: str) -> list[RouteRecord]:
    """Parse `route:list --json` output into route records."""

    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CollaboratorError(f"route:list returned malformed JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise CollaboratorError("route:list did not return a JSON array")
    return [RouteRecord.from_payload(item) for item in payload if isinstance(item, dict)]


class ArtisanClient:
    """Runs artisan commands inside the configured checkout."""

    def __init__(self, config: AnalyzerConfig, *, runner: Runner = run_process) -> None:
        self.config = config
        self._runner = runner

    def _artisan(self, *args: str, timeout: float) -> ProcessOutput:
        cwd: Path = self.config.require_base_path()
        return self._runner([self.config.php_binary, "artisan", *args], cwd=cwd, timeout=timeout)

    def list_routes(self) -> list[RouteRecord]:
        output = self._artisan(
            "route:list", "--json", timeout=self.config.route_timeout_seconds
        )
        if not output.ok:
            detail = output.stderr.strip() or output.stdout.strip()
            raise CollaboratorError(
                f"route:list exited with status {output.returncode}: {detail}"
            )
        routes = parse_routes(output.stdout)
        logger.info("loaded %d routes from artisan", len(routes))
        return routes

    def describe_table(self, table_name: str) -> list[dict[str, Any]]:
        """Return `DESCRIBE <table>` rows as reported by the database."""

        statement = f"echo json_encode(DB::select('DESCRIBE {table_name}'));"
        output = self._artisan(
            "tinker", f"--execute={statement}", timeout=self.config.schema_timeout_seconds
        )
        if not output.ok:
            detail = output.stderr.strip() or output.stdout.strip()
            raise CollaboratorError(f"tinker exited with status {output.returncode}: {detail}")
        try:
            rows = json.loads(output.stdout.strip())
        except json.JSONDecodeError as exc:
            raise CollaboratorError(f"tinker returned malformed JSON: {exc}") from exc
        if not isinstance(rows, list):
            raise CollaboratorError("tinker did not return a list of columns")
        return [row for row in rows if isinstance(row, dict)]
