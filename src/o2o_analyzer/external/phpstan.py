"""PHPStan pass-through."""

from __future__ import annotations

from collections.abc import Callable

from o2o_analyzer.config import AnalyzerConfig
from o2o_analyzer.external.process import ProcessOutput, run_process

PHPSTAN_BINARY = "./vendor/bin/phpstan"


class PhpstanRunner:
    def __init__(
        self,
        config: AnalyzerConfig,
        *,
        runner: Callable[..., ProcessOutput] = run_process,
    ) -> None:
        self.config = config
        self._runner = runner

    def analyse(self, relative_path: str) -> ProcessOutput:
        # Findings exit non-zero; that is still a successful analysis.
        return self._runner(
            [PHPSTAN_BINARY, "analyse", relative_path],
            cwd=self.config.require_base_path(),
            timeout=self.config.phpstan_timeout_seconds,
        )
