"""Bounded subprocess invocation for the PHP tooling collaborators."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from o2o_analyzer.errors import CollaboratorError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ProcessOutput:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_process(args: list[str], *, cwd: Path, timeout: float) -> ProcessOutput:
    """Run `args` in `cwd` and capture output.

    A non-zero exit is returned to the caller as-is; only a missing executable
    or an exceeded timeout raise `CollaboratorError`.
    """

    logger.debug("running %s (cwd=%s, timeout=%ss)", " ".join(args), cwd, timeout)
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        logger.warning("%s timed out after %ss", args[0], timeout)
        raise CollaboratorError(f"'{' '.join(args)}' timed out after {timeout:g}s") from exc
    except OSError as exc:
        raise CollaboratorError(f"Could not run '{args[0]}': {exc}") from exc

    return ProcessOutput(
        returncode=result.returncode,
        stdout=result.stdout,
        stderr=result.stderr,
    )
