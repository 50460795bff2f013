"""Glob-based file discovery rooted at the configured Laravel checkout."""

from __future__ import annotations

import glob
import logging
from collections.abc import Iterable
from pathlib import Path

import pathspec

from o2o_analyzer.catalog.classifier import to_record
from o2o_analyzer.config import DEFAULT_EXCLUDES, AnalyzerConfig
from o2o_analyzer.types import FileRecord

logger = logging.getLogger(__name__)


def escape(fragment: str) -> str:
    """Escape user input before splicing it into a glob pattern."""

    return glob.escape(fragment)


class PathCatalog:
    """Finds files by glob pattern and reports them relative to the checkout.

    Nothing is cached: every call walks the filesystem again, so results always
    reflect the current working tree.
    """

    def __init__(self, config: AnalyzerConfig) -> None:
        self.config = config

    @property
    def base_path(self) -> Path:
        return self.config.require_base_path()

    def resolve(self, *parts: str) -> Path:
        return self.base_path.joinpath(*parts)

    def find(
        self,
        pattern: str,
        *,
        root: Path | str | None = None,
        exclude: Iterable[str] = DEFAULT_EXCLUDES,
    ) -> list[Path]:
        """Return sorted absolute file paths under `root` matching `pattern`.

        `pattern` is relative to `root` (the checkout when omitted) and may use
        `**` and bracket classes. `exclude` holds gitwildmatch patterns that are
        tested against the path relative to `root`.
        """

        search_root = Path(root) if root is not None else self.base_path
        if not search_root.is_dir():
            return []

        spec = pathspec.PathSpec.from_lines("gitwildmatch", list(exclude))
        found: list[Path] = []
        for relative in glob.glob(pattern, root_dir=search_root, recursive=True):
            if spec.match_file(relative):
                continue
            candidate = search_root / relative
            if candidate.is_file():
                found.append(candidate)
        found.sort()
        logger.debug("glob %s under %s matched %d files", pattern, search_root, len(found))
        return found

    def relative(self, path: Path | str) -> str:
        absolute = Path(path)
        try:
            return absolute.relative_to(self.base_path).as_posix()
        except ValueError:
            return absolute.as_posix()

    def relative_all(self, paths: Iterable[Path]) -> list[str]:
        return [self.relative(path) for path in paths]

    def records(
        self,
        pattern: str,
        *,
        root: Path | str | None = None,
        exclude: Iterable[str] = DEFAULT_EXCLUDES,
    ) -> list[FileRecord]:
        return [
            to_record(path, self.relative(path))
            for path in self.find(pattern, root=root, exclude=exclude)
        ]

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8", errors="replace")
