"""Naming-convention classification of O2O source files.

Every rule is a plain substring (or path segment) test against the path
relative to the checkout root. Rules are evaluated independently: a file such
as `Services/InvoiceServiceTest.php` satisfies both the service and the test
rule and shows up in both buckets of a listing. `classify()` only picks the
first matching rule for the single `FileRecord.category` attribute.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from pathlib import Path, PurePosixPath

from o2o_analyzer.types import FileCategory, FileRecord, extract_domain

COMPONENT_EXTENSION = ".vue"


def _stem(path: str) -> str:
    return PurePosixPath(path).stem


def _is_vue(path: str) -> bool:
    return path.endswith(COMPONENT_EXTENSION)


def _in_pages(path: str) -> bool:
    return "pages" in PurePosixPath(path).parts[:-1]


_RULES: dict[FileCategory, Callable[[str], bool]] = {
    FileCategory.CONTROLLER: lambda p: "Controller" in p,
    FileCategory.REPOSITORY: lambda p: "Repository" in p and "Interface" not in p,
    FileCategory.REPOSITORY_INTERFACE: lambda p: "Repository" in p and "Interface" in p,
    FileCategory.TRANSFORMER: lambda p: "Transformer" in p,
    FileCategory.REQUEST: lambda p: "Request" in p,
    FileCategory.MODEL: lambda p: "/Models/" in p,
    FileCategory.ENTITY: lambda p: "/Entities/" in p,
    FileCategory.SERVICE: lambda p: "Service" in p,
    FileCategory.EXCEPTION: lambda p: "Exception" in p,
    FileCategory.TEST: lambda p: _stem(p).endswith("Test"),
    FileCategory.COMPONENT: lambda p: _is_vue(p) and not _in_pages(p),
    FileCategory.PAGE: lambda p: _is_vue(p) and _in_pages(p),
}

# Bucket names used in listing payloads, in output order.
BUCKETS: dict[str, FileCategory] = {
    "controllers": FileCategory.CONTROLLER,
    "repositories": FileCategory.REPOSITORY,
    "repository_interfaces": FileCategory.REPOSITORY_INTERFACE,
    "transformers": FileCategory.TRANSFORMER,
    "requests": FileCategory.REQUEST,
    "models": FileCategory.MODEL,
    "entities": FileCategory.ENTITY,
    "services": FileCategory.SERVICE,
    "exceptions": FileCategory.EXCEPTION,
    "tests": FileCategory.TEST,
    "components": FileCategory.COMPONENT,
    "pages": FileCategory.PAGE,
}


def _normalize(path: str | Path) -> str:
    return str(path).replace("\\", "/")


def matches(category: FileCategory, path: str | Path) -> bool:
    rule = _RULES.get(category)
    return rule is not None and rule(_normalize(path))


def categories(path: str | Path) -> list[FileCategory]:
    """All categories whose rule matches, in precedence order."""

    normalized = _normalize(path)
    return [category for category, rule in _RULES.items() if rule(normalized)]


def classify(path: str | Path) -> FileCategory:
    found = categories(path)
    return found[0] if found else FileCategory.UNKNOWN


def bucket(paths: Iterable[str], category: FileCategory) -> list[str]:
    return [path for path in paths if matches(category, path)]


def bucketize(paths: list[str], names: Iterable[str] | None = None) -> dict[str, list[str]]:
    """Apply every requested bucket filter over the full path list."""

    selected = list(names) if names is not None else list(BUCKETS)
    return {name: bucket(paths, BUCKETS[name]) for name in selected}


def class_name(path: str | Path) -> str:
    return Path(str(path)).stem


def count_lines(path: str | Path) -> int:
    try:
        content = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return 0
    return len(content.split("\n"))


def to_record(path: Path, relative_path: str) -> FileRecord:
    return FileRecord(
        path=path,
        relative_path=relative_path,
        category=classify(relative_path),
        domain=extract_domain(relative_path),
        identifier=class_name(path),
    )
