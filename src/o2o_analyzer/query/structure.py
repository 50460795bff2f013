"""Domain structure and entity file lookups."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from o2o_analyzer.catalog.classifier import bucketize
from o2o_analyzer.catalog.paths import PathCatalog, escape
from o2o_analyzer.errors import NotFoundError
from o2o_analyzer.types import Domain, FileRecord, parse_domain

SOURCE_PATTERNS = ("**/*.php", "**/*.vue")

# Buckets reported for entity searches; tests come from a separate root.
ENTITY_BUCKETS = (
    "controllers",
    "repositories",
    "repository_interfaces",
    "transformers",
    "models",
    "entities",
    "requests",
    "services",
)


class StructureQueries:
    def __init__(self, catalog: PathCatalog) -> None:
        self.catalog = catalog

    def _app_root(self, domain: Domain | None) -> Path:
        if domain is None:
            return self.catalog.resolve("app")
        return self.catalog.resolve("app", domain.value)
    def domain_structure(self, domain: Domain | str) -> dict[str, Any]:
        """Every source file of one domain, filtered into each category bucket.

        `by_category` counts each file once, under its primary category, while
        the buckets in `files` may list a file several times.
        """

        domain = parse_domain(domain)
        domain_path = self._app_root(domain)
        if not domain_path.is_dir():
            raise NotFoundError(f"Domain path not found: {self.catalog.relative(domain_path)}")

        records: list[FileRecord] = []
        for pattern in SOURCE_PATTERNS:
            records.extend(self.catalog.records(pattern, root=domain_path))
        records.sort(key=lambda record: record.relative_path)

        by_category: dict[str, int] = {}
        for record in records:
            by_category[record.category.value] = by_category.get(record.category.value, 0) + 1

        return {
            "domain": domain.value,
            "path": self.catalog.relative(domain_path),
            "total_files": len(records),
            "by_category": by_category,
            "files": bucketize([record.relative_path for record in records]),
        }

    def related_files(self, entity_name: str, domain: Domain | str | None = None) -> dict[str, Any]:
        """Files whose name contains `entity_name`, plus matching tests.

        Test matches are listed only in the `tests` bucket, even when they would
        also satisfy a source rule, and `total_files` counts each list once.
        """

        parsed = parse_domain(domain) if domain is not None else None
        search_root = self._app_root(parsed)
        if not search_root.is_dir():
            raise NotFoundError(f"Search path not found: {self.catalog.relative(search_root)}")

        name = escape(entity_name)
        sources = [
            record.relative_path
            for record in self.catalog.records(f"**/*{name}*.php", root=search_root)
        ]
        tests = [
            record.relative_path
            for record in self.catalog.records(
                f"**/*{name}*Test.php", root=self.catalog.resolve("tests"), exclude=()
            )
        ]

        files = bucketize(sources, ENTITY_BUCKETS)
        files["tests"] = tests
        return {
            "entity_name": entity_name,
            "search_domain": parsed.value if parsed else "all domains",
            "total_files": len(sources) + len(tests),
            "files": files,
        }
