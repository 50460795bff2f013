"""Database schema, table usage, Eloquent scope and PHPStan lookups."""

from __future__ import annotations

import logging
import re
from typing import Any

from o2o_analyzer.catalog.classifier import class_name
from o2o_analyzer.catalog.paths import PathCatalog, escape
from o2o_analyzer.errors import CollaboratorError, NotFoundError, UsageError
from o2o_analyzer.external.artisan import ArtisanClient
from o2o_analyzer.external.phpstan import PhpstanRunner
from o2o_analyzer.types import Domain, parse_domain

logger = logging.getLogger(__name__)

TABLE_NAME = re.compile(r"^[A-Za-z0-9_]+$")
SCOPE_METHOD = re.compile(r"public\s+function\s+(scope\w+)\s*\(")


def check_table_name(table_name: str) -> str:
    if not TABLE_NAME.match(table_name):
        raise UsageError(f"Invalid table name '{table_name}'")
    return table_name


class DatabaseQueries:
    def __init__(
        self,
        catalog: PathCatalog,
        artisan: ArtisanClient,
        phpstan: PhpstanRunner,
    ) -> None:
        self.catalog = catalog
        self.artisan = artisan
        self.phpstan = phpstan

    def table_schema(self, table_name: str) -> dict[str, Any]:
        """Describe a table through the database, else fall back to its migration.

        The migration fallback is a degraded success: it carries the raw
        migration source instead of parsed columns.
        """

        check_table_name(table_name)
        try:
            rows = self.artisan.describe_table(table_name)
        except CollaboratorError as exc:
            logger.warning("DESCRIBE %s failed, looking for a migration: %s", table_name, exc)
            migrations = self.catalog.find(
                f"**/*_create_{table_name}_table.php",
                root=self.catalog.resolve("database", "migrations"),
                exclude=(),
            )
            if not migrations:
                raise CollaboratorError(
                    f"Could not retrieve schema for table '{table_name}'. Error: {exc}"
                ) from exc
            return {
                "table": table_name,
                "source": "migration",
                "message": "Could not query database directly. Found migration file.",
                "migration_file": self.catalog.relative(migrations[0]),
                "migration": self.catalog.read_text(migrations[0]),
                "error": str(exc),
            }

        return {
            "table": table_name,
            "source": "database",
            "columns": [
                {
                    "name": row.get("Field"),
                    "type": row.get("Type"),
                    "nullable": row.get("Null") == "YES",
                    "key": row.get("Key"),
                    "default": row.get("Default"),
                    "extra": row.get("Extra"),
                }
                for row in rows
            ],
        }

    def run_phpstan(self, path: str) -> dict[str, Any]:
        base = self.catalog.base_path.resolve()
        target = (base / path).resolve()
        if target != base and base not in target.parents:
            raise UsageError(f"Path escapes the project root: {path}")
        if not target.exists():
            raise NotFoundError(f"Path not found: {path}")

        output = self.phpstan.analyse(path)
        return {
            "path": path,
            "exit_code": output.returncode,
            "passed": output.ok,
            "output": output.stdout,
            "errors": output.stderr,
        }

    def table_usage(self, table_name: str) -> dict[str, Any]:
        check_table_name(table_name)
        declares_table = re.compile(
            rf"""protected\s+\$table\s*=\s*['"]{re.escape(table_name)}['"]"""
        )
        model = next(
            (
                path
                for path in self.catalog.find("app/**/Models/**/*.php")
                if declares_table.search(self.catalog.read_text(path))
            ),
            None,
        )

        builder_calls = (f"DB::table('{table_name}')", f'DB::table("{table_name}")')
        direct_queries = [
            {"file": self.catalog.relative(path), "query_type": "query_builder"}
            for path in self.catalog.find("app/**/*.php")
            if any(call in self.catalog.read_text(path) for call in builder_calls)
        ]

        migrations = self.catalog.find(f"database/migrations/**/*{table_name}*.php", exclude=())
        return {
            "table_name": table_name,
            "model": (
                {"file": self.catalog.relative(model), "class_name": class_name(model)}
                if model is not None
                else None
            ),
            "direct_queries": direct_queries,
            "migrations": [
                {"file": self.catalog.relative(path), "migration_name": class_name(path)}
                for path in migrations
            ],
        }

    def eloquent_scopes(self, model_name: str, domain: Domain | str | None = None) -> dict[str, Any]:
        parsed = parse_domain(domain) if domain is not None else None
        root = (
            self.catalog.resolve("app", parsed.value)
            if parsed is not None
            else self.catalog.resolve("app")
        )
        models = self.catalog.find(f"**/Models/**/{escape(model_name)}.php", root=root)
        if not models:
            raise NotFoundError(f"Model '{model_name}' not found")

        content = self.catalog.read_text(models[0])
        scopes = [
            {
                "scope_name": method[len("scope"):].lower(),
                "method_name": method,
            }
            for method in SCOPE_METHOD.findall(content)
        ]
        return {
            "model_name": model_name,
            "model_path": self.catalog.relative(models[0]),
            "scopes": scopes,
            "total_scopes": len(scopes),
        }
