"""Vue component and Inertia page lookups."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from o2o_analyzer.catalog.classifier import class_name, count_lines, matches
from o2o_analyzer.catalog.paths import PathCatalog, escape
from o2o_analyzer.config import DEFAULT_EXCLUDES
from o2o_analyzer.errors import NotFoundError
from o2o_analyzer.types import Domain, FileCategory, extract_domain, parse_domain

ALL_VUE_FILES = "app/**/UI/resources/js/**/*.vue"
CONTROLLER_FILES = "app/**/*Controller.php"

# Shared building blocks are never reported as unused.
BASE_COMPONENT_EXCLUDES = ("**/Shared/**", "**/Layout/**")

_PROP_KEY = re.compile(r"""['"]([\w.-]+)['"]\s*=>""")


def import_pattern(component_name: str) -> re.Pattern[str]:
    return re.compile(rf"import.*{re.escape(component_name)}.*from", re.IGNORECASE)


def tag_pattern(component_name: str) -> re.Pattern[str]:
    return re.compile(rf"<{re.escape(component_name)}", re.IGNORECASE)


def _ui_glob(domain: Domain | None, section: str) -> str:
    owner = domain.value if domain is not None else "**"
    return f"app/{owner}/UI/resources/js/{section}/**/*.vue"


def _iso_mtime(path: Path) -> str:
    stamp = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class FrontendQueries:
    def __init__(self, catalog: PathCatalog) -> None:
        self.catalog = catalog

    def _vue_sources(self) -> dict[Path, str]:
        return {path: self.catalog.read_text(path) for path in self.catalog.find(ALL_VUE_FILES)}

    def component_usage(
        self, component_name: str, domain: Domain | str | None = None
    ) -> dict[str, Any]:
        """Where a component is imported and rendered.

        A file counts only if it both imports the component and renders at
        least one `<ComponentName` tag; tags without a detected import are
        ignored.
        """

        parsed = parse_domain(domain) if domain is not None else None
        search_root = (
            self.catalog.resolve("app", parsed.value, "UI", "resources", "js")
            if parsed is not None
            else self.catalog.resolve("app")
        )
        definitions = self.catalog.find(f"**/{escape(component_name)}.vue", root=search_root)
        if not definitions:
            raise NotFoundError(f"Component '{component_name}' not found")
        definition = definitions[0]

        imports = import_pattern(component_name)
        tags = tag_pattern(component_name)
        usages: list[dict[str, Any]] = []
        for path, content in self._vue_sources().items():
            if not imports.search(content):
                continue
            usage_count = len(tags.findall(content))
            if usage_count == 0:
                continue
            relative = self.catalog.relative(path)
            usages.append(
                {
                    "file": relative,
                    "file_type": "page" if matches(FileCategory.PAGE, relative) else "component",
                    "domain": extract_domain(relative),
                    "usage_count": usage_count,
                }
            )

        domains_using: list[str] = []
        for usage in usages:
            if usage["domain"] and usage["domain"] not in domains_using:
                domains_using.append(usage["domain"])

        definition_path = self.catalog.relative(definition)
        return {
            "component_name": component_name,
            "component_definition": {
                "file": definition_path,
                "domain": extract_domain(definition_path),
            },
            "usages": usages,
            "usage_summary": {
                "total_usages": sum(usage["usage_count"] for usage in usages),
                "files_using": len(usages),
                "pages_using": sum(1 for usage in usages if usage["file_type"] == "page"),
                "components_using": sum(
                    1 for usage in usages if usage["file_type"] == "component"
                ),
                "domains_using": domains_using,
            },
        }

    def unused_components(self, domain: Domain | str | None = None) -> dict[str, Any]:
        parsed = parse_domain(domain) if domain is not None else None
        components = self.catalog.find(
            _ui_glob(parsed, "components"),
            exclude=(*DEFAULT_EXCLUDES, *BASE_COMPONENT_EXCLUDES),
        )
        sources = self._vue_sources()

        unused: list[dict[str, Any]] = []
        used = 0
        for component in components:
            name = class_name(component)
            imports = import_pattern(name)
            is_used = any(
                imports.search(content)
                for path, content in sources.items()
                if path != component
            )
            if is_used:
                used += 1
                continue
            relative = self.catalog.relative(component)
            unused.append(
                {
                    "component_name": name,
                    "file": relative,
                    "domain": extract_domain(relative),
                    "last_modified": _iso_mtime(component),
                    "lines_of_code": count_lines(component),
                }
            )

        return {
            "domain": parsed.value if parsed else "all domains",
            "unused_components": unused,
            "summary": {
                "total_components": len(components),
                "used_components": used,
                "unused_components": len(unused),
            },
        }

    def inertia_pages(self, domain: Domain | str | None = None) -> dict[str, Any]:
        parsed = parse_domain(domain) if domain is not None else None
        pages = []
        for path in self.catalog.find(_ui_glob(parsed, "pages")):
            relative = self.catalog.relative(path)
            match = re.search(r"pages/(.+)\.vue$", relative)
            pages.append(
                {
                    "domain": extract_domain(relative),
                    "page_name": match.group(1) if match else None,
                    "file_path": relative,
                }
            )
        return {
            "domain": parsed.value if parsed else "all domains",
            "total_pages": len(pages),
            "pages": pages,
        }

    def page_props(self, page_name: str) -> dict[str, Any]:
        """Controllers rendering an Inertia page and the prop keys they pass."""

        page_files = self.catalog.find(f"app/**/UI/resources/js/pages/{escape(page_name)}.vue")
        if not page_files:
            raise NotFoundError(f"Page '{page_name}' not found")

        quoted = re.escape(page_name)
        render = re.compile(rf"""Inertia::render\(['"]{quoted}['"]""", re.IGNORECASE)
        render_with_props = re.compile(
            rf"""Inertia::render\(\s*['"]{quoted}['"]\s*,\s*\[(?P<body>.*?)\]\s*\)""",
            re.IGNORECASE | re.DOTALL,
        )

        controllers = []
        for path in self.catalog.find(CONTROLLER_FILES):
            content = self.catalog.read_text(path)
            if not render.search(content):
                continue
            props: list[str] = []
            for call in render_with_props.finditer(content):
                for key in _PROP_KEY.findall(call.group("body")):
                    if key not in props:
                        props.append(key)
            controllers.append(
                {
                    "controller": self.catalog.relative(path),
                    "class_name": class_name(path),
                    "props": props,
                }
            )

        return {
            "page_name": page_name,
            "page_file": self.catalog.relative(page_files[0]),
            "controllers_using_page": controllers,
        }
