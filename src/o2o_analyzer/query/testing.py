"""Test discovery and coverage-gap lookups."""

from __future__ import annotations

import copy
import fnmatch
import math
from pathlib import Path
from typing import Any

from o2o_analyzer.catalog.classifier import class_name, count_lines
from o2o_analyzer.catalog.paths import PathCatalog, escape
from o2o_analyzer.config import DEFAULT_EXCLUDES
from o2o_analyzer.types import Domain, parse_domain

UNIT_ROOT = "tests/Unit"
FEATURE_ROOT = "tests/Feature"

# Candidate globs for coverage checks. These are intentionally independent of
# the classifier rules: `Models/**` here, `/Models/` substring there.
UNTESTED_CANDIDATES: dict[str, tuple[str, tuple[str, ...]]] = {
    "controller": ("**/*Controller.php", ()),
    "repository": ("**/*Repository.php", ("*Interface.php",)),
    "model": ("**/Models/**/*.php", ()),
    "service": ("**/*Service.php", ()),
}

_LOOKUP_FILE_TYPES = (
    ("Controller", "controller"),
    ("Repository", "repository"),
    ("Model", "model"),
    ("Service", "service"),
    ("Transformer", "transformer"),
)

TEST_STRUCTURE: dict[str, Any] = {
    "test_base_classes": [
        {"class_name": "BikerTestCase", "file": "tests/BikerTestCase.php", "domain": "Customer"},
        {"class_name": "DealerTestCase", "file": "tests/DealerTestCase.php", "domain": "Dealer"},
        {"class_name": "FleetTestCase", "file": "tests/FleetTestCase.php", "domain": "Employer"},
        {"class_name": "UnifiedTestCase", "file": "tests/UnifiedTestCase.php", "domain": "Core"},
        {"class_name": "TestCase", "file": "tests/TestCase.php", "domain": "All"},
    ],
    "test_directories": {
        "unit": UNIT_ROOT,
        "feature": FEATURE_ROOT,
        "e2e": "cypress/e2e",
    },
    "test_naming_conventions": {
        "unit_tests": "tests/Unit/{Domain}/{Class}Test.php",
        "feature_tests": "tests/Feature/{Domain}/{Feature}Test.php",
        "cypress_tests": "cypress/e2e/{domain}/specs/{feature}/{Test}.cy.js",
        "component_tests": "app/{Domain}/UI/resources/js/components/**/__tests__/*.cy.js",
    },
    "test_commands": {
        "run_all": "vendor/bin/sail test",
        "run_specific": "vendor/bin/sail test <path>",
        "run_cypress_smoke": "npm run smoketest",
        "run_cypress_all": "npm run test",
    },
}


def coverage_percentage(tested: int, total: int) -> int:
    """Percentage rounded half up; 0 for an empty candidate set."""

    if total == 0:
        return 0
    return int(math.floor(tested * 100 / total + 0.5))


def lookup_file_type(file_path: str) -> str:
    for marker, file_type in _LOOKUP_FILE_TYPES:
        if marker in file_path:
            return file_type
    if file_path.endswith(".vue"):
        return "component"
    return "unknown"


class TestQueries:
    # Not a pytest test class.
    __test__ = False

    def __init__(self, catalog: PathCatalog) -> None:
        self.catalog = catalog

    def _test_entry(self, path: Path, test_type: str, with_class: bool) -> dict[str, Any]:
        return {
            "test_file": self.catalog.relative(path),
            "test_type": test_type,
            "test_class": class_name(path) if with_class else None,
            "line_count": count_lines(path),
        }

    def tests_for_file(self, file_path: str) -> dict[str, Any]:
        """Unit, feature and Cypress tests whose name mentions the file's class."""

        cls = escape(class_name(file_path))
        file_type = lookup_file_type(file_path)

        searches = [
            (f"{UNIT_ROOT}/**/*{cls}*Test.php", "unit", True),
            (f"{FEATURE_ROOT}/**/*{cls}*Test.php", "feature", True),
            (f"cypress/e2e/**/*{cls}*.cy.js", "cypress", False),
        ]
        if file_type == "component":
            searches.append(
                (
                    f"app/**/UI/resources/js/components/**/__tests__/*{cls}*.cy.js",
                    "cypress",
                    False,
                )
            )

        tests: list[dict[str, Any]] = []
        for pattern, test_type, with_class in searches:
            for path in self.catalog.find(pattern, exclude=()):
                tests.append(self._test_entry(path, test_type, with_class))

        return {
            "source_file": file_path,
            "file_type": file_type,
            "tests": tests,
            "coverage_summary": {
                "has_unit_tests": any(t["test_type"] == "unit" for t in tests),
                "has_feature_tests": any(t["test_type"] == "feature" for t in tests),
                "has_e2e_tests": any(t["test_type"] == "cypress" for t in tests),
                "total_test_count": len(tests),
            },
        }

    def _test_file_names(self) -> list[str]:
        names: list[str] = []
        for root in (UNIT_ROOT, FEATURE_ROOT):
            names.extend(
                path.name
                for path in self.catalog.find("**/*Test.php", root=self.catalog.resolve(root), exclude=())
            )
        return names

    def untested_files(self, domain: Domain | str, file_type: str | None = None) -> dict[str, Any]:
        """Candidate files of a domain that no unit or feature test mentions.

        A candidate counts as tested when any file under `tests/Unit` or
        `tests/Feature` matches `*<ClassName>*Test.php`.
        """

        domain = parse_domain(domain)
        domain_path = self.catalog.resolve("app", domain.value)
        if file_type in UNTESTED_CANDIDATES:
            pattern, exclude = UNTESTED_CANDIDATES[file_type]
        else:
            pattern, exclude = "**/*.php", DEFAULT_EXCLUDES
        candidates = self.catalog.records(pattern, root=domain_path, exclude=exclude)

        test_names = self._test_file_names()
        untested: list[dict[str, Any]] = []
        tested = 0
        for record in candidates:
            cls = record.identifier
            test_pattern = f"*{escape(cls)}*Test.php"
            if any(fnmatch.fnmatchcase(name, test_pattern) for name in test_names):
                tested += 1
                continue
            untested.append(
                {
                    "file": record.relative_path,
                    "file_type": file_type or "unknown",
                    "domain": domain.value,
                    "suggested_test_location": f"{UNIT_ROOT}/{domain.value}/{cls}Test.php",
                    "complexity_score": count_lines(record.path),
                }
            )

        return {
            "domain": domain.value,
            "file_type_filter": file_type or "all",
            "untested_files": untested,
            "summary": {
                "total_files": len(candidates),
                "tested_files": tested,
                "untested_files": len(untested),
                "coverage_percentage": coverage_percentage(tested, len(candidates)),
            },
        }

    def test_structure_info(self) -> dict[str, Any]:
        return copy.deepcopy(TEST_STRUCTURE)
