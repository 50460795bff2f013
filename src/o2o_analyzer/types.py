"""Shared domain models."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from o2o_analyzer.errors import UsageError


class Domain(str, Enum):
    """Top-level partitions of the O2O source tree (`app/<Domain>`)."""

    CORE = "Core"
    CUSTOMER = "Customer"
    DEALER = "Dealer"
    EMPLOYER = "Employer"


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class FileCategory(str, Enum):
    CONTROLLER = "controller"
    REPOSITORY = "repository"
    REPOSITORY_INTERFACE = "repository-interface"
    TRANSFORMER = "transformer"
    REQUEST = "request"
    MODEL = "model"
    ENTITY = "entity"
    SERVICE = "service"
    EXCEPTION = "exception"
    TEST = "test"
    COMPONENT = "component"
    PAGE = "page"
    UNKNOWN = "unknown"


VALID_DOMAINS: tuple[str, ...] = tuple(domain.value for domain in Domain)

# `App\Employer\...` in a class reference, `app/Employer/...` in a path.
_DOMAIN_PATTERN = re.compile(
    r"(?:^|[\\/])[Aa]pp[\\/](" + "|".join(VALID_DOMAINS) + r")[\\/]"
)


def parse_domain(value: "Domain | str") -> Domain:
    if isinstance(value, Domain):
        return value
    try:
        return Domain(value)
    except ValueError:
        raise UsageError(
            f"Invalid domain '{value}'. Valid domains: {', '.join(VALID_DOMAINS)}"
        ) from None


def extract_domain(text: str | None) -> str | None:
    """Return the first domain token found directly under an `App` namespace."""

    if not text:
        return None
    match = _DOMAIN_PATTERN.search(text)
    return match.group(1) if match else None


def domain_namespace(domain: "Domain | str") -> str:
    return f"App\\{parse_domain(domain).value}\\"


@dataclass(frozen=True, slots=True)
class FileRecord:
    """A classified file discovered under the configured base directory."""

    path: Path
    relative_path: str
    category: FileCategory
    domain: str | None
    identifier: str


@dataclass(frozen=True, slots=True)
class RouteRecord:
    """One entry of `php artisan route:list --json`."""

    method: str
    uri: str
    action: str
    name: str | None = None
    middleware: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RouteRecord":
        middleware = payload.get("middleware") or ()
        if isinstance(middleware, str):
            middleware = (middleware,)
        return cls(
            method=str(payload.get("method") or ""),
            uri=str(payload.get("uri") or ""),
            action=str(payload.get("action") or ""),
            name=payload.get("name") or None,
            middleware=tuple(str(item) for item in middleware),
        )

    @property
    def domain(self) -> str | None:
        return extract_domain(self.action)

    def in_domain(self, domain: "Domain | str") -> bool:
        return domain_namespace(domain) in self.action

    def summary(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "uri": self.uri,
            "name": self.name,
            "controller": self.action,
            "middleware": list(self.middleware),
            "domain": self.domain,
        }


@dataclass(slots=True)
class ToolTrace:
    """Trace record for an executed tool call."""

    name: str
    input_payload: dict[str, Any]
    output_preview: str
    latency_ms: float
    is_error: bool = False
