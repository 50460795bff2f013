"""Configuration models and fixed conventions of the O2O application."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

from o2o_analyzer.errors import ConfigurationError

PLACEHOLDER_BASE_PATH = "/path/to/your/o2o-apps"

ROUTE_CACHE_TTL_MS = 5 * 60 * 1000

DEFAULT_EXCLUDES = ("**/vendor/**", "**/node_modules/**")


class AnalyzerConfig(BaseModel):
    """Where the Laravel checkout lives and how long collaborators may run."""

    base_path: str = PLACEHOLDER_BASE_PATH
    route_cache_ttl_ms: int = Field(default=ROUTE_CACHE_TTL_MS, ge=0)
    route_timeout_seconds: float = Field(default=15.0, gt=0.0)
    schema_timeout_seconds: float = Field(default=10.0, gt=0.0)
    phpstan_timeout_seconds: float = Field(default=30.0, gt=0.0)
    php_binary: str = "php"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, **overrides: object) -> "AnalyzerConfig":
        values: dict[str, object] = {
            "base_path": os.getenv("O2O_BASE_PATH", PLACEHOLDER_BASE_PATH),
            "php_binary": os.getenv("O2O_PHP_BINARY", "php"),
            "log_level": os.getenv("O2O_LOG_LEVEL", "INFO"),
        }
        ttl = os.getenv("O2O_ROUTE_CACHE_TTL_MS")
        if ttl:
            values["route_cache_ttl_ms"] = int(ttl)
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls.model_validate(values)

    @property
    def is_placeholder(self) -> bool:
        return self.base_path.rstrip("/") == PLACEHOLDER_BASE_PATH

    def require_base_path(self) -> Path:
        """Return the checkout root, failing loudly if it was never configured."""

        if self.is_placeholder:
            raise ConfigurationError(
                "O2O_BASE_PATH is not configured; set it to the root of the Laravel checkout"
            )
        root = Path(self.base_path)
        if not root.is_dir():
            raise ConfigurationError(f"O2O_BASE_PATH does not exist: {self.base_path}")
        return root
