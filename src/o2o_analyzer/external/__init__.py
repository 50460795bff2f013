"""External PHP tooling invoked as black boxes."""

from .artisan import ArtisanClient, parse_routes
from .phpstan import PhpstanRunner
from .process import ProcessOutput, run_process

__all__ = ["ArtisanClient", "PhpstanRunner", "ProcessOutput", "parse_routes", "run_process"]
