"""Facade wiring the lookup groups to their shared collaborators."""

from __future__ import annotations

from o2o_analyzer.catalog.paths import PathCatalog
from o2o_analyzer.config import AnalyzerConfig
from o2o_analyzer.external.artisan import ArtisanClient
from o2o_analyzer.external.phpstan import PhpstanRunner
from o2o_analyzer.query.database import DatabaseQueries
from o2o_analyzer.query.frontend import FrontendQueries
from o2o_analyzer.query.routes import RouteQueries
from o2o_analyzer.query.structure import StructureQueries
from o2o_analyzer.query.testing import TestQueries
from o2o_analyzer.routes.cache import RouteCache


class QueryEngine:
    """Owns one catalog and one route cache shared by every lookup group.

    Collaborators can be injected, which is how tests supply a fake route
    source, a fake clock, or a stub process runner.
    """

    def __init__(
        self,
        config: AnalyzerConfig,
        *,
        catalog: PathCatalog | None = None,
        route_cache: RouteCache | None = None,
        artisan: ArtisanClient | None = None,
        phpstan: PhpstanRunner | None = None,
    ) -> None:
        self.config = config
        self.catalog = catalog or PathCatalog(config)
        self.artisan = artisan or ArtisanClient(config)
        self.route_cache = route_cache or RouteCache(
            self.artisan.list_routes, ttl_ms=config.route_cache_ttl_ms
        )
        phpstan = phpstan or PhpstanRunner(config)

        self.structure = StructureQueries(self.catalog)
        self.routes = RouteQueries(self.route_cache, self.structure)
        self.tests = TestQueries(self.catalog)
        self.frontend = FrontendQueries(self.catalog)
        self.database = DatabaseQueries(self.catalog, self.artisan, phpstan)
