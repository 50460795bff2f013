"""Route, endpoint and service-chain lookups over the cached route table."""

from __future__ import annotations

from typing import Any

from o2o_analyzer.catalog.classifier import class_name
from o2o_analyzer.errors import NotFoundError, UsageError
from o2o_analyzer.query.structure import StructureQueries
from o2o_analyzer.routes.cache import RouteCache
from o2o_analyzer.types import Domain, HttpMethod, RouteRecord, parse_domain

DEFAULT_API_PREFIX = "/async"


def _method_matches(route: RouteRecord, method: HttpMethod | str) -> bool:
    # artisan reports multi-verb routes as "GET|HEAD".
    wanted = method.value if isinstance(method, HttpMethod) else method
    return wanted in route.method.split("|")


class RouteQueries:
    def __init__(self, route_cache: RouteCache, structure: StructureQueries) -> None:
        self.route_cache = route_cache
        self.structure = structure

    def route_by_name(self, route_name: str) -> dict[str, Any]:
        route = next(
            (r for r in self.route_cache.get_routes() if r.name == route_name), None
        )
        if route is None:
            raise NotFoundError(f"Route '{route_name}' not found")
        return {
            "route_name": route.name,
            "method": route.method,
            "uri": route.uri,
            "controller": route.action,
            "middleware": list(route.middleware),
            "domain": route.domain,
        }

    def routes_for_controller(
        self, controller_name: str, domain: Domain | str | None = None
    ) -> dict[str, Any]:
        parsed = parse_domain(domain) if domain is not None else None
        routes = [r for r in self.route_cache.get_routes() if controller_name in r.action]
        if parsed is not None:
            routes = [r for r in routes if r.in_domain(parsed)]

        return {
            "controller_name": controller_name,
            "domain": parsed.value if parsed else "all domains",
            "total_routes": len(routes),
            "routes": [
                {
                    "method": r.method,
                    "uri": r.uri,
                    "route_name": r.name,
                    "action": r.action,
                    "middleware": list(r.middleware),
                }
                for r in routes
            ],
        }

    def list_routes(
        self,
        *,
        domain: Domain | str | None = None,
        method: HttpMethod | str | None = None,
        middleware: str | None = None,
        prefix: str | None = None,
    ) -> dict[str, Any]:
        """All routes narrowed by every filter given (filters combine with AND)."""

        parsed = parse_domain(domain) if domain is not None else None
        routes = self.route_cache.get_routes()
        if parsed is not None:
            routes = [r for r in routes if r.in_domain(parsed)]
        if method:
            routes = [r for r in routes if _method_matches(r, method)]
        if middleware:
            routes = [r for r in routes if middleware in r.middleware]
        if prefix:
            routes = [r for r in routes if r.uri.startswith(prefix)]

        by_method: dict[str, int] = {}
        by_domain: dict[str, int] = {}
        for route in routes:
            by_method[route.method] = by_method.get(route.method, 0) + 1
            route_domain = route.domain
            if route_domain:
                by_domain[route_domain] = by_domain.get(route_domain, 0) + 1

        return {
            "total_routes": len(routes),
            "filters_applied": {
                "domain": parsed.value if parsed else None,
                "method": method.value if isinstance(method, HttpMethod) else method,
                "middleware": middleware,
                "prefix": prefix,
            },
            "summary": {"by_method": by_method, "by_domain": by_domain},
            "routes": [route.summary() for route in routes],
        }

    def api_endpoints(
        self, *, domain: Domain | str | None = None, prefix: str | None = None
    ) -> dict[str, Any]:
        parsed = parse_domain(domain) if domain is not None else None
        api_prefix = prefix or DEFAULT_API_PREFIX
        routes = [r for r in self.route_cache.get_routes() if r.uri.startswith(api_prefix)]
        if parsed is not None:
            routes = [r for r in routes if r.in_domain(parsed)]

        return {
            "prefix": api_prefix,
            "domain": parsed.value if parsed else "all domains",
            "total_endpoints": len(routes),
            "endpoints": [route.summary() for route in routes],
        }

    def endpoint_details(
        self, *, uri: str | None = None, route_name: str | None = None
    ) -> dict[str, Any]:
        if not uri and not route_name:
            raise UsageError("Either uri or route_name must be provided")

        routes = self.route_cache.get_routes()
        if uri:
            route = next((r for r in routes if r.uri == uri), None)
        else:
            route = next((r for r in routes if r.name == route_name), None)
        if route is None:
            raise NotFoundError(f"Endpoint not found: {uri or route_name}")
        return {"endpoint": route.summary()}

    def service_chain(self, entity_name: str, domain: Domain | str | None = None) -> dict[str, Any]:
        """Correlate routes, controllers, repositories and the model for an entity.

        Routes are first narrowed to actions mentioning the entity (ignoring
        case); each controller then keeps the routes whose action contains its
        class name. Only the first model file is reported.
        """

        related = self.structure.related_files(entity_name, domain)
        files: dict[str, list[str]] = related["files"]

        needle = entity_name.lower()
        entity_routes = [r for r in self.route_cache.get_routes() if needle in r.action.lower()]

        controllers = []
        for file in files["controllers"]:
            controller_class = class_name(file)
            controllers.append(
                {
                    "file": file,
                    "class_name": controller_class,
                    "routes": [
                        {"method": r.method, "uri": r.uri, "route_name": r.name}
                        for r in entity_routes
                        if controller_class in r.action
                    ],
                }
            )

        models = files["models"]
        return {
            "entity_name": entity_name,
            "domain": related["search_domain"],
            "model": (
                {"file": models[0], "class_name": class_name(models[0])} if models else None
            ),
            "repositories": [
                {
                    "type": "domain" if "/Domain/" in file else "infrastructure",
                    "file": file,
                    "class_name": class_name(file),
                }
                for file in files["repositories"]
            ],
            "controllers": controllers,
            "transformers": [
                {"file": file, "class_name": class_name(file)} for file in files["transformers"]
            ],
            "validation_requests": [
                {"file": file, "class_name": class_name(file)} for file in files["requests"]
            ],
        }
