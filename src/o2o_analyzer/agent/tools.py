"""Built-in tool catalog: one argument model and one handler per tool."""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from o2o_analyzer.agent.registry import ToolRegistry, ToolSpec
from o2o_analyzer.errors import UsageError
from o2o_analyzer.query.engine import QueryEngine
from o2o_analyzer.types import Domain, HttpMethod, parse_domain


def _optional_domain(value: Any) -> Any:
    return None if value is None else parse_domain(value)


DomainArg = Annotated[
    Domain,
    BeforeValidator(parse_domain),
    Field(description="Domain name (Core, Customer, Dealer, or Employer)"),
]
OptionalDomainArg = Annotated[
    Domain | None,
    BeforeValidator(_optional_domain),
    Field(description="Optional: limit to a specific domain"),
]
TableName = Annotated[
    str,
    Field(
        pattern=r"^[A-Za-z0-9_]+$",
        description="Database table name (e.g., 'employer_contracts', 'users')",
    ),
]
UntestedFileType = Literal["controller", "repository", "model", "service"]


class DomainStructureInput(BaseModel):
    domain: DomainArg


class RelatedFilesInput(BaseModel):
    entity_name: str = Field(
        min_length=1, description="Entity name to search for (e.g., 'Contract', 'Invoice', 'Order')"
    )
    domain: OptionalDomainArg = None


class DatabaseSchemaInput(BaseModel):
    table_name: TableName


class PhpstanInput(BaseModel):
    path: str = Field(
        min_length=1,
        description="Relative path from project root to analyze (e.g., 'app/Employer/Controllers')",
    )


class RouteByNameInput(BaseModel):
    route_name: str = Field(min_length=1, description="Route name to search for")


class RoutesForControllerInput(BaseModel):
    controller_name: str = Field(
        min_length=1, description="Controller name (e.g., 'OrderController')"
    )
    domain: OptionalDomainArg = None


class ListRoutesInput(BaseModel):
    domain: OptionalDomainArg = None
    method: HttpMethod | None = Field(default=None, description="Filter by HTTP method")
    middleware: str | None = Field(
        default=None, description="Filter by middleware (e.g., 'auth', 'dealer')"
    )
    prefix: str | None = Field(default=None, description="Filter by URI prefix (e.g., '/async')")


class ServiceChainInput(BaseModel):
    entity_name: str = Field(
        min_length=1, description="Entity name (e.g., 'Order', 'Contract', 'Invoice')"
    )
    domain: OptionalDomainArg = None


class FileTestsInput(BaseModel):
    file_path: str = Field(
        min_length=1,
        description=(
            "Relative path to source file (e.g., "
            "'app/Employer/Infrastructure/Order/Controllers/OrderController.php')"
        ),
    )


class UntestedFilesInput(BaseModel):
    domain: DomainArg
    file_type: UntestedFileType | None = Field(
        default=None, description="Optional: filter by file type"
    )


class NoInput(BaseModel):
    pass


class ComponentUsageInput(BaseModel):
    component_name: str = Field(
        min_length=1, description="Component name (e.g., 'Button', 'OrderDetail')"
    )
    domain: OptionalDomainArg = None


class DomainFilterInput(BaseModel):
    domain: OptionalDomainArg = None


class PagePropsInput(BaseModel):
    page_name: str = Field(
        min_length=1, description="Page name (e.g., 'Order/Index', 'Auth/UnifiedLogin')"
    )


class ApiEndpointsInput(BaseModel):
    domain: OptionalDomainArg = None
    prefix: str | None = Field(
        default=None, description="Optional: filter by URI prefix (defaults to '/async')"
    )


class EndpointDetailsInput(BaseModel):
    uri: str | None = Field(default=None, description="Endpoint URI (e.g., '/async/fleet/orders')")
    route_name: str | None = Field(
        default=None, description="Or route name (e.g., 'fleet.orders.index')"
    )

    @model_validator(mode="after")
    def _require_lookup_key(self) -> "EndpointDetailsInput":
        if not self.uri and not self.route_name:
            raise UsageError("Either uri or route_name must be provided")
        return self


class TableUsageInput(BaseModel):
    table_name: TableName


class EloquentScopesInput(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    model_name: str = Field(min_length=1, description="Model name (e.g., 'User', 'Order')")
    domain: OptionalDomainArg = None


def to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def register_builtin_tools(registry: ToolRegistry, engine: QueryEngine) -> None:
    """Register the 19 read-only introspection tools, in catalog order."""

    def _structure(data: DomainStructureInput) -> str:
        return to_json(engine.structure.domain_structure(data.domain))

    def _related(data: RelatedFilesInput) -> str:
        return to_json(engine.structure.related_files(data.entity_name, data.domain))

    def _schema(data: DatabaseSchemaInput) -> str:
        return to_json(engine.database.table_schema(data.table_name))

    def _phpstan(data: PhpstanInput) -> str:
        return to_json(engine.database.run_phpstan(data.path))

    def _route_by_name(data: RouteByNameInput) -> str:
        return to_json(engine.routes.route_by_name(data.route_name))

    def _controller_routes(data: RoutesForControllerInput) -> str:
        return to_json(engine.routes.routes_for_controller(data.controller_name, data.domain))

    def _list_routes(data: ListRoutesInput) -> str:
        return to_json(
            engine.routes.list_routes(
                domain=data.domain,
                method=data.method,
                middleware=data.middleware,
                prefix=data.prefix,
            )
        )

    def _service_chain(data: ServiceChainInput) -> str:
        return to_json(engine.routes.service_chain(data.entity_name, data.domain))

    def _tests_for_file(data: FileTestsInput) -> str:
        return to_json(engine.tests.tests_for_file(data.file_path))

    def _untested(data: UntestedFilesInput) -> str:
        return to_json(engine.tests.untested_files(data.domain, data.file_type))

    def _test_structure(data: NoInput) -> str:
        return to_json(engine.tests.test_structure_info())

    def _component_usage(data: ComponentUsageInput) -> str:
        return to_json(engine.frontend.component_usage(data.component_name, data.domain))

    def _unused_components(data: DomainFilterInput) -> str:
        return to_json(engine.frontend.unused_components(data.domain))

    def _pages(data: DomainFilterInput) -> str:
        return to_json(engine.frontend.inertia_pages(data.domain))

    def _page_props(data: PagePropsInput) -> str:
        return to_json(engine.frontend.page_props(data.page_name))

    def _api_endpoints(data: ApiEndpointsInput) -> str:
        return to_json(engine.routes.api_endpoints(domain=data.domain, prefix=data.prefix))

    def _endpoint_details(data: EndpointDetailsInput) -> str:
        return to_json(engine.routes.endpoint_details(uri=data.uri, route_name=data.route_name))

    def _table_usage(data: TableUsageInput) -> str:
        return to_json(engine.database.table_usage(data.table_name))

    def _scopes(data: EloquentScopesInput) -> str:
        return to_json(engine.database.eloquent_scopes(data.model_name, data.domain))

    specs = [
        ToolSpec(
            name="query_domain_structure",
            description=(
                "Query the Laravel domain structure to get all files organized by type "
                "(controllers, repositories, transformers, etc.). "
                "Domains: Core, Customer, Dealer, Employer"
            ),
            args_schema=DomainStructureInput,
            handler=_structure,
            tags=["structure"],
        ),
        ToolSpec(
            name="find_related_files",
            description=(
                "Find all related files for a given entity (e.g., 'Contract', 'Invoice'). "
                "Returns controllers, repositories, transformers, models, validation "
                "requests, and tests."
            ),
            args_schema=RelatedFilesInput,
            handler=_related,
            tags=["structure"],
        ),
        ToolSpec(
            name="query_database_schema",
            description=(
                "Query the Laravel database schema for a specific table. Returns column "
                "names, types, nullable status, and defaults."
            ),
            args_schema=DatabaseSchemaInput,
            handler=_schema,
            tags=["database"],
        ),
        ToolSpec(
            name="run_phpstan",
            description=(
                "Run PHPStan static analysis on a file or directory. Use this before "
                "committing code to catch errors early."
            ),
            args_schema=PhpstanInput,
            handler=_phpstan,
            tags=["quality"],
        ),
        ToolSpec(
            name="find_route_by_name",
            description="Find a Laravel route by its name (e.g., 'fleet.orders.index')",
            args_schema=RouteByNameInput,
            handler=_route_by_name,
            tags=["routes"],
        ),
        ToolSpec(
            name="find_routes_for_controller",
            description="List all routes handled by a specific controller",
            args_schema=RoutesForControllerInput,
            handler=_controller_routes,
            tags=["routes"],
        ),
        ToolSpec(
            name="list_all_routes",
            description=(
                "List all routes with optional filtering by domain, HTTP method, "
                "middleware, or URI prefix"
            ),
            args_schema=ListRoutesInput,
            handler=_list_routes,
            tags=["routes"],
        ),
        ToolSpec(
            name="find_service_chain",
            description=(
                "Map the full service chain for an entity: Route -> Controller -> "
                "Repository -> Model. Shows the complete data flow."
            ),
            args_schema=ServiceChainInput,
            handler=_service_chain,
            tags=["routes", "structure"],
        ),
        ToolSpec(
            name="find_tests_for_file",
            description="Find all related test files (Unit, Feature, Cypress) for a given source file",
            args_schema=FileTestsInput,
            handler=_tests_for_file,
            tags=["tests"],
        ),
        ToolSpec(
            name="find_untested_files",
            description="Identify files without test coverage in a domain",
            args_schema=UntestedFilesInput,
            handler=_untested,
            tags=["tests"],
        ),
        ToolSpec(
            name="get_test_structure_info",
            description=(
                "Get information about test organization, base classes, and available "
                "test utilities"
            ),
            args_schema=NoInput,
            handler=_test_structure,
            tags=["tests"],
        ),
        ToolSpec(
            name="find_component_usage",
            description="Find where a Vue component is imported and used throughout the codebase",
            args_schema=ComponentUsageInput,
            handler=_component_usage,
            tags=["frontend"],
        ),
        ToolSpec(
            name="find_unused_components",
            description="Identify Vue components that are not being used anywhere",
            args_schema=DomainFilterInput,
            handler=_unused_components,
            tags=["frontend"],
        ),
        ToolSpec(
            name="list_inertia_pages",
            description="List all Inertia.js pages in the application",
            args_schema=DomainFilterInput,
            handler=_pages,
            tags=["frontend"],
        ),
        ToolSpec(
            name="find_page_props",
            description="Find what props are passed to a specific Inertia page from controllers",
            args_schema=PagePropsInput,
            handler=_page_props,
            tags=["frontend"],
        ),
        ToolSpec(
            name="list_api_endpoints",
            description="List all API endpoints with their transformers and validation",
            args_schema=ApiEndpointsInput,
            handler=_api_endpoints,
            tags=["routes", "api"],
        ),
        ToolSpec(
            name="find_endpoint_details",
            description="Get detailed information about a specific API endpoint",
            args_schema=EndpointDetailsInput,
            handler=_endpoint_details,
            tags=["routes", "api"],
        ),
        ToolSpec(
            name="find_table_usage",
            description=(
                "Find all locations where a database table is queried "
                "(models, repositories, raw queries)"
            ),
            args_schema=TableUsageInput,
            handler=_table_usage,
            tags=["database"],
        ),
        ToolSpec(
            name="find_eloquent_scopes",
            description="List all query scopes for an Eloquent model",
            args_schema=EloquentScopesInput,
            handler=_scopes,
            tags=["database"],
        ),
    ]
    for spec in specs:
        registry.register(spec)
