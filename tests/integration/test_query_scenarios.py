import json

import pytest

from o2o_analyzer.agent.dispatcher import Dispatcher
from o2o_analyzer.config import AnalyzerConfig
from o2o_analyzer.errors import NotFoundError
from o2o_analyzer.query.engine import QueryEngine


def _call(dispatcher: Dispatcher, name: str, **args):
    result = dispatcher.invoke(name, args)
    assert not result.is_error, result.text
    return json.loads(result.text)


def test_structure_listing_buckets_repositories(make_tree) -> None:
    root = make_tree(
        {
            "app/Core/Controllers/FooController.php": "<?php\n",
            "app/Core/Repositories/FooRepository.php": "<?php\n",
            "app/Core/Repositories/FooRepositoryInterface.php": "<?php\n",
            "app/Core/vendor/acme/BarController.php": "<?php\n",
        }
    )
    engine = QueryEngine(AnalyzerConfig(base_path=str(root)))

    structure = engine.structure.domain_structure("Core")

    assert structure["total_files"] == 3
    assert structure["path"] == "app/Core"
    assert structure["files"]["controllers"] == ["app/Core/Controllers/FooController.php"]
    assert structure["files"]["repositories"] == ["app/Core/Repositories/FooRepository.php"]
    assert structure["files"]["repository_interfaces"] == [
        "app/Core/Repositories/FooRepositoryInterface.php"
    ]
    assert structure["by_category"] == {
        "controller": 1,
        "repository": 1,
        "repository-interface": 1,
    }


def test_structure_listing_missing_domain_directory(engine) -> None:
    with pytest.raises(NotFoundError, match="Domain path not found: app/Core"):
        engine.structure.domain_structure("Core")


def test_structure_listing_includes_vue_files(dispatcher) -> None:
    structure = _call(dispatcher, "query_domain_structure", domain="Employer")

    assert "app/Employer/UI/resources/js/pages/Order/Index.vue" in structure["files"]["pages"]
    assert "app/Employer/UI/resources/js/components/Button.vue" in structure["files"]["components"]
    assert all("node_modules" not in path for path in structure["files"]["components"])
    # Each file counted once, under its primary category.
    assert sum(structure["by_category"].values()) == structure["total_files"]
    assert structure["by_category"]["page"] == 1


def test_related_files_counts_sources_and_tests(dispatcher) -> None:
    related = _call(dispatcher, "find_related_files", entity_name="Order", domain="Employer")

    files = related["files"]
    assert related["search_domain"] == "Employer"
    assert files["controllers"] == [
        "app/Employer/Infrastructure/Order/Controllers/OrderController.php"
    ]
    assert files["repositories"] == [
        "app/Employer/Domain/Order/Repositories/OrderRepository.php",
        "app/Employer/Infrastructure/Order/Repositories/EloquentOrderRepository.php",
    ]
    assert files["models"] == ["app/Employer/Models/Order.php"]
    assert files["tests"] == [
        "tests/Feature/Employer/OrderControllerTest.php",
        "tests/Unit/Employer/OrderRepositoryTest.php",
    ]
    # 8 PHP sources under app/Employer plus 2 tests.
    assert related["total_files"] == 10


def test_route_lookup_by_name(dispatcher) -> None:
    route = _call(dispatcher, "find_route_by_name", route_name="fleet.orders.index")

    assert route == {
        "route_name": "fleet.orders.index",
        "method": "GET",
        "uri": "/async/fleet/orders",
        "controller": "App\\Employer\\Controllers\\OrderController@index",
        "middleware": ["auth"],
        "domain": "Employer",
    }

    missing = dispatcher.invoke("find_route_by_name", {"route_name": "fleet.orders.destroy"})
    assert missing.is_error
    assert missing.error_kind == "not_found"
    assert missing.text == (
        "Error executing find_route_by_name: Route 'fleet.orders.destroy' not found"
    )


def test_routes_for_controller_with_domain(dispatcher) -> None:
    routes = _call(
        dispatcher, "find_routes_for_controller", controller_name="OrderController", domain="Employer"
    )
    assert routes["total_routes"] == 2

    other = _call(
        dispatcher, "find_routes_for_controller", controller_name="OrderController", domain="Dealer"
    )
    assert other["total_routes"] == 0


def test_list_routes_filters_compose(dispatcher) -> None:
    everything = _call(dispatcher, "list_all_routes")
    assert everything["total_routes"] == 5
    assert everything["summary"]["by_domain"] == {"Employer": 2, "Dealer": 1, "Core": 1}

    gets = _call(dispatcher, "list_all_routes", method="GET")
    assert gets["total_routes"] == 4

    narrowed = _call(dispatcher, "list_all_routes", method="GET", middleware="auth", prefix="/async")
    assert [route["name"] for route in narrowed["routes"]] == ["fleet.orders.index"]
    assert narrowed["filters_applied"] == {
        "domain": None,
        "method": "GET",
        "middleware": "auth",
        "prefix": "/async",
    }


def test_api_endpoints_and_details(dispatcher) -> None:
    endpoints = _call(dispatcher, "list_api_endpoints")
    assert endpoints["prefix"] == "/async"
    assert endpoints["total_endpoints"] == 2

    by_uri = _call(
        dispatcher, "find_endpoint_details", uri="/async/fleet/orders", route_name="login"
    )
    assert by_uri["endpoint"]["name"] == "fleet.orders.index"

    by_name = _call(dispatcher, "find_endpoint_details", route_name="login")
    assert by_name["endpoint"]["uri"] == "/login"

    neither = dispatcher.invoke("find_endpoint_details", {})
    assert neither.is_error
    assert neither.error_kind == "usage"
    assert "Either uri or route_name must be provided" in neither.text


def test_service_chain_joins_routes_to_controllers(dispatcher) -> None:
    chain = _call(dispatcher, "find_service_chain", entity_name="Order", domain="Employer")

    assert chain["controllers"] == [
        {
            "file": "app/Employer/Infrastructure/Order/Controllers/OrderController.php",
            "class_name": "OrderController",
            "routes": [
                {"method": "GET", "uri": "/async/fleet/orders", "route_name": "fleet.orders.index"},
                {"method": "POST", "uri": "/async/fleet/orders", "route_name": "fleet.orders.store"},
            ],
        }
    ]
    assert chain["model"] == {"file": "app/Employer/Models/Order.php", "class_name": "Order"}
    assert [repo["type"] for repo in chain["repositories"]] == ["domain", "infrastructure"]
    assert chain["transformers"][0]["class_name"] == "OrderTransformer"
    assert chain["validation_requests"][0]["class_name"] == "StoreOrderRequest"


def test_tests_for_file(dispatcher) -> None:
    found = _call(
        dispatcher,
        "find_tests_for_file",
        file_path="app/Employer/Infrastructure/Order/Controllers/OrderController.php",
    )

    assert found["file_type"] == "controller"
    assert [(t["test_type"], t["test_file"]) for t in found["tests"]] == [
        ("feature", "tests/Feature/Employer/OrderControllerTest.php"),
        ("cypress", "cypress/e2e/employer/specs/order/OrderController.cy.js"),
    ]
    assert found["tests"][0]["test_class"] == "OrderControllerTest"
    assert found["tests"][1]["test_class"] is None
    assert found["coverage_summary"] == {
        "has_unit_tests": False,
        "has_feature_tests": True,
        "has_e2e_tests": True,
        "total_test_count": 2,
    }


def test_untested_detection_reports_coverage(make_tree) -> None:
    root = make_tree(
        {
            "app/Dealer/Services/PriceService.php": "<?php\n",
            "app/Dealer/Services/StockService.php": "<?php\n\nclass StockService {}\n",
            "tests/Unit/Dealer/PriceServiceTest.php": "<?php\n",
        }
    )
    engine = QueryEngine(AnalyzerConfig(base_path=str(root)))

    report = engine.tests.untested_files("Dealer")

    assert report["summary"] == {
        "total_files": 2,
        "tested_files": 1,
        "untested_files": 1,
        "coverage_percentage": 50,
    }
    (entry,) = report["untested_files"]
    assert entry["file"] == "app/Dealer/Services/StockService.php"
    assert entry["suggested_test_location"] == "tests/Unit/Dealer/StockServiceTest.php"
    assert entry["complexity_score"] == 4


def test_untested_detection_by_file_type(dispatcher) -> None:
    repositories = _call(dispatcher, "find_untested_files", domain="Employer", file_type="repository")

    assert repositories["summary"]["total_files"] == 2
    assert repositories["summary"]["coverage_percentage"] == 50
    assert [e["file"] for e in repositories["untested_files"]] == [
        "app/Employer/Infrastructure/Order/Repositories/EloquentOrderRepository.php"
    ]

    empty = _call(dispatcher, "find_untested_files", domain="Customer", file_type="controller")
    assert empty["summary"]["coverage_percentage"] == 0
    assert empty["untested_files"] == []


def test_test_structure_info_is_static(dispatcher) -> None:
    info = _call(dispatcher, "get_test_structure_info")

    assert info["test_directories"]["unit"] == "tests/Unit"
    assert {base["class_name"] for base in info["test_base_classes"]} >= {"TestCase", "FleetTestCase"}


def test_component_usage_requires_import_and_tag(dispatcher) -> None:
    usage = _call(dispatcher, "find_component_usage", component_name="Button")

    assert usage["component_definition"] == {
        "file": "app/Employer/UI/resources/js/components/Button.vue",
        "domain": "Employer",
    }
    # Toolbar imports Button but never renders it.
    assert usage["usages"] == [
        {
            "file": "app/Employer/UI/resources/js/components/OrderTable.vue",
            "file_type": "component",
            "domain": "Employer",
            "usage_count": 2,
        }
    ]
    assert usage["usage_summary"] == {
        "total_usages": 2,
        "files_using": 1,
        "pages_using": 0,
        "components_using": 1,
        "domains_using": ["Employer"],
    }


def test_component_usage_unknown_component(dispatcher) -> None:
    result = dispatcher.invoke("find_component_usage", {"component_name": "Modal"})

    assert result.is_error
    assert result.text == "Error executing find_component_usage: Component 'Modal' not found"


def test_unused_components_skip_shared_building_blocks(dispatcher) -> None:
    report = _call(dispatcher, "find_unused_components", domain="Employer")

    assert report["summary"] == {
        "total_components": 3,
        "used_components": 2,
        "unused_components": 1,
    }
    (orphan,) = report["unused_components"]
    assert orphan["component_name"] == "Orphan"
    assert orphan["domain"] == "Employer"
    assert orphan["last_modified"].endswith("Z")
    assert orphan["lines_of_code"] == 2


def test_inertia_pages_and_props(dispatcher) -> None:
    pages = _call(dispatcher, "list_inertia_pages")
    assert pages["pages"] == [
        {
            "domain": "Employer",
            "page_name": "Order/Index",
            "file_path": "app/Employer/UI/resources/js/pages/Order/Index.vue",
        }
    ]

    props = _call(dispatcher, "find_page_props", page_name="Order/Index")
    assert props["page_file"] == "app/Employer/UI/resources/js/pages/Order/Index.vue"
    assert props["controllers_using_page"] == [
        {
            "controller": "app/Employer/Infrastructure/Order/Controllers/OrderController.php",
            "class_name": "OrderController",
            "props": ["orders", "filters"],
        }
    ]

    missing = dispatcher.invoke("find_page_props", {"page_name": "Order/Show"})
    assert missing.is_error
    assert missing.error_kind == "not_found"


def test_lookups_are_idempotent(dispatcher, route_source) -> None:
    calls = [
        ("query_domain_structure", {"domain": "Employer"}),
        ("find_service_chain", {"entity_name": "Order"}),
        ("list_all_routes", {"domain": "Employer"}),
        ("find_unused_components", {}),
    ]

    first = [dispatcher.invoke(name, args).text for name, args in calls]
    second = [dispatcher.invoke(name, args).text for name, args in calls]

    assert first == second
    assert route_source.calls == 1
