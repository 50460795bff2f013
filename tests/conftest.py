from collections.abc import Callable
from pathlib import Path

import pytest

from o2o_analyzer.agent.dispatcher import Dispatcher
from o2o_analyzer.config import AnalyzerConfig
from o2o_analyzer.external.artisan import ArtisanClient
from o2o_analyzer.external.phpstan import PhpstanRunner
from o2o_analyzer.external.process import ProcessOutput
from o2o_analyzer.query.engine import QueryEngine
from o2o_analyzer.routes.cache import RouteCache
from o2o_analyzer.types import RouteRecord

ORDER_CONTROLLER = """<?php

namespace App\\Employer\\Infrastructure\\Order\\Controllers;

use Inertia\\Inertia;

class OrderController
{
    public function index()
    {
        return Inertia::render('Order/Index', [
            'orders' => $this->orders->all(),
            'filters' => request()->all(),
        ]);
    }
}
"""

ORDER_MODEL = """<?php

namespace App\\Employer\\Models;

class Order extends Model
{
    protected $table = 'orders';

    public function scopeActive($query)
    {
        return $query->where('active', true);
    }

    public function scopeForEmployer($query, $employer)
    {
        return $query->where('employer_id', $employer->id);
    }
}
"""

ORDER_SERVICE = """<?php

namespace App\\Employer\\Services;

class OrderService
{
    public function totals()
    {
        return DB::table('orders')->sum('amount');
    }
}
"""

BUTTON = """<template>
  <button class="btn"><slot /></button>
</template>
"""

ORDER_TABLE = """<template>
  <div>
    <Button label="refresh" />
    <Button label="export" />
  </div>
</template>

<script>
import Button from './Button.vue'

export default { components: { Button } }
</script>
"""

TOOLBAR = """<template>
  <nav class="toolbar"></nav>
</template>

<script>
import Button from '../../../../../Employer/UI/resources/js/components/Button.vue'
</script>
"""

ORDER_INDEX_PAGE = """<template>
  <OrderTable :orders="orders" />
</template>

<script setup>
import OrderTable from '../../components/OrderTable.vue'
</script>
"""

LARAVEL_TREE: dict[str, str] = {
    "app/Employer/Infrastructure/Order/Controllers/OrderController.php": ORDER_CONTROLLER,
    "app/Employer/Domain/Order/Repositories/OrderRepositoryInterface.php": "<?php\n",
    "app/Employer/Domain/Order/Repositories/OrderRepository.php": "<?php\n",
    "app/Employer/Infrastructure/Order/Repositories/EloquentOrderRepository.php": "<?php\n",
    "app/Employer/Infrastructure/Order/Transformers/OrderTransformer.php": "<?php\n",
    "app/Employer/Infrastructure/Order/Requests/StoreOrderRequest.php": "<?php\n",
    "app/Employer/Models/Order.php": ORDER_MODEL,
    "app/Employer/Services/OrderService.php": ORDER_SERVICE,
    "app/Employer/UI/resources/js/components/Button.vue": BUTTON,
    "app/Employer/UI/resources/js/components/OrderTable.vue": ORDER_TABLE,
    "app/Employer/UI/resources/js/components/Orphan.vue": "<template><div /></template>\n",
    "app/Employer/UI/resources/js/components/Shared/Spinner.vue": "<template><i /></template>\n",
    "app/Employer/UI/resources/js/pages/Order/Index.vue": ORDER_INDEX_PAGE,
    "app/Employer/UI/node_modules/widget/Widget.vue": "<template />\n",
    "app/Customer/UI/resources/js/components/Toolbar.vue": TOOLBAR,
    "app/Dealer/Controllers/InvoiceController.php": "<?php\n",
    "tests/Unit/Employer/OrderRepositoryTest.php": "<?php\n\nclass OrderRepositoryTest {}\n",
    "tests/Feature/Employer/OrderControllerTest.php": "<?php\n\nclass OrderControllerTest {}\n",
    "cypress/e2e/employer/specs/order/OrderController.cy.js": "describe('orders', () => {})\n",
    "database/migrations/2024_01_01_000000_create_orders_table.php": (
        "<?php\n\nSchema::create('orders', function (Blueprint $table) {\n"
        "    $table->id();\n});\n"
    ),
}

ROUTE_TABLE = [
    {
        "name": "fleet.orders.index",
        "method": "GET",
        "uri": "/async/fleet/orders",
        "action": "App\\Employer\\Controllers\\OrderController@index",
        "middleware": ["auth"],
    },
    {
        "name": "fleet.orders.store",
        "method": "POST",
        "uri": "/async/fleet/orders",
        "action": "App\\Employer\\Controllers\\OrderController@store",
        "middleware": ["auth", "employer"],
    },
    {
        "name": "dealer.invoices.show",
        "method": "GET|HEAD",
        "uri": "/dealer/invoices/{invoice}",
        "action": "App\\Dealer\\Controllers\\InvoiceController@show",
        "middleware": None,
    },
    {
        "name": "login",
        "method": "GET|HEAD",
        "uri": "/login",
        "action": "App\\Core\\Controllers\\AuthController@show",
        "middleware": ["guest"],
    },
    {
        "name": None,
        "method": "GET|HEAD",
        "uri": "/up",
        "action": "Closure",
        "middleware": None,
    },
]


def write_tree(root: Path, files: dict[str, str]) -> Path:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


class FakeClock:
    """Manually advanced clock, in seconds like `time.time`."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, milliseconds: float) -> None:
        self.now += milliseconds / 1000.0


class FakeRouteSource:
    """Route refresh function that counts calls and can be told to fail."""

    def __init__(self, payload: list[dict[str, object]]) -> None:
        self.routes = [RouteRecord.from_payload(item) for item in payload]
        self.calls = 0
        self.error: Exception | None = None

    def __call__(self) -> list[RouteRecord]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.routes)


class StubRunner:
    """Process runner returning canned output and recording every command."""

    def __init__(self, output: ProcessOutput | None = None) -> None:
        self.output = output or ProcessOutput(
            returncode=1, stdout="", stderr="SQLSTATE[HY000] [2002] Connection refused"
        )
        self.commands: list[list[str]] = []
        self.error: Exception | None = None

    def __call__(self, args: list[str], *, cwd: Path, timeout: float) -> ProcessOutput:
        self.commands.append(list(args))
        if self.error is not None:
            raise self.error
        return self.output


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    def _make(files: dict[str, str]) -> Path:
        return write_tree(tmp_path, files)

    return _make


@pytest.fixture
def laravel_app(tmp_path: Path) -> Path:
    return write_tree(tmp_path, LARAVEL_TREE)


@pytest.fixture
def config(laravel_app: Path) -> AnalyzerConfig:
    return AnalyzerConfig(base_path=str(laravel_app))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def route_source() -> FakeRouteSource:
    return FakeRouteSource(ROUTE_TABLE)


@pytest.fixture
def runner() -> StubRunner:
    return StubRunner()


@pytest.fixture
def engine(
    config: AnalyzerConfig,
    route_source: FakeRouteSource,
    clock: FakeClock,
    runner: StubRunner,
) -> QueryEngine:
    return QueryEngine(
        config,
        route_cache=RouteCache(route_source, ttl_ms=config.route_cache_ttl_ms, clock=clock),
        artisan=ArtisanClient(config, runner=runner),
        phpstan=PhpstanRunner(config, runner=runner),
    )


@pytest.fixture
def dispatcher(config: AnalyzerConfig, engine: QueryEngine) -> Dispatcher:
    return Dispatcher.from_config(config, engine=engine)
