"""Tests for catalog_seeder.orchestrator.SeedOrchestrator."""

import json
import os
from unittest.mock import MagicMock, patch

import pytest

from catalog_seeder.errors import BulkJobError, GraphQLError, NetworkError
from catalog_seeder.models import PageInfo, Product, ProductPage
from catalog_seeder.orchestrator import LIST_MODE, SEED_MODE, SeedOrchestrator
from catalog_seeder.seed_strategies import BatchSeedStrategy, BulkSeedStrategy


_BASE_ENV = {
    "CATALOG_ENDPOINT": "https://catalog.example.com/graphql",
    "CATALOG_API_KEY": "catalog-key",
    "MAGENTO_ENVIRONMENT_ID": "env-1",
    "MAGENTO_WEBSITE_CODE": "base",
    "MAGENTO_STORE_CODE": "main",
    "MAGENTO_STORE_VIEW_CODE": "default",
    "HELIX_ADMIN_API_KEY": "helix-key",
    "SEED_STRATEGY": "batch",
    "DEBUG": "false",
    "OUTPUT_RETENTION_DAYS": "30",
}


@pytest.fixture
def site_config_file(tmp_path):
    path = tmp_path / "site-config.json"
    path.write_text(json.dumps({
        "org": "acme",
        "site": "shop",
        "confMap": {
            "base": {},
            "/us/p/{{urlkey}}": {"storeCode": "main", "storeViewCode": "default", "pageType": "product"},
        },
    }))
    return str(path)


def _make_orchestrator(tmp_path, env_overrides=None):
    env = dict(_BASE_ENV)
    env["OUTPUT_DIR"] = str(tmp_path / "output")
    env.setdefault("SITE_CONFIG_PATH", str(tmp_path / "site-config.json"))
    if env_overrides:
        env.update(env_overrides)

    with patch.dict(os.environ, env, clear=True):
        orchestrator = SeedOrchestrator(env_file="/nonexistent/.env")
    return orchestrator


def _page(skus, current_page, total_pages):
    return ProductPage(
        items=[Product(sku=sku, url_key=sku.lower()) for sku in skus],
        page_info=PageInfo(current_page=current_page, total_pages=total_pages, page_size=len(skus)),
    )


def _catalog(pages):
    catalog = MagicMock()
    catalog.backend = "live-search"
    catalog.fetch_product_page.side_effect = pages
    return catalog


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

def test_defaults(tmp_path):
    orch = _make_orchestrator(tmp_path)
    assert orch.use_live_search is True
    assert orch.should_publish is True
    assert orch.batch_size == 5
    assert orch.batch_delay_ms == 2000
    assert orch.list_page_size == 500
    assert orch.poll_interval == 1.0
    assert orch.poll_timeout == 0
    assert orch.store_context.store_code == "main"


def test_validate_config_list_mode(tmp_path):
    orch = _make_orchestrator(tmp_path)
    # no site config needed to list
    assert orch.validate_config(LIST_MODE) is True


@pytest.mark.parametrize("missing", [
    "CATALOG_ENDPOINT",
    "CATALOG_API_KEY",
    "MAGENTO_ENVIRONMENT_ID",
    "MAGENTO_WEBSITE_CODE",
    "MAGENTO_STORE_CODE",
    "MAGENTO_STORE_VIEW_CODE",
])
def test_validate_config_missing_catalog_setting(tmp_path, missing):
    orch = _make_orchestrator(tmp_path, env_overrides={missing: ""})
    assert orch.validate_config(LIST_MODE) is False


def test_validate_config_seed_mode(tmp_path, site_config_file):
    orch = _make_orchestrator(tmp_path, env_overrides={"SITE_CONFIG_PATH": site_config_file})
    assert orch.validate_config(SEED_MODE) is True
    assert orch.site_config.org == "acme"
    assert orch.site_config.helix_api_key == "helix-key"


def test_validate_config_seed_mode_missing_site_config(tmp_path):
    orch = _make_orchestrator(tmp_path)
    assert orch.validate_config(SEED_MODE) is False


def test_validate_config_seed_mode_needs_admin_key(tmp_path, site_config_file):
    orch = _make_orchestrator(
        tmp_path, env_overrides={"SITE_CONFIG_PATH": site_config_file, "HELIX_ADMIN_API_KEY": ""}
    )
    assert orch.validate_config(SEED_MODE) is False


def test_validate_config_unknown_strategy(tmp_path, site_config_file):
    orch = _make_orchestrator(
        tmp_path, env_overrides={"SITE_CONFIG_PATH": site_config_file, "SEED_STRATEGY": "parallel"}
    )
    assert orch.validate_config(SEED_MODE) is False


def test_create_strategy(tmp_path, site_config_file):
    orch = _make_orchestrator(tmp_path, env_overrides={"SITE_CONFIG_PATH": site_config_file})
    admin = orch.create_admin_client(orch.load_site_config())

    batch = orch.create_strategy(MagicMock(), admin)
    assert isinstance(batch, BatchSeedStrategy)
    assert batch.page_size == 5
    assert batch.delay_ms == 2000
    batch.finish()

    orch.seed_strategy = "bulk"
    bulk = orch.create_strategy(MagicMock(), admin)
    assert isinstance(bulk, BulkSeedStrategy)
    assert bulk.page_size == 500


def test_poll_timeout_zero_means_unbounded(tmp_path, site_config_file):
    orch = _make_orchestrator(tmp_path, env_overrides={"SITE_CONFIG_PATH": site_config_file})
    assert orch.create_admin_client(orch.load_site_config()).poll_timeout is None

    orch = _make_orchestrator(
        tmp_path, env_overrides={"SITE_CONFIG_PATH": site_config_file, "JOB_POLL_TIMEOUT": "600"}
    )
    assert orch.create_admin_client(orch.load_site_config()).poll_timeout == 600


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

def test_list_products_in_page_order(tmp_path):
    orch = _make_orchestrator(tmp_path)
    catalog = _catalog([
        _page(["A", "B"], 1, 3),
        _page(["C", "D"], 2, 3),
        _page(["E"], 3, 3),
    ])

    products = orch.list_products(catalog)

    assert [p.sku for p in products] == ["A", "B", "C", "D", "E"]
    requested = [c[0] for c in catalog.fetch_product_page.call_args_list]
    assert requested == [(500, 1), (500, 2), (500, 3)]


def test_single_page_catalog(tmp_path):
    orch = _make_orchestrator(tmp_path)
    catalog = _catalog([_page(["A"], 1, 1)])
    assert [p.sku for p in orch.list_products(catalog)] == ["A"]
    assert catalog.fetch_product_page.call_count == 1


def test_between_pages_only_when_more_pages_follow(tmp_path):
    orch = _make_orchestrator(tmp_path)
    catalog = _catalog([_page(["A"], 1, 3), _page(["B"], 2, 3), _page(["C"], 3, 3)])
    on_page = MagicMock()
    between = MagicMock()

    fetched = orch.walk_pages(catalog, 5, on_page, between)

    assert fetched == 3
    assert on_page.call_count == 3
    assert between.call_count == 2


def test_seed_products_page_failure_collects_outstanding_work(tmp_path):
    orch = _make_orchestrator(tmp_path)
    catalog = _catalog([_page(["A"], 1, 3), NetworkError("network response was not ok: 502")])
    strategy = MagicMock()
    strategy.page_size = 5
    strategy.finish.return_value = {"summary": {}, "outputs": {"publish-results.json": [{"sku": "A"}]}}

    with pytest.raises(NetworkError):
        orch.seed_products(catalog, strategy)

    strategy.finish.assert_called_once_with(aborted=True)
    assert len(orch.saved_outputs) == 1
    with open(orch.saved_outputs[0]) as f:
        assert json.load(f) == [{"sku": "A"}]


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------

def test_run_list_mode_writes_products(tmp_path):
    orch = _make_orchestrator(tmp_path)
    orch.create_catalog_client = MagicMock(return_value=_catalog([
        _page(["A", "B"], 1, 2),
        _page(["C"], 2, 2),
    ]))

    results = orch.run(LIST_MODE)

    assert results["success"] is True
    assert results["summary"] == {"products": 3}
    products_path = orch.output_manager.get_output_path("all-products.json")
    with open(products_path) as f:
        assert [p["sku"] for p in json.load(f)] == ["A", "B", "C"]
    assert os.path.exists(orch.output_manager.get_output_path("seed_results.json"))


def test_run_aborts_on_graphql_error(tmp_path):
    orch = _make_orchestrator(tmp_path)
    orch.create_catalog_client = MagicMock(return_value=_catalog([
        GraphQLError([{"message": "Internal server error"}]),
    ]))

    results = orch.run(LIST_MODE)

    assert results["success"] is False
    assert "Internal server error" in results["error"]
    with open(orch.output_manager.get_output_path("seed_results.json")) as f:
        assert json.load(f)["success"] is False


def test_run_list_mode_page_failure_keeps_fetched_products(tmp_path):
    orch = _make_orchestrator(tmp_path)
    orch.create_catalog_client = MagicMock(return_value=_catalog([
        _page(["A", "B"], 1, 3),
        NetworkError("network response was not ok: 502"),
    ]))

    results = orch.run(LIST_MODE)

    assert results["success"] is False
    products_path = orch.output_manager.get_output_path("all-products.json")
    assert products_path in results["outputs"]
    with open(products_path) as f:
        assert [p["sku"] for p in json.load(f)] == ["A", "B"]


def test_run_seed_mode_bulk(tmp_path, site_config_file):
    orch = _make_orchestrator(
        tmp_path, env_overrides={"SITE_CONFIG_PATH": site_config_file, "SEED_STRATEGY": "bulk"}
    )
    orch.create_catalog_client = MagicMock(return_value=_catalog([_page(["A", "B"], 1, 1)]))
    admin = MagicMock()
    admin.config = orch.load_site_config()
    orch.create_admin_client = MagicMock(return_value=admin)

    from catalog_seeder.models import BulkJob, BulkResource

    admin.create_bulk_job.side_effect = [
        BulkJob("p", "preview", "stopped", [BulkResource("/us/p/a", 200), BulkResource("/us/p/b", 200)]),
        BulkJob("l", "publish", "stopped", [BulkResource("/us/p/a", 200), BulkResource("/us/p/b", 200)]),
    ]

    results = orch.run(SEED_MODE)

    assert results["success"] is True
    assert results["strategy"] == "bulk"
    assert results["summary"]["published"] == 2
    names = sorted(os.path.basename(p) for p in results["outputs"])
    assert names == ["bulk-live.json", "bulk-preview.json"]


def test_print_summary(tmp_path, capsys):
    orch = _make_orchestrator(tmp_path)
    orch.print_summary({
        "mode": SEED_MODE,
        "strategy": "batch",
        "success": True,
        "summary": {"published": 3},
        "elapsed_seconds": 125.4,
    })
    out = capsys.readouterr().out
    assert "SEED COMPLETE" in out
    assert "Published: 3" in out
    assert "2 minute(s) and 5 second(s)" in out


def test_seed_products_bulk_failure_saves_partial_reports(tmp_path):
    orch = _make_orchestrator(tmp_path)
    catalog = _catalog([_page(["A"], 1, 1)])
    strategy = MagicMock()
    strategy.page_size = 500
    strategy.finish.side_effect = BulkJobError(
        "live failed", outputs={"bulk-preview.json": {"job": "p", "successes": ["/us/p/a"]}}
    )

    with pytest.raises(BulkJobError):
        orch.seed_products(catalog, strategy)

    assert [os.path.basename(p) for p in orch.saved_outputs] == ["bulk-preview.json"]
    with open(orch.saved_outputs[0]) as f:
        assert json.load(f)["job"] == "p"
