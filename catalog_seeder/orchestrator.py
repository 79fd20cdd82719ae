"""
Seed Orchestrator — Pipeline coordination for catalog listing and seeding.

This module ties together the catalog client, the Admin API client and the
seed strategies. A run has three steps:

  Step 1: LOAD CONFIGURATION
      Build the catalog client for the configured backend (Live Search or
      core catalog). In seed mode, load site-config.json and build the Admin
      API client and the selected seed strategy.

  Step 2: LIST PRODUCTS / SEED PRODUCTS
      Page through the catalog strictly in order: page N+1 is requested only
      after page N's response (which carries total_pages) has been handled.
        list mode  accumulate every product
        seed mode  hand each page to the seed strategy, then finish it

  Step 3: SAVE OUTPUT
      Write the products or the strategy's reports as JSON into a
      timestamped output directory, plus seed_results.json run metadata.

Failure policy:
    A page that cannot be fetched or parsed aborts the run; products already
    listed, or work already submitted by the batch strategy, are still saved.
    Per-product catalog lookup failures are recorded by the strategy and the
    product is skipped. Bulk job failures abort the run after saving the
    reports of any stage that completed.

Configuration:
    All settings are loaded from environment variables (typically via .env file).
    Required: CATALOG_ENDPOINT, CATALOG_API_KEY, MAGENTO_ENVIRONMENT_ID,
    MAGENTO_WEBSITE_CODE, MAGENTO_STORE_CODE, MAGENTO_STORE_VIEW_CODE.
    Seed mode also needs a site config with org/site and an Admin API key.
    See config/settings.py for defaults.

Typical usage:
    orchestrator = SeedOrchestrator(env_file="./.env")
    if orchestrator.validate_config(mode="seed"):
        results = orchestrator.run(mode="seed")
        orchestrator.print_summary(results)
"""

import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from dotenv import load_dotenv

from .admin_client import AdminClient
from .catalog_client import CatalogClient, create_catalog_client
from .config import DEFAULT_SETTINGS, REQUIRED_CATALOG_ENV_VARS, SEED_STRATEGIES
from .errors import BulkJobError, ParseError, SeederError
from .models import Product, SiteConfig, StoreContext
from .output_manager import OutputManager
from .seed_strategies import BatchSeedStrategy, BulkSeedStrategy, SeedStrategy

LIST_MODE = "list"
SEED_MODE = "seed"


def _env_str(name: str) -> str:
    return os.getenv(name, str(DEFAULT_SETTINGS[name]))


def _env_bool(name: str) -> bool:
    return _env_str(name).lower() == "true"


def _env_int(name: str) -> int:
    return int(_env_str(name))


def _env_float(name: str) -> float:
    return float(_env_str(name))


class SeedOrchestrator:
    """Orchestrates catalog listing and preview/publish seeding.

    Attributes:
        catalog_endpoint: Catalog GraphQL endpoint (CATALOG_ENDPOINT).
        catalog_api_key: Catalog API key (CATALOG_API_KEY).
        environment_id, website_code: Magento context headers.
        store_context: Active store/view codes (MAGENTO_STORE_CODE/MAGENTO_STORE_VIEW_CODE).
        helix_api_key: Admin API key (HELIX_ADMIN_API_KEY), unless site-config.json has one.
        site_config_path: Path to site-config.json.
        use_live_search: Page through Live Search (True) or the core catalog.
        seed_strategy: "batch" or "bulk".
        should_publish: Whether to publish after preview.
        batch_size, batch_delay_ms: Per-product pipeline paging and rate limit.
        list_page_size: Page size for list mode and the bulk strategy.
        poll_interval, poll_backoff, poll_max_interval, poll_timeout: Bulk job polling.
        request_timeout: Per-request HTTP timeout in seconds.
        debug: Whether to enable verbose output.
        output_manager: Handles timestamped output directories and retention cleanup.
        site_config: The loaded SiteConfig (None until loaded).
    """

    def __init__(self, env_file: str = "./.env"):
        """Initialize the orchestrator by loading configuration from environment.

        Args:
            env_file: Path to a .env file. If the file exists, it is loaded via
                      python-dotenv. Otherwise, falls back to system environment.
        """
        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path)
            print(f"Loaded configuration from: {env_file}")
        else:
            print(f"Warning: {env_file} not found, using defaults/environment")

        # Catalog connection (required)
        self.catalog_endpoint = os.getenv("CATALOG_ENDPOINT", "")
        self.catalog_api_key = os.getenv("CATALOG_API_KEY", "")
        self.environment_id = os.getenv("MAGENTO_ENVIRONMENT_ID", "")
        self.website_code = os.getenv("MAGENTO_WEBSITE_CODE", "")
        self.store_context = StoreContext(
            store_code=os.getenv("MAGENTO_STORE_CODE", ""),
            store_view_code=os.getenv("MAGENTO_STORE_VIEW_CODE", ""),
        )

        # Admin API
        self.helix_api_key = os.getenv("HELIX_ADMIN_API_KEY", "")
        self.site_config_path = _env_str("SITE_CONFIG_PATH")

        # Processing options
        self.use_live_search = _env_bool("USE_LIVE_SEARCH")
        self.seed_strategy = _env_str("SEED_STRATEGY").lower()
        self.should_publish = _env_bool("SHOULD_PUBLISH")
        self.batch_size = _env_int("BATCH_SIZE")
        self.batch_delay_ms = _env_int("BATCH_DELAY_MS")
        self.list_page_size = _env_int("LIST_PAGE_SIZE")
        self.debug = _env_bool("DEBUG")

        # Bulk job polling (timeout 0 = poll until the job stops)
        self.poll_interval = _env_float("JOB_POLL_INTERVAL")
        self.poll_backoff = _env_float("JOB_POLL_BACKOFF")
        self.poll_max_interval = _env_float("JOB_POLL_MAX_INTERVAL")
        self.poll_timeout = _env_float("JOB_POLL_TIMEOUT")
        self.request_timeout = _env_float("REQUEST_TIMEOUT")

        provider_name = _env_str("PROVIDER_NAME")
        output_dir = _env_str("OUTPUT_DIR")
        retention_days = _env_int("OUTPUT_RETENTION_DAYS")
        self.output_manager = OutputManager(output_dir, provider_name, retention_days)

        self.site_config: Optional[SiteConfig] = None
        self.saved_outputs: List[str] = []

    def validate_config(self, mode: str = SEED_MODE) -> bool:
        """Validate that all required configuration values are present.

        Checks:
            - The catalog endpoint, API key and Magento context variables are set
            - In seed mode: the strategy is known, the site config loads and
              has org/site, and an Admin API key is available

        Returns:
            True if all required values are present, False otherwise.
            Prints specific error messages for each missing value.
        """
        required = {
            "CATALOG_ENDPOINT": self.catalog_endpoint,
            "CATALOG_API_KEY": self.catalog_api_key,
            "MAGENTO_ENVIRONMENT_ID": self.environment_id,
            "MAGENTO_WEBSITE_CODE": self.website_code,
            "MAGENTO_STORE_CODE": self.store_context.store_code,
            "MAGENTO_STORE_VIEW_CODE": self.store_context.store_view_code,
        }
        errors = [f"{name} is required" for name in REQUIRED_CATALOG_ENV_VARS if not required[name]]

        if mode != LIST_MODE:
            if self.seed_strategy not in SEED_STRATEGIES:
                errors.append(
                    f"SEED_STRATEGY must be one of {', '.join(SEED_STRATEGIES)} (got {self.seed_strategy!r})"
                )
            try:
                site_config = self.load_site_config()
            except (OSError, ParseError) as e:
                errors.append(f"Could not load site config {self.site_config_path}: {e}")
            else:
                if not site_config.org or not site_config.site:
                    errors.append(f"Site config {self.site_config_path} needs org and site")
                if not site_config.helix_api_key:
                    errors.append("HELIX_ADMIN_API_KEY is required (or helixApiKey in the site config)")

        if errors:
            print("\nConfiguration Errors:")
            for err in errors:
                print(f"  - {err}")
            return False
        return True

    def load_site_config(self) -> SiteConfig:
        if self.site_config is None:
            self.site_config = SiteConfig.load(self.site_config_path, self.helix_api_key)
        return self.site_config

    def create_catalog_client(self) -> CatalogClient:
        return create_catalog_client(
            self.use_live_search,
            endpoint=self.catalog_endpoint,
            api_key=self.catalog_api_key,
            environment_id=self.environment_id,
            website_code=self.website_code,
            store_code=self.store_context.store_code,
            store_view_code=self.store_context.store_view_code,
            timeout=self.request_timeout,
            debug=self.debug,
        )

    def create_admin_client(self, site_config: SiteConfig) -> AdminClient:
        return AdminClient(
            site_config,
            timeout=self.request_timeout,
            poll_interval=self.poll_interval,
            poll_backoff=self.poll_backoff,
            poll_max_interval=self.poll_max_interval,
            poll_timeout=self.poll_timeout or None,
            debug=self.debug,
        )

    def create_strategy(self, catalog: CatalogClient, admin: AdminClient) -> SeedStrategy:
        if self.seed_strategy == BulkSeedStrategy.name:
            return BulkSeedStrategy(
                catalog, admin, self.store_context,
                page_size=self.list_page_size,
                should_publish=self.should_publish,
                debug=self.debug,
            )
        return BatchSeedStrategy(
            catalog, admin, self.store_context,
            page_size=self.batch_size,
            should_publish=self.should_publish,
            debug=self.debug,
            delay_ms=self.batch_delay_ms,
        )

    def walk_pages(
        self,
        catalog: CatalogClient,
        page_size: int,
        on_page: Callable[[List[Product]], Any],
        between_pages: Optional[Callable[[], Any]] = None,
    ) -> int:
        """Fetch every catalog page in order, handing each page's products to on_page.

        total_pages starts at 2 so the first page is always requested, and is
        replaced by the value each response reports.

        Returns:
            The number of pages fetched.

        Raises:
            NetworkError, GraphQLError, ParseError: If a page cannot be fetched.
        """
        current_page = 1
        total_pages = 2
        fetched = 0

        while current_page <= total_pages:
            print(f"  Fetching page {current_page} of {total_pages}...")
            page = catalog.fetch_product_page(page_size, current_page)
            fetched += 1
            on_page(page.items)

            total_pages = page.page_info.total_pages
            current_page += 1

            if between_pages and current_page <= total_pages:
                between_pages()

        return fetched

    def list_products(self, catalog: CatalogClient) -> List[Product]:
        """Page through the whole catalog and return every product.

        If a page fails, the products fetched so far are saved as
        all-products.json before the error propagates.
        """
        products: List[Product] = []
        try:
            self.walk_pages(catalog, self.list_page_size, products.extend)
        except SeederError:
            print("  Failed to fetch data. Exiting.")
            self._save_outputs({"all-products.json": [p.to_dict() for p in products]})
            raise
        return products

    def seed_products(self, catalog: CatalogClient, strategy: SeedStrategy) -> Dict[str, Any]:
        """Page through the catalog with a seed strategy and return its report.

        If a page fails, the strategy's outstanding work is still collected
        and saved before the error propagates.
        """
        try:
            self.walk_pages(catalog, strategy.page_size, strategy.process_page, strategy.between_pages)
        except SeederError:
            print("  Failed to fetch data. Exiting.")
            report = strategy.finish(aborted=True)
            self._save_outputs(report["outputs"])
            raise

        try:
            return strategy.finish()
        except BulkJobError as e:
            self._save_outputs(e.outputs)
            raise

    def run(self, mode: str = SEED_MODE) -> Dict[str, Any]:
        """Execute the list or seed pipeline.

        Args:
            mode: "list" for list mode; anything else seeds.

        Returns:
            A dict containing:
                - started_at/completed_at: ISO timestamps
                - mode, strategy: What ran
                - config: Endpoint, backend and store context
                - success: True if all steps completed without error
                - summary: Counts reported by list mode or the strategy
                - elapsed_seconds: Wall-clock run time
                - outputs: Paths of the written output files
                - error: Error message (if success=False)
        """
        mode = LIST_MODE if mode == LIST_MODE else SEED_MODE
        start = time.monotonic()
        results: Dict[str, Any] = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "mode": mode,
            "strategy": self.seed_strategy if mode == SEED_MODE else None,
            "config": {
                "catalog_endpoint": self.catalog_endpoint,
                "backend": "live-search" if self.use_live_search else "core",
                "store_code": self.store_context.store_code,
                "store_view_code": self.store_context.store_view_code,
                "should_publish": self.should_publish,
            },
            "success": False,
        }

        try:
            # Step 1: Build clients from configuration
            print(f"\n{'='*60}")
            print("STEP 1: LOAD CONFIGURATION")
            print("="*60)
            catalog = self.create_catalog_client()
            print(f"  Catalog backend: {catalog.backend}")

            if mode == LIST_MODE:
                # Step 2: Walk the whole catalog
                print(f"\n{'='*60}")
                print("STEP 2: LIST PRODUCTS")
                print("="*60)
                products = self.list_products(catalog)
                print(f"  Products: {len(products)}")

                # Step 3: Save the listing
                print(f"\n{'='*60}")
                print("STEP 3: SAVE OUTPUT")
                print("="*60)
                self._save_outputs({"all-products.json": [p.to_dict() for p in products]})
                results["summary"] = {"products": len(products)}
            else:
                site_config = self.load_site_config()
                print(f"  Site: {site_config.org}/{site_config.site} ({site_config.ref})")
                admin = self.create_admin_client(site_config)
                strategy = self.create_strategy(catalog, admin)
                print(f"  Strategy: {strategy.name} (page size {strategy.page_size})")

                # Step 2: Preview/publish every product
                print(f"\n{'='*60}")
                print("STEP 2: SEED PRODUCTS")
                print("="*60)
                report = self.seed_products(catalog, strategy)

                # Step 3: Save the strategy's reports
                print(f"\n{'='*60}")
                print("STEP 3: SAVE OUTPUT")
                print("="*60)
                self._save_outputs(report["outputs"])
                results["summary"] = report["summary"]

            results["success"] = True

        except Exception as e:
            results["error"] = str(e)
            print(f"\n  ERROR: {e}")
            if self.debug:
                import traceback
                traceback.print_exc()

        results["outputs"] = list(self.saved_outputs)
        results["elapsed_seconds"] = round(time.monotonic() - start, 3)
        results["completed_at"] = datetime.now(timezone.utc).isoformat()

        # Save run metadata alongside the outputs
        results_path = self.output_manager.write_json("seed_results.json", results)
        print(f"\n  Results saved to: {results_path}")

        return results

    def _save_outputs(self, outputs: Dict[str, Any]) -> None:
        for filename, data in outputs.items():
            path = self.output_manager.write_json(filename, data)
            print(f"  Saved {filename}: {path}")
            self.saved_outputs.append(path)

    def print_summary(self, results: Dict):
        """Print a human-readable execution summary.

        Args:
            results: The dict returned by run().
        """
        print(f"\n{'='*60}")
        print("LIST COMPLETE" if results.get("mode") == LIST_MODE else "SEED COMPLETE")
        print("="*60)
        print(f"Status: {'SUCCESS' if results.get('success') else 'FAILED'}")
        if results.get("strategy"):
            print(f"Strategy: {results['strategy']}")

        for key, value in (results.get("summary") or {}).items():
            print(f"{key.replace('_', ' ').capitalize()}: {value}")

        elapsed = int(results.get("elapsed_seconds", 0))
        minutes, seconds = divmod(elapsed, 60)
        print(f"Execution time: {minutes} minute(s) and {seconds} second(s).")

        if results.get("error"):
            print(f"Error: {results['error']}")
