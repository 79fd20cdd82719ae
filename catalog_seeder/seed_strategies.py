"""
Seed Strategies — Alternative ways of previewing/publishing the catalog.

The orchestrator pages through the catalog and hands every page to a
SeedStrategy. Two strategies exist:

  BatchSeedStrategy ("batch")
      Per-product pipeline. Each product is first looked up in the catalog
      by SKU; products that exist are previewed/published individually on a
      thread pool. Pages are small (one batch) and a fixed delay separates
      batches to respect the Admin API rate limit. Submitted work is kept as
      (product, future) handles and joined once, in finish().

  BulkSeedStrategy ("bulk")
      Collects every product, resolves one path per product, and previews
      them all in one Admin API bulk job. Paths that previewed with HTTP 200
      are then published in a second bulk job.

A strategy's finish() returns a report:
    {"summary": {...counts...}, "outputs": {filename: data}}
which the orchestrator prints and writes to the run's output directory.
"""

import time
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict, List, Tuple

from .admin_client import AdminClient
from .catalog_client import CatalogClient
from .errors import BulkJobError, NetworkError, NotFoundError, ParseError
from .models import BulkJob, Product, StoreContext
from .path_resolver import compute_paths


class SeedStrategy(ABC):
    """Base class for seed strategies.

    Attributes:
        catalog: Catalog client used for SKU lookups.
        admin: Admin API client used for preview/publish.
        store_context: Store/view the site's path patterns are matched against.
        page_size: Page size the orchestrator should request.
        should_publish: Whether to publish (live) after preview.
        debug: If True, print verbose output.
    """

    name = ""

    def __init__(
        self,
        catalog: CatalogClient,
        admin: AdminClient,
        store_context: StoreContext,
        page_size: int,
        should_publish: bool = True,
        debug: bool = False,
    ):
        self.catalog = catalog
        self.admin = admin
        self.store_context = store_context
        self.page_size = page_size
        self.should_publish = should_publish
        self.debug = debug

    @abstractmethod
    def process_page(self, products: List[Product]) -> None:
        """Handle one page of products."""

    def between_pages(self) -> None:
        """Called after a page when more pages follow."""

    @abstractmethod
    def finish(self, aborted: bool = False) -> Dict[str, Any]:
        """Complete outstanding work and return the run report.

        Args:
            aborted: True when paging stopped on an error; outstanding work
                is still collected but no new work is started.
        """


class BatchSeedStrategy(SeedStrategy):
    """Validate each product in the catalog, then preview/publish it on a thread pool."""

    name = "batch"

    def __init__(self, *args, delay_ms: int = 2000, **kwargs):
        super().__init__(*args, **kwargs)
        self.delay_ms = delay_ms
        self.catalog_errors: List[Dict[str, Any]] = []
        self._handles: List[Tuple[Product, Future]] = []
        self._executor = ThreadPoolExecutor(
            max_workers=max(self.page_size, 1), thread_name_prefix="preview-publish"
        )

    def process_page(self, products: List[Product]) -> None:
        for product in products:
            if self.debug:
                print(f"  Fetching product {product.sku}...")
            try:
                self.catalog.fetch_product_by_sku(product.sku)
            except (NotFoundError, ParseError, NetworkError) as e:
                print(f"  Catalog error for {product.sku}: {e}")
                self.catalog_errors.append({"error": str(e), "product": product.to_dict()})
                continue

            print(f"  Publishing product {product.sku}...")
            future = self._executor.submit(
                self.admin.preview_publish,
                self.store_context,
                product.sku,
                product.url_key,
                self.should_publish,
            )
            self._handles.append((product, future))

    def between_pages(self) -> None:
        print(f"  Waiting for {self.delay_ms / 1000:g} seconds before next batch...")
        time.sleep(self.delay_ms / 1000)

    def finish(self, aborted: bool = False) -> Dict[str, Any]:
        results = []
        preview_errors = []

        # Join every submitted product; failures stay attached to their product
        for product, future in self._handles:
            try:
                results.append(future.result())
            except Exception as e:
                print(f"  Preview error for {product.sku}: {e}")
                preview_errors.append({"reason": str(e), "product": product.to_dict()})
        self._executor.shutdown(wait=True)

        outputs = {"publish-results.json": results}
        if preview_errors:
            outputs["preview-errors.json"] = preview_errors
        if self.catalog_errors:
            outputs["catalog-errors.json"] = self.catalog_errors

        return {
            "summary": {
                "submitted": len(self._handles),
                "published": len(results),
                "preview_errors": len(preview_errors),
                "catalog_errors": len(self.catalog_errors),
            },
            "outputs": outputs,
        }


class BulkSeedStrategy(SeedStrategy):
    """Preview every product path in one bulk job, then publish the successes in another."""

    name = "bulk"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.products: List[Product] = []

    def process_page(self, products: List[Product]) -> None:
        self.products.extend(products)

    def finish(self, aborted: bool = False) -> Dict[str, Any]:
        summary = {"products": len(self.products), "skipped": 0}
        outputs: Dict[str, Any] = {}
        if aborted:
            return {"summary": summary, "outputs": outputs}

        paths = []
        skipped = []
        for product in self.products:
            product_paths = compute_paths(
                self.admin.config, self.store_context, product.sku, product.url_key
            )
            if product_paths:
                paths.append(product_paths[0])
            else:
                skipped.append(product.to_dict())

        summary["skipped"] = len(skipped)
        if skipped:
            outputs["skipped-products.json"] = skipped
        if not paths:
            print("  No paths to preview")
            return {"summary": summary, "outputs": outputs}

        print(f"  Previewing {len(paths)} path(s) in a bulk job...")
        try:
            preview_job = self.admin.create_bulk_job("preview", paths)
        except BulkJobError as e:
            e.outputs = {**outputs, **e.outputs}
            raise
        preview_ok, preview_failed = self._split(preview_job)
        outputs["bulk-preview.json"] = self._stage_report(preview_job, preview_ok, preview_failed)
        summary["previewed"] = len(preview_ok)
        summary["preview_failures"] = len(preview_failed)
        print(f"  Preview: {len(preview_ok)} succeeded, {len(preview_failed)} failed")

        if self.should_publish and preview_ok:
            print(f"  Publishing {len(preview_ok)} path(s) in a bulk job...")
            try:
                live_job = self.admin.create_bulk_job("live", preview_ok)
            except BulkJobError as e:
                # The preview job already ran; keep its report
                e.outputs = {**outputs, **e.outputs}
                raise
            live_ok, live_failed = self._split(live_job)
            outputs["bulk-live.json"] = self._stage_report(live_job, live_ok, live_failed)
            summary["published"] = len(live_ok)
            summary["publish_failures"] = len(live_failed)
            print(f"  Publish: {len(live_ok)} succeeded, {len(live_failed)} failed")

        return {"summary": summary, "outputs": outputs}

    @staticmethod
    def _split(job: BulkJob) -> Tuple[List[str], List[Dict[str, Any]]]:
        successes = [r.path for r in job.resources if r.ok]
        failures = [r.to_dict() for r in job.resources if not r.ok]
        return successes, failures

    @staticmethod
    def _stage_report(job: BulkJob, successes: List[str], failures: List[Dict]) -> Dict[str, Any]:
        return {
            "job": job.name,
            "topic": job.topic,
            "successes": successes,
            "failures": failures,
        }
