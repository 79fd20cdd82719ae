"""
Catalog seeder — Preview and publish commerce catalog product pages.

This package contains the modules behind run.py. Each module handles one concern:

  orchestrator.py     List/seed pipeline coordination (Steps 1-3)
  catalog_client.py   HTTP communication with the catalog GraphQL API
  graphql_queries.py  Catalog GraphQL query definitions
  path_resolver.py    Product -> content paths, from the site's confMap
  admin_client.py     Admin API preview/publish calls and bulk jobs
  seed_strategies.py  Per-product (batch) and bulk-job seeding
  output_manager.py   Timestamped output directories and retention cleanup
  models.py           SiteConfig, Product, PageInfo, BulkJob records
  errors.py           Exception taxonomy
"""

from .orchestrator import SeedOrchestrator, LIST_MODE, SEED_MODE
from .catalog_client import (
    CatalogClient,
    CoreCatalogClient,
    LiveSearchCatalogClient,
    create_catalog_client,
)
from .admin_client import AdminClient, create_admin_url
from .path_resolver import compute_paths
from .seed_strategies import SeedStrategy, BatchSeedStrategy, BulkSeedStrategy
from .output_manager import OutputManager
from .models import BulkJob, BulkResource, PageInfo, Product, ProductPage, SiteConfig, StoreContext
from .errors import (
    BulkJobError,
    GraphQLError,
    JobTimeoutError,
    NetworkError,
    NotFoundError,
    ParseError,
    SeederError,
)
