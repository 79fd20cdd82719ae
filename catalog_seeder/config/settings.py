"""
Settings — Default configuration values for the catalog seeder.

This module provides the DEFAULT_SETTINGS dict that the orchestrator uses as
fallback values when environment variables are not set. The actual configuration
is loaded from .env at runtime; the defaults are: live search backend,
batches of 5, a 2 second delay between batches, and publish after preview.

Configuration precedence (highest to lowest):
  1. CLI flags (--strategy, --no-publish, --debug)
  2. Environment variables (from .env file)
  3. DEFAULT_SETTINGS (this file)

Settings reference:
  PROVIDER_NAME          Label used in output folder naming (e.g., "Catalog_Seeder")
  SITE_CONFIG_PATH       JSON file with org/site/confMap (default: ./site-config.json)
  USE_LIVE_SEARCH        Page through productSearch (True) or core products (False)
  SEED_STRATEGY          "batch" (per-product pipeline) or "bulk" (bulk jobs)
  SHOULD_PUBLISH         Whether to publish (live) after preview
  BATCH_SIZE             Products per page in the per-product pipeline
  BATCH_DELAY_MS         Pause between batches to respect Admin API rate limits
  LIST_PAGE_SIZE         Page size used by list mode
  JOB_POLL_INTERVAL      Seconds between bulk job status polls
  JOB_POLL_BACKOFF       Multiplier applied to the poll interval after each poll
  JOB_POLL_MAX_INTERVAL  Upper bound for the poll interval when backing off
  JOB_POLL_TIMEOUT       Seconds to wait for a bulk job (0 = wait forever)
  REQUEST_TIMEOUT        Per-request HTTP timeout in seconds
  OUTPUT_DIR             Where to write run output (default: ./output)
  OUTPUT_RETENTION_DAYS  How many days to keep old output folders (0 = keep forever)
  DEBUG                  Whether to print verbose output (default: False)
"""

PROVIDER_NAME = "Catalog_Seeder"

SEED_STRATEGIES = ("batch", "bulk")

DEFAULT_SETTINGS = {
    "PROVIDER_NAME": PROVIDER_NAME,
    "SITE_CONFIG_PATH": "./site-config.json",
    "USE_LIVE_SEARCH": True,
    "SEED_STRATEGY": "batch",
    "SHOULD_PUBLISH": True,
    "BATCH_SIZE": 5,
    "BATCH_DELAY_MS": 2000,
    "LIST_PAGE_SIZE": 500,
    "JOB_POLL_INTERVAL": 1.0,
    "JOB_POLL_BACKOFF": 1.0,
    "JOB_POLL_MAX_INTERVAL": 30.0,
    "JOB_POLL_TIMEOUT": 0,
    "REQUEST_TIMEOUT": 30,
    "OUTPUT_DIR": "./output",
    "OUTPUT_RETENTION_DAYS": 30,
    "DEBUG": False,
}

# Environment variables that must be present for any run
REQUIRED_CATALOG_ENV_VARS = [
    "CATALOG_ENDPOINT",
    "CATALOG_API_KEY",
    "MAGENTO_ENVIRONMENT_ID",
    "MAGENTO_WEBSITE_CODE",
    "MAGENTO_STORE_CODE",
    "MAGENTO_STORE_VIEW_CODE",
]
