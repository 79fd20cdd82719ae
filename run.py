#!/usr/bin/env python3
"""
Catalog Seeder — Entry Point.

Pages through the commerce catalog and previews/publishes every product's
content paths through the AEM Admin API. Reads configuration from a .env file
and site-config.json, and saves the results as timestamped JSON output.

Modes:
  list   Fetch every product and save all-products.json (no Admin API calls)
  seed   (default) Preview and publish every product, using one of two strategies:
           batch  look up each SKU, then preview/publish it (5 at a time, 2s apart)
           bulk   preview all paths in one bulk job, publish the successes in another

Usage:
    python run.py                     # Seed with the configured strategy
    python run.py list                # List all products
    python run.py --strategy bulk     # Seed through Admin API bulk jobs
    python run.py --no-publish        # Preview only
    python run.py --debug             # Verbose output
    python run.py --version           # Show version
    python run.py --env /path         # Use alternate .env file
"""

import sys
import argparse
import logging
from importlib import metadata
from pathlib import Path

from catalog_seeder import SeedOrchestrator, LIST_MODE, SEED_MODE
from catalog_seeder.config import SEED_STRATEGIES

# Repo-root VERSION file (e.g., "0.1.0"); used when running from a checkout.
VERSION_FILE = Path(__file__).resolve().parent / "VERSION"


def get_version() -> str:
    """Return the installed package version, else the VERSION file's."""
    try:
        return metadata.version("catalog-seeder")
    except metadata.PackageNotFoundError:
        pass
    if VERSION_FILE.exists():
        return VERSION_FILE.read_text().strip()
    return "unknown"


VERSION = get_version()


def main():
    """Parse CLI arguments and run the list or seed pipeline."""
    parser = argparse.ArgumentParser(
        description="Catalog Seeder - Preview and publish commerce product pages"
    )
    parser.add_argument(
        "mode", nargs="?", default=SEED_MODE,
        help="'list' to list all products; anything else seeds (default: seed)",
    )
    parser.add_argument("--env", "-e", default="./.env", help="Path to .env file")
    parser.add_argument("--strategy", choices=SEED_STRATEGIES, help="Seed strategy override")
    parser.add_argument("--no-publish", action="store_true", help="Preview only, skip publish")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--version", "-v", action="store_true", help="Show version and exit")

    args = parser.parse_args()

    if args.version:
        print(f"catalog-seeder {VERSION}")
        sys.exit(0)

    # Enable HTTP request logging if --debug flag is set
    if args.debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(name)s - %(levelname)s - %(message)s'
        )
        logging.getLogger('urllib3').setLevel(logging.DEBUG)

    mode = LIST_MODE if args.mode == LIST_MODE else SEED_MODE

    # Initialize the orchestrator (loads .env and builds internal config)
    orchestrator = SeedOrchestrator(env_file=args.env)

    # Apply CLI overrides on top of .env values
    if args.strategy:
        orchestrator.seed_strategy = args.strategy
    if args.no_publish:
        orchestrator.should_publish = False
    if args.debug:
        orchestrator.debug = True

    # Print header
    print(f"\n{'='*60}")
    print(f"CATALOG SEEDER v{VERSION}")
    print("="*60)
    print(f"Mode: {mode.upper()}")
    print(f"Catalog: {orchestrator.catalog_endpoint}")
    print(f"Store: {orchestrator.store_context.store_code}/{orchestrator.store_context.store_view_code}")
    if mode == SEED_MODE:
        print(f"Strategy: {orchestrator.seed_strategy}")
        print(f"Publish: {'Enabled' if orchestrator.should_publish else 'Disabled'}")

    # Validate required configuration before proceeding
    if not orchestrator.validate_config(mode):
        sys.exit(1)

    # Cleanup old output folders based on retention policy
    if orchestrator.output_manager.retention_days > 0:
        deleted = orchestrator.output_manager.cleanup_old_folders(orchestrator.debug)
        if deleted > 0:
            print(f"Cleaned up {deleted} old output folder(s)")

    results = orchestrator.run(mode)

    orchestrator.print_summary(results)

    # Exit with error code if the run failed
    if not results.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
