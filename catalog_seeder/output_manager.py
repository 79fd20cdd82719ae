"""
Output Manager — Timestamped output directories and retention cleanup.

Each run writes into a folder under the base output directory named
YYYYMMDD_HHMM_{provider_name} (e.g., "20260220_1430_Catalog_Seeder").

Depending on the mode and strategy, the orchestrator saves:
  - all-products.json:     Every product listed by list mode
  - publish-results.json:  Per-product preview/publish outcomes (batch strategy)
  - preview-errors.json:   Products whose preview/publish call failed
  - catalog-errors.json:   Products missing from (or unreadable in) the catalog
  - bulk-preview.json:     Bulk preview job successes and failures
  - bulk-live.json:        Bulk publish job successes and failures
  - seed_results.json:     Run metadata, counts, errors

Folders older than OUTPUT_RETENTION_DAYS are deleted at the start of each
run. Set retention_days=0 to keep all output indefinitely.
"""

import json
import os
import re
import shutil
from datetime import datetime, timedelta
from typing import Any, Optional


class OutputManager:
    """Manages output directories with timestamping and retention policies.

    Attributes:
        base_dir: Root output directory (default: ./output).
        provider_name: Used in folder naming (sanitized to alphanumeric + hyphens).
        retention_days: Delete folders older than this many days (0 = keep forever).
        current_dir: Path to the current run's output directory (None until created).
    """

    FOLDER_PATTERN = re.compile(r'^(\d{8})_(\d{4})_.*$')

    def __init__(self, base_dir: str, provider_name: str, retention_days: int = 30):
        self.base_dir = base_dir
        self.provider_name = provider_name
        self.retention_days = retention_days
        self.current_dir: Optional[str] = None
        self._run_timestamp = datetime.now()

    def create_timestamped_dir(self) -> str:
        """Create (if needed) the timestamped output directory for this run.

        Returns:
            The full path to the directory.
        """
        if self.current_dir:
            return self.current_dir
        timestamp = self._run_timestamp.strftime("%Y%m%d_%H%M")
        safe_provider = "".join(
            c if c.isalnum() or c in '-_' else '_'
            for c in self.provider_name
        )
        self.current_dir = os.path.join(self.base_dir, f"{timestamp}_{safe_provider}")
        os.makedirs(self.current_dir, exist_ok=True)
        return self.current_dir

    def cleanup_old_folders(self, debug: bool = False) -> int:
        """Remove output folders older than retention_days.

        Returns:
            The number of folders deleted.
        """
        if self.retention_days <= 0 or not os.path.exists(self.base_dir):
            return 0

        deleted_count = 0
        cutoff_date = datetime.now() - timedelta(days=self.retention_days)

        for folder_name in os.listdir(self.base_dir):
            folder_path = os.path.join(self.base_dir, folder_name)
            if not os.path.isdir(folder_path):
                continue

            match = self.FOLDER_PATTERN.match(folder_name)
            if not match:
                continue

            try:
                folder_datetime = datetime.strptime(
                    f"{match.group(1)}_{match.group(2)}", "%Y%m%d_%H%M"
                )
                if folder_datetime < cutoff_date:
                    shutil.rmtree(folder_path)
                    deleted_count += 1
                    if debug:
                        print(f"  Deleted old output folder: {folder_name}")
            except (ValueError, OSError) as e:
                if debug:
                    print(f"  Warning: Could not process folder {folder_name}: {e}")

        return deleted_count

    def get_output_path(self, filename: str) -> str:
        """Get the full path for a file in the current output directory.

        Raises:
            RuntimeError: If create_timestamped_dir() has not been called yet.
        """
        if not self.current_dir:
            raise RuntimeError("Output directory not created. Call create_timestamped_dir() first.")
        return os.path.join(self.current_dir, filename)

    def write_json(self, filename: str, data: Any) -> str:
        """Write data as indented JSON into the current run's directory."""
        self.create_timestamped_dir()
        path = self.get_output_path(filename)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, default=str)
        return path
