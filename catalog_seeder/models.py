"""
Models — Records passed between the catalog client, path resolver, admin
client and orchestrator.

  SiteConfig    Admin API coordinates (org/site/ref) plus the path-pattern map
  StoreContext  The store/view codes path patterns are matched against
  Product       One catalog product (identity is the SKU)
  PageInfo      Pagination cursor returned with every product page
  ProductPage   One page of products, backend independent
  BulkJob       An Admin API bulk preview/publish job and its per-path resources
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .errors import ParseError


@dataclass
class StoreContext:
    store_code: str = ""
    store_view_code: str = ""

    def matches(self, match_conf: Dict[str, Any]) -> bool:
        return (
            self.store_code == match_conf.get("storeCode")
            and self.store_view_code == match_conf.get("storeViewCode")
        )


@dataclass
class SiteConfig:
    """Site coordinates and path patterns, loaded from site-config.json.

    Attributes:
        org: Owner of the site repository.
        site: Name of the site repository.
        ref: Branch the Admin API operates on (default: "main").
        helix_api_key: Admin API key, sent as "authorization: token <key>".
        admin_version: Optional value for the hlx-admin-version query parameter.
        conf_map: Path pattern -> {storeCode, storeViewCode, pageType}.
    """

    org: str = ""
    site: str = ""
    ref: str = "main"
    helix_api_key: str = ""
    admin_version: Optional[str] = None
    conf_map: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], helix_api_key: str = "") -> "SiteConfig":
        """Build a SiteConfig from the camelCase JSON layout of site-config.json.

        The key in the file wins over the helix_api_key argument (usually the
        HELIX_ADMIN_API_KEY environment variable).
        """
        conf_map = data.get("confMap") or {}
        if not isinstance(conf_map, dict):
            raise ParseError("site config confMap must be an object")
        return cls(
            org=data.get("org", ""),
            site=data.get("site", ""),
            ref=data.get("ref") or "main",
            helix_api_key=data.get("helixApiKey") or helix_api_key,
            admin_version=data.get("adminVersion"),
            conf_map=conf_map,
        )

    @classmethod
    def load(cls, path: str, helix_api_key: str = "") -> "SiteConfig":
        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ParseError(f"invalid site config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ParseError(f"invalid site config {path}: expected a JSON object")
        return cls.from_dict(data, helix_api_key)


@dataclass(frozen=True)
class Product:
    sku: str
    name: str = ""
    url_key: str = ""

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "Product":
        """Accept both the live search (urlKey) and core catalog (url_key) spellings."""
        if not isinstance(item, dict) or not item.get("sku"):
            raise ParseError(f"product item without sku: {item!r}")
        return cls(
            sku=item["sku"],
            name=item.get("name") or "",
            url_key=item.get("urlKey") or item.get("url_key") or "",
        )

    def to_dict(self) -> Dict[str, str]:
        return {"sku": self.sku, "name": self.name, "urlKey": self.url_key}


@dataclass
class PageInfo:
    current_page: int
    total_pages: int
    page_size: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PageInfo":
        try:
            return cls(
                current_page=int(data["current_page"]),
                total_pages=int(data["total_pages"]),
                page_size=int(data["page_size"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"malformed page_info: {data!r}") from e


@dataclass
class ProductPage:
    items: List[Product]
    page_info: PageInfo


@dataclass
class BulkResource:
    path: str
    status: Optional[int] = None
    url: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == 200

    def to_dict(self) -> Dict[str, Any]:
        result = {"path": self.path, "status": self.status, "url": self.url}
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class BulkJob:
    """An Admin API bulk job.

    Job creation returns {"job": {"name", "topic", "state", ...}, "links": {...}};
    the details endpoint returns the job itself with per-path resources under
    data.resources.
    """

    name: str
    topic: str = ""
    state: str = ""
    resources: List[BulkResource] = field(default_factory=list)

    @property
    def stopped(self) -> bool:
        return self.state == "stopped"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BulkJob":
        if not isinstance(data, dict):
            raise ParseError(f"malformed job response: {data!r}")
        job = data.get("job", data)
        if not isinstance(job, dict) or not job.get("name"):
            raise ParseError(f"job response without name: {data!r}")

        job_data = job.get("data") or {}
        if not isinstance(job_data, dict):
            raise ParseError(f"malformed job data: {job_data!r}")
        raw_resources = job_data.get("resources", job.get("resources")) or []
        if not isinstance(raw_resources, list):
            raise ParseError(f"malformed job resources: {raw_resources!r}")
        resources = [
            BulkResource(
                path=r.get("path", ""),
                status=r.get("status"),
                url=r.get("url"),
                error=r.get("error"),
            )
            for r in raw_resources
            if isinstance(r, dict)
        ]
        return cls(
            name=job["name"],
            topic=job.get("topic", ""),
            state=job.get("state", ""),
            resources=resources,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "topic": self.topic,
            "state": self.state,
            "resources": [r.to_dict() for r in self.resources],
        }
