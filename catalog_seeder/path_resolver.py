"""
Path Resolver — Computes the content paths to preview/publish for a product.

The site config's confMap maps path patterns to the store/view they belong to:

    {
      "base": {...},
      "/us/p/{{urlkey}}": {"storeCode": "main", "storeViewCode": "default", "pageType": "product"},
      "/products/{{sku}}": {"storeCode": "main", "storeViewCode": "default", "pageType": "product"}
    }

Only patterns for the active store context are used. Each placeholder is
replaced once (first occurrence), so a pattern repeating a placeholder keeps
the later copies and is dropped by the unresolved-placeholder filter.
"""

from typing import List, Optional

from .models import SiteConfig, StoreContext

SKU_PLACEHOLDER = "{{sku}}"
URLKEY_PLACEHOLDER = "{{urlkey}}"


def matched_patterns(site_config: SiteConfig, store_context: StoreContext) -> List[str]:
    """Return the confMap patterns (except "base") that match the store context."""
    return [
        pattern
        for pattern, match_conf in site_config.conf_map.items()
        if pattern != "base" and isinstance(match_conf, dict) and store_context.matches(match_conf)
    ]


def compute_paths(
    site_config: SiteConfig,
    store_context: StoreContext,
    sku: Optional[str],
    url_key: Optional[str] = None,
) -> List[str]:
    """Compute the preview/publish paths for a product.

    Args:
        site_config: The site config holding confMap.
        store_context: The active store/view codes.
        sku: The product SKU.
        url_key: The product URL key, if any.

    Returns:
        The resolved paths, in confMap order. Empty when nothing matches,
        which means there is nothing to publish for this product.
    """
    paths = []
    for pattern in matched_patterns(site_config, store_context):
        path = pattern
        if sku:
            path = path.replace(SKU_PLACEHOLDER, sku, 1)
        if url_key:
            path = path.replace(URLKEY_PLACEHOLDER, url_key, 1)
        if SKU_PLACEHOLDER in path or URLKEY_PLACEHOLDER in path:
            continue
        paths.append(path)
    return paths
