"""
Catalog API Client — Reads products from the commerce catalog GraphQL API.

This module is responsible for all HTTP communication with the catalog. Two
backends page through the catalog and return the same ProductPage shape, so
the orchestrator never needs to know which one is in use:

  LiveSearchCatalogClient  productSearch (Live Search), items under productView
  CoreCatalogClient        products (core Commerce GraphQL)

Every request carries the Magento context headers:

    x-api-key                 CATALOG_API_KEY
    Magento-Environment-Id    MAGENTO_ENVIRONMENT_ID
    Magento-Website-Code      MAGENTO_WEBSITE_CODE
    Magento-Store-Code        MAGENTO_STORE_CODE
    Magento-Store-View-Code   MAGENTO_STORE_VIEW_CODE

Error contract:
    NetworkError   transport failure or non-2xx status
    GraphQLError   2xx response whose body has an "errors" field
    ParseError     body is not JSON or lacks the expected shape
    NotFoundError  fetch_product_by_sku() matched no product
"""

from typing import Any, Dict, List

import requests

from .errors import GraphQLError, NetworkError, NotFoundError, ParseError
from .graphql_queries import (
    CORE_PRODUCTS_QUERY,
    LIVE_SEARCH_PRODUCTS_QUERY,
    product_by_sku_query,
)
from .models import PageInfo, Product, ProductPage


class CatalogClient:
    """Base client holding the endpoint, Magento headers and HTTP session.

    Subclasses provide the paging query and know where the product list
    lives in its response.

    Attributes:
        endpoint: The catalog GraphQL endpoint (CATALOG_ENDPOINT).
        api_key: The catalog API key (CATALOG_API_KEY).
        environment_id: Magento environment id.
        website_code: Magento website code.
        store_code: Magento store code.
        store_view_code: Magento store view code.
        timeout: Per-request timeout in seconds.
        debug: If True, print verbose request details.
    """

    query = ""
    backend = ""

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        environment_id: str,
        website_code: str,
        store_code: str,
        store_view_code: str,
        timeout: float = 30,
        debug: bool = False,
    ):
        self.endpoint = endpoint
        self.api_key = api_key
        self.environment_id = environment_id
        self.website_code = website_code
        self.store_code = store_code
        self.store_view_code = store_view_code
        self.timeout = timeout
        self.debug = debug
        self._session = requests.Session()

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "Magento-Environment-Id": self.environment_id,
            "Magento-Website-Code": self.website_code,
            "Magento-Store-Code": self.store_code,
            "Magento-Store-View-Code": self.store_view_code,
        }

    def fetch_product_page(self, page_size: int, current_page: int) -> ProductPage:
        """Fetch one page of products.

        Args:
            page_size: Number of products per page.
            current_page: 1-based page number.

        Returns:
            A ProductPage with the page's products and pagination info.

        Raises:
            NetworkError: On transport failure or non-2xx status.
            GraphQLError: If the response carries GraphQL errors.
            ParseError: If the response body is malformed.
        """
        payload = {
            "query": self.query,
            "variables": {
                "phrase": "",
                "pageSize": page_size,
                "currentPage": current_page,
            },
        }
        headers = {"Content-Type": "application/json", **self.headers}

        if self.debug:
            print(f"  POST {self.endpoint} ({self.backend}, page {current_page}, size {page_size})")

        try:
            response = self._session.post(
                self.endpoint, json=payload, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise NetworkError(f"error fetching page {current_page}: {e}") from e

        if not response.ok:
            raise NetworkError(
                f"network response was not ok: {response.status_code} {response.reason}",
                status=response.status_code,
            )

        result = self._parse_json(response)
        if result.get("errors"):
            raise GraphQLError(result["errors"])

        try:
            products_data = self._extract_products(result.get("data") or {})
            items = [Product.from_item(item) for item in products_data.get("items") or []]
            page_info = PageInfo.from_dict(products_data.get("page_info") or {})
        except (AttributeError, KeyError, TypeError) as e:
            raise ParseError(f"unexpected {self.backend} response shape: {e}") from e

        return ProductPage(items=items, page_info=page_info)

    def fetch_product_by_sku(self, sku: str) -> Product:
        """Look up a single product by SKU in the catalog.

        Returns:
            The matching Product (the lookup query carries no URL key).

        Raises:
            NetworkError: On transport failure or non-2xx status.
            NotFoundError: If the catalog returned no product for the SKU.
            ParseError: If the response body is malformed.
        """
        params = {"query": product_by_sku_query(sku)}

        try:
            response = self._session.get(
                self.endpoint, params=params, headers=self.headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise NetworkError(f"failed to fetch product {sku}: {e}") from e

        if not response.ok:
            if self.debug:
                print(f"  Failed to fetch product {sku}: {response.status_code} {response.reason}")
                print(f"  Body: {response.text}")
            raise NetworkError(
                f"failed to fetch product: {response.status_code} {response.reason}",
                status=response.status_code,
            )

        result = self._parse_json(response)
        try:
            products: List[Dict[str, Any]] = (result.get("data") or {}).get("products") or []
        except AttributeError as e:
            raise ParseError(f"failed to parse product response: {e}") from e

        if not products:
            raise NotFoundError(sku, str(result.get("errors") or ""))
        return Product.from_item(products[0])

    def _extract_products(self, data: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    @staticmethod
    def _parse_json(response: requests.Response) -> Dict[str, Any]:
        try:
            result = response.json()
        except ValueError as e:
            raise ParseError(f"failed to parse response: {e}") from e
        if not isinstance(result, dict):
            raise ParseError(f"failed to parse response: expected an object, got {type(result).__name__}")
        return result


class LiveSearchCatalogClient(CatalogClient):
    """Pages through the Live Search productSearch API."""

    query = LIVE_SEARCH_PRODUCTS_QUERY
    backend = "live-search"

    def _extract_products(self, data: Dict[str, Any]) -> Dict[str, Any]:
        products_data = data["productSearch"]
        return {
            **products_data,
            "items": [item["productView"] for item in products_data.get("items") or []],
        }


class CoreCatalogClient(CatalogClient):
    """Pages through the core Commerce products query."""

    query = CORE_PRODUCTS_QUERY
    backend = "core"

    def _extract_products(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return data["products"]


def create_catalog_client(use_live_search: bool = True, **kwargs) -> CatalogClient:
    """Create the catalog client for the configured backend."""
    if use_live_search:
        return LiveSearchCatalogClient(**kwargs)
    return CoreCatalogClient(**kwargs)
