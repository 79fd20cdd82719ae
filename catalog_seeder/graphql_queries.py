"""
GraphQL Query Definitions — The queries used to read the product catalog.

  LIVE_SEARCH_PRODUCTS_QUERY
      Pages through the Live Search productSearch API with an empty phrase,
      which matches every searchable product. Items are wrapped in a
      productView object and expose the URL key as "urlKey".

  CORE_PRODUCTS_QUERY
      Pages through the core Commerce products query with an empty search
      string. Items expose the URL key as "url_key".

  product_by_sku_query(sku)
      Looks up a single product in the Catalog Service by SKU. Used by the
      per-product pipeline to make sure a product exists before previewing it.

Both paging queries take the same variables (phrase, pageSize, currentPage)
and return page_info {current_page, total_pages, page_size}.
"""

import json

LIVE_SEARCH_PRODUCTS_QUERY = """
query ($phrase: String!, $pageSize: Int!, $currentPage: Int!) {
  productSearch(
    phrase: $phrase
    page_size: $pageSize
    current_page: $currentPage
  ) {
    page_info {
      current_page
      total_pages
      page_size
    }
    items {
      productView {
        name
        sku
        urlKey
      }
    }
  }
}
"""

CORE_PRODUCTS_QUERY = """
query ($phrase: String!, $pageSize: Int!, $currentPage: Int!) {
  products(
    search: $phrase
    pageSize: $pageSize
    currentPage: $currentPage
  ) {
    page_info {
      current_page
      total_pages
      page_size
    }
    items {
      name
      sku
      url_key
    }
  }
}
"""


def product_by_sku_query(sku: str) -> str:
    # json.dumps quotes and escapes the SKU as a GraphQL string literal
    return f"""{{
  products(
    skus: [{json.dumps(sku)}]
  ) {{
    id
    sku
    name
  }}
}}"""
