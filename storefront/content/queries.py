"""GROQ query classes with their cache lifetimes."""
from dataclasses import dataclass
from typing import Optional

# Excludes unpublished drafts from every query
PUBLISHED = '!(_id in path("drafts.**"))'

# Base image projection for consistent image data
IMAGE_PROJECTION = """{
  _type,
  asset->{
    _id,
    url,
    metadata {
      dimensions,
      lqip
    }
  },
  alt,
  caption,
  hotspot,
  crop
}"""

# Base category projection
CATEGORY_PROJECTION = f"""{{
  _id,
  title,
  slug,
  description,
  image {IMAGE_PROJECTION}
}}"""

# Minimal product projection for listings
PRODUCT_SUMMARY_PROJECTION = f"""{{
  _id,
  _type,
  title,
  slug,
  mainImage {IMAGE_PROJECTION},
  price,
  salePrice,
  currency,
  inStock,
  featured,
  publishedAt,
  category->{{
    _id,
    title,
    slug
  }}
}}"""

# Full product projection for detail pages
PRODUCT_DETAIL_PROJECTION = f"""{{
  _id,
  _type,
  _createdAt,
  _updatedAt,
  title,
  slug,
  description,
  mainImage {IMAGE_PROJECTION},
  galleryImages[] {IMAGE_PROJECTION},
  price,
  salePrice,
  currency,
  category-> {CATEGORY_PROJECTION},
  tags,
  inStock,
  featured,
  publishedAt
}}"""

ON_SALE = "defined(salePrice) && salePrice < price"

FILTER_CONDITIONS = """
    && ($minPrice == null || price >= $minPrice)
    && ($maxPrice == null || price <= $maxPrice)
    && ($inStockOnly == false || inStock == true)
    && ($categoryId == null || category._ref == $categoryId)"""


@dataclass(frozen=True)
class QueryClass:
    """
    A named, parameterized read against the content store.
    
    revalidate is the cache lifetime in seconds; None means no-store
    (only the request de-duplication window applies).
    """
    name: str
    groq: str
    revalidate: Optional[int] = None


ALL_PRODUCTS = QueryClass(
    "all-products",
    f'*[_type == "product" && {PUBLISHED}] | order(publishedAt desc) {PRODUCT_SUMMARY_PROJECTION}',
    300,
)

FEATURED_PRODUCTS = QueryClass(
    "featured-products",
    f'*[_type == "product" && featured == true && {PUBLISHED}] | order(publishedAt desc) [0...8] {PRODUCT_SUMMARY_PROJECTION}',
    600,
)

PRODUCTS_PAGINATED = QueryClass(
    "products-paginated",
    f"""{{
  "products": *[_type == "product" && {PUBLISHED}] | order(publishedAt desc) [$start...$end] {PRODUCT_SUMMARY_PROJECTION},
  "total": count(*[_type == "product" && {PUBLISHED}])
}}""",
    300,
)

PRODUCT_BY_SLUG = QueryClass(
    "product-by-slug",
    f'*[_type == "product" && slug.current == $slug && {PUBLISHED}][0] {PRODUCT_DETAIL_PROJECTION}',
    300,
)

PRODUCTS_BY_CATEGORY = QueryClass(
    "products-by-category",
    f'*[_type == "product" && category->slug.current == $categorySlug && {PUBLISHED}] | order(publishedAt desc) {PRODUCT_SUMMARY_PROJECTION}',
    300,
)

SEARCH_PRODUCTS = QueryClass(
    "search-products",
    f"""*[_type == "product" && {PUBLISHED} && (
  title match $searchTerm + "*" ||
  pt::text(description) match $searchTerm + "*" ||
  category->title match $searchTerm + "*"
)] | order(publishedAt desc) {PRODUCT_SUMMARY_PROJECTION}""",
    None,
)

SALE_PRODUCTS = QueryClass(
    "sale-products",
    f'*[_type == "product" && {ON_SALE} && {PUBLISHED}] | order(publishedAt desc) {PRODUCT_SUMMARY_PROJECTION}',
    300,
)

RELATED_PRODUCTS = QueryClass(
    "related-products",
    f'*[_type == "product" && category._ref == $categoryId && _id != $currentProductId && {PUBLISHED}] | order(publishedAt desc) [0...4] {PRODUCT_SUMMARY_PROJECTION}',
    300,
)

ALL_CATEGORIES = QueryClass(
    "all-categories",
    f'*[_type == "category" && {PUBLISHED}] | order(title asc) {CATEGORY_PROJECTION}',
    600,
)

CATEGORY_BY_SLUG = QueryClass(
    "category-by-slug",
    f'*[_type == "category" && slug.current == $slug && {PUBLISHED}][0] {CATEGORY_PROJECTION}',
    300,
)

PRODUCT_PATHS = QueryClass(
    "product-paths",
    f'*[_type == "product" && defined(slug.current) && {PUBLISHED}][].slug.current',
    3600,
)

CATEGORY_PATHS = QueryClass(
    "category-paths",
    f'*[_type == "category" && defined(slug.current) && {PUBLISHED}][].slug.current',
    3600,
)

PRODUCTS_FILTERED = QueryClass(
    "products-filtered",
    f"""{{
  "products": *[_type == "product" && {PUBLISHED}{FILTER_CONDITIONS}
  ] | order(coalesce(salePrice, price) asc) [$start...$end] {PRODUCT_SUMMARY_PROJECTION},
  "total": count(*[_type == "product" && {PUBLISHED}{FILTER_CONDITIONS}
  ])
}}""",
    180,
)

HOMEPAGE = QueryClass(
    "homepage",
    f"""{{
  "featuredProducts": *[_type == "product" && featured == true && {PUBLISHED}] | order(publishedAt desc) [0...8] {PRODUCT_SUMMARY_PROJECTION},
  "categories": *[_type == "category" && {PUBLISHED}] | order(title asc) [0...6] {CATEGORY_PROJECTION},
  "saleProducts": *[_type == "product" && {ON_SALE} && {PUBLISHED}] | order(publishedAt desc) [0...4] {PRODUCT_SUMMARY_PROJECTION}
}}""",
    600,
)

PRODUCT_METADATA = QueryClass(
    "product-metadata",
    f"""*[_type == "product" && slug.current == $slug && {PUBLISHED}][0] {{
  title,
  "description": pt::text(description)[0...160],
  mainImage {{
    asset->{{
      _id,
      url,
      metadata {{
        dimensions
      }}
    }},
    alt
  }},
  price,
  salePrice,
  currency,
  inStock,
  category->{{
    title
  }},
  publishedAt
}}""",
    600,
)

HEALTH_CHECK = QueryClass(
    "health-check",
    '*[_type == "product"][0]._id',
    None,
)

# Queries whose results change when any product changes
LISTING_QUERIES = frozenset({
    ALL_PRODUCTS.name,
    FEATURED_PRODUCTS.name,
    PRODUCTS_PAGINATED.name,
    PRODUCTS_BY_CATEGORY.name,
    SALE_PRODUCTS.name,
    RELATED_PRODUCTS.name,
    PRODUCTS_FILTERED.name,
    HOMEPAGE.name,
    PRODUCT_PATHS.name,
})
