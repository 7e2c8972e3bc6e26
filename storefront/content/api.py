"""Typed catalog reads against the content store."""
from typing import Any, Callable, Dict, List, Optional
from pydantic import TypeAdapter, ValidationError
from storefront.config import settings
from storefront.content import queries
from storefront.content.cache import QueryKey, RequestCache
from storefront.content.client import ContentStoreClient
from storefront.content.errors import ContentStoreError, handle_content_error
from storefront.content.queries import QueryClass
from storefront.data.schemas import (
    Category,
    HomepageData,
    Product,
    ProductMetadata,
    ProductSummary,
    ProductsResponse,
)
from storefront.utils.currency import price_to_cents
from storefront.utils.logger import get_logger

logger = get_logger(__name__)

SUMMARY_LIST = TypeAdapter(List[ProductSummary])
CATEGORY_LIST = TypeAdapter(List[Category])
PATH_LIST = TypeAdapter(List[str])


class CatalogAPI:
    """
    Named catalog queries with per-query caching.

    Every call goes through the request cache, so identical concurrent calls
    share one network request. Failures surface as ContentStoreError and are
    never retried here.
    """

    def __init__(
        self,
        client: ContentStoreClient,
        cache: Optional[RequestCache] = None,
        search_min_length: Optional[int] = None,
        search_dedupe_interval: Optional[float] = None
    ):
        """
        Initialize the API.

        Args:
            client: Content store client
            cache: Request cache (defaults to one using the configured dedupe interval)
            search_min_length: Shortest search term that triggers a query
            search_dedupe_interval: De-duplication window for search queries
        """
        self.client = client
        self.cache = cache or RequestCache(dedupe_interval=settings.dedupe_interval)
        self.search_min_length = settings.search_min_length if search_min_length is None else search_min_length
        self.search_dedupe_interval = (
            settings.search_dedupe_interval if search_dedupe_interval is None else search_dedupe_interval
        )

    async def _fetch(
        self,
        query: QueryClass,
        params: Optional[Dict[str, Any]] = None,
        parse: Optional[Callable[[Any], Any]] = None,
        dedupe_interval: Optional[float] = None
    ) -> Any:
        """
        Run a query class through the cache.

        Args:
            query: Query class to run
            params: Query parameters
            parse: Converts the raw result to its typed form
            dedupe_interval: Override of the de-duplication window

        Returns:
            Parsed result
        """
        params = params or {}
        key = QueryKey.build(query.name, params)

        async def fetcher():
            raw = await self.client.fetch(query.groq, params, no_store=query.revalidate is None)
            if parse is None:
                return raw
            try:
                return parse(raw)
            except ValidationError as e:
                raise handle_content_error(e) from e

        return await self.cache.get_or_fetch(
            key,
            fetcher,
            revalidate=query.revalidate,
            dedupe_interval=dedupe_interval
        )

    async def get_all_products(self) -> List[ProductSummary]:
        """Get all products (for listings)."""
        return await self._fetch(queries.ALL_PRODUCTS, parse=SUMMARY_LIST.validate_python)

    async def get_featured_products(self) -> List[ProductSummary]:
        """Get featured products for the homepage."""
        return await self._fetch(queries.FEATURED_PRODUCTS, parse=SUMMARY_LIST.validate_python)

    async def get_products_with_pagination(self, page: int = 1, limit: int = 12) -> ProductsResponse:
        """Get one page of products, newest first."""
        start = (page - 1) * limit
        end = start + limit
        return await self._fetch(
            queries.PRODUCTS_PAGINATED,
            {"start": start, "end": end},
            parse=ProductsResponse.model_validate
        )

    async def get_product_by_slug(self, slug: str) -> Optional[Product]:
        """Get a single product by slug, None when it does not exist."""
        return await self._fetch(
            queries.PRODUCT_BY_SLUG,
            {"slug": slug},
            parse=lambda raw: Product.model_validate(raw) if raw else None
        )

    async def get_products_by_category(self, category_slug: str) -> List[ProductSummary]:
        return await self._fetch(
            queries.PRODUCTS_BY_CATEGORY,
            {"categorySlug": category_slug},
            parse=SUMMARY_LIST.validate_python
        )

    async def search_products(self, search_term: str) -> List[ProductSummary]:
        """
        Search products by title, description and category title.

        Terms shorter than the minimum length return an empty list without
        touching the network.
        """
        if not search_term or len(search_term) < self.search_min_length:
            return []

        return await self._fetch(
            queries.SEARCH_PRODUCTS,
            {"searchTerm": search_term.lower()},
            parse=SUMMARY_LIST.validate_python,
            dedupe_interval=self.search_dedupe_interval
        )

    async def get_sale_products(self) -> List[ProductSummary]:
        return await self._fetch(queries.SALE_PRODUCTS, parse=SUMMARY_LIST.validate_python)

    async def get_related_products(self, category_id: str, current_product_id: str) -> List[ProductSummary]:
        """Up to four products from the same category, excluding the current one."""
        return await self._fetch(
            queries.RELATED_PRODUCTS,
            {"categoryId": category_id, "currentProductId": current_product_id},
            parse=SUMMARY_LIST.validate_python
        )

    async def get_all_categories(self) -> List[Category]:
        return await self._fetch(queries.ALL_CATEGORIES, parse=CATEGORY_LIST.validate_python)

    async def get_category_by_slug(self, slug: str) -> Optional[Category]:
        return await self._fetch(
            queries.CATEGORY_BY_SLUG,
            {"slug": slug},
            parse=lambda raw: Category.model_validate(raw) if raw else None
        )

    async def get_product_paths(self) -> List[str]:
        """Slugs of every published product."""
        return await self._fetch(queries.PRODUCT_PATHS, parse=PATH_LIST.validate_python)

    async def get_category_paths(self) -> List[str]:
        """Slugs of every published category."""
        return await self._fetch(queries.CATEGORY_PATHS, parse=PATH_LIST.validate_python)

    async def get_filtered_products(
        self,
        page: int = 1,
        limit: int = 12,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        in_stock_only: bool = False,
        category_id: Optional[str] = None
    ) -> ProductsResponse:
        """
        Get a page of products matching price, stock and category filters.

        Args:
            page: 1-based page number
            limit: Page size
            min_price: Lower price bound in currency units
            max_price: Upper price bound in currency units
            in_stock_only: Only return products in stock
            category_id: Restrict to one category id

        Returns:
            Matching page ordered by effective price, plus the total count
        """
        start = (page - 1) * limit
        end = start + limit

        return await self._fetch(
            queries.PRODUCTS_FILTERED,
            {
                "start": start,
                "end": end,
                "minPrice": price_to_cents(min_price) if min_price is not None else None,
                "maxPrice": price_to_cents(max_price) if max_price is not None else None,
                "inStockOnly": in_stock_only,
                "categoryId": category_id or None,
            },
            parse=ProductsResponse.model_validate
        )

    async def get_homepage_data(self) -> HomepageData:
        """Featured products, categories and sale products in one request."""
        return await self._fetch(queries.HOMEPAGE, parse=HomepageData.model_validate)

    async def get_product_metadata(self, slug: str) -> Optional[ProductMetadata]:
        """Product fields used for SEO and Open Graph."""
        return await self._fetch(
            queries.PRODUCT_METADATA,
            {"slug": slug},
            parse=lambda raw: ProductMetadata.model_validate(raw) if raw else None
        )

    def revalidate_product(self, slug: str) -> int:
        """
        Drop cached data that may contain the given product.

        Used when the store reports that a product changed.

        Returns:
            Number of cache entries removed
        """
        def affected(key: QueryKey) -> bool:
            if key.name in queries.LISTING_QUERIES:
                return True
            return key.name in (queries.PRODUCT_BY_SLUG.name, queries.PRODUCT_METADATA.name) and key.param("slug") == slug

        removed = self.cache.invalidate(affected)
        logger.info(f"Revalidated product '{slug}' ({removed} cached entries dropped)")
        return removed

    async def health_check(self) -> Dict[str, str]:
        """Check that the content store answers queries."""
        try:
            await self.client.fetch(queries.HEALTH_CHECK.groq, no_store=True)
            return {
                "status": "ok",
                "message": "Content store connection is healthy"
            }
        except ContentStoreError as e:
            return {
                "status": "error",
                "message": f"Content store connection failed: {e.message}"
            }
