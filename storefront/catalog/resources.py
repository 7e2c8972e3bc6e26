"""Data resources: fetch state (data, error, loading) per logical catalog resource."""
from typing import Awaitable, Callable, Generic, List, Optional, TypeVar
from storefront.content.api import CatalogAPI
from storefront.content.errors import ContentStoreError, handle_content_error
from storefront.data.schemas import Category, HomepageData, Product, ProductSummary
from storefront.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class Resource(Generic[T]):
    """
    One logical resource fetched through the catalog API.

    A resource without a key is disabled: it never fetches and reports no
    data, no error and no loading. Errors are kept, not raised, so the
    consumer can render an error state; there is no automatic retry.
    """

    def __init__(self, key: Optional[str], fetcher: Optional[Callable[[], Awaitable[T]]]):
        self.key = key
        self._fetcher = fetcher
        self.data: Optional[T] = None
        self.error: Optional[ContentStoreError] = None
        self.is_loading = False

    @property
    def enabled(self) -> bool:
        return self.key is not None and self._fetcher is not None

    async def load(self) -> Optional[T]:
        """Fetch and record the outcome. Returns the data (None on error)."""
        if not self.enabled:
            return None

        self.is_loading = True
        try:
            self.data = await self._fetcher()
            self.error = None
        except ContentStoreError as e:
            self.error = e
        except Exception as e:
            self.error = handle_content_error(e)
        finally:
            self.is_loading = False

        if self.error is not None:
            logger.warning(f"Resource '{self.key}' failed: {self.error.message}")
        return self.data

    async def refetch(self) -> Optional[T]:
        return await self.load()

    def __repr__(self):
        return f"<Resource(key='{self.key}', loading={self.is_loading}, error={self.error is not None})>"


class SearchResource:
    """
    Search results for the most recently requested term.

    Each dispatch is tagged with its term; a response whose term is no
    longer current is discarded, so a slow early response cannot overwrite
    a faster later one.
    """

    def __init__(self, api: CatalogAPI):
        self.api = api
        self.term: Optional[str] = None
        self.results: Optional[List[ProductSummary]] = None
        self.error: Optional[ContentStoreError] = None
        self.is_loading = False
        self._generation = 0

    @property
    def key(self) -> Optional[str]:
        return f"search-{self.term}" if self.term else None

    def reset(self) -> None:
        """Deactivate search; any in-flight response will be discarded."""
        self._generation += 1
        self.term = None
        self.results = None
        self.error = None
        self.is_loading = False

    async def search(self, term: str) -> Optional[List[ProductSummary]]:
        """
        Search for term and apply the response if term is still current.

        Returns:
            The applied results, or None when the response was discarded
        """
        self._generation += 1
        generation = self._generation
        if term != self.term:
            self.results = None
        self.term = term
        self.error = None
        self.is_loading = True

        try:
            results = await self.api.search_products(term)
            error = None
        except ContentStoreError as e:
            results, error = None, e

        if generation != self._generation or term != self.term:
            logger.debug(f"Discarding stale search response for '{term}'")
            return None

        self.results = results
        self.error = error
        self.is_loading = False
        return results


def products_resource(api: CatalogAPI) -> Resource[List[ProductSummary]]:
    return Resource("products-all", api.get_all_products)


def featured_products_resource(api: CatalogAPI) -> Resource[List[ProductSummary]]:
    return Resource("products-featured", api.get_featured_products)


def product_resource(api: CatalogAPI, slug: Optional[str]) -> Resource[Optional[Product]]:
    if not slug:
        return Resource(None, None)
    return Resource(f"product-{slug}", lambda: api.get_product_by_slug(slug))


def products_by_category_resource(api: CatalogAPI, category_slug: Optional[str]) -> Resource[List[ProductSummary]]:
    if not category_slug:
        return Resource(None, None)
    return Resource(f"products-category-{category_slug}", lambda: api.get_products_by_category(category_slug))


def sale_products_resource(api: CatalogAPI) -> Resource[List[ProductSummary]]:
    return Resource("products-sale", api.get_sale_products)


def related_products_resource(
    api: CatalogAPI,
    category_id: Optional[str],
    current_product_id: Optional[str]
) -> Resource[List[ProductSummary]]:
    if not category_id or not current_product_id:
        return Resource(None, None)
    return Resource(
        f"related-{category_id}-{current_product_id}",
        lambda: api.get_related_products(category_id, current_product_id)
    )


def homepage_resource(api: CatalogAPI) -> Resource[HomepageData]:
    return Resource("homepage-data", api.get_homepage_data)


def categories_resource(api: CatalogAPI) -> Resource[List[Category]]:
    return Resource("categories-all", api.get_all_categories)
