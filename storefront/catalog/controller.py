"""Stateful listing controller running on a single event loop."""
import asyncio
from typing import List, Optional, Set
from storefront.catalog.debounce import Debouncer, Scheduler
from storefront.catalog.favorites import FavoritesStore
from storefront.catalog.listing import (
    ALL_CATEGORIES,
    FilterState,
    ProductSource,
    SortOption,
    ViewMode,
    filter_and_sort,
    is_search_active,
    select_source,
)
from storefront.catalog.resources import SearchResource, categories_resource, products_resource
from storefront.config import settings
from storefront.content.api import CatalogAPI
from storefront.content.errors import ContentStoreError
from storefront.data.schemas import Category, ProductSummary
from storefront.utils.logger import get_logger

logger = get_logger(__name__)


class ListingController:
    """
    Combines the catalog, search results and the user's filter state into
    the product list to render.

    The listing itself is recomputed from the current inputs on every read;
    the controller only owns the inputs. Search terms flow through the
    debouncer before any query is issued.
    """

    def __init__(
        self,
        api: CatalogAPI,
        favorites: FavoritesStore,
        debounce_ms: Optional[int] = None,
        min_search_length: Optional[int] = None,
        scheduler: Optional[Scheduler] = None
    ):
        """
        Initialize the controller.

        Args:
            api: Catalog API used by the resources
            favorites: Favorites store (already loaded)
            debounce_ms: Search debounce delay in milliseconds
            min_search_length: Shortest term that activates search
            scheduler: Timer scheduler for the debouncer (defaults to the event loop)
        """
        self.api = api
        self.favorites = favorites
        self.min_search_length = settings.search_min_length if min_search_length is None else min_search_length
        self.filters = FilterState()
        self.catalog = products_resource(api)
        self.categories_resource = categories_resource(api)
        self.search = SearchResource(api)
        self._debouncer = Debouncer(
            callback=self._on_search_settled,
            delay_ms=settings.search_debounce_ms if debounce_ms is None else debounce_ms,
            initial="",
            scheduler=scheduler
        )
        self._tasks: Set[asyncio.Task] = set()

    async def start(self) -> None:
        """Load the catalog and categories."""
        await asyncio.gather(self.catalog.load(), self.categories_resource.load())

    async def refresh(self) -> None:
        """Manual retry after an error: reload everything currently in use."""
        await self.start()
        if self.search_active:
            await self.search.search(self.debounced_term)

    # Inputs

    def set_search_term(self, raw: str) -> None:
        self.filters = self.filters.update(search_term=raw)
        self._debouncer.push(raw)

    def set_category(self, category: str) -> None:
        self.filters = self.filters.update(category=category or ALL_CATEGORIES)

    def set_in_stock_only(self, enabled: bool) -> None:
        self.filters = self.filters.update(in_stock_only=enabled)

    def set_on_sale_only(self, enabled: bool) -> None:
        self.filters = self.filters.update(on_sale_only=enabled)

    def set_sort(self, sort) -> None:
        self.filters = self.filters.update(sort=SortOption(sort))

    def set_view_mode(self, view_mode) -> None:
        self.filters = self.filters.update(view_mode=ViewMode(view_mode))

    def clear_filters(self) -> None:
        """Reset search, category, stock and sale filters (sort and view are kept)."""
        self._debouncer.reset("")
        self.search.reset()
        self.filters = self.filters.update(
            search_term="",
            category=ALL_CATEGORIES,
            in_stock_only=False,
            on_sale_only=False
        )

    def _on_search_settled(self, term: str) -> None:
        if is_search_active(term, self.min_search_length):
            logger.debug(f"Search term settled on '{term}'")
            task = asyncio.ensure_future(self.search.search(term))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        else:
            self.search.reset()

    async def wait_idle(self) -> None:
        """Wait for dispatched search requests to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # Derived state

    @property
    def debounced_term(self) -> str:
        return self._debouncer.value

    @property
    def search_active(self) -> bool:
        return is_search_active(self.debounced_term, self.min_search_length)

    @property
    def _search_current(self) -> bool:
        # Results tagged with any other term are stale
        return self.search.term == self.debounced_term

    @property
    def source(self) -> ProductSource:
        return select_source(
            self.debounced_term,
            self.catalog.data,
            self.search.results if self._search_current else None,
            self.min_search_length
        )

    @property
    def products(self) -> List[ProductSummary]:
        return filter_and_sort(self.source, self.filters)

    @property
    def categories(self) -> List[Category]:
        return self.categories_resource.data or []

    @property
    def error(self) -> Optional[ContentStoreError]:
        if self.catalog.error is not None:
            return self.catalog.error
        if self.search_active and self._search_current:
            return self.search.error
        return None

    @property
    def is_loading(self) -> bool:
        return self.catalog.is_loading or (
            self.search_active and (self.search.is_loading or not self._search_current)
        )

    @property
    def has_active_filters(self) -> bool:
        return self.filters.has_active_filters(self.debounced_term)

    @property
    def status(self) -> str:
        """One of loading, error, empty or ready."""
        if self.error is not None:
            return "error"
        if self.is_loading or self.source.products is None:
            return "loading"
        if not self.products:
            return "empty"
        return "ready"

    # Favorites

    def toggle_favorite(self, product_id: str) -> bool:
        return self.favorites.toggle(product_id)

    def is_favorite(self, product_id: str) -> bool:
        return self.favorites.is_favorite(product_id)
