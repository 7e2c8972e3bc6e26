"""Tests for the catalog API against a fake content store."""
import asyncio
import httpx
import pytest
from factories import raw_category, raw_product
from storefront.content import queries
from storefront.content.api import CatalogAPI
from storefront.content.client import ContentStoreClient
from storefront.content.errors import ContentStoreError, handle_content_error


def test_client_requires_project_id():
    with pytest.raises(ValueError):
        ContentStoreClient("")


def test_client_base_url():
    assert ContentStoreClient("abc").base_url == "https://abc.apicdn.sanity.io/v2024-01-01"
    assert ContentStoreClient("abc", use_cdn=False, api_version="v2023-05-03").base_url == "https://abc.api.sanity.io/v2023-05-03"


def test_encode_params():
    assert ContentStoreClient.encode_params({"slug": "hat", "start": 0, "flag": True, "none": None}) == {
        "$slug": '"hat"',
        "$start": "0",
        "$flag": "true",
        "$none": "null",
    }


def test_get_all_products_parses_summaries(api, store):
    store.respond(queries.ALL_PRODUCTS, [raw_product("1", title="Hat", price=1500, sale_price=1000)])

    products = asyncio.run(api.get_all_products())

    assert len(products) == 1
    assert products[0].title == "Hat"
    assert products[0].sale_price == 1000
    assert products[0].slug.current == "product-1"
    assert products[0].category.id == "cat-a"


def test_concurrent_identical_calls_issue_one_request(api, store):
    store.respond(queries.ALL_PRODUCTS, [raw_product("1")])

    async def scenario():
        return await asyncio.gather(api.get_all_products(), api.get_all_products())

    first, second = asyncio.run(scenario())
    assert store.calls(queries.ALL_PRODUCTS) == 1
    assert first == second


def test_cached_within_lifetime(api, store, clock):
    store.respond(queries.FEATURED_PRODUCTS, [raw_product("1", featured=True)])

    asyncio.run(api.get_featured_products())
    clock.advance(queries.FEATURED_PRODUCTS.revalidate - 1)
    asyncio.run(api.get_featured_products())
    assert store.calls(queries.FEATURED_PRODUCTS) == 1

    clock.advance(2)
    asyncio.run(api.get_featured_products())
    assert store.calls(queries.FEATURED_PRODUCTS) == 2


def test_search_below_minimum_makes_no_request(api, store):
    assert asyncio.run(api.search_products("a")) == []
    assert asyncio.run(api.search_products("")) == []
    assert store.requests == []


def test_search_lowercases_term(api, store):
    store.respond(queries.SEARCH_PRODUCTS, lambda params: [raw_product("1", title=params["searchTerm"])])

    results = asyncio.run(api.search_products("SHIRT"))

    assert store.params_of(queries.SEARCH_PRODUCTS) == {"searchTerm": "shirt"}
    assert results[0].title == "shirt"


def test_search_requests_skip_intermediary_caches(api, store):
    store.respond(queries.SEARCH_PRODUCTS, [])
    store.respond(queries.ALL_PRODUCTS, [])

    asyncio.run(api.search_products("shirt"))
    asyncio.run(api.get_all_products())

    search_request, catalog_request = store.requests
    assert search_request.headers.get("Cache-Control") == "no-cache"
    assert "Cache-Control" not in catalog_request.headers


def test_product_by_slug_missing_returns_none(api, store):
    store.respond(queries.PRODUCT_BY_SLUG, None)
    assert asyncio.run(api.get_product_by_slug("missing")) is None
    assert store.params_of(queries.PRODUCT_BY_SLUG) == {"slug": "missing"}


def test_product_by_slug_parses_detail(api, store):
    doc = raw_product(
        "1",
        category=None,
        description=[{"_type": "block", "_key": "k", "style": "normal", "children": [{"_type": "span", "text": "Soft"}]}],
        galleryImages=[],
        tags=["wool"],
    )
    doc["category"] = raw_category("cat-a", "Apparel")
    store.respond(queries.PRODUCT_BY_SLUG, doc)

    product = asyncio.run(api.get_product_by_slug("product-1"))

    assert product.category.title == "Apparel"
    assert product.tags == ["wool"]
    assert product.description[0]["children"][0]["text"] == "Soft"


def test_pagination_params(api, store):
    store.respond(queries.PRODUCTS_PAGINATED, {"products": [raw_product("1")], "total": 30})

    result = asyncio.run(api.get_products_with_pagination(page=3, limit=10))

    assert store.params_of(queries.PRODUCTS_PAGINATED) == {"start": 20, "end": 30}
    assert result.total == 30


def test_filtered_products_convert_prices(api, store):
    store.respond(queries.PRODUCTS_FILTERED, {"products": [], "total": 0})

    asyncio.run(api.get_filtered_products(min_price=0, max_price=19.99, in_stock_only=True))

    assert store.params_of(queries.PRODUCTS_FILTERED) == {
        "start": 0,
        "end": 12,
        "minPrice": 0,
        "maxPrice": 1999,
        "inStockOnly": True,
        "categoryId": None,
    }


def test_homepage_data(api, store):
    store.respond(queries.HOMEPAGE, {
        "featuredProducts": [raw_product("1", featured=True)],
        "categories": [raw_category()],
        "saleProducts": [raw_product("2", price=1000, sale_price=800)],
    })

    data = asyncio.run(api.get_homepage_data())

    assert [p.id for p in data.featured_products] == ["1"]
    assert data.categories[0].slug.current == "apparel"
    assert data.sale_products[0].has_discount


def test_http_error_is_wrapped(api, store):
    store.fail(403, "Project not found")

    with pytest.raises(ContentStoreError) as exc_info:
        asyncio.run(api.get_all_categories())

    assert exc_info.value.status_code == 403
    assert exc_info.value.message == "Project not found"


def test_failure_is_not_cached(api, store):
    store.fail(500)
    with pytest.raises(ContentStoreError):
        asyncio.run(api.get_all_categories())

    store.recover()
    store.respond(queries.ALL_CATEGORIES, [raw_category()])
    categories = asyncio.run(api.get_all_categories())

    assert len(categories) == 1
    assert store.calls(queries.ALL_CATEGORIES) == 2


def test_malformed_response_is_wrapped():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"unexpected": True}))
    client = ContentStoreClient("test-project", transport=transport)

    with pytest.raises(ContentStoreError) as exc_info:
        asyncio.run(client.fetch("*[_type == 'product']"))

    assert exc_info.value.status_code == 500
    assert "missing result" in exc_info.value.message


def test_schema_mismatch_is_wrapped(api, store):
    store.respond(queries.ALL_PRODUCTS, [{"_id": "1"}])

    with pytest.raises(ContentStoreError):
        asyncio.run(api.get_all_products())


def test_transport_error_is_wrapped():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = ContentStoreClient("test-project", transport=httpx.MockTransport(handler))

    with pytest.raises(ContentStoreError) as exc_info:
        asyncio.run(client.fetch("*"))

    assert "connection refused" in exc_info.value.message


def test_handle_content_error_passes_through_existing_errors():
    error = ContentStoreError("already wrapped", status_code=404)
    assert handle_content_error(error) is error
    assert error.to_dict() == {"message": "already wrapped", "details": None, "status_code": 404}


def test_revalidate_product_drops_affected_entries(api, store):
    store.respond(queries.ALL_PRODUCTS, [raw_product("1")])
    store.respond(queries.ALL_CATEGORIES, [raw_category()])
    store.respond(queries.PRODUCT_BY_SLUG, lambda params: raw_product("1") if params["slug"] == "product-1" else None)

    async def warm():
        await api.get_all_products()
        await api.get_all_categories()
        await api.get_product_by_slug("product-1")
        await api.get_product_by_slug("other")

    asyncio.run(warm())

    removed = api.revalidate_product("product-1")

    assert removed == 2
    asyncio.run(warm())
    assert store.calls(queries.ALL_PRODUCTS) == 2
    assert store.calls(queries.ALL_CATEGORIES) == 1
    assert store.calls(queries.PRODUCT_BY_SLUG) == 3


def test_health_check(api, store):
    store.respond(queries.HEALTH_CHECK, {"_id": "x"})
    assert asyncio.run(api.health_check())["status"] == "ok"

    store.fail(503)
    result = asyncio.run(api.health_check())
    assert result["status"] == "error"
    assert result["message"].startswith("Content store connection failed")


def test_path_queries(api, store):
    store.respond(queries.PRODUCT_PATHS, ["wool-scarf", "felt-hat"])
    store.respond(queries.CATEGORY_PATHS, ["apparel"])

    assert asyncio.run(api.get_product_paths()) == ["wool-scarf", "felt-hat"]
    assert asyncio.run(api.get_category_paths()) == ["apparel"]


def test_explicit_zero_search_minimum_is_respected(content_client, store):
    store.respond(queries.SEARCH_PRODUCTS, [])
    api = CatalogAPI(content_client, search_min_length=0)

    assert api.search_min_length == 0
    asyncio.run(api.search_products("a"))
    assert store.calls(queries.SEARCH_PRODUCTS) == 1
