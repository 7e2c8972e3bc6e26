"""Catalog routes: listing, search, product detail, categories and homepage."""
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from storefront.catalog.listing import (
    ALL_CATEGORIES,
    FilterState,
    SortOption,
    filter_and_sort,
    select_source,
)
from storefront.config import settings
from storefront.content.api import CatalogAPI
from storefront.content.images import ImageUrlBuilder
from storefront.data.portable_text import to_html, to_plain_text
from storefront.data.schemas import Category, FormattedPrice, ProductSummary
from storefront.utils.currency import format_card_price, format_complete_price

router = APIRouter(tags=["catalog"])


def get_catalog_api(request: Request) -> CatalogAPI:
    """Dependency returning the shared catalog API from app state."""
    return request.app.state.catalog_api


def get_image_builder(request: Request) -> ImageUrlBuilder:
    """Dependency returning the shared image URL builder from app state."""
    return request.app.state.image_builder


# Response models

class CategoryResponse(BaseModel):
    """Category response model."""
    id: str
    title: str
    slug: str
    description: Optional[str] = None
    image_url: str = ""


class ProductCardResponse(BaseModel):
    """Product card response model."""
    id: str
    title: str
    slug: str
    price: int = Field(..., description="Base price in minor currency units")
    sale_price: Optional[int] = Field(None, description="Sale price in minor currency units")
    currency: str
    in_stock: bool
    featured: bool
    on_sale: bool
    published_at: Optional[datetime] = None
    category_id: Optional[str] = None
    category_title: Optional[str] = None
    price_display: FormattedPrice
    card_price: str
    image_url: str = ""
    lqip_url: str = ""
    image_alt: Optional[str] = None


class ListingResponse(BaseModel):
    """Response model for the product listing."""
    products: List[ProductCardResponse]
    total: int
    source: str = Field(..., description="catalog or search")
    search_term: str = ""
    category: str = ALL_CATEGORIES
    in_stock_only: bool = False
    on_sale_only: bool = False
    sort: SortOption = SortOption.NEWEST
    has_active_filters: bool = False


class PageResponse(BaseModel):
    """One page of products."""
    products: List[ProductCardResponse]
    total: int
    page: int
    limit: int


class ProductDetailResponse(BaseModel):
    """Product detail response model."""
    id: str
    title: str
    slug: str
    description_html: str
    description_text: str
    price: int
    sale_price: Optional[int] = None
    currency: str
    price_display: FormattedPrice
    category: Optional[CategoryResponse] = None
    tags: List[str] = Field(default_factory=list)
    in_stock: bool
    featured: bool
    published_at: Optional[datetime] = None
    image_url: str = ""
    lqip_url: str = ""


class GalleryImageResponse(BaseModel):
    """One gallery image with its URLs."""
    url: str
    lqip_url: str
    alt: Optional[str] = None
    caption: Optional[str] = None
    responsive: Dict[str, str] = Field(default_factory=dict)


class ProductMetadataResponse(BaseModel):
    """Product metadata for SEO and Open Graph."""
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    image_width: Optional[int] = None
    image_height: Optional[int] = None
    image_alt: Optional[str] = None
    price: str
    sale_price: Optional[str] = None
    currency: str
    in_stock: bool
    category: Optional[str] = None
    published_at: Optional[datetime] = None


class HomepageResponse(BaseModel):
    """Homepage aggregate response model."""
    featured_products: List[ProductCardResponse]
    categories: List[CategoryResponse]
    sale_products: List[ProductCardResponse]


# Presenters

def present_category(category: Category, images: ImageUrlBuilder) -> CategoryResponse:
    return CategoryResponse(
        id=category.id,
        title=category.title,
        slug=category.slug.current,
        description=category.description,
        image_url=images.product_image_url(category.image, 400, 400) if category.image else ""
    )


def present_card(product: ProductSummary, images: ImageUrlBuilder) -> ProductCardResponse:
    currency = product.currency.value
    return ProductCardResponse(
        id=product.id,
        title=product.title,
        slug=product.slug.current,
        price=product.price,
        sale_price=product.sale_price,
        currency=currency,
        in_stock=product.in_stock,
        featured=product.featured,
        on_sale=product.has_discount,
        published_at=product.published_at,
        category_id=product.category.id if product.category else None,
        category_title=product.category.title if product.category else None,
        price_display=format_complete_price(product.price, currency, product.sale_price),
        card_price=format_card_price(product.price, currency, product.sale_price),
        image_url=images.product_image_url(product.main_image, 400, 400),
        lqip_url=images.lqip_url(product.main_image),
        image_alt=product.main_image.alt if product.main_image else None
    )


def present_cards(products: List[ProductSummary], images: ImageUrlBuilder) -> List[ProductCardResponse]:
    return [present_card(product, images) for product in products]


# Listing

@router.get("/products", response_model=ListingResponse, summary="List products")
async def list_products(
    q: Optional[str] = Query(None, max_length=200, description="Search term"),
    category: str = Query(ALL_CATEGORIES, description="Category id, or 'all'"),
    in_stock_only: bool = Query(False),
    on_sale_only: bool = Query(False),
    sort: SortOption = Query(SortOption.NEWEST),
    api: CatalogAPI = Depends(get_catalog_api),
    images: ImageUrlBuilder = Depends(get_image_builder)
):
    """
    List products with optional search, filters and sort.

    Search is used once the term reaches the minimum length; shorter terms
    list the full catalog.
    """
    term = (q or "").strip()
    filters = FilterState(
        search_term=term,
        category=category or ALL_CATEGORIES,
        in_stock_only=in_stock_only,
        on_sale_only=on_sale_only,
        sort=sort
    )

    if len(term) >= settings.search_min_length:
        source = select_source(term, None, await api.search_products(term), settings.search_min_length)
    else:
        source = select_source(term, await api.get_all_products(), None, settings.search_min_length)

    products = filter_and_sort(source, filters)

    return ListingResponse(
        products=present_cards(products, images),
        total=len(products),
        source=source.name,
        search_term=term,
        category=filters.category,
        in_stock_only=in_stock_only,
        on_sale_only=on_sale_only,
        sort=sort,
        has_active_filters=filters.has_active_filters(term)
    )


@router.get("/products/featured", response_model=List[ProductCardResponse], summary="Featured products")
async def featured_products(
    api: CatalogAPI = Depends(get_catalog_api),
    images: ImageUrlBuilder = Depends(get_image_builder)
):
    return present_cards(await api.get_featured_products(), images)


@router.get("/products/sale", response_model=List[ProductCardResponse], summary="Products on sale")
async def sale_products(
    api: CatalogAPI = Depends(get_catalog_api),
    images: ImageUrlBuilder = Depends(get_image_builder)
):
    return present_cards(await api.get_sale_products(), images)


@router.get("/products/page", response_model=PageResponse, summary="Paginated products")
async def paginated_products(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    api: CatalogAPI = Depends(get_catalog_api),
    images: ImageUrlBuilder = Depends(get_image_builder)
):
    result = await api.get_products_with_pagination(page=page, limit=limit)
    return PageResponse(
        products=present_cards(result.products, images),
        total=result.total,
        page=page,
        limit=limit
    )


@router.get("/products/filtered", response_model=PageResponse, summary="Filtered products")
async def filtered_products(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    min_price: Optional[float] = Query(None, ge=0, description="Lower bound in currency units"),
    max_price: Optional[float] = Query(None, ge=0, description="Upper bound in currency units"),
    in_stock_only: bool = Query(False),
    category_id: Optional[str] = Query(None),
    api: CatalogAPI = Depends(get_catalog_api),
    images: ImageUrlBuilder = Depends(get_image_builder)
):
    """Server-side filtered page, ordered by effective price."""
    result = await api.get_filtered_products(
        page=page,
        limit=limit,
        min_price=min_price,
        max_price=max_price,
        in_stock_only=in_stock_only,
        category_id=category_id
    )
    return PageResponse(
        products=present_cards(result.products, images),
        total=result.total,
        page=page,
        limit=limit
    )


# Product detail

async def _require_product(api: CatalogAPI, slug: str):
    product = await api.get_product_by_slug(slug)
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with slug '{slug}' not found"
        )
    return product


@router.get("/products/{slug}", response_model=ProductDetailResponse, summary="Get product by slug")
async def get_product(
    slug: str,
    api: CatalogAPI = Depends(get_catalog_api),
    images: ImageUrlBuilder = Depends(get_image_builder)
):
    product = await _require_product(api, slug)
    currency = product.currency.value

    return ProductDetailResponse(
        id=product.id,
        title=product.title,
        slug=product.slug.current,
        description_html=to_html(product.description),
        description_text=to_plain_text(product.description),
        price=product.price,
        sale_price=product.sale_price,
        currency=currency,
        price_display=format_complete_price(product.price, currency, product.sale_price),
        category=present_category(product.category, images) if product.category else None,
        tags=product.tags,
        in_stock=product.in_stock,
        featured=product.featured,
        published_at=product.published_at,
        image_url=images.product_image_url(product.main_image),
        lqip_url=images.lqip_url(product.main_image)
    )


@router.get("/products/{slug}/related", response_model=List[ProductCardResponse], summary="Related products")
async def related_products(
    slug: str,
    api: CatalogAPI = Depends(get_catalog_api),
    images: ImageUrlBuilder = Depends(get_image_builder)
):
    """Up to four other products from the same category."""
    product = await _require_product(api, slug)
    if product.category is None:
        return []
    return present_cards(await api.get_related_products(product.category.id, product.id), images)


@router.get("/products/{slug}/gallery", response_model=List[GalleryImageResponse], summary="Product gallery")
async def product_gallery(
    slug: str,
    api: CatalogAPI = Depends(get_catalog_api),
    images: ImageUrlBuilder = Depends(get_image_builder)
):
    """Main image followed by the gallery images."""
    product = await _require_product(api, slug)
    gallery = [product.main_image] if product.main_image else []
    gallery.extend(product.gallery_images)

    return [
        GalleryImageResponse(
            url=images.product_image_url(image),
            lqip_url=images.lqip_url(image),
            alt=image.alt or product.title,
            caption=image.caption,
            responsive=images.responsive_urls(image)
        )
        for image in gallery
    ]


@router.get("/products/{slug}/metadata", response_model=ProductMetadataResponse, summary="Product metadata")
async def product_metadata(slug: str, api: CatalogAPI = Depends(get_catalog_api)):
    metadata = await api.get_product_metadata(slug)
    if metadata is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with slug '{slug}' not found"
        )

    price = format_complete_price(metadata.price, metadata.currency.value, metadata.sale_price)
    image = metadata.main_image
    asset = image.asset if image else None
    dimensions = asset.metadata.dimensions if asset and asset.metadata else None

    return ProductMetadataResponse(
        title=metadata.title,
        description=metadata.description,
        image_url=asset.url if asset else None,
        image_width=dimensions.width if dimensions else None,
        image_height=dimensions.height if dimensions else None,
        image_alt=image.alt if image else None,
        price=price.original,
        sale_price=price.sale,
        currency=metadata.currency.value,
        in_stock=metadata.in_stock,
        category=metadata.category.title if metadata.category else None,
        published_at=metadata.published_at
    )


# Categories and homepage

@router.get("/categories", response_model=List[CategoryResponse], summary="All categories")
async def list_categories(
    api: CatalogAPI = Depends(get_catalog_api),
    images: ImageUrlBuilder = Depends(get_image_builder)
):
    return [present_category(category, images) for category in await api.get_all_categories()]


@router.get("/categories/{slug}", response_model=CategoryResponse, summary="Get category by slug")
async def get_category(
    slug: str,
    api: CatalogAPI = Depends(get_catalog_api),
    images: ImageUrlBuilder = Depends(get_image_builder)
):
    category = await api.get_category_by_slug(slug)
    if category is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Category with slug '{slug}' not found"
        )
    return present_category(category, images)


@router.get("/categories/{slug}/products", response_model=List[ProductCardResponse], summary="Products in category")
async def category_products(
    slug: str,
    api: CatalogAPI = Depends(get_catalog_api),
    images: ImageUrlBuilder = Depends(get_image_builder)
):
    return present_cards(await api.get_products_by_category(slug), images)


@router.get("/homepage", response_model=HomepageResponse, summary="Homepage data")
async def homepage(
    api: CatalogAPI = Depends(get_catalog_api),
    images: ImageUrlBuilder = Depends(get_image_builder)
):
    """Featured products, categories and sale products."""
    data = await api.get_homepage_data()
    return HomepageResponse(
        featured_products=present_cards(data.featured_products, images),
        categories=[present_category(category, images) for category in data.categories],
        sale_products=present_cards(data.sale_products, images)
    )
