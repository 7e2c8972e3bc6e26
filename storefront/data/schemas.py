"""Catalog schemas parsed from content store query results."""
from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


class Currency(str, Enum):
    """Supported currency codes."""
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    CAD = "CAD"
    AUD = "AUD"
    JPY = "JPY"


class StoreModel(BaseModel):
    """Base model for documents coming out of the content store."""

    class Config:
        populate_by_name = True
        extra = "ignore"


class Slug(StoreModel):
    """URL slug as stored by the content store."""
    current: str


class ImageDimensions(StoreModel):
    width: int
    height: int


class ImageMetadata(StoreModel):
    dimensions: Optional[ImageDimensions] = None
    lqip: Optional[str] = None


class ImageAsset(StoreModel):
    """Stored image asset, either expanded or a bare reference."""
    id: Optional[str] = Field(None, alias="_id")
    ref: Optional[str] = Field(None, alias="_ref")
    url: Optional[str] = None
    metadata: Optional[ImageMetadata] = None

    @property
    def asset_id(self) -> Optional[str]:
        """Asset document id regardless of whether the reference was expanded."""
        return self.id or self.ref


class ImageHotspot(StoreModel):
    """Focus area of an image, as fractions of its dimensions."""
    x: float
    y: float
    width: float
    height: float


class ImageCrop(StoreModel):
    """Crop insets, as fractions of the image dimensions."""
    top: float = 0.0
    bottom: float = 0.0
    left: float = 0.0
    right: float = 0.0


class SanityImage(StoreModel):
    """Image field: an asset reference plus presentation metadata."""
    asset: Optional[ImageAsset] = None
    alt: Optional[str] = None
    caption: Optional[str] = None
    hotspot: Optional[ImageHotspot] = None
    crop: Optional[ImageCrop] = None


class CategoryRef(StoreModel):
    """Reduced category projection attached to product summaries."""
    id: str = Field(..., alias="_id")
    title: Optional[str] = None
    slug: Optional[Slug] = None


class Category(StoreModel):
    """Product category."""
    id: str = Field(..., alias="_id")
    title: str
    slug: Slug
    description: Optional[str] = None
    image: Optional[SanityImage] = None


class ProductSummary(StoreModel):
    """Listing projection of a product (no description or gallery)."""
    id: str = Field(..., alias="_id")
    title: str
    slug: Slug
    main_image: Optional[SanityImage] = Field(None, alias="mainImage")
    price: int = Field(..., description="Base price in minor currency units")
    sale_price: Optional[int] = Field(None, alias="salePrice", description="Sale price in minor currency units")
    currency: Currency = Currency.USD
    in_stock: bool = Field(True, alias="inStock")
    featured: bool = False
    published_at: Optional[datetime] = Field(None, alias="publishedAt")
    category: Optional[CategoryRef] = None

    @property
    def has_discount(self) -> bool:
        """Whether the product counts as on sale."""
        return self.sale_price is not None and self.sale_price < self.price

    @property
    def effective_price(self) -> int:
        """Sale price when it is a valid discount, base price otherwise."""
        return self.sale_price if self.has_discount else self.price


class Product(ProductSummary):
    """Full product document for detail pages."""
    created_at: Optional[datetime] = Field(None, alias="_createdAt")
    updated_at: Optional[datetime] = Field(None, alias="_updatedAt")
    description: List[Dict[str, Any]] = Field(default_factory=list)
    gallery_images: List[SanityImage] = Field(default_factory=list, alias="galleryImages")
    tags: List[str] = Field(default_factory=list)
    category: Optional[Category] = None


class ProductsResponse(StoreModel):
    """A page of products plus the total matching count."""
    products: List[ProductSummary] = Field(default_factory=list)
    total: int = 0


class HomepageData(StoreModel):
    """Aggregate homepage payload."""
    featured_products: List[ProductSummary] = Field(default_factory=list, alias="featuredProducts")
    categories: List[Category] = Field(default_factory=list)
    sale_products: List[ProductSummary] = Field(default_factory=list, alias="saleProducts")


class MetadataImage(StoreModel):
    asset: Optional[ImageAsset] = None
    alt: Optional[str] = None


class MetadataCategory(StoreModel):
    title: Optional[str] = None


class ProductMetadata(StoreModel):
    """SEO / Open Graph projection of a product."""
    title: str
    description: Optional[str] = None
    main_image: Optional[MetadataImage] = Field(None, alias="mainImage")
    price: int
    sale_price: Optional[int] = Field(None, alias="salePrice")
    currency: Currency = Currency.USD
    in_stock: bool = Field(True, alias="inStock")
    category: Optional[MetadataCategory] = None
    published_at: Optional[datetime] = Field(None, alias="publishedAt")


class FormattedPrice(BaseModel):
    """Display strings for a price and its optional discount."""
    original: str
    sale: Optional[str] = None
    has_discount: bool = False
    discount_percentage: Optional[int] = None
