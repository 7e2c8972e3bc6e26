"""Content type schemas used to validate documents before they reach the store."""
import re
from datetime import datetime, timezone
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Dict, Any
from storefront.data.schemas import Currency
from storefront.utils.logger import get_logger

logger = get_logger(__name__)

MAX_GALLERY_IMAGES = 6


def slugify(text: str, max_length: int = 96) -> str:
    """Lowercase, join whitespace with dashes and drop anything else non-word."""
    slug = re.sub(r"\s+", "-", text.lower())
    slug = re.sub(r"[^\w-]+", "", slug)
    return slug[:max_length]


class ImageField(BaseModel):
    """Image field with required alternative text."""
    asset_ref: str = Field(..., min_length=1, description="Reference to the stored image asset")
    alt: str = Field(..., min_length=5, max_length=100, description="Alternative text for accessibility and SEO")
    caption: Optional[str] = Field(None, description="Optional caption for the image")


class CategoryImageField(BaseModel):
    asset_ref: str = Field(..., min_length=1)
    alt: str = Field(..., min_length=1)


class CategoryDocument(BaseModel):
    """Product category document."""
    title: str = Field(..., min_length=2, max_length=50, description="Category title")
    slug: Optional[str] = Field(None, max_length=50, description="URL slug (derived from title when omitted)")
    description: Optional[str] = Field(None, description="Brief description of the category")
    image: Optional[CategoryImageField] = None

    @model_validator(mode="after")
    def derive_slug(self):
        if not self.slug:
            self.slug = slugify(self.title, max_length=50)
        return self


class ProductDocument(BaseModel):
    """Product document with the same rules the CMS enforces on write."""
    title: str = Field(..., min_length=3, max_length=100, description="Product title")
    slug: Optional[str] = Field(None, max_length=96, description="URL slug (derived from title when omitted)")
    description: List[Dict[str, Any]] = Field(..., min_length=1, description="Portable text description")
    main_image: ImageField
    gallery_images: List[ImageField] = Field(default_factory=list)
    price: int = Field(..., gt=0, description="Price in the smallest currency unit (e.g. cents)")
    sale_price: Optional[int] = Field(None, gt=0, description="Optional discounted price")
    currency: Currency = Currency.USD
    category_ref: str = Field(..., min_length=1, description="Reference to a category document")
    tags: List[str] = Field(default_factory=list)
    in_stock: bool = True
    featured: bool = Field(False, description="Feature this product on the homepage")
    published_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("gallery_images")
    @classmethod
    def warn_large_gallery(cls, v):
        if len(v) > MAX_GALLERY_IMAGES:
            logger.warning(
                f"Gallery has {len(v)} images; consider keeping it to {MAX_GALLERY_IMAGES} or fewer"
            )
        return v

    @model_validator(mode="after")
    def validate_sale_price(self):
        if self.sale_price is not None and self.sale_price >= self.price:
            raise ValueError("Sale price must be less than regular price")
        if not self.slug:
            self.slug = slugify(self.title)
        return self

    def preview(self) -> Dict[str, str]:
        """Title and price line shown in document lists."""
        subtitle = f"{self.currency.value} {self.price / 100:.2f}"
        if self.sale_price:
            subtitle += " (On Sale)"
        return {"title": self.title, "subtitle": subtitle}
