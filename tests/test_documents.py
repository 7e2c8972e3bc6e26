"""Tests for write-side document validation."""
import pytest
from pydantic import ValidationError
from storefront.data.documents import CategoryDocument, ProductDocument, slugify

DESCRIPTION = [{"_type": "block", "children": [{"_type": "span", "text": "Warm"}]}]


def product_document(**overrides):
    fields = {
        "title": "Wool Scarf",
        "description": DESCRIPTION,
        "main_image": {"asset_ref": "image-abc-10x10-jpg", "alt": "A wool scarf"},
        "price": 2500,
        "category_ref": "cat-a",
    }
    fields.update(overrides)
    return ProductDocument(**fields)


def test_slugify():
    assert slugify("Wool Scarf, Hat!") == "wool-scarf-hat"
    assert len(slugify("a" * 200)) == 96


def test_product_defaults():
    doc = product_document()
    assert doc.slug == "wool-scarf"
    assert doc.in_stock
    assert not doc.featured
    assert doc.published_at.tzinfo is not None


def test_sale_price_must_be_below_price():
    with pytest.raises(ValidationError, match="Sale price must be less than regular price"):
        product_document(sale_price=2500)
    assert product_document(sale_price=2000).sale_price == 2000


@pytest.mark.parametrize("overrides", [
    {"title": "ab"},
    {"price": 0},
    {"description": []},
    {"main_image": {"asset_ref": "image-abc-10x10-jpg", "alt": "bad"}},
    {"category_ref": ""},
    {"currency": "CHF"},
])
def test_invalid_products_rejected(overrides):
    with pytest.raises(ValidationError):
        product_document(**overrides)


def test_large_gallery_only_warns(caplog):
    image = {"asset_ref": "image-abc-10x10-jpg", "alt": "Gallery shot"}
    doc = product_document(gallery_images=[image] * 7)
    assert len(doc.gallery_images) == 7
    assert any("Gallery has 7 images" in r.getMessage() for r in caplog.records)


def test_preview():
    assert product_document().preview() == {"title": "Wool Scarf", "subtitle": "USD 25.00"}
    assert product_document(sale_price=2000).preview()["subtitle"] == "USD 25.00 (On Sale)"


def test_category_document():
    category = CategoryDocument(title="Winter Wear")
    assert category.slug == "winter-wear"

    with pytest.raises(ValidationError):
        CategoryDocument(title="A")
