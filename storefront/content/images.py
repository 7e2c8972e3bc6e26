"""Image asset URL resolution against the content store's image CDN."""
import re
from typing import Dict, List, Optional, Tuple, Union
from urllib.parse import urlencode
from storefront.config import settings
from storefront.data.schemas import ImageAsset, SanityImage

ImageSource = Union[str, ImageAsset, SanityImage, None]

# image-<hash>-<width>x<height>-<format>
ASSET_ID_PATTERN = re.compile(r"^image-(?P<hash>[A-Za-z0-9]+)-(?P<width>\d+)x(?P<height>\d+)-(?P<ext>[a-z0-9]+)$")

IMAGE_CDN = "https://cdn.sanity.io/images"


def parse_asset_id(asset_id: str) -> Tuple[str, int, int, str]:
    """
    Split an asset id into its parts.

    Returns:
        Tuple of (hash, width, height, extension)

    Raises:
        ValueError: If the id is not an image asset id
    """
    match = ASSET_ID_PATTERN.match(asset_id or "")
    if not match:
        raise ValueError(f"Malformed image asset id: {asset_id!r}")
    return match["hash"], int(match["width"]), int(match["height"]), match["ext"]


class ImageUrlBuilder:
    """Builds CDN URLs for stored image assets."""

    def __init__(self, project_id: str, dataset: str):
        self.project_id = project_id
        self.dataset = dataset

    @classmethod
    def from_settings(cls) -> "ImageUrlBuilder":
        return cls(settings.sanity_project_id, settings.sanity_dataset)

    @staticmethod
    def _resolve(source: ImageSource) -> Tuple[Optional[str], Optional[SanityImage]]:
        if isinstance(source, SanityImage):
            asset_id = source.asset.asset_id if source.asset else None
            return asset_id, source
        if isinstance(source, ImageAsset):
            return source.asset_id, None
        return source or None, None

    def url_for(
        self,
        source: ImageSource,
        width: Optional[int] = None,
        height: Optional[int] = None,
        format: Optional[str] = None,
        quality: Optional[int] = None,
        blur: Optional[int] = None
    ) -> str:
        """
        Resolve an image source to a URL.

        Args:
            source: Asset id, asset object or image field
            width: Target width in pixels
            height: Target height in pixels
            format: Output format (webp, jpg, png)
            quality: Output quality 0-100
            blur: Blur radius

        Returns:
            Image URL, or an empty string when there is no source
        """
        asset_id, image = self._resolve(source)
        if not asset_id:
            return ""

        asset_hash, asset_width, asset_height, ext = parse_asset_id(asset_id)
        url = f"{IMAGE_CDN}/{self.project_id}/{self.dataset}/{asset_hash}-{asset_width}x{asset_height}.{ext}"

        params: List[Tuple[str, str]] = []
        if image is not None and image.crop is not None:
            crop = image.crop
            left = round(crop.left * asset_width)
            top = round(crop.top * asset_height)
            crop_width = round(asset_width - crop.right * asset_width - left)
            crop_height = round(asset_height - crop.bottom * asset_height - top)
            if (left, top, crop_width, crop_height) != (0, 0, asset_width, asset_height):
                params.append(("rect", f"{left},{top},{crop_width},{crop_height}"))
        if width is not None:
            params.append(("w", str(width)))
        if height is not None:
            params.append(("h", str(height)))
        if image is not None and image.hotspot is not None and width and height:
            params.extend([
                ("fit", "crop"),
                ("crop", "focalpoint"),
                ("fp-x", f"{image.hotspot.x:g}"),
                ("fp-y", f"{image.hotspot.y:g}"),
            ])
        if blur is not None:
            params.append(("blur", str(blur)))
        if format is not None:
            params.append(("fm", format))
        if quality is not None:
            params.append(("q", str(quality)))

        if not params:
            return url
        return f"{url}?{urlencode(params, safe=',')}"

    def product_image_url(
        self,
        source: ImageSource,
        width: int = 800,
        height: int = 800,
        format: str = "webp"
    ) -> str:
        """Optimized product image with specific dimensions."""
        return self.url_for(source, width=width, height=height, format=format, quality=85)

    def lqip_url(self, source: ImageSource) -> str:
        """Low quality placeholder for progressive loading."""
        return self.url_for(source, width=20, height=20, blur=50, format="jpg", quality=50)

    def responsive_urls(self, source: ImageSource) -> Dict[str, str]:
        """URLs for the standard breakpoints, with JPEG fallbacks."""
        if not self._resolve(source)[0]:
            return {"mobile": "", "tablet": "", "desktop": "", "original": ""}

        return {
            "mobile": self.url_for(source, width=640, height=640, format="webp"),
            "tablet": self.url_for(source, width=768, height=768, format="webp"),
            "desktop": self.url_for(source, width=1024, height=1024, format="webp"),
            "original": self.url_for(source, format="webp"),
            # Fallback JPEGs for clients without WebP support
            "mobile_fallback": self.url_for(source, width=640, height=640, format="jpg"),
            "tablet_fallback": self.url_for(source, width=768, height=768, format="jpg"),
            "desktop_fallback": self.url_for(source, width=1024, height=1024, format="jpg"),
        }
