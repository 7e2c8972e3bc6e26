"""User routes: favorites (wishlist) for the requesting client."""
import hashlib
from fastapi import APIRouter, Depends, Request, Path
from sqlalchemy.orm import Session
from typing import List
from pydantic import BaseModel, Field
from storefront.catalog.favorites import FavoritesStore
from storefront.data.database.connection import get_db
from storefront.utils.logger import get_logger
from storefront.utils.storage import SqlStorage

logger = get_logger(__name__)

router = APIRouter(prefix="/user", tags=["user"])


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.
    Handles proxies and forwarded headers.

    Args:
        request: FastAPI request object

    Returns:
        Client IP address as string
    """
    # First entry of X-Forwarded-For is the originating client
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client:
        return request.client.host

    return "unknown"


def generate_client_id(ip_address: str) -> str:
    """
    Generate a consistent client id from an IP address.

    Args:
        ip_address: Client IP address

    Returns:
        Client id, the same for every request from the same address
    """
    hash_obj = hashlib.md5(ip_address.encode())
    return f"client_{hash_obj.hexdigest()[:16]}"


def get_favorites_store(request: Request, db: Session = Depends(get_db)) -> FavoritesStore:
    """Dependency building the favorites store for the requesting client."""
    client_id = generate_client_id(get_client_ip(request))
    return FavoritesStore(SqlStorage(db, client_id))


class FavoritesResponse(BaseModel):
    """Response model for the favorites list."""
    favorites: List[str] = Field(default_factory=list, description="Favorited product ids in insertion order")
    count: int = 0


class ToggleFavoriteResponse(BaseModel):
    """Response model for a favorite toggle."""
    product_id: str
    is_favorite: bool
    favorites: List[str]
    count: int


def _favorites_response(favorites: List[str]) -> FavoritesResponse:
    return FavoritesResponse(favorites=favorites, count=len(favorites))


@router.get("/favorites", response_model=FavoritesResponse, summary="Get user's favorites")
async def get_favorites(store: FavoritesStore = Depends(get_favorites_store)):
    return _favorites_response(store.favorites)


@router.post("/favorites/{product_id}", response_model=FavoritesResponse, summary="Add a favorite")
async def add_favorite(product_id: str = Path(..., min_length=1, max_length=128), store: FavoritesStore = Depends(get_favorites_store)):
    """Add a product to favorites. Adding an existing favorite is a no-op."""
    return _favorites_response(store.add(product_id))


@router.delete("/favorites/{product_id}", response_model=FavoritesResponse, summary="Remove a favorite")
async def remove_favorite(product_id: str = Path(..., min_length=1, max_length=128), store: FavoritesStore = Depends(get_favorites_store)):
    """Remove a product from favorites. Removing a non-favorite is a no-op."""
    return _favorites_response(store.remove(product_id))


@router.post(
    "/favorites/{product_id}/toggle",
    response_model=ToggleFavoriteResponse,
    summary="Toggle a favorite"
)
async def toggle_favorite(product_id: str = Path(..., min_length=1, max_length=128), store: FavoritesStore = Depends(get_favorites_store)):
    is_favorite = store.toggle(product_id)
    logger.info(f"Favorite {'added' if is_favorite else 'removed'}: {product_id}")
    favorites = store.favorites
    return ToggleFavoriteResponse(
        product_id=product_id,
        is_favorite=is_favorite,
        favorites=favorites,
        count=len(favorites)
    )
