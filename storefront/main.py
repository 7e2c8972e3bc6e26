"""Main FastAPI application."""
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from storefront.config import settings
from storefront.content.api import CatalogAPI
from storefront.content.client import ContentStoreClient
from storefront.content.errors import ContentStoreError
from storefront.content.images import ImageUrlBuilder
from storefront.data.database.connection import engine, Base
# Import storage models to ensure tables are created
from storefront.data.database.storage_model import ClientStorageEntry  # noqa: F401
from storefront.routes.products import router as products_router
from storefront.routes.user import router as user_router
from storefront.utils.logger import get_logger

logger = get_logger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.catalog_api.client.aclose()
    logger.info("Content store client closed")


# Initialize FastAPI app
app = FastAPI(
    title=settings.project_name,
    version=settings.api_version,
    description="Storefront catalog API backed by a headless content store",
    lifespan=lifespan
)

# Shared content store access for all requests
logger.info(f"Connecting to content store project '{settings.sanity_project_id}' ({settings.sanity_dataset})")
app.state.catalog_api = CatalogAPI(ContentStoreClient.from_settings())
app.state.image_builder = ImageUrlBuilder.from_settings()

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ContentStoreError)
async def content_store_error_handler(request: Request, exc: ContentStoreError):
    """Render content store failures as JSON with the store's status code."""
    logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    status_code = exc.status_code if 400 <= exc.status_code < 600 else 502
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "status_code": status_code}
    )


# Include routers
app.include_router(products_router)
app.include_router(user_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Storefront Catalog API",
        "version": settings.api_version,
        "docs": "/docs"
    }


@app.api_route("/health", methods=["GET", "HEAD"])
async def health_check(request: Request):
    """Health check endpoint, including the content store connection."""
    result = await request.app.state.catalog_api.health_check()
    status_code = 200 if result["status"] == "ok" else 503
    return JSONResponse(status_code=status_code, content=result)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
