import logging
from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from storefront.core.config import settings
from storefront.core.api_client import api_client
from storefront.web.routes import router as web_router

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=f"{settings.SHOP_NAME} - Storefront",
    description="Customer-facing storefront pages over the shop API",
    version="1.0.0",
    openapi_url="/api/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

# The session cookie is the credential store for the shop API bearer token
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET_KEY,
    max_age=3600 * 24 * 7  # 7 days
)

app.include_router(web_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "shop_name": settings.SHOP_NAME
    }


@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting {settings.SHOP_NAME} storefront against {settings.API_BASE_URL}")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down storefront")
    await api_client.close()
