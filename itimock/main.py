import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from itimock.core.config import settings
from itimock.core.database import init_db
from itimock.api.auth import router as auth_router
from itimock.api.papers import router as papers_router
from itimock.api.author import router as author_router
from itimock.api.service import router as service_router
from itimock.api.stats import router as stats_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s (%s)", settings.APP_NAME, settings.ENVIRONMENT)
    if settings.AUTO_CREATE_TABLES:
        init_db()
    yield
    logger.info("Shutting down %s", settings.APP_NAME)

app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=settings.CORS_ORIGINS, allow_credentials=True, allow_methods=["*"], allow_headers=["*"])
app.include_router(auth_router, prefix="/v1/auth", tags=["auth"])
app.include_router(papers_router, prefix="/v1/papers", tags=["papers"])
app.include_router(service_router, prefix="/v1/mock-test-service", tags=["mock-test-service"])
app.include_router(author_router, prefix="/v1/author", tags=["authoring"])
app.include_router(stats_router, prefix="/v1/stats", tags=["stats"])

@app.get("/health")
def health(): return {"status": "ok"}
