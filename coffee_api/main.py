# Coffee API Main Entry Point
import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .db import Base, dispose_engine, init_engine
from .http import TimeoutMiddleware, register_exception_handlers
from .routers.coffees import router as coffees_router, limiter
from .routers.ratings import router as ratings_router
from .routers.ready import router as ready_router
from .settings import settings
from . import models  # noqa: F401  (registers tables on Base.metadata)

# Configure structured logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger("coffee_api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = init_engine()
    if settings.db_auto_create:
        logger.info("Creating missing tables")
        Base.metadata.create_all(bind=engine)
    yield
    dispose_engine()


app = FastAPI(title="Coffee API", version="0.1.0", lifespan=lifespan)
app.state.limiter = limiter

app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(ready_router, tags=["ready"])
app.include_router(coffees_router, tags=["coffees"])
app.include_router(ratings_router, tags=["ratings"])
