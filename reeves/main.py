import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .db import client
from .errors import ReevesError
from .redis_client import redis_client
from .routers import (
    admin_contacts,
    admin_gallery,
    admin_menu,
    admin_reservations,
    auth,
    contact,
    gallery,
    health,
    menu,
    reservations,
)

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Reeves API...")
    yield
    logger.info("Shutting down Reeves API...")
    await redis_client.aclose()
    client.close()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ReevesError)
async def reeves_error_handler(request: Request, exc: ReevesError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# routers
app.include_router(health.router)
app.include_router(auth.router)          # /auth/*
app.include_router(gallery.router)       # /gallery
app.include_router(menu.router)          # /menu
app.include_router(reservations.router)  # /reservations
app.include_router(contact.router)       # /contact
app.include_router(admin_gallery.router)
app.include_router(admin_menu.router)
app.include_router(admin_reservations.router)
app.include_router(admin_contacts.router)
