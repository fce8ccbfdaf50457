import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auth import router as auth_router
from core import db, settings
from feed import router as feed_router
from friends import router as friends_router
from notifications import router as notifications_router
from posts import router as posts_router
from users import router as users_router

logging.basicConfig(
    level=settings.log_level(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(db.StorageUnavailable)
async def storage_unavailable_handler(request: Request, exc: db.StorageUnavailable) -> JSONResponse:
    logger.error("storage_unavailable path=%s error=%s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable."})


app.include_router(auth_router.router, tags=["auth"])
app.include_router(feed_router.router, tags=["feed"])
app.include_router(posts_router.router, tags=["posts"])
app.include_router(friends_router.router, tags=["friends"])
app.include_router(users_router.router, tags=["users"])
app.include_router(notifications_router.router, tags=["notifications"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "social feed api"}
