from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .backends import rest
from .config import settings
from .db import init_db
from .logging_config import get_logger
from .routers import auth as auth_router
from .routers import home as home_router
from .routers import jobs as jobs_router

logger = get_logger(__name__)

app = FastAPI(title=settings.APP_NAME, version="0.1.0")


# CORS
origins = [o.strip() for o in settings.CORS_ALLOW_ORIGINS.split(',') if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(home_router.router)
app.include_router(jobs_router.router)
app.include_router(auth_router.router)


@app.on_event("startup")
def _on_startup():
    if settings.use_rest_backend:
        # raises ConfigurationError on a bad URL/key instead of serving empty pages
        app.state.rest_client = rest.create_client(settings)
        logger.info("using REST backend at %s", settings.BACKEND_URL)
    else:
        # create tables on startup (development convenience). Use migrations for prod.
        init_db()
        logger.info("using SQL backend")


@app.on_event("shutdown")
def _on_shutdown():
    client = getattr(app.state, "rest_client", None)
    if client is not None:
        client.close()


@app.get("/health")
def health():
    return {"status": "ok", "env": settings.APP_ENV, "backend": "rest" if settings.use_rest_backend else "sql"}
