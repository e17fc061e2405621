"""
FastAPI application entrypoint.
APIs: auth, topics, subtopics, problems. Run with: uvicorn tracker.main:app --reload --port 8000

API base path: routers are mounted under settings.api_prefix (default /api/v1).
  - Auth:      POST /auth/register, POST /auth/login, GET /auth/me, POST /auth/logout,
               /auth/admin/users, /auth/admin/update-details/{id}, /auth/admin/delete-user/{id},
               /auth/admin/dashboard-stats
  - Topics:    GET /topics, /topics/search, /topics/all, /topics/progress, /topics/slug/{slug},
               POST /topics/toggle-complete, GET /topics/completed/{subtopic_id}, CRUD /topics/{id}
  - Subtopics: CRUD /subtopics, /subtopics/search, /subtopics/completed, /subtopics/topic/{topic_id}
  - Problems:  CRUD /problems, /problems/completed, /problems/topic/{topic}, PUT /problems/{id}/complete

Every response uses the {success, status, message, data} envelope, errors included.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from tracker.config import DEFAULT_SECRET_KEY, settings
from tracker.api.auth import router as auth_router
from tracker.api.problems import router as problems_router
from tracker.api.responses import error_response
from tracker.api.subtopics import router as subtopics_router
from tracker.api.topics import router as topics_router

logger = logging.getLogger("tracker.main")

app = FastAPI(
    title="Learning Progress Tracker API",
    description="Topics -> subtopics -> problems catalog with per-user completion tracking.",
    version="0.1.0",
)

_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins if _origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(topics_router, prefix=settings.api_prefix)
app.include_router(subtopics_router, prefix=settings.api_prefix)
app.include_router(problems_router, prefix=settings.api_prefix)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies, missing fields and bad enum values are 400s."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "Invalid request")
    message = f"{field}: {msg}" if field else msg
    return error_response(400, message, detail=str(errors))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(500, "Server error", detail=f"{type(exc).__name__}: {exc}")


@app.on_event("startup")
def startup():
    """Configure logging, create SQLite tables. Fail fast if production uses the default SECRET_KEY."""
    logging.basicConfig(
        level=getattr(logging, (settings.log_level or "INFO").upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if settings.is_production and (settings.secret_key or "").strip() == DEFAULT_SECRET_KEY:
        logger.critical("SECRET_KEY must be set in production. Set SECRET_KEY in env or .env.")
        raise RuntimeError("SECRET_KEY must be set in production. Set SECRET_KEY in env or .env.")
    from tracker.database import init_db
    init_db()
    logger.info("API mounted at %s (env=%s)", settings.api_prefix or "/", settings.env)


@app.get("/health")
def health():
    """Health check (JSON)."""
    return {"status": "ok", "message": "Learning Progress Tracker API"}
