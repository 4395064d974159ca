import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from worktrack.config import settings
from worktrack.middleware.logging_config import configure_logging

configure_logging(settings.log_level, settings.log_format)

from worktrack.api.access import reload_configured_matrix, router as access_router  # noqa: E402
from worktrack.api.metrics import router as metrics_router  # noqa: E402
from worktrack.api.residency import router as residency_router  # noqa: E402
from worktrack.auth.engine import get_default_engine  # noqa: E402

logger = logging.getLogger("worktrack")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: an invalid snapshot aborts startup instead of serving a partial matrix
    if reload_configured_matrix(get_default_engine()):
        logger.info("Access matrix snapshot installed from %s", settings.access_matrix_path)
    else:
        logger.info("Using built-in access matrix")
    yield


app = FastAPI(
    title="WorkTrack Access Service",
    description="Role-based authorization for projects, staff, attendance and residency tracking",
    version="0.1.0",
    lifespan=lifespan,
)

# ── CORS ─────────────────────────────────────────────────────────────────────
origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
)

# ── Security headers middleware ──────────────────────────────────────────────
from worktrack.middleware.security_headers import SecurityHeadersMiddleware  # noqa: E402

app.add_middleware(SecurityHeadersMiddleware)

# ── Request context middleware (request ID + timing) ─────────────────────────
from worktrack.middleware.request_context import RequestContextMiddleware  # noqa: E402

app.add_middleware(RequestContextMiddleware)

# ── Prometheus metrics middleware ────────────────────────────────────────────
from worktrack.middleware.metrics import PrometheusMiddleware  # noqa: E402

app.add_middleware(PrometheusMiddleware)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return detailed error info in development mode so 500s are debuggable."""
    tb = traceback.format_exc()
    logger.error(
        "Unhandled %s on %s %s: %s\n%s",
        type(exc).__name__, request.method, request.url.path, exc, tb,
    )
    if settings.environment == "development":
        return JSONResponse(
            status_code=500,
            content={"detail": f"{type(exc).__name__}: {exc}", "traceback": tb.splitlines()[-5:]},
        )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


app.include_router(access_router)
app.include_router(residency_router)
app.include_router(metrics_router)


@app.get("/api/health")
async def health_check():
    engine = get_default_engine()
    return {
        "status": "healthy",
        "environment": settings.environment,
        "components": {
            "access_matrix": {
                "status": "loaded",
                "source": settings.access_matrix_path or "built-in",
                "roles": len(engine.matrix.as_dict()),
            },
        },
    }
