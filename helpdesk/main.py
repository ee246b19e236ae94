# helpdesk/main.py
import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

# SlowAPI (Rate Limiting)
from slowapi.errors import RateLimitExceeded

from . import __version__
from .core.bootstrap import bootstrap_system
from .core.config import PROJECT_ROOT, settings
from .core.exceptions import HelpdeskError
from .core.limiter import limiter
from .core.templates import templates

# FastAPI Users imports
from .core.users import (
    ACCESS_TOKEN_COOKIE_NAME,
    auth_backend_cookie,
    auth_backend_jwt,
    fastapi_users,
)
from .schemas.user import UserCreate, UserRead

# Importaciones de API Routers
from .views import router as views_router
from .api.auth import main as auth_main_api
from .api.health import main as health_main_api
from .api.portal import main as portal_main_api
from .api.tickets import main as tickets_main_api
from .api.uploads import main as uploads_main_api
from .api.users import main as users_main_api

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Helpdesk", version=__version__)


# --- Database Initialization ---
@app.on_event("startup")
async def on_startup():
    """Initialize database tables (and the first admin) on application startup"""
    await bootstrap_system()
    logger.info("Database tables initialized")


# --- Configuración de SlowAPI ---
app.state.limiter = limiter


async def custom_rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        content={"detail": f"Rate limit exceeded: {exc.detail}"}, status_code=429
    )


app.add_exception_handler(RateLimitExceeded, custom_rate_limit_handler)


# ============================================================================
# --- SEGURIDAD: CONFIGURACIÓN CORS ESTRICTA ---
# ============================================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# --- SEGURIDAD: TRUSTED HOSTS ---
# ============================================================================
app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.hosts)


# ============================================================================
# --- SEGURIDAD: CABECERAS DE SEGURIDAD HTTP ---
# ============================================================================
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# --- Configuración de Directorios ---
static_dir = os.path.join(PROJECT_ROOT, "static")

os.makedirs(settings.upload_dir, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")
app.mount("/static", StaticFiles(directory=static_dir), name="static")


# ============================================================================
# --- GLOBAL EXCEPTION HANDLERS ---
# ============================================================================
@app.exception_handler(HelpdeskError)
async def helpdesk_exception_handler(request: Request, exc: HelpdeskError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    is_page = not request.url.path.startswith(("/api/", "/auth/"))
    # Redirect to login for 401 on pages (not API)
    if exc.status_code == 401 and is_page:
        response = RedirectResponse(url="/login", status_code=status.HTTP_303_SEE_OTHER)
        response.delete_cookie(ACCESS_TOKEN_COOKIE_NAME)
        return response
    if exc.status_code == 403 and is_page:
        return templates.TemplateResponse(request, "403.html", status_code=403)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


# ============================================================================
# --- ROUTERS INCLUSION ---
# ============================================================================

# 1. Pages
app.include_router(views_router)

# 2. FastAPI Users Routers
app.include_router(
    fastapi_users.get_auth_router(auth_backend_jwt),
    prefix="/auth/jwt",
    tags=["Auth - JWT"],
)
app.include_router(
    fastapi_users.get_auth_router(auth_backend_cookie),
    prefix="/auth/cookie",
    tags=["Auth - Cookie"],
)
app.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/auth",
    tags=["Auth - Registration"],
)

# 3. Domain API Routers
app.include_router(auth_main_api.router, prefix="/api", tags=["Auth"])
app.include_router(tickets_main_api.router, prefix="/api", tags=["Tickets"])
app.include_router(portal_main_api.router, prefix="/api", tags=["Portal"])
app.include_router(users_main_api.router, prefix="/api", tags=["Users"])
app.include_router(uploads_main_api.router, prefix="/api", tags=["Uploads"])
app.include_router(health_main_api.router, prefix="/api", tags=["Health"])
