# backend/remitos/main.py
import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.api import UTF8JSONResponse, fail, ok
from .core.config import ALLOWED_ORIGINS, LOG_LEVEL, PDF_DIR
from .core.deps import get_store
from .core.errors import DomainError

# --- Routers ---
from .routers.branches import router as branches_router
from .routers.notes import router as notes_router
from .routers.orders import router as orders_router
from .routers.products import router as products_router
from .routers.public import router as public_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Remitos", default_response_class=UTF8JSONResponse)


# JSON Content-Type charset for responses not built through ok()/fail()
@app.middleware("http")
async def _force_json_charset(request, call_next):
    resp = await call_next(request)
    ct = resp.headers.get("content-type", "")
    if ct.lower().startswith("application/json") and "charset=" not in ct.lower():
        resp.headers["content-type"] = "application/json; charset=utf-8"
    return resp


# -----------------------------
# Global error envelope
# -----------------------------
@app.exception_handler(DomainError)
async def domain_error_to_envelope(request: Request, exc: DomainError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.detail, exc.reason)
    return fail(str(exc.detail), status_code=exc.status_code, meta={"reason": exc.reason})


@app.exception_handler(StarletteHTTPException)
async def http_exception_to_envelope(request: Request, exc: StarletteHTTPException):
    return fail(str(exc.detail) if exc.detail else exc.__class__.__name__, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_to_envelope(request: Request, exc: RequestValidationError):
    return fail("Validation error", status_code=422, meta={"reason": "validation_error", "errors": exc.errors()})


# -----------------------------
# CORS (.env)
# -----------------------------
logger.info("CORS allow_origins = %s", ALLOWED_ORIGINS)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---- startup: load the store before the first request ----
@app.on_event("startup")
def _open_store():
    # honour test overrides so startup never touches the real storage
    provider = app.dependency_overrides.get(get_store, get_store)
    store = provider()
    logger.info(
        "store ready: %d branches, %d products, %d notes",
        len(store.branches), len(store.catalog), len(store.notes),
    )


# ---- Health ----
@app.get("/health")
def health():
    return ok({"service": "remitos"})


# ---- Generated documents ----
os.makedirs(PDF_DIR, exist_ok=True)
app.mount("/pdf", StaticFiles(directory=PDF_DIR), name="pdf")

# =========================
# Router registration
# =========================
app.include_router(branches_router)
app.include_router(products_router)
app.include_router(notes_router)
app.include_router(public_router)
app.include_router(orders_router)
