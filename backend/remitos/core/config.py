# backend/remitos/core/config.py
import os
import json
from dotenv import dotenv_values, load_dotenv, find_dotenv

# Project root (backend/) and .env path
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
DEFAULT_DOTENV = os.path.join(BASE_DIR, ".env")


def _norm_key(k: str) -> str:
    return k.replace("\ufeff", "").strip() if isinstance(k, str) else k


# Load .env without overriding variables already set (CI, container)
dotenv_path = DEFAULT_DOTENV if os.path.exists(DEFAULT_DOTENV) else find_dotenv(filename=".env", usecwd=True)
if dotenv_path:
    cfg = dotenv_values(dotenv_path, encoding="utf-8-sig")
    for k, v in cfg.items():
        nk = _norm_key(k)
        if v is not None and (nk not in os.environ or not os.environ[nk].strip()):
            os.environ[nk] = v
    load_dotenv(dotenv_path, override=False)


def _env(name: str, default: str) -> str:
    val = os.environ.get(name)
    return val.strip() if val and val.strip() else default


STORAGE_DIR = _env("STORAGE_DIR", BASE_DIR)
STORAGE_BACKEND = _env("STORAGE_BACKEND", "sql").lower()  # "sql" | "json"
DATABASE_URL = _env("DATABASE_URL", "sqlite:///" + os.path.join(STORAGE_DIR, "remitos.db"))
DATA_FILE = _env("DATA_FILE", os.path.join(STORAGE_DIR, "data.json"))
PDF_DIR = _env("PDF_DIR", os.path.join(STORAGE_DIR, "pdf"))
PUBLIC_BASE_URL = _env("PUBLIC_BASE_URL", "")  # empty: use the request base URL
LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()


def parse_origins(env_val: str | None) -> list[str]:
    """CORS_ALLOW_ORIGINS: "*", a JSON list, or a comma separated list."""
    if not env_val or env_val.strip() == "*":
        return ["*"]
    try:
        parsed = json.loads(env_val)
        if isinstance(parsed, list):
            return [str(x) for x in parsed]
    except ValueError:
        pass
    return [s.strip() for s in env_val.split(",") if s.strip()]


ALLOWED_ORIGINS = parse_origins(os.getenv("CORS_ALLOW_ORIGINS", "*"))
