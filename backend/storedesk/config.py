# backend/storedesk/config.py
from __future__ import annotations
import os


def _csv(value: str) -> set[str]:
    return {v.strip() for v in value.split(",") if v.strip()}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/storedesk.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///storedesk.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Order form defaults (the operator may override both per order)
    DEFAULT_TAX_RATE = os.environ.get("STOREDESK_DEFAULT_TAX_RATE", "0.10")
    DEFAULT_SHIPPING_AMOUNT = os.environ.get("STOREDESK_DEFAULT_SHIPPING", "10")

    DEFAULT_PAGE_SIZE = int(os.environ.get("STOREDESK_PAGE_SIZE", "10"))
    MAX_PAGE_SIZE = 100

    LOG_LEVEL = os.environ.get("STOREDESK_LOG_LEVEL", "INFO")

    CORS_ORIGINS = _csv(os.environ.get(
        "STOREDESK_CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:4173,http://127.0.0.1:4173",
    ))
