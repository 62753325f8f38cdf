# backend/pshop/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored next to the process unless DATABASE_URL is set
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///pshop.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    # Shared invite code required by register and reset-password
    PSHOP_ADMIN_CODE = os.environ.get("PSHOP_ADMIN_CODE", "dev-admin-code-change-me")

    SESSION_TTL_HOURS = int(os.environ.get("SESSION_TTL_HOURS", "24"))
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Serialized photos array cap; request cap must stay above it
    MAX_PHOTOS_PAYLOAD_BYTES = 16 * 1024 * 1024
    MAX_CONTENT_LENGTH = 32 * 1024 * 1024
    MIN_PHOTO_LENGTH = 100

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
