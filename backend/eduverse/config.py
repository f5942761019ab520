"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent


class Settings:
    ENV: str
    DATABASE_URL: str
    JWT_SECRET: str
    JWT_ALGORITHM: str
    JWT_EXPIRE_HOURS: int
    ALLOW_INSECURE_JWT: bool
    ALLOW_DEV_CORS: bool
    PAGE_DEFAULT_LIMIT: int
    PAGE_MAX_LIMIT: int
    LOG_LEVEL: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'eduverse.db'}")
        self.JWT_SECRET = os.getenv("JWT_SECRET", "change_me_for_prod")
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.JWT_EXPIRE_HOURS = int(os.getenv("JWT_EXPIRE_HOURS", "24"))
        self.ALLOW_INSECURE_JWT = os.getenv("ALLOW_INSECURE_JWT", "false").lower() == "true"
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.PAGE_DEFAULT_LIMIT = int(os.getenv("PAGE_DEFAULT_LIMIT", "20"))
        self.PAGE_MAX_LIMIT = int(os.getenv("PAGE_MAX_LIMIT", "100"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    def _validate(self):
        if self.ENV != "dev" and not self.ALLOW_INSECURE_JWT and self.JWT_SECRET == "change_me_for_prod":
            raise RuntimeError("JWT_SECRET must be set to a non-default value in non-dev environments")
        if self.PAGE_MAX_LIMIT < 1:
            raise RuntimeError("PAGE_MAX_LIMIT must be >= 1")
        if not 1 <= self.PAGE_DEFAULT_LIMIT <= self.PAGE_MAX_LIMIT:
            raise RuntimeError("PAGE_DEFAULT_LIMIT must be between 1 and PAGE_MAX_LIMIT")


settings = Settings()
