"""Application settings and validation."""

import os

from dotenv import load_dotenv

load_dotenv()

_DEFAULT_ACCESS_SECRET = "change_me_access_secret"
_DEFAULT_REFRESH_SECRET = "change_me_refresh_secret"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


class Settings:
    ENV: str
    DATABASE_URL: str
    DATABASE_NAME: str
    ACCESS_TOKEN_SECRET: str
    ACCESS_TOKEN_EXPIRY_MINUTES: int
    REFRESH_TOKEN_SECRET: str
    REFRESH_TOKEN_EXPIRY_DAYS: int
    COOKIE_SECURE: bool
    CORS_ORIGINS: list
    BCRYPT_ROUNDS: int
    LOG_LEVEL: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", "")
        self.DATABASE_NAME = os.getenv("DATABASE_NAME", "")
        self.ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", _DEFAULT_ACCESS_SECRET)
        self.ACCESS_TOKEN_EXPIRY_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRY_MINUTES", "1440"))
        self.REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", _DEFAULT_REFRESH_SECRET)
        self.REFRESH_TOKEN_EXPIRY_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRY_DAYS", "10"))
        self.COOKIE_SECURE = _env_bool("COOKIE_SECURE", "true")
        self.CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
        self.BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    def _validate(self):
        if self.ENV != "dev":
            if self.ACCESS_TOKEN_SECRET == _DEFAULT_ACCESS_SECRET or self.REFRESH_TOKEN_SECRET == _DEFAULT_REFRESH_SECRET:
                raise RuntimeError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must be set in non-dev environments")
        if self.ACCESS_TOKEN_SECRET == self.REFRESH_TOKEN_SECRET:
            raise RuntimeError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")
        if not 4 <= self.BCRYPT_ROUNDS <= 31:
            raise RuntimeError("BCRYPT_ROUNDS must be between 4 and 31")


settings = Settings()
