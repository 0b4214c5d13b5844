"""
Application settings loaded from environment variables.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── Server ───────────────────────────────────────────────────────────
    port: int = 3000
    host: str = "0.0.0.0"
    debug: bool = False
    frontend_url: str = "http://localhost:5173"   # only origin allowed by CORS

    # ── Security Secrets ──────────────────────────────────────────────────
    jwt_secret: str = "change-me-jwt-secret-key"       # HMAC secret for auth tokens
    jwt_expiry_seconds: int = 604800                    # 7 days
    bcrypt_rounds: int = 12

    # ── Database ─────────────────────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./authflow.db"

    # ── Client ───────────────────────────────────────────────────────────
    backend_url: str = "http://localhost:3000"
    token_store_path: str = "~/.authflow/storage.json"
    request_timeout: float = 10.0

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


config = Settings()
