from __future__ import annotations

import os
from pathlib import Path
from typing import List


class Settings:
    """Centralized configuration for the GastroHealth API and client."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        # ---- Backing API (auth/profile/symptoms) ----
        self.data_root: Path = Path(
            os.environ.get("GASTRO_DATA_ROOT") or data_root_default
        ).expanduser()
        self.app_db_path: Path = Path(
            os.environ.get("GASTRO_DB_PATH") or (self.data_root / "gastrohealth.db")
        ).expanduser()
        # In production you MUST set GASTRO_JWT_SECRET. The dev secret keeps local
        # demos easy, but it is not safe for public deployments.
        self.jwt_secret: str = os.environ.get("GASTRO_JWT_SECRET") or "dev-secret-change-me"
        self.token_ttl_days: int = int(os.environ.get("GASTRO_TOKEN_TTL_DAYS") or "7")
        self.max_image_bytes: int = int(os.environ.get("GASTRO_MAX_IMAGE_BYTES") or "4000000")
        self.host: str = os.environ.get("GASTRO_HOST") or "127.0.0.1"
        self.port: int = int(os.environ.get("GASTRO_PORT") or "8000")

        # ---- Gemini proxy ----
        self.gemini_base_url: str = os.environ.get(
            "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        )
        self.gemini_model: str = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
        self.gemini_timeout: float = float(os.environ.get("GEMINI_TIMEOUT", "60"))
        self.gemini_temperature: float = float(os.environ.get("GEMINI_TEMPERATURE", "0.4"))

        # ---- Client ----
        self.api_base_url: str = os.environ.get(
            "GASTRO_API_BASE_URL", "https://gastroai-backend.onrender.com"
        )
        self.token_path: Path = Path(
            os.environ.get("GASTRO_TOKEN_PATH") or (Path.home() / ".gastrohealth" / "token")
        ).expanduser()

        cors = os.environ.get("GASTRO_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
