"""
Runtime settings
Environment-based configuration for the SCORM runtime backend
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

DEFAULT_MAX_UPLOAD_SIZE = 200 * 1024 * 1024  # 200MB


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class Settings:
    data_dir: Path = Path("./data")
    max_upload_size: int = DEFAULT_MAX_UPLOAD_SIZE
    environment: str = "development"
    app_version: str = "1.0.0"
    cors_origins: List[str] = field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:3001"]
    )
    auto_migrate: bool = False

    @property
    def courses_dir(self) -> Path:
        return self.data_dir / "courses"


def get_settings() -> Settings:
    """Read settings from the environment.

    Used as a FastAPI dependency so tests can override it per app.
    """
    return Settings(
        data_dir=Path(os.getenv("DATA_DIR", "./data")),
        max_upload_size=int(os.getenv("MAX_UPLOAD_SIZE", DEFAULT_MAX_UPLOAD_SIZE)),
        environment=os.getenv("ENVIRONMENT", "development"),
        app_version=os.getenv("APP_VERSION", "1.0.0"),
        cors_origins=_split_origins(
            os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001")
        ),
        auto_migrate=os.getenv("AUTO_MIGRATE", "false").lower() in {"1", "true", "yes"},
    )
