"""Application configuration loaded from environment variables."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, model_validator

load_dotenv()

_PROJECT_ROOT = Path(__file__).resolve().parent

_DEFAULT_SECRET_KEY = "change-me-in-production"  # noqa: S105
_KNOWN_LABEL_SIZES = ("label-small", "label-medium", "label-large")

logger = logging.getLogger(__name__)


class Config(BaseModel):
    """Centralised app configuration backed by env vars."""

    # Code generation
    random_code_max_attempts: int = 1000
    product_type_code_max_attempts: int = 100
    value_code_mappings_path: str = ""

    # Labels
    label_output_dir: str = str(_PROJECT_ROOT / "data" / "labels")
    label_size: str = "label-medium"

    # Flask
    flask_host: str = "127.0.0.1"
    flask_port: int = 5000
    flask_debug: bool = True
    flask_secret_key: str = _DEFAULT_SECRET_KEY
    cors_origins: list[str] = ["http://localhost:3000"]

    @model_validator(mode="after")
    def _warn_suspicious_fields(self) -> Config:
        """Log warnings for settings that are probably mistakes."""
        if self.label_size not in _KNOWN_LABEL_SIZES:
            logger.warning("LABEL_SIZE %r is not a known label size", self.label_size)
        if not self.flask_debug and self.flask_secret_key == _DEFAULT_SECRET_KEY:
            logger.warning("FLASK_SECRET_KEY is the default value with debug disabled")
        return self

    @classmethod
    def from_env(cls) -> Config:
        """Build config from environment variables."""
        cors_raw = os.getenv("CORS_ORIGINS", "http://localhost:3000")
        cors_origins = [o.strip() for o in cors_raw.split(",") if o.strip()]

        return cls(
            random_code_max_attempts=int(os.getenv("RANDOM_CODE_MAX_ATTEMPTS", "1000")),
            product_type_code_max_attempts=int(
                os.getenv("PRODUCT_TYPE_CODE_MAX_ATTEMPTS", "100")
            ),
            value_code_mappings_path=os.getenv("VALUE_CODE_MAPPINGS_PATH", ""),
            label_output_dir=os.getenv("LABEL_OUTPUT_DIR", str(_PROJECT_ROOT / "data" / "labels")),
            label_size=os.getenv("LABEL_SIZE", "label-medium"),
            flask_host=os.getenv("FLASK_HOST", "127.0.0.1"),
            flask_port=int(os.getenv("FLASK_PORT", "5000")),
            flask_debug=os.getenv("FLASK_DEBUG", "true").lower() in ("1", "true", "yes"),
            flask_secret_key=os.getenv("FLASK_SECRET_KEY", _DEFAULT_SECRET_KEY),
            cors_origins=cors_origins,
        )


settings = Config.from_env()
