"""
config.py: Parser options and environment configuration.

ParserOptions is the explicit configuration value handed to create_parser().
Settings reads the same knobs from PPTXJSON_* environment variables for
hosts that configure the engine through the environment.
"""

import os
from functools import lru_cache
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class ParserOptions(BaseModel):
    """Options controlling a single decoding engine instance."""

    model_config = ConfigDict(frozen=True)

    include_notes: bool = Field(default=True, description="Decode speaker notes into slide remarks")
    include_hidden_slides: bool = Field(default=False, description="Keep slides marked show=\"0\"")
    extract_media: bool = Field(default=True, description="Embed images as base64 data URLs")
    image_workers: int = Field(default=3, ge=1, le=16, description="Concurrency bound for batch image extraction")
    precision: int = Field(default=2, ge=0, le=6, description="Decimal digits kept on point values")
    default_font: str = Field(default="Microsoft Yahei", description="Font used when the theme declares none")
    debug: bool = Field(default=False, description="Route diagnostics to the pptxjson.debug logger")


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Engine settings loaded from environment variables."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        env = os.environ if environ is None else environ

        # Content
        self.include_notes: bool = _env_bool(env.get("PPTXJSON_INCLUDE_NOTES", "true"))
        self.include_hidden_slides: bool = _env_bool(env.get("PPTXJSON_INCLUDE_HIDDEN_SLIDES", "false"))

        # Media
        self.extract_media: bool = _env_bool(env.get("PPTXJSON_EXTRACT_MEDIA", "true"))
        self.image_workers: int = int(env.get("PPTXJSON_IMAGE_WORKERS", "3"))

        # Output
        self.precision: int = int(env.get("PPTXJSON_PRECISION", "2"))
        self.default_font: str = env.get("PPTXJSON_DEFAULT_FONT", "Microsoft Yahei")

        # Diagnostics
        self.debug: bool = _env_bool(env.get("PPTXJSON_DEBUG", "false"))

    def to_options(self) -> ParserOptions:
        """Build the ParserOptions value these settings describe."""
        return ParserOptions(
            include_notes=self.include_notes,
            include_hidden_slides=self.include_hidden_slides,
            extract_media=self.extract_media,
            image_workers=self.image_workers,
            precision=self.precision,
            default_font=self.default_font,
            debug=self.debug,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
