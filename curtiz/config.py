"""
Configuration settings for curtiz.

Uses Pydantic Settings for environment variable management with .env file support.
Every marker, separator and scheduling constant lives here so that each
component can be handed an explicit config (tests build their own).
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MarkupConfig(BaseModel):
    """Markers and separators of the annotated Markdown format."""

    lozenge: str = "◊"
    sentence_marker: str = "◊sent"
    field_separator: str = "::"

    # Bullets
    cloze_marker: str = "◊cloze"
    acceptable_separator: str = "//"
    related_marker: str = "◊related"
    related_suggestion_marker: str = "◊related??"
    please_parse_marker: str = "◊pleaseParse"

    # Recall-model annotations: `- ◊Ebisu1 NAME ISO; a, b, t`
    annotation_marker: str = "◊Ebisu1"
    annotation_date_separator: str = ";"
    annotation_field_separator: str = ","
    reading_model_name: str = "reading"
    attached_model_name: str = "_"

    # Indentation used for a model line nested under its quiz bullet
    nested_indent: str = "  "


class SchedulerConfig(BaseModel):
    """Constants of the recall model and quiz selection."""

    default_half_life_hours: float = Field(default=0.25, gt=0)
    default_confidence: float = Field(
        default=3.0,
        gt=0,
        description="Alpha and beta of a freshly learned model",
    )
    jitter_ms: int = Field(
        default=750,
        ge=0,
        description="Upper bound of the random offset given to sibling models at creation",
    )
    band_thresholds: tuple[float, ...] = (0.001, 0.01, 0.1, 0.2, 0.3, 0.4, 0.5)
    min_quizzes_for_band: int = Field(
        default=6,
        description="Below this many modeled quizzes selection is a plain arg-min",
    )


class SegmenterConfig(BaseModel):
    """External morphological analysis / clause segmentation programs."""

    mecab_command: list[str] = Field(default_factory=lambda: ["mecab"])
    jdepp_command: list[str] = Field(default_factory=lambda: ["jdepp"])
    encoding: str = "utf-8"


class CurtizConfig(BaseSettings):
    """
    Main configuration for curtiz.

    Configuration precedence:
    1. Environment variables (CURTIZ_*, nested with __)
    2. .env file
    3. Defaults
    """

    model_config = SettingsConfigDict(
        env_prefix="CURTIZ_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    markup: MarkupConfig = Field(default_factory=MarkupConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    segmenter: SegmenterConfig = Field(default_factory=SegmenterConfig)

    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> CurtizConfig:
    """Get cached settings instance."""
    return CurtizConfig()
