"""Pydantic models describing the relay configuration file."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
)


class SelectorConfig(BaseModel):
    """CSS selectors used to lift items off the listing page."""

    container: str = ".post-item"
    title: str = ".post-title a"
    image: str = ".feature-image img"
    summary: str = ".post-summary"


class SourceConfig(BaseModel):
    """Where and how to fetch the listing page."""

    url: str = "https://hackernews.betacat.io/"
    selectors: SelectorConfig = Field(default_factory=SelectorConfig)
    require_link: bool = True
    timeout: float = 20.0
    retry_on_fail: int = 1
    retry_delay: float = 2.0
    user_agent: str = DEFAULT_USER_AGENT

    @model_validator(mode="after")
    def _validate_source(self) -> "SourceConfig":
        if not self.url:
            raise ValueError("source.url cannot be empty")
        if self.timeout <= 0:
            raise ValueError("source.timeout must be > 0")
        if self.retry_on_fail < 0:
            raise ValueError("source.retry_on_fail must be >= 0")
        if self.retry_delay < 0:
            raise ValueError("source.retry_delay must be >= 0")
        return self


class TranslatorConfig(BaseModel):
    """OpenAI-compatible endpoint used for Persian translation."""

    api_key: str = ""
    base_url: str = "https://api.metisai.ir/openai/v1"
    model: str = "gpt-4o-mini"
    prompt: str = "Translate the following text to Persian:\n{text}"
    timeout: float = 30.0

    @field_validator("prompt")
    @classmethod
    def _prompt_has_placeholder(cls, value: str) -> str:
        if "{text}" not in value:
            raise ValueError("translator.prompt must contain a {text} placeholder")
        return value


class BotConfig(BaseModel):
    """Credentials for a Bot-API compatible transport."""

    token: str = ""
    api_base: str = "https://tapi.bale.ai"
    timeout: float = 20.0


class BroadcastConfig(BotConfig):
    """Transport plus channel used for broadcast delivery."""

    api_base: str = "https://api.telegram.org"
    channel_id: str = ""


class DeliveryConfig(BaseModel):
    parse_mode: Literal["HTML", "Markdown", "MarkdownV2", ""] = "HTML"
    photo_fallback_to_text: bool = True
    disable_web_page_preview: bool = False


class ScheduleConfig(BaseModel):
    """Recurring pass interval."""

    interval_seconds: float = 300.0

    @field_validator("interval_seconds")
    @classmethod
    def _positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("schedule.interval_seconds must be > 0")
        return value


class RetentionConfig(BaseModel):
    """Dedup store location and retention bound."""

    max_count: int = 1000
    store_path: Path = Field(default=Path("data/articles.db"))

    @field_validator("store_path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    @field_validator("max_count")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("retention.max_count must be >= 1")
        return value

    def resolved_store_path(self, base_dir: Path) -> Path:
        if not self.store_path.is_absolute():
            return (base_dir / self.store_path).resolve()
        return self.store_path


class RelayConfig(BaseModel):
    """Root configuration document."""

    source: SourceConfig = Field(default_factory=SourceConfig)
    translator: TranslatorConfig = Field(default_factory=TranslatorConfig)
    primary_bot: BotConfig = Field(default_factory=BotConfig)
    broadcast_bot: BroadcastConfig = Field(default_factory=BroadcastConfig)
    delivery: DeliveryConfig = Field(default_factory=DeliveryConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    retention: RetentionConfig = Field(default_factory=RetentionConfig)
    recipients: list[str] = Field(default_factory=list)

    @field_validator("recipients", mode="before")
    @classmethod
    def _coerce_recipients(cls, value: Any) -> list[str]:
        if value in (None, ""):
            return []
        if isinstance(value, (str, int)):
            value = [value]
        return [str(item).strip() for item in value if str(item).strip()]


__all__ = [
    "BotConfig",
    "BroadcastConfig",
    "DeliveryConfig",
    "RelayConfig",
    "RetentionConfig",
    "ScheduleConfig",
    "SelectorConfig",
    "SourceConfig",
    "TranslatorConfig",
]
