"""Configuration package exports."""

from .loader import ConfigLocator, ConfigRepository
from .models import (
    BotConfig,
    BroadcastConfig,
    DeliveryConfig,
    RelayConfig,
    RetentionConfig,
    ScheduleConfig,
    SelectorConfig,
    SourceConfig,
    TranslatorConfig,
)

__all__ = [
    "BotConfig",
    "BroadcastConfig",
    "ConfigLocator",
    "ConfigRepository",
    "DeliveryConfig",
    "RelayConfig",
    "RetentionConfig",
    "ScheduleConfig",
    "SelectorConfig",
    "SourceConfig",
    "TranslatorConfig",
]
