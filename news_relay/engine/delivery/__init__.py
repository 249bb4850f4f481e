"""Delivery destinations and the fan-out sink."""

from .base import Destination
from .bot_api import BotApiClient, BotApiDestination
from .formatting import format_message
from .sink import DeliveryReport, DeliverySink, SinkFactory

__all__ = [
    "BotApiClient",
    "BotApiDestination",
    "DeliveryReport",
    "DeliverySink",
    "Destination",
    "SinkFactory",
    "format_message",
]
