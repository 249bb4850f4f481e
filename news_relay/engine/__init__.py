"""Engine components orchestrating fetch → dedup → enrich → deliver."""

from .dedup import DedupRecord, DedupStore
from .delivery import BotApiClient, BotApiDestination, DeliveryReport, DeliverySink, Destination
from .enricher import Enricher
from .fetcher import Fetcher, FetchResponse
from .item import Item
from .parser import Parser
from .source import ItemSource, NewsSource
from .translator import Translator

__all__ = [
    "BotApiClient",
    "BotApiDestination",
    "DedupRecord",
    "DedupStore",
    "DeliveryReport",
    "DeliverySink",
    "Destination",
    "Enricher",
    "FetchResponse",
    "Fetcher",
    "Item",
    "ItemSource",
    "NewsSource",
    "Parser",
    "Translator",
]
