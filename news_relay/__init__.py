"""news-relay: poll a news page, translate new items and relay them to bot destinations."""

__version__ = "0.1.0"
