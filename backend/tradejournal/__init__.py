"""Trade Journal core: trade records, analytics, persistence and auth state."""

__version__ = "1.0.0"
