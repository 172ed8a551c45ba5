"""NetServa domain sync — Synergy Wholesale domain cache, reconciler and CLI."""

__version__ = "0.1.0"
