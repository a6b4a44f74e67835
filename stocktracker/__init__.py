"""Stock tracking API: accounts, per-user watchlists and a quote proxy."""

__version__ = "1.0.0"
