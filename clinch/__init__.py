"""clinch — a local registry for deployed smart contracts."""

__version__ = "1.0.0"
