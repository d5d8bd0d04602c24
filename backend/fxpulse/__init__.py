"""FX Pulse: forex market data aggregation and caching service."""
