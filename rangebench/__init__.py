"""rangebench: latency benchmark harness for key-range query services."""

__version__ = "0.1.0"
