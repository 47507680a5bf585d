"""toolbench: AI creative tools behind one authenticated HTTP API."""

__version__ = "0.1.0"
