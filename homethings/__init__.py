"""Home automation tools exposing household devices as Web of Things devices."""

__version__ = "0.1.0"