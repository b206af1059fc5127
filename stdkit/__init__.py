"""Building blocks for services: futures, sets, weighted random choice, in-process metrics and logger configuration."""

__version__ = "0.1.0"