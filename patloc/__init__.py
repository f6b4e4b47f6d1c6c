"""First filing identification and imputation of inventor locations and country codes."""

__version__ = "0.1.0"
