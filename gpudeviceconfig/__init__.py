"""Configuration model, parsing and validation for a Kubernetes GPU device plugin."""

__version__ = "0.14.1"