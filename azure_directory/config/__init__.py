"""Configuration module for the directory client."""
from .settings import GraphSettings, load_settings

__all__ = ["GraphSettings", "load_settings"]
