"""Configuration module for the APIUS session gateway."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
