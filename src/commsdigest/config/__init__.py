"""Configuration for commsdigest."""

from commsdigest.config.settings import ConfigurationError, Settings, load_settings

__all__ = ["ConfigurationError", "Settings", "load_settings"]
