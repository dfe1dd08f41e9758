"""Configuration module for the Bill.com connector."""
from .settings import ConnectorConfig, apply_overrides, load_settings, validate_config

__all__ = ["ConnectorConfig", "apply_overrides", "load_settings", "validate_config"]
