"""Configuration and naming helpers."""

from .config import GateConfig
from .naming import username_label_token

__all__ = ["GateConfig", "username_label_token"]
