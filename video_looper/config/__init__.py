"""
Configuration package.
"""

from .looper_config import LooperSettings, load_settings

__all__ = ["LooperSettings", "load_settings"]
