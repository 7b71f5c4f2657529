"""
Utility modules for the relay API
"""
from .settings import RelaySettings, load_settings

__all__ = [
    'RelaySettings',
    'load_settings',
]
