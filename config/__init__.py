"""Configuration package for the ATM dashboard."""

from .settings import load_config, get_filter_defaults, get_log_level

__all__ = ['load_config', 'get_filter_defaults', 'get_log_level']
