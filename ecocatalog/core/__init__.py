"""
Core Module

Configuration, logging and error handling shared by the catalog modules
"""

from .config import Config, get_config
from .logger import Logger, get_logger

__all__ = ["Config", "Logger", "get_config", "get_logger"]
