"""
PeWalk Shared Module
====================

Configuration, structured logging and console utilities shared by the
PeWalk decoder, its presentation layer and its CLI.
"""

from shared.config import AppConfig, get_config

__all__ = ["AppConfig", "get_config"]
