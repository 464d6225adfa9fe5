# src/cachet_gating/core/__init__.py
# Core modules for cachet-gating.
"""
Core functionality for cachet-gating:
- config: Configuration management
"""

from cachet_gating.core.config import GatingConfig, clear_config_cache, load_config

__all__ = ["GatingConfig", "clear_config_cache", "load_config"]
