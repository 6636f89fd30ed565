"""
SAATHI Configuration Module

Provides centralized configuration management with:
- Environment-based settings loading
- Validation of tunable thresholds and caps
- Packaged default data files (lexicon, contact directory)
"""

from saathi.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
