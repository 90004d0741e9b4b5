"""Shared configuration for the tutor scoring package.

This module centralizes environment variable access and default values
to prevent drift between modules.
"""

import os

# Logging configuration
LOG_LEVEL = os.getenv("TUTORSCORE_LOG_LEVEL", "INFO")

# Optional YAML/JSON file with threshold and weight overrides
RULES_CONFIG_PATH = os.getenv("TUTORSCORE_RULES_CONFIG")
