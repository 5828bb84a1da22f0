"""
Configuration Loader.

This module initializes the global configuration object (`config`) used
throughout the library. It leverages `yacs` to provide a hierarchical,
dot-accessible configuration structure defined in `belaykit.core_config`.

Usage:
    from belaykit.config import config
    print(config.ENGINES.CODEX_EXECUTABLE)
"""

import logging
import os

from belaykit.core_config import get_cfg_defaults

logger = logging.getLogger(__name__)

# Load default configuration
config = get_cfg_defaults()

# Optional YAML overrides, e.g. a checked-in belaykit.yaml
_user_config_path = os.environ.get("BELAYKIT_CONFIG_FILE")
if _user_config_path:
    if os.path.exists(_user_config_path):
        config.merge_from_file(_user_config_path)
    else:
        logger.warning("BELAYKIT_CONFIG_FILE points to a missing file: %s", _user_config_path)

# Freeze config to prevent accidental changes during runtime.
config.freeze()
