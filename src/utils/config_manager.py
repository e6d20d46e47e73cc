"""
Settings Persistence
====================

Manages the JSON settings file that keeps provider keys, generation
constraints and the optional relay URL between runs. The engine itself never
reads this file; callers load it here and pass plain values (a
``CredentialSet`` and ``GenerationConstraints``) into each resolve call.

Key Responsibilities:
---------------------
- File-System Persistence: hidden JSON file in the user's home directory
  (``~/.seo_vision_config.json``).
- Mapping: converts the stored constraint fields (including the on/off toggles
  for prefix, suffix and exclusion lists) into ``GenerationConstraints``.
- Credential Merge: file keys first, then keys from environment variables.
- Security Logging: load/save events are logged with keys masked.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from src.core import config
from src.core.credentials import CredentialSet
from src.core.models import GenerationConstraints
from src.utils.logger import log_config

CONFIG_PATH = Path.home() / ".seo_vision_config.json"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "keys": {provider: "" for provider in config.ALL_PROVIDERS},
    "constraints": {
        "maxTitleChars": config.DEFAULT_MAX_TITLE_CHARS,
        "maxDescChars": config.DEFAULT_MAX_DESC_CHARS,
        "keywordCount": config.DEFAULT_KEYWORD_COUNT,
        "imageType": config.DEFAULT_IMAGE_KIND,
        "selectedPlatform": config.DEFAULT_PLATFORM,
        "prefix": "",
        "prefixEnabled": False,
        "suffix": "",
        "suffixEnabled": False,
        "negWordsTitle": "",
        "negWordsTitleEnabled": False,
        "negKeywords": "",
        "negKeywordsEnabled": False,
    },
    "relay_url": "",
}


def default_settings() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_SETTINGS)


def save_settings(settings: Dict[str, Any], path: Optional[Path] = None) -> bool:
    """
    Persist settings to the JSON file.

    Args:
        settings: Settings dictionary (same layout as DEFAULT_SETTINGS).
        path: Target file, defaults to CONFIG_PATH.

    Returns:
        bool: True if the file was written.
    """
    logger = logging.getLogger(__name__)
    path = Path(path) if path else CONFIG_PATH

    try:
        log_config("Saving Settings", settings, logger)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(settings, f, indent=2)
        logger.info(f"Settings saved successfully to {path}")
        return True
    except OSError as e:
        logger.error(f"Failed to save settings: {e}", exc_info=True)
        return False


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load settings, filling anything missing with defaults.

    A missing file yields the defaults. A corrupted file is logged and the
    defaults are returned; unknown keys in the file are ignored.
    """
    logger = logging.getLogger(__name__)
    path = Path(path) if path else CONFIG_PATH
    settings = default_settings()

    if not path.exists():
        logger.info(f"No existing settings file found at {path}")
        return settings

    try:
        logger.info(f"Loading settings from {path}")
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f"Settings file is corrupted: {e}", exc_info=True)
        return settings
    except OSError as e:
        logger.error(f"Failed to load settings: {e}", exc_info=True)
        return settings

    if not isinstance(data, dict):
        logger.error(f"Settings file {path} does not contain a JSON object")
        return settings

    log_config("Loaded Settings", data, logger)

    if isinstance(data.get("keys"), dict):
        for provider, value in data["keys"].items():
            if provider in settings["keys"]:
                settings["keys"][provider] = value
            else:
                logger.warning(f"Ignoring keys for unknown provider: {provider}")

    if isinstance(data.get("constraints"), dict):
        for k, v in data["constraints"].items():
            if k in settings["constraints"]:
                settings["constraints"][k] = v

    if isinstance(data.get("relay_url"), str):
        settings["relay_url"] = data["relay_url"].strip()

    logger.info("Settings loaded and applied successfully")
    return settings


def constraints_from_settings(settings: Mapping[str, Any]) -> GenerationConstraints:
    """
    Build GenerationConstraints from the stored constraint fields.

    Disabled toggles map to None / empty exclusion lists.

    Raises:
        ValueError: invalid limits, platform or image type.
    """
    c = {**DEFAULT_SETTINGS["constraints"], **settings.get("constraints", {})}
    return GenerationConstraints(
        platform=c["selectedPlatform"],
        max_title_length=int(c["maxTitleChars"]),
        max_description_length=int(c["maxDescChars"]),
        target_keyword_count=int(c["keywordCount"]),
        image_kind=c["imageType"],
        excluded_title_words=c["negWordsTitle"] if c["negWordsTitleEnabled"] else (),
        excluded_keywords=c["negKeywords"] if c["negKeywordsEnabled"] else (),
        title_prefix=c["prefix"] if c["prefixEnabled"] else None,
        title_suffix=c["suffix"] if c["suffixEnabled"] else None,
    )


def credentials_from_settings(
    settings: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> CredentialSet:
    """File keys first, then environment keys; duplicates removed."""
    file_keys = CredentialSet(settings.get("keys", {}))
    env_keys = CredentialSet.from_env(os.environ if environ is None else environ)
    return file_keys.merged(env_keys)
