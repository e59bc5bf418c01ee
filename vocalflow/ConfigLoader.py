"""Configuration loading: JSON file merged over built-in defaults."""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "transcription": {
        "language": "en-US",
        "temperature": 0.0,
        "custom_prompt": None,
        "fast_max_audio_ms": 10000,
    },
    "deepgram": {
        "model": "nova-3",
        "url": "https://api.deepgram.com/v1/listen",
        "timeout_s": 30.0,
    },
    "openai": {
        "model": "whisper-1",
        "url": "https://api.openai.com/v1/audio/transcriptions",
        "timeout_s": 60.0,
    },
    "focus": {
        "enabled": True,
        "fast_timeout_s": 0.9,
        "detailed_timeout_s": 1.5,
    },
    "analytics": {
        "typing_cpm": 200.0,
        "thinking_multiplier": 1.3,
        "editing_multiplier": 1.2,
        "workflow_base_overhead_ms": 90000.0,
        "workflow_ms_per_character": 10.0,
        "workflow_complexity_cap_ms": 120000.0,
        "chars_per_page": 2000,
        "max_events": 500,
    },
    "startup": {
        "deferred_delay_ms": 100,
    },
    "push_to_talk": {
        "min_audio_ms": 150,
        "sound_cues": True,
    },
}

API_KEY_ENV = {
    "deepgram": "DEEPGRAM_API_KEY",
    "openai": "OPENAI_API_KEY",
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Path]) -> Dict[str, Any]:
    """Load configuration from a JSON file.

    Args:
        config_path: Path to vocalflow_config.json; None uses the defaults

    Returns:
        Configuration dictionary with every default section present

    Raises:
        ValueError: the file exists but is not a JSON object
    """
    if config_path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    path = Path(config_path)
    if not path.exists():
        logger.warning("Config file not found: %s, using defaults", path)
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(path, 'r', encoding='utf-8') as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a JSON object")

    return _deep_merge(DEFAULT_CONFIG, raw)


def get_api_key(provider: str) -> Optional[str]:
    """API key for a provider from the environment, None when unset."""
    value = os.environ.get(API_KEY_ENV[provider], "").strip()
    return value or None


def mask_key(key: str) -> str:
    if len(key) <= 14:
        return "***"
    return f"{key[:10]}...{key[-4:]}"
