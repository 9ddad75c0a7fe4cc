"""Personality configuration loader."""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml


_DEFAULT_PATH = Path(__file__).parent / "default.yaml"


@dataclass(frozen=True)
class Persona:
    """Texts the conversation engine speaks with."""

    name: str
    system_prompt: str
    welcome: str
    credential_missing_reply: str


def load_personality(path: Path | None = None) -> dict[str, Any]:
    """Load personality configuration from YAML file.

    Args:
        path: Optional path to personality YAML file.
              Defaults to default.yaml in this directory.

    Returns:
        Dictionary with personality configuration.

    Raises:
        FileNotFoundError: If the personality file does not exist.
        yaml.YAMLError: If the file contains invalid YAML.
    """
    config_path = path or _DEFAULT_PATH

    if not config_path.exists():
        raise FileNotFoundError(f"Personality file not found: {config_path}")

    with open(config_path, encoding="utf-8") as f:
        config: dict[str, Any] = yaml.safe_load(f) or {}

    return config


def build_persona(personality: dict[str, Any]) -> Persona:
    """Fill in defaults for any keys the personality file leaves out."""
    name = personality.get("name", "Assistant")
    return Persona(
        name=name,
        system_prompt=personality.get(
            "system_prompt", f"You are {name}, a helpful AI assistant."
        ).strip(),
        welcome=personality.get("welcome", f"Hello! I'm {name}. How can I help?").strip(),
        credential_missing_reply=personality.get(
            "credential_missing_reply",
            "I can't connect to the AI service. Please configure your API key in Settings.",
        ).strip(),
    )


@lru_cache(maxsize=1)
def get_default_persona() -> Persona:
    """Persona from the bundled default.yaml, loaded once."""
    return build_persona(load_personality())
