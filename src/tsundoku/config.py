"""Configuration management via .env file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

STORAGE_KEY = "tsundoku-books"


def _xdg_data_home() -> Path:
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


@dataclass
class DialogueProviderConfig:
    name: str
    api_key: str = ""
    base_url: str = ""
    model: str = ""


@dataclass
class AppConfig:
    # Paths
    data_dir: Path = field(default_factory=lambda: _xdg_data_home() / "tsundoku")
    config_dir: Path = field(default_factory=lambda: _xdg_config_home() / "tsundoku")
    db_path: Path = field(init=False)

    # Persistence
    storage_key: str = STORAGE_KEY

    # Dialogue generation
    dialogue_provider: str = "gemini"
    dialogue_timeout: float = 30.0
    providers: dict[str, DialogueProviderConfig] = field(default_factory=dict)

    # Bibliographic lookup
    lookup_base_url: str = "https://api.openbd.jp/v1"

    log_path: Path = field(init=False)

    def __post_init__(self) -> None:
        self.db_path = self.data_dir / "tsundoku.db"
        self.log_path = self.data_dir / "tsundoku.log"
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def get_active_provider(self) -> Optional[DialogueProviderConfig]:
        return self.providers.get(self.dialogue_provider)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_config(env_path: Optional[Path] = None) -> AppConfig:
    """Load config from .env file. Searches CWD then config dir."""
    search_paths = [
        env_path,
        Path.cwd() / ".env",
        _xdg_config_home() / "tsundoku" / ".env",
        Path.home() / ".env",
    ]
    for p in search_paths:
        if p and p.exists():
            load_dotenv(p)
            break

    defaults = AppConfig()
    config = AppConfig(
        dialogue_provider=os.getenv(
            "TSUNDOKU_DIALOGUE_PROVIDER", defaults.dialogue_provider
        ),
        dialogue_timeout=_env_float(
            "TSUNDOKU_DIALOGUE_TIMEOUT", defaults.dialogue_timeout
        ),
        lookup_base_url=os.getenv("TSUNDOKU_OPENBD_URL", defaults.lookup_base_url),
    )

    # All providers speak the OpenAI-compatible chat completions API
    provider_defs = {
        "gemini": (
            "GEMINI_API_KEY",
            "GEMINI_BASE_URL",
            "GEMINI_MODEL",
            "https://generativelanguage.googleapis.com/v1beta/openai",
            "gemini-2.0-flash",
        ),
        "openai": (
            "OPENAI_API_KEY",
            "OPENAI_BASE_URL",
            "OPENAI_MODEL",
            "https://api.openai.com/v1",
            "gpt-4o-mini",
        ),
        "claude": (
            "CLAUDE_API_KEY",
            "CLAUDE_BASE_URL",
            "CLAUDE_MODEL",
            "https://api.anthropic.com/v1",
            "claude-sonnet-4-20250514",
        ),
        "openrouter": (
            "OPENROUTER_API_KEY",
            "OPENROUTER_BASE_URL",
            "OPENROUTER_MODEL",
            "https://openrouter.ai/api/v1",
            "google/gemini-2.0-flash-001",
        ),
        "ollama": (
            "",
            "OLLAMA_BASE_URL",
            "OLLAMA_MODEL",
            "http://localhost:11434/v1",
            "qwen2.5:7b",
        ),
    }

    for name, (
        key_env,
        url_env,
        model_env,
        default_url,
        default_model,
    ) in provider_defs.items():
        api_key = os.getenv(key_env, "") if key_env else ""
        base_url = os.getenv(url_env, default_url)
        model = os.getenv(model_env, default_model)
        config.providers[name] = DialogueProviderConfig(
            name=name,
            api_key=api_key,
            base_url=base_url,
            model=model,
        )

    return config
