"""
Configuration management for the chat client.

Two layers of configuration live here:
- ChatConfig: per-invocation settings built from command line arguments
- StoredConfig: credentials persisted in ~/.config/deepseek/config.yaml

Learning Points:
- Dataclasses keep per-run settings lightweight
- Pydantic validates data read back from disk
- yaml.safe_load never executes arbitrary tags from the file
"""

import enum
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator


DEFAULT_BASE_URL = "https://api.deepseek.com"
CHAT_MODEL = "deepseek-chat"
REASONER_MODEL = "deepseek-reasoner"
API_KEY_ENV = "DEEPSEEK_API_KEY"


class ConfigError(Exception):
    """Raised when the stored configuration cannot be used."""


class MemoryAction(enum.Enum):
    """What to do with conversation history in memory mode."""
    NEW = "new"
    CONTINUE = "continue"


def model_for_version(version: Optional[str]) -> str:
    """Map the short -v/--version flag onto an API model name."""
    return REASONER_MODEL if version == "r1" else CHAT_MODEL


def is_reasoning_model(model: str) -> bool:
    """Whether the model streams reasoning_content before its answer."""
    return model == REASONER_MODEL


@dataclass
class ChatConfig:
    """Configuration for one run of the chat client."""

    # ========================================================================
    # Server Connection Settings
    # ========================================================================
    base_url: str = DEFAULT_BASE_URL
    model: str = CHAT_MODEL

    # ========================================================================
    # Generation Parameters
    # ========================================================================
    temperature: float = 1.0
    max_tokens: int = 2048

    # ========================================================================
    # History and Presentation
    # ========================================================================
    memory: bool = False
    mem_action: Optional[MemoryAction] = None
    debug: bool = False
    char_delay: float = 0.01
    # Seconds between rendered characters (simulated typing)

    def __post_init__(self):
        """Validate and normalize configuration."""
        self.base_url = self.base_url.rstrip('/')
        if not self.memory:
            self.mem_action = None
        elif self.mem_action is None:
            self.mem_action = MemoryAction.CONTINUE

    @property
    def is_reasoning_model(self) -> bool:
        return is_reasoning_model(self.model)

    @classmethod
    def from_args(cls, args) -> 'ChatConfig':
        """Create config from parsed command line arguments."""
        action = getattr(args, 'action', None)
        return cls(
            base_url=getattr(args, 'base_url', None) or DEFAULT_BASE_URL,
            model=model_for_version(getattr(args, 'version', 'v3')),
            temperature=getattr(args, 'temperature', 1.0),
            max_tokens=getattr(args, 'max_tokens', 2048),
            memory=getattr(args, 'memory', False),
            mem_action=MemoryAction(action) if action else None,
            debug=getattr(args, 'debug', False),
            char_delay=0.0 if getattr(args, 'no_typing', False) else 0.01,
        )


class StoredConfig(BaseModel):
    """Settings persisted between runs."""

    api_key: str = Field(..., min_length=1, description="DeepSeek API key")
    base_url: Optional[str] = Field(
        default=None,
        description="Override for the API base URL"
    )

    @field_validator('api_key')
    @classmethod
    def strip_api_key(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("api_key must not be blank")
        return v


def home_dir() -> Path:
    """Locate the user's home directory the same way on Unix and Windows."""
    home = os.environ.get("HOME") or os.environ.get("USERPROFILE") or "."
    return Path(home)


def config_dir() -> Path:
    return home_dir() / ".config" / "deepseek"


def config_path() -> Path:
    return config_dir() / "config.yaml"


def read_config(path: Optional[Path] = None) -> Optional[StoredConfig]:
    """Load the stored configuration.

    Args:
        path: Config file location, defaults to ~/.config/deepseek/config.yaml

    Returns:
        StoredConfig, or None when the file does not exist yet (the config
        directory is created so the user can drop a file in)

    Raises:
        ConfigError: If the YAML is invalid or lacks a usable api_key
    """
    path = path or config_path()
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        return None

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Empty or invalid config file: {path}")

    try:
        return StoredConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {path}: {e}")


def set_config(api_key: str, path: Optional[Path] = None) -> Path:
    """Write the API key to the config file, creating directories as needed."""
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        config = StoredConfig(api_key=api_key)
    except ValidationError as e:
        raise ConfigError(f"Invalid API key: {e}")

    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(config.model_dump(exclude_none=True), f, default_flow_style=False)
    return path


def resolve_api_key(stored: Optional[StoredConfig]) -> Optional[str]:
    """Environment variable first, then the stored config."""
    env_key = os.environ.get(API_KEY_ENV, "").strip()
    if env_key:
        return env_key
    return stored.api_key if stored else None
