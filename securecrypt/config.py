"""Runtime settings for the search and the classifier."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "SECURECRYPT_"

COMMON_KEYS = [
    "password", "secret", "key", "admin", "test", "user", "default",
    "123456", "qwerty", "abc123", "password123", "admin123",
    "crypto", "cipher", "encrypt", "decode", "hidden", "private",
    "secure", "confidential", "top-secret", "classified",
    "letmein", "welcome", "guest", "root", "toor", "pass",
    "mypassword", "secret123", "password1", "admin1",
    "hello", "world", "test123", "demo", "sample",
]


@dataclass
class Settings:
    common_keys: List[str] = field(default_factory=lambda: list(COMMON_KEYS))
    cipher_threshold: float = 0.3
    encoding_threshold: float = 0.5
    batch_size: int = 10
    learning_rate: float = 0.01
    correct_reward: float = 1.0
    incorrect_reward: float = -0.5
    feedback_limit: int = 1000
    model_path: Path = field(default_factory=lambda: Path.home() / ".securecrypt" / "model.json")
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    def validate(self) -> None:
        """Raise ``ConfigurationError`` naming the first bad field."""
        if not self.common_keys or any(not k for k in self.common_keys):
            raise ConfigurationError("common_keys must be a non-empty list of non-empty keys",
                                     config_field="common_keys")
        for name in ("cipher_threshold", "encoding_threshold"):
            if not 0.0 <= getattr(self, name) <= 1.0:
                raise ConfigurationError(f"{name} must lie in [0, 1]", config_field=name)
        if self.batch_size <= 0:
            raise ConfigurationError("batch_size must be positive", config_field="batch_size")
        if self.learning_rate <= 0:
            raise ConfigurationError("learning_rate must be positive", config_field="learning_rate")
        if self.correct_reward <= 0:
            raise ConfigurationError("correct_reward must be positive", config_field="correct_reward")
        if self.incorrect_reward >= 0:
            raise ConfigurationError("incorrect_reward must be negative", config_field="incorrect_reward")
        if self.feedback_limit <= 0:
            raise ConfigurationError("feedback_limit must be positive", config_field="feedback_limit")
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigurationError(f"unknown log level {self.log_level!r}", config_field="log_level")

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Defaults overridden by ``SECURECRYPT_*`` variables, validated."""
        env = os.environ if environ is None else environ
        settings = cls()
        casts = {
            "cipher_threshold": float, "encoding_threshold": float, "batch_size": int,
            "learning_rate": float, "correct_reward": float, "incorrect_reward": float,
            "feedback_limit": int, "model_path": lambda v: Path(v).expanduser(),
            "log_level": str, "log_file": Path,
        }
        for name, cast in casts.items():
            raw = env.get(ENV_PREFIX + name.upper())
            if raw is None:
                continue
            try:
                setattr(settings, name, cast(raw))
            except ValueError:
                raise ConfigurationError(f"cannot parse {raw!r}", config_field=name)
        keys = env.get(ENV_PREFIX + "COMMON_KEYS")
        if keys is not None:
            settings.common_keys = [k.strip() for k in keys.split(",") if k.strip()]
        settings.validate()
        logger.debug("settings loaded: %s", settings)
        return settings
