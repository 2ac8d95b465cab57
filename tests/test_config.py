"""
Settings defaults, environment overrides and validation.
"""

from pathlib import Path

import pytest

from securecrypt.config import COMMON_KEYS, Settings
from securecrypt.errors import ConfigurationError


def test_defaults():
    s = Settings()
    s.validate()
    assert s.cipher_threshold == 0.3 and s.encoding_threshold == 0.5
    assert s.batch_size == 10 and s.learning_rate == 0.01
    assert (s.correct_reward, s.incorrect_reward) == (1.0, -0.5)
    assert len(COMMON_KEYS) == 37 and s.common_keys == COMMON_KEYS
    assert s.common_keys is not COMMON_KEYS


def test_environment_overrides():
    env = {
        "SECURECRYPT_BATCH_SIZE": "25",
        "SECURECRYPT_CIPHER_THRESHOLD": "0.4",
        "SECURECRYPT_MODEL_PATH": "/tmp/sc/model.json",
        "SECURECRYPT_COMMON_KEYS": "alpha, beta,,gamma",
        "SECURECRYPT_LOG_LEVEL": "debug",
    }
    s = Settings.from_env(env)
    assert s.batch_size == 25 and s.cipher_threshold == 0.4
    assert s.model_path == Path("/tmp/sc/model.json")
    assert s.common_keys == ["alpha", "beta", "gamma"]
    assert s.log_level == "debug"


def test_unparseable_value_names_the_field():
    with pytest.raises(ConfigurationError) as exc:
        Settings.from_env({"SECURECRYPT_BATCH_SIZE": "ten"})
    assert exc.value.config_field == "batch_size"


@pytest.mark.parametrize("field, value", [
    ("cipher_threshold", 1.5),
    ("encoding_threshold", -0.1),
    ("batch_size", 0),
    ("learning_rate", 0.0),
    ("incorrect_reward", 0.5),
    ("feedback_limit", 0),
    ("log_level", "LOUD"),
    ("common_keys", []),
])
def test_validate_rejects(field, value):
    s = Settings(**{field: value})
    with pytest.raises(ConfigurationError) as exc:
        s.validate()
    assert exc.value.config_field == field, f"Expected {field}, got {exc.value.config_field}"
    assert field in str(exc.value)
