import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from securecrypt.classifier import OnlineClassifier
from securecrypt.config import Settings
from securecrypt.errors import StorageError
from securecrypt.storage import InMemoryStore


class FailingStore:
    """Every operation fails, like an unreachable disk."""

    def load_model(self):
        raise StorageError("store offline")

    def save_model(self, model):
        raise StorageError("store offline")

    def load_feedback(self):
        raise StorageError("store offline")

    def append_feedback(self, example):
        raise StorageError("store offline")

    def clear(self):
        raise StorageError("store offline")


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def classifier(store, settings):
    return OnlineClassifier(store, settings)


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture(autouse=True)
def isolated_model_path(tmp_path, monkeypatch):
    """Keep the CLI and Settings.from_env away from the real home directory."""
    monkeypatch.setenv("SECURECRYPT_MODEL_PATH", str(tmp_path / "model.json"))
    return tmp_path / "model.json"
