"""
Persistence for the classifier: the weight model and the feedback log.

Stores raise ``StorageError``; deciding whether that is fatal is the
caller's business (the classifier logs it and carries on in memory).
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Union

from .errors import StorageError
from .features import FeatureVector

logger = logging.getLogger(__name__)

AlgorithmWeights = Dict[str, Dict[str, float]]


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Model:
    weights: AlgorithmWeights = field(default_factory=dict)
    training_count: int = 0
    accuracy: float = 0.0
    last_updated: str = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            "weights": self.weights,
            "training_count": self.training_count,
            "accuracy": self.accuracy,
            "last_updated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Model":
        return cls(
            weights={alg: {f: float(w) for f, w in fw.items()} for alg, fw in data.get("weights", {}).items()},
            training_count=int(data.get("training_count", 0)),
            accuracy=float(data.get("accuracy", 0.0)),
            last_updated=data.get("last_updated") or utc_now(),
        )


@dataclass(frozen=True)
class TrainingExample:
    input_text: str
    predicted_algorithm: str
    actual_algorithm: str
    confidence: float
    features: FeatureVector
    is_correct: bool
    created_at: str = field(default_factory=utc_now)

    def to_dict(self) -> dict:
        return {
            "input_text": self.input_text,
            "predicted_algorithm": self.predicted_algorithm,
            "actual_algorithm": self.actual_algorithm,
            "confidence": self.confidence,
            "features": self.features.to_dict(),
            "is_correct": self.is_correct,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TrainingExample":
        return cls(
            input_text=data["input_text"],
            predicted_algorithm=data["predicted_algorithm"],
            actual_algorithm=data["actual_algorithm"],
            confidence=float(data["confidence"]),
            features=FeatureVector.from_dict(data["features"]),
            is_correct=bool(data["is_correct"]),
            created_at=data.get("created_at") or utc_now(),
        )


class InMemoryStore:
    """Process-local store; also what tests inject."""

    def __init__(self, feedback_limit: int = 1000):
        self.feedback_limit = feedback_limit
        self._model: Optional[dict] = None
        self._feedback: List[dict] = []

    def load_model(self) -> Optional[Model]:
        return Model.from_dict(self._model) if self._model is not None else None

    def save_model(self, model: Model) -> None:
        self._model = json.loads(json.dumps(model.to_dict()))

    def load_feedback(self) -> List[TrainingExample]:
        return [TrainingExample.from_dict(d) for d in self._feedback]

    def append_feedback(self, example: TrainingExample) -> None:
        self._feedback.append(example.to_dict())
        del self._feedback[:-self.feedback_limit]

    def clear(self) -> None:
        self._model = None
        self._feedback = []


class JsonFileStore:
    """
    Two JSON documents side by side: ``<model_path>`` and
    ``<model_path stem>.feedback.json``. Writes go through a temp file and
    ``os.replace`` so a crash never leaves half a model on disk.
    """

    def __init__(self, model_path: Union[str, Path], feedback_limit: int = 1000):
        self.model_path = Path(model_path).expanduser()
        self.feedback_path = self.model_path.with_name(self.model_path.stem + ".feedback.json")
        self.feedback_limit = feedback_limit

    def _read(self, path: Path):
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"cannot read {path}: {e}")

    def _write(self, path: Path, payload) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
        except OSError as e:
            raise StorageError(f"cannot write {path}: {e}")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp, path)
        except OSError as e:
            if os.path.exists(tmp): os.unlink(tmp)
            raise StorageError(f"cannot write {path}: {e}")

    def load_model(self) -> Optional[Model]:
        data = self._read(self.model_path)
        if data is None:
            return None
        try:
            return Model.from_dict(data)
        except (TypeError, ValueError, AttributeError) as e:
            raise StorageError(f"malformed model in {self.model_path}: {e}")

    def save_model(self, model: Model) -> None:
        self._write(self.model_path, model.to_dict())

    def load_feedback(self) -> List[TrainingExample]:
        data = self._read(self.feedback_path) or []
        try:
            return [TrainingExample.from_dict(d) for d in data]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"malformed feedback log in {self.feedback_path}: {e}")

    def append_feedback(self, example: TrainingExample) -> None:
        data = self._read(self.feedback_path) or []
        data.append(example.to_dict())
        self._write(self.feedback_path, data[-self.feedback_limit:])

    def clear(self) -> None:
        for path in (self.model_path, self.feedback_path):
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                raise StorageError(f"cannot remove {path}: {e}")
        logger.info("cleared model store at %s", self.model_path)
