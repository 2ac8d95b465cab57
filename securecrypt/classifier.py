"""
Online linear classifier over ``FeatureVector``s.

One weight per (algorithm, feature). Training is a single stochastic step
per example; writers serialize on a lock and publish a fresh ``Model``
object, so ``predict`` can read whatever model is current without locking.
"""

import copy
import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from . import features as fx
from .config import Settings
from .errors import StorageError
from .storage import InMemoryStore, Model, TrainingExample, utc_now

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
UNKNOWN_CONFIDENCE = 0.3
PATTERN_CUTOFF = 0.8
CIPHER_CUTOFF = 0.6


@dataclass(frozen=True)
class ModelStats:
    training_count: int
    accuracy: float
    algorithms: List[str]
    last_updated: str
    feedback_size: int


def rule_based(vec: fx.FeatureVector) -> Tuple[str, float]:
    """Decision tree used until the model has seen any feedback."""
    if vec.base64_score > PATTERN_CUTOFF:
        return "Base64", vec.base64_score
    if vec.hex_score > PATTERN_CUTOFF:
        if vec.hash_score > PATTERN_CUTOFF:
            return "Hash Function", vec.hash_score
        return "Hexadecimal", vec.hex_score
    if vec.binary_score > PATTERN_CUTOFF:
        return "Binary", vec.binary_score
    if vec.cipher_score > CIPHER_CUTOFF:
        return "Classical Cipher", vec.cipher_score
    return UNKNOWN, UNKNOWN_CONFIDENCE


class OnlineClassifier:
    def __init__(self, store=None, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.store = store if store is not None else InMemoryStore(self.settings.feedback_limit)
        self._lock = threading.Lock()
        self._model = self._load_model()
        self._feedback = self._load_feedback()

    # ---------- persistence ----------
    def _load_model(self) -> Model:
        try:
            model = self.store.load_model()
        except StorageError as e:
            logger.warning("could not load model, starting empty: %s", e)
            return Model()
        return model if model is not None else Model()

    def _load_feedback(self) -> List[TrainingExample]:
        try:
            return list(self.store.load_feedback())[-self.settings.feedback_limit:]
        except StorageError as e:
            logger.warning("could not load feedback log, starting empty: %s", e)
            return []

    def _persist(self, model: Model, example: TrainingExample) -> None:
        # in-memory state stays authoritative; the next train saves again
        try:
            self.store.append_feedback(example)
        except StorageError as e:
            logger.warning("feedback not persisted: %s", e)
        try:
            self.store.save_model(model)
        except StorageError as e:
            logger.warning("model not persisted: %s", e)

    # ---------- inference ----------
    @property
    def model(self) -> Model:
        return self._model

    @staticmethod
    def _scores(model: Model, values: Dict[str, float]) -> Dict[str, float]:
        return {
            alg: sum(w * values.get(name, 0.0) for name, w in weights.items())
            for alg, weights in model.weights.items()
        }

    def scores(self, text: str) -> Dict[str, float]:
        """Raw linear score for every algorithm the model has been trained on."""
        return self._scores(self._model, fx.extract(text).normalized())

    def predict(self, text: str) -> Tuple[str, float]:
        model = self._model
        vec = fx.extract(text)
        if model.training_count == 0 or not model.weights:
            return rule_based(vec)
        best, best_score = None, 0.0
        for alg, s in self._scores(model, vec.normalized()).items():
            if best is None or s > best_score:
                best, best_score = alg, s
        return best, min(1.0, max(0.0, best_score))

    # ---------- training ----------
    def train(self, example: TrainingExample) -> None:
        reward = self.settings.correct_reward if example.is_correct else self.settings.incorrect_reward
        step = self.settings.learning_rate * reward
        values = example.features.normalized()
        with self._lock:
            weights = copy.deepcopy(self._model.weights)
            row = weights.setdefault(example.actual_algorithm, {})
            for name in fx.FEATURE_NAMES:
                row[name] = row.get(name, 0.0) + step * values[name]

            self._feedback.append(example)
            del self._feedback[:-self.settings.feedback_limit]
            correct = sum(1 for e in self._feedback if e.is_correct)
            model = Model(
                weights=weights,
                training_count=self._model.training_count + 1,
                accuracy=correct / len(self._feedback),
                last_updated=utc_now(),
            )
            self._model = model
            self._persist(model, example)
        logger.info("trained on %s (%s); %d examples, accuracy %.2f",
                    example.actual_algorithm, "correct" if example.is_correct else "incorrect",
                    model.training_count, model.accuracy)

    def reset(self) -> None:
        """Forget every weight and every feedback entry."""
        with self._lock:
            self._model = Model()
            self._feedback = []
            try:
                self.store.clear()
            except StorageError as e:
                logger.warning("stored model not cleared: %s", e)
        logger.info("model reset")

    def stats(self) -> ModelStats:
        model = self._model
        return ModelStats(
            training_count=model.training_count,
            accuracy=model.accuracy,
            algorithms=sorted(model.weights),
            last_updated=model.last_updated,
            feedback_size=len(self._feedback),
        )
