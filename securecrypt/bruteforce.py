"""
Brute-force orchestrator.

A search is planned up front as a flat list of (algorithm, key) attempts so
the step total is known before the first decode. ``iter_batches`` runs the
plan in ``batch_size`` chunks and checks the cancel token between chunks;
``search`` drains it and ranks whatever was produced.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Union

from . import registry, scoring
from .ciphers import VALID_AFFINE_A
from .config import Settings
from .errors import AlgorithmError, ContractViolation
from .registry import Category, CipherSpec

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

CAESAR_SHIFTS = range(1, 26)
RAIL_COUNTS = range(2, 11)
AFFINE_PAIRS = [(a, b) for a in VALID_AFFINE_A for b in range(26)]

_PARAMETER_SPACES = {
    "caesar": [(str(s), f"Caesar (shift {s})") for s in CAESAR_SHIFTS],
    "railfence": [(str(r), f"Rail Fence ({r} rails)") for r in RAIL_COUNTS],
    "affine": [(f"{a},{b}", f"Affine (a={a}, b={b})") for a, b in AFFINE_PAIRS],
}


@dataclass(frozen=True)
class BruteForceCandidate:
    algorithm: str
    result_text: str
    confidence: float
    is_readable: bool
    cipher_id: str = ""
    key: Optional[str] = None


@dataclass(frozen=True)
class Attempt:
    spec: CipherSpec
    key: Optional[str]
    label: str


@dataclass
class SearchBatch:
    candidates: List[BruteForceCandidate] = field(default_factory=list)
    progress: float = 0.0
    attempted: int = 0
    total: int = 0


class CancelToken:
    """Cooperative cancellation flag, safe to set from another thread."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def parse_category(category: Union[str, Category]) -> Category:
    if isinstance(category, Category):
        return category
    try:
        return Category(str(category).lower())
    except ValueError:
        raise ContractViolation(f"unknown search category {category!r}")


def _keyed_attempts(spec: CipherSpec, provided_key: Optional[str], common_keys: List[str]) -> List[Attempt]:
    name = spec.id.upper()
    out = []
    if provided_key:
        out.append(Attempt(spec, provided_key, f"{name} (provided key)"))
    if spec.id in _PARAMETER_SPACES:
        out.extend(Attempt(spec, key, label) for key, label in _PARAMETER_SPACES[spec.id])
    else:
        out.extend(Attempt(spec, key, f"{name} (common key: {key})") for key in common_keys)
    return out


def plan_attempts(category: Union[str, Category], provided_key: Optional[str] = None,
                  settings: Optional[Settings] = None) -> List[Attempt]:
    """Every attempt a search would make, in execution order."""
    settings = settings or Settings()
    cat = parse_category(category)
    order = registry.SEARCH_ORDER if cat is Category.ALL else [cat]
    plan: List[Attempt] = []
    for c in order:
        for spec in registry.specs_for(c):
            if spec.requires_key:
                plan.extend(_keyed_attempts(spec, provided_key, settings.common_keys))
            else:
                plan.append(Attempt(spec, None, spec.id.upper()))
    return plan


def total_steps(category: Union[str, Category], provided_key: Optional[str] = None,
                settings: Optional[Settings] = None) -> int:
    return len(plan_attempts(category, provided_key, settings))


def rank(candidates: List[BruteForceCandidate]) -> List[BruteForceCandidate]:
    """Confidence descending; equal confidences keep plan (registry) order."""
    return sorted(candidates, key=lambda c: -c.confidence)


class BruteForceSearch:
    def __init__(self, text: str, category: Union[str, Category] = Category.ALL,
                 provided_key: Optional[str] = None, settings: Optional[Settings] = None,
                 cancel: Optional[CancelToken] = None):
        if not text:
            raise ContractViolation("cannot search an empty text")
        self.text = text
        self.category = parse_category(category)
        self.provided_key = provided_key or None
        self.settings = settings or Settings()
        self.cancel = cancel or CancelToken()
        self.plan = plan_attempts(self.category, self.provided_key, self.settings)

    @property
    def total(self) -> int:
        return len(self.plan)

    def _threshold(self, spec: CipherSpec) -> float:
        if spec.category is Category.ENCODING:
            return self.settings.encoding_threshold
        return self.settings.cipher_threshold

    def run_attempt(self, attempt: Attempt) -> Optional[BruteForceCandidate]:
        try:
            out = registry.decode(attempt.spec.id, self.text, attempt.key)
        except (AlgorithmError, ValueError) as e:
            logger.debug("skip %s: %s", attempt.label, e)
            return None
        if not out:
            return None
        confidence = scoring.score(out)
        return BruteForceCandidate(
            algorithm=attempt.label,
            result_text=out,
            confidence=confidence,
            is_readable=confidence > self._threshold(attempt.spec),
            cipher_id=attempt.spec.id,
            key=attempt.key,
        )

    def iter_batches(self, on_progress: Optional[ProgressCallback] = None) -> Iterator[SearchBatch]:
        """
        Yield one ``SearchBatch`` per ``batch_size`` attempts.

        ``on_progress`` fires after every attempt with a percentage that
        only ever grows; the last call reports 100.0 unless cancelled.
        """
        total = self.total
        size = self.settings.batch_size
        attempted = 0
        for start in range(0, total, size):
            if self.cancel.cancelled:
                logger.info("search cancelled after %d/%d attempts", attempted, total)
                return
            batch = SearchBatch(total=total)
            for attempt in self.plan[start:start+size]:
                candidate = self.run_attempt(attempt)
                if candidate is not None:
                    batch.candidates.append(candidate)
                attempted += 1
                if on_progress:
                    on_progress(attempted * 100.0 / total)
            batch.attempted = attempted
            batch.progress = attempted * 100.0 / total
            yield batch

    def search(self, on_progress: Optional[ProgressCallback] = None) -> List[BruteForceCandidate]:
        found: List[BruteForceCandidate] = []
        for batch in self.iter_batches(on_progress):
            found.extend(batch.candidates)
        logger.info("%s search over %d attempts produced %d candidates",
                    self.category.value, self.total, len(found))
        return rank(found)


def brute_force_search(text: str, category: Union[str, Category] = Category.ALL,
                       key: Optional[str] = None, on_progress: Optional[ProgressCallback] = None,
                       settings: Optional[Settings] = None,
                       cancel: Optional[CancelToken] = None) -> List[BruteForceCandidate]:
    return BruteForceSearch(text, category, key, settings, cancel).search(on_progress)
