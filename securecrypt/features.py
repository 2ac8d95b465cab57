"""
Feature extraction for the algorithm classifier.

``extract`` is pure: the same text always yields the same ``FeatureVector``.
Pattern scores are shape heuristics in [0, 1], not validators.
"""

import math
import re
from collections import Counter
from dataclasses import asdict, dataclass
from typing import Dict

FEATURE_NAMES = (
    "length", "entropy", "letters", "numbers", "symbols", "whitespace",
    "base64_score", "hex_score", "binary_score", "hash_score", "cipher_score",
    "unique_chars", "repeated_patterns", "vowel_ratio", "consonant_ratio", "special_char_ratio",
)

HASH_HEX_LENGTHS = (32, 40, 56, 64, 96, 128)  # MD5, SHA-1, SHA-224, SHA-256, SHA-384, SHA-512

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
_HEX_RE = re.compile(r"^[0-9A-Fa-f]+$")
_BINARY_RE = re.compile(r"^[01\s]+$")


@dataclass(frozen=True)
class FeatureVector:
    length: int
    entropy: float
    letters: float
    numbers: float
    symbols: float
    whitespace: float
    base64_score: float
    hex_score: float
    binary_score: float
    hash_score: float
    cipher_score: float
    unique_chars: float
    repeated_patterns: float
    vowel_ratio: float
    consonant_ratio: float
    special_char_ratio: float

    def normalized(self) -> Dict[str, float]:
        """Every feature scaled into roughly [0, 1] for the linear model."""
        values = asdict(self)
        values["length"] = math.log(self.length + 1) / 10
        values["entropy"] = self.entropy / 8
        return {name: float(values[name]) for name in FEATURE_NAMES}

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, float]) -> "FeatureVector":
        return cls(**{name: data.get(name, 0) for name in FEATURE_NAMES})


# ---------- Pattern scores ----------
def shannon_entropy(text: str) -> float:
    if not text: return 0.0
    n = len(text)
    return -sum((c / n) * math.log2(c / n) for c in Counter(text).values())


def base64_score(text: str) -> float:
    if not text or not _BASE64_RE.match(text): return 0.0
    s = 0.5
    if len(text) % 4 == 0: s += 0.3
    if text.count("=") <= 2: s += 0.2
    return min(1.0, s)


def hex_score(text: str) -> float:
    if not _HEX_RE.match(text): return 0.0
    return 1.0 if len(text) % 2 == 0 else 0.6


def binary_score(text: str) -> float:
    if not _BINARY_RE.match(text): return 0.0
    bits = re.sub(r"\s", "", text)
    if not bits: return 0.0
    return 1.0 if len(bits) % 8 == 0 else 0.5


def hash_score(text: str) -> float:
    if not _HEX_RE.match(text): return 0.0
    return 0.9 if len(text) in HASH_HEX_LENGTHS else 0.3


def letter_variance(text: str) -> float:
    letters = re.sub(r"[^a-z]", "", text.lower())
    if not letters: return 0.0
    counts = Counter(letters)
    total = len(letters)
    return sum((counts.get(chr(97 + i), 0) / total - 1 / 26) ** 2 for i in range(26)) / 26


def cipher_score(text: str) -> float:
    s = 0.0
    if re.fullmatch(r"[A-Za-z\s]+", text): s += 0.3
    if letter_variance(text) > 0.02: s += 0.4
    if not re.search(r"(.)\1{3,}", text): s += 0.3
    return min(1.0, s)


def repeated_patterns(text: str) -> float:
    """Distinct 2-4 character substrings seen at least twice, per character."""
    if not text: return 0.0
    seen: Counter = Counter()
    recurring = 0
    for size in range(2, 5):
        for i in range(len(text) - size + 1):
            chunk = text[i:i+size]
            seen[chunk] += 1
            if seen[chunk] == 2:
                recurring += 1
    return recurring / len(text)


def extract(text: str) -> FeatureVector:
    n = len(text)
    if n == 0:
        return FeatureVector(0, 0.0, *([0.0] * 14))
    letters = len(re.findall(r"[A-Za-z]", text))
    numbers = len(re.findall(r"[0-9]", text))
    symbols = len(re.findall(r"[^A-Za-z0-9\s]", text))
    spaces = len(re.findall(r"\s", text))
    vowels = len(re.findall(r"[aeiouAEIOU]", text))
    consonants = letters - vowels
    return FeatureVector(
        length=n,
        entropy=shannon_entropy(text),
        letters=letters / n,
        numbers=numbers / n,
        symbols=symbols / n,
        whitespace=spaces / n,
        base64_score=base64_score(text),
        hex_score=hex_score(text),
        binary_score=binary_score(text),
        hash_score=hash_score(text),
        cipher_score=cipher_score(text),
        unique_chars=len(set(text)) / n,
        repeated_patterns=repeated_patterns(text),
        vowel_ratio=vowels / (vowels + consonants or 1),
        consonant_ratio=consonants / (vowels + consonants or 1),
        special_char_ratio=symbols / n,
    )
