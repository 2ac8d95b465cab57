"""
Ranked algorithm prediction: the learned model plus fixed detectors.

Each detector is a small predicate with a fixed confidence and a one-line
reason. Results are ranked by confidence; equal confidences keep the order
the detectors ran in.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from . import features as fx
from .classifier import OnlineClassifier
from .storage import TrainingExample

logger = logging.getLogger(__name__)

ML_MIN_CONFIDENCE = 0.3
ML_TAG = " (ML)"

HASH_NAMES = {32: "MD5", 40: "SHA-1", 56: "SHA-224", 64: "SHA-256", 96: "SHA-384", 128: "SHA-512"}

_B64 = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
_HEX = re.compile(r"^[0-9A-Fa-f]+$")
_BIN = re.compile(r"^[01\s]+$")
_LETTERS_SPACES = re.compile(r"^[A-Za-z\s]+$")
_LONG_B64 = re.compile(r"^[A-Za-z0-9+/=]{40,}$")
_B58 = re.compile(r"^[1-9A-HJ-NP-Za-km-z]+$")
_READABLE = {
    "the","and","of","to","a","in","is","it","you","that","he","was","for","on","are","as","with",
    "his","they","at","be","this","have","from","or","one","had","by","word","but",
}


@dataclass(frozen=True)
class Prediction:
    algorithm: str
    confidence: float
    reasoning: str


def _rot13(text: str) -> str:
    return text.translate(str.maketrans(
        "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz",
        "NOPQRSTUVWXYZABCDEFGHIJKLMnopqrstuvwxyzabcdefghijklm"))


def _mostly_words(text: str) -> bool:
    words = text.lower().split()
    return bool(words) and sum(1 for w in words if w in _READABLE) / len(words) > 0.1


def detect_encodings(text: str) -> List[Prediction]:
    out = []
    if text and _B64.match(text) and len(text) % 4 == 0:
        out.append(Prediction("Base64", 0.95, "Base64 alphabet with length a multiple of 4 and valid padding"))
    if _HEX.match(text) and len(text) % 2 == 0:
        out.append(Prediction("Hexadecimal", 0.9, "Only hexadecimal digits, even length"))
    if _BIN.match(text) and re.sub(r"\s", "", text) and len(re.sub(r"\s", "", text)) % 8 == 0:
        out.append(Prediction("Binary", 0.95, "Only 0 and 1 in whole bytes"))
    if re.search(r"%[0-9A-Fa-f]{2}", text):
        out.append(Prediction("URL Encoding", 0.85, "Contains percent-encoded bytes"))
    if re.fullmatch(r"[A-Z2-7]+=*", text, re.I) and len(text) % 8 == 0:
        out.append(Prediction("Base32", 0.85, "Base32 alphabet with length a multiple of 8"))
    if _B58.match(text):
        out.append(Prediction("Base58", 0.7, "Base58 alphabet (no 0, O, I or l)"))
    if re.fullmatch(r"\d+(\s+\d+)*", text) and all(32 <= int(n) <= 126 for n in text.split()):
        out.append(Prediction("ASCII", 0.8, "Space-separated decimal codes in the printable range"))
    if re.search(r"&[a-zA-Z]+;|&#\d+;", text):
        out.append(Prediction("HTML Entities", 0.9, "Contains HTML entity references"))
    return out


def detect_modern(text: str) -> List[Prediction]:
    out = []
    if "U2FsdGVkX1" in text or _LONG_B64.match(text):
        out.append(Prediction("AES/DES (OpenSSL salted)", 0.8, "Salted__ marker or long base64 ciphertext"))
    if text.startswith("RSA_ENCRYPTED:") or "-----BEGIN" in text or (len(text) > 100 and re.fullmatch(r"[A-Za-z0-9+/=]+", text)):
        out.append(Prediction("RSA", 0.85, "Matches an RSA ciphertext or PEM layout"))
    return out


def detect_classical(text: str) -> List[Prediction]:
    out = []
    letters_only = bool(_LETTERS_SPACES.match(text))
    if letters_only and fx.letter_variance(text) > 0.02:
        out.append(Prediction("Caesar Cipher", 0.6, "Only letters, with a skewed letter frequency"))
    if re.fullmatch(r"[A-Za-z]+", text) and 3.5 < fx.shannon_entropy(text) < 4.5:
        out.append(Prediction("Vigenère Cipher", 0.55, "Moderate entropy suggests polyalphabetic substitution"))
    if re.search(r"[\x00-\x1F]", text.replace("\n", "").replace("\r", "").replace("\t", "")):
        out.append(Prediction("XOR Cipher", 0.7, "Contains control characters typical of XOR output"))
    if letters_only and _mostly_words(_rot13(text)):
        out.append(Prediction("ROT13", 0.8, "ROT13 decryption produces readable text"))
    if letters_only:
        out.append(Prediction("Atbash Cipher", 0.4, "Letter-only text could be an Atbash substitution"))
    return out


def detect_hashes(text: str) -> List[Prediction]:
    out = []
    if _HEX.match(text) and len(text) in HASH_NAMES:
        name = HASH_NAMES[len(text)]
        out.append(Prediction(name, 0.9, f"{len(text)} hexadecimal characters match the {name} digest length"))
    if re.match(r"^\$2[aby]?\$\d{2}\$", text):
        out.append(Prediction("bcrypt", 0.95, "bcrypt $2x$ prefix with cost factor"))
    if "pbkdf2" in text.lower() or _LONG_B64.match(text):
        out.append(Prediction("PBKDF2", 0.6, "Long base64 blob or explicit pbkdf2 marker"))
    return out


def predict_algorithm(text: str, classifier: OnlineClassifier) -> List[Prediction]:
    predictions: List[Prediction] = []
    algorithm, confidence = classifier.predict(text)
    if confidence > ML_MIN_CONFIDENCE:
        count = classifier.model.training_count
        predictions.append(Prediction(
            algorithm + ML_TAG, confidence,
            f"Learned model prediction from {count} training examples" if count
            else "Rule-based features (model not trained yet)"))
    for detector in (detect_encodings, detect_modern, detect_classical, detect_hashes):
        predictions.extend(detector(text))
    logger.debug("%d predictions for a %d-character input", len(predictions), len(text))
    return sorted(predictions, key=lambda p: -p.confidence)


def submit_feedback(text: str, prediction: Prediction, was_correct: bool, classifier: OnlineClassifier,
                    actual_algorithm: Optional[str] = None) -> TrainingExample:
    """
    Turn a verdict on ``prediction`` into a training step.

    The weight update lands on ``actual_algorithm``; when none is given it
    lands on the predicted label itself.
    """
    predicted = prediction.algorithm[:-len(ML_TAG)] if prediction.algorithm.endswith(ML_TAG) else prediction.algorithm
    actual = predicted if was_correct or not actual_algorithm else actual_algorithm
    example = TrainingExample(
        input_text=text,
        predicted_algorithm=predicted,
        actual_algorithm=actual,
        confidence=prediction.confidence,
        features=fx.extract(text),
        is_correct=was_correct,
    )
    classifier.train(example)
    return example
