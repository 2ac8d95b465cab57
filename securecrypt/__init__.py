"""securecrypt: classical cipher transforms, brute-force search and algorithm prediction."""

from .bruteforce import BruteForceCandidate, BruteForceSearch, CancelToken, SearchBatch, brute_force_search
from .classifier import OnlineClassifier
from .config import Settings
from .errors import (AlgorithmError, AlgorithmUnsupported, ConfigurationError, ContractViolation,
                     InvalidInput, InvalidKey, SecureCryptError, StorageError)
from .features import FeatureVector, extract
from .prediction import Prediction, predict_algorithm, submit_feedback
from .registry import Category, CipherSpec, CryptoResult, decode, encode, try_decode, try_encode
from .scoring import score
from .storage import InMemoryStore, JsonFileStore, Model, TrainingExample

__version__ = "0.1.0"

__all__ = [
    "AlgorithmError", "AlgorithmUnsupported", "BruteForceCandidate", "BruteForceSearch", "CancelToken",
    "Category", "CipherSpec", "ConfigurationError", "ContractViolation", "CryptoResult", "FeatureVector",
    "InMemoryStore", "InvalidInput", "InvalidKey", "JsonFileStore", "Model", "OnlineClassifier",
    "Prediction", "SearchBatch", "SecureCryptError", "Settings", "StorageError", "TrainingExample",
    "brute_force_search", "decode", "encode", "extract", "predict_algorithm", "score", "submit_feedback",
    "try_decode", "try_encode",
]
