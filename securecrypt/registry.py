"""
Static cipher registry and single-algorithm dispatch.

Keys always arrive as strings here; each cipher's parser turns them into
the typed arguments ``securecrypt.ciphers`` expects and raises
``InvalidKey`` when the string has the wrong shape.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from . import ciphers, modern
from .encodings import ENCODINGS
from .errors import AlgorithmError, AlgorithmUnsupported, InvalidKey

logger = logging.getLogger(__name__)


class Family(str, Enum):
    SUBSTITUTION = "substitution"
    POLYALPHABETIC = "polyalphabetic"
    TRANSPOSITION = "transposition"
    STREAM = "stream"
    ENCODING = "encoding"
    BLOCK = "block"
    ASYMMETRIC = "asymmetric"


class Category(str, Enum):
    """Search categories, in the order ``ALL`` visits them."""
    ENCODING = "encoding"
    CLASSICAL = "classical"
    ASYMMETRIC = "asymmetric"
    SYMMETRIC = "symmetric"
    ALL = "all"


@dataclass(frozen=True)
class CipherSpec:
    id: str
    requires_key: bool
    family: Family
    category: Category
    default_key: Optional[str] = None


@dataclass
class CryptoResult:
    success: bool
    algorithm: str
    result: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


# ---------- Key parsing ----------
def _ints(key: str, count: int, algorithm: str) -> List[int]:
    parts = [p.strip() for p in key.split(",")]
    if len(parts) != count:
        raise InvalidKey(f"expected {count} comma-separated integers", algorithm=algorithm)
    try:
        return [int(p) for p in parts]
    except ValueError:
        raise InvalidKey(f"expected {count} comma-separated integers", algorithm=algorithm)


def parse_int(key: str, algorithm: str) -> int:
    return _ints(key, 1, algorithm)[0]


def parse_affine(key: str) -> Tuple[int, int]:
    a, b = _ints(key, 2, "affine")
    return a, b


def parse_hill(key: str) -> Tuple[int, int, int, int]:
    a, b, c, d = _ints(key, 4, "hill")
    return a, b, c, d


def parse_adfgx(key: str) -> Tuple[str, str]:
    # a bare keyword serves both stages
    if "," not in key:
        return key, key
    square, trans = key.split(",", 1)
    return square.strip(), trans.strip()


def parse_route(key: str) -> Tuple[int, int, str]:
    parts = [p.strip() for p in key.split(",")]
    if len(parts) == 2:
        parts.append("spiral")
    if len(parts) != 3:
        raise InvalidKey("route key is rows,cols[,route]", algorithm="route")
    rows, cols = _ints(",".join(parts[:2]), 2, "route")
    return rows, cols, parts[2].lower()


# ---------- Classical dispatch table ----------
Transform = Callable[[str, str], str]

_CLASSICAL: Dict[str, Tuple[Transform, Transform]] = {
    "caesar": (lambda t, k: ciphers.caesar_encode(t, parse_int(k, "caesar")),
               lambda t, k: ciphers.caesar_decode(t, parse_int(k, "caesar"))),
    "atbash": (lambda t, k: ciphers.atbash(t), lambda t, k: ciphers.atbash(t)),
    "rot13": (lambda t, k: ciphers.rot13(t), lambda t, k: ciphers.rot13(t)),
    "monoalphabetic": (ciphers.monoalphabetic_encode, ciphers.monoalphabetic_decode),
    "vigenere": (ciphers.vigenere_encode, ciphers.vigenere_decode),
    "beaufort": (ciphers.beaufort, ciphers.beaufort),
    "autokey": (ciphers.autokey_encode, ciphers.autokey_decode),
    "playfair": (ciphers.playfair_encode, ciphers.playfair_decode),
    "hill": (lambda t, k: ciphers.hill_encode(t, parse_hill(k)),
             lambda t, k: ciphers.hill_decode(t, parse_hill(k))),
    "adfgx": (lambda t, k: ciphers.adfgx_encode(t, *parse_adfgx(k)),
              lambda t, k: ciphers.adfgx_decode(t, *parse_adfgx(k))),
    "bacon": (lambda t, k: ciphers.bacon_encode(t), lambda t, k: ciphers.bacon_decode(t)),
    "railfence": (lambda t, k: ciphers.rail_fence_encode(t, parse_int(k, "railfence")),
                  lambda t, k: ciphers.rail_fence_decode(t, parse_int(k, "railfence"))),
    "columnar": (ciphers.columnar_encode, ciphers.columnar_decode),
    "scytale": (lambda t, k: ciphers.scytale_encode(t, parse_int(k, "scytale")),
                lambda t, k: ciphers.scytale_decode(t, parse_int(k, "scytale"))),
    "route": (lambda t, k: ciphers.route_encode(t, *parse_route(k)),
              lambda t, k: ciphers.route_decode(t, *parse_route(k))),
    "xor": (ciphers.xor_text, ciphers.xor_text),
    "affine": (lambda t, k: ciphers.affine_encode(t, *parse_affine(k)),
               lambda t, k: ciphers.affine_decode(t, *parse_affine(k))),
}

# ---------- Registry ----------
_S, _P, _T = Family.SUBSTITUTION, Family.POLYALPHABETIC, Family.TRANSPOSITION
_C = Category.CLASSICAL

REGISTRY: List[CipherSpec] = [
    *(CipherSpec(name, False, Family.ENCODING, Category.ENCODING) for name in ENCODINGS),
    CipherSpec("caesar", True, _S, _C, "13"),
    CipherSpec("atbash", False, _S, _C),
    CipherSpec("rot13", False, _S, _C),
    CipherSpec("monoalphabetic", True, _S, _C, "ZYXWVUTSRQPONMLKJIHGFEDCBA"),
    CipherSpec("vigenere", True, _P, _C, "KEY"),
    CipherSpec("beaufort", True, _P, _C, "KEY"),
    CipherSpec("autokey", True, _P, _C, "KEY"),
    CipherSpec("playfair", True, _S, _C, "KEYWORD"),
    CipherSpec("hill", True, _S, _C, "3,2,5,7"),
    CipherSpec("adfgx", True, _S, _C, "SECRET,KEYWORD"),
    CipherSpec("bacon", False, _S, _C),
    CipherSpec("railfence", True, _T, _C, "3"),
    CipherSpec("columnar", True, _T, _C, "KEYWORD"),
    CipherSpec("scytale", True, _T, _C, "4"),
    CipherSpec("route", True, _T, _C, "4,5,spiral"),
    CipherSpec("xor", True, Family.STREAM, _C, "SECRET"),
    CipherSpec("affine", True, _S, _C, "5,8"),
    *(CipherSpec(name, True, Family.ASYMMETRIC, Category.ASYMMETRIC, "") for name in modern.ASYMMETRIC_ALGORITHMS),
    *(CipherSpec(name, True, Family.STREAM if name in modern.STREAM_IDS else Family.BLOCK, Category.SYMMETRIC)
      for name in modern.SYMMETRIC_ALGORITHMS),
]

_BY_ID: Dict[str, CipherSpec] = {spec.id: spec for spec in REGISTRY}

SEARCH_ORDER = [Category.ENCODING, Category.CLASSICAL, Category.ASYMMETRIC, Category.SYMMETRIC]


def get_spec(cipher_id: str) -> CipherSpec:
    spec = _BY_ID.get(cipher_id.lower())
    if spec is None:
        raise AlgorithmUnsupported(f"unknown cipher id {cipher_id!r}", algorithm=cipher_id)
    return spec


def specs_for(category: Category) -> List[CipherSpec]:
    return [spec for spec in REGISTRY if spec.category is category]


def _resolve_key(spec: CipherSpec, key: Optional[str]) -> str:
    if not spec.requires_key:
        return key or ""
    if key:
        return key
    if spec.default_key is None:
        raise InvalidKey("a key is required", algorithm=spec.id)
    return spec.default_key


def encode(cipher_id: str, text: str, key: Optional[str] = None) -> str:
    """Encode/encrypt ``text`` with one algorithm; raises ``AlgorithmError`` subclasses."""
    spec = get_spec(cipher_id)
    k = _resolve_key(spec, key)
    if spec.category is Category.ENCODING:
        return ENCODINGS[spec.id][0](text)
    if spec.category is Category.CLASSICAL:
        return _CLASSICAL[spec.id][0](text, k)
    if spec.category is Category.SYMMETRIC:
        return modern.encrypt_symmetric(text, spec.id, k)
    return modern.encrypt_asymmetric(text, spec.id, k)


def decode(cipher_id: str, text: str, key: Optional[str] = None) -> str:
    """Decode/decrypt ``text`` with one algorithm; raises ``AlgorithmError`` subclasses."""
    spec = get_spec(cipher_id)
    k = _resolve_key(spec, key)
    if spec.category is Category.ENCODING:
        return ENCODINGS[spec.id][1](text)
    if spec.category is Category.CLASSICAL:
        return _CLASSICAL[spec.id][1](text, k)
    if spec.category is Category.SYMMETRIC:
        return modern.decrypt_symmetric(text, spec.id, k)
    return modern.decrypt_asymmetric(text, spec.id, k)


def _wrap(fn, cipher_id: str, text: str, key: Optional[str]) -> CryptoResult:
    try:
        return CryptoResult(True, cipher_id, result=fn(cipher_id, text, key))
    except AlgorithmError as e:
        logger.debug("%s failed: %s", cipher_id, e)
        return CryptoResult(False, cipher_id, error=e.message, error_code=e.error_code)


def try_encode(cipher_id: str, text: str, key: Optional[str] = None) -> CryptoResult:
    return _wrap(encode, cipher_id, text, key)


def try_decode(cipher_id: str, text: str, key: Optional[str] = None) -> CryptoResult:
    return _wrap(decode, cipher_id, text, key)
