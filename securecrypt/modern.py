"""
Modern-cipher adapters.

Passphrase ciphers use the OpenSSL ``Salted__`` container (8-byte salt,
EVP_BytesToKey with MD5) and base64 output, the same shape CryptoJS emits.
Algorithms pycryptodome does not ship fall back to AES-CBC; the GSM-era
stream ciphers are repeating-XOR stand-ins. Asymmetric entries are
format-tagged placeholders and provide no security at all.
"""

import base64
import binascii
import hashlib
import logging
from typing import Dict, List, Tuple

from Crypto.Cipher import AES, ARC4, CAST, DES, DES3, Blowfish, ChaCha20, Salsa20
from Crypto.Random import get_random_bytes
from Crypto.Util.Padding import pad, unpad

from .ciphers import xor_text
from .errors import AlgorithmUnsupported, InvalidInput, InvalidKey

logger = logging.getLogger(__name__)

SALT_MAGIC = b"Salted__"

SYMMETRIC_ALGORITHMS = [
    "aes", "aes-128", "aes-192", "aes-256", "aes-ecb", "aes-cbc", "aes-cfb", "aes-ofb", "aes-ctr", "aes-gcm",
    "des", "3des", "blowfish", "twofish", "idea", "cast5", "rc5", "rc6", "serpent", "camellia",
    "rc4", "chacha20", "salsa20", "seal", "a51", "a52", "grain", "mickey", "vernam",
]

ASYMMETRIC_ALGORITHMS = ["rsa", "elgamal", "ecc", "paillier", "knapsack", "kyber", "dilithium", "ntru"]

# id -> (cipher module, key bytes, iv bytes, mode name)
_BLOCK: Dict[str, Tuple[object, int, int, str]] = {
    "aes": (AES, 32, 16, "cbc"),
    "aes-128": (AES, 16, 16, "cbc"),
    "aes-192": (AES, 24, 16, "cbc"),
    "aes-256": (AES, 32, 16, "cbc"),
    "aes-ecb": (AES, 32, 16, "ecb"),
    "aes-cbc": (AES, 32, 16, "cbc"),
    "aes-cfb": (AES, 32, 16, "cfb"),
    "aes-ofb": (AES, 32, 16, "ofb"),
    "aes-ctr": (AES, 32, 16, "ctr"),
    "aes-gcm": (AES, 32, 12, "gcm"),
    "des": (DES, 8, 8, "cbc"),
    "3des": (DES3, 24, 8, "cbc"),
    "blowfish": (Blowfish, 16, 8, "cbc"),
    "cast5": (CAST, 16, 8, "cbc"),
}
_AES_FALLBACK = ("twofish", "idea", "rc5", "rc6", "serpent", "camellia", "seal")
_STREAM = {"rc4": (ARC4, 16, 0), "chacha20": (ChaCha20, 32, 12), "salsa20": (Salsa20, 32, 8)}
_XOR_STANDINS = ("a51", "a52", "grain", "mickey")
STREAM_IDS = ("rc4", "chacha20", "salsa20", "seal") + _XOR_STANDINS + ("vernam",)

GCM_TAG_LEN = 16


# ---------- Key derivation ----------
def evp_bytes_to_key(passphrase: bytes, salt: bytes, key_len: int, iv_len: int) -> Tuple[bytes, bytes]:
    """OpenSSL EVP_BytesToKey with a single MD5 iteration."""
    derived = b""; block = b""
    while len(derived) < key_len + iv_len:
        block = hashlib.md5(block + passphrase + salt).digest()
        derived += block
    return derived[:key_len], derived[key_len:key_len + iv_len]


def _open_container(ciphertext: str, algorithm: str) -> Tuple[bytes, bytes]:
    try:
        raw = base64.b64decode(ciphertext.strip(), validate=True)
    except binascii.Error:
        raise InvalidInput("ciphertext is not base64", algorithm=algorithm)
    if not raw.startswith(SALT_MAGIC) or len(raw) <= 16:
        raise InvalidInput("missing Salted__ header", algorithm=algorithm)
    return raw[8:16], raw[16:]


def _seal_container(salt: bytes, body: bytes) -> str:
    return base64.b64encode(SALT_MAGIC + salt + body).decode("ascii")


def _plaintext(data: bytes, algorithm: str) -> str:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidKey("wrong passphrase or corrupted data", algorithm=algorithm)
    if not text:
        raise InvalidKey("wrong passphrase or corrupted data", algorithm=algorithm)
    return text


def _require_key(key: str, algorithm: str) -> bytes:
    if not key:
        raise InvalidKey("a passphrase is required", algorithm=algorithm)
    return key.encode()


# ---------- Block ciphers ----------
def _block_cipher(module, mode: str, key: bytes, iv: bytes):
    if mode == "ecb":
        return module.new(key, module.MODE_ECB)
    if mode == "cfb":
        return module.new(key, module.MODE_CFB, iv=iv, segment_size=128)
    if mode == "ofb":
        return module.new(key, module.MODE_OFB, iv=iv)
    if mode == "ctr":
        return module.new(key, module.MODE_CTR, nonce=b"", initial_value=iv)
    if mode == "gcm":
        return module.new(key, module.MODE_GCM, nonce=iv)
    return module.new(key, module.MODE_CBC, iv=iv)


def _derive(algorithm: str, passphrase: bytes, salt: bytes, key_len: int, iv_len: int) -> Tuple[bytes, bytes]:
    key, iv = evp_bytes_to_key(passphrase, salt, key_len, iv_len)
    if algorithm == "3des":
        try:
            key = DES3.adjust_key_parity(key)
        except ValueError:
            raise InvalidKey("derived 3DES key degenerates to single DES", algorithm=algorithm)
    return key, iv


def block_encrypt(text: str, algorithm: str, passphrase: str) -> str:
    module, key_len, iv_len, mode = _BLOCK[algorithm]
    salt = get_random_bytes(8)
    key, iv = _derive(algorithm, _require_key(passphrase, algorithm), salt, key_len, iv_len)
    cipher = _block_cipher(module, mode, key, iv)
    data = text.encode()
    if mode == "gcm":
        body, tag = cipher.encrypt_and_digest(data)
        return _seal_container(salt, body + tag)
    if mode in ("ecb", "cbc"):
        data = pad(data, module.block_size)
    return _seal_container(salt, cipher.encrypt(data))


def block_decrypt(ciphertext: str, algorithm: str, passphrase: str) -> str:
    module, key_len, iv_len, mode = _BLOCK[algorithm]
    salt, body = _open_container(ciphertext, algorithm)
    key, iv = _derive(algorithm, _require_key(passphrase, algorithm), salt, key_len, iv_len)
    cipher = _block_cipher(module, mode, key, iv)
    try:
        if mode == "gcm":
            if len(body) <= GCM_TAG_LEN:
                raise InvalidInput("ciphertext shorter than the GCM tag", algorithm=algorithm)
            data = cipher.decrypt_and_verify(body[:-GCM_TAG_LEN], body[-GCM_TAG_LEN:])
        elif mode in ("ecb", "cbc"):
            if len(body) % module.block_size:
                raise InvalidInput("ciphertext is not a whole number of blocks", algorithm=algorithm)
            data = unpad(cipher.decrypt(body), module.block_size)
        else:
            data = cipher.decrypt(body)
    except ValueError:
        raise InvalidKey("wrong passphrase or corrupted data", algorithm=algorithm)
    return _plaintext(data, algorithm)


# ---------- Stream ciphers ----------
def _stream_cipher(algorithm: str, passphrase: bytes, salt: bytes):
    module, key_len, nonce_len = _STREAM[algorithm]
    key, nonce = evp_bytes_to_key(passphrase, salt, key_len, nonce_len)
    if module is ARC4:
        return module.new(key)
    return module.new(key=key, nonce=nonce)


def stream_encrypt(text: str, algorithm: str, passphrase: str) -> str:
    salt = get_random_bytes(8)
    cipher = _stream_cipher(algorithm, _require_key(passphrase, algorithm), salt)
    return _seal_container(salt, cipher.encrypt(text.encode()))


def stream_decrypt(ciphertext: str, algorithm: str, passphrase: str) -> str:
    salt, body = _open_container(ciphertext, algorithm)
    cipher = _stream_cipher(algorithm, _require_key(passphrase, algorithm), salt)
    return _plaintext(cipher.decrypt(body), algorithm)


def vernam(text: str, key: str) -> str:
    if len(key) < len(text):
        raise InvalidKey("one-time pad key must be at least as long as the text", algorithm="vernam")
    return xor_text(text, key)


def _symmetric_target(algorithm: str) -> str:
    alg = algorithm.lower()
    if alg in _AES_FALLBACK:
        logger.debug("%s is not available natively, using AES-CBC", alg)
        return "aes"
    return alg


def encrypt_symmetric(text: str, algorithm: str, key: str) -> str:
    alg = _symmetric_target(algorithm)
    if alg in _BLOCK:
        return block_encrypt(text, alg, key)
    if alg in _STREAM:
        return stream_encrypt(text, alg, key)
    if alg in _XOR_STANDINS:
        return xor_text(text, key)
    if alg == "vernam":
        return vernam(text, key)
    raise AlgorithmUnsupported(f"unknown symmetric cipher {algorithm!r}", algorithm=algorithm)


def decrypt_symmetric(ciphertext: str, algorithm: str, key: str) -> str:
    alg = _symmetric_target(algorithm)
    if alg in _BLOCK:
        return block_decrypt(ciphertext, alg, key)
    if alg in _STREAM:
        return stream_decrypt(ciphertext, alg, key)
    if alg in _XOR_STANDINS:
        return xor_text(ciphertext, key)
    if alg == "vernam":
        return vernam(ciphertext, key)
    raise AlgorithmUnsupported(f"unknown symmetric cipher {algorithm!r}", algorithm=algorithm)


# ---------- Asymmetric placeholders ----------
_KEY_SUFFIXED = ("rsa", "elgamal", "ecc", "paillier")
KNAPSACK_PRIVATE = ([2, 3, 7, 14, 30, 57, 120, 251], 503, 41)


def knapsack_public_key(private=KNAPSACK_PRIVATE) -> List[int]:
    seq, modulus, multiplier = private
    return [(x * multiplier) % modulus for x in seq]


def knapsack_encrypt(text: str) -> str:
    public = knapsack_public_key()
    bits = "".join(format(b, "08b") for b in text.encode())
    sums = []
    for i in range(0, len(bits), len(public)):
        block = bits[i:i+len(public)].ljust(len(public), "0")
        sums.append(sum(w for w, bit in zip(public, block) if bit == "1"))
    return "KNAPSACK_ENCRYPTED:" + ",".join(str(s) for s in sums)


def knapsack_decrypt(ciphertext: str) -> str:
    seq, modulus, multiplier = KNAPSACK_PRIVATE
    inverse = pow(multiplier, -1, modulus)
    try:
        sums = [int(s) for s in ciphertext[len("KNAPSACK_ENCRYPTED:"):].split(",")]
    except ValueError:
        raise InvalidInput("knapsack ciphertext must be comma-separated integers", algorithm="knapsack")
    out = bytearray()
    bits = ""
    for total in sums:
        remaining = (total * inverse) % modulus
        block = ["0"] * len(seq)
        for j in range(len(seq) - 1, -1, -1):
            if remaining >= seq[j]:
                block[j] = "1"; remaining -= seq[j]
        if remaining:
            raise InvalidInput("knapsack sum has no solution", algorithm="knapsack")
        bits += "".join(block)
    for i in range(0, len(bits) - 7, 8):
        out.append(int(bits[i:i+8], 2))
    return _plaintext(bytes(out), "knapsack")


def encrypt_asymmetric(text: str, algorithm: str, key: str = "") -> str:
    alg = algorithm.lower()
    if alg == "knapsack":
        return knapsack_encrypt(text)
    if alg not in ASYMMETRIC_ALGORITHMS or alg == "dilithium":
        raise AlgorithmUnsupported(f"{algorithm!r} cannot encrypt", algorithm=algorithm)
    body = f"{alg.upper()}_ENCRYPTED:" + base64.b64encode(text.encode()).decode("ascii")
    if alg in _KEY_SUFFIXED:
        body += ":" + key[:20]
    return body


def decrypt_asymmetric(ciphertext: str, algorithm: str, key: str = "") -> str:
    alg = algorithm.lower()
    if alg not in ASYMMETRIC_ALGORITHMS or alg == "dilithium":
        raise AlgorithmUnsupported(f"{algorithm!r} cannot decrypt", algorithm=algorithm)
    tag = f"{alg.upper()}_ENCRYPTED:"
    if not ciphertext.startswith(tag):
        raise InvalidInput(f"expected {tag} prefix", algorithm=alg)
    if alg == "knapsack":
        return knapsack_decrypt(ciphertext)
    payload = ciphertext[len(tag):].split(":")[0]
    try:
        return _plaintext(base64.b64decode(payload, validate=True), alg)
    except binascii.Error:
        raise InvalidInput("payload is not base64", algorithm=alg)
