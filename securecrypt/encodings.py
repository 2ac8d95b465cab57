"""
Text encodings tried by the Encoding search category.

Decoders are strict: anything that is not a well-formed instance of the
encoding raises ``InvalidInput``. Escape-style decoders (url, html,
quoted-printable) also refuse input that contains nothing to unescape, so
plain prose never masquerades as a successful decode.
"""

import base64
import binascii
import html
import quopri
import re
import urllib.parse
from typing import Callable, Dict, Tuple

from .errors import InvalidInput


def _to_text(data: bytes, algorithm: str) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidInput("decoded bytes are not valid UTF-8", algorithm=algorithm)


def _compact(text: str) -> str:
    return re.sub(r"\s", "", text)


# ---------- Base64 / Base32 ----------
def b64_encode(text: str) -> str:
    return base64.b64encode(text.encode()).decode("ascii")


def b64_decode(text: str) -> str:
    s = _compact(text)
    if not s:
        raise InvalidInput("empty input", algorithm="base64")
    try:
        return _to_text(base64.b64decode(s, validate=True), "base64")
    except binascii.Error as e:
        raise InvalidInput(f"not base64: {e}", algorithm="base64")


def b32_encode(text: str) -> str:
    return base64.b32encode(text.encode()).decode("ascii")


def b32_decode(text: str) -> str:
    s = _compact(text).upper()
    if not s or not re.fullmatch(r"[A-Z2-7]+=*", s):
        raise InvalidInput("not base32", algorithm="base32")
    s += "=" * ((8 - len(s) % 8) % 8)
    try:
        return _to_text(base64.b32decode(s), "base32")
    except binascii.Error as e:
        raise InvalidInput(f"not base32: {e}", algorithm="base32")


# ---------- Base58 ----------
B58_ALPH = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
B58_INDEX = {c: i for i, c in enumerate(B58_ALPH)}


def b58_encode(text: str) -> str:
    data = text.encode()
    n = int.from_bytes(data, "big")
    out = ""
    while n > 0:
        n, rem = divmod(n, 58)
        out = B58_ALPH[rem] + out
    pad = len(data) - len(data.lstrip(b"\x00"))
    return "1" * pad + out


def b58_decode(text: str) -> str:
    s = text.strip()
    if not s or any(c not in B58_INDEX for c in s):
        raise InvalidInput("not base58", algorithm="base58")
    n = 0
    for c in s:
        n = n * 58 + B58_INDEX[c]
    body = n.to_bytes((n.bit_length() + 7) // 8, "big") if n else b""
    pad = len(s) - len(s.lstrip("1"))
    return _to_text(b"\x00" * pad + body, "base58")


# ---------- Base85 (Ascii85) ----------
def b85_encode(text: str) -> str:
    return base64.a85encode(text.encode()).decode("ascii")


def b85_decode(text: str) -> str:
    s = text.strip()
    if not s or any(not ("!" <= c <= "u" or c == "z" or c.isspace()) for c in s):
        raise InvalidInput("not ascii85", algorithm="base85")
    try:
        return _to_text(base64.a85decode(s), "base85")
    except ValueError as e:
        raise InvalidInput(f"not ascii85: {e}", algorithm="base85")


# ---------- Base91 ----------
B91_ALPH = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789!#$%&()*+,./:;<=>?@[]^_`{|}~\""
B91_DEC = {c: i for i, c in enumerate(B91_ALPH)}


def b91_encode(text: str) -> str:
    out = []
    bval = 0; nbits = 0
    for byte in text.encode():
        bval |= byte << nbits
        nbits += 8
        if nbits > 13:
            v = bval & 8191
            if v > 88:
                bval >>= 13; nbits -= 13
            else:
                v = bval & 16383
                bval >>= 14; nbits -= 14
            out.append(B91_ALPH[v % 91] + B91_ALPH[v // 91])
    if nbits:
        out.append(B91_ALPH[bval % 91])
        if nbits > 7 or bval > 90:
            out.append(B91_ALPH[bval // 91])
    return "".join(out)


def b91_decode(text: str) -> str:
    s = text.strip()
    if not s or any(c not in B91_DEC for c in s):
        raise InvalidInput("not base91", algorithm="base91")
    v = -1; bval = 0; nbits = 0
    out = bytearray()
    for ch in s:
        c = B91_DEC[ch]
        if v < 0:
            v = c
            continue
        v += c * 91
        bval |= v << nbits
        nbits += 13 if (v & 8191) > 88 else 14
        while nbits > 7:
            out.append(bval & 255); bval >>= 8; nbits -= 8
        v = -1
    if v >= 0:
        out.append((bval | (v << nbits)) & 255)
    return _to_text(bytes(out), "base91")


# ---------- Hex / binary / octal / decimal ----------
def hex_encode(text: str) -> str:
    return text.encode().hex()


def hex_decode(text: str) -> str:
    s = _compact(text)
    if s[:2].lower() == "0x":
        s = s[2:]
    if not s or not re.fullmatch(r"[0-9A-Fa-f]+", s):
        raise InvalidInput("not hexadecimal", algorithm="hex")
    if len(s) % 2:
        raise InvalidInput("odd-length hex", algorithm="hex")
    return _to_text(bytes.fromhex(s), "hex")


def binary_encode(text: str) -> str:
    return " ".join(format(byte, "08b") for byte in text.encode())


def binary_decode(text: str) -> str:
    s = _compact(text)
    if not s or not re.fullmatch(r"[01]+", s) or len(s) % 8:
        raise InvalidInput("not 8-bit binary groups", algorithm="binary")
    return _to_text(bytes(int(s[i:i+8], 2) for i in range(0, len(s), 8)), "binary")


def octal_encode(text: str) -> str:
    return " ".join(format(byte, "03o") for byte in text.encode())


def octal_decode(text: str) -> str:
    tokens = text.split()
    if not tokens or any(not re.fullmatch(r"[0-7]{1,3}", t) or int(t, 8) > 255 for t in tokens):
        raise InvalidInput("not octal byte codes", algorithm="octal")
    return _to_text(bytes(int(t, 8) for t in tokens), "octal")


def ascii_encode(text: str) -> str:
    return " ".join(str(ord(ch)) for ch in text)


def ascii_decode(text: str) -> str:
    tokens = text.split()
    if not tokens or any(not t.isdecimal() for t in tokens):
        raise InvalidInput("not decimal character codes", algorithm="ascii")
    try:
        return "".join(chr(int(t)) for t in tokens)
    except ValueError:
        raise InvalidInput("character code out of range", algorithm="ascii")


# ---------- Escapes ----------
def url_encode(text: str) -> str:
    return urllib.parse.quote(text, safe="")


def url_decode(text: str) -> str:
    if not re.search(r"%[0-9A-Fa-f]{2}", text):
        raise InvalidInput("no percent escapes", algorithm="url")
    try:
        return urllib.parse.unquote(text, errors="strict")
    except UnicodeDecodeError:
        raise InvalidInput("percent escapes are not valid UTF-8", algorithm="url")


def html_encode(text: str) -> str:
    return html.escape(text, quote=True)


def html_decode(text: str) -> str:
    out = html.unescape(text)
    if out == text:
        raise InvalidInput("no HTML entities", algorithm="html")
    return out


def quoted_printable_encode(text: str) -> str:
    return quopri.encodestring(text.encode(), quotetabs=True).decode("ascii")


def quoted_printable_decode(text: str) -> str:
    if not re.search(r"=([0-9A-F]{2}|\r?\n)", text):
        raise InvalidInput("no quoted-printable escapes", algorithm="quoted-printable")
    try:
        data = quopri.decodestring(text.encode("ascii"))
    except UnicodeEncodeError:
        raise InvalidInput("quoted-printable text must be ASCII", algorithm="quoted-printable")
    return _to_text(data, "quoted-printable")


# ---------- Punycode / uuencode ----------
def punycode_encode(text: str) -> str:
    return "xn--" + text.encode("punycode").decode("ascii")


def punycode_decode(text: str) -> str:
    s = text.strip()
    if not s.lower().startswith("xn--"):
        raise InvalidInput("missing xn-- prefix", algorithm="punycode")
    try:
        return s[4:].encode("ascii").decode("punycode")
    except UnicodeError as e:
        raise InvalidInput(f"not punycode: {e}", algorithm="punycode")


def uuencode(text: str) -> str:
    data = text.encode()
    lines = ["begin 644 data"]
    for i in range(0, len(data), 45):
        lines.append(binascii.b2a_uu(data[i:i+45]).decode("ascii").rstrip("\n"))
    lines.extend(["`", "end"])
    return "\n".join(lines)


def uudecode(text: str) -> str:
    lines = text.strip().splitlines()
    if len(lines) < 2 or not lines[0].startswith("begin ") or lines[-1].strip() != "end":
        raise InvalidInput("missing begin/end framing", algorithm="uuencode")
    out = bytearray()
    try:
        for line in lines[1:-1]:
            if line.strip() in ("`", ""):
                continue
            out.extend(binascii.a2b_uu(line))
    except ValueError as e:
        raise InvalidInput(f"bad uuencoded line: {e}", algorithm="uuencode")
    return _to_text(bytes(out), "uuencode")


# ---------- Registry ----------
ENCODINGS: Dict[str, Tuple[Callable[[str], str], Callable[[str], str]]] = {
    "base64": (b64_encode, b64_decode),
    "base32": (b32_encode, b32_decode),
    "base58": (b58_encode, b58_decode),
    "base85": (b85_encode, b85_decode),
    "base91": (b91_encode, b91_decode),
    "hex": (hex_encode, hex_decode),
    "binary": (binary_encode, binary_decode),
    "octal": (octal_encode, octal_decode),
    "url": (url_encode, url_decode),
    "html": (html_encode, html_decode),
    "ascii": (ascii_encode, ascii_decode),
    "punycode": (punycode_encode, punycode_decode),
    "quoted-printable": (quoted_printable_encode, quoted_printable_decode),
    "uuencode": (uuencode, uudecode),
}
