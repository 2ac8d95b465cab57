"""
Classical cipher transforms.

Every function here is stateless. Keys arrive already parsed into their
natural Python types (see ``securecrypt.registry`` for the string forms);
anything structurally wrong raises ``InvalidKey`` and text that cannot be
decoded raises ``InvalidInput``.
"""

import math
import re
from typing import Dict, List, Optional, Tuple

from .errors import InvalidInput, InvalidKey

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
SQUARE_ALPHABET = "ABCDEFGHIKLMNOPQRSTUVWXYZ"  # J merged into I
FILLER = "X"
VALID_AFFINE_A = [1, 3, 5, 7, 9, 11, 15, 17, 19, 21, 23, 25]


# ---------- Helpers ----------
def _shift_char(ch: str, k: int) -> str:
    if "A" <= ch <= "Z":
        return chr((ord(ch) - 65 + k) % 26 + 65)
    if "a" <= ch <= "z":
        return chr((ord(ch) - 97 + k) % 26 + 97)
    return ch


def _letter_index(ch: str) -> int:
    return ord(ch.upper()) - 65


def _is_letter(ch: str) -> bool:
    return "A" <= ch <= "Z" or "a" <= ch <= "z"


def _key_shifts(key: str, algorithm: str) -> List[int]:
    shifts = [_letter_index(c) for c in key if _is_letter(c)]
    if not shifts:
        raise InvalidKey("key must contain at least one letter", algorithm=algorithm)
    return shifts


def _mod_inverse(a: int, m: int) -> Optional[int]:
    a = a % m
    for x in range(1, m):
        if (a * x) % m == 1:
            return x
    return None


def _letters_upper(text: str) -> str:
    return "".join(ch.upper() for ch in text if _is_letter(ch))


def _strip_padding(text: str, pad: str, limit: int) -> str:
    n = 0
    while n < limit and n < len(text) and text[len(text)-1-n] == pad:
        n += 1
    return text[:len(text)-n]


# ---------- Monoalphabetic substitution ----------
def caesar_encode(text: str, shift: int) -> str:
    return "".join(_shift_char(ch, shift) for ch in text)


def caesar_decode(text: str, shift: int) -> str:
    return "".join(_shift_char(ch, -shift) for ch in text)


def atbash(text: str) -> str:
    out = []
    for ch in text:
        if "A" <= ch <= "Z":
            out.append(chr(90 - (ord(ch) - 65)))
        elif "a" <= ch <= "z":
            out.append(chr(122 - (ord(ch) - 97)))
        else:
            out.append(ch)
    return "".join(out)


def rot13(text: str) -> str:
    return caesar_encode(text, 13)


def _substitution_alphabet(key: str) -> str:
    letters = _letters_upper(key)
    if len(letters) != 26 or set(letters) != set(ALPHABET):
        raise InvalidKey("key must be a permutation of all 26 letters", algorithm="monoalphabetic")
    return letters


def monoalphabetic_encode(text: str, key: str) -> str:
    table = _substitution_alphabet(key)
    out = []
    for ch in text:
        if _is_letter(ch):
            sub = table[_letter_index(ch)]
            out.append(sub if ch.isupper() else sub.lower())
        else:
            out.append(ch)
    return "".join(out)


def monoalphabetic_decode(text: str, key: str) -> str:
    table = _substitution_alphabet(key)
    out = []
    for ch in text:
        if _is_letter(ch):
            plain = ALPHABET[table.index(ch.upper())]
            out.append(plain if ch.isupper() else plain.lower())
        else:
            out.append(ch)
    return "".join(out)


def _check_affine(a: int) -> int:
    inv = _mod_inverse(a, 26)
    if math.gcd(a, 26) != 1 or inv is None:
        raise InvalidKey(f"a={a} is not coprime to 26", algorithm="affine")
    return inv


def affine_encode(text: str, a: int, b: int) -> str:
    _check_affine(a)
    out = []
    for ch in text:
        if "A" <= ch <= "Z":
            out.append(chr((a * (ord(ch) - 65) + b) % 26 + 65))
        elif "a" <= ch <= "z":
            out.append(chr((a * (ord(ch) - 97) + b) % 26 + 97))
        else:
            out.append(ch)
    return "".join(out)


def affine_decode(text: str, a: int, b: int) -> str:
    inv = _check_affine(a)
    out = []
    for ch in text:
        if "A" <= ch <= "Z":
            out.append(chr((inv * ((ord(ch) - 65) - b)) % 26 + 65))
        elif "a" <= ch <= "z":
            out.append(chr((inv * ((ord(ch) - 97) - b)) % 26 + 97))
        else:
            out.append(ch)
    return "".join(out)


# ---------- Polyalphabetic ----------
def vigenere_encode(text: str, key: str) -> str:
    shifts = _key_shifts(key, "vigenere")
    out = []; j = 0
    for ch in text:
        if _is_letter(ch):
            out.append(_shift_char(ch, shifts[j % len(shifts)])); j += 1
        else:
            out.append(ch)
    return "".join(out)


def vigenere_decode(text: str, key: str) -> str:
    shifts = _key_shifts(key, "vigenere")
    out = []; j = 0
    for ch in text:
        if _is_letter(ch):
            out.append(_shift_char(ch, -shifts[j % len(shifts)])); j += 1
        else:
            out.append(ch)
    return "".join(out)


def beaufort(text: str, key: str) -> str:
    """Beaufort is reciprocal: the same call encodes and decodes."""
    shifts = _key_shifts(key, "beaufort")
    out = []; j = 0
    for ch in text:
        if "A" <= ch <= "Z":
            out.append(chr((shifts[j % len(shifts)] - (ord(ch) - 65)) % 26 + 65)); j += 1
        elif "a" <= ch <= "z":
            out.append(chr((shifts[j % len(shifts)] - (ord(ch) - 97)) % 26 + 97)); j += 1
        else:
            out.append(ch)
    return "".join(out)


def autokey_encode(text: str, key: str) -> str:
    stream = _key_shifts(key, "autokey") + [_letter_index(c) for c in text if _is_letter(c)]
    out = []; j = 0
    for ch in text:
        if _is_letter(ch):
            out.append(_shift_char(ch, stream[j])); j += 1
        else:
            out.append(ch)
    return "".join(out)


def autokey_decode(text: str, key: str) -> str:
    # the key stream grows with each recovered plaintext letter
    stream = _key_shifts(key, "autokey")
    out = []; j = 0
    for ch in text:
        if _is_letter(ch):
            plain = _shift_char(ch, -stream[j]); j += 1
            stream.append(_letter_index(plain))
            out.append(plain)
        else:
            out.append(ch)
    return "".join(out)


# ---------- Playfair ----------
def playfair_build_table(key: str) -> List[List[str]]:
    seen: List[str] = []
    for ch in _letters_upper(key).replace("J", "I"):
        if ch not in seen:
            seen.append(ch)
    for ch in SQUARE_ALPHABET:
        if ch not in seen:
            seen.append(ch)
    return [seen[i:i+5] for i in range(0, 25, 5)]


def _table_positions(table: List[List[str]]) -> Dict[str, Tuple[int, int]]:
    return {table[r][c]: (r, c) for r in range(len(table)) for c in range(len(table))}


def _playfair_digrams(text: str) -> List[Tuple[str, str]]:
    s = _letters_upper(text).replace("J", "I")
    pairs = []
    i = 0
    while i < len(s):
        a = s[i]
        b = s[i+1] if i + 1 < len(s) else None
        if b is None or a == b:
            filler = "Q" if a == FILLER else FILLER
            pairs.append((a, filler)); i += 1
        else:
            pairs.append((a, b)); i += 2
    return pairs


def _playfair(pairs: List[Tuple[str, str]], key: str, step: int) -> str:
    table = playfair_build_table(key)
    pos = _table_positions(table)
    out = []
    for a, b in pairs:
        ra, ca = pos[a]
        rb, cb = pos[b]
        if ra == rb:
            out.append(table[ra][(ca+step) % 5]); out.append(table[rb][(cb+step) % 5])
        elif ca == cb:
            out.append(table[(ra+step) % 5][ca]); out.append(table[(rb+step) % 5][cb])
        else:
            out.append(table[ra][cb]); out.append(table[rb][ca])
    return "".join(out)


def playfair_encode(text: str, key: str) -> str:
    if not _letters_upper(key):
        raise InvalidKey("key must contain letters", algorithm="playfair")
    return _playfair(_playfair_digrams(text), key, 1)


def playfair_decode(text: str, key: str) -> str:
    if not _letters_upper(key):
        raise InvalidKey("key must contain letters", algorithm="playfair")
    s = _letters_upper(text).replace("J", "I")
    if not s or len(s) % 2:
        raise InvalidInput("ciphertext must be an even number of letters", algorithm="playfair")
    pairs = [(s[i], s[i+1]) for i in range(0, len(s), 2)]
    if any(a == b for a, b in pairs):
        raise InvalidInput("ciphertext contains a doubled digram", algorithm="playfair")
    return _playfair(pairs, key, -1)


# ---------- Hill 2x2 ----------
def hill_inverse_matrix(mat: Tuple[int, int, int, int]) -> Tuple[int, int, int, int]:
    a, b, c, d = mat
    det = (a * d - b * c) % 26
    inv_det = _mod_inverse(det, 26)
    if math.gcd(det, 26) != 1 or inv_det is None:
        raise InvalidKey(f"matrix determinant {det} is not invertible mod 26", algorithm="hill")
    return (
        (inv_det * d) % 26,
        (-inv_det * b) % 26,
        (-inv_det * c) % 26,
        (inv_det * a) % 26,
    )


def _hill_apply(text: str, mat: Tuple[int, int, int, int]) -> str:
    nums = [ord(ch) - 65 for ch in text]
    out = []
    for i in range(0, len(nums), 2):
        x, y = nums[i], nums[i+1]
        out.append(chr((mat[0]*x + mat[1]*y) % 26 + 65))
        out.append(chr((mat[2]*x + mat[3]*y) % 26 + 65))
    return "".join(out)


def hill_encode(text: str, mat: Tuple[int, int, int, int]) -> str:
    hill_inverse_matrix(mat)
    s = _letters_upper(text)
    if len(s) % 2:
        s += FILLER
    return _hill_apply(s, tuple(v % 26 for v in mat))


def hill_decode(text: str, mat: Tuple[int, int, int, int]) -> str:
    inv = hill_inverse_matrix(mat)
    s = _letters_upper(text)
    if len(s) % 2:
        raise InvalidInput("ciphertext must contain an even number of letters", algorithm="hill")
    return _hill_apply(s, inv)


# ---------- Columnar transposition ----------
def column_order(key: str) -> List[int]:
    """Column indices in reading order: rank of key chars, ties by position."""
    return [idx for _, idx in sorted((ch, idx) for idx, ch in enumerate(key.upper()))]


def _columnar_write(text: str, key: str) -> str:
    cols = len(key)
    return "".join(text[col::cols] for col in column_order(key))


def _columnar_read(text: str, key: str) -> str:
    # handles ragged final rows, so it also undoes unpadded transpositions
    cols = len(key)
    base, extra = divmod(len(text), cols)
    col_lens = [base + (1 if idx < extra else 0) for idx in range(cols)]
    cols_data: Dict[int, str] = {}
    idx = 0
    for col in column_order(key):
        cols_data[col] = text[idx:idx+col_lens[col]]; idx += col_lens[col]
    out = []
    for r in range(base + (1 if extra else 0)):
        for col in range(cols):
            if r < len(cols_data[col]):
                out.append(cols_data[col][r])
    return "".join(out)


def _check_columnar_key(key: str, algorithm: str) -> None:
    if not key:
        raise InvalidKey("key must not be empty", algorithm=algorithm)


def columnar_encode(text: str, key: str) -> str:
    _check_columnar_key(key, "columnar")
    cols = len(key)
    padded = text + FILLER * ((cols - len(text) % cols) % cols)
    return _columnar_write(padded, key)


def columnar_decode(text: str, key: str) -> str:
    _check_columnar_key(key, "columnar")
    if len(text) % len(key):
        raise InvalidInput("ciphertext does not fill the column grid", algorithm="columnar")
    return _strip_padding(_columnar_read(text, key), FILLER, len(key) - 1)


# ---------- ADFGX ----------
ADFGX_SYMBOLS = "ADFGX"


def adfgx_encode(text: str, square_key: str, transposition_key: str) -> str:
    _check_columnar_key(transposition_key, "adfgx")
    table = playfair_build_table(square_key)
    pos = _table_positions(table)
    letters = _letters_upper(text).replace("J", "I")
    substituted = "".join(ADFGX_SYMBOLS[pos[ch][0]] + ADFGX_SYMBOLS[pos[ch][1]] for ch in letters)
    return _columnar_write(substituted, transposition_key)


def adfgx_decode(text: str, square_key: str, transposition_key: str) -> str:
    _check_columnar_key(transposition_key, "adfgx")
    code = re.sub(r"\s", "", text).upper()
    if not code or any(ch not in ADFGX_SYMBOLS for ch in code):
        raise InvalidInput("ciphertext must use only the symbols ADFGX", algorithm="adfgx")
    if len(code) % 2:
        raise InvalidInput("ciphertext has an odd number of symbols", algorithm="adfgx")
    table = playfair_build_table(square_key)
    pairs = _columnar_read(code, transposition_key)
    return "".join(
        table[ADFGX_SYMBOLS.index(pairs[i])][ADFGX_SYMBOLS.index(pairs[i+1])]
        for i in range(0, len(pairs), 2)
    )


# ---------- Bacon ----------
_BACON = {ch: format(i, "05b").replace("0", "A").replace("1", "B") for i, ch in enumerate(ALPHABET)}
_BACON_REVERSE = {code: ch for ch, code in _BACON.items()}


def bacon_encode(text: str) -> str:
    return "".join(_BACON[ch] for ch in _letters_upper(text))


def bacon_decode(text: str) -> str:
    s = re.sub(r"\s", "", text).upper()
    if not s or any(ch not in "AB" for ch in s):
        raise InvalidInput("Bacon ciphertext must use only A and B", algorithm="bacon")
    if len(s) % 5:
        raise InvalidInput("Bacon ciphertext length must be a multiple of 5", algorithm="bacon")
    out = []
    for i in range(0, len(s), 5):
        group = s[i:i+5]
        if group not in _BACON_REVERSE:
            raise InvalidInput(f"unknown Bacon group {group}", algorithm="bacon")
        out.append(_BACON_REVERSE[group])
    return "".join(out)


# ---------- Rail fence ----------
def _rail_pattern(length: int, rails: int) -> List[int]:
    pattern = []
    rail = 0; direction = 1
    for _ in range(length):
        pattern.append(rail)
        if rails > 1:
            if rail == 0:
                direction = 1
            elif rail == rails - 1:
                direction = -1
            rail += direction
    return pattern


def _rail_order(length: int, rails: int) -> List[int]:
    """Plaintext indices in the order the rails are read; stable within a rail."""
    pattern = _rail_pattern(length, min(rails, max(1, length)))
    return sorted(range(length), key=pattern.__getitem__)


def _check_rails(rails: int) -> None:
    if rails < 1:
        raise InvalidKey("rail count must be at least 1", algorithm="railfence")


def rail_fence_encode(text: str, rails: int) -> str:
    _check_rails(rails)
    return "".join(text[i] for i in _rail_order(len(text), rails))


def rail_fence_decode(text: str, rails: int) -> str:
    _check_rails(rails)
    result: List[str] = [""] * len(text)
    for ch, i in zip(text, _rail_order(len(text), rails)):
        result[i] = ch
    return "".join(result)


# ---------- Scytale ----------
def _check_diameter(diameter: int) -> None:
    if diameter < 1:
        raise InvalidKey("diameter must be at least 1", algorithm="scytale")


def scytale_encode(text: str, diameter: int) -> str:
    _check_diameter(diameter)
    padded = text + " " * ((diameter - len(text) % diameter) % diameter)
    return "".join(padded[i::diameter] for i in range(diameter))


def scytale_decode(text: str, diameter: int) -> str:
    _check_diameter(diameter)
    if len(text) % diameter:
        raise InvalidInput("ciphertext does not wrap evenly around the rod", algorithm="scytale")
    strips = len(text) // diameter
    out = "".join(text[i::strips] for i in range(strips)) if strips else ""
    return _strip_padding(out, " ", diameter - 1)


# ---------- Route ----------
ROUTES = ("spiral", "column")


def _route_positions(rows: int, cols: int, route: str) -> List[Tuple[int, int]]:
    if route == "column":
        return [(r, c) for c in range(cols) for r in range(rows)]
    # clockwise inward spiral
    cells = []
    top, bottom, left, right = 0, rows - 1, 0, cols - 1
    while top <= bottom and left <= right:
        for c in range(left, right + 1):
            cells.append((top, c))
        top += 1
        for r in range(top, bottom + 1):
            cells.append((r, right))
        right -= 1
        if top <= bottom:
            for c in range(right, left - 1, -1):
                cells.append((bottom, c))
            bottom -= 1
        if left <= right:
            for r in range(bottom, top - 1, -1):
                cells.append((r, left))
            left += 1
    return cells


def _check_route(rows: int, cols: int, route: str) -> None:
    if rows < 1 or cols < 1:
        raise InvalidKey("route grid needs positive rows and cols", algorithm="route")
    if route not in ROUTES:
        raise InvalidKey(f"unknown route '{route}'", algorithm="route")


def route_encode(text: str, rows: int, cols: int, route: str = "spiral") -> str:
    _check_route(rows, cols, route)
    size = rows * cols
    padded = text + FILLER * ((size - len(text) % size) % size)
    cells = _route_positions(rows, cols, route)
    out = []
    for start in range(0, len(padded), size):
        block = padded[start:start+size]
        out.extend(block[r * cols + c] for r, c in cells)
    return "".join(out)


def route_decode(text: str, rows: int, cols: int, route: str = "spiral") -> str:
    _check_route(rows, cols, route)
    size = rows * cols
    if len(text) % size:
        raise InvalidInput("ciphertext does not fill the route grid", algorithm="route")
    cells = _route_positions(rows, cols, route)
    out = []
    for start in range(0, len(text), size):
        grid = [[""] * cols for _ in range(rows)]
        for ch, (r, c) in zip(text[start:start+size], cells):
            grid[r][c] = ch
        out.extend("".join(row) for row in grid)
    return _strip_padding("".join(out), FILLER, size - 1)


# ---------- XOR ----------
def xor_text(text: str, key: str) -> str:
    """Repeating-key XOR over code points; its own inverse."""
    if not key:
        raise InvalidKey("key must not be empty", algorithm="xor")
    return "".join(chr(ord(ch) ^ ord(key[i % len(key)])) for i, ch in enumerate(text))
