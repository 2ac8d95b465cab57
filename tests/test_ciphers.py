"""
Classical cipher transforms: known vectors, key validation and seeded
round-trip properties.
"""

import math
import random
import string
import time

import pytest

from securecrypt import ciphers
from securecrypt.errors import InvalidInput, InvalidKey

PRINTABLE = "".join(chr(c) for c in range(32, 127))
SEED = 1337


def rand_text(rng, alphabet=PRINTABLE, lo=1, hi=60):
    return "".join(rng.choice(alphabet) for _ in range(rng.randint(lo, hi)))


def rand_word(rng, lo=1, hi=10):
    return rand_text(rng, string.ascii_uppercase, lo, hi)


# ---------- Known vectors ----------
def test_caesar_hello_khoor():
    """HELLO shifted by 3 is KHOOR, and back"""
    assert ciphers.caesar_encode("HELLO", 3) == "KHOOR"
    assert ciphers.caesar_decode("KHOOR", 3) == "HELLO"


def test_caesar_preserves_case_and_punctuation():
    out = ciphers.caesar_encode("Hello, World!", 1)
    assert out == "Ifmmp, Xpsme!", f"Unexpected Caesar output {out}"


def test_vigenere_lemon():
    """Classic Vigenère example with key LEMON"""
    enc = ciphers.vigenere_encode("ATTACKATDAWN", "LEMON")
    assert enc == "LXFOPVEFRNHR", f"Expected LXFOPVEFRNHR, got {enc}"
    assert ciphers.vigenere_decode(enc, "LEMON") == "ATTACKATDAWN"


def test_atbash_and_rot13():
    assert ciphers.atbash("HELLO") == "SVOOL"
    assert ciphers.atbash("svool") == "hello"
    assert ciphers.rot13("Hello") == "Uryyb"
    assert ciphers.rot13(ciphers.rot13("Round trip!")) == "Round trip!"


def test_hill_known_vector():
    """Matrix [[3,3],[2,5]] maps HELP to HIAT"""
    assert ciphers.hill_encode("HELP", (3, 3, 2, 5)) == "HIAT"
    assert ciphers.hill_decode("HIAT", (3, 3, 2, 5)) == "HELP"


def test_rail_fence_known_vector():
    enc = ciphers.rail_fence_encode("WEAREDISCOVEREDFLEEATONCE", 3)
    assert enc == "WECRLTEERDSOEEFEAOCAIVDEN", f"Unexpected rail fence output {enc}"
    assert ciphers.rail_fence_decode(enc, 3) == "WEAREDISCOVEREDFLEEATONCE"


def test_columnar_known_vector():
    """Columns read in key-letter order, short grid padded with X"""
    enc = ciphers.columnar_encode("WEAREDISCOVERED", "ZEBRAS")
    assert enc == "EVXACDESEROXDEXWIR", f"Unexpected columnar output {enc}"
    assert ciphers.columnar_decode(enc, "ZEBRAS") == "WEAREDISCOVERED"


def test_column_order_is_stable_on_ties():
    assert ciphers.column_order("BAB") == [1, 0, 2]


def test_route_spiral_and_column():
    assert ciphers.route_encode("ABCDEFGHIJKL", 3, 4, "spiral") == "ABCDHLKJIEFG"
    assert ciphers.route_decode("ABCDHLKJIEFG", 3, 4, "spiral") == "ABCDEFGHIJKL"
    assert ciphers.route_encode("ABCDEFGHIJKL", 3, 4, "column") == "AEIBFJCGKDHL"
    assert ciphers.route_decode("AEIBFJCGKDHL", 3, 4, "column") == "ABCDEFGHIJKL"


def test_bacon_table():
    assert ciphers.bacon_encode("AB") == "AAAAAAAAAB"
    assert ciphers.bacon_decode("AAAAA AAAAB") == "AB"


def test_playfair_square_merges_j():
    table = ciphers.playfair_build_table("KEYWORD")
    flat = "".join("".join(row) for row in table)
    assert flat.startswith("KEYWORD"), f"Key letters should lead the square: {flat}"
    assert "J" not in flat and len(set(flat)) == 25


def test_playfair_splits_double_letters():
    """BALLOON becomes BA LX LO ON before substitution"""
    enc = ciphers.playfair_encode("BALLOON", "MONARCHY")
    assert enc == "IBSUPMNA", f"Unexpected Playfair output {enc}"
    dec = ciphers.playfair_decode(enc, "MONARCHY")
    assert dec == "BALXLOON", f"Unexpected Playfair plaintext {dec}"


def test_autokey_extends_key_with_plaintext():
    enc = ciphers.autokey_encode("ATTACKATDAWN", "QUEENLY")
    assert enc == "QNXEPVYTWTWP", f"Unexpected autokey output {enc}"
    assert ciphers.autokey_decode(enc, "QUEENLY") == "ATTACKATDAWN"


def test_adfgx_uses_only_adfgx_symbols():
    enc = ciphers.adfgx_encode("ATTACKATONCE", "SECRET", "KEYWORD")
    assert set(enc) <= set("ADFGX"), f"Stray symbols in {enc}"
    assert len(enc) == 24
    assert ciphers.adfgx_decode(enc, "SECRET", "KEYWORD") == "ATTACKATONCE"


# ---------- Key and input validation ----------
@pytest.mark.parametrize("mat", [(2, 4, 6, 8), (1, 2, 2, 4), (13, 0, 0, 1)])
def test_hill_rejects_non_invertible_matrix(mat):
    """Determinant sharing a factor with 26 must fail, never garble"""
    with pytest.raises(InvalidKey):
        ciphers.hill_encode("HELP", mat)
    with pytest.raises(InvalidKey):
        ciphers.hill_decode("HIAT", mat)


@pytest.mark.parametrize("a", [0, 2, 13, 26])
def test_affine_rejects_a_not_coprime(a):
    with pytest.raises(InvalidKey):
        ciphers.affine_encode("HELLO", a, 3)


def test_monoalphabetic_requires_permutation():
    with pytest.raises(InvalidKey):
        ciphers.monoalphabetic_encode("HELLO", "ABC")
    with pytest.raises(InvalidKey):
        ciphers.monoalphabetic_decode("HELLO", "A" * 26)


def test_keyword_ciphers_need_letters():
    for fn in (ciphers.vigenere_encode, ciphers.beaufort, ciphers.autokey_decode, ciphers.playfair_encode):
        with pytest.raises(InvalidKey):
            fn("HELLO", "1234")


def test_transposition_key_bounds():
    with pytest.raises(InvalidKey):
        ciphers.rail_fence_encode("HELLO", 0)
    with pytest.raises(InvalidKey):
        ciphers.scytale_decode("HELLO", 0)
    with pytest.raises(InvalidKey):
        ciphers.route_encode("HELLO", 2, 2, "zigzag")
    with pytest.raises(InvalidKey):
        ciphers.columnar_encode("HELLO", "")


def test_rail_count_beyond_text_length_is_one_zigzag():
    """Extra rails past the text length change nothing, and cost nothing"""
    text = "WEAREDISCOVEREDFLEEATONCE"
    start = time.perf_counter()
    enc = ciphers.rail_fence_encode(text, 10**9)
    dec = ciphers.rail_fence_decode(text, 10**9)
    elapsed = time.perf_counter() - start
    assert enc == ciphers.rail_fence_encode(text, len(text)), f"Unexpected output {enc}"
    assert dec == ciphers.rail_fence_decode(text, len(text))
    assert ciphers.rail_fence_decode(enc, 10**9) == text
    assert elapsed < 1.0, f"Huge rail count took {elapsed:.2f}s"


def test_undecodable_inputs():
    with pytest.raises(InvalidInput):
        ciphers.hill_decode("ABC", (3, 3, 2, 5))
    with pytest.raises(InvalidInput):
        ciphers.playfair_decode("ABC", "KEY")
    with pytest.raises(InvalidInput):
        ciphers.bacon_decode("ABABC")
    with pytest.raises(InvalidInput):
        ciphers.adfgx_decode("ADFGZ", "KEY", "KEY")
    with pytest.raises(InvalidInput):
        ciphers.columnar_decode("ABCDE", "KEY")
    with pytest.raises(InvalidInput):
        ciphers.route_decode("ABCDE", 2, 2)


def test_xor_involution():
    """XOR is its own inverse and encode == decode"""
    rng = random.Random(SEED)
    for _ in range(50):
        text = rand_text(rng)
        key = rand_text(rng, hi=12)
        once = ciphers.xor_text(text, key)
        assert ciphers.xor_text(once, key) == text
    with pytest.raises(InvalidKey):
        ciphers.xor_text("abc", "")


# ---------- Seeded round-trip properties ----------
def test_round_trip_substitution_family():
    rng = random.Random(SEED)
    for _ in range(100):
        text = rand_text(rng)
        shift = rng.randint(-60, 60)
        assert ciphers.caesar_decode(ciphers.caesar_encode(text, shift), shift) == text
        a, b = rng.choice(ciphers.VALID_AFFINE_A), rng.randint(0, 100)
        assert ciphers.affine_decode(ciphers.affine_encode(text, a, b), a, b) == text
        perm = list(ciphers.ALPHABET); rng.shuffle(perm)
        key = "".join(perm)
        assert ciphers.monoalphabetic_decode(ciphers.monoalphabetic_encode(text, key), key) == text


def test_round_trip_polyalphabetic_family():
    rng = random.Random(SEED + 1)
    for _ in range(100):
        text = rand_text(rng)
        key = rand_word(rng)
        assert ciphers.vigenere_decode(ciphers.vigenere_encode(text, key), key) == text
        assert ciphers.beaufort(ciphers.beaufort(text, key), key) == text
        assert ciphers.autokey_decode(ciphers.autokey_encode(text, key), key) == text


def test_round_trip_transposition_family():
    """Texts end in '.', so no filler can be mistaken for padding"""
    rng = random.Random(SEED + 2)
    for _ in range(100):
        text = rand_text(rng) + "."
        rails = rng.randint(1, 10)
        assert ciphers.rail_fence_decode(ciphers.rail_fence_encode(text, rails), rails) == text
        key = rand_word(rng)
        assert ciphers.columnar_decode(ciphers.columnar_encode(text, key), key) == text
        d = rng.randint(1, 8)
        assert ciphers.scytale_decode(ciphers.scytale_encode(text, d), d) == text
        rows, cols = rng.randint(1, 6), rng.randint(1, 6)
        route = rng.choice(ciphers.ROUTES)
        assert ciphers.route_decode(ciphers.route_encode(text, rows, cols, route), rows, cols, route) == text


def test_round_trip_letter_only_ciphers():
    """Playfair, Hill, ADFGX and Bacon work on normalised uppercase letters"""
    rng = random.Random(SEED + 3)
    for _ in range(60):
        pairs = []
        for _ in range(rng.randint(1, 15)):
            a, b = rng.sample(ciphers.SQUARE_ALPHABET, 2)
            pairs.append(a + b)
        text = "".join(pairs)
        key = rand_word(rng)
        assert ciphers.playfair_decode(ciphers.playfair_encode(text, key), key) == text

        while True:
            mat = tuple(rng.randint(0, 25) for _ in range(4))
            if math.gcd((mat[0] * mat[3] - mat[1] * mat[2]) % 26, 26) == 1:
                break
        assert ciphers.hill_decode(ciphers.hill_encode(text, mat), mat) == text

        trans = rand_word(rng)
        assert ciphers.adfgx_decode(ciphers.adfgx_encode(text, key, trans), key, trans) == text
        assert ciphers.bacon_decode(ciphers.bacon_encode(text)) == text
