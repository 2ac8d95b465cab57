"""
Encoding codecs: known vectors, strict rejection of malformed input.
"""

import pytest

from securecrypt import encodings
from securecrypt.encodings import ENCODINGS
from securecrypt.errors import InvalidInput

SAMPLES = ["Hello, World!", "attack at dawn", "café ☕ <b>&amp;</b>", "x"]
ESCAPES = ("html", "url", "quoted-printable")


def test_every_encoding_round_trips():
    for name, (enc, dec) in ENCODINGS.items():
        for text in SAMPLES:
            encoded = enc(text)
            if name in ESCAPES and encoded == text:
                continue  # nothing escaped, decode rejects identity input
            assert dec(encoded) == text, f"{name} failed on {text!r}: {encoded!r}"


def test_known_vectors():
    assert encodings.b64_decode("SGVsbG8=") == "Hello"
    assert encodings.b32_decode("JBSWY3DP") == "Hello"
    assert encodings.hex_decode("48656c6c6f") == "Hello"
    assert encodings.hex_decode("0x4869") == "Hi"
    assert encodings.binary_decode("01001000 01101001") == "Hi"
    assert encodings.octal_decode("110 151") == "Hi"
    assert encodings.ascii_decode("72 105") == "Hi"
    assert encodings.b58_encode("Hello World!") == "2NEpo7TZRRrLZSi2U"
    assert encodings.url_decode("a%20b") == "a b"
    assert encodings.html_decode("&lt;b&gt;") == "<b>"
    assert encodings.quoted_printable_decode("caf=C3=A9") == "café"
    assert encodings.punycode_encode("münchen") == "xn--mnchen-3ya"
    assert encodings.punycode_decode("xn--mnchen-3ya") == "münchen"


def test_base32_accepts_missing_padding():
    assert encodings.b32_decode("jbswy3dp") == "Hello"
    assert encodings.b32_decode("JBSWY3DPEE") == "Hello!"


def test_uuencode_framing():
    out = encodings.uuencode("Cat")
    lines = out.splitlines()
    assert lines[0] == "begin 644 data" and lines[-1] == "end", f"Bad framing: {lines}"
    assert encodings.uudecode(out) == "Cat"


@pytest.mark.parametrize("name, bad", [
    ("base64", "not base64!"),
    ("base64", ""),
    ("base32", "HELLO1"),
    ("base58", "0OIl"),
    ("base85", "hello world vwxyz"),
    ("base91", "no spaces allowed"),
    ("hex", "abc"),
    ("hex", "xyz0"),
    ("binary", "0101"),
    ("binary", "01012010"),
    ("octal", "999"),
    ("ascii", "72 abc"),
    ("ascii", "72 ²"),
    ("ascii", "72 99999999"),
    ("punycode", "mnchen-3ya"),
    ("uuencode", "plain text"),
    ("uuencode", "begin 644 data\n#é\n`\nend"),
])
def test_malformed_input_is_rejected(name, bad):
    with pytest.raises(InvalidInput):
        ENCODINGS[name][1](bad)


@pytest.mark.parametrize("name", ["url", "html", "quoted-printable"])
def test_escape_decoders_refuse_plain_text(name):
    """Nothing to unescape means the text was never encoded"""
    with pytest.raises(InvalidInput):
        ENCODINGS[name][1]("normal english sentence")


def test_non_utf8_bytes_are_rejected():
    with pytest.raises(InvalidInput):
        encodings.hex_decode("ff")
    with pytest.raises(InvalidInput):
        encodings.b64_decode("/w==")
