import base64

import pytest

from cipherchat.crypto import (
    DecryptionError,
    decode_line,
    decrypt_message,
    encode_line,
    encrypt_message,
)


@pytest.mark.parametrize("text", ["", "hello", "msg bob hi there", "héllo 😊 ❤️", "quit"])
def test_encrypt_decrypt_round_trip(text):
    assert decrypt_message(encrypt_message(text)) == text


@pytest.mark.parametrize("text", ["", "list", "broadcast hello everyone", "✅ done"])
def test_line_round_trip(text):
    assert decode_line(encode_line(text)) == text


def test_ciphertext_carries_sixteen_byte_tag():
    text = "broadcast hello"
    assert len(encrypt_message(text)) == len(text.encode("utf-8")) + 16


def test_fixed_nonce_reuses_keystream():
    first, second = b"list", b"help"
    first_body = encrypt_message(first.decode("ascii"))[: len(first)]
    second_body = encrypt_message(second.decode("ascii"))[: len(second)]
    xored_cipher = bytes(a ^ b for a, b in zip(first_body, second_body))
    xored_plain = bytes(a ^ b for a, b in zip(first, second))
    assert xored_cipher == xored_plain


def test_encode_line_is_plain_base64_of_ciphertext():
    line = encode_line("help")
    assert "\n" not in line
    assert base64.b64decode(line, validate=True) == encrypt_message("help")


def test_decrypt_rejects_tampered_data():
    data = bytearray(encrypt_message("secret message"))
    data[0] ^= 0x01
    with pytest.raises(DecryptionError):
        decrypt_message(bytes(data))


def test_decrypt_rejects_short_data():
    with pytest.raises(DecryptionError):
        decrypt_message(b"short")


def test_decode_line_returns_none_for_plaintext():
    assert decode_line("list") is None
    assert decode_line("msg bob hi") is None


def test_decode_line_returns_none_for_valid_base64_that_is_not_ciphertext():
    line = base64.b64encode(b"not a ciphertext at all").decode("ascii")
    assert decode_line(line) is None


def test_decode_line_returns_none_for_empty_line():
    assert decode_line("") is None


def test_decode_line_rejects_missing_padding():
    line = encode_line("help").rstrip("=")
    if line == encode_line("help"):
        line = line[:-1]
    assert decode_line(line) is None