import base64

import pytest

from coderunner.features.judge0.codec import (
    EncodingMode,
    PayloadCodec,
    decode_field,
    looks_like_base64,
    printable_ratio,
)
from coderunner.features.judge0.errors import DecodeError

from conftest import b64, record


@pytest.mark.parametrize("value", [None, ""])
def test_decode_field_absent_is_none(value):
    assert decode_field(value) is None


@pytest.mark.parametrize(
    "text",
    [
        "Hello, World!\n",
        "1 2 3 4 5 6 7 8 9 10\n",
        "héllo wörld ✓\n",
        "main.cpp:3:5: error: expected ';' before '}' token\n",
    ],
)
def test_decode_field_base64_of_readable_text(text):
    assert decode_field(b64(text)) == text


def test_decode_field_accepts_line_wrapped_base64():
    text = "The quick brown fox jumps over the lazy dog. " * 4
    encoded = b64(text)
    wrapped = "\n".join(encoded[i:i + 60] for i in range(0, len(encoded), 60)) + "\n"
    assert decode_field(wrapped) == text


@pytest.mark.parametrize(
    "plain",
    [
        "NO\nWorld\nHello\n",
        "14\nfalse\nHello\n",
        "abcd\nefgh\nijkl",
    ],
)
def test_decode_field_multiline_alphanumeric_output_passes_through(plain):
    # the lines concatenate to valid base64 but are not 60-column wrapped
    assert not looks_like_base64(plain)
    assert decode_field(plain) == plain


def test_decode_field_rejects_base64_broken_off_the_wrap_column():
    text = "The quick brown fox jumps over the lazy dog. " * 4
    encoded = b64(text)
    broken = "\n".join(encoded[i:i + 30] for i in range(0, len(encoded), 30))
    assert decode_field(broken) == broken


def test_decode_field_accepts_wrapped_base64_with_short_last_line():
    text = "0123456789" * 5
    encoded = b64(text)
    assert len(encoded) > 60
    wrapped = encoded[:60] + "\n" + encoded[60:] + "\n"
    assert decode_field(wrapped) == text


@pytest.mark.parametrize(
    "plain",
    [
        "1\n",
        "print(1)",
        "hello world",
        "Traceback (most recent call last):\n  File \"main.py\", line 1\n",
        "MQo=",  # too short to be classified, stays as is
    ],
)
def test_decode_field_plain_text_passes_through(plain):
    assert decode_field(plain) == plain


def test_decode_field_binary_payload_passes_through():
    wire = base64.b64encode(bytes(range(32)) * 2).decode("ascii")
    assert looks_like_base64(wire)
    assert decode_field(wire) == wire


def test_decode_field_invalid_utf8_passes_through():
    wire = base64.b64encode(b"\xff\xfe" * 8).decode("ascii")
    assert looks_like_base64(wire)
    assert decode_field(wire) == wire


def test_looks_like_base64_shape_rules():
    assert looks_like_base64("SGVsbG8gV29ybGQh")
    assert not looks_like_base64("SGVsbG8=")  # length 8
    assert not looks_like_base64("SGVsbG8gV29ybGQ")  # not a multiple of 4
    assert not looks_like_base64("SGVsbG8g V29ybGQh")


def test_printable_ratio_counts_whitespace_controls_as_printable():
    assert printable_ratio("a\tb\nc\r") == 1.0
    assert printable_ratio("\x00\x01ab") == 0.5
    assert printable_ratio("") == 0.0


def test_printable_ratio_treats_c1_controls_as_unprintable():
    assert printable_ratio("\x85\x9bab") == 0.5
    assert printable_ratio("\x7f") == 0.0
    assert printable_ratio("\xa0é✓") == 1.0


def test_decode_field_c1_control_text_passes_through():
    # valid UTF-8, but every character is a C1 control
    wire = b64("\x85\x90\x9b\x9f" * 4)
    assert looks_like_base64(wire)
    assert decode_field(wire) == wire


def test_encode_outbound_base64_policy():
    codec = PayloadCodec(EncodingMode.BASE64)
    assert codec.base64_encoded is True
    assert codec.encode_outbound("print(1)") == "cHJpbnQoMSk="
    assert codec.encode_outbound(None) is None


def test_encode_outbound_plain_policy():
    codec = PayloadCodec("plain")
    assert codec.base64_encoded is False
    assert codec.encode_outbound("print(1)") == "print(1)"


def test_unknown_encoding_mode_rejected():
    with pytest.raises(ValueError):
        PayloadCodec("hex")


def test_decode_submission_decodes_text_fields():
    codec = PayloadCodec()
    raw = record(
        6,
        compile_output=b64("main.c:1:1: error: unknown type name 'x'\n"),
        message=b64("Exited with error status 1"),
        time="0.013",
        memory="3012",
        exit_code=1,
    )
    result = codec.decode_submission(raw)
    assert result.token == "tok-1"
    assert result.status.id == 6
    assert result.status.description == "Compilation Error"
    assert result.compile_output == "main.c:1:1: error: unknown type name 'x'\n"
    assert result.message == "Exited with error status 1"
    assert result.stdout is None
    assert result.time == pytest.approx(0.013)
    assert result.memory == 3012
    assert result.exit_code == 1


def test_decode_submission_accepts_flat_status_fields():
    result = PayloadCodec().decode_submission(
        {"token": "abc", "status_id": 3, "status_description": "Accepted", "stdout": "ok\n"}
    )
    assert result.status.id == 3
    assert result.status.is_terminal
    assert result.status.is_accepted
    assert result.stdout == "ok\n"


@pytest.mark.parametrize(
    "raw",
    [
        None,
        ["not", "a", "record"],
        {"token": "abc"},
        {"token": "abc", "status": "Accepted"},
        {"token": "abc", "status": {"id": "three"}},
        {"token": "abc", "status": {"id": 3}, "memory": "lots"},
    ],
)
def test_decode_submission_rejects_malformed_records(raw):
    with pytest.raises(DecodeError):
        PayloadCodec().decode_submission(raw)
