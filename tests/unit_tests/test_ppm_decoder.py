"""Tests for P3 decoding and encoding."""

import numpy as np
import pytest

from ppm_diff.codec.ppm import decode, encode, rescale
from ppm_diff.errors import FormatError
from ppm_diff.raster.pixel_buffer import PixelBuffer, Stride


def test_single_red_pixel():
    buf = decode("P3\n1 1\n255\n255 0 0\n")

    assert (buf.width, buf.height) == (1, 1)
    assert buf.pixel(0, 0) == (255, 0, 0)


def test_max_255_keeps_every_value():
    row = " ".join(f"{v} {v} {v}" for v in range(256))
    buf = decode(f"P3\n256 1\n255\n{row}\n")

    assert buf.rgb[0, :, 0].tolist() == list(range(256))


def test_row_major_layout():
    text = "P3\n2 2\n255\n1 2 3 4 5 6\n7 8 9 10 11 12\n"
    buf = decode(text)

    assert buf.pixel(0, 0) == (1, 2, 3)
    assert buf.pixel(1, 0) == (4, 5, 6)
    assert buf.pixel(0, 1) == (7, 8, 9)
    assert buf.pixel(1, 1) == (10, 11, 12)
    assert buf.tobytes() == bytes(range(1, 13))


def test_rescales_to_byte_range():
    buf = decode("P3\n3 1\n15\n15 0 7 8 8 8 0 0 15\n")

    assert buf.pixel(0, 0) == (255, 0, 119)
    assert buf.pixel(1, 0) == (136, 136, 136)
    assert buf.pixel(2, 0) == (0, 0, 255)


def test_rounds_halves_up():
    # 255 * 1 / 2 = 127.5
    assert decode("P3\n1 1\n2\n1 1 1\n").pixel(0, 0) == (128, 128, 128)


def test_rgba_stride():
    buf = decode("P3\n1 1\n255\n1 2 3\n", stride=Stride.RGBA)

    assert buf.tobytes() == bytes([1, 2, 3, 255])


def test_tolerates_crlf_blank_lines_and_comments():
    text = "P3\r\n# made by hand\r\n\r\n2 1\r\n255\r\n\r\n0 0 0  255 255 255\r\n"
    buf = decode(text)

    assert buf.pixel(1, 0) == (255, 255, 255)


def test_extra_samples_and_lines_are_ignored():
    buf = decode("P3\n1 1\n255\n1 2 3 4 5 6\n7 8 9\n")

    assert (buf.width, buf.height) == (1, 1)
    assert buf.pixel(0, 0) == (1, 2, 3)


def test_out_of_range_samples_are_clamped():
    buf = decode("P3\n1 1\n255\n300 -4 12\n")

    assert buf.pixel(0, 0) == (255, 0, 12)


@pytest.mark.parametrize(
    "text,message",
    [
        ("", "bad magic"),
        ("P6\n1 1\n255\n0 0 0\n", "bad magic"),
        ("p3\n1 1\n255\n0 0 0\n", "bad magic"),
        ("P3\n", "bad dimensions"),
        ("P3\n0 1\n255\n", "bad dimensions"),
        ("P3\n2 -1\n255\n", "bad dimensions"),
        ("P3\nx 1\n255\n0 0 0\n", "bad dimensions"),
        ("P3\n1\n255\n0 0 0\n", "bad dimensions"),
        ("P3\n1 1\n", "bad maxValue"),
        ("P3\n1 1\n0\n0 0 0\n", "bad maxValue"),
        ("P3\n1 1\nabc\n0 0 0\n", "bad maxValue"),
        ("P3\n1 1\n65536\n0 0 0\n", "bad maxValue"),
        ("P3\n1 1\n255\n0 x 0\n", "bad sample"),
        ("P3\n1 1\n255\n0 1.5 0\n", "bad sample"),
    ],
)
def test_malformed_header_or_samples(text, message):
    with pytest.raises(FormatError, match=message):
        decode(text)


@pytest.mark.parametrize(
    "text",
    [
        "P3\n1 1\n255\n",
        "P3\n1 2\n255\n0 0 0\n",
        "P3\n2 1\n255\n0 0 0 1 1\n",
    ],
)
def test_truncated_data_fails_fast(text):
    # The browser tool this replaces read past the end and produced NaN
    # pixels here; failing is deliberate.
    with pytest.raises(FormatError, match="truncated data"):
        decode(text)


def test_format_error_is_value_error():
    with pytest.raises(ValueError):
        decode("nope")


def test_rescale_identity_for_255():
    samples = np.arange(256, dtype=np.int64)
    assert np.array_equal(rescale(samples, 255), samples.astype(np.uint8))


def test_encode_layout():
    buf = PixelBuffer.from_rgb(np.array([[[255, 0, 0], [0, 0, 255]]], dtype=np.uint8))

    assert encode(buf) == "P3\n2 1\n255\n255 0 0 0 0 255\n"


def test_encode_drops_alpha_and_decodes_back():
    text = "P3\n2 2\n255\n1 2 3 4 5 6\n7 8 9 10 11 12\n"
    rgba = decode(text, stride=Stride.RGBA)

    assert encode(rgba) == text
    assert decode(encode(rgba), stride=Stride.RGBA) == rgba


def test_encode_with_lower_max_value():
    buf = PixelBuffer.filled(1, 1, (255, 0, 128))

    assert encode(buf, max_value=15) == "P3\n1 1\n15\n15 0 8\n"
    with pytest.raises(ValueError):
        encode(buf, max_value=0)


@pytest.mark.parametrize(
    "text",
    [
        "P3\n4000000000000 1\n255\n0 0 0\n",
        "P3\n1 4000000000000\n255\n0 0 0\n",
    ],
)
def test_huge_declared_size_with_little_data_is_truncated(text):
    with pytest.raises(FormatError, match="truncated data"):
        decode(text)


@pytest.mark.parametrize(
    "text,message",
    [
        ("P3\n1 1\n255\n1_0 0 0\n", "bad sample"),
        ("P3\n1 1\n255\n١ 0 0\n", "bad sample"),
        ("P3\n1 1\n255\n+-1 0 0\n", "bad sample"),
        ("P3\n1_0 1\n255\n0 0 0\n", "bad dimensions"),
        ("P3\n١ 1\n255\n0 0 0\n", "bad dimensions"),
        ("P3\n1 1\n2_55\n0 0 0\n", "bad maxValue"),
    ],
)
def test_only_ascii_decimal_integers_are_accepted(text, message):
    with pytest.raises(FormatError, match=message):
        decode(text)


def test_signed_samples_parse():
    assert decode("P3\n1 1\n255\n+7 -7 7\n").pixel(0, 0) == (7, 0, 7)
