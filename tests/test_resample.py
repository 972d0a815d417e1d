import random

import pytest

from camstages.resample import ColourSpace, yuv420_to_rgb_scaled
from camstages.stage import StreamInfo


def _image(width, height, luma, u=128, v=128):
    """A YUV420 buffer with the given luma bytes and uniform chroma."""
    assert len(luma) == width * height
    return bytes(luma) + bytes([u]) * (width * height // 4) + bytes([v]) * (width * height // 4)


def _info(width, height, colour_space=ColourSpace.SYCC):
    return StreamInfo(width=width, height=height, stride=width, colour_space=colour_space)


def test_output_length():
    data = _image(8, 4, [100] * 32)
    out = yuv420_to_rgb_scaled(data, _info(8, 4), 4, 2)
    assert len(out) == 4 * 2 * 3


def test_same_size_neutral_chroma_copies_luma():
    rng = random.Random(7)
    luma = [rng.randrange(256) for _ in range(8 * 6)]
    out = yuv420_to_rgb_scaled(_image(8, 6, luma), _info(8, 6), 8, 6)
    for i, value in enumerate(luma):
        assert tuple(out[3 * i:3 * i + 3]) == (value, value, value)


def test_halving_picks_odd_columns_and_even_rows():
    rng = random.Random(3)
    luma = [rng.randrange(256) for _ in range(8 * 4)]
    out = yuv420_to_rgb_scaled(_image(8, 4, luma), _info(8, 4), 4, 2)
    for oy in range(2):
        for ox in range(4):
            expected = luma[(2 * oy) * 8 + 2 * ox + 1]
            assert out[(oy * 4 + ox) * 3] == expected


def test_black_and_white_full_range():
    black = yuv420_to_rgb_scaled(_image(4, 4, [0] * 16), _info(4, 4), 4, 4)
    white = yuv420_to_rgb_scaled(_image(4, 4, [255] * 16), _info(4, 4), 4, 4)
    assert set(black) == {0}
    assert set(white) == {255}


def test_limited_range_black_is_zero():
    out = yuv420_to_rgb_scaled(_image(4, 4, [16] * 16), _info(4, 4, ColourSpace.REC709), 2, 2)
    assert set(out) == {0}


def test_saturated_chroma_is_clamped():
    data = _image(4, 4, [255] * 16, u=255, v=255)
    for cs in ColourSpace:
        out = yuv420_to_rgb_scaled(data, _info(4, 4, cs), 4, 4)
        assert all(0 <= b <= 255 for b in out)
        assert out[0] == 255


def test_unknown_colour_space_falls_back_to_full_range():
    rng = random.Random(11)
    luma = [rng.randrange(256) for _ in range(16)]
    data = _image(4, 4, luma, u=90, v=170)
    expected = yuv420_to_rgb_scaled(data, _info(4, 4, ColourSpace.SYCC), 4, 4)
    assert yuv420_to_rgb_scaled(data, _info(4, 4, None), 4, 4) == expected
    assert yuv420_to_rgb_scaled(data, _info(4, 4, "something"), 4, 4) == expected


def test_limited_range_differs_from_full_range():
    data = _image(4, 4, [200] * 16)
    full = yuv420_to_rgb_scaled(data, _info(4, 4, ColourSpace.SYCC), 4, 4)
    limited = yuv420_to_rgb_scaled(data, _info(4, 4, ColourSpace.SMPTE170M), 4, 4)
    assert set(full) == {200}
    assert limited[0] > 200


def test_uniform_input_gives_uniform_output():
    data = _image(8, 8, [77] * 64, u=60, v=200)
    out = yuv420_to_rgb_scaled(data, _info(8, 8, ColourSpace.REC709), 6, 4)
    pixels = {tuple(out[i:i + 3]) for i in range(0, len(out), 3)}
    assert len(pixels) == 1


@pytest.mark.parametrize("width,height", [(3, 2), (2, 3), (0, 2), (2, 0)])
def test_bad_output_dimensions(width, height):
    with pytest.raises(ValueError):
        yuv420_to_rgb_scaled(_image(4, 4, [0] * 16), _info(4, 4), width, height)


def test_short_buffer():
    with pytest.raises(ValueError):
        yuv420_to_rgb_scaled(bytes(10), _info(4, 4), 2, 2)