"""Fast nearest-neighbour scaling of YUV420 images to packed RGB for display."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from camstages.stage import StreamInfo

log = logging.getLogger(__name__)


class ColourSpace(Enum):
    """Colour spaces whose YUV encoding the converter knows."""

    SYCC = "sycc"
    SMPTE170M = "smpte170m"
    REC709 = "rec709"


@dataclass(frozen=True)
class _Coefficients:
    offset_y: int
    y: float
    vr: float
    ug: float
    vg: float
    ub: float


_JPEG = _Coefficients(0, 1.0, 1.402, -0.344, -0.714, 1.772)
_COEFFICIENTS = {
    ColourSpace.SYCC: _JPEG,
    ColourSpace.SMPTE170M: _Coefficients(16, 1.164, 1.596, -0.392, -0.813, 2.017),
    ColourSpace.REC709: _Coefficients(16, 1.164, 1.793, -0.213, -0.533, 2.112),
}


def _coefficients_for(colour_space: object) -> _Coefficients:
    coeffs = _COEFFICIENTS.get(colour_space) if isinstance(colour_space, ColourSpace) else None
    if coeffs is None:
        log.info("unexpected colour space %s", colour_space)
        return _JPEG
    return coeffs


def _clamp(value: int) -> int:
    if value < 0:
        return 0
    if value > 255:
        return 255
    return value


def yuv420_to_rgb_scaled(
    data: bytes | bytearray | memoryview, info: StreamInfo, width: int, height: int
) -> bytes:
    """Resample a planar YUV420 image to width x height packed RGB.

    Pixels are picked nearest-neighbour, with each pair of output pixels
    sharing one U,V sample. The conversion matrix follows info.colour_space;
    anything unrecognised is treated as full-range JPEG. The result holds
    height rows of width * 3 bytes.
    """
    if width <= 0 or height <= 0:
        raise ValueError("yuv420_to_rgb_scaled: output dimensions must be positive")
    if width % 2 or height % 2:
        raise ValueError("yuv420_to_rgb_scaled: expect even dimensions")
    if info.width <= 0 or info.height <= 0 or info.stride < info.width:
        raise ValueError("yuv420_to_rgb_scaled: bad source stream info")

    src = memoryview(data).cast("B")
    half_stride = info.stride >> 1
    required = max(info.height * info.stride, 3 * info.height * half_stride)
    if len(src) < required:
        raise ValueError("yuv420_to_rgb_scaled: source buffer too short for its stream info")

    c = _coefficients_for(info.colour_space)
    x_step = (info.width << 16) // width
    y_step = (info.height << 16) // height

    out = bytearray()
    for y in range(height):
        row = (y * y_step) >> 16
        y_row = src[row * info.stride:(row + 1) * info.stride]
        u_start = ((4 * info.height + row) >> 1) * half_stride
        v_start = ((5 * info.height + row) >> 1) * half_stride
        u_row = src[u_start:u_start + half_stride]
        v_row = src[v_start:v_start + half_stride]

        x_pos = x_step >> 1
        for _ in range(0, width, 2):
            y0 = y_row[x_pos >> 16]
            x_pos += x_step
            y1 = y_row[x_pos >> 16]
            u = u_row[x_pos >> 17] - 128
            v = v_row[x_pos >> 17] - 128
            x_pos += x_step
            y0 -= c.offset_y
            y1 -= c.offset_y
            for luma in (y0, y1):
                out.append(_clamp(int(c.y * luma + c.vr * v)))
                out.append(_clamp(int(c.y * luma + c.ug * u + c.vg * v)))
                out.append(_clamp(int(c.y * luma + c.ub * u)))
    return bytes(out)