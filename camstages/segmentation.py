"""Semantic segmentation helpers: reading labels and model output, drawing the map."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from camstages.stage import StreamInfo

WIDTH = 257
HEIGHT = 257
NAME = "segmentation_tf"


@dataclass
class SegmentationConfig:
    """Settings of the segmentation stage, including the model runner's own."""

    number_of_threads: int = 2
    refresh_rate: int = 5
    model_file: str = ""
    verbose: bool = False
    normalisation_offset: float = 127.5
    normalisation_scale: float = 127.5
    draw: bool = True
    threshold: int = 5000
    labels_file: str = ""

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> SegmentationConfig:
        """Build a configuration from a parsed JSON object, using defaults for what is missing."""
        threshold = int(params.get("threshold", 5000))
        if threshold < 0:
            raise ValueError("SegmentationConfig: threshold must not be negative")
        return cls(
            number_of_threads=int(params.get("number_of_threads", 2)),
            refresh_rate=int(params.get("refresh_rate", 5)),
            model_file=str(params.get("model_file", "")),
            verbose=bool(int(params.get("verbose", 0))),
            normalisation_offset=float(params.get("normalisation_offset", 127.5)),
            normalisation_scale=float(params.get("normalisation_scale", 127.5)),
            draw=bool(int(params.get("draw", 1))),
            threshold=threshold,
            labels_file=str(params.get("labels_file", "")),
        )


def read_labels_file(path: str) -> list[str]:
    """Read one label per line; a final newline does not add an empty label."""
    with open(path, encoding="utf-8", newline="") as f:
        text = f.read()
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def segment(output: Sequence[float], num_categories: int) -> tuple[bytes, list[int]]:
    """Pick the most confident category for every pixel.

    output holds num_categories confidences per pixel. Returns the category
    index of each pixel (the first one on ties) and a count of pixels per category.
    """
    if not 0 < num_categories <= 256:
        raise ValueError("segment: number of categories must be between 1 and 256")
    values = list(output)
    if len(values) % num_categories:
        raise ValueError("segment: output length is not a multiple of the number of categories")
    histogram = [0] * num_categories
    result = bytearray()
    for start in range(0, len(values), num_categories):
        scores = values[start:start + num_categories]
        index = max(range(num_categories), key=scores.__getitem__)
        result.append(index)
        histogram[index] += 1
    return bytes(result), histogram


def top_categories(histogram: Sequence[int], labels: Sequence[str], threshold: int) -> list[tuple[str, int]]:
    """Labels and pixel counts of the categories with at least threshold pixels, largest first."""
    order = sorted(range(len(histogram)), key=lambda i: histogram[i], reverse=True)
    result = []
    for i in order:
        if histogram[i] < threshold:
            break
        result.append((labels[i], histogram[i]))
    return result


def draw_segmentation(buffer: bytearray, info: StreamInfo, segmentation: bytes, num_labels: int) -> None:
    """Draw the map into the bottom right corner of a YUV420 image, in grey."""
    if num_labels <= 0:
        raise ValueError("draw_segmentation: there must be at least one label")
    if len(segmentation) != WIDTH * HEIGHT:
        raise ValueError("draw_segmentation: segmentation has the wrong size")
    if info.width < WIDTH or info.height < HEIGHT:
        raise ValueError("draw_segmentation: image is too small to draw in")
    if len(buffer) < info.height * info.stride + 2 * (info.height // 2) * (info.stride // 2):
        raise ValueError("draw_segmentation: buffer too short for its stream info")

    scale = 255 // num_labels
    table = bytes((scale * i) & 0xFF for i in range(256))
    y_offset = info.height - HEIGHT
    x_offset = info.width - WIDTH

    for y in range(HEIGHT):
        row = segmentation[y * WIDTH:(y + 1) * WIDTH]
        dst = (y + y_offset) * info.stride + x_offset
        buffer[dst:dst + WIDTH] = row.translate(table)

    u_start = info.height * info.stride
    uv_stride = info.stride // 2
    uv_size = (info.height // 2) * uv_stride
    y_offset //= 2
    x_offset //= 2
    grey = b"\x80" * (WIDTH // 2)
    for y in range(HEIGHT // 2):
        dst = u_start + (y + y_offset) * uv_stride + x_offset
        buffer[dst:dst + WIDTH // 2] = grey
        buffer[dst + uv_size:dst + uv_size + WIDTH // 2] = grey