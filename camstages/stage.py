"""Base class, registry and shared helpers for post-processing stages."""

from __future__ import annotations

import enum
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from types import MappingProxyType
from typing import Any, Callable, Sequence


@dataclass
class StreamInfo:
    """Geometry of an image stream; stride is the length of a row in bytes."""

    width: int = 0
    height: int = 0
    stride: int = 0
    colour_space: Any = None


class StageState(enum.Enum):
    """Where a stage is in its lifecycle."""

    CREATED = "created"
    CONFIGURED = "configured"
    RUNNING = "running"
    STOPPED = "stopped"
    TORN_DOWN = "torn_down"


class PostProcessingStage(ABC):
    """A stage that inspects or alters completed camera requests."""

    def __init__(self, app: Any) -> None:
        self.app = app
        self.params: dict[str, Any] = {}
        self.use_case: str | None = None
        self.state = StageState.CREATED

    @abstractmethod
    def name(self) -> str:
        """The name the stage is registered under."""

    def read(self, params: Mapping[str, Any]) -> None:
        """Take the stage's settings from a parsed JSON object."""
        self.params = dict(params)

    def adjust_config(self, use_case: str, config: Any) -> None:
        """Adjust a stream configuration before the camera is configured.

        The base stage leaves the configuration as it is and only notes the
        use case it was asked about.
        """
        self.use_case = use_case

    def configure(self) -> None:
        """Prepare for the streams now configured."""
        self.state = StageState.CONFIGURED

    def start(self) -> None:
        """Called when the camera starts."""
        self.state = StageState.RUNNING

    @abstractmethod
    def process(self, completed_request: Any) -> bool:
        """Handle a request; return True if it is to be dropped."""

    def stop(self) -> None:
        """Called when the camera stops."""
        self.state = StageState.STOPPED

    def teardown(self) -> None:
        """Release whatever configure acquired."""
        self.state = StageState.TORN_DOWN


def _clamp(value: int) -> int:
    if value < 0:
        return 0
    if value > 255:
        return 255
    return value


def _yuv_pixel(y: int, u: int, v: int) -> tuple[int, int, int]:
    r = int(y + 1.402 * v)
    g = int(y - 0.345 * u - 0.714 * v)
    b = int(y + 1.771 * u)
    return _clamp(r), _clamp(g), _clamp(b)


def yuv420_to_rgb(src: bytes | bytearray | memoryview, src_info: StreamInfo, dst_info: StreamInfo) -> bytearray:
    """Convert a planar YUV420 image to packed RGB.

    If the source is larger than the destination, the centre of it is taken.
    The result holds dst_info.height rows of dst_info.stride bytes.
    """
    if src_info.width < dst_info.width or src_info.height < dst_info.height:
        raise ValueError("yuv420_to_rgb: source image is smaller than destination")
    if dst_info.stride < dst_info.width * 3:
        raise ValueError("yuv420_to_rgb: destination stride too small for RGB rows")

    off_x = ((src_info.width - dst_info.width) // 2) & ~1
    off_y = ((src_info.height - dst_info.height) // 2) & ~1
    y_size = src_info.height * src_info.stride
    uv_stride = src_info.stride // 2
    uv_size = (src_info.height // 2) * uv_stride

    data = memoryview(src).cast("B")
    if len(data) < y_size + 2 * uv_size:
        raise ValueError("yuv420_to_rgb: source buffer too short for its stream info")

    out = bytearray(dst_info.height * dst_info.stride)
    for row in range(dst_info.height):
        y_base = (row + off_y) * src_info.stride + off_x
        u_base = y_size + ((row + off_y) // 2) * uv_stride + off_x // 2
        v_base = u_base + uv_size
        pos = row * dst_info.stride
        for col in range(dst_info.width):
            half = col // 2
            out[pos:pos + 3] = bytes(
                _yuv_pixel(data[y_base + col], data[u_base + half] - 128, data[v_base + half] - 128)
            )
            pos += 3
    return out


def execution_time(f: Callable[..., Any], *args: Any, **kwargs: Any) -> timedelta:
    """Call f with the arguments given and return how long it took."""
    start = time.perf_counter()
    f(*args, **kwargs)
    return timedelta(seconds=time.perf_counter() - start)


def get_json_array(params: Mapping[str, Any], key: str, default: Sequence[Any] = ()) -> list[Any]:
    """Values of the array under key, padded out to the length of default."""
    values: list[Any] = []
    if key in params:
        child = params[key]
        values.extend(child.values() if isinstance(child, Mapping) else child)
    values.extend(default[len(values):])
    return values


StageFactory = Callable[[Any], PostProcessingStage]

_stages: dict[str, StageFactory] = {}


def register_stage(name: str, create_func: StageFactory) -> StageFactory:
    """Make a stage factory available under name, replacing any earlier one."""
    _stages[name] = create_func
    return create_func


def get_post_processing_stages() -> Mapping[str, StageFactory]:
    """A read-only view of the registered stage factories."""
    return MappingProxyType(_stages)