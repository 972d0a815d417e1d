# camstages

Building blocks for camera post-processing pipelines, in plain Python with no
dependencies beyond the standard library.

## What is inside

- `camstages.pwl`: piecewise linear functions (`Pwl`, `Point`, `Interval`,
  `PerpType`). A `Pwl` supports evaluation with an optional span hint
  (`eval`, `find_span`), reading from a flat list of x, y values (`read`),
  `append` and `prepend`, `domain` and `range`, `invert` to find the closest
  point on the curve, `compose`, `map`, `map2` and `combine` of two curves,
  `match_domain`, scaling of the y values with `*=`, `generate_lut` and a
  `debug` dump.
- `camstages.stage`: the `PostProcessingStage` abstract base class and its
  life cycle (`read`, `adjust_config`, `configure`, `start`, `process`,
  `stop`, `teardown`), with `StreamInfo` for stream geometry and a stage
  registry (`register_stage`, `get_post_processing_stages`). It also has
  helpers: `yuv420_to_rgb` converts the centre of a planar YUV420 frame to
  packed RGB, `execution_time` times a call and returns a `timedelta`, and
  `get_json_array` reads an array from parsed settings, padded with defaults.
- `camstages.segmentation`: helpers for a semantic segmentation stage.
  `SegmentationConfig.from_params` reads its settings with their defaults,
  `read_labels_file` reads one label per line, `segment` picks the most
  confident category for each pixel and counts them, `top_categories` lists
  the categories over a pixel threshold, largest first, and
  `draw_segmentation` draws the 257x257 map in grey into the bottom right
  corner of a YUV420 frame.
- `camstages.resample`: `yuv420_to_rgb_scaled` resamples a YUV420 frame to a
  given even width and height of packed RGB, nearest-neighbour, using the
  matrix for the frame's `ColourSpace` (`SYCC`, `SMPTE170M`, `REC709`).
  Anything else is treated as full-range and logged.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

Piecewise linear functions:

```python
from camstages.pwl import Pwl, Point

curve = Pwl([Point(0, 0), Point(10, 20), Point(20, 20)])
curve.eval(5)            # 10.0
curve.domain().length()  # 20.0
lut = curve.generate_lut()
```

Converting a YUV420 frame to RGB:

```python
from camstages.stage import StreamInfo, yuv420_to_rgb

src = StreamInfo(width=4, height=2, stride=4)
dst = StreamInfo(width=4, height=2, stride=12)
frame = bytes([128] * (4 * 2 + 2 * 2))
rgb = yuv420_to_rgb(frame, src, dst)
```

Writing a stage:

```python
from camstages.stage import PostProcessingStage, register_stage

class Identity(PostProcessingStage):
    def name(self):
        return "identity"

    def process(self, completed_request):
        return False  # keep the frame

register_stage("identity", Identity)
```

## What it does not do

The package does not drive a camera, open preview windows, or load and run
neural network models. The segmentation module works on model output that
you pass in, and returns plain values. It has no record types for detection
or segmentation results. It also has no command-line program.