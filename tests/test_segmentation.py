import pytest

from camstages.segmentation import (
    HEIGHT,
    WIDTH,
    SegmentationConfig,
    draw_segmentation,
    read_labels_file,
    segment,
    top_categories,
)
from camstages.stage import StreamInfo


def test_config_defaults():
    cfg = SegmentationConfig.from_params({})
    assert cfg.draw is True
    assert cfg.threshold == 5000
    assert cfg.number_of_threads == 2
    assert cfg.refresh_rate == 5
    assert cfg.normalisation_offset == 127.5
    assert cfg.labels_file == ""


def test_config_overrides():
    cfg = SegmentationConfig.from_params({"draw": 0, "threshold": 10, "labels_file": "l.txt", "verbose": 1})
    assert cfg.draw is False
    assert cfg.threshold == 10
    assert cfg.labels_file == "l.txt"
    assert cfg.verbose is True


def test_config_negative_threshold():
    with pytest.raises(ValueError):
        SegmentationConfig.from_params({"threshold": -1})


def test_read_labels(tmp_path):
    path = tmp_path / "labels.txt"
    path.write_text("background\nperson\ncat\n")
    assert read_labels_file(str(path)) == ["background", "person", "cat"]


def test_read_labels_without_final_newline(tmp_path):
    path = tmp_path / "labels.txt"
    path.write_text("a\nb")
    assert read_labels_file(str(path)) == ["a", "b"]


def test_read_labels_missing(tmp_path):
    with pytest.raises(OSError):
        read_labels_file(str(tmp_path / "missing.txt"))


def test_segment_picks_largest_and_first_on_ties():
    output = [0.1, 0.9, 0.0, 0.5, 0.5, 0.2, 0.0, 0.0, 1.0]
    seg, hist = segment(output, 3)
    assert seg == bytes([1, 0, 2])
    assert hist == [1, 1, 1]


def test_segment_histogram_sums_to_pixels():
    output = [float((i * 7) % 5) for i in range(40)]
    seg, hist = segment(output, 4)
    assert len(seg) == 10
    assert sum(hist) == 10
    assert all(hist[c] == seg.count(c) for c in range(4))


def test_segment_bad_length():
    with pytest.raises(ValueError):
        segment([1.0, 2.0, 3.0], 2)


def test_top_categories_order_and_threshold():
    result = top_categories([3, 10, 1, 6], ["a", "b", "c", "d"], 3)
    assert result == [("b", 10), ("d", 6), ("a", 3)]


def test_top_categories_none_above():
    assert top_categories([1, 2], ["a", "b"], 5) == []


def _image(width, height):
    info = StreamInfo(width=width, height=height, stride=width)
    buf = bytearray(b"\x05" * (height * width + 2 * (height // 2) * (width // 2)))
    return info, buf


def test_draw_segmentation_zero_values():
    info, buf = _image(257, 257)
    draw_segmentation(buf, info, bytes(WIDTH * HEIGHT), 1)
    assert set(buf[:WIDTH * HEIGHT]) == {0}


def test_draw_segmentation_too_small():
    info, buf = _image(200, 200)
    with pytest.raises(ValueError):
        draw_segmentation(buf, info, bytes(WIDTH * HEIGHT), 1)


def test_draw_segmentation_no_labels():
    info, buf = _image(300, 260)
    with pytest.raises(ValueError):
        draw_segmentation(buf, info, bytes(WIDTH * HEIGHT), 0)