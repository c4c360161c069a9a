"""Tests for the image reconciler."""

from pathlib import Path

import pytest
from PIL import Image

from visualify.compare.reconciler import (
    SENTINEL_COLOR,
    fit_to_canvas,
    load_image,
    reconcile_files,
    reconcile_images,
)
from visualify.errors import ImageDecodeError

RED = (255, 0, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)


def _rgba(color):
    return (*color, 255)


class TestFitToCanvas:

    def test_same_size_untouched(self):
        img = Image.new("RGBA", (10, 10), _rgba(RED))
        out, changed = fit_to_canvas(img, 10, 10)
        assert out is img
        assert changed is False

    def test_pads_right_and_bottom(self):
        img = Image.new("RGBA", (10, 10), _rgba(RED))
        out, changed = fit_to_canvas(img, 15, 12)
        assert changed is True
        assert out.size == (15, 12)
        assert out.getpixel((0, 0)) == _rgba(RED)
        assert out.getpixel((9, 9)) == _rgba(RED)
        assert out.getpixel((12, 5)) == SENTINEL_COLOR
        assert out.getpixel((5, 11)) == SENTINEL_COLOR

    def test_crops_when_wider(self):
        img = Image.new("RGBA", (20, 10), _rgba(RED))
        out, changed = fit_to_canvas(img, 15, 10)
        assert changed is True
        assert out.size == (15, 10)
        assert out.getpixel((14, 9)) == _rgba(RED)


class TestReconcileImages:

    def test_equal_sizes_is_noop(self):
        a = Image.new("RGBA", (10, 10), _rgba(RED))
        b = Image.new("RGBA", (10, 10), _rgba(BLUE))
        pair = reconcile_images(a, b)
        assert pair.a_changed is False
        assert pair.b_changed is False
        assert pair.image_a is a
        assert pair.image_b is b

    def test_narrower_image_padded_with_sentinel(self):
        golden = Image.new("RGBA", (100, 50), _rgba(WHITE))
        current = Image.new("RGBA", (120, 50), _rgba(WHITE))
        pair = reconcile_images(golden, current)

        assert pair.image_a.size == (120, 50)
        assert pair.image_b.size == (120, 50)
        assert pair.a_changed is True
        assert pair.b_changed is False
        for x in range(100, 120):
            assert pair.image_a.getpixel((x, 25)) == SENTINEL_COLOR
        assert pair.image_a.getpixel((99, 25)) == _rgba(WHITE)

    def test_shorter_image_padded_at_bottom_anchored_top(self):
        a = Image.new("RGBA", (10, 40), _rgba(RED))
        b = Image.new("RGBA", (10, 30), _rgba(BLUE))
        pair = reconcile_images(a, b)

        assert pair.size == (10, 40)
        assert pair.b_changed is True
        assert pair.image_b.getpixel((5, 0)) == _rgba(BLUE)
        assert pair.image_b.getpixel((5, 29)) == _rgba(BLUE)
        assert pair.image_b.getpixel((5, 30)) == SENTINEL_COLOR

    def test_both_dimensions_differ(self):
        a = Image.new("RGBA", (30, 10), _rgba(RED))
        b = Image.new("RGBA", (10, 30), _rgba(BLUE))
        pair = reconcile_images(a, b)
        assert pair.image_a.size == pair.image_b.size == (30, 30)
        assert pair.a_changed and pair.b_changed

    def test_idempotent(self):
        a = Image.new("RGBA", (100, 50), _rgba(WHITE))
        b = Image.new("RGBA", (120, 60), _rgba(WHITE))
        first = reconcile_images(a, b)
        second = reconcile_images(first.image_a, first.image_b)
        assert second.a_changed is False
        assert second.b_changed is False
        assert second.size == first.size

    def test_max_width_crops_wider_image(self):
        a = Image.new("RGBA", (100, 50), _rgba(WHITE))
        b = Image.new("RGBA", (120, 50), _rgba(WHITE))
        pair = reconcile_images(a, b, max_width=100)
        assert pair.size == (100, 50)
        assert pair.a_changed is False
        assert pair.b_changed is True


class TestReconcileFiles:

    def test_overwrites_adjusted_file(self, tmp_path: Path, make_png):
        golden = make_png(tmp_path / "golden.png", (100, 50), WHITE)
        current = make_png(tmp_path / "current.png", (120, 50), WHITE)
        current_bytes = current.read_bytes()

        reconcile_files(golden, current)

        with Image.open(golden) as img:
            assert img.size == (120, 50)
            assert img.convert("RGBA").getpixel((110, 10)) == SENTINEL_COLOR
        assert current.read_bytes() == current_bytes

    def test_equal_files_not_rewritten(self, tmp_path: Path, make_png):
        a = make_png(tmp_path / "a.png", (10, 10), RED)
        b = make_png(tmp_path / "b.png", (10, 10), BLUE)
        a_mtime, b_mtime = a.stat().st_mtime_ns, b.stat().st_mtime_ns
        a_bytes = a.read_bytes()

        pair = reconcile_files(a, b)

        assert not pair.a_changed and not pair.b_changed
        assert a.stat().st_mtime_ns == a_mtime
        assert b.stat().st_mtime_ns == b_mtime
        assert a.read_bytes() == a_bytes

    def test_second_run_is_noop(self, tmp_path: Path, make_png):
        a = make_png(tmp_path / "a.png", (10, 20), RED)
        b = make_png(tmp_path / "b.png", (15, 10), BLUE)
        reconcile_files(a, b)
        a_bytes, b_bytes = a.read_bytes(), b.read_bytes()

        pair = reconcile_files(a, b)

        assert not pair.a_changed and not pair.b_changed
        assert a.read_bytes() == a_bytes
        assert b.read_bytes() == b_bytes

    def test_corrupt_file_raises(self, tmp_path: Path, make_png):
        good = make_png(tmp_path / "good.png", (10, 10), RED)
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"not really a png")
        with pytest.raises(ImageDecodeError):
            reconcile_files(good, bad)

    def test_missing_file_raises(self, tmp_path: Path, make_png):
        good = make_png(tmp_path / "good.png", (10, 10), RED)
        with pytest.raises(ImageDecodeError):
            reconcile_files(tmp_path / "missing.png", good)


class TestLoadImage:

    def test_converts_to_rgba(self, tmp_path: Path, make_png):
        path = make_png(tmp_path / "a.png", (4, 4), RED)
        img = load_image(path)
        assert img.mode == "RGBA"
        assert img.getpixel((0, 0)) == (255, 0, 0, 255)

