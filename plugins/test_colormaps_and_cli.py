#!/usr/bin/env python3
"""
Tests for the oil-on-water colour map, PNG snapshots and the command line.

Verifies:
1. Water, oil and half-mixed cells map to the expected colours
2. Upscaling and the row-major transpose keep cells where they belong
3. PNG snapshots are written (plus latest.png)
4. Headless --snap runs end to end; bad arguments exit with status 2
"""

import numpy as np
from PIL import Image

from droplet_coalescence.__main__ import main
from droplet_coalescence.colormaps import (
    OIL_RGB, WATER_RGB, oil_on_water, render_float, to_image_array, upscale,
)
from droplet_coalescence.snapshot import save_field_png


def test_colour_mapping():
    print("Testing oil-on-water mapping...")
    field = np.array([[0.0, 1.0], [0.5, 2.0]])
    rgb = oil_on_water(field)
    assert rgb.dtype == np.uint8 and rgb.shape == (2, 2, 3)
    assert tuple(rgb[0, 0]) == WATER_RGB, f"Water cell wrong: {rgb[0, 0]}"
    assert tuple(rgb[0, 1]) == OIL_RGB, f"Oil cell wrong: {rgb[0, 1]}"
    assert tuple(rgb[1, 0]) == (214, 198, 115), f"Half-mixed cell wrong: {rgb[1, 0]}"
    assert tuple(rgb[1, 1]) == OIL_RGB, "Opacity saturates at 1"
    print("  ✓ Water, oil and blended colours correct")


def test_render_float_range():
    frame = render_float(np.linspace(0, 1, 16).reshape(4, 4))
    assert frame.dtype == np.float32
    assert frame.min() >= 0.0 and frame.max() <= 1.0
    assert np.allclose(frame[0, 0], np.array(WATER_RGB) / 255.0)


def test_upscale_and_transpose():
    print("Testing upscale and transpose...")
    field = np.zeros((3, 2))
    field[2, 0] = 1.0
    rgb = upscale(oil_on_water(field), 4)
    assert rgb.shape == (12, 8, 3)
    assert np.all(rgb[8:12, 0:4] == OIL_RGB), "Oil cell should fill a 4x4 block"
    assert upscale(rgb, 1) is rgb

    image = to_image_array(rgb)
    assert image.shape == (8, 12, 3), "Rows are y, columns are x"
    assert tuple(image[0, 8]) == OIL_RGB
    assert image.flags["C_CONTIGUOUS"]
    print("  ✓ Cell (x=2, y=0) lands at the top right of the image")


def test_save_field_png(tmp_path):
    print("Testing PNG snapshot...")
    field = np.zeros((5, 7))
    field[4, 6] = 1.0
    path = tmp_path / "shots" / "frame.png"
    written = save_field_png(field, str(path), scale=3)
    assert written == str(path)
    assert (tmp_path / "shots" / "latest.png").exists()

    with Image.open(path) as img:
        assert img.size == (15, 21), f"Width is x * scale, height y * scale, got {img.size}"
        assert img.getpixel((14, 20)) == OIL_RGB
        assert img.getpixel((0, 0)) == WATER_RGB
    print("  ✓ PNG written with latest.png alongside")


def test_save_without_latest(tmp_path):
    save_field_png(np.zeros((2, 2)), str(tmp_path / "a.png"), latest=False)
    assert not (tmp_path / "latest.png").exists()


def test_cli_snap(tmp_path, capsys):
    print("Testing headless snap...")
    out = tmp_path / "snap.png"
    code = main(["pair", "--snap", "3", "--size", "20", "--seed", "1",
                 "--radius", "3", "--out", str(out)])
    assert code == 0
    assert out.exists()
    assert "saved" in capsys.readouterr().out
    print("  ✓ --snap writes a PNG and exits 0")


def test_cli_snap_exact_mass(tmp_path):
    out = tmp_path / "exact.png"
    assert main(["--snap", "2", "--size", "12", "--exact-mass", "--out", str(out)]) == 0
    assert out.exists()


def test_cli_rejects_bad_arguments(capsys):
    print("Testing argument errors...")
    assert main(["--bogus"]) == 2
    assert main(["--snap", "1", "--size", "abc"]) == 2
    assert main(["--snap", "1", "--size", "0"]) == 2
    assert main(["--snap", "1", "--size", "10", "--radius", "0"]) == 2
    assert main(["--snap", "1", "--size", "10", "--speed", "-5"]) == 2
    output = capsys.readouterr().out
    assert "Unknown argument" in output
    assert "Invalid configuration" in output
    print("  ✓ Invalid input reported with exit status 2")


def test_cli_rejects_non_positive_snap(capsys):
    print("Testing --snap step count...")
    assert main(["--snap", "0", "--size", "10"]) == 2
    assert main(["--snap", "-3", "--size", "10"]) == 2
    assert "positive step count" in capsys.readouterr().out
    print("  ✓ --snap 0 exits 2 instead of opening the viewer")


def test_cli_list(capsys):
    assert main(["--list"]) == 0
    output = capsys.readouterr().out
    for key in ("default", "emulsion", "pair", "slick", "empty"):
        assert key in output


if __name__ == "__main__":
    print("\n=== Testing Colour Map, Snapshots and CLI ===\n")

    test_colour_mapping()
    test_render_float_range()
    test_upscale_and_transpose()

    print("\n✓ All tests passed!\n")
