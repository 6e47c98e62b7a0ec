import pytest

from figstudio import palettes
from figstudio.errors import ConfigurationError


def test_palette_classes():
    assert palettes.palette_class("Set1") == "qualitative"
    assert palettes.palette_class("Blues") == "sequential"
    assert palettes.palette_class("RdBu") == "diverging"
    assert len(palettes.palette("Set1")) == 9
    with pytest.raises(ConfigurationError):
        palettes.palette_class("Nope")


def test_palette_is_a_copy():
    colors = palettes.palette("Set2")
    colors.append("#000000")
    assert len(palettes.palette("Set2")) == 8


def test_custom_palette_is_normalized():
    assert palettes.palette(["#f00", "#00ff00"]) == ["#FF0000", "#00FF00"]
    with pytest.raises(ConfigurationError):
        palettes.palette([])
    with pytest.raises(ConfigurationError):
        palettes.palette(["not-a-color"])


def test_hex_round_trip():
    assert palettes.hex_to_rgb("#377EB8") == (55, 126, 184)
    assert palettes.rgb_to_hex((55, 126, 184)) == "#377EB8"


def test_lab_reference_points():
    white = palettes.rgb_to_lab((255, 255, 255))
    black = palettes.rgb_to_lab((0, 0, 0))
    assert white[0] == pytest.approx(100, abs=0.01)
    assert abs(white[1]) < 0.01 and abs(white[2]) < 0.01
    assert black.tolist() == pytest.approx([0, 0, 0], abs=0.01)
    assert palettes.color_distance("#000000", "#FFFFFF") == pytest.approx(100, abs=0.01)


def test_interpolate():
    assert palettes.interpolate(["#000000", "#FFFFFF"], 0.5) == "#808080"
    assert palettes.interpolate(["#000000", "#FFFFFF"], -1) == "#000000"
    assert palettes.interpolate(["#000000", "#FFFFFF"], 2) == "#FFFFFF"
    assert palettes.interpolate(["#123456"], 0.3) == "#123456"
    assert palettes.sample(["#000000", "#FFFFFF"], 3) == ["#000000", "#808080", "#FFFFFF"]
