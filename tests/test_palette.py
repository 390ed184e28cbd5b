import numpy as np
import pytest

from theme_map.colour_convert import to_perceptual
from theme_map.errors import ConfigError, EmptyPaletteError, PaletteEntryError
from theme_map.palette import Palette


def test_from_hex_keeps_order_and_normalises_codes():
    palette = Palette.from_hex(["#FF0000", "#0f0", "#0000ff"])

    assert len(palette) == 3
    assert palette.hex_codes() == ("#ff0000", "#00ff00", "#0000ff")
    assert [item.rgb for item in palette] == [(255, 0, 0), (0, 255, 0), (0, 0, 255)]


def test_colours_are_lab_in_configured_order():
    palette = Palette.from_hex(["#ffffff", "#000000"])

    white, black = palette.colours()

    assert white == pytest.approx(to_perceptual((255, 255, 255)), abs=1e-9)
    assert black == pytest.approx((0.0, 0.0, 0.0), abs=1e-9)


@pytest.mark.parametrize(
    "bad",
    ["ff0000", "#ff00", "#gg0000", "", "#12345678", "#+f+f+f", "# f f f", "#-10000"],
)
def test_malformed_entry_fails_the_whole_palette(bad):
    with pytest.raises(PaletteEntryError) as excinfo:
        Palette.from_hex(["#000000", bad, "#ffffff"])

    assert excinfo.value.index == 1
    assert isinstance(excinfo.value, ConfigError)


def test_non_string_entry_is_rejected():
    with pytest.raises(PaletteEntryError):
        Palette.from_hex([0x112233])


def test_empty_palette_is_a_config_error():
    with pytest.raises(EmptyPaletteError):
        Palette.from_hex([])
    with pytest.raises(EmptyPaletteError):
        Palette([])


def test_lab_array_is_read_only():
    palette = Palette.from_hex(["#123456"])

    lab = palette.lab_array()

    assert lab.shape == (1, 3)
    with pytest.raises(ValueError):
        lab[0, 0] = 1.0


def test_from_lab_keeps_coordinates():
    palette = Palette.from_lab([(50.0, 10.0, 0.0), (50.0, -10.0, 0.0)])

    assert palette.colours() == ((50.0, 10.0, 0.0), (50.0, -10.0, 0.0))
    np.testing.assert_array_equal(palette.lab_array()[1], [50.0, -10.0, 0.0])
