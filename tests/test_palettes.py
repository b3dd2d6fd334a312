import pytest

from liquidascii.palettes import (
    DEFAULT_PALETTE,
    DEFAULT_SCHEME,
    GLYPH_PALETTES,
    SCHEMES,
    create_custom_scheme,
    get_palette,
    get_scheme,
    list_palettes,
    list_schemes,
    parse_hex,
    recolor,
    to_hex,
    with_opacity,
)


def test_builtin_lookups():
    assert get_palette(DEFAULT_PALETTE) == ".+xXoO"
    assert get_scheme(DEFAULT_SCHEME).text == (153, 153, 153)
    assert list_palettes() == sorted(GLYPH_PALETTES)
    assert list_schemes() == sorted(SCHEMES)


def test_every_palette_is_non_empty():
    assert all(GLYPH_PALETTES.values())


def test_unknown_names_list_alternatives():
    with pytest.raises(KeyError, match="classic"):
        get_palette("nope")
    with pytest.raises(KeyError, match="mono"):
        get_scheme("nope")


def test_hex_parsing():
    assert parse_hex("#999999") == (153, 153, 153)
    assert parse_hex("2a2a2a") == (42, 42, 42)
    assert to_hex((42, 42, 42)) == "#2a2a2a"
    for bad in ("#12345", "#gggggg", ""):
        with pytest.raises(ValueError):
            parse_hex(bad)


def test_custom_scheme_from_hex():
    scheme = create_custom_scheme("Mine", "#ff0000", "#000010")
    assert scheme.text == (255, 0, 0)
    assert scheme.background == (0, 0, 16)
    assert scheme.background_hex == "#000010"


def test_recolor_replaces_one_role_only():
    base = get_scheme("lava")
    text_only = recolor(base, "text", (1, 2, 3))
    assert text_only.name == "Custom"
    assert text_only.text == (1, 2, 3)
    assert text_only.background == base.background

    both = recolor(text_only, "background", (250, 251, 252))
    assert both.text == (1, 2, 3)
    assert both.background_hex == "#fafbfc"
    assert base.text != (1, 2, 3)

    with pytest.raises(ValueError):
        recolor(base, "border", (0, 0, 0))


def test_with_opacity_clamps_alpha():
    assert with_opacity((1, 2, 3), 1.0) == (1, 2, 3, 255)
    assert with_opacity((1, 2, 3), 0.0) == (1, 2, 3, 0)
    assert with_opacity((1, 2, 3), 0.4)[3] == 102
    assert with_opacity((1, 2, 3), 7.0)[3] == 255
