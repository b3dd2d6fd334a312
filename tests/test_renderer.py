import numpy as np
import pytest

from liquidascii.engine import FluidEngine, Particle
from liquidascii.palettes import GLYPH_PALETTES
from liquidascii.renderer import DensityRasterizer, GlyphFrame


def stacked(n, x=100.0, y=100.0):
    return [Particle(x=x, y=y) for _ in range(n)]


def test_grid_dimensions_round_up():
    r = DensityRasterizer(101, 41, font_size=20)
    assert (r.cols, r.rows) == (6, 3)
    assert r.density.shape == (3, 6)


def test_default_palette_is_classic():
    r = DensityRasterizer(100, 100)
    assert "".join(r.characters) == GLYPH_PALETTES["classic"]


def test_no_particles_gives_blank_frame():
    r = DensityRasterizer(200, 100)
    frame = r.render([])
    assert len(frame) == 0
    assert frame.grid() == [[None] * 10 for _ in range(5)]
    assert frame.to_text() == "\n".join([" " * 10] * 5)
    assert not r.density.any()


def test_single_particle_density_profile():
    r = DensityRasterizer(400, 400, font_size=20)
    r.render(stacked(1))
    d = r.density
    assert d[5, 5] == pytest.approx(1.0)
    assert d[5, 6] == pytest.approx((1 - 1 / 6.25) ** 2)
    assert d[6, 6] == pytest.approx((1 - 2 / 6.25) ** 2)
    assert d[5, 7] == pytest.approx((1 - 4 / 6.25) ** 2)
    assert d[5, 8] == 0.0


def test_single_particle_glyphs_and_opacity():
    r = DensityRasterizer(400, 400, font_size=20)
    frame = r.render(stacked(1))

    assert frame.bold == []
    cells = {(c.row, c.col): c for c in frame.normal}
    # centre, 4 edge neighbours and 4 diagonals clear the 0.2 threshold
    assert len(cells) == 9
    assert cells[(5, 5)].char == "+"
    assert cells[(5, 5)].opacity == pytest.approx(0.4 + 0.8 * 0.3)
    assert cells[(4, 5)].char == "+"
    assert cells[(4, 4)].char == "."
    assert (5, 7) not in cells


def test_dense_cells_go_to_bold_pass():
    r = DensityRasterizer(400, 400, font_size=20)
    frame = r.render(stacked(3))

    bold = {(c.row, c.col): c for c in frame.bold}
    assert (5, 5) in bold
    centre = bold[(5, 5)]
    assert centre.bold
    assert centre.char == "O"
    assert centre.opacity == pytest.approx(0.85)
    assert all(not c.bold for c in frame.normal)
    assert all(c.bold for c in frame.bold)


def test_draw_order_is_normal_then_bold():
    r = DensityRasterizer(400, 400, font_size=20)
    frame = r.render(stacked(3) + stacked(1, x=300.0, y=300.0))
    flags = [c.bold for c in frame.cells()]
    assert flags == sorted(flags)
    assert flags[0] is False and flags[-1] is True


def test_passes_are_row_major():
    r = DensityRasterizer(400, 400, font_size=20)
    frame = r.render(stacked(3) + stacked(1, x=300.0, y=60.0))
    keys = [(c.row, c.col) for c in frame.normal]
    assert keys == sorted(keys)


def test_opacity_is_capped_at_one():
    r = DensityRasterizer(400, 400, font_size=20)
    frame = r.render(stacked(10))
    assert max(c.opacity for c in frame.cells()) == 1.0


def test_glyph_index_clamps_to_palette():
    r = DensityRasterizer(400, 400, font_size=20, characters="ab")
    frame = r.render(stacked(3))
    assert frame.grid()[5][5] == ("b", pytest.approx(0.85))


def test_empty_palette_update_is_ignored():
    r = DensityRasterizer(100, 100, characters="xyz")
    assert r.set_characters("") is False
    assert r.set_characters(None) is False
    assert r.characters == ("x", "y", "z")
    assert r.set_characters(["#", "@"]) is True
    assert r.characters == ("#", "@")


def test_rendering_twice_is_idempotent():
    engine = FluidEngine(320, 200, particle_count=300, seed=9)
    for i in range(10):
        engine.step(t=i / 60)
    r = DensityRasterizer(320, 200, font_size=10)

    first = r.render(engine.particles)
    density = r.density.copy()
    second = r.render(engine.particles)

    assert first == second
    assert np.array_equal(density, r.density)


def test_array_and_particle_inputs_agree():
    engine = FluidEngine(200, 200, particle_count=50, seed=1)
    r = DensityRasterizer(200, 200, font_size=10)
    assert r.render(engine.particles) == r.render(engine.positions())


def test_contributions_add_up():
    a = np.array([[50.0, 50.0]])
    b = np.array([[70.0, 55.0]])
    r = DensityRasterizer(200, 200, font_size=10)
    da = r.splat(a).copy()
    db = r.splat(b).copy()
    both = r.splat(np.vstack([a, b]))
    assert np.allclose(both, da + db)


def test_resize_then_render_stays_in_bounds():
    r = DensityRasterizer(400, 400, font_size=20)
    particles = [Particle(x=400.0, y=400.0), Particle(x=0.0, y=0.0), Particle(x=399.9, y=5.0)]
    r.render(particles)

    r.resize(130, 50)
    frame = r.render(particles)

    assert (frame.cols, frame.rows) == (7, 3)
    assert r.density.shape == (3, 7)
    for cell in frame.cells():
        assert 0 <= cell.row < 3 and 0 <= cell.col < 7


def test_particle_on_far_edge_is_drawn_in_last_cells():
    r = DensityRasterizer(200, 100, font_size=20)
    frame = r.render([Particle(x=200.0, y=100.0)])
    grid = frame.grid()
    assert grid[4][9] is not None
    assert len(grid) == 5 and len(grid[0]) == 10


def test_font_size_change_recomputes_grid():
    r = DensityRasterizer(200, 100, font_size=20)
    r.set_font_size(10)
    assert (r.cols, r.rows) == (20, 10)
    with pytest.raises(ValueError):
        r.set_font_size(0)


@pytest.mark.parametrize("width,height", [(0, 10), (10, -1)])
def test_invalid_viewport_rejected(width, height):
    r = DensityRasterizer(100, 100)
    with pytest.raises(ValueError):
        r.resize(width, height)


def test_invalid_font_size_rejected():
    with pytest.raises(ValueError):
        DensityRasterizer(100, 100, font_size=-4)


def test_density_view_is_read_only():
    r = DensityRasterizer(100, 100)
    with pytest.raises(ValueError):
        r.density[0, 0] = 1.0


def test_frame_text_layout():
    frame = GlyphFrame(3, 2)
    assert frame.to_text(blank="_") == "___\n___"
