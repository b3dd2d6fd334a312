"""
Application entry point — CLI parsing, dependency checks, Qt or terminal launch.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .engine import MAX_PARTICLES
from .renderer import MAX_FONT_SIZE, MIN_FONT_SIZE

FRAME_RATE = 60.0


def _check_deps() -> list:
    missing = []
    try:
        import numpy  # noqa: F401
    except ImportError:
        missing.append("numpy")
    try:
        import PyQt5  # noqa: F401
    except ImportError:
        missing.append("PyQt5")
    return missing


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="liquidascii",
        description="Liquid ASCII — a particle fluid drawn with text glyphs.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  %(prog)s                               # window, particle count from size\n"
            "  %(prog)s --particles 3000 --scheme lava\n"
            "  %(prog)s --palette blocks --font-size 14\n"
            "  %(prog)s --headless --frames 200 -W 800 -H 400\n"
            "  %(prog)s --list-palettes                # show glyph palettes\n"
            "  %(prog)s -v                             # verbose logging\n"
        ),
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--particles", type=int, default=None,
                   help=f"Particle count (0–{MAX_PARTICLES}, default from window area)")
    p.add_argument("--font-size", type=int, default=20,
                   help=f"Glyph cell size in px ({MIN_FONT_SIZE}–{MAX_FONT_SIZE}, default 20)")
    p.add_argument("--chars", type=str, default=None, help="Glyph palette, lightest to densest")
    p.add_argument("--palette", type=str, default="classic", help="Named glyph palette")
    p.add_argument("--scheme", type=str, default="mono", help="Colour scheme")
    p.add_argument("--viscosity", type=float, default=0.99, help="Velocity retention per tick (0–1]")
    p.add_argument("--gravity", type=float, default=0.05, help="Downward gravity (default 0.05)")
    p.add_argument("--no-ambient", action="store_true", help="Disable the ambient swirl")
    p.add_argument("-W", "--width", type=int, default=960, help="Domain width in px")
    p.add_argument("-H", "--height", type=int, default=640, help="Domain height in px")
    p.add_argument("--seed", type=int, default=None, help="RNG seed")
    p.add_argument("--headless", action="store_true", help="Run in the terminal without Qt")
    p.add_argument("--frames", type=int, default=120, help="Ticks to run in headless mode")
    p.add_argument("--list-schemes", action="store_true", help="List colour schemes and exit")
    p.add_argument("--list-palettes", action="store_true", help="List glyph palettes and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p.parse_args(argv)


def _fail(msg: str) -> None:
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


def run_headless(engine, renderer, frames: int) -> str:
    """Step *frames* ticks and return the final frame as text."""
    frame = renderer.render(engine.particles)
    for i in range(frames):
        engine.step(t=i / FRAME_RATE)
        frame = renderer.render(engine.particles)
    return frame.to_text()


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    logger = logging.getLogger("liquidascii")

    from .palettes import (
        GLYPH_PALETTES,
        SCHEMES,
        get_palette,
        get_scheme,
        list_palettes,
        list_schemes,
    )

    if args.list_schemes:
        print("Available colour schemes:")
        for key in list_schemes():
            s = SCHEMES[key]
            print(f"  {key:10s}  {s.name:16s}  text={s.text_hex}  background={s.background_hex}")
        sys.exit(0)

    if args.list_palettes:
        print("Available glyph palettes:")
        for key in list_palettes():
            print(f"  {key:10s}  {GLYPH_PALETTES[key]}")
        sys.exit(0)

    # Validate
    if args.particles is not None and not (0 <= args.particles <= MAX_PARTICLES):
        _fail(f"--particles must be 0–{MAX_PARTICLES}.")
    if not (MIN_FONT_SIZE <= args.font_size <= MAX_FONT_SIZE):
        _fail(f"--font-size must be {MIN_FONT_SIZE}–{MAX_FONT_SIZE}.")
    if not (0 < args.viscosity <= 1):
        _fail("--viscosity must be in (0, 1].")
    if args.width <= 0 or args.height <= 0:
        _fail("--width and --height must be positive.")
    if args.frames < 0:
        _fail("--frames must not be negative.")
    if args.chars is not None and not args.chars:
        _fail("--chars must not be empty.")

    try:
        scheme = get_scheme(args.scheme)
        chars = args.chars or get_palette(args.palette)
    except KeyError as e:
        _fail(e.args[0])

    from .engine import FluidEngine, SimulationParams
    from .renderer import DensityRasterizer

    params = SimulationParams(
        gravity_y=args.gravity,
        viscosity=args.viscosity,
        ambient_motion=not args.no_ambient,
    )
    engine = FluidEngine(args.width, args.height, args.particles, params=params, seed=args.seed)
    renderer = DensityRasterizer(args.width, args.height, args.font_size, chars)

    if args.headless:
        logger.info("Headless run: %d particles, %d frames", engine.particle_count, args.frames)
        print(run_headless(engine, renderer, args.frames))
        return

    # Dependency check
    missing = _check_deps()
    if missing:
        _fail(f"Missing packages: {', '.join(missing)}\n"
              f"Install: pip install {' '.join(missing)}")

    logger.info("Starting Liquid ASCII v%s", __version__)
    logger.info("Particles: %d, Scheme: %s, Font: %dpx",
                engine.particle_count, args.scheme, args.font_size)

    from PyQt5.QtWidgets import QApplication
    from .main_window import MainWindow

    app = QApplication(sys.argv[:1])
    app.setStyle("Fusion")
    app.setApplicationName("Liquid ASCII")
    app.setApplicationVersion(__version__)

    # Dark theme
    app.setStyleSheet("""
        QMainWindow, QWidget {
            background: #1e1e1e;
            color: #c8c8c8;
        }
        QGroupBox {
            font-weight: bold;
            font-size: 12px;
            color: #d0d0d0;
            border: 1px solid #3a3a3a;
            border-radius: 6px;
            margin-top: 8px;
            padding-top: 14px;
        }
        QGroupBox::title {
            subcontrol-origin: margin;
            subcontrol-position: top left;
            padding: 2px 8px;
        }
        QPushButton {
            background: #2a2a2a;
            border: 1px solid #4a4a4a;
            border-radius: 5px;
            padding: 5px 12px;
            color: #c8c8c8;
        }
        QPushButton:hover {
            background: #3a3a3a;
        }
        QPushButton:checked {
            background: #505050;
            color: #f0f0f0;
        }
        QComboBox, QLineEdit {
            background: #2a2a2a;
            border: 1px solid #4a4a4a;
            border-radius: 4px;
            padding: 4px 8px;
            color: #c8c8c8;
            font-family: monospace;
        }
        QSlider::groove:horizontal {
            height: 4px;
            background: #3a3a3a;
            border-radius: 2px;
        }
        QSlider::handle:horizontal {
            background: #999999;
            width: 14px;
            height: 14px;
            margin: -5px 0;
            border-radius: 7px;
        }
        QLabel {
            color: #b0b0b0;
            font-size: 12px;
        }
        QStatusBar {
            color: #8a8a8a;
            font-size: 11px;
        }
    """)

    window = MainWindow(engine, renderer, scheme)
    window.resize(args.width + 330, args.height)
    window.show()

    sys.exit(app.exec_())
