"""
Liquid ASCII physics engine.

Manages particle state and runs the thermal buoyancy / soft-repulsion
simulation.  Positions are world coordinates with y growing downwards,
so the heating band is the bottom ``thermal_zone`` units of the domain.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

import numpy as np

from .spatial import SpatialIndex

logger = logging.getLogger(__name__)

MIN_DEFAULT_PARTICLES = 200
MAX_PARTICLES = 5000
AREA_PER_PARTICLE = 800


def default_particle_count(width: float, height: float) -> int:
    """Heuristic count for a domain: one particle per 800 square units."""
    count = int(width * height // AREA_PER_PARTICLE)
    return max(MIN_DEFAULT_PARTICLES, min(MAX_PARTICLES, count))


def _check_domain(width: float, height: float) -> None:
    if not (width > 0 and height > 0):
        raise ValueError(f"Domain must be positive, got {width}x{height}")


# ---------------------------------------------------------------------------
# Particle
# ---------------------------------------------------------------------------

@dataclass
class Particle:
    """A single fluid particle."""
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    temperature: float = 0.0   # 0=cold/heavy, 1=hot/buoyant

    @classmethod
    def random(cls, rng: np.random.Generator, width: float, height: float) -> "Particle":
        """Fresh particle somewhere in the upper half of the domain."""
        return cls(
            x=float(rng.uniform(0, width)),
            y=float(rng.uniform(0, height * 0.5)),
            vx=float(rng.uniform(-0.5, 0.5)),
            vy=float(rng.uniform(-0.5, 0.5)),
            temperature=float(rng.uniform(0, 1)),
        )

    def update(self, dt: float, gx: float, gy: float, viscosity: float) -> None:
        """Integrate one step under buoyancy-adjusted gravity.

        The gravity scale ``1 - 2.5 * temperature`` crosses zero at a
        temperature of 0.4, not 0.5.
        """
        scale = 1.0 - 2.5 * self.temperature
        self.vx += gx * scale
        self.vy += gy * scale

        self.vx *= viscosity
        self.vy *= viscosity

        self.x += self.vx * dt
        self.y += self.vy * dt


# ---------------------------------------------------------------------------
# Simulation parameters (user-tunable)
# ---------------------------------------------------------------------------

@dataclass
class SimulationParams:
    """All tuneable simulation constants.

    Mutated live by the control panel; the engine works from a
    :meth:`snapshot` taken at the start of each step.
    """
    # Forces
    gravity_x: float = 0.0
    gravity_y: float = 0.05
    viscosity: float = 0.99

    # Pointer interaction
    repulsion_radius: float = 100.0
    repulsion_force: float = 0.8
    drag_strength: float = 0.5

    # Ambient swirl
    ambient_motion: bool = True
    ambient_strength: float = 0.03
    ambient_frequency: float = 0.005

    # Separation
    separation_spacing: float = 16.0
    separation_stiffness: float = 0.3
    grid_cell_size: float = 20.0

    # Walls
    dampening: float = 0.7

    # Thermal
    heat_speed: float = 0.003
    thermal_zone: float = 150.0

    def snapshot(self) -> "SimulationParams":
        """Validated copy, with every value clamped into its usable range.

        The grid cell is never smaller than the separation spacing, so the
        3×3 bucket search always reaches every particle within range.
        """
        spacing = max(0.0, self.separation_spacing)
        return replace(
            self,
            viscosity=min(1.0, max(0.0, self.viscosity)),
            dampening=min(1.0, max(0.0, self.dampening)),
            repulsion_radius=max(0.0, self.repulsion_radius),
            repulsion_force=max(0.0, self.repulsion_force),
            drag_strength=max(0.0, self.drag_strength),
            ambient_strength=max(0.0, self.ambient_strength),
            separation_spacing=spacing,
            separation_stiffness=max(0.0, self.separation_stiffness),
            grid_cell_size=max(1.0, self.grid_cell_size, spacing),
            heat_speed=max(0.0, self.heat_speed),
            thermal_zone=max(0.0, self.thermal_zone),
        )


@dataclass(frozen=True)
class Pointer:
    """External pointer position and per-tick velocity.

    Absence of a pointer is ``None``; ``Pointer(0, 0)`` is a real pointer
    at the top-left corner.
    """
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0

    @property
    def moving(self) -> bool:
        return self.vx != 0 or self.vy != 0


class PointerTracker:
    """Turns raw move / leave events into the per-tick :class:`Pointer`.

    Velocity is the delta between successive moves.  Move events stop
    while the mouse rests, so :meth:`decay` scales the velocity down once
    per tick.
    """

    def __init__(self, decay: float = 0.1) -> None:
        self.decay_factor = decay
        self.pointer: Optional[Pointer] = None
        self._last: Optional[Tuple[float, float]] = None

    def move(self, x: float, y: float) -> Pointer:
        vx = vy = 0.0
        if self._last is not None:
            vx = x - self._last[0]
            vy = y - self._last[1]
        self._last = (x, y)
        self.pointer = Pointer(x, y, vx, vy)
        return self.pointer

    def press(self, x: float, y: float) -> Pointer:
        """Pointer appears at rest (e.g. a touch or click without motion)."""
        self._last = (x, y)
        self.pointer = Pointer(x, y)
        return self.pointer

    def leave(self) -> None:
        self.pointer = None
        self._last = None

    def decay(self) -> Optional[Pointer]:
        ptr = self.pointer
        if ptr is not None and ptr.moving:
            k = self.decay_factor
            self.pointer = Pointer(ptr.x, ptr.y, ptr.vx * k, ptr.vy * k)
        return self.pointer


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class FluidEngine:
    """Owns the particles and spatial index and advances them one tick at a time.

    Parameters:
        width, height:  Domain size in world units (pixels).
        particle_count: Number of particles (None = area heuristic).
        params:         Simulation parameters (or defaults).
        seed:           RNG seed for reproducibility (None = random).
    """

    DT = 1.0

    def __init__(
        self,
        width: float,
        height: float,
        particle_count: Optional[int] = None,
        params: Optional[SimulationParams] = None,
        seed: Optional[int] = None,
    ) -> None:
        _check_domain(width, height)
        self.width = float(width)
        self.height = float(height)
        self.params = params or SimulationParams()
        self.max_particles = MAX_PARTICLES
        self.rng = np.random.default_rng(seed)
        self.index: SpatialIndex[Particle] = SpatialIndex(self.params.grid_cell_size)
        self.particles: List[Particle] = []
        self.ticks = 0
        self.reset(particle_count)

    # ── particle management ───────────────────────────────────────────────

    def reset(self, particle_count: Optional[int] = None) -> None:
        """Discard all particles and create a fresh set."""
        if particle_count is None:
            particle_count = default_particle_count(self.width, self.height)
        self.particles = []
        self.ticks = 0
        self._add_particles(self._clamp_count(particle_count))
        logger.info("Engine reset: %d particles in %gx%g",
                    len(self.particles), self.width, self.height)

    def set_particle_count(self, count: int) -> None:
        """Grow by appending fresh particles or shrink by truncating the tail."""
        count = self._clamp_count(count)
        current = len(self.particles)
        if count > current:
            self._add_particles(count - current)
        elif count < current:
            del self.particles[count:]
        else:
            return
        logger.info("Particle count %d -> %d", current, count)

    def _clamp_count(self, count: int) -> int:
        return max(0, min(self.max_particles, int(count)))

    def _add_particles(self, count: int) -> None:
        for _ in range(count):
            self.particles.append(Particle.random(self.rng, self.width, self.height))

    @property
    def particle_count(self) -> int:
        return len(self.particles)

    def resize(self, width: float, height: float) -> None:
        """Change the domain; particles are clamped on the next boundary pass."""
        _check_domain(width, height)
        self.width = float(width)
        self.height = float(height)
        logger.debug("Engine resized to %gx%g", self.width, self.height)

    # ── physics step ──────────────────────────────────────────────────────

    def step(
        self,
        params: Optional[SimulationParams] = None,
        pointer: Optional[Pointer] = None,
        t: Optional[float] = None,
    ) -> None:
        """Advance the simulation by one tick.

        Parameters:
            params:  Parameters for this tick (None = ``self.params``).
            pointer: External pointer, or None when there is none.
            t:       Animation time for the ambient swirl (None = wall clock).
        """
        p = (params or self.params).snapshot()
        if t is None:
            t = time.time()

        self.apply_pointer(pointer, p)
        self.apply_forces(p, t)
        self.apply_separation(p)
        self.apply_bounds(p)
        self.ticks += 1

    def apply_forces(self, p: SimulationParams, t: float) -> None:
        """Thermal zones, gravity plus ambient swirl, and integration."""
        dt = self.DT
        bottom_zone = self.height - p.thermal_zone
        top_zone = p.thermal_zone
        swirl = p.ambient_strength if p.ambient_motion else 0.0
        k = p.ambient_frequency

        for b in self.particles:
            # ── Heat transfer ──
            if b.y > bottom_zone:
                b.temperature = min(1.0, b.temperature + p.heat_speed)
            if b.y < top_zone:
                b.temperature = max(0.0, b.temperature - p.heat_speed)

            gx = p.gravity_x
            gy = p.gravity_y
            if swirl > 0:
                gx += math.sin(b.y * k + t) * swirl
                gy += math.cos(b.x * k + t) * swirl

            b.update(dt, gx, gy, p.viscosity)

    def apply_pointer(self, pointer: Optional[Pointer], p: SimulationParams) -> None:
        """Radial push and stirring around the pointer; no-op without one."""
        if pointer is None:
            return
        radius = p.repulsion_radius
        radius_sq = radius * radius
        moving = pointer.moving

        for b in self.particles:
            dx = b.x - pointer.x
            dy = b.y - pointer.y
            dist_sq = dx * dx + dy * dy
            if dist_sq >= radius_sq:
                continue
            dist = math.sqrt(dist_sq)
            influence = 1.0 - dist / radius

            if dist > 0:
                push = influence * p.repulsion_force
                b.vx += dx / dist * push
                b.vy += dy / dist * push

            if moving:
                drag = influence * p.drag_strength
                b.vx += pointer.vx * drag
                b.vy += pointer.vy * drag

    def apply_separation(self, p: SimulationParams) -> None:
        """Soft pairwise repulsion between particles closer than the spacing."""
        index = self.index
        index.cell_size = p.grid_cell_size
        index.rebuild(self.particles, self.width, self.height)

        spacing = p.separation_spacing
        if spacing <= 0:
            return
        spacing_sq = spacing * spacing
        stiffness = p.separation_stiffness

        # positions are read-only in this pass, so the order does not matter
        for b in self.particles:
            bx = b.x
            by = b.y
            for n in index.neighbors(bx, by):
                if n is b:
                    continue
                dx = bx - n.x
                dy = by - n.y
                dist_sq = dx * dx + dy * dy
                if 0.001 < dist_sq < spacing_sq:
                    dist = math.sqrt(dist_sq)
                    force = (1.0 - dist / spacing) * stiffness
                    b.vx += dx / dist * force
                    b.vy += dy / dist * force

    def apply_bounds(self, p: SimulationParams) -> None:
        """Clamp into the domain with an inelastic bounce on each axis."""
        damp = p.dampening
        w = self.width
        h = self.height
        for b in self.particles:
            if b.x < 0:
                b.x = 0.0
                b.vx *= -damp
            if b.x > w:
                b.x = w
                b.vx *= -damp
            if b.y < 0:
                b.y = 0.0
                b.vy *= -damp
            if b.y > h:
                b.y = h
                b.vy *= -damp

    # ── mixing ────────────────────────────────────────────────────────────

    def stir(self, strength: float = 0.3) -> None:
        """Apply a random velocity impulse to all particles (like shaking)."""
        for b in self.particles:
            b.vx += self.rng.uniform(-1, 1) * strength
            b.vy += self.rng.uniform(-1, 1) * strength

    def heat_burst(self, strength: float = 0.3) -> None:
        """Instant temperature boost to all particles."""
        for b in self.particles:
            b.temperature = max(0.0, min(1.0, b.temperature + strength))

    # ── readouts ──────────────────────────────────────────────────────────

    def positions(self) -> np.ndarray:
        """``(N, 2)`` array of particle positions."""
        pos = np.empty((len(self.particles), 2), dtype=np.float64)
        for i, b in enumerate(self.particles):
            pos[i, 0] = b.x
            pos[i, 1] = b.y
        return pos

    @property
    def mean_temperature(self) -> float:
        if not self.particles:
            return 0.0
        return sum(b.temperature for b in self.particles) / len(self.particles)

    def temperature_range(self) -> Tuple[float, float]:
        if not self.particles:
            return 0.0, 0.0
        temps = [b.temperature for b in self.particles]
        return min(temps), max(temps)
