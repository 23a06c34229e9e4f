"""Time-stepped Atwood kinematics for the pairs derived at simulation start.

Conventions:
- Screen coordinates, y grows downward; positive velocity means descending.
- Velocities are m/s; displacement is scaled to pixels by ``pixels_per_meter``.
- Any pair touching a bound stops the whole run, not just that pair.
"""
from __future__ import annotations

import time
from typing import Callable, Iterable, List

from pulley_lab.logging_utils import get_logger
from pulley_lab.rig.ports import port_position
from pulley_lab.rig.resolver import SimulationPair
from pulley_lab.rig.schema import Load, Readout, RigConfig, SimulationState

logger = get_logger("rig.stepper")


class PhysicsStepper:
  def __init__(self, config: RigConfig | None = None, clock: Callable[[], float] = time.monotonic):
    self.config = config or RigConfig()
    self.clock = clock
    self.state = SimulationState.IDLE
    self.pairs: List[SimulationPair] = []
    self.started_at: float | None = None
    self._last_time: float | None = None
    self._readout: Readout | None = None

  @property
  def running(self) -> bool:
    return self.state is SimulationState.RUNNING

  def start(self, pairs: Iterable[SimulationPair]) -> bool:
    if self.running:
      return False
    pairs = list(pairs)
    if not pairs:
      logger.info("No load pairs hang from a fixed pulley; simulation stays idle")
      return False
    self.pairs = pairs
    for pair in pairs:
      self._relock(pair, pair.load_a, "a", pair.load_a.position[1])
      self._relock(pair, pair.load_b, "b", pair.load_b.position[1])
    self.state = SimulationState.RUNNING
    self.started_at = self._last_time = self.clock()
    logger.info("Simulation started with %d pair(s)", len(pairs))
    return True

  def stop(self) -> None:
    if self.running:
      logger.info("Simulation stopped")
    self.state = SimulationState.IDLE
    self.pairs = []
    self._last_time = None

  def advance(self) -> None:
    """Tick with the wall-clock time elapsed since the previous tick (unclamped)."""
    if not self.running or self._last_time is None:
      return
    now = self.clock()
    dt = now - self._last_time
    self._last_time = now
    self.tick(dt)

  def tick(self, dt: float) -> None:
    if not self.running:
      return
    collided = False
    for pair in self.pairs:
      if self._step_pair(pair, dt):
        collided = True
      self._readout = Readout(
        pulley_id=pair.pulley_id,
        acceleration_m_s2=pair.acceleration,
        tension_n=pair.tension,
        direction=pair.direction,
      )
    if collided:
      self.stop()

  def current_readout(self) -> Readout | None:
    return self._readout

  def _step_pair(self, pair: SimulationPair, dt: float) -> bool:
    """Advance one pair. Returns True when a load reached a bound."""
    a, b = pair.load_a, pair.load_b
    if self._out_of_bounds(pair, a) or self._out_of_bounds(pair, b):
      self._halt(pair)
      return True

    dv = pair.direction * pair.acceleration * dt
    b.velocity += dv
    a.velocity -= dv

    scale = self.config.pixels_per_meter
    self._relock(pair, a, "a", a.position[1] + a.velocity * scale * dt)
    self._relock(pair, b, "b", b.position[1] + b.velocity * scale * dt)

    if self._out_of_bounds(pair, a) or self._out_of_bounds(pair, b):
      self._halt(pair)
      return True
    return False

  def _relock(self, pair: SimulationPair, load: Load, port: str, y: float) -> None:
    port_x, _ = port_position(pair.pulley, port, self.config)
    load.position = (port_x - load.width / 2.0, y)

  def _out_of_bounds(self, pair: SimulationPair, load: Load) -> bool:
    pulley = pair.pulley
    upper = pulley.position[1] - pulley.radius - self.config.stop_clearance_px
    lower = self.config.surface.bottom - load.height - self.config.floor_margin_px
    y = load.position[1]
    return y <= upper or y >= lower

  def _halt(self, pair: SimulationPair) -> None:
    pair.load_a.velocity = 0.0
    pair.load_b.velocity = 0.0
    logger.info("Pulley #%d: load reached a bound, halting run", pair.pulley_id)


__all__ = ["PhysicsStepper"]
