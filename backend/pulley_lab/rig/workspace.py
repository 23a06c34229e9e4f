"""Rig workspace: one editable rig plus its simulation stepper.

Editing calls are rejected as no-ops while a simulation is running, so the
pairs captured at start never see the graph change underneath them.
"""
from __future__ import annotations

from typing import Any

from pulley_lab.logging_utils import get_logger
from pulley_lab.rig.entities import EntityStore
from pulley_lab.rig.graph import ConnectionGraph
from pulley_lab.rig.ports import PortRegistry
from pulley_lab.rig.resolver import build_pairs
from pulley_lab.rig.schema import (
  Entity,
  EntityKind,
  EntityView,
  FixedPulley,
  Load,
  MovablePulley,
  Point,
  PortRef,
  Readout,
  RigConfig,
  RigSnapshot,
  SimulationState,
)
from pulley_lab.rig.stepper import PhysicsStepper

logger = get_logger("rig.workspace")


class Rig:
  def __init__(self, config: RigConfig | None = None, stepper: PhysicsStepper | None = None):
    self.config = config or RigConfig()
    self.store = EntityStore(self.config)
    self.graph = ConnectionGraph()
    self.ports = PortRegistry(self.store, self.graph)
    self.stepper = stepper or PhysicsStepper(self.config)

  @property
  def state(self) -> SimulationState:
    return self.stepper.state

  def _editable(self, action: str) -> bool:
    if self.stepper.running:
      logger.debug("%s ignored while simulation is running", action)
      return False
    return True

  # Editing

  def place(self, kind: EntityKind | str, position: Point, mass: Any = None) -> Entity | None:
    if not self._editable("place"):
      return None
    return self.store.place(kind, position, mass)

  def move_to(self, entity_id: int, position: Point) -> Entity | None:
    if not self._editable("move"):
      return None
    return self.store.move_to(entity_id, position)

  def rotate(self, entity_id: int, increment_deg: float | None = None) -> bool:
    if not self._editable("rotate"):
      return False
    if increment_deg is None:
      increment_deg = self.config.rotation_step_deg
    return self.store.rotate(entity_id, increment_deg)

  def delete(self, entity_id: int) -> bool:
    if not self._editable("delete"):
      return False
    return self.store.delete(entity_id, self.graph)

  def connect(self, x: PortRef, y: PortRef) -> bool:
    if not self._editable("connect"):
      return False
    if not (self.ports.exists(x) and self.ports.exists(y)):
      logger.debug("Connect %s <-> %s ignored: unknown port", x, y)
      return False
    return self.graph.connect(x, y)

  def disconnect(self, ref: PortRef) -> bool:
    if not self._editable("disconnect"):
      return False
    return self.graph.disconnect(ref)

  # Simulation control

  def start_simulation(self) -> bool:
    if self.stepper.running:
      return False
    return self.stepper.start(build_pairs(self.store, self.graph, self.config.gravity_m_s2))

  def stop_simulation(self) -> None:
    self.stepper.stop()

  def tick(self, dt: float) -> None:
    self.stepper.tick(dt)

  def advance(self) -> None:
    self.stepper.advance()

  def current_readout(self) -> Readout | None:
    return self.stepper.current_readout()

  # Snapshots

  def entity_view(self, entity: Entity) -> EntityView:
    view = EntityView(
      kind=EntityKind(entity.kind),
      id=entity.id,
      position=entity.position,
      ports=self.ports.views(entity),
    )
    if isinstance(entity, (FixedPulley, MovablePulley)):
      view.radius = entity.radius
      view.rotation = entity.rotation
    elif isinstance(entity, Load):
      view.width = entity.width
      view.height = entity.height
      view.mass_kg = entity.mass_kg
      view.velocity = entity.velocity
    return view

  def snapshot(self) -> RigSnapshot:
    return RigSnapshot(
      entities=[self.entity_view(e) for e in self.store],
      connections=self.graph.connections(),
      state=self.state,
      readout=self.current_readout(),
    )


__all__ = ["Rig"]
