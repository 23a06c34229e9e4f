"""Port registry: read-only view of attachment points over the store and graph."""
from __future__ import annotations

import math

from pulley_lab.rig.entities import EntityStore
from pulley_lab.rig.graph import ConnectionGraph
from pulley_lab.rig.schema import PORTS, Entity, Load, Point, PortRef, PortView, RigConfig


def ports_of(entity: Entity) -> tuple[str, ...]:
  return PORTS[entity.kind]


def port_position(entity: Entity, port: str, config: RigConfig) -> Point:
  """Canvas position of a port. Rotation is cosmetic and does not move ports."""
  x, y = entity.position
  if isinstance(entity, Load):
    return (x + entity.width / 2.0, y - config.load_port_lift_px)
  if port == "a":
    return (x - entity.radius - config.port_offset_px, y)
  if port == "b":
    return (x + entity.radius + config.port_offset_px, y)
  # suspension point of a movable pulley
  return (x, y - (entity.radius + config.suspension_offset_px))


class PortRegistry:
  def __init__(self, store: EntityStore, graph: ConnectionGraph):
    self.store = store
    self.graph = graph

  def ports_of(self, entity: Entity) -> tuple[str, ...]:
    return ports_of(entity)

  def is_used(self, entity_id: int, port: str) -> bool:
    return self.graph.is_used(PortRef(entity_id=entity_id, port=port))

  def exists(self, ref: PortRef) -> bool:
    entity = self.store.get(ref.entity_id)
    return entity is not None and ref.port in ports_of(entity)

  def position_of(self, ref: PortRef) -> Point:
    entity = self.store.require(ref.entity_id)
    if ref.port not in ports_of(entity):
      raise KeyError(f"{entity.kind} #{entity.id} has no port {ref.port!r}")
    return port_position(entity, ref.port, self.store.config)

  def hit_test(self, point: Point, tolerance: float | None = None) -> PortRef | None:
    """Nearest port within ``tolerance`` of ``point``; earlier entities win ties."""
    if tolerance is None:
      tolerance = self.store.config.port_hit_tolerance_px
    best: PortRef | None = None
    best_dist = math.inf
    for entity in self.store:
      for port in ports_of(entity):
        px, py = port_position(entity, port, self.store.config)
        d = math.hypot(point[0] - px, point[1] - py)
        if d <= tolerance and d < best_dist:
          best = PortRef(entity_id=entity.id, port=port)
          best_dist = d
    return best

  def views(self, entity: Entity) -> list[PortView]:
    return [
      PortView(
        name=port,
        position=port_position(entity, port, self.store.config),
        used=self.is_used(entity.id, port),
      )
      for port in ports_of(entity)
    ]


__all__ = ["PortRegistry", "ports_of", "port_position"]
