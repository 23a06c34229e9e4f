"""Entity store: identities, positions and placement rules for rig items."""
from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, Iterator

from pydantic import ValidationError

from pulley_lab.logging_utils import get_logger
from pulley_lab.rig.schema import (
  Entity,
  EntityKind,
  FixedPulley,
  Load,
  MovablePulley,
  Point,
  RigConfig,
)

if TYPE_CHECKING:
  from pulley_lab.rig.graph import ConnectionGraph

logger = get_logger("rig.entities")


def parse_mass(value: Any) -> float | None:
  """Coerce user input to a load mass; None when it is not a positive finite number."""
  if value is None or isinstance(value, bool):
    return None
  try:
    mass = float(value)
  except (TypeError, ValueError):
    return None
  if not math.isfinite(mass) or mass <= 0.0:
    return None
  return mass


def _finite_point(position: Any) -> Point | None:
  try:
    x, y = float(position[0]), float(position[1])
  except (TypeError, ValueError, IndexError):
    return None
  if not (math.isfinite(x) and math.isfinite(y)):
    return None
  return (x, y)


class EntityStore:
  """Owns every entity on the surface, in creation order."""

  def __init__(self, config: RigConfig | None = None):
    self.config = config or RigConfig()
    self._entities: dict[int, Entity] = {}
    self._next_id = 1

  def __iter__(self) -> Iterator[Entity]:
    return iter(list(self._entities.values()))

  def __len__(self) -> int:
    return len(self._entities)

  def __contains__(self, entity_id: object) -> bool:
    return entity_id in self._entities

  def ids(self) -> set[int]:
    return set(self._entities)

  def get(self, entity_id: int) -> Entity | None:
    return self._entities.get(entity_id)

  def require(self, entity_id: int) -> Entity:
    entity = self._entities.get(entity_id)
    if entity is None:
      raise KeyError(f"Unknown entity id: {entity_id}")
    return entity

  def fixed_pulleys(self) -> list[FixedPulley]:
    return [e for e in self._entities.values() if isinstance(e, FixedPulley)]

  def loads(self) -> list[Load]:
    return [e for e in self._entities.values() if isinstance(e, Load)]

  # Placement and editing

  def place(self, kind: EntityKind | str, position: Point, mass: Any = None) -> Entity | None:
    """Create an entity dropped at ``position``.

    Drops outside the surface are discarded. Loads are centred on the drop
    point and need a positive, finite ``mass``; otherwise nothing is created.
    """
    try:
      kind = EntityKind(kind)
    except ValueError:
      logger.debug("Unknown entity kind %r; ignored", kind)
      return None
    point = _finite_point(position)
    if point is None or not self.config.surface.contains(point):
      logger.debug("Drop at %s is outside the surface; ignored", position)
      return None

    x, y = point
    cfg = self.config
    try:
      if kind is EntityKind.LOAD:
        mass_kg = parse_mass(mass)
        if mass_kg is None:
          logger.debug("Rejected load with mass %r", mass)
          return None
        entity: Entity = Load(
          id=self._next_id,
          position=self.clamp((x - cfg.load_width_px / 2.0, y - cfg.load_height_px / 2.0)),
          width=cfg.load_width_px,
          height=cfg.load_height_px,
          mass_kg=mass_kg,
        )
      elif kind is EntityKind.FIXED_PULLEY:
        entity = FixedPulley(id=self._next_id, position=self.clamp((x, y)), radius=cfg.pulley_radius_px)
      else:
        entity = MovablePulley(id=self._next_id, position=self.clamp((x, y)), radius=cfg.pulley_radius_px)
    except ValidationError as e:
      logger.debug("Rejected %s placement: %s", kind.value, e)
      return None

    self._entities[entity.id] = entity
    self._next_id += 1
    logger.debug("Placed %s #%d at %s", kind.value, entity.id, entity.position)
    return entity

  def move_to(self, entity_id: int, position: Point) -> Entity | None:
    entity = self._entities.get(entity_id)
    if entity is None:
      return None
    target = _finite_point(position)
    if target is None:
      logger.debug("Move of #%d to %s ignored: non-finite coordinate", entity_id, position)
      return None
    if isinstance(entity, FixedPulley):
      target = self._snap_to_edges(entity, target)
    entity.position = self.clamp(target)
    return entity

  def rotate(self, entity_id: int, increment_deg: float) -> bool:
    entity = self._entities.get(entity_id)
    if entity is None or isinstance(entity, Load):
      return False
    entity.rotation = (entity.rotation + increment_deg) % 360
    return True

  def delete(self, entity_id: int, graph: "ConnectionGraph") -> bool:
    """Remove an entity after dropping every connection that touches it."""
    if entity_id not in self._entities:
      return False
    removed = graph.cascade_remove(entity_id)
    entity = self._entities.pop(entity_id)
    logger.debug("Deleted %s #%d (%d connections dropped)", entity.kind, entity_id, removed)
    return True

  # Geometry

  def clamp(self, point: Point) -> Point:
    s = self.config.surface
    inset = self.config.surface_inset_px
    x = min(max(point[0], s.left + inset), s.right - inset)
    y = min(max(point[1], s.top + inset), s.bottom - inset)
    return (x, y)

  def _snap_to_edges(self, pulley: FixedPulley, point: Point) -> Point:
    s = self.config.surface
    snap = self.config.snap_distance_px
    off = pulley.radius + self.config.snap_edge_offset_px
    x, y = point
    if abs(y - (s.top + off)) < snap:
      y = s.top + off
    elif abs(y - (s.bottom - off)) < snap:
      y = s.bottom - off
    elif abs(x - (s.left + off)) < snap:
      x = s.left + off
    elif abs(x - (s.right - off)) < snap:
      x = s.right - off
    return (x, y)


__all__ = ["EntityStore", "parse_mass"]
