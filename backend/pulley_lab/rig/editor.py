"""Editor input state machine: dragging items and two-click port selection.

States are explicit values (``Idle``, ``Dragging``, ``PortPending``) and only
change in response to input events; nothing is inferred from global state.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Literal, Optional, Union

from pulley_lab.logging_utils import get_logger
from pulley_lab.rig.schema import Entity, EntityKind, Load, Point, PortRef
from pulley_lab.rig.workspace import Rig

logger = get_logger("rig.editor")

Button = Literal["left", "right"]

_PULLEY_GRAB_MARGIN_PX = 10.0


@dataclass(frozen=True)
class Idle:
  pass


@dataclass(frozen=True)
class Dragging:
  entity_id: Optional[int] = None
  palette_kind: Optional[EntityKind] = None  # set when dragging a new item from the palette
  offset: Point = (0.0, 0.0)


@dataclass(frozen=True)
class PortPending:
  port: PortRef


EditorState = Union[Idle, Dragging, PortPending]


class EditorSession:
  def __init__(self, rig: Rig):
    self.rig = rig
    self.state: EditorState = Idle()

  def press(self, point: Point, button: Button = "left") -> EditorState:
    """Pointer down: ports take precedence over entity bodies."""
    ref = self.rig.ports.hit_test(point)
    if ref is not None:
      self._press_port(ref, button)
      return self.state

    if isinstance(self.state, PortPending):
      return self.state

    entity = self._entity_at(point)
    if entity is None:
      return self.state
    if isinstance(entity, Load):
      if button == "left":
        self._begin_drag(entity, point)
    elif button == "right":
      self.rig.rotate(entity.id)
    else:
      self._begin_drag(entity, point)
    return self.state

  def begin_placement(self, kind: EntityKind | str) -> EditorState:
    if isinstance(self.state, Idle):
      self.state = Dragging(palette_kind=EntityKind(kind))
    return self.state

  def drag(self, point: Point) -> Entity | None:
    if not isinstance(self.state, Dragging) or self.state.entity_id is None:
      return None
    ox, oy = self.state.offset
    return self.rig.move_to(self.state.entity_id, (point[0] - ox, point[1] - oy))

  def release(self, point: Point, mass: Any = None) -> Entity | None:
    """Pointer up: drop a palette item or dispose of a dragged entity."""
    state = self.state
    if not isinstance(state, Dragging):
      return None
    self.state = Idle()

    if state.palette_kind is not None:
      entity = self.rig.place(state.palette_kind, point, mass)
    else:
      entity = self.rig.store.get(state.entity_id)
    if entity is None:
      return None

    zx, zy = self.rig.config.disposal_zone
    ex, ey = entity.position
    if math.hypot(ex - zx, ey - zy) <= self.rig.config.disposal_radius_px:
      if not self.rig.delete(entity.id):
        return entity
      logger.debug("Disposed of %s #%d", entity.kind, entity.id)
      return None
    return entity

  def cancel(self) -> EditorState:
    self.state = Idle()
    return self.state

  def _press_port(self, ref: PortRef, button: Button) -> None:
    if self.rig.ports.is_used(ref.entity_id, ref.port):
      if button == "right":
        self.rig.disconnect(ref)
      return
    if button != "left":
      return
    if not isinstance(self.state, PortPending):
      self.state = PortPending(port=ref)
      return
    pending = self.state.port
    self.state = Idle()
    if pending != ref:
      self.rig.connect(pending, ref)

  def _begin_drag(self, entity: Entity, point: Point) -> None:
    if self.rig.stepper.running:
      logger.debug("Drag of %s #%d ignored while simulation runs", entity.kind, entity.id)
      return
    ex, ey = entity.position
    self.state = Dragging(entity_id=entity.id, offset=(point[0] - ex, point[1] - ey))

  def _entity_at(self, point: Point) -> Entity | None:
    x, y = point
    for entity in self.rig.store:
      ex, ey = entity.position
      if isinstance(entity, Load):
        if ex < x < ex + entity.width and ey < y < ey + entity.height:
          return entity
      elif math.hypot(x - ex, y - ey) < entity.radius + _PULLEY_GRAB_MARGIN_PX:
        return entity
    return None


__all__ = ["EditorSession", "EditorState", "Idle", "Dragging", "PortPending"]
