"""Connection graph: undirected port-to-port strings, one per port."""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from pulley_lab.logging_utils import get_logger
from pulley_lab.rig.schema import Connection, Load, PortRef

if TYPE_CHECKING:
  from pulley_lab.rig.entities import EntityStore

logger = get_logger("rig.graph")


class ConnectionGraph:
  def __init__(self):
    self._connections: list[Connection] = []

  def __len__(self) -> int:
    return len(self._connections)

  def connections(self) -> list[Connection]:
    return list(self._connections)

  def connection_of(self, ref: PortRef) -> Connection | None:
    return next((c for c in self._connections if c.touches(ref)), None)

  def is_used(self, ref: PortRef) -> bool:
    return self.connection_of(ref) is not None

  def connect(self, x: PortRef, y: PortRef) -> bool:
    """Join two free, distinct ports. Returns False (graph unchanged) otherwise."""
    if x == y:
      return False
    if self.is_used(x) or self.is_used(y):
      logger.debug("Connect %s <-> %s ignored: port already used", x, y)
      return False
    self._connections.append(Connection(from_port=x, to_port=y))
    logger.debug("Connected %s <-> %s", x, y)
    return True

  def disconnect(self, ref: PortRef) -> bool:
    before = len(self._connections)
    self._connections = [c for c in self._connections if not c.touches(ref)]
    return len(self._connections) != before

  def cascade_remove(self, entity_id: int) -> int:
    before = len(self._connections)
    self._connections = [c for c in self._connections if not c.involves(entity_id)]
    return before - len(self._connections)

  def connected_load(self, store: "EntityStore", pulley_id: int, port: str) -> Load | None:
    """Follow the string on ``(pulley_id, port)`` one hop; only loads count."""
    ref = PortRef(entity_id=pulley_id, port=port)
    connection = self.connection_of(ref)
    if connection is None:
      return None
    other = store.get(connection.other(ref).entity_id)
    return other if isinstance(other, Load) else None

  def validate_references(self, entity_ids: Iterable[int]) -> None:
    """Raise if any connection endpoint names an entity that no longer exists."""
    ids = set(entity_ids)
    missing = sorted({
      ref.entity_id
      for c in self._connections
      for ref in (c.from_port, c.to_port)
      if ref.entity_id not in ids
    })
    if missing:
      raise ValueError(f"Connections reference unknown entity ids: {missing}")


__all__ = ["ConnectionGraph"]
