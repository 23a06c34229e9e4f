from __future__ import annotations

from dataclasses import dataclass
from typing import List

from pulley_lab.rig.entities import EntityStore
from pulley_lab.rig.graph import ConnectionGraph
from pulley_lab.rig.schema import FixedPulley, Load


@dataclass
class SimulationPair:
  """A fixed pulley with one load on each side, plus its Atwood solution.

  ``load_a``/``load_b`` are the store's own Load objects; the stepper moves
  them in place. ``acceleration`` is a magnitude and ``direction`` is +1 when
  the b-side load descends.
  """
  pulley: FixedPulley
  load_a: Load
  load_b: Load
  acceleration: float
  tension: float
  direction: int

  @property
  def pulley_id(self) -> int:
    return self.pulley.id


def atwood(mass_a: float, mass_b: float, g: float = 9.8) -> tuple[float, float, int]:
  """Return (signed acceleration, tension, direction) for an ideal Atwood machine.

  The signed acceleration is positive when the b side descends.
  """
  total = mass_a + mass_b
  a = g * (mass_b - mass_a) / total
  tension = 2.0 * g * mass_a * mass_b / total
  direction = 1 if mass_b > mass_a else -1
  return a, tension, direction


def build_pairs(store: EntityStore, graph: ConnectionGraph, gravity: float | None = None) -> List[SimulationPair]:
  """Derive runnable pairs from the current graph, in pulley creation order.

  Pulleys with fewer than two distinct connected loads are skipped.
  """
  g = store.config.gravity_m_s2 if gravity is None else float(gravity)
  pairs: List[SimulationPair] = []
  for pulley in store.fixed_pulleys():
    load_a = graph.connected_load(store, pulley.id, "a")
    load_b = graph.connected_load(store, pulley.id, "b")
    if load_a is None or load_b is None or load_a.id == load_b.id:
      continue
    a, tension, direction = atwood(load_a.mass_kg, load_b.mass_kg, g)
    pairs.append(SimulationPair(
      pulley=pulley,
      load_a=load_a,
      load_b=load_b,
      acceleration=abs(a),
      tension=tension,
      direction=direction,
    ))
  return pairs


__all__ = ["SimulationPair", "atwood", "build_pairs"]
