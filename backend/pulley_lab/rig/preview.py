from __future__ import annotations

from copy import deepcopy
from typing import Optional

from pydantic import BaseModel, Field

from pulley_lab.models.settings import settings
from pulley_lab.rig.schema import Point, Readout
from pulley_lab.rig.workspace import Rig


class PreviewFrame(BaseModel):
  """Single preview frame."""
  t: float = Field(description="Time in seconds since the run started")
  positions: dict[int, Point] = Field(description="Load positions {load_id: (x_px, y_px)}")
  velocities: dict[int, float] = Field(default_factory=dict, description="Load velocities {load_id: v_m_s}")


class PreviewResult(BaseModel):
  frames: list[PreviewFrame] = Field(default_factory=list)
  readout: Optional[Readout] = None
  stopped_early: bool = Field(False, description="True when a load hit a bound before duration_s elapsed")


def _frame(rig: Rig, t: float, load_ids: list[int]) -> PreviewFrame:
  positions: dict[int, Point] = {}
  velocities: dict[int, float] = {}
  for load_id in load_ids:
    load = rig.store.require(load_id)
    positions[load_id] = (float(load.position[0]), float(load.position[1]))
    velocities[load_id] = float(load.velocity)
  return PreviewFrame(t=round(t, 5), positions=positions, velocities=velocities)


def preview_rig(rig: Rig, dt_s: Optional[float] = None, duration_s: float = 5.0) -> PreviewResult:
  """Run a copy of ``rig`` with fixed steps and record load frames.

  Stops at ``duration_s`` or when the copy's stepper halts on a bound,
  whichever comes first. The given rig is left untouched; an already running
  rig is previewed from its current state.
  """
  if dt_s is None or dt_s <= 0:
    dt_s = settings.PREVIEW_TIME_STEP_S
  sandbox = deepcopy(rig)
  if not sandbox.stepper.running and not sandbox.start_simulation():
    return PreviewResult()

  load_ids = sorted({
    load.id
    for pair in sandbox.stepper.pairs
    for load in (pair.load_a, pair.load_b)
  })
  frames = [_frame(sandbox, 0.0, load_ids)]
  steps = max(1, int(duration_s / dt_s + 1e-9))
  for i in range(1, steps + 1):
    sandbox.tick(dt_s)
    frames.append(_frame(sandbox, i * dt_s, load_ids))
    if not sandbox.stepper.running:
      break

  return PreviewResult(
    frames=frames,
    readout=sandbox.current_readout(),
    stopped_early=not sandbox.stepper.running,
  )


__all__ = ["PreviewFrame", "PreviewResult", "preview_rig"]
