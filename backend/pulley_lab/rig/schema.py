"""Rig schema for Pulley Lab.

Entities are a closed tagged union over fixed pulleys, movable pulleys and
loads, discriminated by ``kind``. Coordinates are canvas pixels with y growing
downward. Pulley positions are wheel centres; load positions are the top-left
corner of the block.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Point = tuple[float, float]
PortName = Literal["a", "b", "c"]


class EntityKind(str, Enum):
  FIXED_PULLEY = "fixed_pulley"
  MOVABLE_PULLEY = "movable_pulley"
  LOAD = "load"


class Surface(BaseModel):
  """Bounded working surface the rig is assembled on."""
  left: float = 60.0
  top: float = 60.0
  right: float = 680.0
  bottom: float = 500.0

  def contains(self, point: Point) -> bool:
    x, y = point
    return self.left < x < self.right and self.top < y < self.bottom


class RigConfig(BaseModel):
  """Geometry and physics constants shared by the rig core."""
  gravity_m_s2: float = Field(9.8, gt=0.0)
  pixels_per_meter: float = Field(35.0, gt=0.0, description="Displacement scale applied when integrating velocity.")
  stop_clearance_px: float = Field(35.0, description="Gap kept between a rising load and its pulley wheel.")
  floor_margin_px: float = 5.0
  surface: Surface = Field(default_factory=Surface)
  surface_inset_px: float = 20.0
  snap_distance_px: float = 20.0
  snap_edge_offset_px: float = 20.0
  pulley_radius_px: float = Field(25.0, gt=0.0)
  load_width_px: float = Field(40.0, gt=0.0)
  load_height_px: float = Field(40.0, gt=0.0)
  port_offset_px: float = 5.0
  suspension_offset_px: float = 20.0
  load_port_lift_px: float = 6.0
  port_hit_tolerance_px: float = Field(12.0, gt=0.0)
  rotation_step_deg: float = 90.0
  disposal_radius_px: float = 50.0
  disposal_inset_px: float = 50.0

  @property
  def disposal_zone(self) -> Point:
    return (self.surface.right - self.disposal_inset_px, self.surface.bottom - self.disposal_inset_px)

  @classmethod
  def from_settings(cls, settings) -> "RigConfig":
    return cls(
      gravity_m_s2=settings.GRAVITY_M_S2,
      pixels_per_meter=settings.PIXELS_PER_METER,
      stop_clearance_px=settings.STOP_CLEARANCE_PX,
      floor_margin_px=settings.FLOOR_MARGIN_PX,
      surface=Surface(
        left=settings.SURFACE_LEFT,
        top=settings.SURFACE_TOP,
        right=settings.SURFACE_RIGHT,
        bottom=settings.SURFACE_BOTTOM,
      ),
      surface_inset_px=settings.SURFACE_INSET_PX,
      snap_distance_px=settings.SNAP_DISTANCE_PX,
      snap_edge_offset_px=settings.SNAP_EDGE_OFFSET_PX,
      pulley_radius_px=settings.PULLEY_RADIUS_PX,
      load_width_px=settings.LOAD_WIDTH_PX,
      load_height_px=settings.LOAD_HEIGHT_PX,
      port_offset_px=settings.PORT_OFFSET_PX,
      suspension_offset_px=settings.SUSPENSION_OFFSET_PX,
      load_port_lift_px=settings.LOAD_PORT_LIFT_PX,
      port_hit_tolerance_px=settings.PORT_HIT_TOLERANCE_PX,
      rotation_step_deg=settings.ROTATION_STEP_DEG,
      disposal_radius_px=settings.DISPOSAL_RADIUS_PX,
      disposal_inset_px=settings.DISPOSAL_INSET_PX,
    )


class FixedPulley(BaseModel):
  """Anchored pulley; ports a/b are the two hanging sides."""
  kind: Literal["fixed_pulley"] = "fixed_pulley"
  id: int = Field(..., gt=0)
  position: Point
  radius: float = Field(25.0, gt=0.0)
  rotation: float = Field(0.0, description="Rotation in degrees (cosmetic, ports do not move).")


class MovablePulley(BaseModel):
  """Free pulley with an extra suspension port c. No dynamics are modelled."""
  kind: Literal["movable_pulley"] = "movable_pulley"
  id: int = Field(..., gt=0)
  position: Point
  radius: float = Field(25.0, gt=0.0)
  rotation: float = 0.0


class Load(BaseModel):
  kind: Literal["load"] = "load"
  id: int = Field(..., gt=0)
  position: Point = Field(..., description="Top-left corner of the block.")
  width: float = Field(40.0, gt=0.0)
  height: float = Field(40.0, gt=0.0)
  mass_kg: float = Field(..., gt=0.0)
  velocity: float = Field(0.0, description="Vertical velocity in m/s, positive downward.")

  @field_validator("mass_kg")
  @classmethod
  def _validate_mass(cls, v: float):  # type: ignore[override]
    if not math.isfinite(v):
      raise ValueError("mass_kg must be finite")
    return v


Entity = Annotated[Union[FixedPulley, MovablePulley, Load], Field(discriminator="kind")]
Pulley = Union[FixedPulley, MovablePulley]

PORTS: dict[str, tuple[str, ...]] = {
  EntityKind.FIXED_PULLEY.value: ("a", "b"),
  EntityKind.MOVABLE_PULLEY.value: ("a", "b", "c"),
  EntityKind.LOAD.value: ("c",),
}


class PortRef(BaseModel):
  """A named attachment point on one entity."""
  model_config = ConfigDict(frozen=True)

  entity_id: int
  port: PortName

  def __str__(self) -> str:
    return f"{self.entity_id}.{self.port}"


class Connection(BaseModel):
  """Undirected link between two distinct ports (one string segment)."""
  model_config = ConfigDict(frozen=True)

  from_port: PortRef
  to_port: PortRef

  def touches(self, ref: PortRef) -> bool:
    return ref == self.from_port or ref == self.to_port

  def involves(self, entity_id: int) -> bool:
    return self.from_port.entity_id == entity_id or self.to_port.entity_id == entity_id

  def other(self, ref: PortRef) -> PortRef:
    return self.to_port if ref == self.from_port else self.from_port


class SimulationState(str, Enum):
  IDLE = "idle"
  RUNNING = "running"


class Readout(BaseModel):
  """Display values of the most recently processed simulation pair."""
  pulley_id: int
  acceleration_m_s2: float = Field(..., ge=0.0, description="Magnitude of the pair's acceleration.")
  tension_n: float
  direction: Literal[1, -1] = Field(..., description="+1 when the b-side load descends.")


class PortView(BaseModel):
  name: PortName
  position: Point
  used: bool


class EntityView(BaseModel):
  """Read-only entity record for renderers."""
  kind: EntityKind
  id: int
  position: Point
  rotation: float = 0.0
  radius: Optional[float] = None
  width: Optional[float] = None
  height: Optional[float] = None
  mass_kg: Optional[float] = None
  velocity: Optional[float] = None
  ports: list[PortView] = Field(default_factory=list)


class RigSnapshot(BaseModel):
  entities: list[EntityView] = Field(default_factory=list)
  connections: list[Connection] = Field(default_factory=list)
  state: SimulationState = SimulationState.IDLE
  readout: Optional[Readout] = None


__all__ = [
  "Point",
  "PortName",
  "EntityKind",
  "Surface",
  "RigConfig",
  "FixedPulley",
  "MovablePulley",
  "Load",
  "Entity",
  "Pulley",
  "PORTS",
  "PortRef",
  "Connection",
  "SimulationState",
  "Readout",
  "PortView",
  "EntityView",
  "RigSnapshot",
]
