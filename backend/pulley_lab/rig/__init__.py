"""Rig graph and physics stepper.

This module provides:
- Entity/port/connection schema (schema.py)
- Entity store, port registry and connection graph
- Pair resolver and Atwood physics stepper
- Rig workspace facade, editor state machine and headless previews
"""

from pulley_lab.rig.schema import (
  Connection,
  EntityKind,
  FixedPulley,
  Load,
  MovablePulley,
  PortRef,
  Readout,
  RigConfig,
  RigSnapshot,
  SimulationState,
  Surface,
)
from pulley_lab.rig.entities import EntityStore
from pulley_lab.rig.graph import ConnectionGraph
from pulley_lab.rig.ports import PortRegistry
from pulley_lab.rig.resolver import SimulationPair, atwood, build_pairs
from pulley_lab.rig.stepper import PhysicsStepper
from pulley_lab.rig.workspace import Rig
from pulley_lab.rig.editor import EditorSession
from pulley_lab.rig.preview import preview_rig

__all__ = [
  # Schema
  "Connection",
  "EntityKind",
  "FixedPulley",
  "Load",
  "MovablePulley",
  "PortRef",
  "Readout",
  "RigConfig",
  "RigSnapshot",
  "SimulationState",
  "Surface",
  # Core
  "EntityStore",
  "ConnectionGraph",
  "PortRegistry",
  "SimulationPair",
  "atwood",
  "build_pairs",
  "PhysicsStepper",
  # Facades
  "Rig",
  "EditorSession",
  "preview_rig",
]
