"""
Router: /rigs - Rig Editing & Simulation Control

Exposes one in-memory rig per session to the canvas frontend.

Workflow:
1. POST /rigs → create a rig session
2. GET /rigs → list live rig sessions
3. place / move / rotate / delete entities, connect / disconnect ports
4. POST /rigs/{rig_id}/simulation/start → derive pulley pairs
5. POST /rigs/{rig_id}/simulation/tick (once per animation frame)
6. GET  /rigs/{rig_id} → snapshot for rendering

Rejected user actions (used port, bad mass, editing while running, ...)
answer 200 with status="ignored" and the unchanged snapshot.
"""

import logging
from datetime import datetime
from typing import Any, Literal, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from pulley_lab.models.settings import settings
from pulley_lab.rig.preview import PreviewResult, preview_rig
from pulley_lab.rig.schema import EntityKind, Point, PortRef, RigSnapshot
from pulley_lab.rig.sessions import RigSession, get_session_store

logger = logging.getLogger("pulley_lab.rigs")

router = APIRouter(prefix="/rigs", tags=["rigs"])


# ===========================
# Request/Response Models
# ===========================

class PlaceEntityRequest(BaseModel):
    kind: EntityKind = Field(description="fixed_pulley | movable_pulley | load")
    position: Point = Field(description="Drop point on the canvas (px)")
    mass_kg: Optional[Any] = Field(
        default=None,
        description="Load mass as entered by the user (loads only)"
    )


class MoveEntityRequest(BaseModel):
    position: Point = Field(description="New anchor position (px), clamped to the surface")


class RotateEntityRequest(BaseModel):
    increment_deg: Optional[float] = Field(
        default=None,
        description="Rotation increment; defaults to the configured step"
    )


class ConnectRequest(BaseModel):
    from_port: PortRef
    to_port: PortRef


class TickRequest(BaseModel):
    dt_s: float = Field(ge=0.0, description="Seconds elapsed since the previous tick")


class PreviewRequest(BaseModel):
    dt_s: float = Field(default_factory=lambda: settings.PREVIEW_TIME_STEP_S, gt=0.0, le=0.1)
    duration_s: float = Field(
        default=5.0,
        gt=0.0,
        le=settings.PREVIEW_MAX_DURATION_S,
        description="Maximum simulated time in seconds"
    )


class RigSummary(BaseModel):
    rig_id: str
    state: str
    entity_count: int
    created_at: datetime
    updated_at: datetime


class RigActionResponse(BaseModel):
    status: Literal["applied", "ignored"] = Field(
        description="'applied' when the rig changed, 'ignored' for rejected no-ops"
    )
    rig_id: str
    entity_id: Optional[int] = None
    snapshot: RigSnapshot


# ===========================
# Helpers
# ===========================

def _get_session(rig_id: str) -> RigSession:
    session = get_session_store().get_session(rig_id)
    if not session:
        raise HTTPException(
            status_code=404,
            detail=f"Rig {rig_id} not found"
        )
    return session


def _respond(session: RigSession, applied: bool, entity_id: int | None = None) -> RigActionResponse:
    if applied:
        session.touch()
    return RigActionResponse(
        status="applied" if applied else "ignored",
        rig_id=session.rig_id,
        entity_id=entity_id,
        snapshot=session.rig.snapshot(),
    )


# ===========================
# Endpoints
# ===========================

@router.post("", response_model=RigActionResponse)
async def create_rig():
    session = get_session_store().create_session()
    logger.info(f"[rigs] Created rig {session.rig_id}")
    return _respond(session, True)


@router.get("", response_model=list[RigSummary])
async def list_rigs():
    return [
        RigSummary(
            rig_id=session.rig_id,
            state=session.rig.state.value,
            entity_count=len(session.rig.store),
            created_at=session.created_at,
            updated_at=session.updated_at,
        )
        for session in get_session_store().list_sessions()
    ]


@router.get("/{rig_id}", response_model=RigSnapshot)
async def get_rig(rig_id: str):
    return _get_session(rig_id).rig.snapshot()


@router.delete("/{rig_id}")
async def delete_rig(rig_id: str) -> dict[str, str]:
    if not get_session_store().delete_session(rig_id):
        raise HTTPException(status_code=404, detail=f"Rig {rig_id} not found")
    logger.info(f"[rigs] Deleted rig {rig_id}")
    return {"status": "deleted", "rig_id": rig_id}


@router.post("/{rig_id}/entities", response_model=RigActionResponse)
async def place_entity(rig_id: str, request: PlaceEntityRequest):
    session = _get_session(rig_id)
    entity = session.rig.place(request.kind, request.position, request.mass_kg)
    if entity is None:
        logger.info(f"[rigs] {rig_id}: {request.kind.value} placement rejected")
        return _respond(session, False)
    return _respond(session, True, entity.id)


@router.post("/{rig_id}/entities/{entity_id}/move", response_model=RigActionResponse)
async def move_entity(rig_id: str, entity_id: int, request: MoveEntityRequest):
    session = _get_session(rig_id)
    entity = session.rig.move_to(entity_id, request.position)
    return _respond(session, entity is not None, entity_id)


@router.post("/{rig_id}/entities/{entity_id}/rotate", response_model=RigActionResponse)
async def rotate_entity(rig_id: str, entity_id: int, request: RotateEntityRequest):
    session = _get_session(rig_id)
    return _respond(session, session.rig.rotate(entity_id, request.increment_deg), entity_id)


@router.delete("/{rig_id}/entities/{entity_id}", response_model=RigActionResponse)
async def delete_entity(rig_id: str, entity_id: int):
    session = _get_session(rig_id)
    return _respond(session, session.rig.delete(entity_id), entity_id)


@router.post("/{rig_id}/connections", response_model=RigActionResponse)
async def connect_ports(rig_id: str, request: ConnectRequest):
    session = _get_session(rig_id)
    return _respond(session, session.rig.connect(request.from_port, request.to_port))


@router.post("/{rig_id}/connections/disconnect", response_model=RigActionResponse)
async def disconnect_port(rig_id: str, port: PortRef):
    session = _get_session(rig_id)
    return _respond(session, session.rig.disconnect(port))


@router.post("/{rig_id}/simulation/start", response_model=RigActionResponse)
async def start_simulation(rig_id: str):
    session = _get_session(rig_id)
    started = session.rig.start_simulation()
    logger.info(f"[rigs] {rig_id}: start requested, running={session.rig.stepper.running}")
    return _respond(session, started)


@router.post("/{rig_id}/simulation/stop", response_model=RigActionResponse)
async def stop_simulation(rig_id: str):
    session = _get_session(rig_id)
    was_running = session.rig.stepper.running
    session.rig.stop_simulation()
    return _respond(session, was_running)


@router.post("/{rig_id}/simulation/tick", response_model=RigActionResponse)
async def tick_simulation(rig_id: str, request: TickRequest):
    session = _get_session(rig_id)
    was_running = session.rig.stepper.running
    session.rig.tick(request.dt_s)
    return _respond(session, was_running)


@router.post("/{rig_id}/preview", response_model=PreviewResult)
async def preview_simulation(rig_id: str, request: PreviewRequest):
    session = _get_session(rig_id)
    result = preview_rig(session.rig, dt_s=request.dt_s, duration_s=request.duration_s)
    logger.info(
        f"[rigs] {rig_id}: preview produced {len(result.frames)} frames "
        f"(stopped_early={result.stopped_early})"
    )
    return result
