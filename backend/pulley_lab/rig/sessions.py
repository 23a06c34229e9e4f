"""In-memory storage for rig editing sessions."""
from __future__ import annotations

import uuid
from datetime import datetime

from pulley_lab.models.settings import settings
from pulley_lab.rig.editor import EditorSession
from pulley_lab.rig.schema import RigConfig
from pulley_lab.rig.workspace import Rig


class RigSession:
  """One rig plus its editor, addressed by ``rig_id``."""

  def __init__(self, config: RigConfig | None = None):
    self.rig_id = str(uuid.uuid4())
    self.created_at = datetime.now()
    self.updated_at = self.created_at
    self.rig = Rig(config or RigConfig.from_settings(settings))
    self.editor = EditorSession(self.rig)

  def touch(self) -> None:
    self.updated_at = datetime.now()


class SessionStore:
  """
  In-memory storage for rig sessions.

  Rigs only live for one editing session; nothing is persisted.
  """

  def __init__(self):
    self._sessions: dict[str, RigSession] = {}

  def create_session(self, config: RigConfig | None = None) -> RigSession:
    session = RigSession(config)
    self._sessions[session.rig_id] = session
    return session

  def get_session(self, rig_id: str) -> RigSession | None:
    return self._sessions.get(rig_id)

  def delete_session(self, rig_id: str) -> bool:
    return self._sessions.pop(rig_id, None) is not None

  def list_sessions(self) -> list[RigSession]:
    return list(self._sessions.values())


# Global session store instance
_store = SessionStore()


def get_session_store() -> SessionStore:
  """Get global session store instance."""
  return _store
