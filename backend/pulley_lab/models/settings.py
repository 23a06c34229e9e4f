"""Application configuration using pydantic-settings."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_BACKEND_DIR = Path(__file__).resolve().parents[2]
_ENV_FILE = _BACKEND_DIR / ".env"

def _expand_origin(value: str) -> list[str]:
    origin = value.rstrip("/")
    if origin in {"http://localhost", "http://127.0.0.1"}:
        return [f"{origin}:3000", origin]
    return [origin]


class Settings(BaseSettings):
    # ===== Core Infrastructure =====
    APP_ENV: str = "dev"

    # ===== Physics =====
    GRAVITY_M_S2: float = Field(9.8, gt=0.0)
    PIXELS_PER_METER: float = Field(35.0, gt=0.0)  # rendering scale for displacement
    STOP_CLEARANCE_PX: float = 35.0  # gap kept above a load when it rises to the wheel
    FLOOR_MARGIN_PX: float = 5.0

    # ===== Working surface (canvas pixels, y grows downward) =====
    SURFACE_LEFT: float = 60.0
    SURFACE_TOP: float = 60.0
    SURFACE_RIGHT: float = 680.0
    SURFACE_BOTTOM: float = 500.0
    SURFACE_INSET_PX: float = 20.0
    SNAP_DISTANCE_PX: float = 20.0
    SNAP_EDGE_OFFSET_PX: float = 20.0  # fixed pulleys snap to edge +/- (radius + offset)

    # ===== Entity geometry =====
    PULLEY_RADIUS_PX: float = Field(25.0, gt=0.0)
    LOAD_WIDTH_PX: float = Field(40.0, gt=0.0)
    LOAD_HEIGHT_PX: float = Field(40.0, gt=0.0)
    PORT_OFFSET_PX: float = 5.0
    SUSPENSION_OFFSET_PX: float = 20.0
    LOAD_PORT_LIFT_PX: float = 6.0
    PORT_HIT_TOLERANCE_PX: float = Field(12.0, gt=0.0)

    # ===== Editor =====
    ROTATION_STEP_DEG: float = 90.0
    DISPOSAL_RADIUS_PX: float = 50.0
    DISPOSAL_INSET_PX: float = 50.0  # disposal zone sits this far in from the bottom-right corner

    # ===== Preview runs =====
    PREVIEW_TIME_STEP_S: float = Field(0.016, gt=0.0, le=0.1)  # 60 fps
    PREVIEW_MAX_DURATION_S: float = Field(10.0, gt=0.0)

    # ===== Frontend & CORS =====
    FRONTEND_ORIGIN: str | None = Field(
        default=None, validation_alias="FRONTEND_ORIGIN"
    )
    CORS_ALLOW_ORIGINS: list[str] = Field(default_factory=list)

    model_config = SettingsConfigDict(env_file=_ENV_FILE, extra="ignore")

    @field_validator("CORS_ALLOW_ORIGINS", mode="before")
    @classmethod
    def _populate_cors(cls, value: list[str] | None, info: ValidationInfo) -> list[str]:
        origins: list[str] = []

        if value:
            for origin in value:
                origins.extend(_expand_origin(origin))

        frontend_origin = info.data.get("FRONTEND_ORIGIN") if info.data else None
        if isinstance(frontend_origin, str) and frontend_origin.strip():
            origins.extend(_expand_origin(frontend_origin))

        return list(dict.fromkeys(origins)) or _expand_origin("http://localhost:3000")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()


settings = get_settings()
