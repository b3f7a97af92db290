"""Data models for persistent timer state."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SessionState(BaseModel):
    """The single live timer record.

    Exactly one of idle, running, or running-paused holds. While running the
    ``end_time`` deadline is authoritative; while paused ``paused_remaining_ms``
    is, and ``end_time`` is left stale.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    is_running: bool = False
    paused: bool = False
    start_time: int | None = Field(default=None, description="Epoch ms the session began.")
    end_time: int | None = Field(default=None, description="Epoch ms the session is due to end.")
    duration_min: float | None = Field(
        default=None, description="Planned session length in minutes as requested."
    )
    task: str = ""
    paused_remaining_ms: int | None = Field(
        default=None, description="Remaining ms frozen at the instant of pausing."
    )

    @field_validator("task", mode="before")
    @classmethod
    def _coerce_task(cls, value):
        if value is None:
            return ""
        return str(value)

    @model_validator(mode="after")
    def _paused_implies_running(self) -> "SessionState":
        if self.paused and not self.is_running:
            raise ValueError("paused state requires an active session")
        return self

    @property
    def phase(self) -> str:
        if not self.is_running:
            return "idle"
        return "paused" if self.paused else "running"


class HistoryEntry(BaseModel):
    """A closed session credited with its effective minutes."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    task: str = ""
    duration_min: int = Field(..., ge=1)
    started_at: int
    ended_at: int

    @field_validator("task", mode="before")
    @classmethod
    def _coerce_task(cls, value):
        if value is None:
            return ""
        return str(value)


IDLE_STATE = SessionState()


__all__ = ["SessionState", "HistoryEntry", "IDLE_STATE"]
