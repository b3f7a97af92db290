"""Preset models for named session lengths."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class TimerPreset(BaseModel):
    """A named session length that can be started in one call."""

    id: str = Field(..., description="Unique identifier for the preset.")
    title: str = Field(..., description="Display title for the preset.")
    duration_min: float = Field(..., gt=0, description="Session length in minutes.")
    task: str = Field(default="", description="Task label used when the caller gives none.")

    @field_validator("id")
    @classmethod
    def _normalize_id(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Preset id must not be empty")
        return normalized

    @field_validator("task", mode="before")
    @classmethod
    def _normalize_task(cls, value):
        if value is None:
            return ""
        return str(value).strip()


__all__ = ["TimerPreset"]
