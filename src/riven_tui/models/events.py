"""Server-sent event payload."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StreamEvent(BaseModel):
    """One decoded ``data:`` line of the event stream."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str = ""
    timestamp: str = ""
    data: dict[str, Any] = Field(default_factory=dict)
    message: str = ""

    @field_validator("data", mode="before")
    @classmethod
    def _null_data(cls, value):
        return {} if value is None else value

    @field_validator("timestamp", "message", mode="before")
    @classmethod
    def _null_text(cls, value):
        return "" if value is None else str(value)

    @property
    def clock(self) -> str:
        """``HH:MM:SS`` when the timestamp is ISO-8601, the raw string otherwise."""
        try:
            parsed = datetime.fromisoformat(self.timestamp.replace("Z", "+00:00"))
        except ValueError:
            return self.timestamp
        return parsed.strftime("%H:%M:%S")

    def data_summary(self) -> str:
        return ", ".join(f"{key}:{value}" for key, value in self.data.items())
