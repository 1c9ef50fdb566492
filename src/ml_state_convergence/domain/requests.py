"""Pydantic model for caller-issued transition requests."""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from ml_state_convergence.domain.resource_types import DESIRED_STATES, ResourceKind

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_DURATION_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str) -> timedelta:
    """Parse compact durations such as `30s`, `5m`, `1h30m` or `500ms`."""

    text = value.strip()
    position = 0
    total_seconds = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total_seconds += float(match.group(1)) * _DURATION_UNIT_SECONDS[match.group(2)]
        position = match.end()
    if position == 0 or position != len(text):
        raise ValueError(f"Invalid duration '{value}'. Examples: '30s', '5m', '1h'.")
    return timedelta(seconds=total_seconds)


class TransitionRequest(BaseModel):
    """A request to drive one remote resource to a desired state."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    resource_kind: ResourceKind = Field(alias="resourceKind")
    resource_id: str = Field(
        alias="resourceId",
        validation_alias=AliasChoices("resourceId", "resource_id", "job_id", "datafeed_id"),
        min_length=1,
        max_length=64,
        pattern=r"^[a-zA-Z0-9_-]+$",
    )
    desired_state: str = Field(
        alias="state",
        validation_alias=AliasChoices("state", "desired_state", "desiredState"),
    )
    force: bool = False
    timeout: timedelta | None = None
    start: datetime | None = None
    end: datetime | None = None

    @field_validator("timeout", mode="before")
    @classmethod
    def parse_compact_duration(cls, value: object) -> object:
        """Accept compact duration strings in addition to seconds and ISO 8601."""

        if not isinstance(value, str):
            return value
        text = value.strip()
        if text.startswith(("P", "-P")):
            return text
        try:
            return float(text)
        except ValueError:
            return parse_duration(text)

    @field_validator("start", "end")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        """Treat naive datetimes as UTC."""

        if value is None or value.tzinfo is not None:
            return value
        return value.replace(tzinfo=UTC)

    @model_validator(mode="after")
    def validate_transition(self) -> TransitionRequest:
        """Ensure the target state and optional parameters fit the resource kind."""

        valid_states = DESIRED_STATES[self.resource_kind]
        if self.desired_state not in valid_states:
            expected = "', '".join(sorted(valid_states))
            raise ValueError(
                f"Invalid state '{self.desired_state}' for {self.resource_kind}. "
                f"Valid states are '{expected}'."
            )
        if self.timeout is not None and self.timeout <= timedelta(0):
            raise ValueError("timeout must be a positive duration.")
        if self.resource_kind is not ResourceKind.DATAFEED and (
            self.start is not None or self.end is not None
        ):
            raise ValueError(f"start/end are only supported for {ResourceKind.DATAFEED}.")
        if self.start is not None and self.end is not None and self.end <= self.start:
            raise ValueError("end must be after start.")
        return self

    def describe(self) -> str:
        """Short human readable label used in logs and error messages."""

        return f"{self.resource_kind} '{self.resource_id}' -> {self.desired_state}"


__all__ = ["TransitionRequest", "parse_duration"]
