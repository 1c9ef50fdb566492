from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from ml_state_convergence.domain.errors import StateConfigurationError
from ml_state_convergence.domain.requests import TransitionRequest, parse_duration
from ml_state_convergence.domain.resource_types import ResourceKind, ensure_desired_state


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("30s", timedelta(seconds=30)),
        ("5m", timedelta(minutes=5)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("500ms", timedelta(milliseconds=500)),
        ("1.5h", timedelta(minutes=90)),
    ],
)
def test_parse_duration_accepts_compact_units(value: str, expected: timedelta) -> None:
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ["", "30", "5 minutes", "m5", "10s garbage"])
def test_parse_duration_rejects_malformed_values(value: str) -> None:
    with pytest.raises(ValueError, match="Invalid duration"):
        parse_duration(value)


def test_request_accepts_terraform_style_payload() -> None:
    request = TransitionRequest.model_validate(
        {
            "resourceKind": "datafeed",
            "datafeed_id": "my-datafeed_01",
            "state": "started",
            "force": True,
            "timeout": "2m",
            "start": "2024-05-01T10:00:00Z",
        }
    )

    assert request.resource_kind is ResourceKind.DATAFEED
    assert request.resource_id == "my-datafeed_01"
    assert request.desired_state == "started"
    assert request.timeout == timedelta(minutes=2)
    assert request.start == datetime(2024, 5, 1, 10, tzinfo=UTC)


@pytest.mark.parametrize(
    ("timeout", "expected"),
    [
        (45, timedelta(seconds=45)),
        ("45", timedelta(seconds=45)),
        ("PT1M", timedelta(minutes=1)),
        (timedelta(seconds=3), timedelta(seconds=3)),
    ],
)
def test_request_timeout_formats(timeout: object, expected: timedelta) -> None:
    request = TransitionRequest(
        resource_kind=ResourceKind.JOB,
        resource_id="job-1",
        desired_state="closed",
        timeout=timeout,
    )

    assert request.timeout == expected


def test_naive_datetimes_are_treated_as_utc() -> None:
    request = TransitionRequest(
        resource_kind=ResourceKind.DATAFEED,
        resource_id="feed-1",
        desired_state="started",
        start=datetime(2024, 1, 1),
    )

    assert request.start == datetime(2024, 1, 1, tzinfo=UTC)


@pytest.mark.parametrize(
    "payload",
    [
        {"resource_kind": "job", "resource_id": "", "desired_state": "opened"},
        {"resource_kind": "job", "resource_id": "job 1", "desired_state": "opened"},
        {"resource_kind": "job", "resource_id": "j" * 65, "desired_state": "opened"},
        {"resource_kind": "job", "resource_id": "job-1", "desired_state": "started"},
        {"resource_kind": "datafeed", "resource_id": "feed-1", "desired_state": "starting"},
        {
            "resource_kind": "job",
            "resource_id": "job-1",
            "desired_state": "opened",
            "timeout": "0s",
        },
        {
            "resource_kind": "job",
            "resource_id": "job-1",
            "desired_state": "opened",
            "start": "2024-01-01T00:00:00Z",
        },
        {
            "resource_kind": "datafeed",
            "resource_id": "feed-1",
            "desired_state": "started",
            "start": "2024-01-02T00:00:00Z",
            "end": "2024-01-01T00:00:00Z",
        },
        {"resource_kind": "index", "resource_id": "idx", "desired_state": "open"},
        {"resource_kind": "job", "resource_id": "job-1", "desired_state": "opened", "extra": 1},
    ],
)
def test_invalid_requests_are_rejected(payload: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        TransitionRequest.model_validate(payload)


def test_requests_are_immutable() -> None:
    request = TransitionRequest(
        resource_kind=ResourceKind.JOB,
        resource_id="job-1",
        desired_state="opened",
    )

    with pytest.raises(ValidationError):
        request.desired_state = "closed"


def test_ensure_desired_state_lists_valid_states() -> None:
    assert ensure_desired_state(ResourceKind.JOB, "opened") == "opened"
    with pytest.raises(StateConfigurationError, match="'started', 'stopped'"):
        ensure_desired_state(ResourceKind.DATAFEED, "opened")
