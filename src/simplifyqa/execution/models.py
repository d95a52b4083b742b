"""Execution records decoded from the pipeline-execution API.

The API is loose about identifier types: ``projectId`` and ``id`` arrive as
JSON strings on some deployments and JSON numbers on others. Records always
carry them as strings; any other JSON type is a parse failure and no record is
produced.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from simplifyqa.core.errors import ParseError
from simplifyqa.core.result import try_result


@dataclass(frozen=True)
class ExecutionRecord:
    """Normalized execution data from a start or status response.

    Attributes:
        project_id: Project the execution belongs to
        execution_id: Execution identifier (``id`` in the API)
        status: Execution status, only set on status responses
        payload: Decoded response object the record was built from
    """

    project_id: str
    execution_id: str
    status: str | None = None
    payload: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: Any, *, require_status: bool = False) -> ExecutionRecord:
        """Build a record from a decoded JSON object.

        Raises:
            ParseError: payload is not an object, an identifier is missing or
                not a string/number, or ``status`` is required and absent
        """
        if not isinstance(payload, dict):
            raise ParseError(f"Expected a JSON object, got {type(payload).__name__}")

        project_id = normalize_identifier(payload, "projectId")
        execution_id = normalize_identifier(payload, "id")
        status = read_status(payload) if require_status else None
        return cls(project_id, execution_id, status, payload)

    @classmethod
    def from_body(cls, body: str, *, require_status: bool = False) -> ExecutionRecord:
        """Decode a response body and build a record from it."""
        decoded = try_result(lambda: json.loads(body))
        if decoded.is_err():
            # RecursionError on deeply nested bodies as well as ValueError
            e = decoded.error
            raise ParseError(f"Response body is not valid JSON: {e}", cause=e) from e
        return cls.from_payload(decoded.unwrap(), require_status=require_status)

    def to_dict(self) -> dict[str, Any]:
        data = {"project_id": self.project_id, "execution_id": self.execution_id}
        if self.status is not None:
            data["status"] = self.status
        return data


@dataclass(frozen=True)
class StopResult:
    """Raw outcome of a stop request.

    Both fields are ``None`` when no response was received. Otherwise the body
    and status are surfaced as-is, whatever the status range.
    """

    data: str | None = None
    status: int | None = None

    @property
    def ok(self) -> bool:
        return self.status is not None and 200 <= self.status < 300

    def to_dict(self) -> dict[str, Any]:
        return {"data": self.data, "status": self.status}


def normalize_identifier(payload: dict[str, Any], key: str) -> str:
    """Read ``key`` as a string, rendering JSON numbers with ``str()``.

    >>> normalize_identifier({"id": 42}, "id")
    '42'
    >>> normalize_identifier({"id": "42"}, "id")
    '42'
    """
    match payload.get(key):
        # bool is an int subclass and must be rejected first
        case bool():
            pass
        case str() as value:
            return value
        case int() | float() as value:
            return str(value)
    raise ParseError(f"Unexpected type for {key}").with_context(
        field=key, value_type=type(payload.get(key)).__name__
    )


def read_status(payload: dict[str, Any]) -> str:
    """Read ``status`` as text; any non-null JSON value is accepted.

    >>> read_status({"status": True})
    'true'
    >>> read_status({"status": {"state": "RUNNING"}})
    '{"state": "RUNNING"}'
    """
    match payload.get("status"):
        case None:
            raise ParseError("Missing required field: status").with_context(field="status")
        case str() as value:
            return value
        case bool() | list() | dict() as value:
            return json.dumps(value)
        case value:
            return str(value)


__all__ = [
    "ExecutionRecord",
    "StopResult",
    "normalize_identifier",
    "read_status",
]
