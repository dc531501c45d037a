"""
Response envelope handling.

Every backend response has the shape::

    {"err": <int>, "errmsg": <str | null>, "data": <payload | null>}

``Envelope.from_json`` validates that shape and ``Envelope.unwrap`` resolves
it into either the payload or a classified ``ApiError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from tarkov_api.api.errors import (
    ApiError,
    CodecError,
    ContractViolationError,
    ErrorKind,
    classify,
)


@dataclass(frozen=True)
class Envelope:
    """
    A decoded response envelope.

    Attributes:
        code: The embedded ``err`` code; ``0`` is the only success value.
        message: The embedded ``errmsg``, if any.
        data: The payload. ``None`` when absent or ``null``.
    """

    code: int
    message: str | None = None
    data: Any = None

    @classmethod
    def from_json(cls, value: Any) -> Envelope:
        """
        Build an Envelope from a parsed response body.

        Raises:
            CodecError: If the body is not an object with an integer ``err``.
        """
        if not isinstance(value, dict):
            raise CodecError(
                stage="envelope",
                detail=f"expected a JSON object, got {type(value).__name__}",
            )

        code = value.get("err")
        # bool is an int subclass; the backend never sends one here
        if isinstance(code, bool) or not isinstance(code, int):
            raise CodecError(stage="envelope", detail=f"missing or non-integer err: {code!r}")

        message = value.get("errmsg")
        if message is not None and not isinstance(message, str):
            message = str(message)

        return cls(code=code, message=message, data=value.get("data"))

    @property
    def kind(self) -> ErrorKind:
        return classify(self.code)

    @property
    def is_success(self) -> bool:
        return self.kind is ErrorKind.SUCCESS

    def unwrap(self, *, payload_required: bool = True) -> Any:
        """
        Return the payload or raise the classified error.

        Args:
            payload_required: Whether the endpoint declares a payload. When
                True, a success envelope without ``data`` is a contract
                violation.

        Raises:
            ApiError: If ``code`` is not success.
            ContractViolationError: If the payload is required but missing.
        """
        if not self.is_success:
            raise ApiError.from_code(self.code, self.message)

        if payload_required and self.data is None:
            raise ContractViolationError("API returned no errors but `data` is unavailable.")

        return self.data


# -----------------------------------------------------------------------------
# Payload field helpers
# -----------------------------------------------------------------------------


def require_object(data: Any, what: str) -> dict[str, Any]:
    """
    Check that a success payload is a JSON object.

    Raises:
        ContractViolationError: If ``data`` is not an object.
    """
    if not isinstance(data, dict):
        raise ContractViolationError(f"{what} is not an object: {type(data).__name__}")
    return data


def payload_int(value: Any, name: str) -> int:
    """
    Read an optional integer payload field; ``None`` counts as 0.

    Raises:
        ContractViolationError: If the value is not numeric.
    """
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ContractViolationError(f"{name} is not a number: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ContractViolationError(f"{name} is not a number: {value!r}") from e
