"""Profile listing and selection.

A fresh session must select a game profile before most other calls are
accepted; until then the backend answers ``NOT_AUTHORIZED``. These calls
only use ``Client.call``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from tarkov_api.api.envelope import payload_int, require_object
from tarkov_api.api.errors import ContractViolationError
from tarkov_api.auth import validate_fields
from tarkov_api.client import Client

PROFILE_LIST_PATH = "/client/game/profile/list"
PROFILE_SELECT_PATH = "/client/game/profile/select"

SAVAGE_SIDE = "Savage"


@dataclass(frozen=True)
class ProfileSummary:
    """The handful of profile fields needed to pick one to select."""

    id: str
    nickname: str
    side: str
    level: int = 0

    @property
    def is_savage(self) -> bool:
        return self.side == SAVAGE_SIDE

    @classmethod
    def from_json(cls, data: Any) -> ProfileSummary:
        data = require_object(data, "profile entry")
        info = data.get("Info") or {}
        if not isinstance(info, dict):
            raise ContractViolationError("profile Info is not an object")
        profile_id = data.get("_id")
        if not isinstance(profile_id, str) or not profile_id:
            raise ContractViolationError("profile entry without an _id")
        return cls(
            id=profile_id,
            nickname=info.get("Nickname") or "",
            side=info.get("Side") or "",
            level=payload_int(info.get("Level"), "Level"),
        )


async def get_profiles(client: Client) -> list[ProfileSummary]:
    """List the account's profiles (PMC and Scav)."""
    data = await client.call(client.config.prod_endpoint(PROFILE_LIST_PATH))
    if not isinstance(data, list):
        raise ContractViolationError(f"profile list is not an array: {type(data).__name__}")
    return [ProfileSummary.from_json(entry) for entry in data]


async def select_profile(client: Client, user_id: str) -> None:
    """
    Select the profile ``user_id`` for this session.

    Raises:
        ApiError: ``INVALID_PARAMETERS`` for a blank id (nothing is sent), or
            ``INVALID_USER_SELECTION`` if the backend does not know the id.
    """
    validate_fields(user_id=user_id)
    await client.call(
        client.config.prod_endpoint(PROFILE_SELECT_PATH),
        {"uid": user_id},
        payload_required=False,
    )
