from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from workfront_client.core.request import Fields
from workfront_client.workfront import Workfront

TEAM = "TEAMOB"

DEFAULT_MEMBER_FIELDS = ["ID", "name", "teamMembers:*"]


async def get_team_by_id(
    client: Workfront, team_id: str, fields: Fields = None
) -> Dict[str, Any]:
    return await client.api.get(TEAM, team_id, fields)


async def get_team_members(
    client: Workfront, team_id: str, fields: Optional[Sequence[str]] = None
) -> List[Dict[str, Any]]:
    # TEAMMB is not a top-level object; members come in through the team.
    team = await client.api.get(TEAM, team_id, list(fields or DEFAULT_MEMBER_FIELDS))
    members = team.get("teamMembers") if isinstance(team, dict) else None
    return members if isinstance(members, list) else []
