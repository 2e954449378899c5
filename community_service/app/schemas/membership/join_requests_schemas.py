from typing import List, Optional
from pydantic import BaseModel

from shared.utils.enums import VoteDecision
from .providers_schemas import JoinRequestOut


class VoteRequest(BaseModel):
    decision: VoteDecision


class JoinRequestResult(BaseModel):
    """Outcome of a membership mutation; changed is False for informational no-ops."""
    join_request: Optional[JoinRequestOut] = None
    changed: bool
    status_code: str
    message: str
    leader_vote: Optional[VoteDecision] = None


class PendingRequestsResponse(BaseModel):
    join_requests: List[JoinRequestOut]
    total: int
