from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel

from shared.wrappers.empty_string_model_wrapper import EmptyStringModel


class PremiseCreate(EmptyStringModel):
    name: str


class PremiseHostAdd(BaseModel):
    host_id: int


class PremiseOut(BaseModel):
    id: UUID
    name: str
    superhost_id: int
    host_ids: List[int]
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
