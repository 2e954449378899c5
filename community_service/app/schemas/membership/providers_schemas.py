from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, field_validator, model_validator

from shared.core.schemas import CommonQueryParams
from shared.helpers.phone_helper import normalize_phone
from shared.utils.enums import AccountType, JoinRequestStatus, ProfileType
from shared.wrappers.empty_string_model_wrapper import EmptyStringModel


class ProviderBase(EmptyStringModel):
    name: str
    phone: str
    whatsapp: Optional[str] = None
    service: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    about: Optional[str] = None
    avatar_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    rating: float = 0
    distance_km: float = 0
    hourly_rate: float = 0
    rate_type: str = "per hour"
    currency: str = "KES"
    is_online: bool = False

    @field_validator("phone")
    @classmethod
    def phone_has_digits(cls, value: str) -> str:
        if normalize_phone(value) is None:
            raise ValueError("phone must contain digits")
        return value


class ProviderCreate(ProviderBase):
    pass


class ProviderOut(BaseModel):
    id: int
    name: str
    phone: str
    whatsapp: Optional[str] = None
    service: Optional[str] = None
    category: Optional[str] = None
    location: Optional[str] = None
    about: Optional[str] = None
    avatar_url: Optional[str] = None
    cover_image_url: Optional[str] = None
    rating: float
    distance_km: float
    hourly_rate: float
    rate_type: str
    currency: str
    is_verified: bool
    is_online: bool
    account_type: AccountType
    profile_type: ProfileType

    model_config = {"from_attributes": True}


class ProviderRequest(CommonQueryParams):
    account_type: Optional[AccountType] = None


class ProvidersResponse(BaseModel):
    providers: List[ProviderOut]
    total: int


class LeadersIn(EmptyStringModel):
    chairperson: str
    secretary: str
    treasurer: str

    @model_validator(mode="after")
    def distinct_leaders(self):
        phones = [normalize_phone(p)
                  for p in (self.chairperson, self.secretary, self.treasurer)]
        if any(p is None for p in phones):
            raise ValueError("every leader needs a phone number")
        if len(set(phones)) != 3:
            raise ValueError(
                "chairperson, secretary and treasurer must be different people")
        return self


class OrganizationCreate(ProviderBase):
    leaders: LeadersIn


class LeadersOut(BaseModel):
    chairperson: Optional[str] = None
    secretary: Optional[str] = None
    treasurer: Optional[str] = None


class MemberOut(BaseModel):
    id: int
    provider_id: int
    name: str
    avatar_url: Optional[str] = None
    rating: Optional[float] = None
    distance_km: Optional[float] = None
    hourly_rate: Optional[float] = None
    rate_type: Optional[str] = None
    phone: str
    whatsapp: Optional[str] = None
    is_online: bool
    joined_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class JoinRequestOut(BaseModel):
    id: int
    organization_id: int
    user_id: int
    user_name: str
    user_phone: str
    status: JoinRequestStatus
    approvals: List[str]
    rejections: List[str]
    created_at: Optional[datetime] = None
    decided_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OrganizationOut(ProviderOut):
    leaders: LeadersOut
    members: List[MemberOut]
    join_requests: List[JoinRequestOut]
