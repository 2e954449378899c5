import re
from typing import Optional
from pydantic import BaseModel, field_validator

from shared.helpers.phone_helper import normalize_phone


class MobileLoginRequest(BaseModel):
    mobile: str

    @field_validator("mobile", mode="before")
    @classmethod
    def clean_mobile(cls, v):
        if not v:
            raise ValueError("mobile is required")
        # remove spaces and all invisible unicode chars
        cleaned = re.sub(
            r"[\s\u200b-\u200f\u202a-\u202e\u2066-\u2069]", "", str(v).strip())
        if normalize_phone(cleaned) is None:
            raise ValueError("mobile must contain digits")
        return cleaned


class LoginUser(BaseModel):
    id: int
    name: str
    phone: str
    avatar_url: Optional[str] = None

    model_config = {"from_attributes": True}


class AuthenticationResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    is_super_admin: bool
    needs_registration: bool
    user: Optional[LoginUser] = None


class MeResponse(BaseModel):
    user_id: Optional[int] = None
    phone: str
    name: Optional[str] = None
    is_super_admin: bool
