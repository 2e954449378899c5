from sqlalchemy import Column, Integer, String
from shared.core.database import AuthBase


class ProviderSafe(AuthBase):
    """Read-only view of community_service's providers table."""
    __tablename__ = "providers"

    id = Column(Integer, primary_key=True)
    name = Column(String(128))
    phone = Column(String(20))
    avatar_url = Column(String(512))
