import logging
from sqlalchemy.orm import Session

from shared.core import auth
from shared.core.config import settings
from shared.helpers.phone_helper import normalize_phone
from ..models.providers_safe import ProviderSafe
from ..schemas import authschemas

logger = logging.getLogger(__name__)


def is_super_admin(phone: str) -> bool:
    return normalize_phone(phone) in {normalize_phone(p) for p in settings.super_admin_phones}


def mobile_login(db: Session, req: authschemas.MobileLoginRequest) -> dict:
    """Phone-number login stand-in: no OTP, the token just carries identity."""
    phone = normalize_phone(req.mobile)
    user = (
        db.query(ProviderSafe)
        .filter(ProviderSafe.phone == phone)
        .order_by(ProviderSafe.id)
        .first()
    )
    super_admin = is_super_admin(phone)

    token = auth.create_access_token({
        "user_id": user.id if user else None,
        "phone": phone,
        "name": user.name if user else None,
        "is_super_admin": super_admin,
    })

    logger.info("Login for %s (%s)", phone,
                "existing profile" if user else "needs registration")
    return {
        "access_token": token,
        "token_type": "bearer",
        "is_super_admin": super_admin,
        "needs_registration": user is None,
        "user": authschemas.LoginUser.model_validate(user) if user else None,
    }
