from datetime import datetime, timedelta, timezone
from fastapi import status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from shared.utils.app_status_code import AppStatusCode
from shared.core.config import settings
from shared.helpers.json_response_helper import error_response
from shared.core.schemas import UserToken

security = HTTPBearer()


def create_access_token(data: dict):
    payload = data.copy()
    expires = datetime.now(timezone.utc) + \
        timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    payload['exp'] = expires

    token = jwt.encode(payload, settings.JWT_SECRET,
                       algorithm=settings.JWT_ALGORITHM)
    return token


def verify_token(token: str) -> UserToken:
    """Verify and decode a JWT token."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET,
                             algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return error_response(
            message="Invalid or expired token",
            status_code=str(AppStatusCode.AUTHENTICATION_TOKEN_EXPIRED),
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    if not payload.get("phone"):
        return error_response(
            message="Invalid token structure",
            status_code=str(AppStatusCode.AUTHENTICATION_TOKEN_INVALID),
            http_status=status.HTTP_401_UNAUTHORIZED
        )

    return UserToken(**payload)


def validate_current_token(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> UserToken:
    return verify_token(credentials.credentials)


def require_profile(current_user: UserToken = Depends(validate_current_token)) -> UserToken:
    if current_user.user_id is None:
        return error_response(
            message="Please complete your profile first",
            status_code=str(AppStatusCode.PROFILE_INCOMPLETE),
            http_status=status.HTTP_403_FORBIDDEN
        )
    return current_user


def require_super_admin(current_user: UserToken = Depends(validate_current_token)) -> UserToken:
    if not current_user.is_super_admin:
        return error_response(
            message="Access forbidden: Super admins only",
            status_code=str(AppStatusCode.AUTHENTICATION_FORBIDDEN),
            http_status=status.HTTP_403_FORBIDDEN
        )
    return current_user
