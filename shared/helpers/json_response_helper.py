from fastapi import HTTPException

from shared.utils.app_status_code import AppStatusCode
from shared.core.schemas import JsonOutResult


def error_response(message: str, status_code: str = AppStatusCode.OPERATION_FAILED, http_status: int = 400):
    raise HTTPException(
        status_code=http_status,
        detail=JsonOutResult(
            data=None,
            status="Failure",
            status_code=status_code,
            message=message
        ).model_dump()
    )


def not_found(message: str, status_code: str = AppStatusCode.NOT_FOUND):
    return error_response(message=message, status_code=status_code, http_status=404)


def forbidden(message: str, status_code: str = AppStatusCode.AUTHENTICATION_FORBIDDEN):
    return error_response(message=message, status_code=status_code, http_status=403)
