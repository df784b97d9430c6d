# shared/helpers/json_response_helper.py
from fastapi import HTTPException

from shared.utils.app_status_code import AppStatusCode


def error_response(message: str, status_code: str = AppStatusCode.OPERATION_FAILED, http_status: int = 400):
    raise HTTPException(
        status_code=http_status,
        detail={
            "error": message,
            "status_code": status_code,
        }
    )


def not_found(entity: str):
    return error_response(
        message=f"{entity} not found",
        status_code=AppStatusCode.RECORD_NOT_FOUND,
        http_status=404
    )
