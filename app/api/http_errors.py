from __future__ import annotations

from collections.abc import Mapping

from fastapi import HTTPException

# Expected failures raised by the friendship and request services.
REQUEST_ERROR_STATUSES: dict[str, int] = {
    "invalid_request_type": 400,
    "invalid_participants": 400,
    "already_friends": 409,
    "duplicate_request": 409,
    "not_found": 404,
    "user_not_found": 404,
    "already_processed": 409,
    "requests_disabled": 403,
}

REQUEST_ERROR_DETAILS: dict[str, str] = {
    "invalid_request_type": "Unknown request type",
    "invalid_participants": "Requester, target and connector must be different people",
    "already_friends": "You are already friends",
    "duplicate_request": "A pending request already exists",
    "not_found": "Request not found",
    "user_not_found": "User not found",
    "already_processed": "This request has already been answered",
    "requests_disabled": "This user is not accepting introductions",
}


def permission_error(exc: PermissionError) -> HTTPException:
    return HTTPException(status_code=403, detail=str(exc))


def value_error(
    exc: ValueError,
    *,
    code_statuses: Mapping[str, int] | None = None,
    detail_overrides: Mapping[str, str] | None = None,
    default_status: int = 400,
    default_detail: str | None = None,
) -> HTTPException:
    raw_detail = str(exc)

    if code_statuses and raw_detail in code_statuses:
        detail = (
            detail_overrides[raw_detail]
            if detail_overrides and raw_detail in detail_overrides
            else raw_detail
        )
        return HTTPException(status_code=code_statuses[raw_detail], detail=detail)

    return HTTPException(
        status_code=default_status,
        detail=default_detail if default_detail is not None else raw_detail,
    )


def request_error(exc: ValueError, *, default_detail: str | None = None) -> HTTPException:
    return value_error(
        exc,
        code_statuses=REQUEST_ERROR_STATUSES,
        detail_overrides=REQUEST_ERROR_DETAILS,
        default_detail=default_detail,
    )
