"""Translating evaluation errors into HTTP responses.
"""
# app/core/errors.py
from fastapi import HTTPException, status

from src.evaluation.errors import (
    EvaluationError,
    InvalidAnswer,
    MissingAnonymityChoice,
    MissingRequiredAnswer,
    NoActivePeriod,
    ResponseKeyMismatch,
)

_STATUS_BY_ERROR = {
    NoActivePeriod: status.HTTP_409_CONFLICT,
    ResponseKeyMismatch: status.HTTP_409_CONFLICT,
    MissingAnonymityChoice: 422,
    InvalidAnswer: 422,
    MissingRequiredAnswer: 422,
}


def to_http_exception(exc: EvaluationError) -> HTTPException:
    for error_type, code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            return HTTPException(status_code=code, detail=exc.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
