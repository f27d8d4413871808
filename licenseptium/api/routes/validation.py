from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from licenseptium.api.deps import get_app_settings, get_client_address, get_db
from licenseptium.config import Settings
from licenseptium.schemas import ErrorResponse, ValidationResponse
from licenseptium.services.validation import ErrorCategory, ValidationOutcome, validate

router = APIRouter(tags=["validation"])

STATUS_CODES = {
    ErrorCategory.client_input: 400,
    ErrorCategory.denial: 403,
    ErrorCategory.unavailable: 503,
}

ERROR_RESPONSES = {status_code: {"model": ErrorResponse} for status_code in STATUS_CODES.values()}


def build_response(outcome: ValidationOutcome) -> ValidationResponse | JSONResponse:
    if outcome.admitted:
        return ValidationResponse(key=outcome.key, checksum=outcome.checksum)

    status_code = STATUS_CODES[outcome.error.category]
    body = ErrorResponse(code=status_code, error=outcome.error.value, message=outcome.error.message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@router.get("/validate/{key}", response_model=ValidationResponse, responses=ERROR_RESPONSES)
def validate_key(
    key: str,
    checksum: str | None = None,
    address: str | None = Depends(get_client_address),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    outcome = validate(db, key, checksum, address, require_checksum=settings.require_checksum)
    return build_response(outcome)


@router.get("/validate/{key}/{checksum}", response_model=ValidationResponse, responses=ERROR_RESPONSES)
def validate_key_with_checksum(
    key: str,
    checksum: str,
    address: str | None = Depends(get_client_address),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    outcome = validate(db, key, checksum, address, require_checksum=settings.require_checksum)
    return build_response(outcome)
