from licenseptium.schemas.validation import ErrorResponse, ValidationResponse

__all__ = [
    "ErrorResponse",
    "ValidationResponse",
]
