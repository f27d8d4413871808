from pydantic import BaseModel


class ValidationResponse(BaseModel):
    key: str
    checksum: str | None = None


class ErrorResponse(BaseModel):
    code: int
    error: str
    message: str
