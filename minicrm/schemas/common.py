"""
Common schemas used across multiple endpoints.
"""
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    code: str
    retryable: bool = False

    class Config:
        json_schema_extra = {"example": {"error": "Lead not found", "code": "not_found", "retryable": False}}


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str = "1.0.0"
