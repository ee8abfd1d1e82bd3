"""
Pydantic models for API requests and responses.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class SaveResponse(BaseModel):
    """Save outcome. `warning` is present only when the attachment was not stored."""
    success: bool = True
    warning: Optional[str] = None


class ErrorResponse(BaseModel):
    """Hard failure; the message is the underlying error, unmasked."""
    error: str


class AuthUrlResponse(BaseModel):
    url: str


class AuthStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_authenticated: bool = Field(..., alias="isAuthenticated")
    mode: Optional[str] = None


class MessageResponse(BaseModel):
    """Generic message response."""
    success: bool = True
    message: Optional[str] = None
