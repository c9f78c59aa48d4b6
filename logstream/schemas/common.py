from pydantic import BaseModel
from typing import Optional, Dict, Any


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    field: Optional[str] = None


class ErrorResponse(BaseModel):
    error: ErrorDetail
    status: str = "error"
    request_id: Optional[str] = None


class SuccessResponse(BaseModel):
    message: str
    status: str = "success"
    data: Optional[Dict[str, Any]] = None
