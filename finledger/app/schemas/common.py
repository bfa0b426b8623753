"""
Common response envelope.
"""

from datetime import datetime
from typing import Any, Dict, Generic, Optional, TypeVar
from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope returned by every endpoint."""
    success: bool
    message: Optional[str] = None
    data: Optional[T] = None
    error_code: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "ApiResponse":
        return cls(success=True, message=message, data=data)
