from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime, timezone

class ErrorInfo(BaseModel):
    code: str
    message: str
    field: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

class ApiResponse(BaseModel):
    """Envelope for error responses."""
    success: bool
    errors: List[ErrorInfo] = []
    request_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with JSON-serializable values."""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def fail(
        cls,
        message: str,
        code: str = "ERROR",
        details: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
    ) -> "ApiResponse":
        return cls(
            success=False,
            errors=[ErrorInfo(code=code, message=message, details=details)],
            request_id=request_id or None,
        )

    @classmethod
    def fail_fields(
        cls,
        field_errors: Dict[str, List[str]],
        code: str = "VALIDATION_ERROR",
        request_id: Optional[str] = None,
    ) -> "ApiResponse":
        errors = [
            ErrorInfo(code=code, message=msg, field=field)
            for field, messages in field_errors.items()
            for msg in messages
        ]
        return cls(success=False, errors=errors, request_id=request_id or None)
