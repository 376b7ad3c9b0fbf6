from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from typing import Optional, Dict, Any, Type, TypeVar
from datetime import datetime, timezone

from catalog.core.exceptions import ValidationError
from catalog.utils.pagination import PaginationState

M = TypeVar('M', bound=BaseModel)


def parse_request(model: Type[M], data: Optional[Dict[str, Any]]) -> M:
    """
    Validate a request payload against a schema

    Raises:
        ValidationError: With one field error per failed constraint
    """
    try:
        return model.model_validate(data or {})
    except PydanticValidationError as e:
        field_errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]) or "body",
                "message": error["msg"],
            }
            for error in e.errors()
        ]
        raise ValidationError("Invalid request data", field_errors=field_errors)


class PaginationRequest(BaseModel):
    """Standard page-number pagination parameters for list endpoints"""
    page: int = Field(default=1, ge=1, description="Page number, starting at 1")
    page_size: int = Field(default=20, ge=1, le=100, description="Number of items per page (1-100)")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "page": 2,
                "page_size": 20
            }
        }
    )


class PaginationResponse(BaseModel):
    """Standard pagination metadata for responses"""
    current_page: int = Field(description="Page returned")
    page_size: int = Field(description="Number of items requested per page")
    total_items: int = Field(description="Items matching the query across all pages")
    total_pages: int = Field(description="Number of pages, at least 1")
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def from_state(cls, state: PaginationState) -> "PaginationResponse":
        return cls(
            current_page=state.current_page,
            page_size=state.page_size,
            total_items=state.total_items,
            total_pages=state.total_pages,
            has_next_page=state.has_next_page,
            has_previous_page=state.has_previous_page,
        )


class ErrorResponse(BaseModel):
    """Standard error response format"""
    success: bool = Field(default=False, description="Always false for errors")
    error: Dict[str, Any] = Field(description="Error information")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: Optional[str] = Field(default=None)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "error": {
                    "code": "VALIDATION_ERROR",
                    "message": "Invalid input data",
                    "details": {
                        "field_errors": [
                            {"field": "price", "message": "Price cannot be negative"}
                        ]
                    }
                },
                "timestamp": "2026-01-03T10:30:00Z",
                "request_id": "uuid-here"
            }
        }
    )
