from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):  # type: ignore[misc]
    """Envelope of every notification endpoint response."""

    message: str
    success: bool
    data: T | None = None

    @classmethod
    def error(cls, message: str) -> dict[str, Any]:
        """Error body; `data` is omitted entirely."""
        return {"message": message, "success": False}
