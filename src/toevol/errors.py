from dataclasses import dataclass
from typing import Any, Optional


@dataclass(eq=False)
class ToevolError(Exception):
    """Domain error carrying a stable code and the HTTP status it maps to."""

    code: str
    status_code: int = 500
    details: Optional[str] = None

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.details}"
        return self.code

    def to_detail(self) -> Any:
        # Server-side failures keep their diagnostics, client errors only expose the code.
        if self.status_code >= 500:
            return {"error": self.code, "details": self.details}
        return self.code


class ValidationError(ToevolError):
    def __init__(self, code: str, details: Optional[str] = None):
        super().__init__(code, 400, details)


class NotFoundError(ToevolError):
    def __init__(self, code: str, details: Optional[str] = None):
        super().__init__(code, 404, details)


class ConflictError(ToevolError):
    def __init__(self, code: str, details: Optional[str] = None):
        super().__init__(code, 409, details)


class DependencyError(ToevolError):
    def __init__(self, code: str, details: Optional[str] = None):
        super().__init__(code, 500, details)
