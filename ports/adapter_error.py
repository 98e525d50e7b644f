"""Unified adapter error types."""
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class AdapterError(Exception):
    """
    Unified error type for all client and adapter failures.

    Carries a machine-readable code so callers can branch on the kind of
    failure (retry a transport error, give up on a malformed response)
    without parsing messages.
    """
    code: str
    message: str
    details: Optional[Any] = None

    def __str__(self) -> str:
        if self.details:
            return f"[{self.code}] {self.message} (details: {self.details})"
        return f"[{self.code}] {self.message}"
