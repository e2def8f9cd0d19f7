"""
Error payload returned by every failing endpoint.
"""

from typing import Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    message: str
    details: Optional[dict[str, str]] = None
