from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class ContactSubmission(BaseModel):
    """A validated contact form submission.

    Built only after the raw payload has passed validation. Values are kept
    as submitted (untrimmed); HTML sanitization happens at render time.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    message: str
    subject: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None

    @property
    def email_domain(self) -> Optional[str]:
        return self.email.split("@")[-1] if "@" in self.email else None


class RenderedEmail(BaseModel):
    model_config = ConfigDict(frozen=True)

    subject: str
    html: str
    text: str


class ApiResponse(BaseModel):
    """Response body returned to the caller."""

    success: bool
    message: str
    error: Optional[str] = None

    def to_body(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
