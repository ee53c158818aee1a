from __future__ import annotations

import asyncio
import logging
from typing import Optional

from app.schemas.contact import ContactSubmission, RenderedEmail
from app.services.email_provider import (
    DispatchFailure,
    DispatchResult,
    EmailProvider,
    OutboundEmail,
)

logger = logging.getLogger(__name__)


class ContactDispatcher:
    """Hands rendered contact emails to the provider, replies routed to the submitter."""

    def __init__(
        self,
        provider: EmailProvider,
        sender: Optional[str],
        recipient: Optional[str],
    ) -> None:
        self.provider = provider
        self.sender = sender
        self.recipient = recipient

    def build_outbound(
        self, rendered: RenderedEmail, submission: ContactSubmission
    ) -> OutboundEmail:
        return OutboundEmail(
            sender=self.sender or "",
            recipient=self.recipient or "",
            subject=rendered.subject,
            html=rendered.html,
            text=rendered.text,
            reply_to=submission.email,
        )

    async def send(
        self, rendered: RenderedEmail, submission: ContactSubmission
    ) -> DispatchResult:
        if not self.sender or not self.recipient:
            result = DispatchResult.failed(
                DispatchFailure.NOT_CONFIGURED,
                "FROM_EMAIL and RECIPIENT_EMAIL must both be configured",
            )
        else:
            outbound = self.build_outbound(rendered, submission)
            try:
                result = await asyncio.to_thread(self.provider.send, outbound)
            except Exception as exc:
                result = DispatchResult.failed(
                    DispatchFailure.TRANSPORT_ERROR, f"{type(exc).__name__}: {exc}"
                )

        if not result.ok:
            logger.error(
                "Contact email dispatch failed provider=%s failure=%s detail=%s",
                self.provider.name,
                result.failure.value if result.failure else None,
                result.detail,
                extra={
                    "event": "contact_dispatch_failed",
                    "failure": result.failure.value if result.failure else None,
                    "email_domain": submission.email_domain,
                },
            )
        return result
