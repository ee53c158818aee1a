from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List, Optional

from app.core.sanitizer import sanitize_string
from app.schemas.contact import ContactSubmission, RenderedEmail

DEFAULT_SUBJECT_LABEL = "General inquiry"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT).strip()


def build_subject(submission: ContactSubmission) -> str:
    if submission.subject:
        return f"Contact form: {sanitize_string(submission.subject)}"
    return f"New contact from {sanitize_string(submission.name)}"


def build_html(submission: ContactSubmission, sent_on: str) -> str:
    detail_lines: List[str] = [
        f"<p><strong>Name:</strong> {sanitize_string(submission.name)}</p>",
        f"<p><strong>Email:</strong> {sanitize_string(submission.email)}</p>",
    ]
    if submission.phone:
        detail_lines.append(
            f"<p><strong>Phone:</strong> {sanitize_string(submission.phone)}</p>"
        )
    if submission.company:
        detail_lines.append(
            f"<p><strong>Company:</strong> {sanitize_string(submission.company)}</p>"
        )
    subject_label = (
        sanitize_string(submission.subject) if submission.subject else DEFAULT_SUBJECT_LABEL
    )
    detail_lines.append(f"<p><strong>Subject:</strong> {subject_label}</p>")

    message_html = sanitize_string(submission.message).replace("\r\n", "\n").replace("\n", "<br>")

    lines = [
        "<!DOCTYPE html>",
        '<html lang="en">',
        "<head>",
        '  <meta charset="utf-8">',
        "  <title>New Contact Form Submission</title>",
        "</head>",
        '<body style="margin: 0; padding: 0;">',
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">',
        '  <h2 style="color: #333; border-bottom: 2px solid #007bff; padding-bottom: 10px;">',
        "    New Contact Form Submission",
        "  </h2>",
        '  <div style="background: #f8f9fa; padding: 20px; border-radius: 5px; margin: 20px 0;">',
        *[f"    {line}" for line in detail_lines],
        "  </div>",
        '  <div style="margin: 20px 0;">',
        '    <h3 style="color: #333; margin-bottom: 10px;">Message:</h3>',
        '    <div style="background: white; padding: 15px; border-left: 4px solid #007bff; border-radius: 3px;">',
        f"      {message_html}",
        "    </div>",
        "  </div>",
        '  <div style="margin-top: 30px; padding-top: 20px; border-top: 1px solid #ddd; font-size: 12px; color: #666;">',
        f"    <p>This message was sent via your website contact form on {sent_on}.</p>",
        "  </div>",
        "</div>",
        "</body>",
        "</html>",
    ]
    return "\n".join(lines)


def build_text(submission: ContactSubmission, sent_on: str) -> str:
    # Plain text carries the raw values; there is no markup to inject into.
    lines = [
        "New Contact Form Submission",
        "",
        f"Name: {submission.name}",
        f"Email: {submission.email}",
    ]
    if submission.phone:
        lines.append(f"Phone: {submission.phone}")
    if submission.company:
        lines.append(f"Company: {submission.company}")
    lines.append(f"Subject: {submission.subject or DEFAULT_SUBJECT_LABEL}")
    lines.extend(
        [
            "",
            "Message:",
            submission.message,
            "",
            f"Sent on: {sent_on}",
        ]
    )
    return "\n".join(lines)


class ContactRenderer:
    """Builds subject, HTML and text bodies for a validated submission."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock

    def render(
        self, submission: ContactSubmission, sent_at: Optional[datetime] = None
    ) -> RenderedEmail:
        sent_on = format_timestamp(sent_at or self._clock())
        return RenderedEmail(
            subject=build_subject(submission),
            html=build_html(submission, sent_on),
            text=build_text(submission, sent_on),
        )
