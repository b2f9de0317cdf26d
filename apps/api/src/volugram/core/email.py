"""
Email Service using Resend

Sends the account emails (activation, password reset) and the localized
submission decision emails. Delivery failures are logged and reported as
False; they never propagate into the calling workflow.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from html import escape

import resend

from volugram.core.config import settings
from volugram.core.languages import Language, resolve_language

logger = logging.getLogger(__name__)

resend.api_key = settings.resend_api_key


@dataclass(frozen=True)
class Attachment:
    """A file attached to an outgoing email."""

    filename: str
    content: bytes


@dataclass(frozen=True)
class DecisionTemplate:
    # Placeholders: {date}, {who}
    subject: str
    # Followed by the reviewer's comment
    body: str


ACCEPTED_TEMPLATES: dict[Language, DecisionTemplate] = {
    Language.EN: DecisionTemplate(
        subject="Certificate Issuance ({date}) by {who}",
        body="Your submission has been accepted. Comment: ",
    ),
    Language.DE: DecisionTemplate(
        subject="Zertifikatausstellung ({date}) durch {who}",
        body="Ihre Einreichung wurde akzeptiert. Kommentar: ",
    ),
    Language.NO: DecisionTemplate(
        subject="Sertifikatutstedelse ({date}) av {who}",
        body="Din innlevering har blitt akseptert. Kommentar: ",
    ),
    Language.ET: DecisionTemplate(
        subject="Sertifikaadi väljastamine ({date}) {who} poolt",
        body="Teie taotlus on vastu võetud. Kommentaar: ",
    ),
}

REJECTED_TEMPLATES: dict[Language, DecisionTemplate] = {
    Language.EN: DecisionTemplate(
        subject="Rejected Volunteering Submission by {who} {date}",
        body="Your submission has been rejected. Comment: ",
    ),
    Language.DE: DecisionTemplate(
        subject="Abgelehnte Freiwilligen-Einreichung durch {who} {date}",
        body="Ihre Einreichung wurde abgelehnt. Kommentar: ",
    ),
    Language.NO: DecisionTemplate(
        subject="Avvist Frivillig Innsending av {who} {date}",
        body="Din innlevering har blitt avvist. Kommentar: ",
    ),
    Language.ET: DecisionTemplate(
        subject="Tagasi lükatud vabatahtliku esitlus {who} poolt {date}",
        body="Teie esitlus on tagasi lükatud. Kommentaar: ",
    ),
}

_STYLE = """
        <style>
            body { font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }
            .container { max-width: 600px; margin: 0 auto; padding: 40px 20px; }
            .header { color: #1a365d; margin-bottom: 24px; }
            .button { display: inline-block; background-color: #1a365d; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; margin: 24px 0; }
            .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }
        </style>
"""


def format_mail_date(day: date) -> str:
    """Day.month.year without zero padding (e.g. 4.1.2024)."""
    return f"{day.day}.{day.month}.{day.year}"


def _link_email_html(title: str, intro: str, url: str, button: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head>{_STYLE}</head>
    <body>
        <div class="container">
            <h1 class="header">{escape(title)}</h1>
            <p>{escape(intro)}</p>
            <a href="{url}" class="button">{escape(button)}</a>
            <p>Or copy and paste this link into your browser:</p>
            <p style="word-break: break-all; color: #3b82f6;">{url}</p>
            <div class="footer">
                <p>If you didn't request this, you can safely ignore this email.</p>
                <p>Volugram</p>
            </div>
        </div>
    </body>
    </html>
    """


async def send_email(
    to_email: str,
    subject: str,
    html_content: str | None = None,
    text_content: str | None = None,
    attachments: list[Attachment] | None = None,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML body
        text_content: Plain text body
        attachments: Files to attach

    Returns:
        True if the email was handed to Resend (or logged in its absence)
    """
    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(
            f"EMAIL TO: {to_email} | SUBJECT: {subject} | "
            f"ATTACHMENTS: {[a.filename for a in attachments or []]}"
        )
        return True

    params: resend.Emails.SendParams = {
        "from": settings.email_from,
        "to": [to_email],
        "subject": subject,
    }
    if html_content is not None:
        params["html"] = html_content
    if text_content is not None:
        params["text"] = text_content
    if attachments:
        params["attachments"] = [
            {"filename": attachment.filename, "content": list(attachment.content)}
            for attachment in attachments
        ]

    try:
        # Resend's client is synchronous
        email = await asyncio.to_thread(resend.Emails.send, params)
    except Exception as e:
        logger.error(f"Failed to send email to {to_email}: {e}", exc_info=True)
        return False

    logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
    return True


# ============================================
# Submission decisions
# ============================================


def build_accepted_email(
    language: Language | str, who: str, comment: str, today: date
) -> tuple[str, str]:
    """Return (subject, text) of the localized "accepted" email."""
    template = ACCEPTED_TEMPLATES[resolve_language(language)]
    subject = template.subject.format(date=format_mail_date(today), who=who)
    return subject, f"{template.body}{comment}"


def build_rejected_email(
    language: Language | str, who: str, comment: str, today: date
) -> tuple[str, str]:
    """Return (subject, text) of the localized "rejected" email."""
    template = REJECTED_TEMPLATES[resolve_language(language)]
    subject = template.subject.format(date=format_mail_date(today), who=who)
    return subject, f"{template.body}{comment}"


async def send_submission_accepted(
    to_email: str,
    language: Language | str,
    who: str,
    comment: str,
    certificate_pdf: bytes,
) -> bool:
    """Send the "accepted" email with the certificate attached."""
    subject, text = build_accepted_email(language, who, comment, date.today())
    return await send_email(
        to_email=to_email,
        subject=subject,
        text_content=text,
        attachments=[Attachment(filename="certificate.pdf", content=certificate_pdf)],
    )


async def send_submission_rejected(
    to_email: str,
    language: Language | str,
    who: str,
    comment: str,
) -> bool:
    """Send the "rejected" email."""
    subject, text = build_rejected_email(language, who, comment, date.today())
    return await send_email(to_email=to_email, subject=subject, text_content=text)


async def send_certificates_archive(to_email: str, archive_id: str, archive: bytes) -> bool:
    """Send every confirmed certificate for an address as one zip archive."""
    return await send_email(
        to_email=to_email,
        subject=f"Certificates - {archive_id} - Volugram",
        text_content="Your certificates are attached.",
        attachments=[Attachment(filename="certificates.zip", content=archive)],
    )


# ============================================
# Accounts
# ============================================


async def send_account_activation(to_email: str, name: str, token: str) -> bool:
    """Send the account activation link."""
    url = f"{settings.api_base_url}/api/v1/auth/activate/{token}"
    html_content = _link_email_html(
        title="Confirm your Volugram account",
        intro=f"Hello {name}, please confirm your email address to activate your account.",
        url=url,
        button="Activate account",
    )
    return await send_email(
        to_email=to_email,
        subject="Volugram account confirmation",
        html_content=html_content,
        text_content=f"Activate your account: {url}",
    )


async def send_password_reset(to_email: str, token: str) -> bool:
    """Send the password reset link."""
    url = f"{settings.api_base_url}/api/v1/auth/password-reset/{token}"
    html_content = _link_email_html(
        title="Reset your password",
        intro="A password reset was requested for your Volugram account.",
        url=url,
        button="Reset password",
    )
    return await send_email(
        to_email=to_email,
        subject="Volugram password reset",
        html_content=html_content,
        text_content=f"Reset your password: {url}",
    )
