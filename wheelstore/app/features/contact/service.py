import logging
from html import escape

from fastapi import HTTPException

from wheelstore.services.mail_service import MailError, MailMessage
from wheelstore.settings import settings

from .schemas import ContactSubmission, NewsletterSubscription, SubmissionResult

logger = logging.getLogger(__name__)


def _send(mailer, message: MailMessage) -> None:
    try:
        mailer.send(message)
    except MailError as exc:
        logger.error("Mail to %s failed: %s", message.to, exc)
        raise HTTPException(status_code=500, detail="Failed to send email") from exc


def submit_contact(mailer, data: ContactSubmission) -> SubmissionResult:
    """Confirm receipt to the sender and forward the message to the shop admin."""
    name = escape(data.name.strip())
    body = escape(data.message)
    _send(
        mailer,
        MailMessage(
            subject=f"We've received your message - {settings.SHOP_NAME}",
            to=[data.email],
            html_body=(
                f"<h1>Thank you for contacting us, {name}!</h1>"
                "<p>We've received your message and will get back to you as soon as possible.</p>"
                f"<blockquote>{body}</blockquote>"
            ),
        ),
    )
    _send(
        mailer,
        MailMessage(
            subject="New Contact Form Submission",
            to=[settings.ADMIN_EMAIL],
            reply_to=[data.email],
            html_body=(
                f"<p><strong>Name:</strong> {name}</p>"
                f"<p><strong>Email:</strong> {escape(data.email)}</p>"
                f"<blockquote>{body}</blockquote>"
            ),
        ),
    )
    return SubmissionResult(message="Message sent successfully")


def subscribe(mailer, data: NewsletterSubscription) -> SubmissionResult:
    _send(
        mailer,
        MailMessage(
            subject=f"Welcome to {settings.SHOP_NAME} Newsletter",
            to=[data.email],
            html_body=(
                "<h1>Thank you for subscribing!</h1>"
                "<p>We'll keep you updated with our latest products and promotions.</p>"
            ),
        ),
    )
    return SubmissionResult(message="Subscription successful")
