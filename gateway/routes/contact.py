# contact.py
# Contact form endpoint for the Endless Forge API gateway

# Draws from the caller's daily `mail` quota, filters spam and links, then
# relays the message to the site admin through Mailjet.

# @see: gateway/content_filter.py - Profanity, spam and link checks
# @see: gateway/providers/mailjet.py - Mailjet send client

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from gateway.content_filter import ContentFilter, content_filter
from gateway.logging_config import get_logger
from gateway.providers import MailjetClient, ProviderError, get_mailjet_client
from gateway.models import ActionKind, ContactInput, ContactResponse, QuotaDecision
from gateway.rate_limit import enforce_limit

logger = get_logger("routes.contact")

router = APIRouter(tags=["contact"])


def get_content_filter() -> ContentFilter:
    return content_filter


@router.post("/contact", response_model=ContactResponse)
async def contact(
    payload: ContactInput,
    _quota: QuotaDecision = Depends(enforce_limit(ActionKind.MAIL)),
    mailjet: MailjetClient = Depends(get_mailjet_client),
    spam_filter: ContentFilter = Depends(get_content_filter),
):
    """Send a contact-form message to the site admin."""
    name, email, message = payload.name, payload.email, payload.message
    if not name or not email or not message:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields.",
        )

    if spam_filter.is_profane(message) or spam_filter.is_profane(name):
        logger.warning(f"Blocked spam or profanity from {email}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inappropriate or spammy content detected.",
        )

    if spam_filter.contains_link(message):
        logger.warning(f"Message contains link, possible spam from {email}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Links are not allowed in messages.",
        )

    try:
        await run_in_threadpool(mailjet.send_contact_message, name, email, message)
    except ProviderError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to send email.",
        )

    logger.info(f"Email sent from {email} ({name})")
    return ContactResponse(success=True, message="Email sent successfully!")
