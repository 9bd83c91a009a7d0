import asyncio

from fastapi import APIRouter, Depends

from wheelstore.app.core.dependencies import get_mailer

from .schemas import ContactSubmission, NewsletterSubscription, SubmissionResult
from .service import subscribe as svc_subscribe, submit_contact as svc_submit_contact

router = APIRouter()


@router.post(
    "/contact",
    response_model=SubmissionResult,
    summary="Send a contact form message to the shop",
    tags=["contact"],
)
async def submit_contact(payload: ContactSubmission, mailer=Depends(get_mailer)):
    return await asyncio.to_thread(svc_submit_contact, mailer, payload)


@router.post(
    "/newsletter/subscribe",
    response_model=SubmissionResult,
    summary="Subscribe an email address to the newsletter",
    tags=["contact"],
)
async def subscribe(payload: NewsletterSubscription, mailer=Depends(get_mailer)):
    return await asyncio.to_thread(svc_subscribe, mailer, payload)
