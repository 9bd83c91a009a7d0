from pydantic import BaseModel, EmailStr, Field


class ContactSubmission(BaseModel):
    name: str = Field(..., min_length=1, description="Sender name")
    email: EmailStr = Field(..., description="Reply address")
    message: str = Field(..., min_length=1, description="Message body")


class NewsletterSubscription(BaseModel):
    email: EmailStr = Field(..., description="Subscriber address")


class SubmissionResult(BaseModel):
    success: bool = True
    message: str
