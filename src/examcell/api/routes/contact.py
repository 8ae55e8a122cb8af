"""Public contact-form endpoint."""

import logging

from fastapi import APIRouter

from examcell.api.dependencies import StateStoreDep
from examcell.api.models import APIResponse, ContactRequest, ContactResponse
from examcell.contact import (
    generate_reference_id,
    priority_for,
    response_time_for,
    validate_contact_form,
)

logger = logging.getLogger("examcell.api.contact")

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("", response_model=APIResponse[ContactResponse])
def submit_contact_form(body: ContactRequest, store: StateStoreDep) -> APIResponse[ContactResponse]:
    """Record a contact-form message and tell the sender when to expect a reply."""
    form = validate_contact_form(
        name=body.name,
        email=body.email,
        user_type=body.user_type,
        subject=body.subject,
        message=body.message,
    )
    priority = priority_for(form.subject)
    stored = store.save_contact_message(
        reference_id=generate_reference_id(),
        name=form.name,
        email=form.email,
        user_type=form.user_type,
        subject=form.subject,
        message=form.message,
        priority=priority.value,
    )
    logger.info("Contact message %s (%s priority)", stored.reference_id, priority.value)
    return APIResponse(
        data=ContactResponse(
            message="Message received successfully",
            reference_id=stored.reference_id,
            priority=priority.value,
            response_time=response_time_for(form.subject),
        )
    )
