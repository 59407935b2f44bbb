"""Provider status vocabularies mapped onto DocumentStatus

Both mappings are total: a value neither table knows becomes UNKNOWN and is
logged with the raw provider string.
"""

import logging
from typing import Optional
from src.domain.rental import DocumentStatus

logger = logging.getLogger(__name__)

BOLDSIGN_EVENTS = {
    "Sent": DocumentStatus.SENT,
    "Viewed": DocumentStatus.DELIVERED,
    "Signed": DocumentStatus.SIGNED,
    "Completed": DocumentStatus.COMPLETED,
    "Declined": DocumentStatus.DECLINED,
    "Revoked": DocumentStatus.VOIDED,
    "Expired": DocumentStatus.EXPIRED,
    "Reassigned": DocumentStatus.SENT,
}

DOCUSIGN_STATUSES = {
    "created": DocumentStatus.PENDING,
    "sent": DocumentStatus.SENT,
    "delivered": DocumentStatus.DELIVERED,
    "signed": DocumentStatus.SIGNED,
    "completed": DocumentStatus.COMPLETED,
    "declined": DocumentStatus.DECLINED,
    "voided": DocumentStatus.VOIDED,
    "expired": DocumentStatus.EXPIRED,
}


def map_boldsign_event(event_type: Optional[str]) -> DocumentStatus:
    status = BOLDSIGN_EVENTS.get((event_type or "").strip())
    if status is None:
        logger.warning(f"Unrecognised BoldSign event type: {event_type!r}")
        return DocumentStatus.UNKNOWN
    return status


def map_docusign_status(raw_status: Optional[str]) -> DocumentStatus:
    status = DOCUSIGN_STATUSES.get((raw_status or "").strip().lower())
    if status is None:
        logger.warning(f"Unrecognised DocuSign envelope status: {raw_status!r}")
        return DocumentStatus.UNKNOWN
    return status
