"""Rental agreement lifecycle shared by the signature use cases"""

import logging
from typing import Optional, Tuple
from src.domain.base import utc_now
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.document_storage import DocumentStorage
from src.app.services.esign_provider import ESignProvider
from src.app.repositories.customer_repository import (
    CustomerRepository,
    CustomerDocumentRepository,
)
from src.app.repositories.rental_repository import RentalRepository, VehicleRepository
from src.domain.customer import CustomerDocument
from src.domain.rental import Rental, RentalStatus, DocumentStatus
from src.domain.vehicle import VehicleStatus

logger = logging.getLogger(__name__)


class AgreementLifecycle:
    """
    Applies a new document status to a rental

    Business Rules:
    1. Entering COMPLETED activates the rental and marks its vehicle RENTED,
       committed together before anything else happens
    2. The signed PDF is then archived: downloaded, stored, recorded as a
       CustomerDocument and linked on the rental
    3. Archival failures are logged; activation stays in place
    4. Cancelled rentals only record the document status
    """

    def __init__(
        self,
        uow: UnitOfWork,
        rental_repo: RentalRepository,
        vehicle_repo: VehicleRepository,
        customer_repo: CustomerRepository,
        document_repo: CustomerDocumentRepository,
        storage: DocumentStorage,
    ):
        self.uow = uow
        self.rental_repo = rental_repo
        self.vehicle_repo = vehicle_repo
        self.customer_repo = customer_repo
        self.document_repo = document_repo
        self.storage = storage

    async def transition(
        self,
        rental: Rental,
        new_status: DocumentStatus,
        provider: ESignProvider,
        envelope_id: str,
    ) -> Tuple[bool, Optional[CustomerDocument]]:
        """
        Record ``new_status`` on ``rental`` and run completion side effects.

        Returns:
            (activated, archived document or None)
        """
        entering_completed = (
            new_status == DocumentStatus.COMPLETED
            and rental.document_status != DocumentStatus.COMPLETED
        )

        rental.document_status = new_status
        rental.updated_at = utc_now()

        activated = False
        if entering_completed and rental.status == RentalStatus.CANCELLED:
            logger.warning(f"Agreement for cancelled rental {rental.id} completed; rental left cancelled")
        elif entering_completed:
            rental.status = RentalStatus.ACTIVE
            if rental.vehicle_id:
                vehicle = await self.vehicle_repo.get_by_id(rental.vehicle_id, for_update=True)
                if vehicle:
                    vehicle.status = VehicleStatus.RENTED
                    vehicle.updated_at = rental.updated_at
                    await self.vehicle_repo.update(vehicle)
            activated = True

        await self.rental_repo.update(rental)
        await self.uow.commit()

        if activated:
            logger.info(f"Rental {rental.id} activated after agreement {envelope_id} completed")

        document = None
        if new_status == DocumentStatus.COMPLETED and not rental.signed_document_id:
            document = await self.archive_signed_document(rental, provider, envelope_id)

        return activated, document

    async def archive_signed_document(
        self,
        rental: Rental,
        provider: ESignProvider,
        envelope_id: str,
        content: Optional[bytes] = None,
    ) -> Optional[CustomerDocument]:
        """Store the signed agreement and link it; None if any step failed"""
        rental_id = rental.id
        file_name = f"rental-agreement-{envelope_id}-signed.pdf"

        try:
            if content is None:
                content = await provider.download_signed_document(envelope_id)
            file_url = await self.storage.save(
                f"agreements/{rental.tenant_id or 'default'}/{file_name}", content
            )
        except Exception as e:
            logger.error(f"Failed to store signed agreement {envelope_id} for rental {rental_id}: {e}")
            return None

        try:
            customer = await self.customer_repo.get_by_id(rental.customer_id)
            customer_name = customer.name if customer and customer.name else "Customer"

            document = await self.document_repo.create(
                CustomerDocument(
                    customer_id=rental.customer_id,
                    tenant_id=rental.tenant_id,
                    rental_id=rental_id,
                    document_type="Other",
                    document_name=f"Signed Rental Agreement - {customer_name}",
                    file_url=file_url,
                    file_name=file_name,
                    mime_type="application/pdf",
                    verified=True,
                    status="Active",
                )
            )

            rental.signed_document_id = document.id
            rental.envelope_completed_at = utc_now()
            await self.rental_repo.update(rental)
            await self.uow.commit()

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to record signed agreement {envelope_id} for rental {rental_id}: {e}")
            return None

        logger.info(f"Signed agreement for rental {rental_id} stored as document {document.id}")
        return document
