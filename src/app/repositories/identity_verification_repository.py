from abc import ABC, abstractmethod
from typing import Optional
from src.domain.identity_verification import IdentityVerification


class IdentityVerificationRepository(ABC):
    @abstractmethod
    async def get_by_id(self, verification_id: str) -> Optional[IdentityVerification]:
        pass

    @abstractmethod
    async def update(self, verification: IdentityVerification) -> IdentityVerification:
        pass
