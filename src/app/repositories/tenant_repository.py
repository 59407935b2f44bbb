from abc import ABC, abstractmethod
from typing import Optional
from src.domain.tenant import Tenant


class TenantRepository(ABC):
    @abstractmethod
    async def get_by_id(self, tenant_id: str) -> Optional[Tenant]:
        """
        Retrieve tenant by ID

        Args:
            tenant_id: Tenant identifier

        Returns:
            Tenant if found, None otherwise
        """
        pass
