"""Payment Gateway Interface

Defines the contract with the payment processor. Processor responses are
parsed into the typed models below; anything that does not fit them is
rejected with PaymentGatewayError rather than read optimistically.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional
from pydantic import BaseModel


class PaymentGatewayError(Exception):
    """Processor call failed or returned an unrecognised shape"""

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code


class IntentStatus(str, Enum):
    """Payment intent states the service acts upon"""
    REQUIRES_PAYMENT_METHOD = "requires_payment_method"
    REQUIRES_CONFIRMATION = "requires_confirmation"
    REQUIRES_ACTION = "requires_action"
    PROCESSING = "processing"
    REQUIRES_CAPTURE = "requires_capture"
    SUCCEEDED = "succeeded"
    CANCELED = "canceled"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "IntentStatus":
        try:
            return cls(raw)
        except ValueError:
            return cls.UNKNOWN


class PaymentIntentInfo(BaseModel):
    id: str
    status: IntentStatus
    raw_status: str
    amount: Decimal
    currency: Optional[str] = None
    failure_message: Optional[str] = None


class RefundInfo(BaseModel):
    id: str
    amount: Decimal
    status: str


class PaymentGateway(ABC):
    """
    Abstract payment processor

    ``account_id`` routes the call through a tenant's connected account.
    Amounts are major currency units; adapters convert to minor units.
    """

    @abstractmethod
    async def retrieve_intent(self, intent_id: str, account_id: Optional[str] = None) -> PaymentIntentInfo:
        """
        Fetch the current state of a payment intent

        Args:
            intent_id: Processor payment intent id
            account_id: Optional connected account

        Returns:
            PaymentIntentInfo

        Raises:
            PaymentGatewayError: processor failure or unparseable response
        """
        pass

    @abstractmethod
    async def cancel_intent(self, intent_id: str, account_id: Optional[str] = None) -> PaymentIntentInfo:
        """Release an uncaptured pre-authorisation"""
        pass

    @abstractmethod
    async def create_refund(
        self,
        intent_id: str,
        amount: Optional[Decimal] = None,
        reason: str = "requested_by_customer",
        account_id: Optional[str] = None,
    ) -> RefundInfo:
        """
        Refund a captured payment intent

        Args:
            intent_id: Processor payment intent id
            amount: Partial amount; None refunds the full captured amount
            reason: Processor refund reason
            account_id: Optional connected account

        Returns:
            RefundInfo
        """
        pass

    @abstractmethod
    async def charge_off_session(
        self,
        amount: Decimal,
        currency: str,
        customer_id: str,
        payment_method_id: str,
        metadata: Optional[Dict[str, str]] = None,
        account_id: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> PaymentIntentInfo:
        """
        Charge a saved payment method without the customer present

        Returns:
            PaymentIntentInfo of the confirmed intent

        Raises:
            PaymentGatewayError: card declined or processor failure
        """
        pass
