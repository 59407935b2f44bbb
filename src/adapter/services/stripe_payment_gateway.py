"""Stripe Payment Gateway

PaymentGateway backed by the Stripe SDK. SDK calls are blocking, so each one
runs in a worker thread. Responses are read through ``_parse_intent`` /
``_parse_refund``, which reject anything missing the fields acted upon.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, Optional

import stripe

from src.app.services.payment_gateway import (
    PaymentGateway,
    PaymentGatewayError,
    PaymentIntentInfo,
    RefundInfo,
    IntentStatus,
)
from src.domain.money import to_minor_units, from_minor_units

logger = logging.getLogger(__name__)


def _field(obj: Any, name: str) -> Any:
    return getattr(obj, name, None)


def _parse_intent(obj: Any) -> PaymentIntentInfo:
    intent_id = _field(obj, "id")
    raw_status = _field(obj, "status")
    amount = _field(obj, "amount")
    if not isinstance(intent_id, str) or not isinstance(raw_status, str) or not isinstance(amount, int):
        raise PaymentGatewayError("Unexpected payment intent response from Stripe", code="invalid_response")

    status = IntentStatus.parse(raw_status)
    if status == IntentStatus.UNKNOWN:
        logger.warning(f"Unrecognised payment intent status {raw_status!r} on {intent_id}")

    last_error = _field(obj, "last_payment_error")
    return PaymentIntentInfo(
        id=intent_id,
        status=status,
        raw_status=raw_status,
        amount=from_minor_units(amount),
        currency=_field(obj, "currency"),
        failure_message=_field(last_error, "message") if last_error else None,
    )


def _parse_refund(obj: Any) -> RefundInfo:
    refund_id = _field(obj, "id")
    amount = _field(obj, "amount")
    status = _field(obj, "status")
    if not isinstance(refund_id, str) or not isinstance(amount, int):
        raise PaymentGatewayError("Unexpected refund response from Stripe", code="invalid_response")
    return RefundInfo(id=refund_id, amount=from_minor_units(amount), status=status or "unknown")


class StripePaymentGateway(PaymentGateway):
    """
    Stripe implementation of PaymentGateway

    ``account_id`` is passed as ``stripe_account`` so calls act on a tenant's
    connected account.
    """

    def __init__(self, api_key: str):
        self.api_key = api_key

    async def _call(self, fn, *args, **kwargs):
        try:
            return await asyncio.to_thread(fn, *args, api_key=self.api_key, **kwargs)
        except stripe.CardError as e:
            raise PaymentGatewayError(e.user_message or str(e), code=e.code) from e
        except stripe.StripeError as e:
            logger.error(f"Stripe call {getattr(fn, '__qualname__', fn)} failed: {e}")
            raise PaymentGatewayError(e.user_message or str(e), code=e.code) from e

    async def retrieve_intent(self, intent_id: str, account_id: Optional[str] = None) -> PaymentIntentInfo:
        intent = await self._call(stripe.PaymentIntent.retrieve, intent_id, stripe_account=account_id)
        return _parse_intent(intent)

    async def cancel_intent(self, intent_id: str, account_id: Optional[str] = None) -> PaymentIntentInfo:
        intent = await self._call(stripe.PaymentIntent.cancel, intent_id, stripe_account=account_id)
        logger.info(f"Released pre-authorisation {intent_id}")
        return _parse_intent(intent)

    async def create_refund(
        self,
        intent_id: str,
        amount: Optional[Decimal] = None,
        reason: str = "requested_by_customer",
        account_id: Optional[str] = None,
    ) -> RefundInfo:
        params: Dict[str, Any] = {"payment_intent": intent_id, "reason": reason}
        if amount is not None:
            params["amount"] = to_minor_units(amount)

        refund = await self._call(stripe.Refund.create, stripe_account=account_id, **params)
        info = _parse_refund(refund)
        logger.info(f"Refund {info.id} of {info.amount} created for {intent_id} ({info.status})")
        return info

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
        intent = await self._call(
            stripe.PaymentIntent.create,
            amount=to_minor_units(amount),
            currency=currency.lower(),
            customer=customer_id,
            payment_method=payment_method_id,
            off_session=True,
            confirm=True,
            metadata=metadata or {},
            stripe_account=account_id,
            idempotency_key=idempotency_key,
        )
        return _parse_intent(intent)
