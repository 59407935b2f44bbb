"""Unit tests for request schema examples published in OpenAPI"""

from src.api.schemas.billing_request import ApplyPaymentRequestSchema
from src.app.use_cases.installments.dtos import PriceBreakdownDTO


def test_apply_payment_schema_example():
    schema = ApplyPaymentRequestSchema.model_json_schema()

    assert schema["example"] == {"target_categories": ["Rental", "Fines"]}


def test_price_breakdown_schema_example():
    schema = PriceBreakdownDTO.model_json_schema()

    assert schema["example"]["rental_fee"] == "1200.00"
    assert schema["example"]["security_deposit"] == "500.00"
