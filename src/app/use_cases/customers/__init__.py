"""Customer use cases"""
from .customer_signup import CustomerSignup
from .dtos import CustomerSignupCommandDTO, CustomerSignupResponseDTO

__all__ = [
    "CustomerSignup",
    "CustomerSignupCommandDTO",
    "CustomerSignupResponseDTO",
]
