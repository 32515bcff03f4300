"""
Payment Service Abstract Base Class

Defines the interface contract for all payment service implementations.
Both MockPaymentService and StripePaymentService must implement these methods,
so checkout behaves the same regardless of which service is active.

Design Pattern: Strategy Pattern
    - Allows runtime switching between payment providers
    - Facilitates testing with the mock implementation

Author: Khalil_Bannouri
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class PaymentIntentResult:
    """
    Standardized result from creating a payment intent.

    Attributes:
        success: Whether the processor accepted the intent
        payment_intent_id: Processor identifier (Stripe format: pi_xxx)
        client_secret: Secret the browser uses to confirm the card payment
        amount: Amount in minor currency units (cents for USD)
        currency: Currency code (e.g., "usd")
        error_message: Error description if creation failed
        error_code: Machine-readable error code
        response_time_ms: Time taken by the processor call
    """
    success: bool
    payment_intent_id: Optional[str] = None
    client_secret: Optional[str] = None
    amount: Optional[int] = None
    currency: str = "usd"
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    response_time_ms: float = 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for logging. Omits the client secret."""
        return {
            "success": self.success,
            "payment_intent_id": self.payment_intent_id,
            "amount": self.amount,
            "currency": self.currency,
            "error_message": self.error_message,
            "error_code": self.error_code,
            "response_time_ms": self.response_time_ms,
        }


class BasePaymentService(ABC):
    """
    Abstract base class for payment services.

    The server never sees card details: it only asks the processor for a
    payment intent and hands the client secret back to the browser, which
    confirms the payment directly with the processor.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the payment provider.

        Returns:
            str: Provider name (e.g., "mock", "stripe")
        """
        pass

    @abstractmethod
    async def create_payment_intent(
        self,
        amount: int,
        currency: str = "usd",
        metadata: Optional[dict] = None,
    ) -> PaymentIntentResult:
        """
        Create a payment intent for client-side confirmation.

        Args:
            amount: Amount in minor currency units, a positive integer
            currency: Currency code
            metadata: Additional data to attach

        Returns:
            PaymentIntentResult: Contains client_secret for the frontend
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the payment service.

        Returns:
            bool: True if service is reachable and operational
        """
        pass
