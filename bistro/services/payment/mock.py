"""
Mock Payment Service Implementation

Simulates Stripe payment intents without making real API calls.
Used in development mode (ENV_MODE=development) to:
    - Exercise the complete checkout flow locally
    - Run the checkout simulation without incurring costs
    - Develop without internet connectivity

Behavior:
    - Simulates response times (configurable, 50-200ms by default)
    - Optionally fails a share of requests (failure_rate)
    - Generates Stripe-like ids and client secrets

Author: Khalil_Bannouri
Version: 1.0.0
"""

import asyncio
import random
import uuid
import logging
from typing import Optional

from bistro.services.payment.base import (
    BasePaymentService,
    PaymentIntentResult,
)

logger = logging.getLogger(__name__)


class MockPaymentService(BasePaymentService):
    """
    Mock implementation of the payment service.

    Attributes:
        failure_rate: Probability of a simulated processor failure (0.0-1.0)
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds

    Example:
        >>> service = MockPaymentService(min_latency=0, max_latency=0)
        >>> result = await service.create_payment_intent(2999)
        >>> result.client_secret
        'pi_mock_..._secret_mock'
    """

    # Simulated failure reasons (mimics real Stripe error codes)
    FAILURE_REASONS = [
        ("rate_limit", "Too many requests hit the API too quickly."),
        ("api_connection_error", "Payment service temporarily unavailable."),
        ("processing_error", "An error occurred while processing the request."),
    ]

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.05,
        max_latency: float = 0.2,
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency

        logger.info(
            f"MockPaymentService initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"latency={min_latency}-{max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    def _generate_payment_intent_id(self) -> str:
        """Generate a Stripe-like payment intent ID."""
        return f"pi_mock_{uuid.uuid4().hex[:24]}"

    async def _simulate_latency(self) -> float:
        """
        Simulate network latency.

        Returns:
            float: Actual latency in milliseconds
        """
        latency = random.uniform(self.min_latency, self.max_latency)
        if latency > 0:
            await asyncio.sleep(latency)
        return latency * 1000

    def _should_fail(self) -> bool:
        """Determine if this request should simulate a failure."""
        return random.random() < self.failure_rate

    async def create_payment_intent(
        self,
        amount: int,
        currency: str = "usd",
        metadata: Optional[dict] = None,
    ) -> PaymentIntentResult:
        """
        Simulate creating a payment intent.

        The fake client secret follows Stripe's format but won't work
        with Stripe.js.
        """
        if amount <= 0:
            return PaymentIntentResult(
                success=False,
                error_message="Amount must be a positive integer",
                error_code="invalid_amount",
            )

        latency_ms = await self._simulate_latency()

        if self._should_fail():
            error_code, error_message = random.choice(self.FAILURE_REASONS)
            logger.debug(f"Mock: Payment intent failed - {error_code}")
            return PaymentIntentResult(
                success=False,
                amount=amount,
                currency=currency,
                error_message=error_message,
                error_code=error_code,
                response_time_ms=latency_ms,
            )

        payment_intent_id = self._generate_payment_intent_id()

        logger.debug(f"Mock: Created payment intent {payment_intent_id} for {amount} {currency}")

        return PaymentIntentResult(
            success=True,
            payment_intent_id=payment_intent_id,
            client_secret=f"{payment_intent_id}_secret_mock",
            amount=amount,
            currency=currency,
            response_time_ms=latency_ms,
        )

    async def health_check(self) -> bool:
        """Mock health check always returns True."""
        logger.debug("Mock: Health check passed")
        return True
