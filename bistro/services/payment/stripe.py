"""
Stripe Payment Service Implementation

Production implementation using the official Stripe Python SDK.
Used when ENV_MODE=production or ENV_MODE=staging.

Requirements:
    - STRIPE_SECRET_KEY must be set in environment

Security Notes:
    - Card details never reach this server; the browser confirms the
      intent with Stripe.js using the client secret
    - Never log client secrets

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
from datetime import datetime
from typing import Optional

import stripe

from bistro.core.config import get_settings
from bistro.services.payment.base import (
    BasePaymentService,
    PaymentIntentResult,
)

logger = logging.getLogger(__name__)


class StripePaymentService(BasePaymentService):
    """
    Production Stripe payment service implementation.

    Configuration:
        Requires STRIPE_SECRET_KEY environment variable.

    Example:
        >>> service = StripePaymentService()
        >>> result = await service.create_payment_intent(amount=2999)
        >>> result.client_secret
        'pi_..._secret_...'
    """

    def __init__(self):
        """
        Initialize Stripe with API key from settings.

        Raises:
            ValueError: If STRIPE_SECRET_KEY is not configured
        """
        settings = get_settings()

        if not settings.stripe_secret_key:
            raise ValueError(
                "STRIPE_SECRET_KEY is required outside development mode. "
                "Set it in your .env file or environment variables."
            )

        stripe.api_key = settings.stripe_secret_key

        self._currency = settings.stripe_currency

        logger.info("StripePaymentService initialized")

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "stripe"

    async def create_payment_intent(
        self,
        amount: int,
        currency: str = "usd",
        metadata: Optional[dict] = None,
    ) -> PaymentIntentResult:
        """
        Create a PaymentIntent for client-side confirmation.

        Returns a client_secret that the frontend uses with Stripe.js
        to complete the card payment.
        """
        start_time = datetime.now()

        if amount <= 0:
            return PaymentIntentResult(
                success=False,
                error_message="Amount must be a positive integer",
                error_code="invalid_amount",
            )

        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=currency or self._currency,
                payment_method_types=["card"],
                metadata=metadata or {},
            )

            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000

            logger.info(
                f"Stripe: PaymentIntent created - {intent.id} - "
                f"status={intent.status}"
            )

            return PaymentIntentResult(
                success=True,
                payment_intent_id=intent.id,
                client_secret=intent.client_secret,
                amount=intent.amount,
                currency=intent.currency,
                response_time_ms=elapsed_ms,
            )

        except stripe.InvalidRequestError as e:
            # Invalid parameters (unsupported currency, amount below minimum)
            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
            logger.error(f"Stripe: Invalid request - {e}")

            return PaymentIntentResult(
                success=False,
                error_message=e.user_message or str(e),
                error_code=e.code or "invalid_request",
                response_time_ms=elapsed_ms,
            )

        except stripe.AuthenticationError as e:
            # API key issues
            logger.critical(f"Stripe: Authentication failed - {e}")

            return PaymentIntentResult(
                success=False,
                error_message="Payment service configuration error",
                error_code="authentication_error",
            )

        except stripe.APIConnectionError as e:
            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
            logger.error(f"Stripe: Connection error - {e}")

            return PaymentIntentResult(
                success=False,
                error_message="Payment service temporarily unavailable",
                error_code="connection_error",
                response_time_ms=elapsed_ms,
            )

        except stripe.StripeError as e:
            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
            logger.error(f"Stripe: Failed to create PaymentIntent - {e}")

            return PaymentIntentResult(
                success=False,
                error_message="Payment processing error",
                error_code="stripe_error",
                response_time_ms=elapsed_ms,
            )

    async def health_check(self) -> bool:
        """
        Verify Stripe API connectivity.

        Makes a lightweight API call to verify credentials and connectivity.
        """
        try:
            stripe.Account.retrieve()
            logger.debug("Stripe: Health check passed")
            return True

        except stripe.StripeError as e:
            logger.error(f"Stripe: Health check failed - {e}")
            return False
