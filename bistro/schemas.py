"""
Pydantic Schemas for Request/Response Validation

MongoDB accepts arbitrary documents, so request bodies only type the
fields the handlers rely on and keep every other field as sent
(extra="allow"). Responses mirror the driver's raw results.

Author: Khalil Bannouri
Version: 1.0.0
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional, List
from datetime import datetime


class Document(BaseModel):
    """Base for request bodies stored as-is in a collection."""
    model_config = ConfigDict(extra="allow")


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class TokenRequest(Document):
    """Identity claims to sign into a session token."""
    email: str = Field(..., min_length=3, examples=["guest@bistro.com"])


class MenuItemCreate(Document):
    """New dish for the catalog."""
    name: str = Field(..., min_length=1, max_length=100, examples=["Caesar Salad"])
    category: str = Field(..., min_length=1, max_length=50, examples=["salad"])
    price: float = Field(..., ge=0, examples=[12.5])
    recipe: Optional[str] = Field(None, examples=["Romaine, parmesan, croutons"])
    image: Optional[str] = Field(None, examples=["https://i.ibb.co/salad.jpg"])


class CartItemCreate(Document):
    """A dish added to a customer's cart."""
    email: str = Field(..., min_length=3, examples=["guest@bistro.com"])
    menuId: Optional[str] = Field(None, examples=["642c155b2c4774f05c36eeaa"])
    name: Optional[str] = Field(None, examples=["Caesar Salad"])
    image: Optional[str] = None
    price: Optional[float] = Field(None, ge=0, examples=[12.5])


class UserCreate(Document):
    """Profile saved on first sign-in."""
    email: str = Field(..., min_length=3, examples=["guest@bistro.com"])
    name: Optional[str] = Field(None, examples=["Guest"])


class PaymentIntentRequest(BaseModel):
    """Checkout total in major currency units. Non-numeric values are tolerated."""
    price: Any = Field(None, examples=[42.5])


class PaymentCreate(Document):
    """A payment confirmed by the processor on the client side."""
    email: str = Field(..., min_length=3, examples=["guest@bistro.com"])
    price: float = Field(..., ge=0, examples=[42.5])
    transactionId: Optional[str] = Field(None, examples=["pi_3NcYfS2eZvKYlo2C1"])
    date: Optional[datetime] = None
    cartIds: List[str] = Field(default_factory=list)
    menuItemIds: List[str] = Field(default_factory=list)
    status: str = Field(default="pending", examples=["pending"])


# =============================================================================
# RESPONSE SCHEMAS
# =============================================================================

class TokenResponse(BaseModel):
    token: str


class ClientSecretResponse(BaseModel):
    clientSecret: str


class AdminCheckResponse(BaseModel):
    admin: bool


class InsertResponse(BaseModel):
    acknowledged: bool
    insertedId: Optional[str]


class DeleteResponse(BaseModel):
    acknowledged: bool
    deletedCount: int


class UpdateResponse(BaseModel):
    acknowledged: bool
    matchedCount: int
    modifiedCount: int


class PaymentRecordResponse(BaseModel):
    """Result of storing a payment and clearing its cart lines."""
    paymentResult: InsertResponse
    deleteResult: DeleteResponse


class AdminStatsResponse(BaseModel):
    users: int
    menuItems: int
    orders: int
    revenue: float


class OrderStat(BaseModel):
    category: Optional[str]
    quantity: int
    revenue: float


class MessageResponse(BaseModel):
    """Authorization failures and informational replies."""
    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    payment_service: str
    timestamp: datetime
