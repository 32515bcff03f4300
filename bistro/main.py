"""
FastAPI Application Entry Point

Bistro Ordering API - REST backend for the restaurant ordering app.
Uses the mock payment service in development and Stripe in production.

Endpoints (under API_PREFIX, default /api/v1):
    - POST /jwt: Issue a session token
    - Menu, reviews, cart, users, payments CRUD
    - GET /admin-stats, /order-stats: Dashboard aggregations
Service endpoints:
    - GET /: Liveness message
    - GET /health: System health check

Author: Khalil_Bannouri
Version: 1.0.0
"""

import logging
from datetime import datetime
from typing import Any
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pymongo.database import Database
from pymongo.errors import PyMongoError

from bistro.core.auth import (
    Identity,
    Principal,
    require_permission,
    require_self,
)
from bistro.core.config import get_settings, setup_logging
from bistro.core.exceptions import (
    BistroError,
    ForbiddenError,
    PaymentServiceError,
    UnauthorizedError,
)
from bistro.core.security import issue_token
from bistro.database import (
    close_db,
    delete_result,
    get_collection,
    get_database,
    get_db,
    id_filter,
    init_db,
    insert_result,
    serialize_many,
    update_result,
)
from bistro.models import Collection, Permission, Role
from bistro.schemas import (
    AdminCheckResponse,
    AdminStatsResponse,
    CartItemCreate,
    ClientSecretResponse,
    DeleteResponse,
    ErrorResponse,
    HealthResponse,
    InsertResponse,
    MenuItemCreate,
    MessageResponse,
    OrderStat,
    PaymentCreate,
    PaymentIntentRequest,
    PaymentRecordResponse,
    TokenRequest,
    TokenResponse,
    UpdateResponse,
    UserCreate,
)
from bistro.services.checkout import reconcile_cart_cleanup, record_payment, to_minor_units
from bistro.services.payment import BasePaymentService, get_payment_service
from bistro.services.reports import order_stats, summary_stats

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

AUTH_RESPONSES: dict[int, dict[str, Any]] = {
    401: {"model": MessageResponse},
    403: {"model": MessageResponse},
}


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

def _startup_database() -> None:
    init_db()
    reconcile_cart_cleanup(get_database())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   API prefix: {settings.api_prefix or '/'}")
    logger.info("=" * 60)

    # The API stays up without the database; store-backed routes answer 503
    try:
        await run_in_threadpool(_startup_database)
        logger.info("✅ Database initialized")
    except PyMongoError as e:
        logger.error(f"❌ Database unavailable at startup: {e}")

    payment_service = get_payment_service()
    logger.info(f"✅ Payment Service: {payment_service.provider_name}")

    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

    logger.info("✅ Application ready!")

    yield

    logger.info("Shutting down...")
    close_db()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Restaurant ordering backend: menu, reviews, cart, user roles, "
        "card payments and sales statistics."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

api = APIRouter(prefix=settings.api_prefix)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", response_class=PlainTextResponse, tags=["Root"])
async def root() -> str:
    """Liveness message."""
    return "Bistro serving is running well"


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: Database = Depends(get_db),
    payment_service: BasePaymentService = Depends(get_payment_service),
) -> HealthResponse:
    """Verify the database and the payment provider are reachable."""

    db_status = "healthy"
    try:
        await run_in_threadpool(db.command, "ping")
    except PyMongoError as e:
        db_status = f"unhealthy: {e}"
        logger.error(f"Database health check failed: {e}")

    payment_status = "healthy" if await payment_service.health_check() else "unhealthy"

    overall = "operational" if db_status == payment_status == "healthy" else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        payment_service=payment_status,
        timestamp=datetime.now(),
    )


# =============================================================================
# AUTH ENDPOINTS
# =============================================================================

@api.post("/jwt", response_model=TokenResponse, tags=["Auth"])
def create_token(claims: TokenRequest) -> dict[str, str]:
    """Sign a one-hour session token for the given identity."""
    token = issue_token(claims.model_dump(exclude_none=True))
    logger.info(f"Issued token for {claims.email}")
    return {"token": token}


# =============================================================================
# MENU & REVIEW ENDPOINTS
# =============================================================================

@api.get("/get-menu", tags=["Menu"])
def list_menu(db: Database = Depends(get_db)) -> list[dict]:
    """All dishes in the catalog."""
    return serialize_many(get_collection(db, Collection.MENU).find())


@api.post(
    "/create/menu",
    response_model=InsertResponse,
    responses=AUTH_RESPONSES,
    tags=["Menu"],
)
def create_menu_item(
    item: MenuItemCreate,
    principal: Principal = Depends(require_permission(Permission.MANAGE_MENU)),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    """Add a dish to the catalog (admin)."""
    result = get_collection(db, Collection.MENU).insert_one(item.model_dump(exclude_none=True))
    logger.info(f"Menu item {result.inserted_id} created by {principal.email}")
    return insert_result(result)


@api.delete(
    "/delete/{item_id}",
    response_model=DeleteResponse,
    responses=AUTH_RESPONSES,
    tags=["Menu"],
)
def delete_menu_item(
    item_id: str,
    principal: Principal = Depends(require_permission(Permission.MANAGE_MENU)),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    """Remove a dish from the catalog (admin)."""
    result = get_collection(db, Collection.MENU).delete_one(id_filter(item_id))
    logger.info(f"Menu item {item_id} deleted by {principal.email}: {result.deleted_count}")
    return delete_result(result)


@api.get("/get-review", tags=["Reviews"])
def list_reviews(db: Database = Depends(get_db)) -> list[dict]:
    """All customer reviews."""
    return serialize_many(get_collection(db, Collection.REVIEWS).find())


# =============================================================================
# CART ENDPOINTS
# =============================================================================

@api.post("/create/food-item", response_model=InsertResponse, tags=["Cart"])
def add_cart_item(
    item: CartItemCreate,
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    """Put a dish in a customer's cart."""
    result = get_collection(db, Collection.CARTS).insert_one(item.model_dump(exclude_none=True))
    return insert_result(result)


@api.get("/get-cart", tags=["Cart"])
def list_cart(
    email: str = Query(..., min_length=1),
    db: Database = Depends(get_db),
) -> list[dict]:
    """Cart lines owned by an email."""
    return serialize_many(get_collection(db, Collection.CARTS).find({"email": email}))


@api.delete("/delete-item/{item_id}", response_model=DeleteResponse, tags=["Cart"])
def delete_cart_item(
    item_id: str,
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    """Remove one cart line by id."""
    result = get_collection(db, Collection.CARTS).delete_one(id_filter(item_id))
    return delete_result(result)


# =============================================================================
# USER ENDPOINTS
# =============================================================================

@api.post("/create/user", tags=["Users"])
def create_user(
    user: UserCreate,
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    """
    Save a user profile once per email.

    Roles are never accepted from the client; promotion goes through
    PATCH /admin/{id}.
    """
    users = get_collection(db, Collection.USERS)

    if users.find_one({"email": user.email}, {"_id": 1}):
        return {"message": "user already exist", "insertedId": None}

    document = user.model_dump(exclude_none=True)
    document.pop("role", None)
    result = users.insert_one(document)
    logger.info(f"User {user.email} created")
    return insert_result(result)


@api.get("/get-users", responses=AUTH_RESPONSES, tags=["Users"])
def list_users(
    principal: Principal = Depends(require_permission(Permission.MANAGE_USERS)),
    db: Database = Depends(get_db),
) -> list[dict]:
    """Every registered user (admin)."""
    return serialize_many(get_collection(db, Collection.USERS).find())


@api.get(
    "/users/admin/{email}",
    response_model=AdminCheckResponse,
    responses=AUTH_RESPONSES,
    tags=["Users"],
)
def check_admin(
    email: str,
    identity: Identity = Depends(require_self),
    db: Database = Depends(get_db),
) -> dict[str, bool]:
    """Whether the caller holds the admin role. Only answers about yourself."""
    user = get_collection(db, Collection.USERS).find_one({"email": email}, {"role": 1})
    return {"admin": bool(user) and user.get("role") == Role.ADMIN.value}


@api.delete(
    "/delete-user/{user_id}",
    response_model=DeleteResponse,
    responses=AUTH_RESPONSES,
    tags=["Users"],
)
def delete_user(
    user_id: str,
    principal: Principal = Depends(require_permission(Permission.MANAGE_USERS)),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    """Delete a user (admin)."""
    result = get_collection(db, Collection.USERS).delete_one(id_filter(user_id))
    logger.info(f"User {user_id} deleted by {principal.email}: {result.deleted_count}")
    return delete_result(result)


@api.patch(
    "/admin/{user_id}",
    response_model=UpdateResponse,
    responses=AUTH_RESPONSES,
    tags=["Users"],
)
def promote_user(
    user_id: str,
    principal: Principal = Depends(require_permission(Permission.MANAGE_USERS)),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    """Grant the admin role (admin). There is no demotion."""
    result = get_collection(db, Collection.USERS).update_one(
        id_filter(user_id), {"$set": {"role": Role.ADMIN.value}}
    )
    logger.info(f"User {user_id} promoted by {principal.email}: {result.modified_count}")
    return update_result(result)


# =============================================================================
# PAYMENT ENDPOINTS
# =============================================================================

@api.post(
    "/create-payment-intent",
    response_model=ClientSecretResponse,
    responses={502: {"model": ErrorResponse}},
    tags=["Payments"],
)
async def create_payment_intent(
    body: PaymentIntentRequest,
    payment_service: BasePaymentService = Depends(get_payment_service),
) -> dict[str, str]:
    """Open a processor payment intent and return its client secret."""
    amount = to_minor_units(body.price, settings.payment_min_amount)

    result = await payment_service.create_payment_intent(
        amount=amount,
        currency=settings.stripe_currency,
    )
    if not result.success:
        logger.warning(f"Payment intent failed: {result.to_dict()}")
        raise PaymentServiceError(result.error_message or "", result.error_code or "")

    logger.info(f"Payment intent {result.payment_intent_id} created for {amount}")
    return {"clientSecret": result.client_secret}


@api.get("/get-payments/{email}", responses=AUTH_RESPONSES, tags=["Payments"])
def list_payments(
    email: str,
    identity: Identity = Depends(require_self),
    db: Database = Depends(get_db),
) -> list[dict]:
    """Payment history of the caller."""
    return serialize_many(get_collection(db, Collection.PAYMENTS).find({"email": email}))


@api.post("/payments", response_model=PaymentRecordResponse, tags=["Payments"])
def create_payment(
    payment: PaymentCreate,
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    """Record a confirmed payment and clear the paid items from the cart."""
    return record_payment(db, payment.model_dump(exclude_none=True))


# =============================================================================
# DASHBOARD ENDPOINTS
# =============================================================================

@api.get(
    "/admin-stats",
    response_model=AdminStatsResponse,
    responses=AUTH_RESPONSES,
    tags=["Dashboard"],
)
def admin_stats(
    principal: Principal = Depends(require_permission(Permission.VIEW_REPORTS)),
    db: Database = Depends(get_db),
) -> dict[str, Any]:
    """Users, dishes, orders and total revenue."""
    return summary_stats(db)


@api.get(
    "/order-stats",
    response_model=list[OrderStat],
    responses=AUTH_RESPONSES,
    tags=["Dashboard"],
)
def category_stats(
    principal: Principal = Depends(require_permission(Permission.VIEW_REPORTS)),
    db: Database = Depends(get_db),
) -> list[dict[str, Any]]:
    """Units sold and revenue per menu category."""
    return order_stats(db)


app.include_router(api)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(BistroError)
async def bistro_exception_handler(request: Request, exc: BistroError) -> JSONResponse:
    """Authorization failures carry a message; other known errors the error shape."""
    if isinstance(exc, (UnauthorizedError, ForbiddenError)):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message})

    logger.error(f"{exc.error} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.error,
            "detail": exc.message if settings.debug else "The upstream service rejected the request",
        },
    )


@app.exception_handler(PyMongoError)
async def database_exception_handler(request: Request, exc: PyMongoError) -> JSONResponse:
    """Document store failures become a uniform 503."""
    logger.exception(f"Database error on {request.method} {request.url.path}: {exc}")

    return JSONResponse(
        status_code=503,
        content={
            "success": False,
            "error": "Database Unavailable",
            "detail": str(exc) if settings.debug else "The database is temporarily unavailable",
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("bistro.main:app", host=settings.api_host, port=settings.api_port)
