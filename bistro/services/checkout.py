"""
Checkout Service

Turns a confirmed card payment into a stored order and empties the
matching cart lines.

Recording is a compensating-action sequence rather than a transaction:

    1. insert the payment with cartCleared=False
    2. delete the cart items listed in cartIds
    3. flip cartCleared to True

If the process dies between 1 and 3, the payment stays flagged and
reconcile_cart_cleanup() finishes steps 2-3 on the next startup. Both
steps are idempotent, so running them twice is harmless.
"""

import logging
import math
from typing import Any

from pymongo.database import Database
from pymongo.results import DeleteResult

from bistro.database import (
    delete_result,
    get_collection,
    id_candidates,
    insert_result,
    parse_object_id,
)
from bistro.models import Collection

logger = logging.getLogger(__name__)


def to_minor_units(price: Any, minimum: int = 1) -> int:
    """
    Convert a price in major units (e.g. 29.99) to a chargeable integer amount.

    Anything that is not a finite number, or rounds below `minimum`,
    is charged as `minimum`.
    """
    if isinstance(price, bool):
        return minimum
    try:
        value = float(price)
    except (TypeError, ValueError):
        return minimum
    if not math.isfinite(value):
        return minimum
    return max(int(round(value * 100)), minimum)


def clear_paid_cart_items(db: Database, payment_id: Any, cart_ids: list[Any]) -> DeleteResult:
    """Delete the cart lines a payment covers, then mark the payment cleared."""
    result = get_collection(db, Collection.CARTS).delete_many(
        {"_id": {"$in": id_candidates(cart_ids)}}
    )
    get_collection(db, Collection.PAYMENTS).update_one(
        {"_id": payment_id}, {"$set": {"cartCleared": True}}
    )
    return result


def record_payment(db: Database, payment: dict[str, Any]) -> dict[str, Any]:
    """
    Store a payment and remove the paid-for items from the cart.

    Returns:
        {"paymentResult": <insert result>, "deleteResult": <delete result>}
    """
    document = dict(payment)
    document["cartIds"] = list(document.get("cartIds") or [])
    # Stored as ObjectIds where possible so the order stats $lookup joins on menu._id
    document["menuItemIds"] = [
        parse_object_id(item_id) or item_id
        for item_id in (document.get("menuItemIds") or [])
    ]
    document["cartCleared"] = False

    inserted = get_collection(db, Collection.PAYMENTS).insert_one(document)
    logger.info(
        f"Payment {inserted.inserted_id} recorded for {document.get('email')} "
        f"({len(document['cartIds'])} cart items)"
    )

    deleted = clear_paid_cart_items(db, inserted.inserted_id, document["cartIds"])

    return {
        "paymentResult": insert_result(inserted),
        "deleteResult": delete_result(deleted),
    }


def reconcile_cart_cleanup(db: Database) -> int:
    """
    Finish cart cleanup for payments recorded without it.

    Returns:
        Number of payments reconciled
    """
    payments = get_collection(db, Collection.PAYMENTS)
    reconciled = 0

    pending = list(payments.find({"cartCleared": False}, {"cartIds": 1}))
    for payment in pending:
        result = clear_paid_cart_items(db, payment["_id"], payment.get("cartIds") or [])
        reconciled += 1
        logger.warning(
            f"Reconciled payment {payment['_id']}: "
            f"removed {result.deleted_count} leftover cart items"
        )

    if reconciled:
        logger.info(f"Cart cleanup reconciled for {reconciled} payments")
    return reconciled
