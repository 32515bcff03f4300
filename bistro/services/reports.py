"""
Reporting Aggregations

Read-only pipelines behind the admin dashboard:

    - summary_stats: estimated collection sizes plus total revenue
    - order_stats:   units sold and revenue per menu category

Counts come from collection metadata (estimated_document_count), so they
are cheap but not a point-in-time snapshot.
"""

import logging
from typing import Any

from pymongo.database import Database

from bistro.database import get_collection
from bistro.models import Collection

logger = logging.getLogger(__name__)


REVENUE_PIPELINE: list[dict[str, Any]] = [
    {"$group": {"_id": None, "totalRevenue": {"$sum": "$price"}}},
]

# Inner join: purchased ids with no matching menu document are dropped
# by the second $unwind. Each id is looked up both as stored (ObjectId) and
# as its hex string, so seed dishes keyed by plain strings still join.
ORDER_STATS_PIPELINE: list[dict[str, Any]] = [
    {"$unwind": "$menuItemIds"},
    {"$addFields": {"menuItemKey": {"$toString": "$menuItemIds"}}},
    {
        "$lookup": {
            "from": Collection.MENU.value,
            "localField": "menuItemIds",
            "foreignField": "_id",
            "as": "menuById",
        }
    },
    {
        "$lookup": {
            "from": Collection.MENU.value,
            "localField": "menuItemKey",
            "foreignField": "_id",
            "as": "menuByKey",
        }
    },
    {"$addFields": {"menuItems": {"$setUnion": ["$menuById", "$menuByKey"]}}},
    {"$unwind": "$menuItems"},
    {
        "$group": {
            "_id": "$menuItems.category",
            "quantity": {"$sum": 1},
            "revenue": {"$sum": "$menuItems.price"},
        }
    },
    {
        "$project": {
            "_id": 0,
            "category": "$_id",
            "quantity": "$quantity",
            "revenue": "$revenue",
        }
    },
    {"$sort": {"category": 1}},
]


def total_revenue(db: Database) -> float:
    """Sum of `price` over all payments, 0 when there are none."""
    result = list(get_collection(db, Collection.PAYMENTS).aggregate(REVENUE_PIPELINE))
    return result[0]["totalRevenue"] if result else 0


def summary_stats(db: Database) -> dict[str, Any]:
    """Approximate counts of users, menu items and orders, plus revenue."""
    stats = {
        "users": get_collection(db, Collection.USERS).estimated_document_count(),
        "menuItems": get_collection(db, Collection.MENU).estimated_document_count(),
        "orders": get_collection(db, Collection.PAYMENTS).estimated_document_count(),
        "revenue": total_revenue(db),
    }
    logger.debug(f"Summary stats: {stats}")
    return stats


def order_stats(db: Database) -> list[dict[str, Any]]:
    """Per-category `{category, quantity, revenue}` over every purchased item."""
    return list(get_collection(db, Collection.PAYMENTS).aggregate(ORDER_STATS_PIPELINE))
