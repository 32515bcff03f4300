"""
Store Verification Script

Checks data integrity of the bistro collections after a simulation:
    - paid cart items still sitting in the cart
    - payments whose cart cleanup never finished
    - purchased menu ids that no longer match a dish
    - duplicate user emails (uniqueness is by lookup, not an index)

Run from project root: python scripts/verify.py [--fix]

Author: Khalil_Bannouri
Version: 1.0.0
"""

import argparse
import sys
from collections import Counter
from datetime import datetime

from pymongo.errors import PyMongoError

from bistro.core.config import get_settings
from bistro.database import get_collection, get_database, id_candidates
from bistro.models import Collection
from bistro.services.checkout import reconcile_cart_cleanup
from bistro.services.reports import summary_stats


def verify_store(fix: bool = False) -> bool:
    """Verify store integrity. Returns True when no problems were found."""
    settings = get_settings()

    print("=" * 60)
    print("🔍 STORE VERIFICATION REPORT")
    print("=" * 60)
    print(f"⏰ Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"🗄️  Database: {settings.database_name}")
    print("=" * 60)

    db = get_database()
    payments = list(get_collection(db, Collection.PAYMENTS).find())
    problems = 0

    stats = summary_stats(db)
    print(f"\n📊 STATISTICS:")
    print(f"   Users: {stats['users']}")
    print(f"   Menu Items: {stats['menuItems']}")
    print(f"   Orders: {stats['orders']}")
    print(f"   💰 Revenue: ${stats['revenue']:.2f}")

    # Paid cart items left behind
    paid_cart_ids = [cart_id for p in payments for cart_id in p.get("cartIds", [])]
    leftovers = get_collection(db, Collection.CARTS).count_documents(
        {"_id": {"$in": id_candidates(paid_cart_ids)}}
    )
    if leftovers:
        problems += 1
        print(f"\n⚠️ {leftovers} paid cart items still in carts")
    else:
        print(f"\n✅ No paid items left in carts")

    # Interrupted cleanups
    pending = [p for p in payments if p.get("cartCleared") is False]
    if pending:
        problems += 1
        print(f"⚠️ {len(pending)} payments with unfinished cart cleanup")
    else:
        print(f"✅ Every payment finished its cart cleanup")

    # Dangling menu references
    # Dishes may be keyed by ObjectId or by the same hex as a plain string
    menu_keys = set()
    for doc in get_collection(db, Collection.MENU).find({}, {"_id": 1}):
        menu_keys.update((doc["_id"], str(doc["_id"])))
    dangling = sum(
        1
        for p in payments
        for item_id in p.get("menuItemIds", [])
        if item_id not in menu_keys and str(item_id) not in menu_keys
    )
    if dangling:
        print(f"ℹ️  {dangling} purchased items reference deleted dishes (excluded from order stats)")

    # Duplicate users
    emails = Counter(doc.get("email") for doc in get_collection(db, Collection.USERS).find({}, {"email": 1}))
    duplicates = {email: n for email, n in emails.items() if n > 1}
    if duplicates:
        problems += 1
        print(f"⚠️ {len(duplicates)} duplicated user emails: {list(duplicates)[:5]}")
    else:
        print(f"✅ No duplicate user emails")

    if fix and (leftovers or pending):
        reconciled = reconcile_cart_cleanup(db)
        print(f"\n🔧 Reconciled {reconciled} payments")

    print("\n" + "=" * 60)
    print("✅ VERIFICATION COMPLETE" if not problems else f"⚠️ {problems} PROBLEMS FOUND")
    print("=" * 60)

    return problems == 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Store Verification Script")
    parser.add_argument("--fix", action="store_true", help="Finish interrupted cart cleanups")
    args = parser.parse_args()

    try:
        ok = verify_store(fix=args.fix)
    except PyMongoError as e:
        print(f"\n❌ Could not reach the database: {e}")
        sys.exit(2)

    sys.exit(0 if ok else 1)
