"""
Checkout Simulation Script

Runs many customers through the full checkout flow concurrently
(sign-up, token, cart, payment intent, payment) against a running server.
Run from project root: python scripts/simulate.py

Author: Khalil_Bannouri
Version: 1.0.0
"""

import asyncio
import sys
import random
import time
import argparse
import uuid
from datetime import datetime, timezone
from typing import Any

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:5001/api/v1"
TOTAL_CUSTOMERS = 50

FIRST_NAMES = ["John", "Jane", "Mike", "Sarah", "Tom", "Emma", "David", "Lisa", "Chris", "Amy"]


def generate_random_customer() -> dict[str, str]:
    """Generate a throwaway customer profile."""
    first = random.choice(FIRST_NAMES)
    return {
        "name": first,
        "email": f"{first.lower()}.{uuid.uuid4().hex[:8]}@sim.bistro",
    }


def pick_dishes(menu: list[dict]) -> list[dict]:
    """Choose 1-4 dishes from the live menu."""
    return random.sample(menu, k=min(len(menu), random.randint(1, 4)))


# =============================================================================
# SINGLE CUSTOMER FLOW
# =============================================================================

async def run_checkout(
    client: httpx.AsyncClient,
    customer_num: int,
    menu: list[dict],
) -> dict[str, Any]:
    """Walk one customer from sign-up to a cleared cart."""
    customer = generate_random_customer()
    start_time = time.time()

    try:
        response = await client.post(f"{API_BASE_URL}/create/user", json=customer)
        response.raise_for_status()

        response = await client.post(f"{API_BASE_URL}/jwt", json={"email": customer["email"]})
        response.raise_for_status()
        headers = {"Authorization": f"Bearer {response.json()['token']}"}

        dishes = pick_dishes(menu)
        cart_ids = []
        for dish in dishes:
            response = await client.post(
                f"{API_BASE_URL}/create/food-item",
                json={
                    "email": customer["email"],
                    "menuId": dish["_id"],
                    "name": dish.get("name"),
                    "image": dish.get("image"),
                    "price": dish.get("price", 0),
                },
            )
            response.raise_for_status()
            cart_ids.append(response.json()["insertedId"])

        total = round(sum(dish.get("price", 0) for dish in dishes), 2)

        response = await client.post(
            f"{API_BASE_URL}/create-payment-intent", json={"price": total}
        )
        response.raise_for_status()
        client_secret = response.json()["clientSecret"]

        response = await client.post(
            f"{API_BASE_URL}/payments",
            json={
                "email": customer["email"],
                "price": total,
                "transactionId": client_secret.split("_secret")[0],
                "date": datetime.now(timezone.utc).isoformat(),
                "cartIds": cart_ids,
                "menuItemIds": [dish["_id"] for dish in dishes],
                "status": "pending",
            },
        )
        response.raise_for_status()

        response = await client.get(
            f"{API_BASE_URL}/get-cart", params={"email": customer["email"]}
        )
        response.raise_for_status()
        leftover = len(response.json())

        response = await client.get(
            f"{API_BASE_URL}/get-payments/{customer['email']}", headers=headers
        )
        response.raise_for_status()
        recorded = len(response.json())

        error = None
        if leftover:
            error = f"{leftover} items left in cart"
        elif recorded != 1:
            error = f"{recorded} payments on record"

        elapsed = round(time.time() - start_time, 3)
        return {
            "customer_num": customer_num,
            "success": error is None,
            "error": error,
            "total": total,
            "time": elapsed,
        }

    except (httpx.HTTPError, KeyError) as e:
        elapsed = round(time.time() - start_time, 3)
        return {
            "customer_num": customer_num,
            "success": False,
            "error": str(e)[:100],
            "time": elapsed,
        }


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(num_customers: int = TOTAL_CUSTOMERS) -> dict[str, Any]:
    """
    Run concurrent checkouts.

    Args:
        num_customers: Number of customers checking out at once
    """
    print("=" * 70)
    print("🔥 CHECKOUT SIMULATION - CONCURRENT CUSTOMERS")
    print("=" * 70)
    print(f"📋 Customers: {num_customers}")
    print(f"🎯 Target: {API_BASE_URL}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    start_time = time.time()

    async with httpx.AsyncClient(timeout=30.0) as client:
        response = await client.get(f"{API_BASE_URL}/get-menu")
        response.raise_for_status()
        menu = [dish for dish in response.json() if "_id" in dish]
        if not menu:
            print("\n❌ The menu is empty. Seed the menu collection first.")
            return {"total": num_customers, "successful": 0, "failed": num_customers}

        tasks = [run_checkout(client, i + 1, menu) for i in range(num_customers)]
        results = await asyncio.gather(*tasks)

    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)

    print(f"\n✅ Successful Checkouts: {len(successful)}/{num_customers}")
    print(f"❌ Failed Checkouts: {len(failed)}/{num_customers}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        total_revenue = sum(r.get("total", 0) for r in successful)

        print(f"\n📈 Performance Metrics:")
        print(f"   Average Checkout: {avg_time}s")
        print(f"   Fastest: {min(r['time'] for r in successful)}s")
        print(f"   Slowest: {max(r['time'] for r in successful)}s")
        print(f"   💰 Total Revenue: ${total_revenue:.2f}")

    if failed:
        print(f"\n⚠️  Failed Checkout Details (showing first 5):")
        for f in failed[:5]:
            print(f"   Customer #{f['customer_num']}: {f.get('error', 'Unknown error')}")

    print("\n" + "=" * 70)
    print("🔍 NEXT STEP: python scripts/verify.py")
    print("=" * 70)

    return {
        "total": num_customers,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
        "results": results,
    }


async def check_health() -> bool:
    """Pre-flight check before firing the simulation."""
    root = API_BASE_URL.rsplit("/api/", 1)[0]
    async with httpx.AsyncClient(timeout=10.0) as client:
        try:
            response = await client.get(f"{root}/health")
        except httpx.HTTPError as e:
            print(f"   ❌ Server unreachable: {e}")
            return False

    data = response.json()
    print(f"   Status: {data.get('status')}")
    print(f"   Database: {data.get('database')}")
    print(f"   Payments: {data.get('payment_service')}")
    return data.get("status") == "operational"


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Checkout Simulation Script")
    parser.add_argument("--customers", type=int, default=TOTAL_CUSTOMERS, help="Number of customers")
    parser.add_argument("--base-url", default=API_BASE_URL, help="API base URL including prefix")
    parser.add_argument("--skip-health", action="store_true", help="Skip the pre-flight health check")
    args = parser.parse_args()

    API_BASE_URL = args.base_url.rstrip("/")

    if not args.skip_health:
        print("\n🩺 Health Check...")
        if not asyncio.run(check_health()):
            print("\n❌ Pre-flight check failed. Fix issues before running simulation.")
            sys.exit(1)

    asyncio.run(run_simulation(num_customers=args.customers))
