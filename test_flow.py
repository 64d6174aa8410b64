import httpx
import asyncio
import uuid
from datetime import date, timedelta

from carpool.middleware.auth import create_access_token


BASE_URL = "http://localhost:8000"


async def safe_request(resp: httpx.Response, step: str):
    """Print response + fail loudly if error"""
    print(f"{step}: {resp.status_code}")

    try:
        print(resp.json())
    except Exception:
        print(resp.text)

    resp.raise_for_status()


async def register(client: httpx.AsyncClient, name: str, role: str) -> dict:
    resp = await client.post(
        f"{BASE_URL}/api/users",
        json={"name": name, "email": f"{uuid.uuid4().hex[:10]}@carconnect.com", "role": role},
    )
    await safe_request(resp, f"Register {role}")
    user = resp.json()
    token = create_access_token({"sub": user["id"], "role": role})
    return {"id": user["id"], "headers": {"Authorization": f"Bearer {token}"}}


async def main():

    async with httpx.AsyncClient(timeout=30.0) as client:

        # ---------------------------------------------------
        print("\n1️⃣ Checking Health...")
        resp = await client.get(f"{BASE_URL}/health")
        await safe_request(resp, "Health")

        # ---------------------------------------------------
        print("\n2️⃣ Registering driver and rider...")
        driver = await register(client, "Test Driver", "driver")
        rider = await register(client, "Test Rider", "rider")

        # ---------------------------------------------------
        print("\n3️⃣ Driver posts a ride...")
        ride_payload = {
            "vehicle_name": "Honda City",
            "vehicle_number": "KA01AB1234",
            "from_location": "Koramangala",
            "to_location": "Whitefield",
            "ride_date": (date.today() + timedelta(days=1)).isoformat(),
            "ride_time": "08:30",
            "seats_available": 2,
        }
        resp = await client.post(
            f"{BASE_URL}/api/drivers/rides",
            json=ride_payload,
            headers={**driver["headers"], "Idempotency-Key": str(uuid.uuid4())},
        )
        await safe_request(resp, "Create Ride")
        ride_id = resp.json()["data"]["id"]

        # ---------------------------------------------------
        print("\n4️⃣ Rider searches...")
        resp = await client.get(
            f"{BASE_URL}/api/riders/rides/search",
            params={"from_location": "kora"},
            headers=rider["headers"],
        )
        await safe_request(resp, "Search Rides")
        if ride_id not in [r["id"] for r in resp.json()["data"]]:
            raise Exception("Posted ride not found in search results")

        # ---------------------------------------------------
        print("\n5️⃣ Rider requests a seat...")
        resp = await client.post(
            f"{BASE_URL}/api/riders/rides/{ride_id}/requests",
            headers={**rider["headers"], "Idempotency-Key": str(uuid.uuid4())},
        )
        await safe_request(resp, "Request Seat")
        request_id = resp.json()["data"]["id"]

        # ---------------------------------------------------
        print("\n6️⃣ Driver checks incoming requests...")
        resp = await client.get(
            f"{BASE_URL}/api/drivers/requests",
            params={"ride_id": ride_id, "status": "pending"},
            headers=driver["headers"],
        )
        await safe_request(resp, "Incoming Requests")

        # ---------------------------------------------------
        print("\n7️⃣ Driver approves...")
        resp = await client.patch(
            f"{BASE_URL}/api/drivers/requests/{request_id}/approve",
            headers=driver["headers"],
        )
        await safe_request(resp, "Approve Request")

        # ---------------------------------------------------
        print("\n8️⃣ Rider checks bookings...")
        resp = await client.get(
            f"{BASE_URL}/api/riders/bookings",
            params={"status": "accepted"},
            headers=rider["headers"],
        )
        await safe_request(resp, "My Bookings")

        # ---------------------------------------------------
        print("\n9️⃣ Driver rejects (frees the seat)...")
        resp = await client.patch(
            f"{BASE_URL}/api/drivers/requests/{request_id}/reject",
            headers=driver["headers"],
        )
        await safe_request(resp, "Reject Request")
        if resp.json()["data"]["ride"]["seats_booked"] != 0:
            raise Exception("Seat was not released")

        print("\n✅ FLOW COMPLETED SUCCESSFULLY")


if __name__ == "__main__":
    asyncio.run(main())
