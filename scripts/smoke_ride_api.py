#!/usr/bin/env python3
"""
Smoke-check a running Ride API: create a ride, read it back, page through the list.

Usage:
    DB_PATH=./rides.db PORT=8010 python -m src.ride_api.main
    python scripts/smoke_ride_api.py http://localhost:8010
"""
import json
import sys

import requests


def smoke_ride_api(base_url: str):
    payload = {
        "startLatitude": -6.2,
        "startLongitude": 106.8,
        "endLatitude": -6.3,
        "endLongitude": 106.9,
        "riderName": "Smoke Rider",
        "driverName": "Smoke Driver",
        "driverVehicle": "Sedan",
    }

    print(f"📡 Checking {base_url}/health ...")
    try:
        response = requests.get(f"{base_url}/health", timeout=5)
        response.raise_for_status()
        print(f"✅ {response.text}")

        print(f"📦 Creating ride: {json.dumps(payload)}")
        response = requests.post(f"{base_url}/rides", json=payload, timeout=5)
        response.raise_for_status()
        created = response.json()
        print(f"✅ Created ride {created['id']}")

        response = requests.get(f"{base_url}/rides/{created['id']}", timeout=5)
        response.raise_for_status()
        print(f"✅ Read back: {json.dumps(response.json())}")

        cursor = ""
        page_num = 0
        while True:
            page_num += 1
            response = requests.get(
                f"{base_url}/rides", params={"cursor": cursor, "limit": 2}, timeout=5
            )
            response.raise_for_status()
            data = response.json()
            print(f"📊 Page #{page_num}: ids {[r['id'] for r in data['rides']]}")
            cursor = data["cursor"]
            if not cursor or page_num >= 5:
                break

    except requests.exceptions.ConnectionError:
        print("\n❌ Could not connect to server. Is it running?")
        print("   Run: DB_PATH=./rides.db PORT=8010 python -m src.ride_api.main")
        sys.exit(1)
    except requests.exceptions.HTTPError as e:
        print(f"\n❌ Request failed: {e}")
        print(f"   Body: {e.response.text}")
        sys.exit(1)


if __name__ == "__main__":
    smoke_ride_api(sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8010")
