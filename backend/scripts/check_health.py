import os
import sys
import httpx

BASE_URL = os.getenv("TINIGOM_URL", "http://localhost:8004")

try:
    print(f"Checking server URL: {BASE_URL}/api/test-connection")
    r = httpx.get(f"{BASE_URL}/api/test-connection", timeout=5)
    print(f"Status Code: {r.status_code}")
    data = r.json()
    if r.status_code == 200 and data.get("success"):
        details = data["details"]
        print("Server is UP and the database is reachable.")
        print(f"   Transactions: {details['transactionCount']}")
        print(f"   Savings goal: {details['currentSavingsGoal']}")
        print(f"   Quotes: {details['quoteStrategy']} (generation configured: {details['generationConfigured']})")
    else:
        print(f"Server returned an error: {data.get('error')} - {data.get('details')}")
        sys.exit(1)
except Exception as e:
    print(f"Server unreachable: {e}")
    sys.exit(1)
