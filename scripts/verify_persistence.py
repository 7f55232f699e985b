"""
Persistence check against a real database.

Starts the API, creates a trip, restarts the API, and confirms the trip is
still there. Needs DEBUG=true (for /auth/test-token) plus reachable
PostgreSQL and Redis.
"""

import os
import signal
import subprocess
import sys
import time

import httpx

BASE_URL = "http://127.0.0.1:8000"
SERVER_CMD = [sys.executable, "-m", "uvicorn", "backend.app.main:app", "--host", "127.0.0.1", "--port", "8000"]


def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for _ in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print("✅ Server is up!")
                return True
        except httpx.ConnectError:
            pass
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False


def start_server():
    return subprocess.Popen(
        SERVER_CMD,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env={**os.environ, "DEBUG": "true"}
    )


def stop_server(proc):
    proc.send_signal(signal.SIGTERM)
    proc.wait()


def get_token():
    resp = httpx.post(f"{BASE_URL}/auth/test-token", json={
        "userId": "persist_user",
        "email": "persist_user@test.com",
        "name": "Persist User"
    })
    if resp.status_code != 200:
        raise Exception(f"Token request failed: {resp.status_code} {resp.text}")
    return resp.json()["data"]["accessToken"]


def run_verification():
    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = start_server()

    try:
        if not wait_for_server():
            out, err = proc.communicate(timeout=2)
            print("Server Stdout:", out.decode())
            print("Server Stderr:", err.decode())
            raise Exception("Server start failed")

        print("\n--- [Step 2] Creating Trip ---")
        headers = {"Authorization": f"Bearer {get_token()}"}
        resp = httpx.post(f"{BASE_URL}/trip", headers=headers, json={
            "name": "Persistence Check",
            "description": "Created before restart",
            "startDate": "2026-01-01"
        })
        if resp.status_code != 201:
            raise Exception(f"Trip creation failed: {resp.status_code} {resp.text}")
        trip_id = resp.json()["data"][0]["id"]
        print(f"✅ Trip {trip_id} created")
    finally:
        print("\n--- [Step 3] Stopping Server ---")
        stop_server(proc)

    time.sleep(2)  # port release

    print("\n--- [Step 4] Restarting Server (Verification) ---")
    proc2 = start_server()

    try:
        if not wait_for_server():
            raise Exception("Server restart failed")

        print("\n--- [Step 5] Fetching Trip (Post-Restart) ---")
        headers = {"Authorization": f"Bearer {get_token()}"}
        resp = httpx.get(f"{BASE_URL}/trip/{trip_id}", headers=headers)
        data = resp.json().get("data")
        if resp.status_code == 200 and data and data["name"] == "Persistence Check":
            print("✅ Trip persisted across restart")
        else:
            print(f"❌ Trip missing after restart: {resp.status_code} {resp.text}")
            raise Exception("Persistence check failed")

        httpx.delete(f"{BASE_URL}/trip/{trip_id}", headers=headers)
    finally:
        print("\n--- [Step 6] Stopping Server ---")
        stop_server(proc2)


if __name__ == "__main__":
    run_verification()
