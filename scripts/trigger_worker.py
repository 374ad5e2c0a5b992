#!/usr/bin/env python3
"""Trigger the lead queue worker.

Usage:
    # Run one tick:
    python scripts/trigger_worker.py --url http://localhost:8000

    # Run a tick every 60 seconds until interrupted:
    python scripts/trigger_worker.py --url http://localhost:8000 --every 60

Requires:
    WEBHOOK_SECRET environment variable (or in .env), or --secret
"""

import argparse
import json
import os
import sys
import time

import httpx

WORKER_PATH = "/api/v1/worker/process-queue"


def get_secret(cli_value: str | None) -> str:
    secret = cli_value or os.environ.get("WEBHOOK_SECRET", "")
    if not secret and os.path.exists(".env"):
        with open(".env") as f:
            for line in f:
                line = line.strip()
                if line.startswith("WEBHOOK_SECRET="):
                    secret = line.split("=", 1)[1].strip().strip('"').strip("'")
                    break
    if not secret:
        print("ERROR: WEBHOOK_SECRET not found in environment or .env")
        sys.exit(1)
    return secret


def run_tick(base_url: str, secret: str, timeout: float) -> dict:
    resp = httpx.post(
        base_url.rstrip("/") + WORKER_PATH,
        headers={"Authorization": f"Bearer {secret}"},
        timeout=timeout,
    )
    resp.raise_for_status()
    return resp.json()


def main():
    parser = argparse.ArgumentParser(description="Trigger lead queue processing")
    parser.add_argument("--url", default="http://localhost:8000", help="Base URL of the API")
    parser.add_argument("--secret", help="Worker secret (defaults to WEBHOOK_SECRET)")
    parser.add_argument("--every", type=float, metavar="SECONDS", help="Repeat every N seconds")
    parser.add_argument("--timeout", type=float, default=120.0, help="Request timeout in seconds")
    args = parser.parse_args()

    secret = get_secret(args.secret)

    while True:
        try:
            result = run_tick(args.url, secret, args.timeout)
            print(json.dumps(result, indent=2))
        except httpx.HTTPStatusError as e:
            print(f"ERROR: worker returned {e.response.status_code}: {e.response.text[:300]}")
            if not args.every:
                sys.exit(1)
        except httpx.HTTPError as e:
            print(f"ERROR: {e}")
            if not args.every:
                sys.exit(1)

        if not args.every:
            break
        try:
            time.sleep(args.every)
        except KeyboardInterrupt:
            break


if __name__ == "__main__":
    main()
