#!/usr/bin/env python3
from __future__ import annotations

import json
import os
import sys
import time

from urllib.request import Request, urlopen
from urllib.error import URLError

SAMPLE_TEXT = (
    "Once upon a time a small team built a tool that read messy notes and turned them into tidy records. "
    "This story follows the first chapter of that work."
)


def main() -> int:
    base_url = os.getenv("INSIGHTFORGE_API_URL", "http://localhost:8000").rstrip("/")
    try:
        with urlopen(f"{base_url}/healthz", timeout=5) as r:
            print("/healthz:", r.read().decode("utf-8"))
        # Give the service a moment to finish boot
        time.sleep(0.5)
        with urlopen(f"{base_url}/healthz/ready", timeout=5) as r2:
            print("/healthz/ready:", r2.read().decode("utf-8"))
        request = Request(
            f"{base_url}/analyze",
            data=json.dumps({"text": SAMPLE_TEXT}).encode("utf-8"),
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        with urlopen(request, timeout=60) as r3:
            body = json.loads(r3.read().decode("utf-8"))
            print("/analyze:", body.get("success"), body.get("data", {}).get("input_type"))
    except (URLError, Exception) as exc:
        print(f"Compose smoke failed: {exc}", file=sys.stderr)
        return 1
    print("Compose smoke passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
