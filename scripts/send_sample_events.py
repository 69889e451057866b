#!/usr/bin/env python3
"""Post sample tracker payloads to a running ingest API.

Needs httpx: pip install -e ".[scripts]"
"""

from __future__ import annotations

import argparse
import base64
import json
import time

import httpx


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _unsigned_token(project_id: str, user_id: str | None) -> str:
    claims: dict[str, str] = {"projectId": project_id}
    if user_id:
        claims["userId"] = user_id
    header = _b64url(json.dumps({"alg": "none", "typ": "JWT"}).encode())
    return f"{header}.{_b64url(json.dumps(claims).encode())}.unsigned"


def _compact_samples(origin: str) -> list[tuple[str, dict[str, object]]]:
    now = int(time.time() * 1000)
    base = {"ts": now, "o": origin, "r": origin, "sw": 1920, "sh": 1080}
    return [
        ("/view", {"en": "pageview", **base, "ed": {"title": "Home", "path": "/"}}),
        ("/event", {"en": "webvital", **base, "ed": {"metric": "LCP", "value": 132}}),
        ("/event", {"en": "button_clicked", **base, "ed": {"button": "signup"}}),
    ]


def _expanded_samples(origin: str, project_id: str) -> list[tuple[str, dict[str, object]]]:
    common = {"projectId": project_id, "anonymousId": "anon-sample", "sessionId": "sess-sample"}
    return [
        ("/view", {**common, "url": origin, "title": "Home"}),
        ("/track", {**common, "eventType": "button_clicked", "properties": {"button": "signup"}}),
    ]


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--base-url", default="http://127.0.0.1:8000")
    parser.add_argument("--schema", choices=("compact", "expanded"), default="compact")
    parser.add_argument("--project-id", default="sample-project")
    parser.add_argument("--user-id", default=None)
    parser.add_argument("--origin", default="http://localhost:3000/")
    args = parser.parse_args()

    headers = {"user-agent": "eventgate-sample/1.0"}
    if args.schema == "compact":
        headers["authorization"] = f"Bearer {_unsigned_token(args.project_id, args.user_id)}"
        samples = _compact_samples(args.origin)
    else:
        samples = _expanded_samples(args.origin, args.project_id)

    failures = 0
    with httpx.Client(base_url=args.base_url.rstrip("/"), timeout=10.0) as client:
        for path, body in samples:
            response = client.post(path, json=body, headers=headers)
            print(f"[sample] POST {path} -> {response.status_code} {response.text.strip()}")
            if response.status_code != 202:
                failures += 1
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
