#!/usr/bin/env python3
"""
Smoke test for a running Campus Assistant: several users, each asking a few
questions in one session, plus the admin gate.
Run with: python smoke_test_api.py [BASE_URL] [ADMIN_KEY]
Default BASE_URL: http://localhost:8000
"""
import json
import sys
import urllib.error
import urllib.request

BASE_URL = "http://localhost:8000"
ADMIN_KEY = "dev-admin-key-12345"
NUM_USERS = 3
QUESTIONS_PER_USER = 3


def request(method: str, path: str, body: dict = None, headers: dict = None) -> tuple[int, object]:
    url = f"{BASE_URL.rstrip('/')}{path}"
    data = json.dumps(body).encode("utf-8") if body else None
    req = urllib.request.Request(url, data=data, method=method)
    req.add_header("Content-Type", "application/json")
    for k, v in (headers or {}).items():
        req.add_header(k, v)
    try:
        with urllib.request.urlopen(req, timeout=120) as resp:
            return resp.status, json.loads(resp.read().decode())
    except urllib.error.HTTPError as e:
        body = e.read().decode()
        try:
            return e.code, json.loads(body)
        except json.JSONDecodeError:
            return e.code, {"detail": body}
    except urllib.error.URLError as e:
        print(f"Connection error: {e}")
        sys.exit(1)


def main():
    global BASE_URL, ADMIN_KEY
    if len(sys.argv) > 1:
        BASE_URL = sys.argv[1]
    if len(sys.argv) > 2:
        ADMIN_KEY = sys.argv[2]
    print(f"Testing Campus Assistant at {BASE_URL}")

    # --- Health ---
    print("0. Health check")
    status, data = request("GET", "/health")
    if status != 200:
        print(f"   FAIL: {status} {data}")
        sys.exit(1)
    print(f"   OK: {data}\n")

    # --- Admin gate ---
    print("1. Admin gate")
    status, _ = request("GET", "/api/content", headers={"x-admin-key": "wrong-key"})
    if status != 403:
        print(f"   FAIL: expected 403 with a bad key, got {status}")
        sys.exit(1)
    status, content = request("GET", "/api/content", headers={"x-admin-key": ADMIN_KEY})
    if status != 200:
        print(f"   FAIL: {status} {content}")
        sys.exit(1)
    print(f"   OK: {len(content)} page(s) in the knowledge base\n")

    question_templates = [
        "What are the admission requirements?",
        "Which departments offer B.Tech programs?",
        "How do I contact the admission office?",
    ]

    failed = []
    session_ids = []

    for user_idx in range(NUM_USERS):
        user_name = f"user_{user_idx + 1}"
        session_id = None
        print(f"--- {user_name} ---")

        for q_idx, q in enumerate(question_templates[:QUESTIONS_PER_USER]):
            payload = {"message": q}
            if session_id is not None:
                payload["sessionId"] = session_id

            status, data = request("POST", "/api/chat", payload)
            if status != 200:
                print(f"   FAIL Q{q_idx + 1}: status {status} -> {data.get('detail', data)}")
                failed.append((user_name, q_idx + 1, status, data))
                break

            if "sessionId" not in data or "message" not in data:
                print(f"   FAIL Q{q_idx + 1}: missing sessionId/message")
                failed.append((user_name, q_idx + 1, None, data))
                break

            sid = data["sessionId"]
            if session_id is not None and sid != session_id:
                print(f"   FAIL Q{q_idx + 1}: sessionId changed ({session_id} -> {sid})")
                failed.append((user_name, q_idx + 1, None, data))
                break

            session_id = sid
            preview = data["message"]["content"][:80].replace("\n", " ")
            n_sources = len(data["message"].get("sources", []))
            print(f"   Q{q_idx + 1} OK | sources: {n_sources} | answer: {preview}...")

        if session_id:
            status, history = request("GET", f"/api/history/{session_id}")
            expected = 2 * QUESTIONS_PER_USER
            if status != 200 or len(history) != expected:
                print(f"   FAIL history: expected {expected} messages, got {status} {history}")
                failed.append((user_name, "history", status, history))
            else:
                session_ids.append(session_id)
        print()

    print("=" * 50)
    if failed:
        print(f"FAILED: {len(failed)} check(s)")
        for u, q, st, d in failed:
            print(f"  {u} {q}: {st} {d}")
        sys.exit(1)

    assert len(set(session_ids)) == NUM_USERS, "Session IDs must be unique per user"
    print("All checks passed.")


if __name__ == "__main__":
    main()
