#!/usr/bin/env python3
# This project was developed with assistance from AI tools.
"""Live smoke suite for the Solo Parent Registry API.

Walks one applicant through intake, document upload, remarks, renewal and
termination against a running server, checking status codes and
Problem Details bodies along the way.

Prerequisites:
  - API server running on localhost:8000 with AUTH_DISABLED=true
    (every request acts as the dev superadmin)
  - Database migrated (alembic upgrade head)

Usage:
  ./scripts/live-tests.py
  ./scripts/live-tests.py --base http://localhost:9000
"""

import argparse
import asyncio
import sys
import uuid

import httpx

HEADERS = {"Origin": "http://localhost:5173"}

# ---------------------------------------------------------------------------
# Test runner
# ---------------------------------------------------------------------------

PASS = 0
FAIL = 0
ERRORS: list[str] = []
SECTION = ""


def section(name: str):
    global SECTION
    SECTION = name
    print(f"\n{'=' * 60}")
    print(f"  {name}")
    print(f"{'=' * 60}\n")


def ok(name: str, passed: bool, detail: str = ""):
    global PASS, FAIL
    if passed:
        PASS += 1
        print(f"  PASS  {name}")
    else:
        FAIL += 1
        msg = f"[{SECTION}] {name}: {detail}" if detail else f"[{SECTION}] {name}"
        ERRORS.append(msg)
        print(f"  FAIL  {name} -- {detail}")


def has_keys(d: dict, *keys: str) -> bool:
    return all(k in d for k in keys)


def intake_payload(email: str, civil_status: str = "single") -> dict:
    return {
        "email": email,
        "first_name": "Live",
        "last_name": "Tester",
        "barangay": "Poblacion",
        "civil_status": civil_status,
        "family_members": [{"full_name": "Kid Tester", "age": 6}],
        "emergency_name": "Guardian Tester",
        "emergency_contact": "09170000000",
    }


# ---------------------------------------------------------------------------
# 1. Health
# ---------------------------------------------------------------------------

async def test_health(c: httpx.AsyncClient):
    section("Health")

    r = await c.get("/health/")
    ok("GET /health/ returns 200", r.status_code == 200)
    ok("database reported ok", r.json().get("database") == "ok")

    r = await c.get("/")
    ok("GET / root returns 200", r.status_code == 200)
    ok("root has welcome message", "message" in r.json())


# ---------------------------------------------------------------------------
# 2. Intake
# ---------------------------------------------------------------------------

async def test_intake(c: httpx.AsyncClient) -> dict:
    section("Intake")
    email = f"live-{uuid.uuid4().hex[:8]}@example.com"

    r = await c.post("/api/applications/", json=intake_payload(email))
    ok("POST /api/applications/ returns 201", r.status_code == 201, r.text[:120])
    applicant = r.json().get("applicant", {})
    ok("applicant has code_id", bool(applicant.get("code_id")))
    ok("new applicant is Pending", applicant.get("status") == "Pending")

    r = await c.post("/api/applications/", json=intake_payload(email))
    ok("duplicate email returns 409", r.status_code == 409)
    ok("409 body is Problem Details", has_keys(r.json(), "type", "title", "status", "code"))

    r = await c.post("/api/applications/", json=intake_payload("not-an-email"))
    ok("invalid email returns 422", r.status_code == 422)

    r = await c.get("/api/applications/1900_01_000000")
    ok("unknown code_id returns 404", r.status_code == 404)
    return applicant


# ---------------------------------------------------------------------------
# 3. Documents
# ---------------------------------------------------------------------------

async def test_documents(c: httpx.AsyncClient, code_id: str):
    section("Documents")
    base = f"/api/applications/{code_id}/documents"

    r = await c.get(f"/api/applications/{code_id}/completeness")
    ok("completeness returns 200", r.status_code == 200)
    ok("single requires 4 documents", r.json().get("required_count") == 4)

    r = await c.post(base, json={"kind": "passport", "file_name": "p.pdf", "display_name": "p"})
    ok("unknown kind returns 422", r.status_code == 422)
    ok("422 code is invalid_document_kind", r.json().get("code") == "invalid_document_kind")

    last = None
    for kind in ("psa", "itr", "med_cert", "cenomar"):
        last = await c.post(
            base, json={"kind": kind, "file_name": f"live/{kind}.pdf", "display_name": kind}
        )
        ok(f"upload {kind} returns 201", last.status_code == 201, last.text[:120])

    r = await c.post(
        base, json={"kind": "psa", "file_name": "live/psa-v2.pdf", "display_name": "psa"}
    )
    ok("re-upload returns 200", r.status_code == 200)
    ok("re-upload is not a new row", r.json().get("created") is False)

    ok("final upload verified the applicant", last.json().get("applicant_status") == "Verified")

    r = await c.get(base)
    ok("document list has 4 rows", r.json().get("count") == 4)


# ---------------------------------------------------------------------------
# 4. Remarks, renewal, termination
# ---------------------------------------------------------------------------

async def test_lifecycle(c: httpx.AsyncClient, applicant: dict):
    section("Lifecycle")
    code_id = applicant["code_id"]
    url = f"/api/applications/{code_id}"

    r = await c.post(f"{url}/remarks", json={"remarks": "Live test remarks"})
    ok("issue remarks returns 200", r.status_code == 200, r.text[:120])
    ok("status is Pending Remarks", r.json().get("status") == "Pending Remarks")

    r = await c.post(f"{url}/remarks", json={"remarks": "Again"})
    ok("second remarks returns 409", r.status_code == 409)

    r = await c.post(f"{url}/remarks/accept")
    ok("accept remarks restores Verified", r.json().get("status") == "Verified")

    r = await c.post(f"{url}/renewal")
    ok("start renewal", r.json().get("status") == "Renewal")

    r = await c.post(f"{url}/renewal/decision", json={"decision": "approve"})
    ok("approve without certificate returns 409", r.status_code == 409)

    r = await c.post(
        f"{url}/documents/renewal",
        json={"file_name": "live/brgy.pdf", "display_name": "Barangay Certificate"},
    )
    ok("upload barangay certificate returns 201", r.status_code == 201)

    r = await c.post(f"{url}/renewal/decision", json={"remarks": "declined: expired stamp"})
    ok("declined renewal stays in Renewal", r.json().get("status") == "Renewal")

    await c.post(
        f"{url}/documents/renewal",
        json={"file_name": "live/brgy-2.pdf", "display_name": "Barangay Certificate"},
    )
    r = await c.post(f"{url}/renewal/decision", json={"decision": "approve"})
    ok("approved renewal is Verified", r.json().get("status") == "Verified")

    r = await c.post(f"{url}/terminate", json={"remarks": "Live test"})
    ok("terminate", r.json().get("status") == "Terminated")

    r = await c.post(f"{url}/reverify")
    ok("reverify", r.json().get("status") == "Verified")

    r = await c.get(f"/api/notifications/{applicant['id']}", params={"audience": "applicant"})
    ok("applicant notifications listed", r.status_code == 200)
    kinds = {n["kind"] for n in r.json().get("data", [])}
    ok("revoke notice recorded", "revoke" in kinds, str(sorted(kinds)))

    r = await c.put(f"/api/notifications/{applicant['id']}/read-all")
    ok("mark all read returns 200", r.status_code == 200)


# ---------------------------------------------------------------------------
# 5. Decline and re-submit
# ---------------------------------------------------------------------------

async def test_resubmission(c: httpx.AsyncClient):
    section("Decline and re-submit")
    email = f"live-{uuid.uuid4().hex[:8]}@example.com"

    r = await c.post("/api/applications/", json=intake_payload(email, "widowed"))
    code_id = r.json()["applicant"]["code_id"]

    r = await c.post(f"/api/applications/{code_id}/review", json={"action": "decline"})
    ok("decline without remarks returns 422", r.status_code == 422)

    r = await c.post(
        f"/api/applications/{code_id}/review",
        json={"action": "decline", "remarks": "Live test decline"},
    )
    ok("decline returns Declined", r.json().get("status") == "Declined")

    r = await c.post("/api/applications/", json=intake_payload(email, "widowed"))
    ok("re-submission returns 201", r.status_code == 201)
    body = r.json()
    ok("re-submission flagged", body.get("resubmitted") is True)
    ok("code_id preserved", body["applicant"]["code_id"] == code_id)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

async def main():
    parser = argparse.ArgumentParser(description="Live test suite for the Solo Parent Registry API")
    parser.add_argument("--base", default="http://localhost:8000", help="API base URL")
    args = parser.parse_args()

    print("=" * 60)
    print("  LIVE TEST SUITE -- Solo Parent Registry API")
    print("=" * 60)

    async with httpx.AsyncClient(base_url=args.base, headers=HEADERS, timeout=15) as c:
        try:
            r = await c.get("/health/")
            if r.status_code != 200:
                print(f"\n  Server returned {r.status_code} on /health/ -- is it running?")
                sys.exit(2)
        except httpx.ConnectError:
            print(f"\n  Cannot connect to server at {args.base} -- is it running?")
            sys.exit(2)

        await test_health(c)
        applicant = await test_intake(c)
        if applicant.get("code_id"):
            await test_documents(c, applicant["code_id"])
            await test_lifecycle(c, applicant)
        await test_resubmission(c)

    print(f"\n{'=' * 60}")
    print(f"  RESULTS: {PASS} passed, {FAIL} failed")
    print(f"{'=' * 60}")

    if ERRORS:
        print("\nFailures:")
        for e in ERRORS:
            print(f"  - {e}")

    sys.exit(0 if FAIL == 0 else 1)


if __name__ == "__main__":
    asyncio.run(main())
