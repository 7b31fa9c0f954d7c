"""
Integration tests: bill generation, monthly editing and payment against a real database.

TEST_ACCESS_TOKEN must belong to a super admin or admin (for example the
fallback administrator address when that identity has no profile row).
"""

import os

import pytest
from httpx import ASGITransport, AsyncClient

from schoolpay.main import app, lifespan
from tests.conftest import requires_db

pytestmark = requires_db


@pytest.fixture
async def live_client(api_base: str):
    """Client with the real lifespan: auth client, session bootstrap and security policy."""
    async with lifespan(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url=api_base, timeout=30.0) as client:
            yield client


@pytest.fixture
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {os.environ['TEST_ACCESS_TOKEN']}"}


@pytest.fixture
async def billed_class(live_client: AsyncClient, api_base: str, admin_headers: dict, unique_suffix: str):
    """A class with two students and a 150000 monthly bill template."""
    resp = await live_client.post(
        f"{api_base}/classes",
        headers=admin_headers,
        json={"name": f"VII-{unique_suffix}", "level": 7},
    )
    assert resp.status_code == 200, resp.text
    class_id = resp.json()["data"]["id"]

    student_ids = []
    for n in range(2):
        resp = await live_client.post(
            f"{api_base}/students",
            headers=admin_headers,
            json={"nis": f"{unique_suffix}-{n}", "name": f"Siswa {n}", "class_id": class_id},
        )
        assert resp.status_code == 200, resp.text
        student_ids.append(resp.json()["data"]["id"])

    resp = await live_client.post(
        f"{api_base}/bills",
        headers=admin_headers,
        json={"code": f"SPP-{unique_suffix}", "name": "SPP Bulanan", "amount": "150000", "category": "SPP"},
    )
    assert resp.status_code == 200, resp.text
    bill_id = resp.json()["data"]["id"]

    return {"class_id": class_id, "student_ids": student_ids, "bill_id": bill_id}


def _assignment(class_id: str, overwrite: bool = False) -> dict:
    return {
        "target": "class",
        "class_id": class_id,
        "repeat_monthly": True,
        "start_date": "2031-07-15",
        "months_count": 3,
        "overwrite_existing": overwrite,
    }


@pytest.mark.asyncio
async def test_assign_is_idempotent(live_client: AsyncClient, api_base: str, admin_headers: dict, billed_class):
    url = f"{api_base}/bills/{billed_class['bill_id']}/assign"

    resp = await live_client.post(url, headers=admin_headers, json=_assignment(billed_class["class_id"]))
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    assert data["outcome"] == "completed"
    assert data["inserted"] == 6
    assert data["months"] == ["2031-07-01", "2031-08-01", "2031-09-01"]

    resp = await live_client.post(url, headers=admin_headers, json=_assignment(billed_class["class_id"]))
    data = resp.json()["data"]
    assert data["outcome"] == "nothing_to_do"
    assert data["skipped"] == 6
    assert data["affected"] == 0


@pytest.mark.asyncio
async def test_paid_bills_survive_edits_and_overwrite(
    live_client: AsyncClient, api_base: str, admin_headers: dict, billed_class
):
    bill_id = billed_class["bill_id"]
    first_student, _ = billed_class["student_ids"]
    await live_client.post(
        f"{api_base}/bills/{bill_id}/assign", headers=admin_headers, json=_assignment(billed_class["class_id"])
    )

    resp = await live_client.get(f"{api_base}/payments/students/{first_student}/bills", headers=admin_headers)
    assert resp.status_code == 200, resp.text
    outstanding = resp.json()["data"]
    assert len(outstanding["bills"]) == 3
    assert float(outstanding["total_outstanding"]) == 450000
    july_bill = outstanding["bills"][0]
    assert july_bill["due_date"] == "2031-07-01"

    resp = await live_client.post(
        f"{api_base}/payments", headers=admin_headers, json={"student_bill_ids": [july_bill["id"]]}
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["data"][0]["receipt_number"].startswith("RCP-")

    resp = await live_client.put(
        f"{api_base}/bills/{bill_id}/monthly",
        headers=admin_headers,
        json={"class_id": billed_class["class_id"], "months": [{"due_date": "2031-07-01", "amount": "175000"}]},
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["data"] == {"months_updated": 1, "rows_updated": 1}

    resp = await live_client.post(
        f"{api_base}/bills/{bill_id}/assign",
        headers=admin_headers,
        json=_assignment(billed_class["class_id"], overwrite=True),
    )
    data = resp.json()["data"]
    assert data["outcome"] == "completed"
    assert data["protected"] == 1
    assert data["updated"] == 5
