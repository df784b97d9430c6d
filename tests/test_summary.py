from portal_service.app.crud.purchase_requests_crud import get_summary, tally_statuses
from portal_service.app.models.purchase_requests import PurchaseRequest
from portal_service.app.schemas.purchase_requests_schemas import PurchaseRequestSummary

from conftest import auth_headers

STATUSES = ["pending_approval", "pending_approval", "approved", "shipped", "cancelled", "auto_created"]


class _Result:
    def __init__(self, row):
        self.row = row

    def mappings(self):
        return self

    def first(self):
        return self.row


class _FunctionSession:
    """Stands in for a Postgres session where the summary function is installed."""

    def __init__(self, row):
        self.row = row

    def execute(self, statement):
        return _Result(self.row)


def _seed(db, statuses):
    for i, value in enumerate(statuses, start=1):
        db.add(PurchaseRequest(request_number=f"PR-2026-{i:05d}", source="admin", status=value,
                               quantity=1, ownership="skyyield_owned"))
    db.commit()


def test_tally_ignores_unknown_statuses():
    summary = tally_statuses(["approved", "mystery", None, "approved"])
    assert summary.approved == 2
    assert summary.total == 4
    assert summary.pending_approval == 0


def test_fallback_counts_rows(db):
    _seed(db, STATUSES)
    summary = get_summary(db)
    assert summary.pending_approval == 2
    assert summary.approved == 1
    assert summary.auto_created == 1
    assert summary.total == len(STATUSES)


def test_function_result_matches_fallback(db):
    _seed(db, STATUSES)
    fallback = get_summary(db)

    row = {key: STATUSES.count(key) for key in PurchaseRequestSummary.model_fields if key != "total"}
    row["total"] = len(STATUSES)
    assert get_summary(_FunctionSession(row)) == fallback


def test_summary_endpoint(portal_client, db, employee):
    _seed(db, STATUSES)
    resp = portal_client.get("/api/admin/purchase-requests/summary", headers=auth_headers("employee_1"))
    assert resp.status_code == 200
    assert resp.json()["shipped"] == 1
    assert resp.json()["total"] == 6
