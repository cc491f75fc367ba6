"""Integration tests for the community-agnostic /api/reports endpoints."""

import repositories.db_models as db_models

REPORT_PAYLOAD = {
    "title": "Graffiti on the underpass",
    "description": "Fresh tags on the north wall",
    "category": "graffiti",
    "latitude": 40.7,
    "longitude": -74.0,
}


class TestListReportsEndpoint:
    def test_wrapped_in_data(self, client, test_report):
        response = client.get("/api/reports")

        assert response.status_code == 200
        data = response.json()["data"]
        assert [r["id"] for r in data] == [test_report.id]

    def test_status_filter(self, client, test_community, report_factory):
        report_factory("u", test_community)
        closed = report_factory("u", test_community, status=db_models.ReportStatus.CLOSED)

        response = client.get("/api/reports", params={"status": "closed"})

        assert [r["id"] for r in response.json()["data"]] == [closed.id]


class TestCreateReportEndpoint:
    def test_without_community(self, client, outsider_headers):
        response = client.post("/api/reports", headers=outsider_headers, json=REPORT_PAYLOAD)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["community_id"] is None
        assert body["data"]["status"] == "pending"

    def test_into_community(self, client, member_headers, test_community):
        response = client.post(
            "/api/reports",
            headers=member_headers,
            json={**REPORT_PAYLOAD, "community_slug": "test-city"},
        )

        assert response.status_code == 201
        assert response.json()["data"]["community_id"] == test_community.id

    def test_description_required(self, client, member_headers):
        payload = {k: v for k, v in REPORT_PAYLOAD.items() if k != "description"}
        response = client.post("/api/reports", headers=member_headers, json=payload)

        assert response.status_code == 400
        assert "description" in response.json()["detail"]

    def test_requires_auth(self, client):
        assert client.post("/api/reports", json=REPORT_PAYLOAD).status_code == 401


class TestUpdateReportStatusEndpoint:
    def test_missing_status(self, client, admin_headers, test_report):
        response = client.patch(
            f"/api/reports/{test_report.id}", headers=admin_headers, json={}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Missing status"

    def test_admin_changes_status(self, client, admin_headers, test_report):
        response = client.patch(
            f"/api/reports/{test_report.id}",
            headers=admin_headers,
            json={"status": "acknowledged", "title": "ignored"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "acknowledged"
        assert data["title"] == test_report.title

    def test_outsider_forbidden(self, client, outsider_headers, test_report):
        response = client.patch(
            f"/api/reports/{test_report.id}",
            headers=outsider_headers,
            json={"status": "closed"},
        )
        assert response.status_code == 403

    def test_not_found(self, client, admin_headers):
        response = client.patch(
            "/api/reports/999", headers=admin_headers, json={"status": "closed"}
        )
        assert response.status_code == 404


class TestDeleteReportEndpoint:
    def test_owner_deletes(self, client, member_headers, test_report):
        response = client.delete(f"/api/reports/{test_report.id}", headers=member_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert client.get("/api/reports").json()["data"] == []

    def test_outsider_forbidden(self, client, outsider_headers, test_report):
        response = client.delete(
            f"/api/reports/{test_report.id}", headers=outsider_headers
        )
        assert response.status_code == 403
