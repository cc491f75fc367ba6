"""
End-to-end flow: a user founds a community, another joins, and only the
founder can change its settings. Reports are then filed and triaged.
"""


class TestCommunityLifecycle:
    def test_found_join_and_administer(self, client, admin_headers, member_headers):
        created = client.post(
            "/api/communities",
            headers=admin_headers,
            json={"name": "Test City", "center_lat": 40.7128, "center_lng": -74.006},
        )
        assert created.status_code == 200
        slug = created.json()["slug"]

        founder_view = client.get(f"/api/communities/{slug}", headers=admin_headers)
        assert founder_view.json()["isAdmin"] is True
        assert founder_view.json()["isMember"] is True

        joined = client.post(f"/api/communities/{slug}/join", headers=member_headers)
        assert joined.status_code == 201

        member_view = client.get(f"/api/communities/{slug}", headers=member_headers)
        assert member_view.json()["isMember"] is True
        assert member_view.json()["isAdmin"] is False
        assert member_view.json()["community"]["member_count"] == 2

        denied = client.patch(
            f"/api/communities/{slug}",
            headers=member_headers,
            json={"radius_km": 1},
        )
        assert denied.status_code == 403

        before = member_view.json()["community"]
        updated = client.patch(
            f"/api/communities/{slug}",
            headers=admin_headers,
            json={"radius_km": 10},
        )
        assert updated.status_code == 200
        after = updated.json()["community"]
        assert after["radius_km"] == 10
        assert after["updated_at"] != before["updated_at"]
        for field in ("name", "slug", "center_lat", "center_lng", "admin_id"):
            assert after[field] == before[field]


class TestReportTriage:
    def test_report_upvote_resolve_delete(
        self, client, admin_headers, member_headers, outsider_headers, test_member
    ):
        base = "/api/communities/test-city/reports"
        created = client.post(
            base,
            headers=member_headers,
            json={
                "title": "Overflowing bin",
                "category": "trash",
                "latitude": 40.713,
                "longitude": -74.006,
            },
        )
        assert created.status_code == 201
        report_id = created.json()["report"]["id"]

        assert client.post(f"{base}/{report_id}/upvote", headers=outsider_headers).status_code == 201
        assert client.post(f"{base}/{report_id}/upvote", headers=admin_headers).status_code == 201

        resolved = client.patch(
            f"{base}/{report_id}", headers=admin_headers, json={"status": "resolved"}
        )
        resolved_at = resolved.json()["report"]["resolved_at"]
        assert resolved.json()["report"]["upvote_count"] == 2
        assert resolved_at is not None

        reopened = client.patch(
            f"/api/reports/{report_id}", headers=admin_headers, json={"status": "pending"}
        )
        assert reopened.json()["data"]["resolved_at"] == resolved_at

        stats = client.get("/api/communities/test-city/stats").json()
        assert stats["total_reports"] == 1
        assert stats["pending_reports"] == 1

        assert client.delete(f"{base}/{report_id}", headers=member_headers).status_code == 200
        community = client.get("/api/communities/test-city").json()["community"]
        assert community["report_count"] == 0
