"""API endpoint tests: uploads, aggregation endpoints, ports and error scenarios.

Uses the shared conftest fixtures (api_client, catalog).
"""
from unittest.mock import patch

from tests.csv_samples import ALGECIRAS_SCENARIO, DENSE_TRACK


def _upload(*files):
    return [("files", (name, text.encode("utf-8"), "text/csv")) for name, text in files]


class TestAnalyze:
    def test_returns_intervals(self, api_client):
        resp = api_client.post("/api/v1/analyze", files=_upload(("dense.csv", DENSE_TRACK)))
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["data"]["summary"]["totalIntervals"] == 3
        first = body["data"]["intervals"][0]
        assert first["navStatus"] == "0.0"
        assert first["startPort"]["name"] == "Algeciras"
        assert first["classification"]["type"] == "docked"
        assert first["journeyIndex"] == 1
        assert first["endReason"] == "status_change"

    def test_default_gap_splits_sparse_sampling(self, api_client):
        body = api_client.post("/api/v1/analyze", files=_upload(("t.csv", ALGECIRAS_SCENARIO))).json()
        assert [iv["endReason"] for iv in body["data"]["intervals"]] == ["time_gap", "time_gap", "end_of_data"]

    def test_invalid_file_listed_in_errors(self, api_client):
        resp = api_client.post(
            "/api/v1/analyze",
            files=_upload(("bad.csv", "foo,bar\n1,2"), ("dense.csv", DENSE_TRACK)),
        )
        body = resp.json()
        assert body["success"] is True
        assert body["meta"]["errors"] == ["File has no valid data: bad.csv"]
        assert body["meta"]["processedFiles"] == [{"file": "dense.csv", "rows": 6}]

    def test_no_valid_rows_is_reported_not_raised(self, api_client):
        resp = api_client.post("/api/v1/analyze", files=_upload(("bad.csv", "foo,bar\n1,2")))
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is False
        assert body["error"] == "no valid rows could be read"
        assert body["data"] is None

    def test_semicolon_delimiter(self, api_client):
        text = DENSE_TRACK.replace(",", ";")
        resp = api_client.post("/api/v1/analyze", files=_upload(("t.csv", text)), data={"delimiter": ";"})
        assert resp.json()["data"]["summary"]["totalRows"] == 6

    def test_undecodable_upload(self, api_client):
        files = [("files", ("latin.csv", b"\xff\xfe\xfa", "text/csv"))] + _upload(("dense.csv", DENSE_TRACK))
        body = api_client.post("/api/v1/analyze", files=files).json()
        assert body["success"] is True
        assert body["meta"]["errors"][0].startswith("Error processing latin.csv")

    def test_missing_files_field(self, api_client):
        assert api_client.post("/api/v1/analyze").status_code == 422

    def test_upload_too_large(self, api_client):
        with patch("navtrack.api.routes.settings") as mock_settings:
            mock_settings.MAX_UPLOAD_SIZE_MB = 0
            resp = api_client.post("/api/v1/analyze", files=_upload(("dense.csv", DENSE_TRACK)))
        assert resp.status_code == 413


class TestRawData:
    def test_rows_with_closest_port(self, api_client):
        body = api_client.post("/api/v1/raw", files=_upload(("t.csv", ALGECIRAS_SCENARIO))).json()
        assert body["success"] is True
        assert body["meta"]["totalRows"] == 3
        assert body["meta"]["filesProcessed"] == 1
        assert body["data"][0]["closestPort"]["name"] == "Algeciras"
        assert body["data"][0]["columns"]["time"] == "2024-01-01 10:00:00.0"


class TestAggregations:
    def test_journeys(self, api_client):
        body = api_client.post("/api/v1/journeys", files=_upload(("dense.csv", DENSE_TRACK))).json()
        assert body["journeys"] == [{"index": 1, "startPort": "Algeciras", "intervalCount": 3}]
        assert len(body["intervals"]) == 3

    def test_routes_empty_for_single_departure(self, api_client):
        body = api_client.post("/api/v1/routes", files=_upload(("dense.csv", DENSE_TRACK))).json()
        assert body == {"routes": []}

    def test_activities(self, api_client):
        body = api_client.post("/api/v1/activities", files=_upload(("dense.csv", DENSE_TRACK))).json()
        ids = {a["id"] for a in body["activities"]}
        assert ids == {"docked_algeciras", "maneuvering_algeciras", "transit_algeciras_ceuta"}
        assert body["totalSeconds"] == sum(a["seconds"] for a in body["activities"])

    def test_failed_analysis_is_422(self, api_client):
        resp = api_client.post("/api/v1/routes", files=_upload(("bad.csv", "foo,bar\n1,2")))
        assert resp.status_code == 422
        assert resp.json()["detail"]["error"] == "no valid rows could be read"


class TestPorts:
    def test_list(self, api_client):
        body = api_client.get("/api/v1/ports").json()
        assert [p["name"] for p in body["ports"]] == ["Algeciras", "Tanger Med", "Ceuta"]

    def test_nearest(self, api_client):
        body = api_client.get("/api/v1/ports/nearest", params={"lat": 35.8895, "lon": -5.3075}).json()
        assert body["nearest"]["name"] == "Ceuta"
        assert len(body["allDistances"]) == 3

    def test_nearest_with_ceiling(self, api_client):
        body = api_client.get("/api/v1/ports/nearest", params={"lat": 36.0, "lon": -5.4, "max_km": 5}).json()
        assert body["nearest"] is None
        assert body["allDistances"][0]["distance"] > 5

    def test_latitude_out_of_range(self, api_client):
        assert api_client.get("/api/v1/ports/nearest", params={"lat": 95, "lon": 0}).status_code == 422


class TestErrorHandlers:
    def test_value_error_is_422(self, api_client):
        with patch("navtrack.api.routes.process_csv_data", side_effect=ValueError("bad delimiter")):
            resp = api_client.post("/api/v1/analyze", files=_upload(("dense.csv", DENSE_TRACK)))
        assert resp.status_code == 422
        assert resp.json() == {"error": "Validation error", "detail": "bad delimiter"}
