"""Tests for the consultation API."""

import pytest

PATIENT = {
    "id": "P2024001",
    "name": "王小明",
    "age": 45,
    "gender": "male",
    "chief_complaint": "头痛三天",
    "vital_signs": {"temperature": 36.8, "blood_pressure": "135/85", "heart_rate": 78, "respiratory_rate": 16},
}

BASE = "/api/v1/consultation"


@pytest.fixture
def started(client, doctor_headers):
    response = client.post(f"{BASE}/start", json={"patient": PATIENT}, headers=doctor_headers)
    assert response.status_code == 200
    return response.json()


def _change(client, headers, slice_name, field, value):
    return client.post(f"{BASE}/change", json={"slice": slice_name, "field": field, "value": value}, headers=headers)


class TestSectionGuard:
    def test_cashier_redirected_to_dashboard(self, client, cashier_headers):
        response = client.get(BASE, headers=cashier_headers, follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == "/dashboard"

    def test_cashier_cannot_start(self, client, cashier_headers):
        response = client.post(f"{BASE}/start", json={"patient": PATIENT}, headers=cashier_headers, follow_redirects=False)

        assert response.status_code == 303

    def test_anonymous_unauthorized(self, client):
        assert client.get(BASE).status_code == 401


class TestStartAndChange:
    def test_start_seeds_record(self, started):
        assert started["status"] == "seeded"
        assert started["record"]["history"]["present_illness"] == "头痛三天"
        assert started["record"]["examination"]["vital_signs"]["heart_rate"] == 78

    def test_empty_session_view(self, client, doctor_headers):
        body = client.get(BASE, headers=doctor_headers).json()

        assert body["status"] == "empty"
        assert body["record"] is None

    def test_change(self, client, doctor_headers, started):
        response = _change(client, doctor_headers, "history", "past_history", "高血压5年")

        assert response.status_code == 200
        assert response.json()["dirty"] is True
        assert response.json()["record"]["history"]["past_history"] == "高血压5年"

    def test_rejected_change(self, client, doctor_headers, started):
        response = _change(client, doctor_headers, "history", "mood", "ok")

        assert response.status_code == 422
        assert response.json()["detail"]["field"] == "mood"

    def test_change_without_patient(self, client, doctor_headers):
        assert _change(client, doctor_headers, "history", "past_history", "x").status_code == 409

    def test_chief_complaint(self, client, doctor_headers, started):
        body = client.post(f"{BASE}/chief-complaint", json={"text": "头痛伴呕吐"}, headers=doctor_headers).json()

        assert body["patient"]["chief_complaint"] == "头痛伴呕吐"
        assert body["record"]["history"]["present_illness"] == "头痛伴呕吐"


class TestSaveAndComplete:
    def test_save_twice(self, client, doctor_headers, started, api_sink):
        _change(client, doctor_headers, "history", "past_history", "无")

        first = client.post(f"{BASE}/save", headers=doctor_headers).json()
        second = client.post(f"{BASE}/save", headers=doctor_headers).json()

        assert first["saved"] is True
        assert second["saved"] is False
        assert len(api_sink.writes) == 1

    def test_complete_blocked(self, client, doctor_headers, started):
        response = client.post(f"{BASE}/complete", headers=doctor_headers)

        assert response.status_code == 422
        body = response.json()
        assert body["ok"] is False
        assert body["failure"]["target"] == "diagnosis"

    def test_complete(self, client, doctor_headers, started, api_sink):
        diagnoses = [{"id": "d1", "description": "紧张型头痛", "order": 1, "reasoning": "双侧压迫样"}]
        _change(client, doctor_headers, "diagnosis", "diagnoses", diagnoses)

        response = client.post(f"{BASE}/complete", headers=doctor_headers)

        assert response.status_code == 200
        assert response.json()["ok"] is True
        assert api_sink.writes[-1].completed_at is not None
        assert client.get(BASE, headers=doctor_headers).json()["status"] == "completed"

    def test_advisories(self, client, doctor_headers, started):
        diagnoses = [{"id": "d1", "description": "头痛待查", "order": 1, "type": "differential"}]
        _change(client, doctor_headers, "diagnosis", "diagnoses", diagnoses)

        codes = {a["code"] for a in client.get(f"{BASE}/advisories", headers=doctor_headers).json()}

        assert codes == {"diagnosis_reasoning_missing", "primary_diagnosis_missing"}


class TestAttachments:
    def _upload(self, client, headers, content_type="image/png", data=b"\x89PNG0000", field="present_illness"):
        return client.post(
            f"{BASE}/attachments",
            data={"slice": "history", "field": field},
            files={"file": ("scan.png", data, content_type)},
            headers=headers,
        )

    def test_embeds_image_in_degraded_mode(self, client, doctor_headers, started):
        response = self._upload(client, doctor_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["degraded"] is True
        assert body["url"].startswith("data:image/png;base64,")

        record = client.get(BASE, headers=doctor_headers).json()["record"]
        assert record["history"]["present_illness"].startswith("头痛三天<p><img")

    def test_non_image_rejected(self, client, doctor_headers, started):
        response = self._upload(client, doctor_headers, content_type="text/plain", data=b"hi")

        assert response.status_code == 400

    def test_field_without_images(self, client, doctor_headers, started):
        assert self._upload(client, doctor_headers, field="social_history").status_code == 422

    def test_no_uploader_configured(self, client, app, doctor_headers, started):
        app.state.attachment_port = None

        assert self._upload(client, doctor_headers).status_code == 503

    def test_oversized_image_rejected(self, client, app, doctor_headers, started):
        app.state.settings = app.state.settings.model_copy(update={"max_image_bytes": 4})

        response = self._upload(client, doctor_headers, data=b"\x89PNG" + b"0" * 64)

        assert response.status_code == 400
        assert "exceeds" in response.json()["detail"]
        record = client.get(BASE, headers=doctor_headers).json()["record"]
        assert record["history"]["present_illness"] == "头痛三天"


class TestSummary:
    def test_summary(self, client, doctor_headers, started):
        diagnoses = [
            {"id": "d1", "description": "紧张型头痛", "order": 1, "reasoning": "双侧压迫样"},
            {"id": "d2", "description": "偏头痛", "order": 2, "type": "differential"},
        ]
        investigations = [
            {"id": "i1", "name": "血常规", "ordered_at": "2024-01-15T09:00:00Z"},
            {"id": "i2", "name": "头颅CT", "type": "imaging", "status": "scheduled", "ordered_at": "2024-01-15T09:00:00Z"},
        ]
        _change(client, doctor_headers, "diagnosis", "diagnoses", diagnoses)
        _change(client, doctor_headers, "investigations", "investigations", investigations)

        response = client.get(f"{BASE}/summary", headers=doctor_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["patient"]["id"] == "P2024001"
        assert body["primary_diagnosis"] == "紧张型头痛"
        assert body["diagnoses"]["total"] == 2
        assert body["diagnoses"]["differential"] == 1
        assert body["pending_investigations"] == ["血常规", "头颅CT"]
        assert body["reported_investigations"] == []
        assert {a["code"] for a in body["advisories"]} == {"diagnosis_reasoning_missing"}

    def test_summary_without_patient(self, client, doctor_headers):
        assert client.get(f"{BASE}/summary", headers=doctor_headers).status_code == 409
