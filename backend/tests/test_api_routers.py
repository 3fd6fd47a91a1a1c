"""Tests for API router endpoints."""

import base64
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from impact_api.dependencies import get_controller
from impact_api.main import app, run, settings
from impact_api.services.transitions import initial_state
from impact_api.services.wizard import WizardController

client = TestClient(app)


@pytest.fixture(autouse=True)
def use_controller(controller):
    """Route every request to a fresh controller with no reports."""
    app.dependency_overrides[get_controller] = lambda: controller
    yield controller
    app.dependency_overrides.clear()


def fill_details(**details):
    body = {"campaignName": "Flood Relief", "location": "Riverside", **details}
    return client.patch("/wizard/details", json=body)


class TestHealthEndpoints:
    """Tests for health and root endpoints."""

    def test_health_check_returns_healthy(self):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "impact-report-api"

    def test_root_returns_api_info(self):
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Impact Report API"
        assert data["docs"] == "/docs"

    @patch("impact_api.main.uvicorn.run")
    def test_run_serves_app_with_uvicorn(self, mock_run):
        run()

        mock_run.assert_called_once_with(
            "impact_api.main:app", host=settings.host, port=settings.port,
        )


class TestViewsRouter:
    """Tests for state, navigation and dashboard endpoints."""

    def test_get_state_uses_camel_case(self):
        response = client.get("/state")

        assert response.status_code == 200
        data = response.json()
        assert data["view"] == "landing"
        assert data["wizardStep"] == 1
        assert data["draft"]["campaignName"] == ""
        assert data["draft"]["currency"] == "USD"

    def test_navigate(self):
        response = client.post("/views/navigate", json={"view": "how-it-works"})

        assert response.status_code == 200
        assert response.json()["view"] == "how-it-works"
        assert response.json()["scrollResets"] == 1

    def test_navigate_to_unknown_view_is_invalid(self):
        response = client.post("/views/navigate", json={"view": "settings"})

        assert response.status_code == 422

    def test_view_report_without_selection_is_rejected(self):
        response = client.post("/views/navigate", json={"view": "view-report"})

        assert response.status_code == 409
        assert response.json()["detail"] == "No report selected"

    def test_dashboard_with_sample_report(self):
        app.dependency_overrides[get_controller] = lambda: WizardController(initial_state())

        response = client.get("/dashboard")

        assert response.status_code == 200
        data = response.json()
        assert data["stats"] == {"totalReports": 1, "livesImpacted": 500, "fundsDistributed": 15000000}
        assert data["reports"][0]["campaignName"] == "Sumatera Disaster Relief 2025"


class TestWizardRouter:
    """Tests for the wizard endpoints."""

    def test_new_report_opens_receipt_step(self):
        response = client.post("/wizard/new")

        assert response.status_code == 200
        assert response.json()["view"] == "create-receipt"

    def test_continue_and_back(self):
        client.post("/wizard/new")

        assert client.post("/wizard/continue").json()["view"] == "create-photos"
        assert client.post("/wizard/back").json()["view"] == "create-receipt"
        assert client.post("/wizard/back").status_code == 409

    @patch("impact_api.services.wizard.extract_receipt_data")
    def test_upload_receipt(self, mock_extract, acme_receipt):
        mock_extract.return_value = acme_receipt

        response = client.post(
            "/wizard/receipts",
            files={"file": ("receipt.png", b"fake-image", "image/png")},
        )

        assert response.status_code == 200
        receipt = response.json()["draft"]["receipts"][0]
        assert receipt["storeName"] == "ACME Mart"
        assert receipt["trustScore"] == 90
        assert receipt["items"] == [{"name": "Rice", "quantity": 2, "price": 60}]
        mock_extract.assert_called_once_with(b"fake-image", "image/png")

    def test_upload_receipt_requires_file(self):
        response = client.post("/wizard/receipts")

        assert response.status_code == 422

    @patch("impact_api.services.wizard.extract_receipt_data")
    def test_upload_receipt_base64(self, mock_extract, idr_receipt):
        mock_extract.return_value = idr_receipt

        response = client.post(
            "/wizard/receipts/base64",
            json={"data": base64.b64encode(b"fake-image").decode("utf-8")},
        )

        assert response.status_code == 200
        assert response.json()["draft"]["currency"] == "IDR"
        mock_extract.assert_called_once_with(b"fake-image", "image/jpeg")

    def test_upload_receipt_bad_base64(self):
        response = client.post("/wizard/receipts/base64", json={"data": "not base64!"})

        assert response.status_code == 400
        assert "Invalid base64 data" in response.json()["detail"]

    @patch("impact_api.services.wizard.caption_photo")
    def test_upload_photo(self, mock_caption):
        mock_caption.return_value = "Volunteers distribute rice."

        response = client.post(
            "/wizard/photos",
            files={"file": ("photo.jpg", b"photo", "image/jpeg")},
        )

        assert response.status_code == 200
        photo = response.json()["draft"]["photos"][0]
        assert photo["caption"] == "Volunteers distribute rice."
        assert photo["base64"] == base64.b64encode(b"photo").decode("utf-8")
        assert photo["mediaType"] == "image/jpeg"

    @patch("impact_api.services.wizard.caption_photo")
    def test_upload_photo_base64_keeps_media_type(self, mock_caption):
        mock_caption.return_value = "Blankets handed out."

        response = client.post(
            "/wizard/photos/base64",
            json={"data": base64.b64encode(b"photo").decode("utf-8"), "mediaType": "image/png"},
        )

        assert response.status_code == 200
        assert response.json()["draft"]["photos"][0]["mediaType"] == "image/png"

    @patch("impact_api.services.wizard.summarize_voice_note")
    def test_voice_note(self, mock_summary):
        mock_summary.return_value = "The team helped forty families."

        assert client.post("/wizard/voice-note/start").json()["recording"] is True
        response = client.post(
            "/wizard/voice-note/stop",
            files={"file": ("note.webm", b"audio", "audio/webm")},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["recording"] is False
        assert data["draft"]["voiceNoteText"] == "The team helped forty families."
        mock_summary.assert_called_once_with(b"audio", "audio/webm")

    def test_voice_note_stop_without_audio_alerts(self):
        client.post("/wizard/voice-note/start")

        response = client.post("/wizard/voice-note/stop")

        assert response.status_code == 400
        assert response.json()["detail"] == "Could not access microphone."

    def test_location_success(self):
        fill_details()

        response = client.post("/wizard/location", json={"lat": -0.95, "lng": 100.35})

        assert response.status_code == 200
        draft = response.json()["draft"]
        assert draft["location"] == "Riverside (GPS Verified)"
        assert draft["coordinates"] == {"lat": -0.95, "lng": 100.35}

    def test_location_failure_alerts(self):
        fill_details()

        response = client.post("/wizard/location", json={"error": "Permission denied"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Could not retrieve GPS location."
        assert client.get("/state").json()["draft"]["location"] == "Riverside"

    def test_details_validation(self):
        assert fill_details(language="Klingon").status_code == 422
        assert fill_details(currency="MXN").status_code == 422
        assert fill_details(beneficiariesCount=-5).status_code == 422

        response = fill_details(beneficiariesCount=10, language="Arabic", currency="SAR")
        draft = response.json()["draft"]
        assert (draft["beneficiariesCount"], draft["language"], draft["currency"]) == (10, "Arabic", "SAR")

    def test_finalize_blocked_without_location(self):
        client.patch("/wizard/details", json={"campaignName": "Flood Relief"})

        response = client.post("/wizard/finalize")

        assert response.status_code == 409
        assert response.json()["detail"] == "Campaign name and location are required"

    @patch("impact_api.services.wizard.generate_impact_story")
    def test_finalize(self, mock_story):
        mock_story.return_value = "Ten families received rice."
        fill_details(beneficiariesCount=10)

        response = client.post("/wizard/finalize")

        assert response.status_code == 200
        data = response.json()
        assert data["campaignName"] == "Flood Relief"
        assert data["status"] == "draft"
        assert data["totalSpend"] == 0
        assert data["story"] == "Ten families received rice."

        state = client.get("/state").json()
        assert state["view"] == "view-report"
        assert state["selectedReportId"] == data["id"]
        assert state["draft"]["campaignName"] == ""


class TestReportsRouter:
    """Tests for the report endpoints."""

    @pytest.fixture
    def seeded(self):
        seeded_controller = WizardController(initial_state())
        app.dependency_overrides[get_controller] = lambda: seeded_controller
        return seeded_controller

    def test_list_reports(self, seeded):
        response = client.get("/reports")

        assert response.status_code == 200
        assert [report["id"] for report in response.json()] == ["1"]

    def test_get_report_view(self, seeded):
        response = client.get("/reports/1")

        assert response.status_code == 200
        data = response.json()
        assert data["report"]["campaignName"] == "Sumatera Disaster Relief 2025"
        assert data["lineItems"] == [
            {"name": "Rice Bags (20kg)", "quantity": 20, "price": 250000, "lineTotal": 5000000},
        ]
        assert data["receipts"][0]["trustLevel"] == "high"
        assert data["photoCount"] == 2

    def test_get_unknown_report(self, seeded):
        response = client.get("/reports/missing")

        assert response.status_code == 404
        assert response.json()["detail"] == "Report not found: missing"

    def test_select_report(self, seeded):
        response = client.post("/reports/1/select")

        assert response.status_code == 200
        assert response.json()["view"] == "view-report"
        assert response.json()["selectedReportId"] == "1"

    @patch("impact_api.services.wizard.translate_story")
    def test_translate_selected(self, mock_translate, seeded):
        mock_translate.return_value = "Kami berhasil menyalurkan bantuan."
        client.post("/reports/1/select")

        response = client.post("/reports/selected/translate", json={"language": "Indonesian"})

        assert response.status_code == 200
        report = response.json()["report"]
        assert report["story"] == "Kami berhasil menyalurkan bantuan."
        assert report["language"] == "Indonesian"
        assert report["totalSpend"] == 15000000
        assert client.get("/reports").json()[0]["language"] == "Indonesian"

    def test_translate_unsupported_language(self, seeded):
        client.post("/reports/1/select")

        response = client.post("/reports/selected/translate", json={"language": "Elvish"})

        assert response.status_code == 422

    def test_translate_without_selection(self, seeded):
        response = client.post("/reports/selected/translate", json={"language": "French"})

        assert response.status_code == 409
