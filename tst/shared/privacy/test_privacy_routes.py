"""Tests for the GET /api/privacy/notice endpoint."""


class TestPrivacyNotice:
    def test_defaults_to_german(self, client):
        response = client.get("/api/privacy/notice")
        assert response.status_code == 200
        data = response.json()
        assert data["language"] == "de"
        assert data["version"] == "2025-01-01"
        assert "DSGVO" in data["notice"]["required"]
        assert data["withdrawal"]["subject"] == "Widerruf der Einwilligung zur Datenverarbeitung"
        assert data["retention_periods"]["contact-inquiries"] == "3 years"

    def test_english(self, client):
        data = client.get("/api/privacy/notice", params={"language": "en"}).json()
        assert data["language"] == "en"
        assert data["withdrawal"]["email"] == "hello@aykutspohr.de"

    def test_unsupported_language(self, client):
        response = client.get("/api/privacy/notice", params={"language": "fr"})
        assert response.status_code == 422
