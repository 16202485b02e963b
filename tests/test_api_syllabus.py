import pytest

SYLLABUS = b"""BIO 210
Molecular Biology
Instructor: Dr. Rosalind Franklin
Spring 2025
Email: rfranklin@college.edu
Phone: (555) 867-5309
Final exam is worth 40% of the grade
"""


@pytest.fixture(autouse=True)
def no_ai_parser(monkeypatch):
    from courseconnect.modules.syllabus import parser

    async def unavailable(text, file_name):
        raise RuntimeError("model not configured")

    monkeypatch.setattr(parser, "parse_with_ai", unavailable)


def _upload(client, headers=None, name="bio210.txt", data=SYLLABUS, ctype="text/plain"):
    return client.post(
        "/api/syllabus/upload", files={"file": (name, data, ctype)}, headers=headers or {}
    )


class TestSyllabusUpload:
    def test_anonymous_upload_parses_without_saving(self, client):
        resp = _upload(client)
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["saved"] is False
        assert body["id"] is None
        assert body["fileType"] == "text"
        result = body["result"]
        assert result["source"] == "heuristic"
        assert result["requiresReview"] is True
        assert result["data"]["courseInfo"]["courseCode"] == "BIO210"

    def test_sample_is_redacted(self, client):
        body = _upload(client).json()
        flat = str(body["sample"])
        assert "rfranklin@college.edu" not in flat
        assert "867-5309" not in flat
        assert "[REDACTED_EMAIL]" in flat
        assert body["sample"]["snippets"]["keywordSamples"] == [
            "Final exam is worth 40% of the grade"
        ]

    def test_signed_in_upload_is_saved(self, client, auth_headers):
        body = _upload(client, auth_headers).json()
        assert body["saved"] is True
        assert isinstance(body["id"], int)

        rows = client.get("/api/syllabus", headers=auth_headers).json()
        assert len(rows) == 1
        assert rows[0]["courseCode"] == "BIO210"
        assert rows[0]["fileName"] == "bio210.txt"

    def test_listing_requires_login(self, client):
        assert client.get("/api/syllabus").status_code == 401

    def test_unsupported_file(self, client):
        resp = _upload(client, name="syllabus.zip", ctype="application/zip")
        assert resp.status_code == 400

    def test_empty_file(self, client):
        resp = _upload(client, data=b"   ")
        assert resp.status_code == 400
