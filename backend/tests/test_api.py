import json

import pytest
from fastapi.testclient import TestClient

from esg_ddq.api.dependencies import get_gateway, get_kb, get_settings
from esg_ddq.config import Settings
from esg_ddq.services.exporters import DOCX_MEDIA_TYPE
from esg_ddq.services.prompts.ddq import build_ddq_system_prompt
from esg_ddq.services.prompts.im import build_im_system_prompt
from esg_ddq.services.prompts.research import NO_INFORMATION_SENTINEL, RESEARCH_SYSTEM_PROMPT
from main import app

from conftest import CANONICAL_DDQ, CANONICAL_IM, StubKnowledgeBase

PROFILE_REPLY = {
    "companyName": "Acme Health",
    "sector": "Healthcare",
    "subSector": "Telemedicine",
    "countriesOfOperation": "Vietnam, Singapore, Thailand",
    "numberOfEmployees": "50-100",
    "businessActivities": "Operates a telemedicine platform that connects patients with licensed doctors.",
    "productDescription": "Video consultations and e-prescriptions sold to patients through a mobile app.",
}


class Replies:
    """Per-test replies keyed by the stage the system prompt identifies."""

    def __init__(self):
        self.ddq = CANONICAL_DDQ
        self.im = CANONICAL_IM
        self.profile = PROFILE_REPLY

    def __call__(self, prompt, system):
        if system == RESEARCH_SYSTEM_PROMPT:
            return NO_INFORMATION_SENTINEL
        if system == build_ddq_system_prompt():
            return json.dumps(self.ddq)
        if system == build_im_system_prompt():
            return json.dumps(self.im)
        return json.dumps(self.profile)


@pytest.fixture
def replies():
    return Replies()


@pytest.fixture
def client(test_settings, make_provider, make_gateway, replies):
    gateway = make_gateway(make_provider(replies))
    knowledge_base = StubKnowledgeBase()
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_gateway] = lambda: gateway
    app.dependency_overrides[get_kb] = lambda: knowledge_base
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def profile_json(golden_profile):
    return golden_profile.model_dump(by_alias=True)


def _assert_error_body(response, status_code):
    assert response.status_code == status_code
    body = response.json()
    assert body["error"]
    assert body["requestId"] == response.headers["X-Request-ID"]
    return body


def test_generate_ddq(client, profile_json):
    response = client.post("/api/generate-ddq", json={"companyInfo": profile_json, "extractedText": "Pitch deck"})

    assert response.status_code == 200
    assert response.json() == CANONICAL_DDQ
    assert response.headers["X-Request-ID"]


def test_generate_ddq_requires_company_info(client):
    body = _assert_error_body(client.post("/api/generate-ddq", json={}), 400)
    assert body["error"] == "Company information is required"


def test_generate_ddq_without_credentials(client, profile_json, tmp_path):
    app.dependency_overrides[get_settings] = lambda: Settings(
        _env_file=None, openai_api_key="", anthropic_api_key="", log_dir=tmp_path
    )

    body = _assert_error_body(client.post("/api/generate-ddq", json={"companyInfo": profile_json}), 500)
    assert "OPENAI_API_KEY or ANTHROPIC_API_KEY" in body["error"]


def test_generate_ddq_schema_mismatch_is_bad_gateway(client, replies, profile_json):
    replies.ddq = {**CANONICAL_DDQ, "environment": CANONICAL_DDQ["environment"][:1]}

    body = _assert_error_body(client.post("/api/generate-ddq", json={"companyInfo": profile_json}), 502)
    assert body["validationErrors"]


def test_request_id_header_is_honoured(client):
    response = client.post("/api/generate-ddq", json={}, headers={"X-Request-ID": "req_upstream"})
    assert response.json()["requestId"] == "req_upstream"


def test_generate_im(client, profile_json):
    response = client.post("/api/generate-im", json={"companyInfo": profile_json, "ddqResult": CANONICAL_DDQ})

    assert response.status_code == 200
    assert response.json() == CANONICAL_IM


def test_generate_im_without_ddq(client, profile_json):
    _assert_error_body(client.post("/api/generate-im", json={"companyInfo": profile_json}), 400)


def test_generate_im_with_empty_ddq(client, profile_json):
    empty = {"riskManagement": [], "environment": [], "social": [], "governance": []}
    response = client.post("/api/generate-im", json={"companyInfo": profile_json, "ddqResult": empty})

    body = _assert_error_body(response, 400)
    assert "Generate the DDQ first" in body["error"]


def test_extract_info(client):
    response = client.post("/api/extract-info", json={"text": "Acme Health is a telemedicine company."})

    assert response.status_code == 200
    body = response.json()
    assert body["companyName"] == "Acme Health"
    assert body["countriesOfOperation"] == ["Vietnam", "Singapore", "Thailand"]
    assert body["requestId"] == response.headers["X-Request-ID"]


def test_extract_info_blank_text(client):
    _assert_error_body(client.post("/api/extract-info", json={"text": "   "}), 400)
    _assert_error_body(client.post("/api/extract-info", json={}), 400)


def test_extract_info_incomplete_profile(client, replies):
    replies.profile = {**PROFILE_REPLY, "sector": ""}

    body = _assert_error_body(client.post("/api/extract-info", json={"text": "Acme Health."}), 422)
    assert body["missingFields"] == ["sector is missing or empty"]


def test_upload_text_document(client):
    response = client.post("/api/upload", files={"file": ("notes.txt", b"Acme Health company overview", "text/plain")})

    assert response.status_code == 200
    body = response.json()
    assert body["text"] == "Acme Health company overview"
    assert body["fileName"] == "notes.txt"
    assert body["metadata"]["parser"] == "text"


def test_upload_too_large(client, test_settings):
    test_settings.max_file_size_mb = 0.0001

    response = client.post("/api/upload", files={"file": ("big.txt", b"x" * 1024, "text/plain")})

    _assert_error_body(response, 413)


def test_upload_unsupported_type(client):
    response = client.post("/api/upload", files={"file": ("deck.pptx", b"binary", "application/vnd.ms-powerpoint")})
    _assert_error_body(response, 400)


def test_upload_empty_document(client):
    response = client.post("/api/upload", files={"file": ("blank.txt", b"   ", "text/plain")})
    _assert_error_body(response, 422)


def test_download_ddq(client):
    response = client.post("/api/download-ddq", json={"ddqResult": CANONICAL_DDQ})

    assert response.status_code == 200
    assert response.headers["content-type"] == DOCX_MEDIA_TYPE
    assert 'filename="ESG_DDQ.docx"' in response.headers["content-disposition"]
    assert response.content[:2] == b"PK"


def test_download_im(client):
    response = client.post("/api/download-im", json={"imResult": CANONICAL_IM})

    assert response.status_code == 200
    assert 'filename="ESG_IM.docx"' in response.headers["content-disposition"]


def test_download_requires_result(client):
    _assert_error_body(client.post("/api/download-ddq", json={}), 400)


def test_health(client):
    body = client.get("/api/health").json()

    assert body["status"] == "healthy"
    assert body["configured_providers"] == ["openai"]
    assert body["knowledge_base_loaded"] is True


def test_metrics_endpoint(client, profile_json):
    client.post("/api/generate-ddq", json={"companyInfo": profile_json})
    response = client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert "assessments_total" in response.text


def test_unknown_route_uses_error_body(client):
    _assert_error_body(client.get("/api/nope"), 404)
