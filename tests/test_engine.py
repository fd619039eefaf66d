# File: tests/test_engine.py
"""Сценарии ScanEngine от запроса до ответа: обход, агрегация, ИИ и исходы ошибок."""
import asyncio

import pytest

from access_scout.engine import validation_message
from access_scout.report.assembler import SCAN_METHOD, SCANNER_VERSION
from access_scout.schemas import ScanRequest

from conftest import ANALYSIS_JSON, EXPLANATION_JSON, FakeAIService, FakeResponse, failing_for, violation


def request_for(plan="free", **overrides):
    data = {
        "website_url": "https://example.com",
        "scan_id": "SCAN_abc",
        "customer_id": "cust-7",
        "plan": plan,
        "email": "owner@example.com",
        "company_name": "Example Ltd",
    }
    data.update(overrides)
    return ScanRequest(**data)


@pytest.mark.asyncio()
async def test_free_plan_scan(make_engine, small_site, sleep_recorder):
    service = FakeAIService()
    engine = make_engine(small_site, ai_service=service)
    result = await engine.run(request_for("free", max_pages=10))

    assert result["success"] is True
    assert result["status"] == "completed"
    assert result["pages_scanned"] == 3
    assert result["total_violations"] == 2
    assert result["critical_count"] == 1
    assert result["serious_count"] == 1
    assert result["moderate_count"] == result["minor_count"] == result["unknown_count"] == 0
    assert result["compliance_score"] == 90
    assert result["ai_level"] == "none"
    assert result["deep_analysis"] == []
    assert all(v["ai_explanation"] is None for v in result["violations"])
    assert [v["violation_id"] for v in result["violations"]] == ["VIO_abc_0", "VIO_abc_1"]
    assert result["max_pages"] == 10
    assert service.calls == []
    assert sleep_recorder.delays == []


@pytest.mark.asyncio()
async def test_metadata_echoed(make_engine, small_site):
    result = await make_engine(small_site).run(request_for("free"))
    assert result["scan_id"] == "SCAN_abc"
    assert result["customer_id"] == "cust-7"
    assert result["email"] == "owner@example.com"
    assert result["company_name"] == "Example Ltd"
    assert result["website_url"] == "https://example.com"
    assert result["plan"] == "free"
    assert result["scanner_version"] == SCANNER_VERSION
    assert result["scan_method"] == SCAN_METHOD
    assert result["scan_date"]
    assert isinstance(result["scan_duration_seconds"], int)
    assert result["scanned_urls"][0] == "https://example.com/"


@pytest.mark.asyncio()
async def test_guest_plan_explains_rules(make_engine, small_site, sleep_recorder):
    service = FakeAIService()
    result = await make_engine(small_site, ai_service=service).run(request_for("guest"))

    assert result["ai_level"] == "basic"
    assert len(service.calls) == 2
    assert all(v["ai_explanation"]["fix_steps"] for v in result["violations"])
    assert result["deep_analysis"] == []
    assert sleep_recorder.delays == [0.5]


@pytest.mark.asyncio()
async def test_essentials_plan_reviews_important_pages(make_engine, small_site, sleep_recorder):
    small_site["https://example.com/contact"].body = '<form><input name="email" placeholder="Email"></form>'
    service = FakeAIService()
    result = await make_engine(small_site, ai_service=service).run(request_for("essentials"))

    assert result["ai_level"] == "advanced"
    assert [item["url"] for item in result["deep_analysis"]] == [
        "https://example.com/",
        "https://example.com/contact",
    ]
    assert all(item["status"] == "ok" for item in result["deep_analysis"])
    assert result["deep_analysis"][0]["analysis"]["summary"]
    assert sleep_recorder.delays == [0.5, 1.0]


@pytest.mark.asyncio()
async def test_ai_failure_keeps_scan_successful(make_engine, small_site):
    service = FakeAIService(failing_for("Rule: label"))
    result = await make_engine(small_site, ai_service=service).run(request_for("guest"))

    assert result["success"] is True
    explanations = {v["rule_id"]: v["ai_explanation"] for v in result["violations"]}
    assert explanations["label"] is None
    assert explanations["image-alt"]["plain_language"]


@pytest.mark.asyncio()
async def test_unexpected_ai_error_keeps_scan_successful(make_engine, small_site):
    def respond(prompt, image):
        if "Rule: label" in prompt:
            raise asyncio.TimeoutError()
        return EXPLANATION_JSON

    result = await make_engine(small_site, ai_service=FakeAIService(respond)).run(request_for("guest"))

    assert result["success"] is True
    explanations = {v["rule_id"]: v["ai_explanation"] for v in result["violations"]}
    assert explanations["label"] is None
    assert explanations["image-alt"]["plain_language"]


@pytest.mark.asyncio()
async def test_deeply_nested_ai_reply_keeps_scan_successful(make_engine, small_site):
    nested = '{"plain_language": ' + "[" * 100000 + "]" * 100000 + "}"
    service = FakeAIService(lambda prompt, image: nested)
    result = await make_engine(small_site, ai_service=service).run(request_for("guest"))

    assert result["success"] is True
    assert result["total_violations"] == 2
    assert all(v["ai_explanation"] is None for v in result["violations"])


@pytest.mark.asyncio()
async def test_page_analysis_failure_keeps_other_pages(make_engine, small_site):
    small_site["https://example.com/contact"].body = '<form><input name="email"></form>'

    def respond(prompt, image):
        if image and "Page: https://example.com/contact" in prompt:
            return "The page looks mostly fine."
        return ANALYSIS_JSON if image else EXPLANATION_JSON

    result = await make_engine(small_site, ai_service=FakeAIService(respond)).run(request_for("essentials"))

    assert result["success"] is True
    home, contact = result["deep_analysis"]
    assert home["status"] == "ok"
    assert home["analysis"]["summary"] == "Form fields rely on placeholders."
    assert contact["url"] == "https://example.com/contact"
    assert contact["status"] == "unparseable"
    assert contact["analysis"] is None

@pytest.mark.asyncio()
async def test_no_ai_service_configured(make_engine, small_site, sleep_recorder):
    result = await make_engine(small_site, ai_service=None).run(request_for("professional"))
    assert result["success"] is True
    assert result["ai_level"] == "advanced"
    assert all(v["ai_explanation"] is None for v in result["violations"])
    assert [item["status"] for item in result["deep_analysis"]] == ["call_failed"]
    assert result["deep_analysis"][0]["analysis"] is None
    assert sleep_recorder.delays == []


@pytest.mark.asyncio()
async def test_max_pages_override(make_engine, small_site):
    result = await make_engine(small_site).run(request_for("free", max_pages=2))
    assert result["pages_scanned"] == 2
    assert result["max_pages"] == 2


@pytest.mark.asyncio()
async def test_failed_pages_reported(make_engine, small_site):
    small_site["https://example.com/about"].error = "net::ERR_ABORTED"
    result = await make_engine(small_site).run(request_for("free"))
    assert result["success"] is True
    assert result["pages_scanned"] == 2
    assert result["failed_urls"] == {"https://example.com/about": "net::ERR_ABORTED"}


@pytest.mark.asyncio()
async def test_unreachable_site(make_engine):
    site = {"https://example.com/": FakeResponse(error="net::ERR_NAME_NOT_RESOLVED")}
    result = await make_engine(site).run(request_for("guest"))

    assert result["success"] is False
    assert result["status"] == "unreachable"
    assert result["violations"] == []
    assert result["pages_scanned"] == 0
    assert "https://example.com" in result["error"]
    assert "ERR_NAME_NOT_RESOLVED" in result["error_details"]
    assert result["scan_id"] == "SCAN_abc"


@pytest.mark.asyncio()
async def test_browser_failure_is_fatal(make_engine, small_site):
    result = await make_engine(small_site, fail_on_start=True).run(request_for("free"))
    assert result["success"] is False
    assert result["status"] == "failed"
    assert result["compliance_score"] == 0
    assert result["error"] == "browser launch failed"
    assert result["customer_id"] == "cust-7"


@pytest.mark.asyncio()
async def test_run_payload_status_codes(make_engine, small_site):
    engine = make_engine(small_site)
    payload = {
        "website_url": "example.com",
        "scan_id": "SCAN_1",
        "customer_id": 42,
        "plan": "free",
        "unexpected": "ignored",
    }
    status, body = await engine.run_payload(payload)
    assert status == 200
    assert body["customer_id"] == "42"
    assert body["website_url"] == "https://example.com"

    status, body = await engine.run_payload({"scan_id": "SCAN_1", "customer_id": "c", "plan": "free"})
    assert status == 400
    assert body["status"] == "failed"
    assert body["error"] == "website_url is required"

    status, body = await engine.run_payload({**payload, "plan": "enterprise"})
    assert status == 400
    assert body["error"].startswith("plan:")


@pytest.mark.asyncio()
async def test_run_payload_fatal_is_500(make_engine, small_site):
    engine = make_engine(small_site, fail_on_start=True)
    status, body = await engine.run_payload(
        {"website_url": "https://example.com", "scan_id": "S", "customer_id": "c", "plan": "free"}
    )
    assert status == 500
    assert body["success"] is False


@pytest.mark.asyncio()
async def test_unreachable_is_200(make_engine):
    engine = make_engine({})
    status, body = await engine.run_payload(
        {"website_url": "https://example.com", "scan_id": "S", "customer_id": "c", "plan": "free"}
    )
    assert status == 200
    assert body["status"] == "unreachable"


def test_validation_message_lists_missing_fields():
    from pydantic import ValidationError

    with pytest.raises(ValidationError) as excinfo:
        ScanRequest.model_validate({"plan": "free"})
    message = validation_message(excinfo.value)
    assert "website_url is required" in message
    assert "scan_id is required" in message
    assert "customer_id is required" in message


@pytest.mark.parametrize(
    "max_pages,budget",
    [(None, 50), (0, 50), (-3, 50), (1, 1), (10, 10), (50, 50), (51, 50), (1000, 50)],
)
def test_page_budget(max_pages, budget):
    assert request_for(max_pages=max_pages).page_budget == budget


@pytest.mark.parametrize(
    "plan,level",
    [("free", "none"), ("guest", "basic"), ("essentials", "advanced"), ("professional", "advanced")],
)
def test_plan_levels(plan, level):
    assert request_for(plan).enrichment_level.value == level


def test_rejects_non_http_url():
    from pydantic import ValidationError

    with pytest.raises(ValidationError):
        request_for(website_url="ftp://example.com")
    with pytest.raises(ValidationError):
        request_for(website_url="   ")
