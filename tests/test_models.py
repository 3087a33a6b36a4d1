from service_agents.models import CheckResult, Section, Severity


def _section() -> Section:
    s = Section(title="Services")
    s.extend(
        [
            CheckResult(rule="SVC-001", ok=True, message="OrderAgent -> https://orders.example/", severity=Severity.INFO, service="OrderAgent"),
            CheckResult(rule="SVC-TLS", ok=False, message="plain http", severity=Severity.WARN, service="CustomerAgent"),
            CheckResult(rule="SVC-001", ok=False, message="url is required", service="StockAgent"),
            CheckResult(rule="SVC-AUTH", ok=False, message="api_key is required", service="BillingAgent"),
        ]
    )
    return s


def test_levels():
    assert CheckResult(rule="R", ok=True, message="").level == "ok"
    assert CheckResult(rule="R", ok=False, message="", severity=Severity.WARN).level == "warn"
    assert CheckResult(rule="R", ok=False, message="").level == "error"
    assert CheckResult(rule="R", ok=False, message="", severity=Severity.INFO).level == "ok"


def test_counts_and_failures():
    s = _section()

    assert s.counts() == {"ok": 1, "warn": 1, "error": 2}
    assert s.has_failures()
    assert s.failed_services() == ["BillingAgent", "StockAgent"]


def test_empty_section_has_zero_counts():
    s = Section(title="Agents")

    assert s.counts() == {"ok": 0, "warn": 0, "error": 0}
    assert not s.has_failures()
    assert s.failed_services() == []
