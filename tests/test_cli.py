from pathlib import Path

from typer.testing import CliRunner

from sample_agents import write_settings
from service_agents.cli import app

runner = CliRunner()


def test_check_valid_config(tmp_path: Path):
    path = write_settings(tmp_path / "serviceagents.json", {"OrderAgent": {"url": "https://orders.example/api"}})

    result = runner.invoke(app, ["check", str(path)])

    assert result.exit_code == 0, result.output


def test_check_reports_invalid_entry(tmp_path: Path):
    path = write_settings(tmp_path / "serviceagents.json", {"OrderAgent": {"headers": {}}})

    result = runner.invoke(app, ["check", str(path)])

    assert result.exit_code == 1


def test_check_missing_file(tmp_path: Path):
    result = runner.invoke(app, ["check", str(tmp_path / "nope.json")])
    assert result.exit_code == 1


def test_check_fail_on_warn(tmp_path: Path):
    path = write_settings(tmp_path / "serviceagents.json", {"OrderAgent": {"url": "http://orders.local/api"}})

    assert runner.invoke(app, ["check", str(path)]).exit_code == 0
    assert runner.invoke(app, ["check", str(path), "--fail-on-warn"]).exit_code == 2


def test_check_resolves_agents_in_module(tmp_path: Path):
    path = write_settings(
        tmp_path / "serviceagents.json",
        {"OrderAgent": {"url": "https://orders.example"}, "CustomerAgent": {"url": "https://customers.example"}},
    )

    ok = runner.invoke(app, ["check", str(path), "--module", "sample_agents"])
    assert ok.exit_code == 0, ok.output

    path = write_settings(path, {"InvoiceAgent": {"url": "https://invoices.example"}})
    missing = runner.invoke(app, ["check", str(path), "--module", "sample_agents"])
    assert missing.exit_code == 1


def test_list_services(tmp_path: Path):
    path = write_settings(
        tmp_path / "serviceagents.json",
        {"ServiceAgents": {"OrderAgent": {"url": "https://orders.example", "authScheme": "Bearer"}}},
    )

    result = runner.invoke(app, ["list", str(path)])

    assert result.exit_code == 0, result.output
    assert "OrderAgent" in result.output
    assert "bearer" in result.output


def test_list_invalid_config(tmp_path: Path):
    path = write_settings(tmp_path / "serviceagents.json", {"OrderAgent": {}})
    result = runner.invoke(app, ["list", str(path)])
    assert result.exit_code == 1
