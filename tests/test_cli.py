import json
from datetime import datetime, timezone

import pytest
from click.testing import CliRunner

from traffic_analytics.cli import cli
from traffic_analytics.utils.constants import ENV_VARS

NOW = datetime(2024, 2, 10, 12, 30, tzinfo=timezone.utc).timestamp()


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for env_var in ENV_VARS:
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def records_file(tmp_path, make_document):
    lines = [
        json.dumps(make_document(NOW - 600, hostname="a.example.com")),
        json.dumps(make_document(NOW - 3600, hostname="a.example.com", status=503)),
        json.dumps(make_document(NOW - 7200, hostname="b.example.com", ip="10.0.0.9")),
        "garbage",
    ]
    path = tmp_path / "records.jsonl"
    path.write_text("\n".join(lines))
    return path


class TestReportCommand:
    """Test the report command"""

    def test_json_output(self, runner, records_file, tmp_path):
        output = tmp_path / "report.json"
        result = runner.invoke(
            cli,
            [
                "report",
                str(records_file),
                "--period",
                "hourly",
                "--now",
                str(NOW),
                "--format",
                "json",
                "--output",
                str(output),
            ],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text())
        assert [b["name"] for b in data["endpointAreaChart"]] == [
            "08:00",
            "09:00",
            "10:00",
            "11:00",
            "12:00",
        ]
        assert [b["req"] for b in data["endpointAreaChart"]] == [0, 0, 1, 1, 1]
        assert data["endpointRadialChart"][0]["subject"] == "RPS"

    def test_host_filter(self, runner, records_file, tmp_path):
        output = tmp_path / "report.json"
        result = runner.invoke(
            cli,
            [
                "report",
                str(records_file),
                "-p",
                "hourly",
                "-H",
                "b.example.com",
                "--now",
                str(NOW),
                "-fmt",
                "json",
                "-o",
                str(output),
            ],
        )

        assert result.exit_code == 0, result.output
        nodes = [n["name"] for n in json.loads(output.read_text())["endpointSankeyChart"]["nodes"]]
        assert nodes[0] == "10.0.0.9"
        assert "a.example.com" not in nodes

    def test_text_output(self, runner, records_file):
        result = runner.invoke(
            cli, ["report", str(records_file), "--period", "daily", "--now", str(NOW)]
        )

        assert result.exit_code == 0, result.output
        assert "Requests (daily)" in result.output
        assert "Traffic Flow" in result.output
        assert "Latency" in result.output

    def test_custom_period_requires_dates(self, runner, records_file):
        result = runner.invoke(cli, ["report", str(records_file), "--period", "custom"])

        assert result.exit_code == 1
        assert "startDate" in result.output

    def test_custom_period(self, runner, records_file, tmp_path):
        output = tmp_path / "report.json"
        result = runner.invoke(
            cli,
            [
                "report",
                str(records_file),
                "--period",
                "custom",
                "--start",
                str(NOW - 4000),
                "--end",
                str(NOW),
                "--now",
                str(NOW),
                "--format",
                "json",
                "--output",
                str(output),
            ],
        )

        assert result.exit_code == 0, result.output
        chart = json.loads(output.read_text())["endpointAreaChart"]
        assert chart[-1] == {"name": "Feb", "req": 2, "error": 1}

    def test_no_records_in_window(self, runner, records_file):
        result = runner.invoke(
            cli, ["report", str(records_file), "--period", "hourly", "--now", str(NOW + 86400)]
        )

        assert result.exit_code == 1

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(cli, ["report", str(tmp_path / "missing.jsonl")])
        assert result.exit_code == 2


class TestThresholdsCommand:
    """Test the thresholds command"""

    def test_defaults(self, runner):
        result = runner.invoke(cli, ["thresholds"])

        assert result.exit_code == 0, result.output
        assert "Latency" in result.output
        assert "200" in result.output

    def test_config_file(self, runner, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"health_metrics": {"Inventory": 37}}))

        result = runner.invoke(cli, ["--config", str(config_path), "thresholds"])

        assert result.exit_code == 0, result.output
        assert "37" in result.output

    def test_invalid_config_file(self, runner, tmp_path):
        config_path = tmp_path / "config.json"
        config_path.write_text("{broken")

        result = runner.invoke(cli, ["--config", str(config_path), "thresholds"])

        assert result.exit_code == 1


if __name__ == "__main__":
    pytest.main([__file__])
