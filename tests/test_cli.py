from typer.testing import CliRunner

from quartermaster.config import settings
from quartermaster.main import cli

runner = CliRunner()


def test_routes_reports_consistent_config():
    result = runner.invoke(cli, ["routes"])
    assert result.exit_code == 0
    assert "/activity-logs" in result.output
    assert "OK: public and guarded paths are disjoint" in result.output


def test_routes_fails_on_overlap():
    settings.routing.public_paths = [*settings.routing.public_paths, "/settings"]
    result = runner.invoke(cli, ["routes"])
    assert result.exit_code == 1
