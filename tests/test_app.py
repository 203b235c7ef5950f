"""Tests for the chef-analyze command line."""

import pytest
from click.testing import CliRunner

import app
from src.reporting.errors import CatalogError, DownloadError
from src.reporting.models import (
    CookbookRecord,
    CookbooksReport,
    FileOffenses,
    NodeReportItem,
    Offense,
)

REPORT = CookbooksReport(
    records=(
        CookbookRecord(
            "apache2",
            "1.0.0",
            nodes=frozenset(["web1"]),
            files=(
                FileOffenses(
                    "recipes/default.rb",
                    (Offense("Chef/Deprecations/NodeSet", "Do not use node.set", True),),
                ),
            ),
        ),
        CookbookRecord("mysql", "8.0.1", download_error=DownloadError("404 Not Found")),
    )
)


@pytest.fixture
def key_file(tmp_path):
    path = tmp_path / "reporter.pem"
    path.write_text("not a real key")
    return path


@pytest.fixture
def server_args(key_file):
    return [
        "--chef-server-url",
        "https://chef.example/organizations/acme/",
        "--client-name",
        "reporter",
        "--client-key",
        str(key_file),
    ]


@pytest.fixture
def fake_clients(monkeypatch):
    """Replace the Chef server wiring and record what the command asked for."""
    calls = {}

    def fake_client(settings):
        calls["settings"] = settings
        return "client"

    def fake_aggregate(catalog, usage_index, analyzer, options):
        calls["options"] = options
        return REPORT

    monkeypatch.setattr(app, "ChefServerClient", fake_client)
    monkeypatch.setattr(app, "ChefCookbookCatalog", lambda client: "catalog")
    monkeypatch.setattr(app, "ChefNodeSearch", lambda client: "search")
    monkeypatch.setattr(app, "aggregate_cookbooks", fake_aggregate)
    return calls


class TestCookbooksCommand:
    def test_text_report(self, server_args, fake_clients):
        result = CliRunner().invoke(app.cli, server_args + ["report", "cookbooks"])

        assert result.exit_code == 0, result.output
        assert (
            "apache2 (1.0.0) 1 violations, 1 auto-correctable, 1 nodes affected"
            in result.output
        )
        assert "ERROR: could not download cookbook (see end of report)" in result.output
        assert "* ERROR(s) DETAILS:" in result.output
        assert " - mysql (8.0.1): 404 Not Found" in result.output

    def test_overrides_applied(self, server_args, fake_clients):
        result = CliRunner().invoke(
            app.cli,
            server_args
            + ["--no-ssl-verify", "report", "cookbooks", "-u", "-w", "3", "-t", "90"],
        )

        assert result.exit_code == 0, result.output
        settings = fake_clients["settings"]
        assert settings.server_url == "https://chef.example/organizations/acme"
        assert settings.client_name == "reporter"
        assert settings.ssl_verify is False
        options = fake_clients["options"]
        assert options.skip_unused is True
        assert options.workers == 3
        assert options.timeout == 90.0

    def test_defaults_from_settings(self, server_args, fake_clients, monkeypatch):
        monkeypatch.setenv("REPORT_WORKERS", "6")
        monkeypatch.delenv("REPORT_TIMEOUT", raising=False)

        result = CliRunner().invoke(app.cli, server_args + ["report", "cookbooks"])

        assert result.exit_code == 0, result.output
        assert fake_clients["options"].workers == 6
        assert fake_clients["options"].timeout is None

    def test_csv_report(self, server_args, fake_clients):
        result = CliRunner().invoke(
            app.cli, server_args + ["report", "cookbooks", "--format", "csv"]
        )

        assert result.exit_code == 0, result.output
        assert "Cookbook Name,Version,File,Offense" in result.output
        assert (
            "apache2,1.0.0,recipes/default.rb,Chef/Deprecations/NodeSet,Y,"
            "Do not use node.set,web1"
        ) in result.output

    def test_rejects_zero_workers(self, server_args, fake_clients):
        result = CliRunner().invoke(
            app.cli, server_args + ["report", "cookbooks", "--workers", "0"]
        )

        assert result.exit_code == 2
        assert "options" not in fake_clients

    def test_missing_configuration(self, fake_clients, monkeypatch):
        for name in ("CHEF_SERVER_URL", "CHEF_CLIENT_NAME", "CHEF_CLIENT_KEY"):
            monkeypatch.delenv(name, raising=False)

        result = CliRunner().invoke(app.cli, ["report", "cookbooks"])

        assert result.exit_code == 2
        assert "CHEF_SERVER_URL is required" in result.output

    def test_catalog_failure_is_fatal(self, server_args, fake_clients, monkeypatch):
        def failing_aggregate(*args):
            raise CatalogError("unable to list cookbooks: 500 Server Error")

        monkeypatch.setattr(app, "aggregate_cookbooks", failing_aggregate)

        result = CliRunner().invoke(app.cli, server_args + ["report", "cookbooks"])

        assert result.exit_code == 1
        assert "catalog error: unable to list cookbooks: 500 Server Error" in result.output


class TestNodesCommand:
    def test_nodes_report(self, server_args, fake_clients, monkeypatch):
        items = [
            NodeReportItem(
                name="web1",
                chef_version="18.2.7",
                os="ubuntu",
                os_version="22.04",
                cookbooks=("apache2(1.0.0)",),
            )
        ]
        monkeypatch.setattr(app, "aggregate_nodes", lambda search: items)

        result = CliRunner().invoke(app.cli, server_args + ["report", "nodes"])

        assert result.exit_code == 0, result.output
        assert "Node Name" in result.output
        assert "web1" in result.output
        assert "apache2(1.0.0)" in result.output


def test_help_without_subcommand():
    result = CliRunner().invoke(app.cli, [])

    assert result.exit_code == 0
    assert "Analyze your Chef inventory" in result.output
