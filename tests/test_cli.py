"""
Tests for the command line entry point
"""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from analytics_agent.cli import EXIT_CONFIG_ERROR, EXIT_OK, build_parser, main, resolve_config

from test_config import ENV_VARS


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    for name in ENV_VARS:
        # setenv first so variables loaded from .env files are removed again on teardown
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


class TestResolveConfig:

    def test_command_line_overrides_env_and_file(self, monkeypatch, tmp_path):
        config_file = tmp_path / "harness.json"
        config_file.write_text(json.dumps({"sheet": {"spreadsheet_id": "from-file",
                                                     "read_range": "Cases!A:F"}}))
        monkeypatch.setenv("SPREADSHEET_ID", "from-env")

        args = build_parser().parse_args([
            "--config", str(config_file), "--spreadsheet-id", "from-cli",
            "--match-scope", "run", "--headed", "--no-audit", "--capture-timeout", "3",
        ])
        config = resolve_config(args)

        assert config.sheet.spreadsheet_id == "from-cli"
        assert config.sheet.read_range == "Cases!A:F"
        assert config.capture.match_scope == "run"
        assert config.capture.capture_timeout == 3.0
        assert config.playwright.headless is False
        assert config.audit.enabled is False

    def test_env_file_is_loaded(self, tmp_path):
        env_file = tmp_path / "custom.env"
        env_file.write_text("SPREADSHEET_ID=from-env-file\nAUDIT_TIMEZONE=Europe/Paris\n")

        config = resolve_config(build_parser().parse_args(["--env-file", str(env_file)]))
        assert config.sheet.spreadsheet_id == "from-env-file"
        assert config.audit.timezone == "Europe/Paris"


class TestMain:
    """Test exit codes of the entry point"""

    def test_print_config(self, capsys):
        assert main(["--print-config", "--spreadsheet-id", "abc"]) == EXIT_OK
        printed = json.loads(capsys.readouterr().out)
        assert printed['spreadsheet_id'] == "abc"
        assert printed['match_scope'] == "row"

    def test_missing_config_file_aborts(self, tmp_path):
        assert main(["--config", str(tmp_path / "missing.yaml")]) == EXIT_CONFIG_ERROR

    def test_missing_spreadsheet_id_aborts(self):
        assert main([]) == EXIT_CONFIG_ERROR

    def test_unusable_credentials_abort(self, tmp_path):
        key = tmp_path / "credentials.json"
        key.write_text("{}")
        har = tmp_path / "session.har"
        har.write_text(json.dumps({"log": {"entries": []}}))

        code = main(["--spreadsheet-id", "abc", "--credentials", str(key),
                     "--db", str(tmp_path / "audit.db"), "--har", str(har)])
        assert code == EXIT_CONFIG_ERROR
