"""Tests for configuration loading"""

import json

import pytest

from mcp_codemode.config.adaptation import expand_env_vars
from mcp_codemode.config.manager import CONFIG_PATH_ENV, ConfigManager
from mcp_codemode.config.models import BackendConfig, CodemodeConfig
from mcp_codemode.errors import ConfigError


@pytest.fixture
def config_file(tmp_path):
    """Write a configuration document and return its path"""

    def _write(content: str, name: str = "servers.yaml"):
        path = tmp_path / name
        path.write_text(content)
        return str(path)

    return _write


class TestExpandEnvVars:
    """Test cases for expand_env_vars"""

    def test_substitutes_known_variables(self):
        assert expand_env_vars("Bearer ${TOKEN}", {"TOKEN": "abc"}) == "Bearer abc"

    def test_multiple_placeholders(self):
        assert expand_env_vars("${A}-${B}", {"A": "1", "B": "2"}) == "1-2"

    def test_unresolved_placeholder_is_kept(self):
        assert expand_env_vars("${NOPE}", {}) == "${NOPE}"

    def test_empty_value_is_treated_as_unresolved(self):
        assert expand_env_vars("${EMPTY}", {"EMPTY": ""}) == "${EMPTY}"

    def test_plain_text_untouched(self):
        assert expand_env_vars("$HOME and {x}", {"HOME": "/root"}) == "$HOME and {x}"


class TestBackendConfig:
    """Test cases for BackendConfig"""

    def test_requires_transport(self):
        with pytest.raises(ValueError):
            BackendConfig(headers={"a": "b"})

    def test_transport(self):
        assert BackendConfig(url="http://x").transport == "streamable_http"
        assert BackendConfig(command="npx").transport == "stdio"

    def test_codemode_block_lifted(self):
        cfg = BackendConfig(command="npx", codemode={"allow": ["a"], "deny": ["b"]})
        assert cfg.allow == ["a"]
        assert cfg.deny == ["b"]

    def test_expanded_env(self):
        cfg = BackendConfig(command="npx", env={"KEY": "${SECRET}"})
        assert cfg.expanded({"SECRET": "s3"}).env == {"KEY": "s3"}
        assert cfg.env == {"KEY": "${SECRET}"}

    def test_identifiers_assigned_from_keys(self):
        config = CodemodeConfig(servers={"alpha": {"command": "a"}, "beta": {"url": "http://b"}})
        assert config.servers["alpha"].identifier == "alpha"
        assert config.servers["beta"].identifier == "beta"


class TestConfigManager:
    """Test cases for ConfigManager"""

    def test_load_yaml(self, config_file):
        path = config_file(
            "proxy:\n"
            "  name: gateway\n"
            "servers:\n"
            "  files:\n"
            "    command: npx\n"
            "    args: [-y, server-files]\n"
            "    deny: [rm]\n"
        )
        config = ConfigManager(path).load_config()

        assert config.proxy.name == "gateway"
        assert config.servers["files"].args == ["-y", "server-files"]
        assert config.servers["files"].deny == ["rm"]

    def test_load_json(self, config_file):
        document = {
            "servers": {
                "github": {
                    "url": "https://example.com/mcp",
                    "headers": {"Authorization": "Bearer ${GH}"},
                    "codemode": {"allow": ["search"]},
                }
            }
        }
        config = ConfigManager(config_file(json.dumps(document), "servers.json")).load_config()

        github = config.servers["github"]
        assert github.allow == ["search"]
        # Placeholders are expanded per use, not at load time
        assert github.headers == {"Authorization": "Bearer ${GH}"}

    def test_path_from_environment(self, config_file, monkeypatch):
        monkeypatch.setenv(CONFIG_PATH_ENV, config_file("servers:\n  a:\n    command: a\n"))
        assert list(ConfigManager().load_config().servers) == ["a"]

    def test_empty_file_is_empty_config(self, config_file):
        assert ConfigManager(config_file("")).load_config().servers == {}

    @pytest.mark.parametrize(
        "content",
        [
            "servers: [unclosed",
            "- just\n- a list\n",
            "servers:\n  - a\n  - b\n",
            "proxy:\n  log_level: LOUD\nservers: {}\n",
        ],
    )
    def test_invalid_config_raises_config_error(self, config_file, content):
        with pytest.raises(ConfigError):
            ConfigManager(config_file(content)).load_config()

    def test_missing_file_raises_config_error(self, tmp_path):
        with pytest.raises(ConfigError):
            ConfigManager(str(tmp_path / "absent.yaml")).load_config()

    def test_unset_path_raises_config_error(self, monkeypatch):
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
        with pytest.raises(ConfigError):
            ConfigManager().load_config()

    @pytest.mark.parametrize(
        "entry",
        [
            "    comand: npx\n",
            "    headers: {a: b}\n",
            "    command: x\n    args: not-a-list\n",
        ],
    )
    def test_invalid_server_skips_only_itself(self, config_file, entry):
        path = config_file("servers:\n  good:\n    command: npx\n  bad:\n" + entry)
        manager = ConfigManager(path)

        config = manager.load_config()

        assert list(config.servers) == ["good"]
        assert config.servers["good"].identifier == "good"
        assert list(manager.invalid_servers) == ["bad"]

    def test_load_or_empty_keeps_valid_servers(self, config_file):
        path = config_file("servers:\n  good:\n    command: npx\n  typo:\n    comand: npx\n")

        config = ConfigManager(path).load_or_empty()

        assert list(config.servers) == ["good"]

    def test_load_or_empty_degrades(self, config_file):
        config = ConfigManager(config_file("servers: [unclosed")).load_or_empty()
        assert config.servers == {}

    def test_validate_config_reports_issues(self, config_file):
        path = config_file(
            "servers:\n"
            "  both:\n"
            "    url: http://x\n"
            "    command: y\n"
            "  filters:\n"
            "    command: z\n"
            "    allow: [a]\n"
            "    deny: [b]\n"
        )
        issues = ConfigManager(path).validate_config()

        assert any(issue.startswith("Server both:") for issue in issues)
        assert any(issue.startswith("Server filters:") for issue in issues)

    def test_validate_config_reports_skipped_server(self, config_file):
        path = config_file("servers:\n  a:\n    command: a\n  typo:\n    comand: b\n")

        issues = ConfigManager(path).validate_config()

        assert len(issues) == 1
        assert issues[0].startswith("Server typo: skipped:")

    def test_validate_config_clean(self, config_file):
        path = config_file("servers:\n  a:\n    command: a\n")
        assert ConfigManager(path).validate_config() == []
