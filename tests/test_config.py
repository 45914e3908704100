"""Tests for session configuration loading."""

from __future__ import annotations

import yaml

from zeroclaw.core.config import ZeroclawConfig, load_config


def _write_config(workspace, data) -> None:
    config_dir = workspace / ".zeroclaw"
    config_dir.mkdir(exist_ok=True)
    (config_dir / "config.yaml").write_text(
        data if isinstance(data, str) else yaml.safe_dump(data)
    )


class TestZeroclawConfig:
    """Tests for config defaults and overrides."""

    def test_defaults(self):
        config = ZeroclawConfig()
        assert config.surface_name == "zeroclaw"
        assert config.pane_layout == "tiled"
        assert config.feedback_loop is True
        assert config.resume_preference == ["opencode"]

    def test_none_overrides_ignored(self):
        config = ZeroclawConfig().with_overrides(pane_layout=None, feedback_loop=False)
        assert config.pane_layout == "tiled"
        assert config.feedback_loop is False

    def test_default_lists_not_shared(self):
        first, second = ZeroclawConfig(), ZeroclawConfig()
        first.planning_runtimes.append("extra")
        assert "extra" not in second.planning_runtimes


class TestLoadConfig:
    """Tests for load_config()."""

    def test_missing_file_uses_defaults(self, workspace):
        assert load_config(workspace) == ZeroclawConfig()

    def test_file_values_applied(self, workspace):
        _write_config(workspace, {"surface_name": "team", "probe_timeout": 1.5})

        config = load_config(workspace)

        assert config.surface_name == "team"
        assert config.probe_timeout == 1.5
        assert config.pane_layout == "tiled"

    def test_unknown_keys_ignored(self, workspace, caplog):
        _write_config(workspace, {"surface_name": "team", "colour": "blue"})

        config = load_config(workspace)

        assert config.surface_name == "team"
        assert "colour" in caplog.text

    def test_malformed_yaml_falls_back(self, workspace, caplog):
        _write_config(workspace, "surface_name: [unclosed\n")

        assert load_config(workspace) == ZeroclawConfig()
        assert "Ignoring unreadable config" in caplog.text

    def test_non_mapping_falls_back(self, workspace):
        _write_config(workspace, "- just\n- a list\n")
        assert load_config(workspace) == ZeroclawConfig()

    def test_empty_file(self, workspace):
        _write_config(workspace, "")
        assert load_config(workspace) == ZeroclawConfig()
