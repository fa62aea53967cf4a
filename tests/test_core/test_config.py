"""Tests for config loading."""

from __future__ import annotations

from pathlib import Path

from architask.core.config import (
    ArchitaskConfig,
    ensure_gitignore,
    get_architask_dir,
    load_config,
)


class TestLoadConfig:
    def test_defaults_when_no_config_file(self, tmp_path: Path):
        """Without an architask.toml, load_config should return defaults."""
        config = load_config(tmp_path)

        assert isinstance(config, ArchitaskConfig)
        assert config.scan.analyzers == ["bindings", "complexity"]
        assert config.complexity.preset == "default"
        assert config.complexity.max_function_lines is None
        assert config.planner.minimum_confidence == 0.6
        assert config.planner.policy == "moderate"
        assert config.fix.max_lines_changed == 50

    def test_defaults_exclude_patterns(self, tmp_path: Path):
        """Default config should exclude build output and tool state."""
        config = load_config(tmp_path)

        assert ".build/" in config.exclude
        assert "Pods/" in config.exclude
        assert ".architask/" in config.exclude

    def test_loads_general_and_scan_sections(self, tmp_path: Path):
        (tmp_path / "architask.toml").write_text(
            '[general]\nexclude = ["Vendor/"]\n\n'
            '[scan]\nanalyzers = ["security", "style"]\nworkers = 4\n'
        )
        config = load_config(tmp_path)

        assert config.exclude == ["Vendor/"]
        assert config.scan.analyzers == ["security", "style"]
        assert config.scan.workers == 4

    def test_loads_analyzer_sections(self, tmp_path: Path):
        (tmp_path / "architask.toml").write_text(
            "[analyzers.complexity]\n"
            'preset = "strict"\n'
            "max_nesting_depth = 2\n\n"
            "[analyzers.security]\n"
            "detect_force_unwrap = false\n\n"
            "[analyzers.style]\n"
            "max_line_length = 100\n"
        )
        config = load_config(tmp_path)

        assert config.complexity.preset == "strict"
        assert config.complexity.max_nesting_depth == 2
        assert config.security.detect_force_unwrap is False
        assert config.security.detect_force_try is True
        assert config.style.max_line_length == 100

    def test_loads_planner_and_fix_sections(self, tmp_path: Path):
        (tmp_path / "architask.toml").write_text(
            "[planner]\n"
            "minimum_confidence = 0.75\n"
            'policy = "strict"\n\n'
            "[fix]\n"
            "backup_before_fix = false\n"
        )
        config = load_config(tmp_path)

        assert config.planner.minimum_confidence == 0.75
        assert config.planner.policy == "strict"
        assert config.fix.backup_before_fix is False

    def test_unknown_keys_are_ignored(self, tmp_path: Path):
        (tmp_path / "architask.toml").write_text("[scan]\nnot_a_setting = 1\n")
        config = load_config(tmp_path)

        assert not hasattr(config.scan, "not_a_setting")


class TestStateDirectory:
    def test_get_architask_dir_creates_directory(self, tmp_path: Path):
        state_dir = get_architask_dir(tmp_path)
        assert state_dir == tmp_path / ".architask"
        assert state_dir.is_dir()

    def test_ensure_gitignore_creates_file(self, tmp_path: Path):
        ensure_gitignore(tmp_path)
        assert (tmp_path / ".gitignore").read_text() == ".architask/\n"

    def test_ensure_gitignore_appends_once(self, tmp_path: Path):
        (tmp_path / ".gitignore").write_text(".build/")
        ensure_gitignore(tmp_path)
        ensure_gitignore(tmp_path)
        assert (tmp_path / ".gitignore").read_text() == ".build/\n.architask/\n"
