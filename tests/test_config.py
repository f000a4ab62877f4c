"""
Tests for run configuration — environment parsing and overrides.
"""

from __future__ import annotations

from pathlib import Path
from unittest import mock

import pytest

from treesync.sync.config import DEFAULT_JOBS, RunConfig
from treesync.sync.git_ops import CloneOptions
from treesync.validation import ConfigurationError


class TestFromEnv:

    def test_defaults(self):
        config = RunConfig.from_env()

        assert config.target_root == Path(".")
        assert config.branch is None
        assert config.depth is None
        assert config.parallel is False
        assert config.jobs is None

    def test_reads_git_depth(self, monkeypatch):
        monkeypatch.setenv("GIT_DEPTH", "1")

        assert RunConfig.from_env().depth == 1

    def test_empty_git_depth_means_full_clone(self, monkeypatch):
        monkeypatch.setenv("GIT_DEPTH", "")

        assert RunConfig.from_env().depth is None

    @pytest.mark.parametrize("value", ["abc", "0", "-3", "1.5"])
    def test_invalid_git_depth(self, monkeypatch, value):
        monkeypatch.setenv("GIT_DEPTH", value)

        with pytest.raises(ConfigurationError) as exc_info:
            RunConfig.from_env()
        assert "GIT_DEPTH" in str(exc_info.value)

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes"])
    def test_parallel_enabled(self, monkeypatch, value):
        monkeypatch.setenv("PARALLEL", value)

        assert RunConfig.from_env().parallel is True

    @pytest.mark.parametrize("value", ["0", "", "no", "false"])
    def test_parallel_disabled(self, monkeypatch, value):
        monkeypatch.setenv("PARALLEL", value)

        assert RunConfig.from_env().parallel is False

    def test_reads_sync_jobs(self, monkeypatch):
        monkeypatch.setenv("SYNC_JOBS", "3")

        assert RunConfig.from_env().jobs == 3

    def test_arguments_override_environment(self, monkeypatch):
        monkeypatch.setenv("GIT_DEPTH", "10")
        monkeypatch.setenv("PARALLEL", "1")

        config = RunConfig.from_env(depth=2, parallel=False)

        assert config.depth == 2
        assert config.parallel is False

    def test_invalid_env_ignored_when_overridden(self, monkeypatch):
        monkeypatch.setenv("GIT_DEPTH", "oops")

        assert RunConfig.from_env(depth=3).depth == 3

    def test_empty_branch_is_no_branch(self):
        assert RunConfig.from_env(branch="").branch is None

    def test_target_root_and_branch(self, tmp_path):
        config = RunConfig.from_env(target_root=tmp_path, branch="thirteen")

        assert config.target_root == tmp_path
        assert config.branch == "thirteen"


class TestRunConfig:

    def test_frozen(self):
        config = RunConfig()
        with pytest.raises(Exception):
            config.branch = "x"

    def test_rejects_non_positive_depth(self):
        with pytest.raises(ConfigurationError):
            RunConfig(depth=0)

    def test_rejects_non_positive_jobs(self):
        with pytest.raises(ConfigurationError):
            RunConfig(jobs=0)

    def test_destination(self, tmp_path):
        config = RunConfig(target_root=tmp_path)
        assert config.destination("vendor/xiaomi/redwood") == tmp_path / "vendor" / "xiaomi" / "redwood"

    def test_clone_options(self):
        config = RunConfig(branch="thirteen", depth=1)
        assert config.clone_options == CloneOptions(depth=1, branch="thirteen")

    def test_max_workers_explicit(self):
        assert RunConfig(jobs=3).max_workers == 3

    def test_max_workers_from_cpu_count(self):
        with mock.patch("treesync.sync.config.os.cpu_count", return_value=12):
            assert RunConfig().max_workers == 12

    def test_max_workers_fallback(self):
        with mock.patch("treesync.sync.config.os.cpu_count", return_value=None):
            assert RunConfig().max_workers == DEFAULT_JOBS
