"""Tests for environment validation (forge.environment).

Covers:
- Required tool presence (PrerequisiteMissing)
- Build tool and runtime probes (ToolNotFunctional)
- Runtime version prefix matching (warning only)
- Platform-specific sed resolution
- RunContext construction
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from forge.config import Config, RunContext
from forge.environment import (
    EnvironmentValidator,
    parse_java_version,
    version_matches,
)
from forge.errors import PrerequisiteMissing, ToolNotFunctional


pytestmark = pytest.mark.unit


def _levels(run_log) -> list[str]:
    return [level for level, _ in run_log.events]


def _messages(run_log, level: str) -> list[str]:
    return [message for lvl, message in run_log.events if lvl == level]


class TestParseJavaVersion:
    def test_openjdk_banner(self):
        assert parse_java_version('openjdk version "17.0.12" 2024-07-16') == "17.0.12"

    def test_legacy_banner(self):
        assert parse_java_version('java version "1.8.0_402"') == "1.8.0_402"

    def test_unparseable(self):
        assert parse_java_version("command not found") is None


class TestVersionMatches:
    def test_prefix_match(self):
        assert version_matches("17.0.12", "17")

    def test_mismatch(self):
        assert not version_matches("21.0.4", "17")


class TestRequiredTools:
    @pytest.mark.parametrize("tool", ["java", "mvn", "git", "sed"])
    def test_missing_tool_raises(self, config, run_log, make_toolchain, tool):
        validator = make_toolchain(missing=(tool,)).validator(config, run_log)
        with pytest.raises(PrerequisiteMissing) as exc_info:
            validator.validate()
        assert exc_info.value.tool == tool
        assert f"{tool} is not installed" in _messages(run_log, "ERROR")[0]

    def test_missing_tool_stops_before_probes(self, config, run_log, make_toolchain):
        toolchain = make_toolchain(missing=("git",))
        with pytest.raises(PrerequisiteMissing):
            toolchain.validator(config, run_log).validate()
        assert toolchain.calls == []

    def test_one_log_line_per_tool(self, config, run_log, toolchain):
        toolchain.validator(config, run_log).validate()
        found = [m for m in _messages(run_log, "INFO") if m.startswith("Found ")]
        assert len(found) == len(config.required_tools)

    def test_custom_required_tools(self, tmp_path, run_log, make_toolchain):
        config = Config(base_dir=tmp_path, required_tools=["java", "mvn", "docker"])
        validator = make_toolchain(missing=("docker",)).validator(config, run_log)
        with pytest.raises(PrerequisiteMissing) as exc_info:
            validator.validate()
        assert exc_info.value.tool == "docker"


class TestToolProbes:
    def test_broken_build_tool(self, config, run_log, make_toolchain):
        validator = make_toolchain(mvn_code=1).validator(config, run_log)
        with pytest.raises(ToolNotFunctional) as exc_info:
            validator.validate()
        assert exc_info.value.tool == "mvn"
        assert "mvn not functional." in _messages(run_log, "ERROR")

    def test_broken_runtime(self, config, run_log, make_toolchain):
        validator = make_toolchain(java_code=1).validator(config, run_log)
        with pytest.raises(ToolNotFunctional) as exc_info:
            validator.validate()
        assert exc_info.value.tool == "java"

    @pytest.mark.parametrize("tool", ["java", "mvn"])
    def test_unlisted_probe_tool_missing(self, tmp_path, run_log, make_toolchain, tool):
        config = Config(base_dir=tmp_path, required_tools=["git"])
        toolchain = make_toolchain(missing=(tool,))
        with pytest.raises(PrerequisiteMissing) as exc_info:
            toolchain.validator(config, run_log).validate()
        assert exc_info.value.tool == tool
        assert [tool, "--version"] not in toolchain.calls
        assert [tool, "-version"] not in toolchain.calls

    def test_probe_commands(self, config, run_log, toolchain):
        toolchain.validator(config, run_log).validate()
        assert ["java", "-version"] in toolchain.calls
        assert ["mvn", "--version"] in toolchain.calls


class TestRuntimeVersion:
    def test_matching_version_no_warning(self, config, run_log, toolchain):
        context = toolchain.validator(config, run_log).validate()
        assert "WARN" not in _levels(run_log)
        assert context.java_version_detected == "17.0.12"

    def test_mismatch_is_warning_only(self, config, run_log, make_toolchain):
        toolchain = make_toolchain(java_banner='openjdk version "21.0.4" 2024-07-16')
        context = toolchain.validator(config, run_log).validate()
        warnings = _messages(run_log, "WARN")
        assert len(warnings) == 1
        assert "21.0.4" in warnings[0]
        assert "expected 17.x" in warnings[0]
        assert context.java_version_detected == "21.0.4"

    def test_unknown_version_is_warning_only(self, config, run_log, make_toolchain):
        toolchain = make_toolchain(java_banner="something unexpected")
        context = toolchain.validator(config, run_log).validate()
        assert len(_messages(run_log, "WARN")) == 1
        assert context.java_version_detected is None


class TestResolveSed:
    def test_linux_uses_sed(self, config, run_log, toolchain):
        context = toolchain.validator(config, run_log).validate()
        assert context.sed_command == "sed"

    def test_darwin_prefers_gsed(self, config, run_log, make_toolchain):
        context = make_toolchain(system="Darwin").validator(config, run_log).validate()
        assert context.sed_command == "gsed"
        assert "WARN" not in _levels(run_log)

    def test_darwin_falls_back_with_warning(self, config, run_log, make_toolchain):
        toolchain = make_toolchain(system="Darwin", missing=("gsed",))
        context = toolchain.validator(config, run_log).validate()
        assert context.sed_command == "sed"
        assert any("brew install gnu-sed" in m for m in _messages(run_log, "WARN"))

    def test_gsed_ignored_off_darwin(self, config, run_log):
        validator = EnvironmentValidator(
            config, run_log, which=lambda name: f"/opt/{name}", system=lambda: "Linux"
        )
        assert validator.resolve_sed("Linux") == "sed"


class TestRunContext:
    def test_context_fields(self, config, run_log, toolchain):
        context = toolchain.validator(config, run_log).validate()
        assert isinstance(context, RunContext)
        assert context.java_version == "17"
        assert context.build_tool_version == "3.9.9"
        assert context.base_dir == config.resolved_base_dir
        assert context.platform == "Linux"

    def test_context_is_read_only(self, config, run_log, toolchain):
        context = toolchain.validator(config, run_log).validate()
        with pytest.raises(ValidationError):
            context.java_version = "21"

    def test_no_filesystem_mutation(self, config, run_log, toolchain):
        toolchain.validator(config, run_log).validate()
        assert not config.base_dir.exists()

    def test_bookend_log_lines(self, config, run_log, toolchain):
        toolchain.validator(config, run_log).validate()
        infos = _messages(run_log, "INFO")
        assert infos[0] == "Checking prerequisites..."
        assert infos[-1] == "Prerequisites checked successfully."
