"""Shared pytest fixtures for the Forge test suite.

Provides reusable fixtures for:
- Temporary base directories and configuration
- A quiet run log that records events without printing
- A fake toolchain standing in for ``java``/``mvn``/``git``/``sed`` probes
- The packaged blueprint catalog
"""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from forge.config import Config, RunContext
from forge.environment import EnvironmentValidator
from forge.scaffolder import BlueprintCatalog
from forge.utils import RunLog


# ---------------------------------------------------------------------------
# Fake toolchain
# ---------------------------------------------------------------------------

JAVA_17_BANNER = (
    'openjdk version "17.0.12" 2024-07-16\n'
    "OpenJDK Runtime Environment (build 17.0.12+7)\n"
    "OpenJDK 64-Bit Server VM (build 17.0.12+7, mixed mode, sharing)"
)


class FakeToolchain:
    """Scriptable replacement for ``shutil.which`` and ``run_command``."""

    def __init__(
        self,
        *,
        missing: tuple[str, ...] = (),
        java_banner: str = JAVA_17_BANNER,
        java_code: int = 0,
        mvn_code: int = 0,
        system: str = "Linux",
    ) -> None:
        self.missing = set(missing)
        self.java_banner = java_banner
        self.java_code = java_code
        self.mvn_code = mvn_code
        self.system = system
        self.calls: list[list[str]] = []

    def which(self, name: str) -> str | None:
        if name in self.missing:
            return None
        return f"/usr/bin/{name}"

    def run(self, cmd: list[str], cwd=None, timeout: int = 30) -> tuple[int, str, str]:
        self.calls.append(list(cmd))
        if cmd[0] == "mvn":
            if self.mvn_code:
                return (self.mvn_code, "", "mvn: broken installation")
            return (0, "Apache Maven 3.9.9", "")
        if cmd[0] == "java":
            if self.java_code:
                return (self.java_code, "", "java: broken installation")
            # java prints its banner on stderr
            return (0, "", self.java_banner)
        return (127, "", f"{cmd[0]}: not found")

    def validator(self, config: Config, run_log: RunLog) -> EnvironmentValidator:
        return EnvironmentValidator(
            config,
            run_log,
            which=self.which,
            runner=self.run,
            system=lambda: self.system,
        )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_console() -> Console:
    """A Rich console that writes into memory."""
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def run_log(quiet_console: Console) -> RunLog:
    """Run log without a log file; events are kept in ``run_log.events``."""
    return RunLog(None, out=quiet_console)


@pytest.fixture
def base_dir(tmp_path: Path) -> Path:
    """Output base directory (not created yet)."""
    return tmp_path / "forensic_toolkits"


@pytest.fixture
def config(tmp_path: Path, base_dir: Path) -> Config:
    """Configuration pointing every output into ``tmp_path``."""
    return Config(base_dir=base_dir, log_file=tmp_path / "scaffold.log")


@pytest.fixture
def run_context(base_dir: Path) -> RunContext:
    """A resolved run context for generator tests."""
    return RunContext(
        java_version="17",
        build_tool_version="3.9.9",
        base_dir=base_dir,
        platform="Linux",
        java_version_detected="17.0.12",
    )


@pytest.fixture
def toolchain() -> FakeToolchain:
    """A healthy toolchain."""
    return FakeToolchain()


@pytest.fixture
def make_toolchain():
    """Factory for toolchains with missing or broken tools."""
    return FakeToolchain


@pytest.fixture(scope="session")
def catalog() -> BlueprintCatalog:
    """The packaged blueprint catalog."""
    return BlueprintCatalog.load()
