"""Environment validation for a scaffolding run.

Checks that the external tools the generated projects rely on are installed
and functional, resolves the platform-specific text-substitution tool, and
produces the read-only :class:`~forge.config.RunContext` for the run.

Nothing here touches the filesystem; each check writes one log line.
"""

from __future__ import annotations

import platform
import re
import shutil
from typing import Callable

from forge.config import Config, RunContext
from forge.errors import PrerequisiteMissing, RuntimeVersionMismatch, ToolNotFunctional
from forge.utils import RunLog, run_command

# ``openjdk version "17.0.12" 2024-07-16`` / ``java version "1.8.0_402"``
_JAVA_VERSION_RE = re.compile(r'version\s+"([^"]+)"')

DARWIN = "Darwin"
GNU_SED = "gsed"
DEFAULT_SED = "sed"


def parse_java_version(output: str) -> str | None:
    """Extract the quoted version string from ``java -version`` output."""
    match = _JAVA_VERSION_RE.search(output)
    return match.group(1) if match else None


def version_matches(detected: str, expected: str) -> bool:
    """Prefix match of *detected* against the expected major version."""
    return detected.startswith(expected)


class EnvironmentValidator:
    """Validates required tools and builds the run context.

    The lookup, process runner and platform probe are injectable so the
    checks can be exercised without the real toolchain installed.
    """

    def __init__(
        self,
        config: Config,
        run_log: RunLog,
        *,
        which: Callable[[str], str | None] = shutil.which,
        runner: Callable[..., tuple[int, str, str]] = run_command,
        system: Callable[[], str] = platform.system,
    ) -> None:
        self.config = config
        self.log = run_log
        self._which = which
        self._run = runner
        self._system = system

    # -- Public API --------------------------------------------------------

    def validate(self) -> RunContext:
        """Run every check in order and return the resolved context.

        Raises:
            PrerequisiteMissing: A required tool is not on ``PATH``.
            ToolNotFunctional: The build tool or runtime fails its probe.
        """
        self.log.info("Checking prerequisites...")

        self.check_required_tools()
        detected = self.check_runtime()
        self.check_build_tool()
        host = self._system()
        sed_command = self.resolve_sed(host)

        self.log.info("Prerequisites checked successfully.")
        return RunContext(
            java_version=self.config.java_version,
            build_tool_version=self.config.build_tool_version,
            sed_command=sed_command,
            base_dir=self.config.resolved_base_dir,
            platform=host,
            java_version_detected=detected,
        )

    # -- Individual checks -------------------------------------------------

    def check_required_tools(self) -> None:
        for tool in self.config.required_tools:
            location = self._which(tool)
            if location is None:
                self.log.error(f"{tool} is not installed. Please install it and rerun.")
                raise PrerequisiteMissing(tool)
            self.log.info(f"Found {tool} at {location}")

    def _locate(self, tool: str) -> None:
        # probed tools may be left out of required_tools
        if self._which(tool) is None:
            self.log.error(f"{tool} is not installed. Please install it and rerun.")
            raise PrerequisiteMissing(tool)

    def check_build_tool(self) -> None:
        tool = self.config.build_tool
        self._locate(tool)
        code, _, stderr = self._run(
            [tool, "--version"], timeout=self.config.probe_timeout
        )
        if code != 0:
            self.log.error(f"{tool} not functional.")
            raise ToolNotFunctional(tool, stderr or f"exit code {code}")
        self.log.info(f"{tool} is functional.")

    def check_runtime(self) -> str | None:
        """Probe the runtime and compare its version with the expected one.

        A mismatch is logged as a warning; the run continues.
        """
        tool = self.config.runtime_tool
        self._locate(tool)
        code, stdout, stderr = self._run(
            [tool, "-version"], timeout=self.config.probe_timeout
        )
        if code != 0:
            self.log.error(f"{tool} not functional.")
            raise ToolNotFunctional(tool, stderr or f"exit code {code}")

        # java prints its banner on stderr
        detected = parse_java_version(stderr) or parse_java_version(stdout)
        expected = self.config.java_version
        if detected is None:
            self.log.warn(
                f"Could not determine {tool} version; expected {expected}.x. "
                "Proceeding but may encounter issues."
            )
        elif not version_matches(detected, expected):
            self.log.warn(str(RuntimeVersionMismatch(detected, expected)))
        else:
            self.log.info(f"{tool} version {detected} detected.")
        return detected

    def resolve_sed(self, host: str) -> str:
        """Pick the text-substitution tool for *host*.

        macOS ships BSD sed, so GNU sed (``gsed``) is preferred there.
        """
        if host != DARWIN:
            return DEFAULT_SED
        if self._which(GNU_SED) is None:
            self.log.warn(
                "On macOS, gsed (GNU sed) is recommended for compatibility. "
                "Install via brew install gnu-sed."
            )
            return DEFAULT_SED
        self.log.info("Using gsed (GNU sed).")
        return GNU_SED
