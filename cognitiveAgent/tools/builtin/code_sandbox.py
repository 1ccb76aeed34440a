"""Run step code in a separate, resource-limited Python process."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
import tempfile
import textwrap
from dataclasses import dataclass
from pathlib import Path

from cognitiveAgent.utils.error_handler import StepExecutionError

from ..registry import ToolContext, ToolOutcome

LOGGER = logging.getLogger("cognitiveAgent.tools.sandbox")

RESULT_FILE = "__result__.json"
USER_FILE = "step_code.py"

BOOTSTRAP_TEMPLATE = textwrap.dedent(
    """
    import builtins
    import io
    import json
    import os
    import socket
    from pathlib import Path

    SANDBOX_ROOT = Path(os.environ["SANDBOX_ROOT"]).resolve()

    _real_open = builtins.open

    def _ensure_within_sandbox(file):
        path = Path(file)
        if not path.is_absolute():
            path = Path.cwd() / path
        path = path.resolve()
        try:
            path.relative_to(SANDBOX_ROOT)
        except ValueError as exc:
            raise PermissionError(f"File writes outside the sandbox are disallowed: {path}") from exc

    def sandbox_open(file, mode="r", *args, **kwargs):
        if any(flag in mode for flag in ("w", "a", "+", "x")):
            _ensure_within_sandbox(file)
        return _real_open(file, mode, *args, **kwargs)

    builtins.open = sandbox_open
    io.open = sandbox_open

    if os.environ.get("SANDBOX_ALLOW_NETWORK") != "1":
        def _blocked(*_args, **_kwargs):
            raise PermissionError("network access disabled in sandbox")

        class _BlockedSocket(socket.socket):
            def __init__(self, *args, **kwargs):
                raise PermissionError("network access disabled in sandbox")

        socket.socket = _BlockedSocket
        socket.create_connection = _blocked
        socket.create_server = _blocked
        socket.socketpair = _blocked
        socket.fromfd = _blocked

    os.chdir(SANDBOX_ROOT)

    with _real_open(SANDBOX_ROOT / "step_code.py", encoding="utf-8") as fh:
        source = fh.read()
    namespace = {"__name__": "__step__"}
    exec(compile(source, "<step>", "exec"), namespace)
    value = namespace["__step__"]()

    with _real_open(SANDBOX_ROOT / "__result__.json", "w", encoding="utf-8") as fh:
        fh.write(json.dumps(value, indent=2, default=repr))
    """
)


@dataclass(frozen=True)
class SandboxLimits:
    timeout: float = 10.0
    memory_mb: int = 512
    cpu_seconds: int = 10
    allow_network: bool = False


def wrap_step_code(code: str) -> str:
    """Make ``code`` the body of ``__step__()`` so ``return`` yields the result."""
    body = textwrap.indent(textwrap.dedent(code).strip("\n"), "    ")
    return f"def __step__():\n{body}\n"


def _resource_limiter(limits: SandboxLimits):
    def apply() -> None:
        import resource

        resource.setrlimit(resource.RLIMIT_CPU, (limits.cpu_seconds, limits.cpu_seconds))
        memory = limits.memory_mb * 1024 * 1024
        resource.setrlimit(resource.RLIMIT_AS, (memory, memory))

    return apply


def _failure_line(stderr: str) -> str:
    lines = [line.strip() for line in stderr.splitlines() if line.strip()]
    return lines[-1] if lines else "process exited without output"


def run_sandboxed(code: str, limits: SandboxLimits) -> str:
    """Execute ``code`` and return its JSON-serialized return value.

    Raises:
        StepExecutionError: the code raised, timed out, was killed, returned
            nothing serializable, or its process could not be started.
    """
    with tempfile.TemporaryDirectory(prefix="cognitive-sandbox-") as tmp:
        root = Path(tmp)
        (root / USER_FILE).write_text(wrap_step_code(code), encoding="utf-8")
        bootstrap = root / "bootstrap.py"
        bootstrap.write_text(BOOTSTRAP_TEMPLATE, encoding="utf-8")

        env = {
            "PATH": os.environ.get("PATH", "/usr/bin:/bin"),
            "HOME": str(root),
            "PYTHONIOENCODING": "utf-8",
            "SANDBOX_ROOT": str(root),
            "SANDBOX_ALLOW_NETWORK": "1" if limits.allow_network else "0",
        }

        LOGGER.info(f"Running sandboxed code ({len(code)} chars, timeout {limits.timeout}s)")
        try:
            completed = subprocess.run(
                [sys.executable, "-I", str(bootstrap)],
                cwd=root,
                env=env,
                capture_output=True,
                text=True,
                timeout=limits.timeout,
                preexec_fn=_resource_limiter(limits) if os.name == "posix" else None,
            )
        except subprocess.TimeoutExpired as e:
            raise StepExecutionError(f"Code execution timed out after {limits.timeout} seconds") from e
        except (OSError, subprocess.SubprocessError) as e:
            LOGGER.warning(f"Sandbox process could not run: {e}")
            raise StepExecutionError(f"Code execution could not start: {e}") from e

        if completed.returncode != 0:
            LOGGER.warning(f"Sandboxed code failed (exit {completed.returncode}): {completed.stderr[-500:]}")
            raise StepExecutionError(f"Code execution failed: {_failure_line(completed.stderr)}")

        result_path = root / RESULT_FILE
        if not result_path.exists():
            raise StepExecutionError("Code execution produced no result")
        return result_path.read_text(encoding="utf-8")


def build_sandbox_handler(limits: SandboxLimits):
    """Synchronous handler; failures are local to the step."""

    def sandbox_handler(ctx: ToolContext) -> ToolOutcome:
        step = ctx.step
        result = run_sandboxed(step.params.code, limits)
        return ToolOutcome(
            payload=result,
            text=f"Step {step.ordinal} ({step.description}) Code Output: {result}",
        )

    return sandbox_handler
