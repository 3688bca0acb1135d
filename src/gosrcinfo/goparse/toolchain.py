from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from ..config import go_binary
from ..errors import ToolchainError


@dataclass(frozen=True)
class GoResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def output(self) -> str:
        return "\n".join([s for s in [self.stdout.strip("\n"), self.stderr.strip("\n")] if s]) + "\n"


def run_go(args: list[str], *, cwd: Path, env: dict[str, str] | None = None) -> GoResult:
    """Run a `go` sub-command and capture its output.

    A non-zero exit status is returned to the caller; only a missing toolchain
    raises here.
    """
    cmd = [go_binary(), *args]
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=False,
            check=False,
        )
    except FileNotFoundError as e:
        raise ToolchainError(
            "Go toolchain not found (`go` is missing from PATH). "
            "Install Go and ensure `go` is available on PATH, or set GOSRCINFO_GO."
        ) from e

    # Decode explicitly: Go tools emit UTF-8 regardless of the console code page.
    stdout = (proc.stdout or b"").decode("utf-8", errors="replace")
    stderr = (proc.stderr or b"").decode("utf-8", errors="replace")
    return GoResult(returncode=proc.returncode, stdout=stdout, stderr=stderr)
