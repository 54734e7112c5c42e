from __future__ import annotations

from typing import Sequence


class ProvisionError(RuntimeError):
    """Base class for provisioner failures."""


class PrivilegeError(ProvisionError):
    """Wrong invocation mode or sudo priming declined. Treated as a clean abort."""


class ConfigError(ProvisionError):
    pass


class VersionResolutionError(ProvisionError):
    pass


class StepVerificationError(ProvisionError):
    pass


class CommandError(ProvisionError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command failed ({returncode}): {' '.join(self.argv)}\n{stderr}".rstrip())


class StepFailed(ProvisionError):
    def __init__(self, step_id: str, remaining: Sequence[str], cause: BaseException) -> None:
        self.step_id = step_id
        self.remaining = list(remaining)
        self.cause = cause
        super().__init__(f"Step {step_id} failed: {cause}")
