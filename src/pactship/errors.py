"""
Error taxonomy for the deployment workflow.

Every step raises one of these and never recovers locally; the CLI maps
``exit_code`` onto the process exit status.
"""

from __future__ import annotations

from typing import Optional


class DeployError(RuntimeError):
    exit_code: int = 1


class ReadError(DeployError):
    exit_code = 2


class ContractNotFoundError(ReadError):
    pass


class ValidationError(DeployError):
    exit_code = 3

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        base = super().__str__()
        if not self.errors:
            return base
        return base + " " + "; ".join(self.errors)


class SigningError(DeployError):
    exit_code = 4


class NetworkError(DeployError):
    exit_code = 5

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
