"""
Error taxonomy.

Two layers:
OrchestratorError and its subclasses come out of the HTTP client and describe
what went wrong on the wire.
DeployError and its subclasses come out of the reconcile and wait steps and
say which step failed and against which Marathon host. The transport error is
kept as the cause.

A wait timeout is not an error. It is reported as a warning and the deploy
completes.
"""

from __future__ import annotations


class OrchestratorError(Exception):
    """Base class for Marathon transport and API failures."""


class OrchestratorHTTPError(OrchestratorError):
    """Raised when Marathon answers with a non 2xx status."""

    def __init__(self, method: str, url: str, status_code: int, body: str = ""):
        self.method = method
        self.url = url
        self.status_code = status_code
        self.body = body
        super().__init__(f"{method} {url} -> HTTP {status_code}: {body[:200]}")


class OrchestratorUnavailable(OrchestratorError):
    """Raised when Marathon cannot be reached, times out, or sends an unreadable body."""


class DeployError(Exception):
    """Base class for failures of a deploy step."""

    action = "deploy"

    def __init__(self, host: str, cause: BaseException | None = None, message: str | None = None):
        self.host = host
        self.cause = cause
        if message is None:
            message = f"Failed to {self.action} at {host}"
            if cause is not None:
                message = f"{message}: {cause}"
        super().__init__(message)


class LookupFailed(DeployError):
    """Raised when the existence check fails for a reason other than 404."""

    action = "look up Marathon app"


class CreateFailed(DeployError):
    """Raised when pushing a new app to Marathon fails."""

    action = "push Marathon config"


class UpdateFailed(DeployError):
    """Raised when updating an existing app fails (including force=false conflicts)."""

    action = "update Marathon config"


class WaitFailed(DeployError):
    """Raised when listing deployments fails while waiting for the rollout."""

    action = "list Marathon deployments"


class AppFileError(Exception):
    """Raised when the app definition file cannot be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"problem reading app definition {path}: {reason}")
