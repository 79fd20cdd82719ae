"""
Errors — Exception taxonomy for the catalog seeder.

Page-level NetworkError/GraphQLError/ParseError abort a run. Per-product
NotFoundError/ParseError are recorded and the product is skipped.
BulkJobError (and its JobTimeoutError subclass) aborts the run.
"""

from typing import Any, Dict, Optional


class SeederError(Exception):
    """Base class for all catalog seeder errors."""


class NetworkError(SeederError):
    """The HTTP request failed or returned a non-2xx status."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class GraphQLError(SeederError):
    """A 2xx GraphQL response carried an "errors" field."""

    def __init__(self, errors: list):
        messages = [e.get("message", str(e)) if isinstance(e, dict) else str(e) for e in errors]
        super().__init__(f"GraphQL errors: {'; '.join(messages)}")
        self.errors = errors


class ParseError(SeederError):
    """A response body was not valid JSON or lacked the expected shape."""


class NotFoundError(SeederError):
    """The catalog returned no product for a SKU."""

    def __init__(self, sku: str, detail: str = ""):
        message = f"could not find product: {sku}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.sku = sku


class BulkJobError(SeederError):
    """A bulk preview/publish job could not be created or polled.

    outputs holds any stage reports already produced when the job failed,
    keyed by output filename.
    """

    def __init__(self, message: str, outputs: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.outputs = outputs or {}


class JobTimeoutError(BulkJobError, TimeoutError):
    """A bulk job did not reach the stopped state before the poll timeout."""

    def __init__(self, job_kind: str, job_name: str, timeout: float, state: Optional[str] = None):
        super().__init__(
            f"job {job_kind}/{job_name} not stopped after {timeout:g}s (last state: {state})"
        )
        self.job_kind = job_kind
        self.job_name = job_name
        self.state = state
