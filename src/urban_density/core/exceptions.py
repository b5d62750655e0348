"""Error taxonomy for density analysis.

Every failure the core can report is a ``DensityError`` carrying a stable
``kind`` string. The MCP layer turns these into ``{"errorKind", "message"}``
payloads for the caller.

- ``InvalidInputError``   malformed geometry, bad tag set. Never retried.
- ``NetworkFailureError`` transport error or timeout talking to an endpoint.
- ``UpstreamError``       an endpoint answered with non-2xx or a bad body.

The last two are retried across endpoints by the fetcher and only surface
once every endpoint has failed.
"""


class DensityError(Exception):
    """Base class for all density-analysis failures."""

    kind: str = "DensityError"
    retryable: bool = False

    def __init__(self, message: str, *, endpoint: str | None = None):
        self.message = message
        self.endpoint = endpoint
        super().__init__(message)

    def to_error_dict(self) -> dict[str, str]:
        return {"errorKind": self.kind, "message": self.message}


class InvalidInputError(DensityError):
    kind = "InvalidInput"


class NetworkFailureError(DensityError):
    kind = "NetworkFailure"
    retryable = True


class UpstreamError(DensityError):
    kind = "UpstreamError"
    retryable = True

    def __init__(self, message: str, *, endpoint: str | None = None, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message, endpoint=endpoint)
