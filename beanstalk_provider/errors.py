"""Error taxonomy for Beanstalk API calls and resource operations."""


class BeanstalkError(Exception):
    """Base class for all provider errors."""


class NotFoundError(BeanstalkError):
    """The remote resource does not exist (HTTP 404).

    Carries no payload; read operations treat it as "resource gone".
    """

    def __str__(self) -> str:
        return "not found"


class HTTPStatusError(BeanstalkError):
    """Non-2xx, non-404 response from the API."""

    def __init__(self, status: int):
        self.status = status
        super().__init__(f"HTTP Error {status}")


class PayloadMissingError(BeanstalkError):
    """A result was requested but the server returned no body."""

    def __init__(self):
        super().__init__("server did not return a JSON payload")


class MalformedPayloadError(BeanstalkError):
    """The response body could not be decoded as JSON."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"error decoding response JSON payload: {detail}")


class UnsupportedOperationError(BeanstalkError):
    """The upstream service does not support this lifecycle operation."""


class ConfigError(BeanstalkError, ValueError):
    """Provider configuration is missing or invalid."""


class ReplacementRequiredError(UnsupportedOperationError):
    """A changed attribute cannot be updated in place.

    The resource has to be deleted and created again to apply it.
    """

    def __init__(self, type_name: str, fields):
        self.type_name = type_name
        self.fields = sorted(fields)
        super().__init__(
            f"{type_name} requires replacement to change: {', '.join(self.fields)}"
        )
