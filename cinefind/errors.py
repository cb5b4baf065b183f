"""Error types for CineFind.

Every error carries a user-facing ``message`` that the session surfaces
as a transient banner. The original exception, where there is one, is
chained with ``raise ... from exc``.
"""

DEFAULT_NO_RESULTS_MESSAGE = "No movies found. Try another search."


class CineFindError(Exception):
    """Base class for all CineFind errors."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CineFindError):
    """Input rejected before any network call was made."""

    default_message = "Invalid input."


class TransportError(CineFindError):
    """The request failed or the response body could not be read."""

    default_message = "Error searching movies. Check your connection and try again."


class StreamUnsupported(TransportError):
    """The response exposes no readable chunked body."""

    default_message = "Streaming response body not supported."


class MalformedPayload(CineFindError):
    """The response body is not valid text or not valid JSON."""

    default_message = "Received an invalid response from the movie service."


class NoResults(CineFindError):
    """The API answered, but with nothing to show."""

    default_message = DEFAULT_NO_RESULTS_MESSAGE


class ConfigError(CineFindError):
    """The configuration file could not be written."""

    default_message = "Could not save configuration."
