"""Error kinds raised by the place listing pipeline.

Each error carries the HTTP status it is surfaced with; the handler registered
in `app.main` renders them as `{"error": message}`.
"""


class PlacesError(Exception):
    """Base class for pipeline failures that abort a request."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientInputError(PlacesError):
    """Invalid request parameter (e.g. unknown category key)."""

    status_code = 400


class UpstreamUnavailable(PlacesError):
    """Geodata provider unreachable or answered with a non-success status."""

    status_code = 502


class UpstreamDataInvalid(PlacesError):
    """Geodata provider answered with a structurally invalid payload."""

    status_code = 500
