"""Error types raised by the hours, aggregation and report layers."""


class VolunteerError(Exception):
    status_code = 500


class ValidationError(VolunteerError):
    """Missing or malformed input, e.g. a bad shift time."""
    status_code = 400


class NotFoundError(VolunteerError):
    """No records matched the requested scope."""
    status_code = 404


class ConflictError(VolunteerError):
    """Volunteer is already registered for the event on that date."""
    status_code = 409


class StreamError(VolunteerError):
    """Writing PDF bytes to the output failed."""
    status_code = 500
