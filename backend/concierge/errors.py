"""Typed failures raised by the assistant pipeline."""

GENERIC_CONNECTION_MESSAGE = "I'm having trouble connecting right now. Please try again."


class AssistantError(Exception):
    """
    Base class for assistant failures.

    ``user_message`` is the only text ever shown to the caller; the exception
    message itself may carry detail and stays in server logs.
    """

    code = "InternalError"
    status_code = 500
    retryable = False
    user_message = "Something went wrong. Please try again later."

    def to_payload(self) -> dict[str, str]:
        """Caller-safe response body."""
        return {"text": self.user_message, "code": self.code}


class MalformedInput(AssistantError):
    """Request body is missing a usable message."""

    code = "MalformedInput"
    status_code = 400
    user_message = "Please send a message for the assistant."


class ConfigurationMissing(AssistantError):
    """The generation backend credential is not configured."""

    code = "ConfigurationMissing"
    status_code = 500
    user_message = "Error: the assistant is not configured."


class DataUnavailable(AssistantError):
    """The listing store could not be read."""

    code = "DataUnavailable"
    status_code = 503
    retryable = True
    user_message = "I'm having trouble accessing our listings right now."


class BackendError(AssistantError):
    """The generation call failed or timed out."""

    code = "BackendError"
    status_code = 502
    retryable = True
    user_message = GENERIC_CONNECTION_MESSAGE


class BackendUnavailable(AssistantError):
    """The generation backend could not be reached."""

    code = "BackendUnavailable"
    status_code = 503
    retryable = True
    user_message = GENERIC_CONNECTION_MESSAGE
