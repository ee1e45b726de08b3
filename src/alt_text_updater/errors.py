"""Exception types raised by the storefront client and the run orchestrator."""


class AltTextUpdaterError(Exception):
    """Base class for all updater errors."""


class MediaAPIError(AltTextUpdaterError):
    """Fatal error returned by the storefront GraphQL API."""


class CostExceededError(MediaAPIError):
    """The GraphQL query exceeded the API's cost limit."""

    def __init__(self) -> None:
        super().__init__(
            'Query cost exceeded. Reduce the "first" parameter or use bulk operations.'
        )


class InvalidResponseError(MediaAPIError):
    """A response did not have the expected structure."""


class UserErrorsError(MediaAPIError):
    """A mutation reported field-level user errors."""

    def __init__(self, image_id: str, messages: list[str]):
        self.image_id = image_id
        self.messages = messages
        super().__init__(f"Failed to update image {image_id}: {', '.join(messages)}")


class RateLimitedError(AltTextUpdaterError):
    """The remote API asked us to slow down. Retried, never fatal on its own."""


class MaxRetriesError(AltTextUpdaterError):
    """All attempts for a single remote request were used up."""


class MissingScopesError(AltTextUpdaterError):
    """The store app lacks access scopes the run needs."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(
            f"Missing required API scopes: {', '.join(missing)}. "
            "Please re-create the app with these permissions."
        )
