"""
Error types raised by the GitHub clients and resources.

GitHub status codes that carry meaning for reconciliation (404 Not Found
and 304 Not Modified) get their own subclasses so resources can tell a
tombstone or a no-op apart from a failure.
"""

from typing import Any, Optional


class GitHubAPIError(Exception):
    """Raised when GitHub returns an error response."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(message)

    @classmethod
    def from_response(
        cls, method: str, url: str, status_code: int, body: Any
    ) -> "GitHubAPIError":
        """Build the most specific error for a failed REST response."""
        detail = ""
        if isinstance(body, dict) and body.get("message"):
            detail = f": {body['message']}"
        message = f"{method} {url}: {status_code}{detail}"

        if status_code == 404:
            return NotFoundError(message, status_code=status_code, body=body)
        if status_code == 304:
            return NotModifiedError(message, status_code=status_code, body=body)
        return cls(message, status_code=status_code, body=body)

    @classmethod
    def graphql_errors(cls, errors: Any) -> "GitHubAPIError":
        """Return an error for GraphQL `errors` payloads."""
        return cls(f"GitHub GraphQL errors: {errors}", body=errors)


class NotFoundError(GitHubAPIError):
    """The remote object does not exist (HTTP 404)."""


class NotModifiedError(GitHubAPIError):
    """The remote object is unchanged since the supplied ETag (HTTP 304)."""


class UnconvertibleIdError(ValueError):
    """Raised when a stored resource ID is not a valid integer."""

    def __init__(self, resource_id: str, cause: Exception):
        self.resource_id = resource_id
        super().__init__(
            f"Unexpected ID format ({resource_id!r}), expected numerical ID. {cause}"
        )


class OrganizationRequiredError(Exception):
    """Raised when a resource needs an organization but the owner is a user."""

    def __init__(self, owner: str):
        self.owner = owner
        super().__init__(
            f"This resource can only be used in the context of an organization, "
            f"{owner!r} is a user"
        )


class SchemaValidationError(ValueError):
    """Raised when desired state does not satisfy a resource schema."""

    def __init__(self, resource_type: str, message: str):
        self.resource_type = resource_type
        super().__init__(f"Invalid {resource_type} configuration: {message}")
