"""
Provider - the owner context handed to every resource operation.

Carries the owner login and ID, whether the owner is an organization, the
REST and GraphQL clients, and the retry policy. Resources receive it as an
explicit argument so tests can substitute fakes for the clients.
"""

import logging
from typing import Any, Optional

from config import Config, RetryConfig
from plugins.clients import GitHubGraphQLClient, GitHubRESTClient
from plugins.errors import NotFoundError, OrganizationRequiredError

logger = logging.getLogger(__name__)


class Provider:
    """Configured GitHub owner plus API clients."""

    def __init__(
        self,
        owner: str,
        rest: Any,
        graphql: Any,
        retry: Optional[RetryConfig] = None,
        owner_id: Optional[int] = None,
        is_organization: bool = False,
    ):
        self.owner = owner
        self.rest = rest
        self.graphql = graphql
        self.retry = retry or RetryConfig()
        self.owner_id = owner_id
        self.is_organization = is_organization

    @classmethod
    def from_config(cls, config: Config) -> "Provider":
        """Build a provider with real clients from configuration."""
        gh = config.github
        if not gh.token:
            logger.warning(
                "GitHub token not configured. Set GITHUB_TOKEN environment variable."
            )
        return cls(
            owner=gh.owner,
            rest=GitHubRESTClient(
                token=gh.token, api_base_url=gh.api_base_url, timeout=gh.timeout
            ),
            graphql=GitHubGraphQLClient(
                token=gh.token, endpoint=gh.graphql_url, timeout=gh.timeout
            ),
            retry=config.retry,
        )

    async def configure(self) -> None:
        """
        Resolve the owner's ID and kind.

        The owner is looked up as an organization first and as a user when
        no organization of that name exists.
        """
        if not self.owner:
            raise ValueError(
                "GitHub owner not configured. Set GITHUB_OWNER environment variable."
            )

        try:
            org, _ = await self.rest.get_organization(self.owner)
            self.owner_id = org["id"]
            self.is_organization = True
        except NotFoundError:
            user, _ = await self.rest.get_user(self.owner)
            self.owner_id = user["id"]
            self.is_organization = False

        logger.debug(
            f"Provider configured: owner={self.owner}, id={self.owner_id}, "
            f"organization={self.is_organization}"
        )

    def check_organization(self) -> None:
        """Raise unless the owner is an organization."""
        if not self.is_organization:
            raise OrganizationRequiredError(self.owner)
