"""
GitHub GraphQL (v4) client.

Used for lookups the REST API makes awkward, such as listing the members a
freshly created team was seeded with.
"""

import logging
from typing import Any, Dict, Optional

import aiohttp

from plugins.errors import GitHubAPIError

logger = logging.getLogger(__name__)

TEAM_MEMBERS_QUERY = """
query($login: String!, $slug: String!) {
  organization(login: $login) {
    team(slug: $slug) {
      members {
        nodes {
          login
        }
      }
    }
  }
}
"""


class GitHubGraphQLClient:
    """Client for the GitHub GraphQL API."""

    def __init__(
        self,
        token: Optional[str] = None,
        endpoint: str = "https://api.github.com/graphql",
        timeout: int = 30,
    ):
        self.token = token
        self.endpoint = endpoint
        self.timeout = timeout

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def query(
        self, query: str, variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Run a GraphQL query.

        Args:
            query: The GraphQL document.
            variables: Values for the query variables.

        Returns:
            The ``data`` object of the response.

        Raises:
            GitHubAPIError: On non-200 responses, a body that is not a JSON
                object, or a GraphQL ``errors`` payload.
        """
        payload = {"query": query, "variables": variables or {}}
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(
                self.endpoint, headers=self._get_headers(), json=payload
            ) as response:
                if response.status != 200:
                    raise GitHubAPIError(
                        f"GitHub GraphQL HTTP {response.status}: "
                        f"{await response.text()}",
                        status_code=response.status,
                    )
                try:
                    body = await response.json(content_type=None)
                except ValueError as e:
                    raise GitHubAPIError(
                        f"GitHub GraphQL returned malformed JSON: {e}",
                        status_code=response.status,
                    ) from e

        if not isinstance(body, dict):
            raise GitHubAPIError(
                "GitHub GraphQL returned an empty or non-object response",
                status_code=200,
            )

        if body.get("errors"):
            raise GitHubAPIError.graphql_errors(body["errors"])
        return body.get("data") or {}

    async def list_team_member_logins(self, org: str, slug: str) -> list[str]:
        """Return the logins of every member of a team."""
        data = await self.query(TEAM_MEMBERS_QUERY, {"login": org, "slug": slug})
        team = (data.get("organization") or {}).get("team") or {}
        nodes = (team.get("members") or {}).get("nodes") or []
        logins = [node["login"] for node in nodes if node.get("login")]
        logger.debug(f"Team {org}/{slug} has {len(logins)} member(s)")
        return logins
