"""
GitHub REST (v3) client.

Thin aiohttp wrapper exposing the team endpoints the resources need. Every
call returns ``(entity, GitHubResponse)``; failures are raised as
GitHubAPIError subclasses so 404 and 304 can be handled as signals.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

import aiohttp

from plugins.errors import GitHubAPIError

logger = logging.getLogger(__name__)


@dataclass
class GitHubResponse:
    """Transport metadata for a completed request."""

    status: int
    etag: str = ""
    headers: Dict[str, str] = field(default_factory=dict)


class GitHubRESTClient:
    """Client for the GitHub REST API."""

    def __init__(
        self,
        token: Optional[str] = None,
        api_base_url: str = "https://api.github.com",
        timeout: int = 30,
    ):
        self.token = token
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout

    def _get_headers(self, etag: Optional[str] = None) -> Dict[str, str]:
        """Get HTTP headers for GitHub API requests."""
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if etag:
            headers["If-None-Match"] = etag
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        etag: Optional[str] = None,
        expected: Iterable[int] = (200,),
    ) -> Tuple[Any, GitHubResponse]:
        url = f"{self.api_base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        logger.debug(f"GitHub request: {method} {path}")
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.request(
                method, url, headers=self._get_headers(etag), json=payload
            ) as response:
                meta = GitHubResponse(
                    status=response.status,
                    etag=response.headers.get("ETag", ""),
                    headers=dict(response.headers),
                )
                body: Any = None
                if response.status not in (204, 304):
                    text = await response.text()
                    if text:
                        try:
                            body = json.loads(text)
                        except ValueError:
                            body = text

                if response.status not in expected:
                    raise GitHubAPIError.from_response(
                        method, url, response.status, body
                    )
                return body, meta

    # Owners

    async def get_organization(
        self, login: str
    ) -> Tuple[Dict[str, Any], GitHubResponse]:
        """Fetch an organization by login."""
        return await self._request("GET", f"/orgs/{login}")

    async def get_user(
        self, login: str
    ) -> Tuple[Dict[str, Any], GitHubResponse]:
        """Fetch a user by login."""
        return await self._request("GET", f"/users/{login}")

    # Teams

    async def create_team(
        self, org: str, team: Dict[str, Any]
    ) -> Tuple[Dict[str, Any], GitHubResponse]:
        """Create a team in an organization."""
        return await self._request(
            "POST", f"/orgs/{org}/teams", payload=team, expected=(201,)
        )

    async def get_team_by_id(
        self, org_id: int, team_id: int, etag: Optional[str] = None
    ) -> Tuple[Dict[str, Any], GitHubResponse]:
        """
        Fetch a team by numeric ID.

        Passing the ETag of a previous read makes GitHub answer 304 when the
        team is unchanged, which surfaces as NotModifiedError.
        """
        return await self._request(
            "GET", f"/organizations/{org_id}/team/{team_id}", etag=etag
        )

    async def get_team_by_slug(
        self, org: str, slug: str
    ) -> Tuple[Dict[str, Any], GitHubResponse]:
        """Fetch a team by slug."""
        return await self._request("GET", f"/orgs/{org}/teams/{slug}")

    async def edit_team_by_id(
        self, org_id: int, team_id: int, team: Dict[str, Any]
    ) -> Tuple[Dict[str, Any], GitHubResponse]:
        """Edit a team by numeric ID."""
        return await self._request(
            "PATCH", f"/organizations/{org_id}/team/{team_id}", payload=team
        )

    async def delete_team_by_id(
        self, org_id: int, team_id: int
    ) -> Tuple[None, GitHubResponse]:
        """Delete a team by numeric ID."""
        return await self._request(
            "DELETE", f"/organizations/{org_id}/team/{team_id}", expected=(204,)
        )

    async def remove_team_membership_by_slug(
        self, org: str, slug: str, username: str
    ) -> Tuple[None, GitHubResponse]:
        """Remove a user from a team."""
        return await self._request(
            "DELETE",
            f"/orgs/{org}/teams/{slug}/memberships/{username}",
            expected=(204,),
        )

    async def update_team_ldap_mapping(
        self, team_id: int, ldap_dn: str
    ) -> Tuple[Dict[str, Any], GitHubResponse]:
        """Map a team to an LDAP group (GitHub Enterprise Server only)."""
        return await self._request(
            "PATCH",
            f"/admin/teams/{team_id}/mapping",
            payload={"ldap_dn": ldap_dn},
        )
