"""
GitHub Team Resource - Implements ResourcePlugin for organization teams.

Applies run many resources in parallel and sibling runs share nothing but
GitHub itself. A parent team may not exist yet, or may be mid-rename, when
a child is created; a team may vanish because its parent was deleted. The
lookups that are exposed to those races go through the provider's bounded
retry policy.
"""

import logging
from typing import Optional

from plugins.base import FieldSchema, PlanAction, PlanResult, ResourceData
from plugins.errors import GitHubAPIError, NotFoundError, NotModifiedError
from plugins.provider import Provider
from plugins.resources.base import ResourcePlugin, parse_id
from plugins.retry import retry_with_fixed_delay

logger = logging.getLogger(__name__)

TEAM_SCHEMA = {
    "name": FieldSchema(required=True),
    "description": FieldSchema(),
    "privacy": FieldSchema(default="secret", choices=["secret", "closed"]),
    "parent_team_id": FieldSchema(description="ID or slug of parent team"),
    "ldap_dn": FieldSchema(),
    "create_default_maintainer": FieldSchema(type="bool", default=False),
    "slug": FieldSchema(computed=True),
    "etag": FieldSchema(computed=True),
    "node_id": FieldSchema(computed=True),
    "members_count": FieldSchema(type="int", computed=True),
}


async def get_team_id(id_or_slug: str, provider: Provider) -> int:
    """Resolve a team ID from either a numeric ID or a team slug."""
    try:
        return int(id_or_slug)
    except ValueError:
        pass

    team, _ = await provider.rest.get_team_by_slug(provider.owner, id_or_slug)
    return team["id"]


class GitHubTeamResource(ResourcePlugin):
    """
    Resource plugin for ``github_team``.

    Identified by the team's numeric ID. The stored ETag is sent on reads
    so an unchanged team costs a 304 and leaves state as it is.
    """

    @property
    def type_name(self) -> str:
        return "github_team"

    @property
    def schema(self):
        return TEAM_SCHEMA

    async def create(self, d: ResourceData, provider: Provider) -> None:
        provider.check_organization()

        name = d.get("name")
        new_team = {
            "name": name,
            "description": d.get("description"),
            "privacy": d.get("privacy"),
        }

        parent_id = await self._resolve_parent_team_id(d, provider)
        if parent_id is not None:
            new_team["parent_team_id"] = parent_id

        logger.debug(f"Creating team: {name} ({provider.owner})")
        team, _ = await provider.rest.create_team(provider.owner, new_team)

        # The team exists from here on; failures below are not rolled back.
        if not d.get("create_default_maintainer"):
            logger.debug(
                f"Removing default maintainer from team: {name} ({provider.owner})"
            )
            await self._remove_default_maintainer(team["slug"], provider)

        ldap_dn = d.get("ldap_dn")
        if ldap_dn:
            await provider.rest.update_team_ldap_mapping(team["id"], ldap_dn)

        d.set_id(str(team["id"]))
        d.mark_new_resource()
        await self.read(d, provider)

    async def read(self, d: ResourceData, provider: Provider) -> None:
        provider.check_organization()

        team_id = parse_id(d.id)
        etag: Optional[str] = None
        if not d.is_new_resource():
            etag = d.get("etag") or None

        # A team renamed by a parallel apply can briefly look missing, so
        # 404s are retried along with every other API error.
        logger.debug(f"Reading team: {d.id}")
        try:
            team, response = await retry_with_fixed_delay(
                lambda: provider.rest.get_team_by_id(
                    provider.owner_id, team_id, etag=etag
                ),
                provider.retry,
                "Looking up team",
                retry_on=(GitHubAPIError,),
                give_up_on=(NotModifiedError,),
            )
        except NotModifiedError:
            logger.debug(f"Team {d.id} not modified since last read")
            return
        except NotFoundError:
            logger.warning(
                f"Removing team {d.id} from state because it no longer exists in GitHub"
            )
            d.set_id("")
            return

        d.set("etag", response.etag)
        d.set("description", team.get("description") or "")
        d.set("name", team.get("name") or "")
        d.set("privacy", team.get("privacy") or "")
        d.set("parent_team_id", self._observed_parent(d, team.get("parent")))
        d.set("ldap_dn", team.get("ldap_dn") or "")
        d.set("slug", team.get("slug") or "")
        d.set("node_id", team.get("node_id") or "")
        d.set("members_count", team.get("members_count") or 0)

    async def update(self, d: ResourceData, provider: Provider) -> None:
        provider.check_organization()

        edited_team = {
            "name": d.get("name"),
            "description": d.get("description"),
            "privacy": d.get("privacy"),
        }

        parent_id = await self._resolve_parent_team_id(d, provider)
        if parent_id is not None:
            edited_team["parent_team_id"] = parent_id

        team_id = parse_id(d.id)

        logger.debug(f"Updating team: {d.id}")
        team, _ = await provider.rest.edit_team_by_id(
            provider.owner_id, team_id, edited_team
        )

        if d.has_change("ldap_dn"):
            await provider.rest.update_team_ldap_mapping(team["id"], d.get("ldap_dn"))

        d.set_id(str(team["id"]))
        await self.read(d, provider)

    async def delete(self, d: ResourceData, provider: Provider) -> None:
        provider.check_organization()

        team_id = parse_id(d.id)

        logger.debug(f"Deleting team: {d.id}")
        try:
            await provider.rest.delete_team_by_id(provider.owner_id, team_id)
        except Exception as delete_error:
            # Deleting a parent team deletes its children, so a parallel
            # apply may already have removed this one.
            try:
                await provider.rest.get_team_by_id(provider.owner_id, team_id)
            except NotFoundError:
                logger.warning(
                    f"Removing team: {d.id} from state because it no longer exists"
                )
                d.set_id("")
                return
            except Exception as e:
                logger.error(f"Failed to delete team: {d.id} (lookup failed: {e})")
                raise delete_error
            logger.error(f"Failed to delete team: {d.id}")
            raise

        d.set_id("")

    def customize_diff(self, result: PlanResult) -> PlanResult:
        # GitHub derives the slug from the name.
        if result.action == PlanAction.UPDATE and "name" in result.changes:
            result.mark_unknown("slug")
        return result

    @staticmethod
    def _observed_parent(d: ResourceData, parent: Optional[dict]) -> str:
        """
        Report the parent by slug when that is how it is known.

        The configured value wins; a refresh without configuration falls
        back to the value recorded by the previous read.
        """
        if not parent:
            return ""
        known = d.get("parent_team_id") or d.get_state("parent_team_id")
        if known and known == parent.get("slug"):
            return known
        return str(parent["id"])

    async def _resolve_parent_team_id(
        self, d: ResourceData, provider: Provider
    ) -> Optional[int]:
        """
        Look up the configured parent team, waiting for it to appear.

        The parent may be created or renamed by a parallel apply, so any
        lookup error is retried.
        """
        parent, ok = d.get_ok("parent_team_id")
        if not ok:
            return None

        try:
            return await retry_with_fixed_delay(
                lambda: get_team_id(parent, provider),
                provider.retry,
                "Fetching parent team",
            )
        except Exception as e:
            logger.error(f"Unable to find parent team {parent}: {e}")
            raise

    async def _remove_default_maintainer(self, slug: str, provider: Provider) -> None:
        """Remove the members GitHub adds to a new team (its creator)."""
        logins = await provider.graphql.list_team_member_logins(provider.owner, slug)
        for login in logins:
            logger.debug(f"Removing default maintainer from team: {login}")
            await provider.rest.remove_team_membership_by_slug(
                provider.owner, slug, login
            )
