"""
Resource plugins package.

Resource plugins map one resource type onto the GitHub API. Built-in
resources live here; others are discovered via Python entry points
(group: 'teamctl.resources').
"""

from plugins.resources.base import ResourcePlugin, parse_id
from plugins.resources.github_team import GitHubTeamResource

__all__ = ["GitHubTeamResource", "ResourcePlugin", "parse_id"]
