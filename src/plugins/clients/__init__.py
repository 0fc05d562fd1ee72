"""
GitHub API clients.

REST (v3) for resource CRUD and GraphQL (v4) for auxiliary lookups.
"""

from plugins.clients.github_graphql import GitHubGraphQLClient
from plugins.clients.github_rest import GitHubRESTClient, GitHubResponse

__all__ = ["GitHubGraphQLClient", "GitHubRESTClient", "GitHubResponse"]
