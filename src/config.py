"""
Configuration module for teamctl.

Loads configuration from environment variables. The GitHub credentials,
the retry policy used against GitHub's eventual consistency and the CLI
defaults are kept in separate dataclasses.
"""

import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class GitHubConfig:
    """GitHub API connection configuration."""

    token: str = field(default="", repr=False)  # Never log token
    owner: str = ""
    api_base_url: str = "https://api.github.com"
    graphql_url: str = "https://api.github.com/graphql"
    timeout: int = 30  # seconds per request

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        api_base_url = os.getenv("GITHUB_API_URL", "https://api.github.com")
        return cls(
            token=os.getenv("GITHUB_TOKEN", ""),
            owner=os.getenv("GITHUB_OWNER", ""),
            api_base_url=api_base_url.rstrip("/"),
            graphql_url=os.getenv(
                "GITHUB_GRAPHQL_URL", f"{api_base_url.rstrip('/')}/graphql"
            ),
            timeout=int(os.getenv("GITHUB_TIMEOUT", "30")),
        )


@dataclass
class RetryConfig:
    """
    Bounded retry policy for eventually consistent team lookups.

    Parallel appliers may rename, create or delete teams underneath us, so
    parent lookups and reads are retried a fixed number of times with a
    fixed wait in between.
    """

    retries: int = 10
    wait_seconds: float = 5.0

    def __post_init__(self):
        if self.retries < 0:
            raise ValueError("Retry count cannot be negative")
        if self.wait_seconds < 0:
            raise ValueError("Retry wait cannot be negative")

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(
            retries=int(os.getenv("TEAMCTL_RETRY_COUNT", "10")),
            wait_seconds=float(os.getenv("TEAMCTL_RETRY_WAIT_SECONDS", "5")),
        )


@dataclass
class CLIConfig:
    """CLI host configuration."""

    state_file: str = "teamctl.state.json"
    log_level: str = "INFO"
    parallelism: int = 10  # resources reconciled concurrently

    @classmethod
    def from_env(cls):
        """Load from environment variables."""
        return cls(
            state_file=os.getenv("TEAMCTL_STATE_FILE", "teamctl.state.json"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            parallelism=int(os.getenv("TEAMCTL_PARALLELISM", "10")),
        )


@dataclass
class Config:
    """Main configuration object."""

    github: GitHubConfig
    retry: RetryConfig
    cli: CLIConfig

    @classmethod
    def from_env(cls):
        """Load all configuration from environment variables."""
        return cls(
            github=GitHubConfig.from_env(),
            retry=RetryConfig.from_env(),
            cli=CLIConfig.from_env(),
        )

    @classmethod
    def default(cls):
        """Return default configuration."""
        return cls(
            github=GitHubConfig(),
            retry=RetryConfig(),
            cli=CLIConfig(),
        )


# Global config instance
config: Optional[Config] = None


def load_config() -> Config:
    """Load configuration (singleton pattern)."""
    global config
    if config is None:
        config = Config.from_env()
    return config


def get_config() -> Config:
    """Get the current configuration."""
    if config is None:
        return load_config()
    return config


def reset_config() -> None:
    """Reset configuration (mainly for testing)."""
    global config
    config = None
