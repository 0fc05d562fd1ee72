"""Pytest configuration and fixtures."""

import pytest

from config import RetryConfig, reset_config
from plugins.provider import Provider
from plugins.registry import reset_registry
from fakes import FakeGraphQLClient, FakeRESTClient


@pytest.fixture(autouse=True)
def clean_globals():
    """Reset the config and registry singletons around every test."""
    reset_config()
    reset_registry()
    yield
    reset_config()
    reset_registry()


@pytest.fixture
def retry_policy():
    """The default retry count with no waiting."""
    return RetryConfig(retries=10, wait_seconds=0)


@pytest.fixture
def fake_rest():
    return FakeRESTClient()


@pytest.fixture
def fake_graphql(fake_rest):
    return FakeGraphQLClient(fake_rest)


@pytest.fixture
def provider(fake_rest, fake_graphql, retry_policy):
    """A provider for organization 'acme' backed by the fakes."""
    return Provider(
        owner=fake_rest.org,
        rest=fake_rest,
        graphql=fake_graphql,
        retry=retry_policy,
        owner_id=fake_rest.org_id,
        is_organization=True,
    )


@pytest.fixture
def sample_team_config():
    """Sample desired state for a github_team."""
    return {
        "name": "Platform Engineering",
        "description": "Owns CI and infrastructure",
        "privacy": "closed",
    }
