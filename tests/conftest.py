"""Shared fixtures."""

from __future__ import annotations

import pytest

from infura_node.config import Credentials

from tests.fakes import FakeNode


@pytest.fixture()
def credentials() -> Credentials:
    return Credentials(project_id="abc123", project_secret="s3cret")


@pytest.fixture()
def node() -> FakeNode:
    return FakeNode()
