"""Shared test fixtures."""

import json
from pathlib import Path

import pytest

from fedi_client.builder import ServerInfo
from fedi_client.models import Account, Relationship, Status, Visibility

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SERVER = "example.social"
BASE_URL = f"https://{SERVER}"


def load_fixture(name: str):
    with open(FIXTURES_DIR / name) as f:
        return json.load(f)


@pytest.fixture
def account_json() -> dict:
    return load_fixture("account.json")


@pytest.fixture
def status_json() -> dict:
    return load_fixture("status.json")


@pytest.fixture
def notifications_json() -> list:
    return load_fixture("notifications.json")


@pytest.fixture
def instance_json() -> dict:
    return load_fixture("instance.json")


@pytest.fixture
def server_info() -> ServerInfo:
    return ServerInfo(server=SERVER, token="T")


@pytest.fixture
def anonymous() -> ServerInfo:
    return ServerInfo(server=SERVER)


def account_payload(account_id: str, username: str = "") -> dict:
    return {"id": account_id, "username": username or f"user{account_id}"}


def relationship_payload(account_id: str, following: bool = True) -> dict:
    return {"id": account_id, "following": following, "showing_reblogs": following}


@pytest.fixture
def sample_status() -> Status:
    return Status(
        id="1",
        account=Account(id="7", username="bob", acct="bob"),
        visibility=Visibility.PUBLIC,
        content="<p>Hello</p>",
    )


@pytest.fixture
def sample_relationship() -> Relationship:
    return Relationship(id="7", following=True, showing_reblogs=True)
