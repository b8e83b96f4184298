"""Shared fixtures for SkyDB tests."""

import pytest

from skydb.blob import MemoryBlobStore
from skydb.identity import User
from skydb.registry import MemoryRegistryTransport, RegistrySession
from skydb.wire import FileType, build_file_id


APP_ID = "SkySkapp"
FILENAME = "foo.txt"
SKYLINK = "CABAB_1Dt0FJsxqsu_J4TodNCbCGvtFf1Uys_3EgzOlTcg"


@pytest.fixture(scope="session")
def user():
    return User.new("john.doe@example.com", "supersecret")


@pytest.fixture(scope="session")
def other_user():
    return User.new("jane.doe@example.com", "supersecret")


@pytest.fixture
def file_id():
    return build_file_id(APP_ID, FileType.PUBLIC_UNENCRYPTED, FILENAME)


@pytest.fixture
def registry():
    return MemoryRegistryTransport()


@pytest.fixture
def blobs():
    return MemoryBlobStore()


@pytest.fixture
def transitions():
    return []


@pytest.fixture
def session(registry, blobs, transitions):
    return RegistrySession(
        registry,
        blobs,
        on_transition=lambda old, new: transitions.append(new),
    )
