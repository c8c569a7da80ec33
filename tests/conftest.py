"""Pytest configuration and shared fixtures."""

import asyncio

import pytest

from campimages.pipeline.models import CandidateFile, UploadAuthorization, UploadLimits
from campimages.pipeline.session_provider import StaticSessionProvider, UserSession

PUBLIC_BASE = "https://storage.googleapis.com/campground-images"


def make_file(name="photo.jpg", size=1024, content_type="image/jpeg", last_modified=1700000000.0):
    """Build a candidate file with ``size`` bytes of content."""
    return CandidateFile(
        name=name,
        content_type=content_type,
        data=b"\xff" * size,
        last_modified=last_modified,
    )


class FakeBinding:
    """Storage binding double recording every call.

    ``gates`` maps a file name to an asyncio.Event the transfer waits on,
    which lets tests decide the order in which uploads resolve.
    ``fail`` maps a file name to the exception its transfer raises.
    """

    def __init__(self):
        self.authorize_calls = []
        self.transfer_calls = []
        self.direct_calls = []
        self.gates = {}
        self.fail = {}
        self.counter = 0

    async def authorize(self, parent_id, file):
        self.authorize_calls.append((parent_id, file.name))
        self.counter += 1
        path = f"campgrounds/{parent_id}/{self.counter:04d}-{file.name}"
        return UploadAuthorization(
            path=path,
            signed_url=f"https://signed.example/{path}",
            public_url=f"{PUBLIC_BASE}/{path}",
        )

    async def transfer(self, authorization, file, on_progress):
        self.transfer_calls.append(authorization.path)
        on_progress(0)
        gate = self.gates.get(file.name)
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)
        if file.name in self.fail:
            raise self.fail[file.name]
        on_progress(50)
        on_progress(100)

    async def upload_direct(self, namespace, file):
        self.direct_calls.append((namespace, file.name))
        await asyncio.sleep(0)
        if file.name in self.fail:
            raise self.fail[file.name]
        self.counter += 1
        return f"{namespace}/{self.counter:04d}.jpg"

    def public_url(self, path):
        return f"{PUBLIC_BASE}/{path}"


@pytest.fixture
def binding():
    return FakeBinding()


@pytest.fixture
def session_provider():
    return StaticSessionProvider(UserSession(user_id="user-1", access_token="token"))


@pytest.fixture
def limits():
    return UploadLimits(max_images=10, max_file_bytes=5 * 1024 * 1024)
