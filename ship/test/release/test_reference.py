"""Tests for ship.release.reference."""

from __future__ import annotations

import pytest

from ship.core.result import Err, Ok
from ship.release.errors import InvalidReference
from ship.release.reference import LATEST_TAG, ImageReference, release_references


def test_uri() -> None:
    ref = ImageReference(registry="registry.test:5000", repository="acme/ip", tag="1")
    assert ref.uri == "registry.test:5000/acme/ip:1"
    assert str(ref) == ref.uri


def test_release_references_share_registry_and_repository() -> None:
    versioned, latest = release_references(
        registry="registry.test", repository="acme/ip", version="20240101-120000"
    )

    assert versioned.tag == "20240101-120000"
    assert latest.tag == LATEST_TAG == "latest"
    assert (versioned.registry, versioned.repository) == (latest.registry, latest.repository)


@pytest.mark.parametrize(
    ("registry", "repository", "tag"),
    [
        ("astepan0v.registry.twcstorage.ru", "adatari/ip", "20240101-120000"),
        ("localhost:5000", "img", "latest"),
        ("registry.test", "team/sub_group/app-name", "v1.2.3"),
    ],
)
def test_valid_references(registry: str, repository: str, tag: str) -> None:
    ref = ImageReference(registry=registry, repository=repository, tag=tag)
    assert isinstance(ref.validate(), Ok)


@pytest.mark.parametrize(
    ("registry", "repository", "tag", "fragment"),
    [
        ("", "img", "latest", "registry host"),
        ("bad host", "img", "latest", "registry host"),
        ("registry.test", "", "latest", "empty repository"),
        ("registry.test", "Acme/IP", "latest", "repository component"),
        ("registry.test", "acme//ip", "latest", "repository component"),
        ("registry.test", "img", "", "tag"),
        ("registry.test", "img", "-leading-dash", "tag"),
        ("registry.test", "img", "has:colon", "tag"),
        ("registry.test", "img", "x" * 129, "tag"),
    ],
)
def test_invalid_references(registry: str, repository: str, tag: str, fragment: str) -> None:
    result = ImageReference(registry=registry, repository=repository, tag=tag).validate()

    assert isinstance(result, Err)
    assert isinstance(result.error, InvalidReference)
    assert fragment in result.error.reason
