"""Shared fixtures for registry, cache and install-root tests."""

import pytest
import requests

from fakes import REGISTRY, FakeRegistry, build_tarball
from installer import FlatLinker, Installer, PackageCache
from versioning.resolvers.npm import NpmVersionResolver


@pytest.fixture
def fake_registry(monkeypatch):
    registry = FakeRegistry()
    monkeypatch.setattr("common.http_client.requests.get", registry)
    return registry


@pytest.fixture
def tarball():
    return build_tarball


@pytest.fixture
def cache(tmp_path):
    return PackageCache(tmp_path / "cache")


@pytest.fixture
def linker(tmp_path):
    return FlatLinker(tmp_path / "node_modules")


@pytest.fixture
def installer(fake_registry, cache, linker):
    return Installer(NpmVersionResolver(registry_url=REGISTRY), cache, linker)


@pytest.fixture
def connection_error():
    return requests.ConnectionError("Simulated connection error")
