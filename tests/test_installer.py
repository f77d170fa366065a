"""Tests for the recursive install orchestrator."""

import logging
import os

import pytest

from errors import ArchiveFetchError, InstallError, LinkError, NoMatchingVersion, UnexpectedStatus
from installer import InstallContext
from versioning.models import PackageSpecifier, ResolvedPackage
from fakes import MockResponse


def spec(name, selector="latest"):
    return PackageSpecifier(name, selector)


class TestInstallSinglePackage:
    """End-to-end install of one package against the fake registry."""

    def test_leftpad_scenario(self, installer, fake_registry, tmp_path):
        fake_registry.add_package("leftpad", {"1.0.0": {}}, files={"index.js": b"module.exports = pad;\n"})

        installed = installer.install(spec("leftpad", "1.0.0"), InstallContext())

        link = tmp_path / "node_modules" / "leftpad"
        assert installed == [ResolvedPackage("leftpad", "1.0.0")]
        assert link.is_symlink()
        assert (link / "index.js").read_bytes() == b"module.exports = pad;\n"
        assert sorted(os.listdir(link)) == ["index.js"]
        assert fake_registry.archive_calls() == 1

    def test_latest_follows_dist_tag(self, installer, fake_registry, tmp_path):
        fake_registry.add_package("a", {"2.0.0": {}, "2.1.0": {}}, {"latest": "2.1.0"})

        installed = installer.install(spec("a"), InstallContext())

        assert installed == [ResolvedPackage("a", "2.1.0")]
        target = os.path.realpath(tmp_path / "node_modules" / "a")
        assert target.endswith(os.path.join("a", "2.1.0"))

    def test_scoped_package(self, installer, fake_registry, tmp_path):
        fake_registry.add_package("@scope/pkg", {"2.0.0": {}})

        installer.install(spec("@scope/pkg", "2.0.0"), InstallContext())

        link = tmp_path / "node_modules" / "@scope" / "pkg"
        assert link.is_symlink()
        assert os.path.realpath(link) == str((tmp_path / "cache" / "@scope_pkg" / "2.0.0").resolve())


class TestInstallDependencies:
    """Recursive dependency installation."""

    def test_dependency_is_linked(self, installer, fake_registry, tmp_path):
        fake_registry.add_package("a", {"1.0.0": {"b": "1.0.0"}})
        fake_registry.add_package("b", {"1.0.0": {}})

        installed = installer.install(spec("a", "1.0.0"), InstallContext())

        assert installed == [ResolvedPackage("a", "1.0.0"), ResolvedPackage("b", "1.0.0")]
        assert (tmp_path / "node_modules" / "a").is_symlink()
        assert (tmp_path / "node_modules" / "b").is_symlink()

    def test_dependency_ranges_resolved(self, installer, fake_registry):
        fake_registry.add_package("a", {"1.0.0": {"b": "^1.0.0"}})
        fake_registry.add_package("b", {"1.0.0": {}, "1.2.0": {}, "2.0.0": {}})

        installed = installer.install(spec("a", "1.0.0"), InstallContext())

        assert ResolvedPackage("b", "1.2.0") in installed

    def test_cycle_terminates(self, installer, fake_registry):
        fake_registry.add_package("a", {"1.0.0": {"b": "^1.0.0"}})
        fake_registry.add_package("b", {"1.0.0": {"a": "1.x"}})

        installed = installer.install(spec("a", "1.0.0"), InstallContext())

        assert installed == [ResolvedPackage("a", "1.0.0"), ResolvedPackage("b", "1.0.0")]
        assert fake_registry.archive_calls() == 2

    def test_shared_dependency_installed_once(self, installer, fake_registry):
        fake_registry.add_package("app", {"1.0.0": {"left": "1.0.0", "right": "1.0.0"}})
        fake_registry.add_package("left", {"1.0.0": {"util": "^1.0.0"}})
        fake_registry.add_package("right", {"1.0.0": {"util": "~1.0.0"}})
        fake_registry.add_package("util", {"1.0.0": {}})

        context = InstallContext()
        installer.install(spec("app", "1.0.0"), context)

        assert context.linked.count(ResolvedPackage("util", "1.0.0")) == 1
        assert fake_registry.calls[fake_registry.tarball_url("util", "1.0.0")] == 1

    def test_last_writer_wins_in_install_root(self, installer, fake_registry, tmp_path):
        fake_registry.add_package("app", {"1.0.0": {"left": "1.0.0", "right": "1.0.0"}})
        fake_registry.add_package("left", {"1.0.0": {"util": "1.0.0"}})
        fake_registry.add_package("right", {"1.0.0": {"util": "2.0.0"}})
        fake_registry.add_package("util", {"1.0.0": {}, "2.0.0": {}})

        installer.install(spec("app", "1.0.0"), InstallContext())

        target = os.path.realpath(tmp_path / "node_modules" / "util")
        assert target.endswith(os.path.join("util", "2.0.0"))

    def test_repeated_version_is_relinked_by_later_sibling(self, installer, fake_registry, tmp_path):
        fake_registry.add_package("app", {"1.0.0": {"left": "1.0.0", "right": "1.0.0", "tail": "1.0.0"}})
        fake_registry.add_package("left", {"1.0.0": {"util": "1.0.0"}})
        fake_registry.add_package("right", {"1.0.0": {"util": "2.0.0"}})
        fake_registry.add_package("tail", {"1.0.0": {"util": "^1.0.0"}})
        fake_registry.add_package("util", {"1.0.0": {}, "2.0.0": {}})

        installed = installer.install(spec("app", "1.0.0"), InstallContext())

        target = os.path.realpath(tmp_path / "node_modules" / "util")
        assert target.endswith(os.path.join("util", "1.0.0"))
        assert installed.count(ResolvedPackage("util", "1.0.0")) == 1
        assert fake_registry.calls[fake_registry.tarball_url("util", "1.0.0")] == 1

    def test_top_level_requests_relink_in_order(self, installer, fake_registry, tmp_path):
        fake_registry.add_package("util", {"1.0.0": {}, "2.0.0": {}})
        context = InstallContext()

        installer.install(spec("util", "1.0.0"), context)
        installer.install(spec("util", "2.0.0"), context)
        again = installer.install(spec("util", "^1.0.0"), context)

        assert again == []
        target = os.path.realpath(tmp_path / "node_modules" / "util")
        assert target.endswith(os.path.join("util", "1.0.0"))
        assert fake_registry.archive_calls() == 2

    def test_failing_dependency_aborts_remaining_siblings(self, installer, fake_registry, tmp_path):
        fake_registry.add_package("a", {"1.0.0": {"broken": "9.x", "later": "1.0.0"}})
        fake_registry.add_package("broken", {"1.0.0": {}})
        fake_registry.add_package("later", {"1.0.0": {}})

        with pytest.raises(InstallError) as excinfo:
            installer.install(spec("a", "1.0.0"), InstallContext())

        assert "install a@1.0.0" in str(excinfo.value)
        assert "install broken@9.x" in str(excinfo.value)
        assert isinstance(excinfo.value.cause, InstallError)
        assert isinstance(excinfo.value.cause.cause, NoMatchingVersion)
        assert (tmp_path / "node_modules" / "a").is_symlink()
        assert not (tmp_path / "node_modules" / "later").exists()
        assert fake_registry.metadata_calls("later") == 0


class TestMemoization:
    """Re-entrancy suppression through the InstallContext."""

    def test_same_specifier_twice_does_no_new_work(self, installer, fake_registry, tmp_path):
        fake_registry.add_package("leftpad", {"1.0.0": {}})
        context = InstallContext()

        first = installer.install(spec("leftpad", "1.0.0"), context)
        second = installer.install(spec("leftpad", "1.0.0"), context)

        assert first == [ResolvedPackage("leftpad", "1.0.0")]
        assert second == []
        assert fake_registry.metadata_calls("leftpad") == 1
        assert fake_registry.archive_calls() == 1
        assert (tmp_path / "node_modules" / "leftpad" / "index.js").exists()

    def test_different_selectors_same_version_fetch_once(self, installer, fake_registry):
        fake_registry.add_package("leftpad", {"1.0.0": {}}, {"latest": "1.0.0"})
        context = InstallContext()

        installer.install(spec("leftpad", "latest"), context)
        again = installer.install(spec("leftpad", "^1.0.0"), context)

        assert again == []
        assert fake_registry.metadata_calls("leftpad") == 2
        assert fake_registry.archive_calls() == 1

    def test_fresh_context_reinstalls_from_cache(self, installer, fake_registry):
        fake_registry.add_package("leftpad", {"1.0.0": {}})

        installer.install(spec("leftpad", "1.0.0"), InstallContext())
        again = installer.install(spec("leftpad", "1.0.0"), InstallContext())

        assert again == [ResolvedPackage("leftpad", "1.0.0")]
        assert fake_registry.archive_calls() == 1

    def test_failure_leaves_request_marked(self, installer, fake_registry):
        context = InstallContext()

        with pytest.raises(InstallError) as excinfo:
            installer.install(spec("ghost", "1.0.0"), context)
        assert isinstance(excinfo.value.cause, UnexpectedStatus)

        assert installer.install(spec("ghost", "1.0.0"), context) == []
        assert fake_registry.metadata_calls("ghost") == 1


class TestInstallErrors:
    """Errors from the cache and link steps are wrapped with the specifier."""

    def test_link_failure_wrapped(self, installer, fake_registry, tmp_path):
        fake_registry.add_package("@x/leftpad", {"1.0.0": {}})
        (tmp_path / "node_modules").write_bytes(b"not a directory")

        with pytest.raises(InstallError) as excinfo:
            installer.install(spec("@x/leftpad", "^1.0.0"), InstallContext())

        assert str(excinfo.value).startswith("install @x/leftpad@^1.0.0: ")
        assert isinstance(excinfo.value.cause, LinkError)

    def test_archive_failure_wrapped(self, installer, fake_registry, tmp_path):
        fake_registry.add_package("leftpad", {"1.0.0": {}})
        fake_registry.add(fake_registry.tarball_url("leftpad", "1.0.0"), MockResponse(500))

        with pytest.raises(InstallError) as excinfo:
            installer.install(spec("leftpad", "1.0.0"), InstallContext())

        assert isinstance(excinfo.value.cause, ArchiveFetchError)
        assert not (tmp_path / "node_modules" / "leftpad").exists()


class TestProgressLogging:
    def test_progress_lines_at_info(self, installer, fake_registry, caplog):
        fake_registry.add_package("leftpad", {"1.0.0": {}})

        with caplog.at_level(logging.INFO):
            installer.install(spec("leftpad", "1.0.0"), InstallContext())

        messages = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
        assert "Resolving leftpad@1.0.0..." in messages
        assert f"Downloading {fake_registry.tarball_url('leftpad', '1.0.0')}..." in messages
        assert "Linked leftpad@1.0.0" in messages
