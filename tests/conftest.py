import shutil
from pathlib import Path

import pytest
from pytest import MonkeyPatch

from hostinstall.lib.exceptions import DaemonError, PackageError, ServiceException, SysCallError, UserError
from hostinstall.lib.interfaces import (
	ContainerDaemon,
	DatabaseAdmin,
	GroupManager,
	PackageManager,
	ServiceManager,
	SnapManager,
)
from hostinstall.lib.output import logger
from hostinstall.lib.storage import storage


@pytest.fixture(autouse=True)
def log_directory(tmp_path: Path, monkeypatch: MonkeyPatch) -> Path:
	directory = tmp_path / 'log'
	monkeypatch.setattr(logger, '_path', directory)
	monkeypatch.setattr(logger, '_disabled', False)
	monkeypatch.setattr(logger, '_pending', None)
	monkeypatch.setitem(storage, 'debug', False)
	return directory


@pytest.fixture(scope='session')
def data_dir() -> Path:
	return Path(__file__).parent / 'data'


@pytest.fixture(scope='session')
def mysql_config_fixture(data_dir: Path) -> Path:
	return data_dir / 'mysql_config.json'


@pytest.fixture(scope='session')
def lxd_config_fixture(data_dir: Path) -> Path:
	return data_dir / 'lxd_config.json'


@pytest.fixture
def mysqld_cnf(tmp_path: Path, data_dir: Path):  # type: ignore[no-untyped-def]
	"""Copies one of the mysqld.cnf samples into a scratch directory."""

	def _copy(name: str) -> Path:
		target = tmp_path / 'mysqld.cnf'
		shutil.copyfile(data_dir / name, target)
		return target

	return _copy


class FakeApt(PackageManager):
	def __init__(self, installed: list[str] | None = None, fail_install: bool = False, fail_upgrade: bool = False) -> None:
		self.installed = set(installed or [])
		self.fail_install = fail_install
		self.fail_upgrade = fail_upgrade
		self.calls: list[tuple[str, object]] = []
		self.selections: dict[str, tuple[str, str]] = {}

	def is_installed(self, package: str) -> bool:
		return package in self.installed

	def update(self) -> None:
		self.calls.append(('update', None))

	def install(self, packages: list[str]) -> None:
		self.calls.append(('install', list(packages)))

		if self.fail_install:
			raise PackageError(f'Could not install {", ".join(packages)}')

		self.installed.update(packages)

	def upgrade(self, packages: list[str]) -> None:
		self.calls.append(('upgrade', list(packages)))

		if self.fail_upgrade:
			raise PackageError(f'Could not upgrade {", ".join(packages)}')

	def preseed(self, package: str, selections: dict[str, tuple[str, str]]) -> None:
		self.calls.append(('preseed', package))
		self.selections.update(selections)


class FakeSnap(SnapManager):
	def __init__(self, installed: bool = False, fail_install: bool = False, fail_refresh: bool = False) -> None:
		self.installed = installed
		self.fail_install = fail_install
		self.fail_refresh = fail_refresh
		self.calls: list[tuple[str, str]] = []

	def is_installed(self, name: str) -> bool:
		return self.installed

	def install(self, name: str) -> None:
		self.calls.append(('install', name))

		if self.fail_install:
			raise PackageError(f'Could not install snap {name}')

		self.installed = True

	def refresh(self, name: str) -> None:
		self.calls.append(('refresh', name))

		if self.fail_refresh:
			raise PackageError(f'Could not refresh snap {name}')


class FakeServices(ServiceManager):
	def __init__(self, fail: bool = False) -> None:
		self.fail = fail
		self.calls: list[tuple[str, str]] = []

	def restart(self, service: str) -> None:
		self.calls.append(('restart', service))

		if self.fail:
			raise ServiceException(f'Unable to restart service {service}')

	def enable(self, service: str) -> None:
		self.calls.append(('enable', service))


class FakeDatabase(DatabaseAdmin):
	def __init__(self, fail: bool = False) -> None:
		self.fail = fail
		self.statements: list[str] = []

	def execute(self, statement: str) -> None:
		self.statements.append(statement)

		if self.fail:
			raise SysCallError('mysql exited with abnormal exit code [1]', 1)


class FakeGroups(GroupManager):
	def __init__(self, memberships: dict[str, list[str]] | None = None, fail: bool = False) -> None:
		self.memberships = memberships or {}
		self.fail = fail
		self.added: list[tuple[str, str]] = []

	def groups(self, user: str) -> list[str]:
		return self.memberships.get(user, [])

	def add_to_group(self, user: str, group: str) -> None:
		if self.fail:
			raise UserError(f"Could not add '{user}' to group '{group}'")

		self.added.append((user, group))
		self.memberships.setdefault(user, []).append(group)


class FakeDaemon(ContainerDaemon):
	def __init__(
		self,
		pools: list[str] | None = None,
		networks: list[str] | None = None,
		ready: bool = True,
		listing_error: Exception | None = None,
	) -> None:
		self.pools = pools or []
		self.networks = networks or []
		self.ready = ready
		self.listing_error = listing_error
		self.waited: list[int] = []
		self.preseeds: list[str] = []

	def wait_ready(self, timeout: int) -> None:
		self.waited.append(timeout)

		if not self.ready:
			raise DaemonError(f'LXD daemon did not become ready within {timeout}s')

	def list_pools(self) -> list[str]:
		if self.listing_error:
			raise self.listing_error
		return self.pools

	def list_networks(self) -> list[str]:
		if self.listing_error:
			raise self.listing_error
		return self.networks

	def init_with_preseed(self, preseed: str) -> None:
		self.preseeds.append(preseed)


@pytest.fixture
def fakes():  # type: ignore[no-untyped-def]
	"""Gives tests access to the fake capability classes."""

	class _Fakes:
		Apt = FakeApt
		Snap = FakeSnap
		Services = FakeServices
		Database = FakeDatabase
		Groups = FakeGroups
		Daemon = FakeDaemon

	return _Fakes
