"""
Narrow capability interfaces for the external tools a provisioner drives.

The scripts only ever talk to these, so the sequencing logic can run against
fakes in tests while the real implementations shell out via ``SysCommand``.
"""
from abc import ABC, abstractmethod


class PackageManager(ABC):
	@abstractmethod
	def is_installed(self, package: str) -> bool:
		...

	@abstractmethod
	def update(self) -> None:
		...

	@abstractmethod
	def install(self, packages: list[str]) -> None:
		...

	@abstractmethod
	def upgrade(self, packages: list[str]) -> None:
		...

	@abstractmethod
	def preseed(self, package: str, selections: dict[str, tuple[str, str]]) -> None:
		...

	def missing(self, packages: list[str]) -> list[str]:
		return [package for package in packages if not self.is_installed(package)]


class SnapManager(ABC):
	@abstractmethod
	def is_installed(self, name: str) -> bool:
		...

	@abstractmethod
	def install(self, name: str) -> None:
		...

	@abstractmethod
	def refresh(self, name: str) -> None:
		...


class ServiceManager(ABC):
	@abstractmethod
	def restart(self, service: str) -> None:
		...

	@abstractmethod
	def enable(self, service: str) -> None:
		...


class DatabaseAdmin(ABC):
	@abstractmethod
	def execute(self, statement: str) -> None:
		...


class GroupManager(ABC):
	@abstractmethod
	def groups(self, user: str) -> list[str]:
		...

	@abstractmethod
	def add_to_group(self, user: str, group: str) -> None:
		...


class ContainerDaemon(ABC):
	@abstractmethod
	def wait_ready(self, timeout: int) -> None:
		...

	@abstractmethod
	def list_pools(self) -> list[str]:
		...

	@abstractmethod
	def list_networks(self) -> list[str]:
		...

	@abstractmethod
	def init_with_preseed(self, preseed: str) -> None:
		...
