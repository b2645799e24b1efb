import os

from hostinstall.lib.apt import Apt
from hostinstall.lib.args import LxdConfigHandler
from hostinstall.lib.exceptions import (
	ArgumentError,
	ConfigurationError,
	DaemonError,
	PackageError,
	RequirementError,
	SysCallError,
	UserError,
)
from hostinstall.lib.general import running_as_root
from hostinstall.lib.interfaces import ContainerDaemon, GroupManager, PackageManager, SnapManager
from hostinstall.lib.lxd import Lxd
from hostinstall.lib.models import LxdPreseed, LxdSettings
from hostinstall.lib.output import debug, error, info, logger, warn
from hostinstall.lib.snap import Snap
from hostinstall.lib.users import Groups, invoking_user


class LxdInstallation:
	def __init__(
		self,
		settings: LxdSettings,
		packages: PackageManager,
		snaps: SnapManager,
		groups: GroupManager,
		daemon: ContainerDaemon,
		environ: dict[str, str] | None = None,
	):
		self.settings = settings
		self.packages = packages
		self.snaps = snaps
		self.groups = groups
		self.daemon = daemon
		self.environ = dict(os.environ) if environ is None else environ

	def check_root(self) -> None:
		if not running_as_root():
			raise RequirementError('This script must be run as root (or with sudo).')

	def install_dependencies(self) -> None:
		required = self.settings.required_packages
		info(f'Checking system dependencies ({", ".join(required)})...')

		if missing := self.packages.missing(required):
			warn(f'Missing dependencies: {", ".join(missing)}')
			self.packages.install(missing)
			info('Dependencies installed successfully.', fg='green')
		else:
			info('System dependencies OK.', fg='green')

	def install_or_refresh(self) -> None:
		name = self.settings.snap_name
		info(f'Checking the {name} snap installation...')

		if self.snaps.is_installed(name):
			info(f'The {name} snap is already installed, refreshing to the latest stable version...')

			try:
				self.snaps.refresh(name)
			except PackageError as err:
				warn(f'Could not refresh the {name} snap, continuing with the installed version: {err}')
		else:
			self.snaps.install(name)
			info(f'The {name} snap was installed successfully.', fg='green')

	def add_user_to_group(self) -> None:
		group = self.settings.group
		user = invoking_user(self.environ)

		if not user.from_sudo:
			if user.name == 'root':
				warn(f"Could not determine a non-root user to add to group '{group}' (SUDO_USER is not set).")
				info(f'Add the desired user manually: sudo usermod -aG {group} <username>')
				return

			warn(f"SUDO_USER is not set, using the user '{user.name}' instead.")

		info(f"Checking whether user '{user.name}' belongs to group '{group}'...")

		if group in self.groups.groups(user.name):
			info(f"User '{user.name}' already belongs to group '{group}'.", fg='green')
			return

		self.groups.add_to_group(user.name, group)
		info(f"User '{user.name}' added. Log out and back in, or run 'newgrp {group}', for it to take effect.", fg='green')

	def wait_ready(self) -> None:
		timeout = self.settings.wait_timeout
		info(f'Waiting for the LXD daemon to become ready (timeout: {timeout}s)...')
		self.daemon.wait_ready(timeout)
		info('The LXD daemon is ready.', fg='green')

	def is_initialized(self) -> bool:
		"""
		Name based heuristic: LXD counts as initialized when the default
		storage pool and the default bridge both exist. A setup that uses
		other names is not recognized and will be initialized again.
		"""
		try:
			pools = self.daemon.list_pools()
			networks = self.daemon.list_networks()
		except (SysCallError, DaemonError, RequirementError) as err:
			warn(f'Could not list LXD storage pools or networks, assuming LXD is not initialized: {err}')
			return False

		return self.settings.storage_pool in pools and self.settings.network in networks

	def initialize(self) -> bool:
		info('Checking whether LXD is already initialized...')

		if self.is_initialized():
			info(
				f"LXD already seems to be initialized (pool '{self.settings.storage_pool}' "
				f"and network '{self.settings.network}' found).",
				fg='green',
			)
			return False

		warn("LXD does not seem to be initialized. Running 'lxd init --preseed'...")
		preseed = LxdPreseed.from_settings(self.settings)
		self.daemon.init_with_preseed(preseed.to_yaml())
		info('LXD initialized successfully from the preseed configuration.', fg='green')
		return True

	def perform_installation(self) -> None:
		self.check_root()
		self.install_dependencies()
		self.install_or_refresh()
		self.add_user_to_group()
		self.wait_ready()
		self.initialize()

		group = self.settings.group
		info('LXD installation and basic configuration completed!', fg='green')
		info(f"For the '{group}' group permissions to take effect for the added user,")
		info(f"log out and back in, or run 'newgrp {group}' (applies to the current shell only).")
		info('You can start using LXD with commands such as:')
		info('  lxc launch ubuntu:22.04 my-first-container')
		info('  lxc list')
		info('  lxc exec my-first-container -- bash')
		info('  lxc stop my-first-container')
		info('  lxc delete my-first-container')


def main(argv: list[str] | None = None) -> int:
	handler = LxdConfigHandler()
	# nothing reaches the log file before the arguments are known to be valid
	logger.hold()

	try:
		handler.parse(argv)
		settings = handler.settings()
	except ArgumentError as err:
		error(f'ERROR: {err}')
		print(handler.format_usage())
		logger.discard()
		return 1
	except ConfigurationError as err:
		error(f'ERROR: {err}')
		logger.discard()
		return 1

	logger.release()
	debug(f'Using settings: {settings.json()}')

	installation = LxdInstallation(
		settings,
		packages=Apt(),
		snaps=Snap(),
		groups=Groups(),
		daemon=Lxd(),
	)

	try:
		installation.perform_installation()
	except (RequirementError, PackageError, UserError, DaemonError, SysCallError) as err:
		error(f'ERROR: {err}')
		return 1

	return 0
