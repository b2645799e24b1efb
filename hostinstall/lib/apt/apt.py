from ..exceptions import PackageError, SysCallError
from ..general import SysCommand
from ..interfaces import PackageManager
from ..output import debug, info
from .debconf import set_selections


class Apt(PackageManager):
	def __init__(self) -> None:
		self.synced = False

	@staticmethod
	def run(args: list[str], default_cmd: str = 'apt-get') -> SysCommand:
		"""
		A centralized function to call `apt-get` from.
		The frontend is forced to be non-interactive so that no
		configuration prompt can stall an unattended run.
		"""
		return SysCommand(
			[default_cmd, *args],
			environment_vars={'DEBIAN_FRONTEND': 'noninteractive'},
		)

	def is_installed(self, package: str) -> bool:
		try:
			status = SysCommand(['dpkg-query', '-W', '-f=${Status}', package]).decode()
		except SysCallError as err:
			debug(f'dpkg-query could not find {package}: {err.exit_code}')
			return False

		return 'ok installed' in status

	def update(self) -> None:
		if self.synced:
			return

		info('Updating the package lists (apt-get update)...')

		try:
			self.run(['update', '-y'])
		except SysCallError as err:
			raise PackageError(f'Could not update the package lists: {err}')

		self.synced = True

	def install(self, packages: list[str]) -> None:
		self.update()

		info(f'Installing packages: {packages}')

		try:
			self.run(['install', '-y', *packages])
		except SysCallError as err:
			raise PackageError(f'Could not install {", ".join(packages)}: {err}')

	def preseed(self, package: str, selections: dict[str, tuple[str, str]]) -> None:
		set_selections(package, selections)

	def upgrade(self, packages: list[str]) -> None:
		self.update()

		info(f'Upgrading packages: {packages}')

		try:
			self.run(['install', '-y', '--only-upgrade', *packages])
		except SysCallError as err:
			raise PackageError(f'Could not upgrade {", ".join(packages)}: {err}')
