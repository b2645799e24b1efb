from .exceptions import PackageError, SysCallError
from .general import SysCommand
from .interfaces import SnapManager
from .output import debug, info


class Snap(SnapManager):
	@staticmethod
	def run(args: list[str]) -> SysCommand:
		return SysCommand(['snap', *args])

	def is_installed(self, name: str) -> bool:
		try:
			self.run(['list', name])
		except SysCallError as err:
			debug(f'snap {name} is not installed: {err.exit_code}')
			return False

		return True

	def install(self, name: str) -> None:
		info(f'Installing snap {name}')

		try:
			self.run(['install', name])
		except SysCallError as err:
			raise PackageError(f'Could not install snap {name}: {err}')

	def refresh(self, name: str) -> None:
		info(f'Refreshing snap {name}')

		try:
			self.run(['refresh', name])
		except SysCallError as err:
			raise PackageError(f'Could not refresh snap {name}: {err}')
