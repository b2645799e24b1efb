from .exceptions import ServiceException, SysCallError
from .general import SysCommand
from .interfaces import ServiceManager
from .output import info


class Systemctl(ServiceManager):
	@staticmethod
	def run(args: list[str]) -> SysCommand:
		return SysCommand(['systemctl', *args], environment_vars={'SYSTEMD_COLORS': '0'})

	def restart(self, service: str) -> None:
		info(f'Restarting service {service}')

		try:
			self.run(['restart', service])
		except SysCallError as err:
			raise ServiceException(f'Unable to restart service {service}: {err}')

	def enable(self, service: str) -> None:
		info(f'Enabling service {service}')

		try:
			self.run(['enable', service])
		except SysCallError as err:
			raise ServiceException(f'Unable to enable service {service}: {err}')
