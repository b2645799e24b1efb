import json
import os
from subprocess import CalledProcessError

from .exceptions import DaemonError, SysCallError
from .general import SysCommand, locate_binary, run
from .interfaces import ContainerDaemon
from .output import debug

SNAP_BIN = '/snap/bin'


def _snap_path() -> str:
	path = os.environ.get('PATH', '')
	if SNAP_BIN in path.split(os.pathsep):
		return path
	return f'{path}{os.pathsep}{SNAP_BIN}' if path else SNAP_BIN


def _names(listing: str) -> list[str]:
	try:
		entries = json.loads(listing or '[]')
	except json.JSONDecodeError as err:
		raise DaemonError(f'Could not parse listing from lxc: {err}')

	return [entry['name'] for entry in entries if isinstance(entry, dict) and 'name' in entry]


class Lxd(ContainerDaemon):
	"""
	The LXD daemon as installed from the snap. The snap binaries live in
	/snap/bin which is not on PATH for a freshly installed system, so every
	call extends it.
	"""

	def __init__(self) -> None:
		self._env = {'PATH': _snap_path()}

	def _run(self, cmd: list[str]) -> SysCommand:
		return SysCommand(cmd, environment_vars=self._env)

	def wait_ready(self, timeout: int) -> None:
		try:
			self._run(['lxd', 'waitready', f'--timeout={timeout}'])
		except SysCallError as err:
			raise DaemonError(f'LXD daemon did not become ready within {timeout}s: {err}')

	def list_pools(self) -> list[str]:
		return _names(self._run(['lxc', 'storage', 'list', '--format=json']).decode())

	def list_networks(self) -> list[str]:
		return _names(self._run(['lxc', 'network', 'list', '--format=json']).decode())

	def init_with_preseed(self, preseed: str) -> None:
		debug(f'Preseed document:\n{preseed}')

		try:
			run(
				[locate_binary('lxd', path=self._env['PATH']), 'init', '--preseed'],
				input_data=preseed.encode(),
				environment_vars=self._env,
			)
		except CalledProcessError as err:
			output = (err.output or b'').decode(errors='backslashreplace').strip()
			raise DaemonError(f"'lxd init --preseed' failed with exit code [{err.returncode}]: {output}")
