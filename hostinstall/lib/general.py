from __future__ import annotations

import os
import shlex
import stat
import subprocess
import time
from shutil import which

from typing_extensions import override

from .exceptions import RequirementError, SysCallError
from .output import debug, logger


def locate_binary(name: str, path: str | None = None) -> str:
	if found := which(name, path=path):
		return found
	raise RequirementError(f'Binary {name} does not exist.')


def running_as_root() -> bool:
	return os.geteuid() == 0


class SysCommand:
	"""
	Runs a command to completion and keeps its combined stdout/stderr.
	A non-zero exit code raises :py:class:`SysCallError` carrying the output,
	so callers decide whether a failure is fatal or only worth a warning.
	"""

	def __init__(
		self,
		cmd: str | list[str],
		environment_vars: dict[str, str] | None = None,
	):
		if isinstance(cmd, str):
			cmd = shlex.split(cmd)
		else:
			cmd = list(cmd)

		# define the standard locale for command outputs. For now the C ascii one. Can be overridden
		self.environment_vars = {'LC_ALL': 'C'}
		if environment_vars:
			self.environment_vars.update(environment_vars)

		if cmd and not cmd[0].startswith(('/', './')):
			cmd[0] = locate_binary(cmd[0], path=self.environment_vars.get('PATH'))

		self.cmd = cmd

		self.exit_code: int | None = None
		self._trace_log = b''
		self.started: float | None = None
		self.ended: float | None = None

		self.execute()

	@override
	def __repr__(self) -> str:
		return self.decode('UTF-8', errors='backslashreplace')

	@override
	def __str__(self) -> str:
		return self.decode()

	def execute(self) -> None:
		_log_cmd(self.cmd)

		self.started = time.time()
		result = subprocess.run(
			self.cmd,
			stdout=subprocess.PIPE,
			stderr=subprocess.STDOUT,
			stdin=subprocess.DEVNULL,
			env={**os.environ, **self.environment_vars},
		)
		self.ended = time.time()
		debug(f'{self.cmd} exited with code {result.returncode} after {self.ended - self.started:.2f}s')

		self._trace_log = result.stdout
		self.exit_code = result.returncode

		if self.exit_code != 0:
			raise SysCallError(
				f'{self.cmd} exited with abnormal exit code [{self.exit_code}]: {self.decode()[-500:]}',
				self.exit_code,
				worker_log=self._trace_log,
			)

	def decode(self, encoding: str = 'utf-8', errors: str = 'backslashreplace', strip: bool = True) -> str:
		val = self._trace_log.decode(encoding, errors=errors)

		if strip:
			return val.strip()
		return val


def _log_cmd(cmd: list[str]) -> None:
	history_logfile = logger.directory / 'cmd_history.txt'

	change_perm = False
	if history_logfile.exists() is False:
		change_perm = True

	try:
		with history_logfile.open('a') as cmd_log:
			cmd_log.write(f'{time.time()} {cmd}\n')

		if change_perm:
			history_logfile.chmod(stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP)
	except (PermissionError, FileNotFoundError):
		# If history_logfile does not exist, ignore the error
		pass


def run(
	cmd: list[str],
	input_data: bytes | None = None,
	environment_vars: dict[str, str] | None = None,
) -> subprocess.CompletedProcess[bytes]:
	"""
	Runs ``cmd`` with ``input_data`` on stdin. Meant for commands whose input
	must not appear on the command line (credentials, preseed documents).
	Raises :py:class:`subprocess.CalledProcessError` on a non-zero exit code.
	"""
	_log_cmd(cmd)
	debug(f'Running {cmd} with {len(input_data or b"")} bytes of input')

	env = None
	if environment_vars:
		env = {**os.environ, **environment_vars}

	return subprocess.run(
		cmd,
		input=input_data,
		stdout=subprocess.PIPE,
		stderr=subprocess.STDOUT,
		env=env,
		check=True,
	)


def secret(x: str) -> str:
	""" return * with len equal to to the input string """
	return '*' * len(x)
