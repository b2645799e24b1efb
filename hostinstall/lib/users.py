import os
import pwd
from dataclasses import dataclass

from .exceptions import SysCallError, UserError
from .general import SysCommand
from .interfaces import GroupManager
from .output import debug, info


@dataclass(frozen=True)
class InvokingUser:
	name: str
	from_sudo: bool


def login_name() -> str:
	try:
		return os.getlogin()
	except OSError as err:
		debug(f'No login name available ({err}), using the effective user')
		return pwd.getpwuid(os.geteuid()).pw_name


def invoking_user(environ: dict[str, str] | None = None) -> InvokingUser:
	"""
	The user who asked for the installation, as opposed to the root
	account the installer runs as. ``SUDO_USER`` wins when it is set.
	"""
	environ = os.environ if environ is None else environ

	if sudo_user := environ.get('SUDO_USER', ''):
		return InvokingUser(sudo_user, from_sudo=True)

	return InvokingUser(login_name(), from_sudo=False)


class Groups(GroupManager):
	def groups(self, user: str) -> list[str]:
		try:
			return SysCommand(['id', '-nG', user]).decode().split()
		except SysCallError as err:
			debug(f'Could not list groups of {user}: {err}')
			return []

	def add_to_group(self, user: str, group: str) -> None:
		info(f"Adding user '{user}' to group '{group}'")

		try:
			SysCommand(['usermod', '-aG', group, user])
		except SysCallError as err:
			raise UserError(f"Could not add '{user}' to group '{group}': {err}")
