from subprocess import CalledProcessError

from ..exceptions import PackageError
from ..general import locate_binary, run, secret
from ..output import debug


def set_selections(package: str, selections: dict[str, tuple[str, str]]) -> None:
	"""
	Pre-seeds answers for the install-time questions of ``package``.
	``selections`` maps a question name to its ``(type, value)`` pair, e.g.
	``{'mysql-server/root_password': ('password', 'hunter2')}``.
	The values are fed through stdin, never through the command line.
	"""
	for question, (_, value) in selections.items():
		if '\n' in value or '\r' in value:
			raise PackageError(f'The debconf answer for {question} must be a single line')

	lines = [f'{package} {question} {kind} {value}' for question, (kind, value) in selections.items()]

	for question, (kind, value) in selections.items():
		shown = secret(value) if kind == 'password' else value
		debug(f'debconf: {package} {question} {kind} {shown}')

	try:
		run([locate_binary('debconf-set-selections')], input_data=('\n'.join(lines) + '\n').encode())
	except CalledProcessError as err:
		raise PackageError(f'Could not pre-seed debconf answers for {package}: exit code {err.returncode}')
