from subprocess import CalledProcessError

from .exceptions import SysCallError
from .general import locate_binary, run
from .interfaces import DatabaseAdmin


def quote_literal(value: str) -> str:
	"""
	Quotes ``value`` as a MySQL string literal.

	>>> quote_literal("it's")
	"'it\\\\'s'"
	"""
	escaped = value.replace('\\', '\\\\').replace("'", "\\'")
	return f"'{escaped}'"


def reset_root_password_statement(password: str, user: str = 'root', host: str = 'localhost') -> str:
	return (
		f'ALTER USER {quote_literal(user)}@{quote_literal(host)} '
		f'IDENTIFIED WITH mysql_native_password BY {quote_literal(password)}; '
		'FLUSH PRIVILEGES;'
	)


class MysqlClient(DatabaseAdmin):
	"""
	Talks to the local server through the ``mysql`` client as the invoking
	(root) user, which works as long as the account still uses ``auth_socket``.
	"""

	def execute(self, statement: str) -> None:
		try:
			run([locate_binary('mysql')], input_data=f'{statement}\n'.encode())
		except CalledProcessError as err:
			output = (err.output or b'').decode(errors='backslashreplace').strip()
			raise SysCallError(f'mysql exited with abnormal exit code [{err.returncode}]: {output}', err.returncode, worker_log=err.output or b'')
