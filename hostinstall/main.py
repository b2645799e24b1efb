"""Host provisioning - MySQL Server and LXD installers for Debian based systems."""

import importlib
import sys
import textwrap
import traceback
from pathlib import Path

from .lib.output import error, logger, warn

_USAGE = 'usage: hostinstall {list,<script>} [script options]'


def _scripts() -> list[str]:
	return sorted(file.stem for file in (Path(__file__).parent / 'scripts').glob('*.py') if file.stem != '__init__')


def _list_scripts() -> str:
	lines = ['The following are viable scripts:']

	for script in _scripts():
		lines.append(f'    {script}')

	return '\n'.join(lines)


def run(argv: list[str] | None = None) -> int:
	"""
	This can either be run as the installed application: hostinstall <script>
	OR straight as a module: python -m hostinstall <script>
	The remaining arguments are handed to the script loaded from the scripts/ folder
	"""
	if argv is None:
		argv = sys.argv[1:]

	if not argv or argv[0] in ('-h', '--help'):
		print(_USAGE)
		print(_list_scripts())
		return 0

	script, *script_args = argv

	if script == 'list':
		print(_list_scripts())
		return 0

	if script not in _scripts():
		error(f'Unknown script: {script}')
		print(_list_scripts())
		return 1

	module = importlib.import_module(f'hostinstall.scripts.{script}')
	return module.main(script_args)


def _error_message(exc: Exception) -> None:
	# keep whatever was held back before the failure
	logger.release()

	err = ''.join(traceback.format_exception(exc))
	error(err)

	text = textwrap.dedent(
		f"""\
		hostinstall experienced the above error. If you think this is a bug, please report it
		and include the log file "{logger.path}".
		"""
	)
	warn(text)


def main(argv: list[str] | None = None) -> int:
	rc = 0
	exc = None

	try:
		rc = run(argv)
	except Exception as e:
		exc = e
	finally:
		if exc:
			_error_message(exc)
			rc = 1

	return rc


def _script_entrypoint(script: str) -> int:
	return main([script, *sys.argv[1:]])


def mysql() -> int:
	return _script_entrypoint('mysql')


def lxd() -> int:
	return _script_entrypoint('lxd')


if __name__ == '__main__':
	sys.exit(main())
