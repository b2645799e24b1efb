import logging
import os
import sys
from datetime import UTC, datetime
from pathlib import Path

from .storage import storage


class Journald:
	_adapter: logging.Logger | None = None

	@classmethod
	def log(cls, message: str, level: int = logging.DEBUG) -> None:
		try:
			import systemd.journal  # type: ignore[import-not-found]
		except ModuleNotFoundError:
			return None

		if cls._adapter is None:
			log_adapter = logging.getLogger('hostinstall')
			log_fmt = logging.Formatter('[%(levelname)s]: %(message)s')
			log_ch = systemd.journal.JournalHandler()
			log_ch.setFormatter(log_fmt)
			log_adapter.addHandler(log_ch)
			log_adapter.setLevel(logging.DEBUG)
			cls._adapter = log_adapter

		cls._adapter.log(level, message)


class Logger:
	def __init__(self, path: Path = Path('/var/log/hostinstall')) -> None:
		self._path = path
		self._disabled = False
		self._pending: list[str] | None = None

	@property
	def path(self) -> Path:
		return self._path / 'install.log'

	@property
	def directory(self) -> Path:
		return self._path

	def hold(self) -> None:
		"""
		Keeps log lines in memory instead of writing them, until
		:py:meth:`release` or :py:meth:`discard` is called.
		"""
		self._pending = []

	def release(self) -> None:
		pending, self._pending = self._pending, None

		if pending:
			self._write(pending)

	def discard(self) -> None:
		self._pending = None

	def _touch(self) -> None:
		self._path.mkdir(exist_ok=True, parents=True)
		self.path.touch(exist_ok=True)

		with self.path.open('a') as f:
			f.write('')

	def _check_permissions(self) -> None:
		log_file = self.path

		try:
			self._touch()
			return
		except PermissionError:
			pass

		# Fallback to creating the log file in the current folder, once
		fallback = Path('./').absolute()

		if self._path != fallback:
			self._path = fallback

			try:
				self._touch()
			except PermissionError:
				pass
			else:
				print(f'Not enough permission to place log file at {log_file}, creating it in {self.path} instead', file=sys.stderr)
				return

		self._disabled = True
		print(f'Not enough permission to place log file at {log_file} or {self.path}, file logging disabled', file=sys.stderr)

	def _write(self, lines: list[str]) -> None:
		if self._disabled:
			return

		self._check_permissions()

		if self._disabled:
			return

		with self.path.open('a') as f:
			f.writelines(lines)

	def log(self, level: int, content: str) -> None:
		ts = _timestamp()
		level_name = logging.getLevelName(level)
		line = f'[{ts}] - {level_name} - {content}\n'

		if self._pending is not None:
			self._pending.append(line)
		else:
			self._write([line])


logger = Logger()


def _supports_color() -> bool:
	"""
	Found first reference here:
		https://stackoverflow.com/questions/7445658/how-to-detect-if-the-console-does-support-ansi-escape-codes-in-python
	And re-used this:
		https://github.com/django/django/blob/master/django/core/management/color.py#L12

	Return True if the running system's terminal supports color,
	and False otherwise.
	"""
	supported_platform = sys.platform != 'win32' or 'ANSICON' in os.environ

	# isatty is not always implemented, #6223.
	is_a_tty = hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()
	return supported_platform and is_a_tty


def _stylize_output(text: str, fg: str) -> str:
	"""
	Heavily influenced by:
		https://github.com/django/django/blob/ae8338daf34fd746771e0678081999b656177bae/django/utils/termcolors.py#L13

	Adds a foreground color to a text.
	"""
	colors = {
		'black': '0',
		'red': '1',
		'green': '2',
		'yellow': '3',
		'blue': '4',
		'magenta': '5',
		'cyan': '6',
		'white': '7',
		'gray': '8;5;246',
	}

	return f'\033[3{colors[fg]}m{text}\033[0m'


def _timestamp() -> str:
	now = datetime.now(tz=UTC)
	return now.strftime('%Y-%m-%d %H:%M:%S')


def info(*msgs: str, level: int = logging.INFO, fg: str = 'blue') -> None:
	log(*msgs, level=level, fg=fg)


def debug(*msgs: str, level: int = logging.DEBUG, fg: str = 'gray') -> None:
	log(*msgs, level=level, fg=fg)


def error(*msgs: str, level: int = logging.ERROR, fg: str = 'red') -> None:
	log(*msgs, level=level, fg=fg)


def warn(*msgs: str, level: int = logging.WARNING, fg: str = 'yellow') -> None:
	log(*msgs, level=level, fg=fg)


def log(*msgs: str, level: int = logging.INFO, fg: str = 'white') -> None:
	text = ' '.join([str(x) for x in msgs])

	logger.log(level, text)

	Journald.log(text, level=level)

	if level == logging.DEBUG and not storage.get('debug', False):
		return

	# Attempt to colorize the output if supported
	if _supports_color():
		text = _stylize_output(text, fg)

	stream = sys.stderr if level >= logging.WARNING else sys.stdout
	print(text, file=stream, flush=True)
