import os
import re
import shutil
import tempfile
from pathlib import Path

from .exceptions import ConfigurationError
from .output import debug, info

_ANY_SECTION = re.compile(r'^\s*\[[^\]]*\]')


def _section_regex(section: str) -> re.Pattern[str]:
	return re.compile(rf'^\s*\[{re.escape(section)}\]')


def _key_regex(key: str) -> re.Pattern[str]:
	return re.compile(rf'^\s*(#)?\s*{re.escape(key)}\s*=')


def _line_ending(line: str) -> str:
	if line.endswith('\r\n'):
		return '\r\n'
	if line.endswith('\n'):
		return '\n'
	return ''


def find_section(lines: list[str], section: str) -> tuple[int, int] | None:
	"""
	Returns the index of the ``[section]`` header and the index where the
	section ends (the next header or the end of the file).
	"""
	header = _section_regex(section)

	for start, line in enumerate(lines):
		if header.match(line):
			for end in range(start + 1, len(lines)):
				if _ANY_SECTION.match(lines[end]):
					return start, end
			return start, len(lines)

	return None


def patch_lines(
	lines: list[str],
	section: str,
	key: str,
	value: str,
	anchor_key: str | None = None,
) -> list[str]:
	"""
	Makes ``key = value`` the one active setting for ``key`` inside ``section``.

	An active line for the key is rewritten in place (further active
	duplicates in the section are dropped); failing that, the first commented
	line is rewritten, which uncomments it. Only when the section has neither,
	a new line is inserted after the active ``anchor_key`` line, or after the
	section header when there is no anchor.

	The input is never modified, a new list is returned.
	"""
	bounds = find_section(lines, section)

	if bounds is None:
		raise ConfigurationError(f'Section [{section}] not found, unable to set {key}')

	start, end = bounds
	pattern = _key_regex(key)
	active: list[int] = []
	commented: list[int] = []

	for index in range(start + 1, end):
		if match := pattern.match(lines[index]):
			if match.group(1):
				commented.append(index)
			else:
				active.append(index)

	result = list(lines)
	setting = f'{key} = {value}'

	if active:
		first, *duplicates = active
		result[first] = setting + _line_ending(lines[first])

		for index in reversed(duplicates):
			debug(f'Dropping duplicate {key} line: {lines[index].strip()}')
			del result[index]

		return result

	if commented:
		first = commented[0]
		result[first] = setting + _line_ending(lines[first])
		return result

	anchor = start
	if anchor_key is not None:
		anchor_pattern = _key_regex(anchor_key)

		for index in range(start + 1, end):
			if (match := anchor_pattern.match(lines[index])) and not match.group(1):
				anchor = index
				break

	ending = _line_ending(result[anchor])
	if not ending:
		ending = '\n'
		result[anchor] += ending

	result.insert(anchor + 1, setting + ending)
	return result


def write_atomic(path: Path, content: str) -> None:
	"""
	Replaces ``path`` by writing a sibling temporary file first, so an
	interrupted write never leaves a truncated configuration behind.
	A symlinked ``path`` keeps its link, the file it points to is replaced.
	"""
	target = path.resolve()
	original = target.stat()
	fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f'.{target.name}.')
	tmp_path = Path(tmp_name)

	try:
		with os.fdopen(fd, 'w', newline='') as tmp:
			tmp.write(content)
			tmp.flush()
			os.fsync(tmp.fileno())

		shutil.copymode(target, tmp_path)

		if os.geteuid() == 0:
			os.chown(tmp_path, original.st_uid, original.st_gid)

		os.replace(tmp_path, target)
	except BaseException:
		tmp_path.unlink(missing_ok=True)
		raise


class IniConfig:
	def __init__(self, path: Path, section: str):
		self._path = path
		self._section = section
		self._settings: dict[str, str] = {}

	def set(self, key: str, value: str) -> None:
		self._settings[key] = value

	def render(self, content: str) -> str:
		lines = content.splitlines(keepends=True)
		anchor: str | None = None

		# Each key is anchored after the previous one, keeping them grouped
		for key, value in self._settings.items():
			lines = patch_lines(lines, self._section, key, value, anchor_key=anchor)
			anchor = key

		return ''.join(lines)

	def apply(self) -> bool:
		"""
		Writes the settings into the file. Returns False when the file
		already had them and was left alone.
		"""
		if not self._path.is_file():
			raise ConfigurationError(f'Configuration file not found: {self._path}')

		with self._path.open(newline='') as f:
			content = f.read()

		patched = self.render(content)

		if patched == content:
			info(f'{self._path} already has the requested [{self._section}] settings')
			return False

		write_atomic(self._path, patched)
		debug(f'Wrote {", ".join(self._settings)} into [{self._section}] of {self._path}')
		return True
