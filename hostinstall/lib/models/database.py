import re
from dataclasses import field
from pathlib import Path
from typing import Any

from pydantic import field_validator
from pydantic.dataclasses import dataclass as p_dataclass

WILDCARD_ADDRESS = '0.0.0.0'

_DOTTED_QUAD = re.compile(r'([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})\.([0-9]{1,3})')
_DECIMAL = re.compile(r'[0-9]+')
_CONTROL_CHARACTERS = re.compile(r'[\x00-\x1f\x7f]')


def validate_ip(ip: str) -> str:
	if ip == WILDCARD_ADDRESS:
		return ip

	match = _DOTTED_QUAD.fullmatch(ip)

	if match is None:
		raise ValueError(f'Invalid IP address format: {ip}. Use X.X.X.X or {WILDCARD_ADDRESS}.')

	for octet in match.groups():
		if int(octet) > 255:
			raise ValueError(f"Invalid IP address: {ip}. Octet '{octet}' out of range 0-255.")

	return ip


def validate_port(port: str | int) -> int:
	number: int | None = None

	if isinstance(port, int) and not isinstance(port, bool):
		number = port
	elif isinstance(port, str) and _DECIMAL.fullmatch(port):
		number = int(port)

	if number is None or not 1 <= number <= 65535:
		raise ValueError(f'Invalid port: {port}. Use a number between 1 and 65535.')

	return number


@p_dataclass(frozen=True)
class DatabaseParameters:
	bind_address: str
	bind_port: int
	root_password: str = field(repr=False)

	@field_validator('bind_address', mode='before')
	@classmethod
	def _check_address(cls, value: Any) -> str:
		if not isinstance(value, str):
			raise ValueError(f'Invalid IP address format: {value!r}. Use X.X.X.X or {WILDCARD_ADDRESS}.')
		return validate_ip(value)

	@field_validator('bind_port', mode='before')
	@classmethod
	def _check_port(cls, value: Any) -> int:
		return validate_port(value)

	@field_validator('root_password')
	@classmethod
	def _check_password(cls, value: str) -> str:
		if not value:
			raise ValueError('The root password must not be empty.')
		if _CONTROL_CHARACTERS.search(value):
			raise ValueError('The root password must not contain control characters such as newlines or tabs.')
		return value

	@property
	def listen(self) -> str:
		return f'{self.bind_address}:{self.bind_port}'


@p_dataclass
class MysqlSettings:
	config_file: Path = Path('/etc/mysql/mysql.conf.d/mysqld.cnf')
	section: str = 'mysqld'
	packages: list[str] = field(default_factory=lambda: ['mysql-server', 'mysql-client'])
	debconf_package: str = 'mysql-server'
	service: str = 'mysql'

	def json(self) -> dict[str, Any]:
		return {
			'config_file': str(self.config_file),
			'section': self.section,
			'packages': self.packages,
			'debconf_package': self.debconf_package,
			'service': self.service,
		}
