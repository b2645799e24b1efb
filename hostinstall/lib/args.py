import argparse
import json
from argparse import ArgumentParser
from dataclasses import fields
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, NoReturn, TypeVar

from typing_extensions import override

from pydantic import ValidationError
from pydantic.dataclasses import dataclass as p_dataclass

from .exceptions import ArgumentError, ConfigurationError
from .models import DatabaseParameters, LxdSettings, MysqlSettings
from .output import debug, logger, warn
from .storage import storage


def get_version() -> str:
	try:
		return version('hostinstall')
	except PackageNotFoundError:
		return 'hostinstall version not found'


def validation_message(err: ValidationError) -> str:
	"""
	Flattens a pydantic error into the messages raised by the validators,
	without pydantic's own decoration around them.
	"""
	messages = []

	for detail in err.errors():
		if (ctx := detail.get('ctx')) and 'error' in ctx:
			messages.append(str(ctx['error']))
		else:
			location = '.'.join(str(part) for part in detail['loc'])
			messages.append(f'{location}: {detail["msg"]}' if location else detail['msg'])

	return '\n'.join(messages)


T = TypeVar('T')


def load_settings(settings_cls: type[T], config: dict[str, Any]) -> T:
	known = {settings_field.name for settings_field in fields(settings_cls)}  # type: ignore[arg-type]

	for key in sorted(config.keys() - known):
		warn(f'Ignoring unknown setting {key!r}')

	try:
		return settings_cls(**{key: value for key, value in config.items() if key in known})
	except ValidationError as err:
		raise ConfigurationError(f'Invalid settings:\n{validation_message(err)}')


class _Parser(ArgumentParser):
	@override
	def error(self, message: str) -> NoReturn:
		raise ArgumentError(message)


@p_dataclass
class Arguments:
	config: Path | None = None
	debug: bool = False


@p_dataclass
class MysqlArguments(Arguments):
	bind_address_ip: str | None = None
	bind_port: str | None = None
	password_root: str | None = None


class ConfigHandler:
	prog = 'hostinstall'
	description = ''
	arguments_cls: type[Arguments] = Arguments

	def __init__(self) -> None:
		self._parser: ArgumentParser = self._define_arguments()
		self._args: Arguments = self.arguments_cls()
		self._config: dict[str, Any] = {}

	def parse(self, argv: list[str] | None = None) -> None:
		self._args = self._parse_args(argv)
		self._config = self._parse_config()

	@property
	def args(self) -> Arguments:
		return self._args

	@property
	def config(self) -> dict[str, Any]:
		return self._config

	def format_usage(self) -> str:
		return self._parser.format_usage().strip()

	def _define_arguments(self) -> ArgumentParser:
		parser = _Parser(
			prog=self.prog,
			description=self.description,
			formatter_class=argparse.ArgumentDefaultsHelpFormatter,
			allow_abbrev=False,
		)
		parser.add_argument(
			'-v',
			'--version',
			action='version',
			version='%(prog)s ' + get_version(),
		)
		parser.add_argument(
			'--config',
			type=Path,
			default=None,
			help='JSON file overriding the default settings',
		)
		parser.add_argument(
			'--debug',
			action='store_true',
			default=False,
			help='Print debug messages to the terminal as well as to the log',
		)

		return parser

	def _parse_args(self, argv: list[str] | None) -> Arguments:
		argparse_args = vars(self._parser.parse_args(argv))
		args = self.arguments_cls(**argparse_args)

		storage['debug'] = args.debug

		if args.debug:
			debug(f'Debug output enabled, the full log is kept at {logger.path}')

		return args

	def _parse_config(self) -> dict[str, Any]:
		if self._args.config is None:
			return {}

		path = self._args.config

		if not path.is_file():
			raise ConfigurationError(f'Could not find file {path}')

		try:
			config = json.loads(path.read_text())
		except json.JSONDecodeError as err:
			raise ConfigurationError(f'Could not parse {path}: {err}')

		if not isinstance(config, dict):
			raise ConfigurationError(f'{path} must hold a JSON object')

		return config


class MysqlConfigHandler(ConfigHandler):
	prog = 'hostinstall-mysql'
	description = 'Install MySQL Server and configure its bind address, port and root password.'
	arguments_cls = MysqlArguments

	@property
	def args(self) -> MysqlArguments:
		assert isinstance(self._args, MysqlArguments)
		return self._args

	@override
	def _define_arguments(self) -> ArgumentParser:
		parser = super()._define_arguments()
		parser.epilog = 'SECURITY WARNING: passing the password as an argument is insecure.'
		parser.add_argument(
			'--bind-address-ip',
			metavar='IP',
			default=None,
			help='IP address for MySQL to listen on (e.g. 0.0.0.0 for all) [required]',
		)
		parser.add_argument(
			'--bind-port',
			metavar='PORT',
			default=None,
			help='Port for MySQL to listen on (e.g. 3306) [required]',
		)
		parser.add_argument(
			'--password-root',
			metavar='PASSWORD',
			default=None,
			help="Password for 'root'@'localhost' [required]",
		)

		return parser

	def settings(self) -> MysqlSettings:
		return load_settings(MysqlSettings, self.config)

	def parameters(self) -> DatabaseParameters:
		args = self.args
		required = {
			'--bind-address-ip': args.bind_address_ip,
			'--bind-port': args.bind_port,
			'--password-root': args.password_root,
		}

		for flag, value in required.items():
			if not value:
				raise ArgumentError(f'Parameter {flag} is required.')

		try:
			return DatabaseParameters(
				bind_address=args.bind_address_ip,  # type: ignore[arg-type]
				bind_port=args.bind_port,  # type: ignore[arg-type]
				root_password=args.password_root,  # type: ignore[arg-type]
			)
		except ValidationError as err:
			raise ArgumentError(validation_message(err))


class LxdConfigHandler(ConfigHandler):
	prog = 'hostinstall-lxd'
	description = 'Install LXD from snap, grant the invoking user access and initialize it.'

	def settings(self) -> LxdSettings:
		return load_settings(LxdSettings, self.config)
