from hostinstall.lib.apt import Apt
from hostinstall.lib.args import MysqlConfigHandler
from hostinstall.lib.config_file import IniConfig
from hostinstall.lib.exceptions import (
	ArgumentError,
	ConfigurationError,
	PackageError,
	RequirementError,
	ServiceException,
	SysCallError,
)
from hostinstall.lib.general import running_as_root, secret
from hostinstall.lib.interfaces import DatabaseAdmin, PackageManager, ServiceManager
from hostinstall.lib.models import DatabaseParameters, MysqlSettings
from hostinstall.lib.mysql import MysqlClient, reset_root_password_statement
from hostinstall.lib.output import debug, error, info, logger, warn
from hostinstall.lib.systemd import Systemctl


class MysqlInstallation:
	def __init__(
		self,
		parameters: DatabaseParameters,
		settings: MysqlSettings,
		packages: PackageManager,
		services: ServiceManager,
		database: DatabaseAdmin,
	):
		self.parameters = parameters
		self.settings = settings
		self.packages = packages
		self.services = services
		self.database = database

	def check_root(self) -> None:
		if not running_as_root():
			raise RequirementError('This script must be run as root (or with sudo).')

	def preseed_credentials(self) -> None:
		info('Pre-seeding the root password for a non-interactive installation...')

		password = self.parameters.root_password
		package = self.settings.debconf_package
		self.packages.preseed(
			package,
			{
				f'{package}/root_password': ('password', password),
				f'{package}/root_password_again': ('password', password),
			},
		)

	def install_packages(self) -> None:
		wanted = self.settings.packages
		missing = self.packages.missing(wanted)

		if missing:
			info(f'Installing MySQL Server ({", ".join(missing)})...')
			self.packages.install(missing)
			return

		info('MySQL Server is already installed, upgrading to the latest version...')

		try:
			self.packages.upgrade(wanted)
		except PackageError as err:
			warn(f'Could not upgrade MySQL Server, continuing with the installed version: {err}')

	def configure_network(self) -> None:
		path = self.settings.config_file
		info(f'Configuring bind-address and port in {path}...')

		config = IniConfig(path, self.settings.section)
		config.set('bind-address', self.parameters.bind_address)
		config.set('port', str(self.parameters.bind_port))
		config.apply()

		info('Network configuration updated.')

	def reset_root_password(self) -> None:
		info('Setting the root password via SQL (using auth_socket if available)...')
		debug(f"Root password for 'root'@'localhost': {secret(self.parameters.root_password)}")

		try:
			self.database.execute(reset_root_password_statement(self.parameters.root_password))
		except (SysCallError, RequirementError) as err:
			warn(
				'Could not set the root password via SQL (it may already be correct or auth_socket did not work). '
				f'Please verify manually: {err}'
			)
			return

		info("Root password for 'root'@'localhost' set.")

	def restart_service(self) -> None:
		info(f'Restarting and enabling the {self.settings.service} service...')
		self.services.restart(self.settings.service)
		self.services.enable(self.settings.service)

	def perform_installation(self) -> None:
		self.check_root()

		info('Starting MySQL Server installation and configuration...')
		self.preseed_credentials()
		self.install_packages()
		self.configure_network()
		self.reset_root_password()
		self.restart_service()

		info('MySQL Server installation and configuration completed successfully!', fg='green')
		info(f'MySQL is listening on: {self.parameters.listen}')
		info("The 'root'@'localhost' password has been set (check the SQL step above for warnings).")


def main(argv: list[str] | None = None) -> int:
	handler = MysqlConfigHandler()
	# nothing reaches the log file before the arguments are known to be valid
	logger.hold()

	try:
		handler.parse(argv)
		parameters = handler.parameters()
		settings = handler.settings()
	except ArgumentError as err:
		error(f'ERROR: {err}')
		print(handler.format_usage())
		logger.discard()
		return 1
	except ConfigurationError as err:
		error(f'ERROR: {err}')
		logger.discard()
		return 1

	logger.release()
	debug(f'Using settings: {settings.json()}')

	installation = MysqlInstallation(
		parameters,
		settings,
		packages=Apt(),
		services=Systemctl(),
		database=MysqlClient(),
	)

	try:
		installation.perform_installation()
	except (RequirementError, PackageError, ConfigurationError, ServiceException, SysCallError) as err:
		error(f'ERROR: {err}')
		return 1

	return 0
