class RequirementError(Exception):
	pass


class ArgumentError(Exception):
	pass


class ConfigurationError(Exception):
	pass


class SysCallError(Exception):
	def __init__(self, message: str, exit_code: int | None = None, worker_log: bytes = b'') -> None:
		super().__init__(message)
		self.message = message
		self.exit_code = exit_code
		self.worker_log = worker_log


class ServiceException(Exception):
	pass


class PackageError(Exception):
	pass


class DaemonError(Exception):
	pass


class UserError(Exception):
	pass
