"""Host provisioning - MySQL Server and LXD installers for Debian based systems."""

from .lib.exceptions import (
	ArgumentError,
	ConfigurationError,
	DaemonError,
	PackageError,
	RequirementError,
	ServiceException,
	SysCallError,
	UserError,
)
from .lib.general import SysCommand, locate_binary, run
from .lib.output import debug, error, info, log, warn

__all__ = [
	'ArgumentError',
	'ConfigurationError',
	'DaemonError',
	'PackageError',
	'RequirementError',
	'ServiceException',
	'SysCallError',
	'SysCommand',
	'UserError',
	'debug',
	'error',
	'info',
	'locate_binary',
	'log',
	'run',
	'warn',
]
