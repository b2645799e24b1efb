from .database import WILDCARD_ADDRESS, DatabaseParameters, MysqlSettings, validate_ip, validate_port
from .lxd import BridgeNetwork, LxdPreseed, LxdSettings, Profile, StoragePool

__all__ = [
	'WILDCARD_ADDRESS',
	'BridgeNetwork',
	'DatabaseParameters',
	'LxdPreseed',
	'LxdSettings',
	'MysqlSettings',
	'Profile',
	'StoragePool',
	'validate_ip',
	'validate_port',
]
