from dataclasses import dataclass, field
from typing import Any, NotRequired, TypedDict

import yaml
from pydantic import field_validator
from pydantic.dataclasses import dataclass as p_dataclass


@p_dataclass
class LxdSettings:
	required_packages: list[str] = field(default_factory=lambda: ['snapd'])
	snap_name: str = 'lxd'
	group: str = 'lxd'
	storage_pool: str = 'default'
	network: str = 'lxdbr0'
	wait_timeout: int = 60
	https_address: str = '[::]:8443'
	images_auto_update_interval: int = 60
	ipv4_address: str = '10.0.0.1/24'
	dhcp_ranges: str = '10.0.0.2-10.0.0.254'

	@field_validator('wait_timeout')
	@classmethod
	def _check_timeout(cls, value: int) -> int:
		if value <= 0:
			raise ValueError(f'wait_timeout must be a positive number of seconds, got {value}')
		return value

	def json(self) -> dict[str, Any]:
		return {
			'required_packages': self.required_packages,
			'snap_name': self.snap_name,
			'group': self.group,
			'storage_pool': self.storage_pool,
			'network': self.network,
			'wait_timeout': self.wait_timeout,
			'https_address': self.https_address,
			'images_auto_update_interval': self.images_auto_update_interval,
			'ipv4_address': self.ipv4_address,
			'dhcp_ranges': self.dhcp_ranges,
		}


class _NetworkSerialization(TypedDict):
	name: str
	type: str
	config: dict[str, str]


class _StoragePoolSerialization(TypedDict):
	name: str
	driver: str


class _ProfileSerialization(TypedDict):
	name: str
	config: dict[str, str]
	description: str
	devices: dict[str, dict[str, str]]


class _PreseedSerialization(TypedDict):
	config: dict[str, str]
	networks: list[_NetworkSerialization]
	storage_pools: list[_StoragePoolSerialization]
	profiles: list[_ProfileSerialization]
	cluster: NotRequired[None]


@dataclass
class BridgeNetwork:
	name: str
	ipv4_address: str
	dhcp_ranges: str
	nat: bool = True
	dhcp: bool = True

	def json(self) -> _NetworkSerialization:
		# LXD config maps only hold strings
		return {
			'name': self.name,
			'type': 'bridge',
			'config': {
				'ipv4.address': self.ipv4_address,
				'ipv4.nat': str(self.nat).lower(),
				'ipv4.dhcp': str(self.dhcp).lower(),
				'ipv4.dhcp.ranges': self.dhcp_ranges,
				'ipv6.address': 'none',
			},
		}


@dataclass
class StoragePool:
	name: str
	driver: str = 'dir'

	def json(self) -> _StoragePoolSerialization:
		return {
			'name': self.name,
			'driver': self.driver,
		}


@dataclass
class Profile:
	pool: str
	network: str
	name: str = 'default'
	description: str = 'Default LXD profile'

	def json(self) -> _ProfileSerialization:
		return {
			'name': self.name,
			'config': {},
			'description': self.description,
			'devices': {
				'root': {
					'path': '/',
					'pool': self.pool,
					'type': 'disk',
				},
				'eth0': {
					'name': 'eth0',
					'network': self.network,
					'type': 'nic',
				},
			},
		}


@dataclass
class LxdPreseed:
	"""
	The document fed to ``lxd init --preseed``: a single bridge with NAT and
	DHCP, one directory backed storage pool and a default profile wiring both
	into new instances. Clustering is left disabled.
	"""
	network: BridgeNetwork
	storage_pool: StoragePool
	profile: Profile
	config: dict[str, str] = field(default_factory=dict)

	@classmethod
	def from_settings(cls, settings: LxdSettings) -> 'LxdPreseed':
		return cls(
			network=BridgeNetwork(
				name=settings.network,
				ipv4_address=settings.ipv4_address,
				dhcp_ranges=settings.dhcp_ranges,
			),
			storage_pool=StoragePool(name=settings.storage_pool),
			profile=Profile(pool=settings.storage_pool, network=settings.network),
			config={
				'images.auto_update_interval': str(settings.images_auto_update_interval),
				'core.https_address': settings.https_address,
			},
		)

	def json(self) -> _PreseedSerialization:
		return {
			'config': dict(self.config),
			'networks': [self.network.json()],
			'storage_pools': [self.storage_pool.json()],
			'profiles': [self.profile.json()],
			'cluster': None,
		}

	def to_yaml(self) -> str:
		return yaml.safe_dump(self.json(), sort_keys=False, default_flow_style=False)
