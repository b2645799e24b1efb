from typing import Any

import pytest
import yaml
from pytest import MonkeyPatch

from hostinstall.lib.exceptions import DaemonError, SysCallError, UserError
from hostinstall.lib.models import LxdSettings
from hostinstall.lib.users import InvokingUser, invoking_user
from hostinstall.scripts import lxd
from hostinstall.scripts.lxd import LxdInstallation


@pytest.fixture
def environment(monkeypatch: MonkeyPatch, fakes: Any) -> dict[str, Any]:
	"""Runs the lxd script as root, invoked through sudo by 'alice'"""
	env = {
		'apt': fakes.Apt(),
		'snap': fakes.Snap(),
		'groups': fakes.Groups(),
		'daemon': fakes.Daemon(),
	}

	monkeypatch.setenv('SUDO_USER', 'alice')
	monkeypatch.setattr(lxd, 'running_as_root', lambda: True)
	monkeypatch.setattr(lxd, 'Apt', lambda: env['apt'])
	monkeypatch.setattr(lxd, 'Snap', lambda: env['snap'])
	monkeypatch.setattr(lxd, 'Groups', lambda: env['groups'])
	monkeypatch.setattr(lxd, 'Lxd', lambda: env['daemon'])

	return env


def _installation(fakes: Any, environ: dict[str, str], **overrides: Any) -> LxdInstallation:
	collaborators = {
		'packages': fakes.Apt(installed=['snapd']),
		'snaps': fakes.Snap(installed=True),
		'groups': fakes.Groups(),
		'daemon': fakes.Daemon(),
	}
	collaborators.update(overrides)
	return LxdInstallation(LxdSettings(), environ=environ, **collaborators)


def test_fresh_install(environment: dict[str, Any], capsys: pytest.CaptureFixture[str]) -> None:
	assert lxd.main([]) == 0

	assert environment['apt'].calls == [('install', ['snapd'])]
	assert environment['snap'].calls == [('install', 'lxd')]
	assert environment['groups'].added == [('alice', 'lxd')]
	assert environment['daemon'].waited == [60]

	preseeds = environment['daemon'].preseeds
	assert len(preseeds) == 1
	assert yaml.safe_load(preseeds[0])['networks'][0]['name'] == 'lxdbr0'

	out = capsys.readouterr().out
	assert 'newgrp lxd' in out
	assert 'lxc launch ubuntu:22.04 my-first-container' in out


def test_skip_init_when_initialized(environment: dict[str, Any], fakes: Any) -> None:
	environment['daemon'] = fakes.Daemon(pools=['default'], networks=['lxdbr0', 'eth0'])

	assert lxd.main([]) == 0
	assert environment['daemon'].preseeds == []


def test_init_when_only_pool_exists(environment: dict[str, Any], fakes: Any) -> None:
	environment['daemon'] = fakes.Daemon(pools=['default'], networks=['eth0'])

	assert lxd.main([]) == 0
	assert len(environment['daemon'].preseeds) == 1


def test_listing_failure_assumes_uninitialized(
	environment: dict[str, Any],
	fakes: Any,
	capsys: pytest.CaptureFixture[str],
) -> None:
	environment['daemon'] = fakes.Daemon(listing_error=SysCallError('lxc exited with abnormal exit code [1]', 1))

	assert lxd.main([]) == 0
	assert 'assuming LXD is not initialized' in capsys.readouterr().err
	assert len(environment['daemon'].preseeds) == 1


def test_readiness_timeout_aborts(environment: dict[str, Any], fakes: Any, capsys: pytest.CaptureFixture[str]) -> None:
	environment['daemon'] = fakes.Daemon(ready=False)

	assert lxd.main([]) == 1
	assert 'did not become ready within 60s' in capsys.readouterr().err
	assert environment['daemon'].preseeds == []


def test_wait_timeout_from_config(environment: dict[str, Any], lxd_config_fixture: Any) -> None:
	assert lxd.main(['--config', str(lxd_config_fixture)]) == 0

	assert environment['daemon'].waited == [120]
	preseed = yaml.safe_load(environment['daemon'].preseeds[0])
	assert preseed['storage_pools'] == [{'name': 'pool0', 'driver': 'dir'}]
	assert preseed['config']['core.https_address'] == '127.0.0.1:8443'


def test_requires_root(environment: dict[str, Any], monkeypatch: MonkeyPatch) -> None:
	monkeypatch.setattr(lxd, 'running_as_root', lambda: False)

	assert lxd.main([]) == 1
	assert environment['apt'].calls == []
	assert environment['snap'].calls == []


def test_dependency_failure_aborts(environment: dict[str, Any], fakes: Any) -> None:
	environment['apt'] = fakes.Apt(fail_install=True)

	assert lxd.main([]) == 1
	assert environment['snap'].calls == []


def test_snap_install_failure_aborts(environment: dict[str, Any], fakes: Any) -> None:
	environment['snap'] = fakes.Snap(fail_install=True)

	assert lxd.main([]) == 1
	assert environment['daemon'].waited == []


def test_refresh_failure_is_a_warning(environment: dict[str, Any], fakes: Any, capsys: pytest.CaptureFixture[str]) -> None:
	environment['apt'] = fakes.Apt(installed=['snapd'])
	environment['snap'] = fakes.Snap(installed=True, fail_refresh=True)

	assert lxd.main([]) == 0
	assert environment['apt'].calls == []
	assert environment['snap'].calls == [('refresh', 'lxd')]
	assert 'Could not refresh the lxd snap' in capsys.readouterr().err


def test_group_add_failure_aborts(environment: dict[str, Any], fakes: Any) -> None:
	environment['groups'] = fakes.Groups(fail=True)

	assert lxd.main([]) == 1
	assert environment['daemon'].waited == []


def test_unknown_flag(environment: dict[str, Any], capsys: pytest.CaptureFixture[str]) -> None:
	assert lxd.main(['--preseed']) == 1
	assert 'usage: hostinstall-lxd' in capsys.readouterr().out
	assert environment['apt'].calls == []


def test_user_already_in_group(fakes: Any) -> None:
	groups = fakes.Groups(memberships={'alice': ['alice', 'lxd']})
	installation = _installation(fakes, {'SUDO_USER': 'alice'}, groups=groups)

	installation.add_user_to_group()

	assert groups.added == []


def test_fallback_to_root_skips_group(fakes: Any, monkeypatch: MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.setattr(lxd, 'invoking_user', lambda environ: InvokingUser('root', from_sudo=False))
	groups = fakes.Groups()
	installation = _installation(fakes, {}, groups=groups)

	installation.add_user_to_group()

	assert groups.added == []
	assert 'sudo usermod -aG lxd <username>' in capsys.readouterr().out


def test_sudo_root_is_added(fakes: Any) -> None:
	groups = fakes.Groups()
	installation = _installation(fakes, {'SUDO_USER': 'root'}, groups=groups)

	installation.add_user_to_group()

	assert groups.added == [('root', 'lxd')]


def test_fallback_user_is_announced(fakes: Any, monkeypatch: MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
	monkeypatch.setattr(lxd, 'invoking_user', lambda environ: InvokingUser('bob', from_sudo=False))
	groups = fakes.Groups()
	installation = _installation(fakes, {}, groups=groups)

	installation.add_user_to_group()

	assert groups.added == [('bob', 'lxd')]
	assert "SUDO_USER is not set, using the user 'bob' instead." in capsys.readouterr().err


def test_group_failure_raises(fakes: Any) -> None:
	installation = _installation(fakes, {'SUDO_USER': 'alice'}, groups=fakes.Groups(fail=True))

	with pytest.raises(UserError):
		installation.add_user_to_group()


def test_initialize_returns_whether_it_ran(fakes: Any) -> None:
	daemon = fakes.Daemon()
	installation = _installation(fakes, {}, daemon=daemon)

	assert installation.initialize() is True
	daemon.pools, daemon.networks = ['default'], ['lxdbr0']
	assert installation.initialize() is False
	assert len(daemon.preseeds) == 1


def test_daemon_listing_parse_error_assumes_uninitialized(fakes: Any) -> None:
	daemon = fakes.Daemon(listing_error=DaemonError('Could not parse listing from lxc'))
	installation = _installation(fakes, {}, daemon=daemon)

	assert installation.is_initialized() is False


def test_invoking_user_prefers_sudo_user() -> None:
	assert invoking_user({'SUDO_USER': 'alice'}) == InvokingUser('alice', from_sudo=True)


def test_invoking_user_falls_back_to_login(monkeypatch: MonkeyPatch) -> None:
	monkeypatch.setattr('hostinstall.lib.users.login_name', lambda: 'carol')

	assert invoking_user({'SUDO_USER': ''}) == InvokingUser('carol', from_sudo=False)
