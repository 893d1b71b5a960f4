import json
import os
import stat
from pathlib import Path

import pytest

from icecast_fleet.configs.loader import ConfigLoader, StateManager
from icecast_fleet.configs.types import NodeKind, NodeStage

from conftest import make_fleet, make_node


def _mk_fleet():
    master = make_node("origin", NodeKind.MASTER, "USEast",
                       instance_id="i-1", dns_name="origin.example.com",
                       private_dns_name="origin.internal", stage=NodeStage.CONFIGURED)
    relay = make_node("tokyo", NodeKind.RELAY, "Tokyo", instance_id="i-2", stage=NodeStage.PROVISIONED)
    pending = make_node("europe", NodeKind.RELAY, "Europe")
    config = make_fleet([master, relay, pending])
    config.ssh_key_path = "~/.ssh/icecast.pem"
    return config


def test_load_missing_returns_none(tmp_path: Path):
    sm = StateManager(str(tmp_path / "state.json"))
    assert sm.exists() is False
    assert sm.load() is None


def test_save_load_roundtrips(tmp_path: Path):
    state_path = tmp_path / "state.json"
    config = _mk_fleet()

    StateManager(str(state_path)).save(config)
    loaded = StateManager(str(state_path)).load()

    assert loaded is not None
    assert loaded.key_name == config.key_name
    assert loaded.ssh_key_path == config.ssh_key_path
    assert loaded.icecast == config.icecast
    assert [n.spec for n in loaded.servers] == [n.spec for n in config.servers]
    assert [n.state for n in loaded.servers] == [n.state for n in config.servers]


def test_save_overwrites_previous_state(tmp_path: Path):
    state_path = tmp_path / "state.json"
    sm = StateManager(str(state_path))
    config = _mk_fleet()
    sm.save(config)

    config.servers[1].state.stage = NodeStage.TERMINATED
    sm.save(config)

    data = json.loads(state_path.read_text())
    assert data["servers"][1]["runtime"]["stage"] == "terminated"
    # Terminated nodes keep their instance id for the record
    assert data["servers"][1]["runtime"]["instance_id"] == "i-2"


def test_save_creates_parent_dirs(tmp_path: Path):
    state_path = tmp_path / "nested" / "dir" / "state.json"
    StateManager(str(state_path)).save(_mk_fleet())
    assert state_path.exists()


@pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
def test_state_file_is_private(tmp_path: Path):
    state_path = tmp_path / "state.json"
    state_path.write_text("{}")
    os.chmod(state_path, 0o644)

    StateManager(str(state_path)).save(_mk_fleet())

    assert stat.S_IMODE(os.stat(state_path).st_mode) == 0o600


def test_load_invalid_json_raises(tmp_path: Path):
    state_path = tmp_path / "state.json"
    state_path.write_text("{")
    with pytest.raises(ValueError):
        StateManager(str(state_path)).load()


def test_state_file_is_a_valid_config(tmp_path: Path):
    # A saved state file still parses as a config; run resets its runtime blocks
    state_path = tmp_path / "state.json"
    StateManager(str(state_path)).save(_mk_fleet())

    cfg = ConfigLoader.load_from_file(str(state_path))
    assert [n.name for n in cfg.servers] == ["origin", "tokyo", "europe"]
