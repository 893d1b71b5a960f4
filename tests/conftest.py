import threading
from collections import Counter
from typing import Dict, List, Optional, Set, Tuple

import pytest

from icecast_fleet.cloud.base import CloudProviderBase, InstanceDescription
from icecast_fleet.configs import (
    FleetConfig,
    FleetNode,
    IcecastCredentials,
    NodeKind,
    NodeSpec,
    NodeStage,
)
from icecast_fleet.errors import CloudProviderError
from icecast_fleet.utils.remote import CommandResult


class _FakeProvider(CloudProviderBase):
    def __init__(self, cloud: "FakeCloud", region_id: str):
        super().__init__(region_id)
        self._cloud = cloud

    def create_instance(self, image_id, instance_type, key_name=None):
        return self._cloud.create(self.region_id, image_id, instance_type, key_name)

    def describe_instance(self, instance_id):
        return self._cloud.describe(instance_id)

    def terminate_instance(self, instance_id):
        self._cloud.terminate(instance_id)


class FakeCloud:
    """Stands in for CloudProviderFactory; records every call"""

    def __init__(self):
        self._lock = threading.Lock()
        self.created: List[Tuple[str, str]] = []  # (region, image_id)
        self.terminated: List[str] = []
        self.terminate_attempts: List[str] = []
        self.describe_calls: Counter = Counter()
        # image_id -> behaviour on create
        self.fail_create: Set[str] = set()
        self.create_count: Dict[str, int] = {}
        # instance_id -> number of empty describes before the address shows; None = never
        self.empty_polls: Dict[str, Optional[int]] = {}
        self.describe_errors: Set[str] = set()
        self.terminate_errors: Set[str] = set()

    def get_provider(self, region_id: str) -> _FakeProvider:
        return _FakeProvider(self, region_id)

    def create(self, region_id, image_id, instance_type, key_name):
        with self._lock:
            self.created.append((region_id, image_id))
        if image_id in self.fail_create:
            raise CloudProviderError(f"InsufficientInstanceCapacity for {image_id}")
        count = self.create_count.get(image_id, 1)
        return [InstanceDescription(instance_id=f"i-{image_id}-{n}" if n else f"i-{image_id}") for n in range(count)]

    def describe(self, instance_id):
        with self._lock:
            self.describe_calls[instance_id] += 1
            polls = self.describe_calls[instance_id]
        if instance_id in self.describe_errors:
            raise CloudProviderError(f"RequestLimitExceeded describing {instance_id}")
        empty = self.empty_polls.get(instance_id, 0)
        if empty is None or polls <= empty:
            return InstanceDescription(instance_id=instance_id, state="pending")
        return InstanceDescription(
            instance_id=instance_id,
            dns_name=f"{instance_id}.compute.example.com",
            private_dns_name=f"ip-10-0-0-{polls}.internal",
            state="running",
        )

    def terminate(self, instance_id):
        with self._lock:
            self.terminate_attempts.append(instance_id)
        if instance_id in self.terminate_errors:
            raise CloudProviderError(f"UnauthorizedOperation terminating {instance_id}")
        with self._lock:
            self.terminated.append(instance_id)


class FakeExecutor:
    """Stands in for RemoteExecutor; hosts in fail_hosts fail the given command"""

    def __init__(self):
        self._lock = threading.Lock()
        self.calls: List[Tuple[str, str, str, Optional[str]]] = []
        self.fail: Dict[str, str] = {}  # host -> command that fails

    def run(self, host, user, command, input_data=None):
        with self._lock:
            self.calls.append((host, user, command, input_data))
        if self.fail.get(host) == command:
            return CommandResult(host=host, command=command, success=False, output="E: Unable to locate package", return_code=100)
        return CommandResult(host=host, command=command, success=True, output="", return_code=0)

    def commands_for(self, host: str) -> List[str]:
        return [c for h, _, c, _ in self.calls if h == host]


class FakeClock:
    """Per-thread virtual time; sleep() advances it instantly"""

    def __init__(self):
        self._local = threading.local()

    @property
    def now(self) -> float:
        return getattr(self._local, "now", 0.0)

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self._local.now = self.now + seconds


def make_node(name: str, kind: NodeKind = NodeKind.RELAY, location: str = "USEast", **state) -> FleetNode:
    node = FleetNode(spec=NodeSpec(
        name=name,
        kind=kind,
        location=location,
        username="ubuntu",
        image_id=f"ami-{name}",
        size="t1.micro",
        num_clients=50,
        num_sources=3,
    ))
    for key, value in state.items():
        setattr(node.state, key, value)
    return node


def make_ready_node(name: str, kind: NodeKind = NodeKind.RELAY, location: str = "USEast") -> FleetNode:
    return make_node(
        name,
        kind,
        location,
        instance_id=f"i-{name}",
        dns_name=f"{name}.example.com",
        private_dns_name=f"{name}.internal",
        stage=NodeStage.READY,
    )


def make_fleet(servers: List[FleetNode]) -> FleetConfig:
    return FleetConfig(
        key_name="icecast",
        icecast=IcecastCredentials(
            source_password="src-pw",
            relay_password="relay-pw",
            admin_password="admin-pw",
            listen_port=8000,
        ),
        servers=servers,
    )


@pytest.fixture
def cloud() -> FakeCloud:
    return FakeCloud()


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
