"""
Configuration Type Definitions

Fleet description (what the operator writes) and per-node runtime state
(what the orchestrator learns from the provider), with full type annotations.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional


class NodeKind(str, Enum):
    """Role of a node in the relay tree"""
    MASTER = "master"
    RELAY = "relay"

    @classmethod
    def parse(cls, value: str) -> "NodeKind":
        # Older config files call relays "slave"
        if value == "slave":
            return cls.RELAY
        return cls(value)


class NodeStage(str, Enum):
    """Node lifecycle stages"""
    UNPROVISIONED = "unprovisioned"
    PROVISIONED = "provisioned"
    READY = "ready"
    CONFIGURED = "configured"
    TERMINATED = "terminated"


# Friendly location name -> EC2 region
LOCATIONS: Mapping[str, str] = MappingProxyType({
    "Tokyo": "ap-northeast-1",
    "Singapore": "ap-southeast-1",
    "Europe": "eu-west-1",
    "USEast": "us-east-1",
    "USWest": "us-west-1",
})


def resolve_region(location: str) -> str:
    """Translate a location name through LOCATIONS"""
    try:
        return LOCATIONS[location]
    except KeyError:
        raise LookupError(f"invalid server location: {location!r}") from None


@dataclass(frozen=True)
class IcecastCredentials:
    """Passwords and port shared by every Icecast server in the fleet"""
    source_password: str
    relay_password: str
    admin_password: str
    listen_port: int = 8000

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_password": self.source_password,
            "relay_password": self.relay_password,
            "admin_password": self.admin_password,
            "listen_port": self.listen_port,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IcecastCredentials":
        return cls(
            source_password=data["source_password"],
            relay_password=data["relay_password"],
            admin_password=data["admin_password"],
            listen_port=int(data.get("listen_port", 8000)),
        )


@dataclass(frozen=True)
class NodeSpec:
    """Operator-authored description of one fleet member"""
    name: str
    kind: NodeKind
    # Key of LOCATIONS (e.g. "Tokyo")
    location: str
    # SSH login name
    username: str
    # Must be available in the resolved region
    image_id: str
    # Instance type, e.g. "t1.micro"
    size: str
    # Icecast <limits>; rendered into the setup script only
    num_clients: int = 100
    num_sources: int = 2

    @property
    def region(self) -> str:
        return resolve_region(self.location)

    @property
    def is_master(self) -> bool:
        return self.kind == NodeKind.MASTER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "location": self.location,
            "username": self.username,
            "image_id": self.image_id,
            "size": self.size,
            "num_clients": self.num_clients,
            "num_sources": self.num_sources,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeSpec":
        return cls(
            name=data["name"],
            kind=NodeKind.parse(data.get("kind", "relay")),
            location=data["location"],
            username=data.get("username", "ubuntu"),
            image_id=data["image_id"],
            size=data["size"],
            num_clients=int(data.get("num_clients", 100)),
            num_sources=int(data.get("num_sources", 2)),
        )


@dataclass
class NodeRuntimeState:
    """Provider-assigned state, owned by the orchestrator"""
    instance_id: Optional[str] = None
    dns_name: Optional[str] = None
    private_dns_name: Optional[str] = None
    stage: NodeStage = NodeStage.UNPROVISIONED

    @property
    def is_live(self) -> bool:
        """An instance exists and has not been terminated"""
        return bool(self.instance_id) and self.stage != NodeStage.TERMINATED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "instance_id": self.instance_id,
            "dns_name": self.dns_name,
            "private_dns_name": self.private_dns_name,
            "stage": self.stage.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeRuntimeState":
        return cls(
            instance_id=data.get("instance_id"),
            dns_name=data.get("dns_name"),
            private_dns_name=data.get("private_dns_name"),
            stage=NodeStage(data.get("stage", NodeStage.UNPROVISIONED.value)),
        )


@dataclass
class FleetNode:
    """One fleet member: immutable spec plus mutable runtime state"""
    spec: NodeSpec
    state: NodeRuntimeState = field(default_factory=NodeRuntimeState)

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def address(self) -> Optional[str]:
        """Public address, set once the node is ready"""
        return self.state.dns_name or None

    @property
    def internal_address(self) -> Optional[str]:
        """Address other nodes in the same network should use"""
        return self.state.private_dns_name or self.state.dns_name or None

    def __str__(self) -> str:
        text = f"{self.spec.kind.value} {self.spec.location}"
        if self.state.instance_id:
            text += f" ({self.state.instance_id}) ({self.state.dns_name or ''})"
        return text

    def to_dict(self) -> Dict[str, Any]:
        data = self.spec.to_dict()
        data["runtime"] = self.state.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FleetNode":
        runtime = data.get("runtime") or {}
        return cls(spec=NodeSpec.from_dict(data), state=NodeRuntimeState.from_dict(runtime))


@dataclass
class FleetConfig:
    """Whole-fleet configuration and state, as persisted between invocations"""
    key_name: str
    icecast: IcecastCredentials
    servers: List[FleetNode] = field(default_factory=list)
    # Private key for SSH; None means the user's default keys / agent
    ssh_key_path: Optional[str] = None

    @property
    def master(self) -> Optional[FleetNode]:
        for node in self.servers:
            if node.spec.is_master:
                return node
        return None

    @property
    def relays(self) -> List[FleetNode]:
        return [n for n in self.servers if not n.spec.is_master]

    def server_url(self, node: FleetNode) -> str:
        """Base URL listeners use to reach a node; empty until it is ready"""
        if not node.address:
            return ""
        return f"http://{node.address}:{self.icecast.listen_port}/"
