from typing import Any, Dict, List

import pytest
from botocore.exceptions import ClientError

from icecast_fleet.cloud import AWSProvider, CloudProviderFactory
from icecast_fleet.errors import CloudProviderError


def _client_error(op: str, code: str = "UnauthorizedOperation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "denied"}}, op)


def _instance(instance_id: str, dns: str = "", private: str = "", state: str = "pending") -> Dict[str, Any]:
    return {
        "InstanceId": instance_id,
        "PublicDnsName": dns,
        "PrivateDnsName": private,
        "State": {"Name": state},
    }


class _FakeEC2:
    def __init__(self):
        self.calls: List[tuple] = []
        self.run_response: Dict[str, Any] = {"Instances": [_instance("i-1")]}
        self.describe_response: Dict[str, Any] = {"Reservations": []}
        self.error: Exception = None

    def _record(self, op, kwargs):
        self.calls.append((op, kwargs))
        if self.error is not None:
            raise self.error

    def run_instances(self, **kwargs):
        self._record("run_instances", kwargs)
        return self.run_response

    def describe_instances(self, **kwargs):
        self._record("describe_instances", kwargs)
        return self.describe_response

    def terminate_instances(self, **kwargs):
        self._record("terminate_instances", kwargs)
        return {"TerminatingInstances": []}


@pytest.fixture
def ec2():
    return _FakeEC2()


@pytest.fixture
def provider(ec2):
    p = AWSProvider("us-east-1")
    p._ec2_client = ec2
    return p


def test_create_instance_launches_exactly_one(provider, ec2):
    out = provider.create_instance("ami-3fec7956", "t1.micro", "icecast")

    assert [i.instance_id for i in out] == ["i-1"]
    op, kwargs = ec2.calls[0]
    assert op == "run_instances"
    assert kwargs == {
        "ImageId": "ami-3fec7956",
        "InstanceType": "t1.micro",
        "MinCount": 1,
        "MaxCount": 1,
        "KeyName": "icecast",
    }


def test_create_instance_returns_every_reported_instance(provider, ec2):
    ec2.run_response = {"Instances": [_instance("i-1"), _instance("i-2")]}
    assert len(provider.create_instance("ami-1", "t1.micro", "icecast")) == 2


def test_client_error_is_wrapped(provider, ec2):
    ec2.error = _client_error("RunInstances", "InsufficientInstanceCapacity")

    with pytest.raises(CloudProviderError, match="InsufficientInstanceCapacity"):
        provider.create_instance("ami-1", "t1.micro", "icecast")


def test_describe_maps_addresses(provider, ec2):
    ec2.describe_response = {"Reservations": [{"Instances": [
        _instance("i-1", "ec2-1-2-3-4.compute-1.amazonaws.com", "ip-10-0-0-1.ec2.internal", "running"),
    ]}]}

    desc = provider.describe_instance("i-1")

    assert ec2.calls[0] == ("describe_instances", {"InstanceIds": ["i-1"]})
    assert desc.instance_id == "i-1"
    assert desc.dns_name == "ec2-1-2-3-4.compute-1.amazonaws.com"
    assert desc.private_dns_name == "ip-10-0-0-1.ec2.internal"
    assert desc.state == "running"


def test_describe_pending_has_no_address(provider, ec2):
    ec2.describe_response = {"Reservations": [{"Instances": [_instance("i-1")]}]}
    assert provider.describe_instance("i-1").dns_name == ""


@pytest.mark.parametrize("response", [
    {"Reservations": []},
    {"Reservations": [{"Instances": [_instance("i-1")]}, {"Instances": [_instance("i-2")]}]},
    {"Reservations": [{"Instances": []}]},
    {"Reservations": [{"Instances": [_instance("i-1"), _instance("i-2")]}]},
])
def test_describe_rejects_unexpected_shape(provider, ec2, response):
    ec2.describe_response = response
    with pytest.raises(CloudProviderError):
        provider.describe_instance("i-1")


def test_terminate(provider, ec2):
    provider.terminate_instance("i-9")
    assert ec2.calls == [("terminate_instances", {"InstanceIds": ["i-9"]})]


def test_terminate_error_is_wrapped(provider, ec2):
    ec2.error = _client_error("TerminateInstances")
    with pytest.raises(CloudProviderError, match="i-9"):
        provider.terminate_instance("i-9")


def test_factory_caches_one_provider_per_region(monkeypatch):
    created = []

    def fake_init(self):
        created.append(self.region_id)
        self._ec2_client = object()

    monkeypatch.setattr(AWSProvider, "initialize_client", fake_init)
    factory = CloudProviderFactory()

    a = factory.get_provider("us-east-1")
    b = factory.get_provider("us-east-1")
    c = factory.get_provider("ap-northeast-1")

    assert a is b
    assert a is not c
    assert created == ["us-east-1", "ap-northeast-1"]

    factory.clear_cache()
    assert factory.get_provider("us-east-1") is not a
