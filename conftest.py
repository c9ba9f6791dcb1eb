"""
Pytest configuration and fixtures for the CPD diagnostic tests.

This file provides pytest fixtures that are automatically available
to all test modules.
"""

import pytest

from models.network import Subnet
from utils.test_helpers import (
    FakeCredentialBroker,
    FakeNetworkClient,
    FakeOCMClient,
    make_cluster,
    make_route_table,
)

VPC_ID = 'vpc-0a1b2c3d'


@pytest.fixture
def vpc_id() -> str:
    return VPC_ID


@pytest.fixture
def byo_network() -> FakeNetworkClient:
    """
    A BYO VPC with four subnets:

        subnet-public   explicit table with 0.0.0.0/0 -> igw
        subnet-private  explicit table with no default route
        subnet-main     no association, main table has 0.0.0.0/0 -> nat
        subnet-orphan   no association, in a VPC whose main table has no default route
    """
    return FakeNetworkClient(
        route_tables=[
            make_route_table('rtb-main', VPC_ID, routes=[('0.0.0.0/0', 'nat-0123')], main=True),
            make_route_table('rtb-public', VPC_ID, routes=[('0.0.0.0/0', 'igw-0abc')],
                             subnet_ids=['subnet-public']),
            make_route_table('rtb-private', VPC_ID, routes=[('172.16.0.0/12', 'tgw-0def')],
                             subnet_ids=['subnet-private']),
            make_route_table('rtb-isolated-main', 'vpc-isolated', main=True),
        ],
        subnets=[
            Subnet('subnet-public', VPC_ID),
            Subnet('subnet-private', VPC_ID),
            Subnet('subnet-main', VPC_ID),
            Subnet('subnet-orphan', 'vpc-isolated'),
        ],
    )


@pytest.fixture
def cluster_factory():
    """Build ClusterRecords; see utils.test_helpers.make_cluster for arguments"""
    return make_cluster


@pytest.fixture
def diagnosis_factory(byo_network):
    """
    Build a ProvisioningDelayDiagnosis around fakes.

    Returns (diagnosis, ocm_client, credential_broker) so tests can inspect calls.
    """
    from lib.cpd import ProvisioningDelayDiagnosis

    def _build(cluster, network=None, credential_error=None):
        ocm = FakeOCMClient(cluster)
        broker = FakeCredentialBroker(client=network or byo_network, error=credential_error)
        return ProvisioningDelayDiagnosis(ocm, broker), ocm, broker

    return _build


def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "routing: Subnet route table validation tests"
    )
    config.addinivalue_line(
        "markers", "diagnosis: CPD sequence and early-exit tests"
    )
    config.addinivalue_line(
        "markers", "ocm: OCM cluster lookup tests"
    )
    config.addinivalue_line(
        "markers", "credentials: AWS session and credential generation tests"
    )
    config.addinivalue_line(
        "markers", "cli: Command line entry point tests"
    )
