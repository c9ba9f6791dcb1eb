"""
Test helpers for the CPD diagnostic.

FakeNetworkClient is an in-memory NetworkClient that applies the same filter
semantics as EC2 for the filters the routing check uses, and records every
call so tests can assert how many round-trips were made.
"""

from typing import Dict, List, Any, Optional, Tuple

from models.cluster import ClusterRecord
from models.network import Route, RouteTable, RouteTableAssociation, Subnet
from utils.aws_client import NetworkClient


def make_route_table(route_table_id: str, vpc_id: str, routes: List[Tuple[str, str]] = None,
                     subnet_ids: List[str] = None, main: bool = False) -> RouteTable:
    """
    Build a RouteTable.

    Args:
        routes: (destination_cidr, target) pairs; a local route for the VPC is always added first
        subnet_ids: Subnets explicitly associated with the table
        main: Flag the table as the VPC's main route table
    """
    all_routes = [Route(destination_cidr='10.0.0.0/16', target='local', state='active')]
    for cidr, target in routes or []:
        all_routes.append(Route(destination_cidr=cidr, target=target,
                                state='blackhole' if target is None else 'active'))

    associations = [RouteTableAssociation(association_id=f"rtbassoc-{s}", subnet_id=s)
                    for s in subnet_ids or []]
    if main:
        associations.append(RouteTableAssociation(association_id=f"rtbassoc-main-{vpc_id}", main=True))

    return RouteTable(route_table_id=route_table_id, vpc_id=vpc_id,
                      routes=all_routes, associations=associations)


def make_cluster(cluster_id: str = '1kfmyclusteristhebesteverp8mabcd', state: str = 'installing',
                 dns_ready: bool = True, provision_error_code: Optional[str] = 'OCM3999',
                 cloud_provider: str = 'aws', subnet_ids: List[str] = None,
                 support_role_arn: Optional[str] = None, region: str = 'us-east-1',
                 provision_error_message: Optional[str] = None, sts: bool = False) -> ClusterRecord:
    """Build a ClusterRecord shaped like clusters_mgmt JSON"""
    cluster_json: Dict[str, Any] = {
        'kind': 'Cluster',
        'id': cluster_id,
        'external_id': 'c0ffee00-1234-5678-9abc-def012345678',
        'name': 'cpd-test',
        'state': state,
        'status': {
            'state': state,
            'dns_ready': dns_ready,
        },
        'cloud_provider': {'kind': 'CloudProviderLink', 'id': cloud_provider},
        'region': {'kind': 'CloudRegionLink', 'id': region},
    }
    if provision_error_code is not None:
        cluster_json['status']['provision_error_code'] = provision_error_code
    if provision_error_message:
        cluster_json['status']['provision_error_message'] = provision_error_message

    if cloud_provider == 'aws':
        aws = {}
        if subnet_ids is not None:
            aws['subnet_ids'] = subnet_ids
        if support_role_arn or sts:
            aws['sts'] = {'enabled': True}
            if support_role_arn:
                aws['sts']['support_role_arn'] = support_role_arn
        cluster_json['aws'] = aws

    return ClusterRecord(cluster_json)


class FakeNetworkClient(NetworkClient):
    """In-memory route tables and subnets"""

    def __init__(self, route_tables: List[RouteTable] = None, subnets: List[Subnet] = None):
        self.route_tables = list(route_tables or [])
        self.subnets = list(subnets or [])
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def describe_route_tables(self, filters: List[Dict] = None,
                              route_table_ids: List[str] = None) -> List[RouteTable]:
        self.calls.append(('describe_route_tables', {'filters': filters, 'route_table_ids': route_table_ids}))

        matches = self.route_tables
        if route_table_ids:
            matches = [rt for rt in matches if rt.route_table_id in route_table_ids]
        for f in filters or []:
            matches = [rt for rt in matches if self._matches(rt, f['Name'], f['Values'])]
        return matches

    def describe_subnets(self, subnet_ids: List[str]) -> List[Subnet]:
        self.calls.append(('describe_subnets', {'subnet_ids': subnet_ids}))
        return [s for s in self.subnets if s.subnet_id in subnet_ids]

    def calls_mentioning(self, resource_id: str) -> List[Tuple[str, Dict[str, Any]]]:
        """Calls whose parameters reference the given subnet/route table ID"""
        return [call for call in self.calls if resource_id in repr(call[1])]

    @staticmethod
    def _matches(rt: RouteTable, name: str, values: List[str]) -> bool:
        if name == 'association.subnet-id':
            return any(a.subnet_id in values for a in rt.associations)
        if name == 'vpc-id':
            return rt.vpc_id in values
        if name == 'association.main':
            return any(str(a.main).lower() in values for a in rt.associations)
        raise ValueError(f"Unsupported route table filter: {name}")


class FakeOCMClient:
    """Returns a fixed cluster record and counts lookups"""

    def __init__(self, cluster: ClusterRecord):
        self.cluster = cluster
        self.calls: List[str] = []

    def get_cluster(self, identifier: str) -> ClusterRecord:
        self.calls.append(identifier)
        return self.cluster


class FakeCredentialBroker:
    """Hands out a prepared network client, or raises the prepared error"""

    def __init__(self, client: NetworkClient = None, error: Exception = None):
        self.client = client
        self.error = error
        self.calls: List[Tuple[Optional[str], str]] = []

    def generate_scoped_credentials(self, profile: Optional[str], cluster: ClusterRecord) -> NetworkClient:
        self.calls.append((profile, cluster.cluster_id))
        if self.error is not None:
            raise self.error
        return self.client
