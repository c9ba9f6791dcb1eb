"""EC2 network models used by the subnet routing check"""

from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

DEFAULT_ROUTE_CIDR = '0.0.0.0/0'


@dataclass(frozen=True)
class Route:
    """A single route table entry"""
    destination_cidr: Optional[str] = None  # IPv4 destination; None for IPv6 or prefix-list routes
    destination_ipv6_cidr: Optional[str] = None
    destination_prefix_list_id: Optional[str] = None
    target: Optional[str] = None  # igw-..., nat-..., tgw-..., local, ...
    state: Optional[str] = None  # active | blackhole

    @property
    def is_default_ipv4(self) -> bool:
        return self.destination_cidr == DEFAULT_ROUTE_CIDR

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Route':
        """Build a Route from an EC2 DescribeRouteTables route entry"""
        target = None
        for key in ('GatewayId', 'NatGatewayId', 'TransitGatewayId', 'NetworkInterfaceId',
                    'VpcPeeringConnectionId', 'InstanceId', 'EgressOnlyInternetGatewayId',
                    'CarrierGatewayId', 'LocalGatewayId', 'CoreNetworkArn'):
            if data.get(key):
                target = data[key]
                break

        return cls(
            destination_cidr=data.get('DestinationCidrBlock'),
            destination_ipv6_cidr=data.get('DestinationIpv6CidrBlock'),
            destination_prefix_list_id=data.get('DestinationPrefixListId'),
            target=target,
            state=data.get('State'),
        )


@dataclass(frozen=True)
class RouteTableAssociation:
    """Link between a route table and a subnet, or the VPC main flag"""
    association_id: Optional[str] = None
    subnet_id: Optional[str] = None
    main: bool = False

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'RouteTableAssociation':
        return cls(
            association_id=data.get('RouteTableAssociationId'),
            subnet_id=data.get('SubnetId'),
            main=bool(data.get('Main', False)),
        )


@dataclass(frozen=True)
class RouteTable:
    """EC2 route table with its routes and associations"""
    route_table_id: str
    vpc_id: Optional[str] = None
    routes: List[Route] = field(default_factory=list)
    associations: List[RouteTableAssociation] = field(default_factory=list)

    @property
    def is_main(self) -> bool:
        """Check if this is the VPC's main route table"""
        return any(a.main for a in self.associations)

    def default_route(self) -> Optional[Route]:
        """Return the first route to 0.0.0.0/0 in provider order, if any"""
        for route in self.routes:
            if route.is_default_ipv4:
                return route
        return None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'RouteTable':
        return cls(
            route_table_id=data['RouteTableId'],
            vpc_id=data.get('VpcId'),
            routes=[Route.from_api(r) for r in data.get('Routes', [])],
            associations=[RouteTableAssociation.from_api(a) for a in data.get('Associations', [])],
        )


@dataclass(frozen=True)
class Subnet:
    """EC2 subnet; every subnet belongs to exactly one VPC"""
    subnet_id: str
    vpc_id: str
    cidr_block: Optional[str] = None
    availability_zone: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Subnet':
        return cls(
            subnet_id=data['SubnetId'],
            vpc_id=data['VpcId'],
            cidr_block=data.get('CidrBlock'),
            availability_zone=data.get('AvailabilityZone'),
        )
