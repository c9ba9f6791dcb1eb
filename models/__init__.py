"""Data models for the CPD diagnostic"""

from .cluster import ClusterRecord
from .diagnosis import DiagnosisOutcome, DiagnosisResult, DiagnosisStatus, SubnetRouteResult
from .network import DEFAULT_ROUTE_CIDR, Route, RouteTable, RouteTableAssociation, Subnet

__all__ = [
    'ClusterRecord',
    'DiagnosisOutcome',
    'DiagnosisResult',
    'DiagnosisStatus',
    'SubnetRouteResult',
    'DEFAULT_ROUTE_CIDR',
    'Route',
    'RouteTable',
    'RouteTableAssociation',
    'Subnet',
]
