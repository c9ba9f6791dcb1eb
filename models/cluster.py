"""Cluster record model"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List


@dataclass(frozen=True)
class ClusterRecord:
    """
    Read-only view of an OCM cluster as returned by
    /api/clusters_mgmt/v1/clusters/<id>.

    The raw JSON is kept as-is and every attribute the diagnostic needs is
    exposed as a property, so a record can be built straight from `ocm get`
    output or from a hand-written dict in tests.
    """
    cluster_json: Dict[str, Any] = field(default_factory=dict)

    @property
    def cluster_id(self) -> str:
        """Get internal (OCM) cluster ID"""
        return self.cluster_json.get('id', '')

    @property
    def external_id(self) -> str:
        """Get external cluster ID (UUID)"""
        return self.cluster_json.get('external_id', '')

    @property
    def name(self) -> str:
        """Get cluster name"""
        return self.cluster_json.get('name', 'unknown')

    @property
    def _status(self) -> Dict[str, Any]:
        return self.cluster_json.get('status') or {}

    @property
    def state(self) -> str:
        """Get cluster state (ready, error, installing, etc.)"""
        return self._status.get('state') or self.cluster_json.get('state', 'unknown')

    @property
    def is_ready(self) -> bool:
        return self.state == 'ready'

    @property
    def dns_ready(self) -> bool:
        """Check if the cluster's DNS zone has been provisioned"""
        return bool(self._status.get('dns_ready', False))

    @property
    def provision_error_code(self) -> Optional[str]:
        """Get OCM provision error code (e.g. OCM3999), None if not set"""
        return self._status.get('provision_error_code') or None

    @property
    def provision_error_message(self) -> Optional[str]:
        return self._status.get('provision_error_message') or None

    @property
    def cloud_provider(self) -> str:
        """Get cloud provider ID (aws, gcp, ...)"""
        return self.cluster_json.get('cloud_provider', {}).get('id', 'unknown')

    @property
    def region(self) -> Optional[str]:
        """Get cloud region"""
        return self.cluster_json.get('region', {}).get('id')

    @property
    def subnet_ids(self) -> List[str]:
        """
        Get customer-supplied subnet IDs in the order OCM lists them.

        An empty list means the cluster does not use BYO VPC networking.
        """
        return list(self.cluster_json.get('aws', {}).get('subnet_ids') or [])

    @property
    def is_byo_vpc(self) -> bool:
        return len(self.subnet_ids) > 0

    @property
    def is_sts(self) -> bool:
        """Check if cluster uses AWS STS"""
        return bool(self.cluster_json.get('aws', {}).get('sts', {}).get('enabled', False))

    @property
    def support_role_arn(self) -> Optional[str]:
        """Get the STS support role ARN used by SRE to access the account"""
        return self.cluster_json.get('aws', {}).get('sts', {}).get('support_role_arn') or None
