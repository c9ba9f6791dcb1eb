"""
Cluster Provisioning Delay (CPD) diagnosis.

Runs the CPD triage sequence for an OSD/ROSA cluster. Each check is
announced before it runs and the first one that matches ends the run:

  * cluster already ready
  * DNS zone not ready (points at the dnszones CR on hive)
  * known OCM error code (informational only, does not end the run)
  * non-AWS provider
  * BYO VPC subnets without a 0.0.0.0/0 route

Nothing is retried. Any API failure propagates to the caller.
"""

from typing import Optional

from lib.subnet_routes import SubnetRouteValidator
from models.cluster import ClusterRecord
from models.diagnosis import DiagnosisOutcome, DiagnosisResult, DiagnosisStatus
from utils.console import Colors
from utils.errors import ProviderUnsupportedError, RoutingFindingError

UNKNOWN_PROVISION_CODE = 'OCM3999'
HIVE_NAMESPACE_PREFIX = 'uhc-production-'
NO_ROUTE_SERVICE_LOG = (
    "https://raw.githubusercontent.com/openshift/managed-notifications/master/osd/aws/"
    "InstallFailed_NoRouteToInternet.json"
)
GCP_CONSOLE_URL = 'https://console.cloud.google.com/home/dashboard?project=${GCP_PROJECT_ID}'
EGRESS_VERIFIER_COMMAND = (
    "osd-network-verifier egress --region ${CLUSTER_REGION} "
    "--subnet-id ${SUBNET_ID} --security-group ${SECURITY_GROUP_ID}"
)
MANUAL_AWS_CHECK = "check the AWS resources manually, run ocm backplane cloud console"


def dns_zone_command(cluster_id: str) -> str:
    """Command that shows the cluster's dnszones CR on hive"""
    return (f"oc get dnszones -n {HIVE_NAMESPACE_PREFIX}{cluster_id} "
            f"-o yaml --as backplane-cluster-admin")


class ProvisioningDelayDiagnosis:
    """Orchestrates a CPD diagnostic run for one cluster"""

    def __init__(self, ocm_client, credential_broker, validator_factory=SubnetRouteValidator):
        """
        Args:
            ocm_client: Object with get_cluster(cluster_id) -> ClusterRecord
            credential_broker: Object with generate_scoped_credentials(profile, cluster) -> NetworkClient
            validator_factory: Callable building a SubnetRouteValidator from a NetworkClient
        """
        self.ocm_client = ocm_client
        self.credential_broker = credential_broker
        self.validator_factory = validator_factory

    def run(self, cluster_id: str, profile: Optional[str] = None) -> DiagnosisResult:
        """
        Diagnose a provisioning delay.

        Returns:
            DiagnosisResult describing which check ended the run

        Raises:
            ResourceLookupError: cluster not found or OCM unreachable
            ProviderUnsupportedError: provider is neither AWS nor GCP
            CredentialError: AWS credentials could not be generated
            NotFoundError: a subnet or route table disappeared mid-check
            RoutingFindingError: a BYO VPC subnet has no route to the internet
        """
        cluster = self.ocm_client.get_cluster(cluster_id)
        result = DiagnosisResult(
            cluster_id=cluster.cluster_id or cluster_id,
            status=DiagnosisStatus.SUCCESS,
            outcome=DiagnosisOutcome.MANUAL_AWS_CHECK,
        )

        Colors.plain("Checking if cluster has become ready")
        if cluster.is_ready:
            return self._finish(result, DiagnosisStatus.SUCCESS, DiagnosisOutcome.ALREADY_READY,
                                "This cluster is in a ready state and already provisioned")

        Colors.plain("Checking if cluster DNS is ready")
        if not cluster.dns_ready:
            self._report(result, "DNS not ready. Investigate reasons using the dnszones CR in the cluster namespace:")
            return self._finish(result, DiagnosisStatus.FINDING, DiagnosisOutcome.DNS_NOT_READY,
                                dns_zone_command(result.cluster_id), next_step=True)

        Colors.plain("Checking if OCM error code is already known")
        code = cluster.provision_error_code
        if code and code != UNKNOWN_PROVISION_CODE:
            result.known_error_code = code
            self._report(result, f"Error code {code} is known, customer already received Service Log")
            if cluster.provision_error_message:
                Colors.plain(f" OCM error message: {cluster.provision_error_message}")

        Colors.plain("Checking if cluster is AWS")
        if cluster.cloud_provider != 'aws':
            return self._unsupported_provider(result, cluster)

        Colors.plain("Generating AWS credentials for cluster")
        network_client = self.credential_broker.generate_scoped_credentials(profile, cluster)

        if cluster.is_byo_vpc:
            return self._check_byo_vpc(result, cluster, network_client)

        return self._finish(result, DiagnosisStatus.SUCCESS, DiagnosisOutcome.MANUAL_AWS_CHECK,
                            f"Next step: {MANUAL_AWS_CHECK}", next_step=True)

    def _unsupported_provider(self, result: DiagnosisResult, cluster: ClusterRecord) -> DiagnosisResult:
        provider = cluster.cloud_provider
        if provider != 'gcp':
            raise ProviderUnsupportedError(provider)

        self._report(result, "This command doesn't support GCP yet. Needs manual investigation")
        self._report(result, "Get the project ID from this command on hive: "
                             f"oc get projectclaim -n {HIVE_NAMESPACE_PREFIX}{result.cluster_id}")
        return self._finish(result, DiagnosisStatus.FINDING, DiagnosisOutcome.MANUAL_INVESTIGATION,
                            f"Then use this URL to access the GCP console: {GCP_CONSOLE_URL}",
                            next_step=True)

    def _check_byo_vpc(self, result: DiagnosisResult, cluster: ClusterRecord,
                       network_client) -> DiagnosisResult:
        Colors.plain("Checking BYOVPC to ensure subnets have valid routing")
        validator = self.validator_factory(network_client)

        for subnet_id in cluster.subnet_ids:
            subnet_result = validator.validate(subnet_id)
            result.subnet_results.append(subnet_result)

            if not subnet_result.valid:
                finding = RoutingFindingError(subnet_id, subnet_result.reason)
                Colors.warning(f"{finding}. {subnet_result.reason}")
                Colors.plain(" Run the following to send a ServiceLog:")
                Colors.plain(f" osdctl servicelog post {cluster.external_id or '${CLUSTER_EXT_ID}'} "
                             f"-t {NO_ROUTE_SERVICE_LOG}")
                raise finding

            table = "main route table" if subnet_result.uses_main_route_table else "route table"
            Colors.success(f"✓ {subnet_id}: {table} {subnet_result.route_table_id} has a default route "
                           f"via {subnet_result.default_route_target or 'unknown target'}")

        return self._finish(result, DiagnosisStatus.SUCCESS, DiagnosisOutcome.SUBNETS_ROUTABLE,
                            f"Next step: run the verifier egress test: {EGRESS_VERIFIER_COMMAND}",
                            next_step=True)

    @staticmethod
    def _report(result: DiagnosisResult, message: str):
        result.messages.append(message)
        Colors.warning(message)

    @staticmethod
    def _finish(result: DiagnosisResult, status: DiagnosisStatus, outcome: DiagnosisOutcome,
                message: str, next_step: bool = False) -> DiagnosisResult:
        result.status = status
        result.outcome = outcome
        result.messages.append(message)
        if next_step:
            result.next_step = message
        if status == DiagnosisStatus.SUCCESS:
            Colors.success(message)
        else:
            Colors.info(message)
        return result
