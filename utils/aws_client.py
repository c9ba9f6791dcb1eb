"""
EC2 network client used by the subnet routing check.

NetworkClient is the narrow surface the check depends on (route tables and
subnets). Boto3NetworkClient implements it over a boto3 EC2 client; tests
substitute utils.test_helpers.FakeNetworkClient.
"""

import json
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Any

from botocore.exceptions import BotoCoreError, ClientError

from models.network import RouteTable, Subnet
from utils.console import Colors
from utils.errors import CloudAPIError, NotFoundError


def format_aws_cli_command(service: str, operation: str, params: Dict[str, Any]) -> str:
    """Format boto3 call as AWS CLI equivalent command with proper quoting"""
    cmd_parts = [f"aws {service} {operation}"]

    for key, value in params.items():
        # CamelCase to kebab-case
        cli_key = re.sub(r'([A-Z])', r'-\1', key).lower().lstrip('-')

        if isinstance(value, list):
            if all(isinstance(item, dict) for item in value):
                # --filters "Name=vpc-id,Values=vpc-123"
                filter_parts = []
                for item in value:
                    parts = []
                    for k, v in item.items():
                        if isinstance(v, list):
                            parts.append(f"{k}={','.join(str(x) for x in v)}")
                        else:
                            parts.append(f"{k}={v}")
                    filter_parts.append(','.join(parts))
                cmd_parts.append(f'--{cli_key} "{" ".join(filter_parts)}"')
            else:
                list_str = ' '.join(str(v) for v in value)
                if ' ' in list_str or any(c in list_str for c in ['*', '?', '[', ']', '(', ')']):
                    cmd_parts.append(f'--{cli_key} "{list_str}"')
                else:
                    cmd_parts.append(f"--{cli_key} {list_str}")
        elif isinstance(value, dict):
            cmd_parts.append(f"--{cli_key} '{json.dumps(value)}'")
        elif isinstance(value, bool):
            if value:
                cmd_parts.append(f"--{cli_key}")
        else:
            cmd_parts.append(f"--{cli_key} {value}")

    cmd_parts.append("--output json")
    return ' '.join(cmd_parts)


def build_filter(name: str, *values: str) -> Dict[str, Any]:
    """Build an EC2 describe-* filter entry"""
    return {'Name': name, 'Values': list(values)}


class NetworkClient(ABC):
    """Route table and subnet queries needed to validate subnet routing"""

    @abstractmethod
    def describe_route_tables(self, filters: List[Dict] = None,
                              route_table_ids: List[str] = None) -> List[RouteTable]:
        """Return route tables matching the filters or IDs, in provider order"""

    @abstractmethod
    def describe_subnets(self, subnet_ids: List[str]) -> List[Subnet]:
        """Return the subnets with the given IDs"""


class Boto3NetworkClient(NetworkClient):
    """NetworkClient backed by a boto3 EC2 client"""

    def __init__(self, ec2_client, sts_client=None, debug: bool = False):
        self.ec2 = ec2_client
        self.sts = sts_client
        self.debug = debug

        # Only show the detailed UnauthorizedOperation output once per run
        self._shown_detailed_auth_error = False

    def describe_route_tables(self, filters: List[Dict] = None,
                              route_table_ids: List[str] = None) -> List[RouteTable]:
        """Describe route tables"""
        params = {}
        if filters:
            params['Filters'] = filters
        if route_table_ids:
            params['RouteTableIds'] = route_table_ids

        response = self._call(self.ec2.describe_route_tables, 'describe-route-tables',
                              params, 'describe route tables')
        return [RouteTable.from_api(rt) for rt in response.get('RouteTables', [])]

    def describe_subnets(self, subnet_ids: List[str]) -> List[Subnet]:
        """Describe subnets"""
        params = {'SubnetIds': subnet_ids}

        response = self._call(self.ec2.describe_subnets, 'describe-subnets',
                              params, 'describe subnets')
        return [Subnet.from_api(s) for s in response.get('Subnets', [])]

    def _call(self, func, operation: str, params: Dict, description: str) -> Dict:
        """Run a single EC2 request and translate botocore errors"""
        if self.debug:
            print(format_aws_cli_command('ec2', operation, params))

        try:
            return func(**params)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code')
            error_msg = e.response.get('Error', {}).get('Message', str(e))

            # InvalidSubnetID.NotFound, InvalidRouteTableID.NotFound, ...
            if error_code and error_code.endswith('.NotFound'):
                raise NotFoundError(error_msg) from e

            if error_code and 'unauthorized' in error_code.lower():
                self._report_unauthorized(e, description)

            raise CloudAPIError(description, error_code, error_msg) from e
        except BotoCoreError as e:
            raise CloudAPIError(description, None, str(e)) from e

    def _report_unauthorized(self, e: Exception, operation: str):
        """Print caller identity details for an authorization failure"""
        if self._shown_detailed_auth_error:
            Colors.error(f"✗ UnauthorizedOperation: {operation} (see earlier error for details)")
            return

        Colors.error(f"✗ UnauthorizedOperation: {operation}")
        Colors.error(f"  Error: {str(e)}")
        Colors.error("")
        Colors.error(self._get_caller_identity_details())
        Colors.error("")
        Colors.error("This IAM principal lacks the required permissions.")
        self._shown_detailed_auth_error = True

    def _get_caller_identity_details(self) -> str:
        """Get formatted caller identity details for error messages"""
        if self.sts is None:
            return "  Unable to retrieve caller identity"
        try:
            response = self.sts.get_caller_identity()
        except (ClientError, BotoCoreError):
            return "  Unable to retrieve caller identity"

        details = [
            "Current AWS Identity:",
            f"  Account: {response.get('Account', 'Unknown')}",
            f"  ARN: {response.get('Arn', 'Unknown')}",
            f"  User ID: {response.get('UserId', 'Unknown')}"
        ]
        return '\n'.join(details)
