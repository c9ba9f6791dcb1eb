"""
AWS session and scoped credential generation for a cluster's account.

Proxy and CA bundle settings are resolved the same way the AWS CLI resolves
them: environment variables first, then the selected profile's section of
~/.aws/config.
"""

import configparser
import os
from dataclasses import dataclass
from typing import Dict, Optional, Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from models.cluster import ClusterRecord
from utils.aws_client import Boto3NetworkClient
from utils.console import Colors
from utils.errors import CredentialError

INVALID_PERMISSIONS_SERVICE_LOG = (
    "https://github.com/openshift/managed-notifications/blob/master/osd/aws/"
    "ROSA_AWS_invalid_permissions.json"
)
DEFAULT_REGION = 'us-east-1'


@dataclass
class ClientSettings:
    """Connection settings applied to every boto3 client"""
    https_proxy: Optional[str] = None
    http_proxy: Optional[str] = None
    no_proxy: Optional[str] = None
    ca_bundle: Optional[str] = None

    def client_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for session.client()"""
        kwargs = {}
        if self.https_proxy or self.http_proxy:
            proxies = {}
            if self.https_proxy:
                proxies['https'] = self.https_proxy
            if self.http_proxy:
                proxies['http'] = self.http_proxy
            kwargs['config'] = Config(
                proxies=proxies,
                proxies_config={'proxy_use_forwarding_for_https': True},
            )
        if self.ca_bundle:
            kwargs['verify'] = self.ca_bundle
        return kwargs

    def print_debug(self):
        """Print the resolved proxy and CA bundle settings"""
        if self.https_proxy or self.http_proxy:
            print("Proxy configuration detected:")
            if self.https_proxy:
                print(f"  HTTPS proxy: {self.https_proxy}")
            if self.http_proxy:
                print(f"  HTTP proxy: {self.http_proxy}")
        # botocore reads NO_PROXY from the environment itself
        if self.no_proxy:
            print(f"  NO_PROXY: {self.no_proxy}")
        if self.ca_bundle:
            print(f"  CA bundle: {self.ca_bundle}")


def load_client_settings(profile: Optional[str] = None, config_file: Optional[str] = None,
                         debug: bool = False) -> ClientSettings:
    """
    Resolve proxy and CA bundle settings.

    Args:
        profile: AWS profile name whose config section is consulted
        config_file: Path to the AWS config file (default: ~/.aws/config)
        debug: Print where each setting was read from

    Returns:
        ClientSettings with environment values taking precedence
    """
    settings = ClientSettings(
        https_proxy=os.environ.get('HTTPS_PROXY') or os.environ.get('https_proxy'),
        http_proxy=os.environ.get('HTTP_PROXY') or os.environ.get('http_proxy'),
        no_proxy=os.environ.get('NO_PROXY') or os.environ.get('no_proxy'),
        ca_bundle=os.environ.get('AWS_CA_BUNDLE'),
    )

    config_file = config_file or os.path.expanduser('~/.aws/config')
    if not os.path.exists(config_file):
        return settings

    config = configparser.ConfigParser()
    try:
        config.read(config_file)
    except configparser.Error as e:
        if debug:
            print(f"Warning: Failed to read AWS config file: {str(e)}")
        return settings

    sections_to_try = []
    profile = profile or os.environ.get('AWS_PROFILE')
    if profile:
        sections_to_try.append(f'profile {profile}')
        sections_to_try.append(profile)  # Some configs use just the name
    sections_to_try.append('default')

    for section in sections_to_try:
        if not config.has_section(section):
            continue

        for attr in ('ca_bundle', 'https_proxy', 'http_proxy', 'no_proxy'):
            if not getattr(settings, attr) and config.has_option(section, attr):
                value = config.get(section, attr).strip('"').strip("'")
                setattr(settings, attr, value)
                if debug:
                    print(f"Read {attr} from [{section}]: {value}")

        # Stop at the first section that provided anything
        if settings.https_proxy or settings.http_proxy or settings.ca_bundle:
            break

    return settings


def _credential_failure(cluster_id: str, err: Exception) -> CredentialError:
    return CredentialError(
        f"Failed to generate AWS credentials for cluster {cluster_id}: {err}\n"
        f"PLEASE CONFIRM YOUR CREDENTIALS ARE CORRECT. If you're absolutely sure they are, "
        f"send this Service Log {INVALID_PERMISSIONS_SERVICE_LOG}"
    )


class CredentialBroker:
    """Generates AWS clients scoped to a cluster's account"""

    def __init__(self, region: Optional[str] = None, role_arn: Optional[str] = None,
                 session_factory=None, debug: bool = False):
        """
        Args:
            region: Override for the cluster's region
            role_arn: Role to assume instead of the cluster's STS support role
            session_factory: Callable building a boto3 session (default: boto3.Session)
            debug: Print identity and settings details
        """
        self.region = region
        self.role_arn = role_arn
        self.session_factory = session_factory or boto3.Session
        self.debug = debug

    def generate_scoped_credentials(self, profile: Optional[str],
                                    cluster: ClusterRecord) -> Boto3NetworkClient:
        """
        Build a network client with credentials for the cluster's AWS account.

        When a role is known (--role-arn or the cluster's STS support role) it
        is assumed from the profile's session. Otherwise the profile's own
        credentials are verified with sts:GetCallerIdentity and used directly,
        which covers credentials exported by `ocm backplane cloud credentials`.

        Raises:
            CredentialError: profile missing, role not assumable, or credentials invalid
        """
        region = (self.region or cluster.region or os.environ.get('AWS_REGION')
                  or os.environ.get('AWS_DEFAULT_REGION') or DEFAULT_REGION)
        settings = load_client_settings(profile, debug=self.debug)
        client_kwargs = settings.client_kwargs()
        if self.debug:
            settings.print_debug()

        try:
            session_params = {'region_name': region}
            if profile:
                session_params['profile_name'] = profile
            session = self.session_factory(**session_params)
            sts = session.client('sts', region_name=region, **client_kwargs)

            role_arn = self.role_arn or cluster.support_role_arn
            if role_arn:
                if self.debug:
                    print(f"aws sts assume-role --role-arn {role_arn} "
                          f"--role-session-name cpd-{cluster.cluster_id} --output json")
                creds = sts.assume_role(
                    RoleArn=role_arn,
                    RoleSessionName=f"cpd-{cluster.cluster_id}",
                )['Credentials']
                session = self.session_factory(
                    aws_access_key_id=creds['AccessKeyId'],
                    aws_secret_access_key=creds['SecretAccessKey'],
                    aws_session_token=creds['SessionToken'],
                    region_name=region,
                )
                sts = session.client('sts', region_name=region, **client_kwargs)
            else:
                if cluster.is_sts:
                    Colors.warning("STS cluster has no support role ARN, using the profile's credentials")
                identity = sts.get_caller_identity()
                Colors.info(f"Using credentials for AWS account {identity.get('Account', 'Unknown')} "
                            f"({identity.get('Arn', 'Unknown')})")

            ec2 = session.client('ec2', region_name=region, **client_kwargs)
        except (ClientError, BotoCoreError) as e:
            raise _credential_failure(cluster.cluster_id, e) from e

        if self.debug:
            Colors.success(f"✓ AWS credentials generated for region {region}")
        return Boto3NetworkClient(ec2, sts_client=sts, debug=self.debug)
