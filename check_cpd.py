#!/usr/bin/env python3
"""
check_cpd.py - Cluster Provisioning Delay (CPD) Diagnostic

SYNOPSIS:
  check_cpd.py -C <cluster-id> [-p <aws-profile>] [options]
  check_cpd.py -h|--help

DESCRIPTION:
  Helps investigate OSD/ROSA cluster provisioning delays (CPD) or failures.
  This command only supports AWS at the moment and will:

  1. Check whether the cluster has become ready
  2. Check the cluster's dnszone.hive.openshift.io custom resource
  3. Check whether a known OCM error code has been shared with the customer already
  4. Check that the cluster's VPC and/or subnet route table(s) contain a
     route for 0.0.0.0/0 if it's BYOVPC

PREREQUISITES:
  - ocm CLI (logged in)
  - AWS credentials for the given profile (or exported in the environment)
"""

import os
import sys
import argparse
import traceback

from lib.cpd import ProvisioningDelayDiagnosis
from utils.aws_session import CredentialBroker
from utils.console import Colors
from utils.errors import CpdError
from utils.ocm_client import OCMClient


def parse_arguments(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='Runs diagnostic for a Cluster Provisioning Delay (CPD)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Investigate a CPD for a cluster using an AWS profile named "rhcontrol"
  %(prog)s --cluster-id 1kfmyclusteristhebesteverp8m --profile rhcontrol

  # Use credentials already exported by ocm backplane
  eval $(ocm backplane cloud credentials <cluster-id> -o env)
  %(prog)s -C <cluster-id>
        """
    )

    parser.add_argument('-C', '--cluster-id', required=True,
                        help='The internal (OCM) cluster ID, external ID or name')
    parser.add_argument('-p', '--profile', default=os.environ.get('AWS_PROFILE'),
                        help='AWS profile name (default: $AWS_PROFILE)')
    parser.add_argument('-r', '--region',
                        help="AWS region (default: the cluster's region)")
    parser.add_argument('--role-arn',
                        help="IAM role to assume in the cluster account (default: the cluster's STS support role)")
    parser.add_argument('--debug', action='store_true',
                        help='Print the AWS CLI equivalent of each API call')

    return parser.parse_args(argv)


def build_diagnosis(args) -> ProvisioningDelayDiagnosis:
    """Wire the OCM client and credential broker from parsed arguments"""
    return ProvisioningDelayDiagnosis(
        ocm_client=OCMClient(debug=args.debug),
        credential_broker=CredentialBroker(region=args.region, role_arn=args.role_arn, debug=args.debug),
    )


def main(argv=None) -> int:
    """Main entry point"""
    args = parse_arguments(argv)

    Colors.header(f"Cluster Provisioning Delay Diagnostic: {args.cluster_id}")

    try:
        build_diagnosis(args).run(args.cluster_id, args.profile)
    except CpdError as e:
        Colors.error(f"✗ {e}")
        if args.debug:
            traceback.print_exc()
        return 1
    except KeyboardInterrupt:
        print()
        Colors.warning("Operation cancelled by user")
        return 130

    return 0


if __name__ == '__main__':
    try:
        sys.exit(main())
    except Exception as e:
        Colors.error(f"Unexpected error: {e}")
        traceback.print_exc()
        sys.exit(1)
