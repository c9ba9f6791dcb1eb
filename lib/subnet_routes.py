"""
Subnet route validation for BYO VPC clusters.

A subnet reaches the internet if its effective route table has a route for
0.0.0.0/0. The effective table is the one explicitly associated with the
subnet or, when there is none, the main route table of the subnet's VPC.

Only the destination is checked. A blackholed default route still counts as
valid; osd-network-verifier is the follow-up for actual egress.
"""

from models.diagnosis import SubnetRouteResult
from models.network import RouteTable
from utils.aws_client import NetworkClient, build_filter
from utils.errors import NotFoundError


def find_main_route_table(client: NetworkClient, vpc_id: str) -> RouteTable:
    """
    Find the main route table for a VPC.

    Raises:
        NotFoundError: no route table in the VPC is flagged main
    """
    route_tables = client.describe_route_tables(filters=[build_filter('vpc-id', vpc_id)])

    for rt in route_tables:
        if rt.is_main:
            return rt

    raise NotFoundError(f"no default routetable found for vpc {vpc_id}")


class SubnetRouteValidator:
    """Checks that a subnet has a default route to the internet"""

    def __init__(self, client: NetworkClient):
        self.client = client

    def resolve_route_table_id(self, subnet_id: str):
        """
        Get the ID of the route table in effect for a subnet.

        Returns:
            (route_table_id, uses_main_route_table)
        """
        associated = self.client.describe_route_tables(
            filters=[build_filter('association.subnet-id', subnet_id)]
        )

        # Multiple explicit associations are not expected, the first one wins
        if associated:
            return associated[0].route_table_id, False

        subnets = self.client.describe_subnets([subnet_id])
        if not subnets:
            raise NotFoundError(f"no subnets returned for subnet id {subnet_id}")

        main = find_main_route_table(self.client, subnets[0].vpc_id)
        return main.route_table_id, True

    def validate(self, subnet_id: str) -> SubnetRouteResult:
        """
        Check one subnet.

        Returns:
            SubnetRouteResult, valid when a 0.0.0.0/0 route exists

        Raises:
            NotFoundError: the subnet, its VPC's main route table, or the
                resolved route table does not exist
        """
        route_table_id, uses_main = self.resolve_route_table_id(subnet_id)

        # Fetch again by ID, the lookup above may have been filtered
        route_tables = self.client.describe_route_tables(route_table_ids=[route_table_id])
        if not route_tables:
            raise NotFoundError(f"no routetables found for routetable id {route_table_id}")

        default_route = route_tables[0].default_route()
        if default_route is not None:
            return SubnetRouteResult(
                subnet_id=subnet_id,
                valid=True,
                route_table_id=route_table_id,
                uses_main_route_table=uses_main,
                default_route_target=default_route.target,
            )

        return SubnetRouteResult(
            subnet_id=subnet_id,
            valid=False,
            route_table_id=route_table_id,
            uses_main_route_table=uses_main,
            reason=f"no default route exists to the internet in subnet {subnet_id}",
        )


def validate_subnet_route(client: NetworkClient, subnet_id: str) -> SubnetRouteResult:
    """Validate a single subnet with a one-off validator"""
    return SubnetRouteValidator(client).validate(subnet_id)
