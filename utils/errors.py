"""Error kinds raised by the CPD diagnostic"""

from typing import Optional


class CpdError(Exception):
    """Base class for every error the diagnostic surfaces to the operator"""


class ResourceLookupError(CpdError, LookupError):
    """Cluster could not be fetched or resolved from OCM"""


class NotFoundError(ResourceLookupError):
    """A subnet or route table the check depends on does not exist"""


class CredentialError(CpdError):
    """Scoped AWS credentials could not be generated for the cluster"""


class ProviderUnsupportedError(CpdError):
    """Cluster runs on a cloud provider this check cannot inspect"""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(
            f"Cloud provider '{provider}' is not supported by this check. Needs manual investigation"
        )


class RoutingFindingError(CpdError):
    """
    A subnet has no default route to the internet.

    This is a diagnosis, not a tool failure, but it is surfaced as an error so
    the process exits non-zero. Scripts tell the two apart by message only.
    """

    def __init__(self, subnet_id: str, reason: Optional[str] = None):
        self.subnet_id = subnet_id
        self.reason = reason
        super().__init__(f"subnet {subnet_id} does not have valid routing")


class CloudAPIError(CpdError):
    """An AWS API call failed for a reason other than a missing resource"""

    def __init__(self, operation: str, code: Optional[str], message: str):
        self.operation = operation
        self.code = code
        super().__init__(f"Failed to {operation}: {message}")
