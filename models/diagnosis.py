"""Diagnosis result models"""

from dataclasses import dataclass, field
from typing import List, Optional
from enum import Enum


class DiagnosisStatus(Enum):
    """Terminal status of a diagnostic run"""
    SUCCESS = "success"
    FINDING = "finding"


class DiagnosisOutcome(Enum):
    """Which step of the CPD sequence ended the run"""
    ALREADY_READY = "already_ready"
    DNS_NOT_READY = "dns_not_ready"
    MANUAL_INVESTIGATION = "manual_investigation"  # non-AWS provider with documented guidance
    SUBNETS_ROUTABLE = "subnets_routable"
    MANUAL_AWS_CHECK = "manual_aws_check"


@dataclass(frozen=True)
class SubnetRouteResult:
    """
    Outcome of checking one subnet for a default route to the internet.

    Lookup failures are raised, not returned, so a result is either valid or
    invalid with a reason.
    """
    subnet_id: str
    valid: bool
    route_table_id: Optional[str] = None
    uses_main_route_table: bool = False
    default_route_target: Optional[str] = None
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


@dataclass
class DiagnosisResult:
    """What a CPD run concluded and the guidance it printed"""
    cluster_id: str
    status: DiagnosisStatus
    outcome: DiagnosisOutcome
    messages: List[str] = field(default_factory=list)
    known_error_code: Optional[str] = None
    subnet_results: List[SubnetRouteResult] = field(default_factory=list)
    next_step: Optional[str] = None
