"""
Commission services package.

Contains the scheduled commission pipeline:
- rules: Per-level commission table and job payload decoding
- claim_coordinator: Fetches due jobs and claims them
- processor: Applies one claimed job in a single transaction
- cycle_runner: Runs fetch/claim/process cycles for a worker
- scheduler: Creates jobs for completed payments
- job_admin: Explicit reset of failed jobs
"""

from goldsave.services.commission.claim_coordinator import ClaimCoordinator
from goldsave.services.commission.cycle_runner import CycleRunner, CycleSummary
from goldsave.services.commission.job_admin import CommissionJobAdmin
from goldsave.services.commission.processor import (
    CommissionProcessor,
    ProcessResult,
)
from goldsave.services.commission.rules import (
    CommissionPayload,
    CommissionRule,
    RuleKind,
    decode_commission_table,
    decode_payload,
    parse_rule,
)
from goldsave.services.commission.scheduler import CommissionScheduler


__all__ = [
    # Rules
    "CommissionPayload",
    "CommissionRule",
    "RuleKind",
    "decode_commission_table",
    "decode_payload",
    "parse_rule",
    # Pipeline
    "ClaimCoordinator",
    "CommissionProcessor",
    "ProcessResult",
    "CycleRunner",
    "CycleSummary",
    # Supporting
    "CommissionJobAdmin",
    "CommissionScheduler",
]
