"""
Commission rules.

Decodes a plan's per-level commission table and the scheduled job
payload into typed values.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from goldsave.config.constants import MAX_REFERRAL_LEVELS, MONEY_QUANTUM
from goldsave.utils.exceptions import BusinessRuleFailure


class RuleKind(StrEnum):
    """How a level's commission is computed."""

    FIXED = "fixed"
    PERCENT = "percent"


@dataclass(frozen=True)
class CommissionRule:
    """Commission owed to one upline level."""

    kind: RuleKind
    value: Decimal

    def apply(self, trigger_amount: Decimal) -> Decimal:
        """
        Compute the payout for a triggering payment.

        Args:
            trigger_amount: Amount of the payment that created the job

        Returns:
            Payout rounded half-up to 0.01
        """
        if self.kind == RuleKind.PERCENT:
            raw = trigger_amount * self.value / Decimal("100")
        else:
            raw = self.value
        return raw.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)

    @property
    def is_zero(self) -> bool:
        return self.value == 0


ZERO_RULE = CommissionRule(RuleKind.FIXED, Decimal("0"))


def parse_rule(raw: Any) -> CommissionRule:
    """
    Parse one commission table entry.

    Accepts "50" / 50 / 50.0 (fixed rupees) and "5%" (percent of the
    triggering payment). Missing or empty entries mean no commission.

    Raises:
        BusinessRuleFailure: Unparseable, negative or >100% entry
    """
    if raw is None:
        return ZERO_RULE

    if isinstance(raw, bool):
        raise BusinessRuleFailure(f"invalid commission entry: {raw!r}")

    text = str(raw).strip()
    if not text:
        return ZERO_RULE

    kind = RuleKind.FIXED
    if text.endswith("%"):
        kind = RuleKind.PERCENT
        text = text[:-1].strip()

    try:
        value = Decimal(text)
    except InvalidOperation as e:
        raise BusinessRuleFailure(
            f"invalid commission entry: {raw!r}"
        ) from e

    if not value.is_finite() or value < 0:
        raise BusinessRuleFailure(f"invalid commission entry: {raw!r}")
    if kind == RuleKind.PERCENT and value > 100:
        raise BusinessRuleFailure(
            f"commission percentage above 100: {raw!r}"
        )

    return CommissionRule(kind, value)


def decode_commission_table(raw: list[Any] | None) -> list[CommissionRule]:
    """
    Decode a plan's commission_monthly column.

    Args:
        raw: Stored list (may be None or shorter than the level count)

    Returns:
        Exactly MAX_REFERRAL_LEVELS rules, index 0 = level 1

    Raises:
        BusinessRuleFailure: Table is not a list or has too many entries
    """
    if raw is None:
        raw = []
    if not isinstance(raw, (list, tuple)):
        raise BusinessRuleFailure(
            f"commission table must be a list, got {type(raw).__name__}"
        )
    if len(raw) > MAX_REFERRAL_LEVELS:
        raise BusinessRuleFailure(
            f"commission table has {len(raw)} entries, "
            f"max {MAX_REFERRAL_LEVELS}"
        )

    rules = [parse_rule(entry) for entry in raw]
    rules.extend([ZERO_RULE] * (MAX_REFERRAL_LEVELS - len(rules)))
    return rules


class CommissionPayload(BaseModel):
    """Reference from a scheduled job to its triggering payment."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    payment_id: int = Field(gt=0)
    subscription_id: int | None = Field(default=None, gt=0)


def decode_payload(raw: Any, job_id: int | None = None) -> CommissionPayload:
    """
    Validate a job payload.

    Raises:
        BusinessRuleFailure: Payload missing or malformed
    """
    if not isinstance(raw, dict):
        raise BusinessRuleFailure(
            f"payload must be an object, got {type(raw).__name__}",
            job_id=job_id,
        )
    try:
        return CommissionPayload.model_validate(raw)
    except ValidationError as e:
        raise BusinessRuleFailure(
            f"invalid payload: {e.errors()[0]['msg']}", job_id=job_id
        ) from e
