"""
Referral services package.

- tree_walker: Resolves the commission upline of a subscriber
"""

from goldsave.services.referral.tree_walker import (
    ReferralTreeWalker,
    UplineMember,
)


__all__ = [
    "ReferralTreeWalker",
    "UplineMember",
]
