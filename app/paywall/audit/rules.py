from __future__ import annotations


def compute_audit_diff(
    *,
    negative_balance_count: int,
    balance_mismatch_count: int,
    unpaired_unlock_count: int,
    stale_pending_count: int,
) -> int:
    return (
        max(0, negative_balance_count)
        + max(0, balance_mismatch_count)
        + max(0, unpaired_unlock_count)
        + max(0, stale_pending_count)
    )


def audit_status(diff_count: int) -> str:
    return "OK" if diff_count == 0 else "DIFF"
