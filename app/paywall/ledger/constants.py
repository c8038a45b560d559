KIND_DEPOSIT = "DEPOSIT"
KIND_PPV_DEBIT = "PPV_DEBIT"
KIND_CREATOR_EARNING = "CREATOR_EARNING"
KIND_REFUND = "REFUND"

DEBIT_KINDS = frozenset({KIND_PPV_DEBIT})
CREDIT_KINDS = frozenset({KIND_DEPOSIT, KIND_CREATOR_EARNING, KIND_REFUND})

STATUS_COMPLETED = "COMPLETED"

BPS_DENOMINATOR = 10_000
