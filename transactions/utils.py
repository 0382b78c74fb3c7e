from core.exceptions import InvalidAmountError

DEBIT_TYPES = ("TourCardFee", "Withdrawal", "LeagueDonation", "CharityDonation")
CREDIT_TYPES = ("TournamentWinnings", "Deposit", "Refund", "Payment")


def to_signed_amount_cents(transaction_type, amount):
    """
    Apply the sign convention for a transaction type. Debits are always negative and
    credits always positive; an Adjustment keeps the sign it was given.
    """
    try:
        cents = int(float(amount)) if isinstance(amount, str) else int(amount)
    except (TypeError, ValueError):
        raise InvalidAmountError("Amount must be a number (in cents)")

    if transaction_type == "Adjustment":
        if cents == 0:
            raise InvalidAmountError("Adjustment amount must be non-zero")
        return cents
    if cents == 0:
        raise InvalidAmountError("Amount must be non-zero (in cents)")
    if transaction_type in DEBIT_TYPES:
        return -abs(cents)
    if transaction_type in CREDIT_TYPES:
        return abs(cents)
    raise InvalidAmountError(f"Unknown transaction type: {transaction_type}")


def effective_delta(tx):
    return tx.amount if tx.status == "completed" else 0


def matches_filters(tx, criteria):
    for field in ("member", "season"):
        if field in criteria and getattr(tx, f"{field}_id") != criteria[field]:
            return False
    if "transaction_type" in criteria and tx.transaction_type != criteria["transaction_type"]:
        return False
    if "status" in criteria and tx.status != criteria["status"]:
        return False
    if "min_amount" in criteria and tx.amount < criteria["min_amount"]:
        return False
    if "max_amount" in criteria and tx.amount > criteria["max_amount"]:
        return False
    if "processed_after" in criteria and (tx.processed_at is None or tx.processed_at < criteria["processed_after"]):
        return False
    if "processed_before" in criteria and (tx.processed_at is None or tx.processed_at > criteria["processed_before"]):
        return False
    return True


SORT_FIELDS = {
    "amount": lambda t: t.amount,
    "created_date": lambda t: t.created_date,
    "processed_at": lambda t: t.processed_at,
    "transaction_type": lambda t: t.transaction_type,
    "status": lambda t: t.status,
}


def enhance_transaction(tx, include_member=False, include_season=False):
    from members.serializers import SimpleMemberSerializer
    from seasons.serializers import SeasonSerializer

    extra = {}
    if include_member:
        extra["member_detail"] = SimpleMemberSerializer(tx.member).data if tx.member_id else None
    if include_season:
        extra["season_detail"] = SeasonSerializer(tx.season).data
    return extra
