import structlog
from django.db import models, transaction
from django.db.models import F, Sum
from django.utils import timezone

from core.audit import log_audit
from core.exceptions import ValidationFailedError

logger = structlog.get_logger(__name__)

EDITABLE_FIELDS = ("member", "season", "amount", "transaction_type", "status", "payout_email")


def _adjust_account(member_id, delta):
    from members.models import Member

    if member_id is not None and delta:
        Member.objects.filter(pk=member_id).update(account=F("account") + delta)


class TransactionManager(models.Manager):
    """
    All writes keep each member's account equal to the sum of their completed transactions.
    """

    def ledger_total(self, member):
        return self.filter(member=member, status="completed").aggregate(total=Sum("amount"))["total"] or 0

    @transaction.atomic()
    def create_transaction(self, member, season, amount, transaction_type, status="completed", payout_email=None,
                           actor=None):
        from transactions.utils import effective_delta, to_signed_amount_cents

        if member is None:
            raise ValidationFailedError("Member is required")

        tx = self.create(
            member=member,
            season=season,
            amount=to_signed_amount_cents(transaction_type, amount),
            transaction_type=transaction_type,
            status=status,
            payout_email=payout_email,
            processed_at=timezone.now() if status == "completed" else None,
        )
        _adjust_account(member.id, effective_delta(tx))

        log_audit(actor, "transactions", tx.id, "created",
                  metadata={"member": member.id, "amount": tx.amount, "type": transaction_type, "status": status})
        logger.info("Transaction created", transaction_id=tx.id, member_id=member.id, amount=tx.amount,
                    transaction_type=transaction_type, status=status)
        return tx

    @transaction.atomic()
    def update_transaction(self, tx, actor=None, **changes):
        from transactions.utils import effective_delta, to_signed_amount_cents

        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationFailedError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        tx = self.select_for_update().get(pk=tx.pk)
        before = {field: getattr(tx, f"{field}_id" if field in ("member", "season") else field)
                  for field in EDITABLE_FIELDS}
        old_member_id = tx.member_id
        old_delta = effective_delta(tx)
        was_completed = tx.status == "completed"

        for field, value in changes.items():
            setattr(tx, field, value)
        if "amount" in changes or "transaction_type" in changes:
            tx.amount = to_signed_amount_cents(tx.transaction_type, changes.get("amount", tx.amount))
        if tx.status == "completed" and not was_completed:
            tx.processed_at = timezone.now()
        tx.save()

        new_delta = effective_delta(tx)
        if tx.member_id == old_member_id:
            _adjust_account(tx.member_id, new_delta - old_delta)
        else:
            _adjust_account(old_member_id, -old_delta)
            _adjust_account(tx.member_id, new_delta)

        after = {field: getattr(tx, f"{field}_id" if field in ("member", "season") else field)
                 for field in EDITABLE_FIELDS}
        changed = {field: {"old": before[field], "new": after[field]}
                   for field in EDITABLE_FIELDS if before[field] != after[field]}
        if changed:
            log_audit(actor, "transactions", tx.id, "updated", changes=changed)
        return tx

    @transaction.atomic()
    def delete_transaction(self, tx, actor=None):
        from transactions.utils import effective_delta

        delta = effective_delta(tx)
        tx_id = tx.id
        member_id = tx.member_id
        _adjust_account(member_id, -delta)
        tx.delete()

        log_audit(actor, "transactions", tx_id, "deleted",
                  metadata={"member": member_id, "amount": tx.amount, "type": tx.transaction_type,
                            "reversed": delta})
        logger.info("Transaction deleted", transaction_id=tx_id, member_id=member_id, reversed=delta)
        return {"deleted": True, "reversed": delta}

    @transaction.atomic()
    def reconcile(self, member, actor=None):
        from members.models import Member

        member = Member.objects.select_for_update().get(pk=member.pk)
        old_account = member.account
        new_account = self.ledger_total(member)
        if old_account != new_account:
            Member.objects.filter(pk=member.pk).update(account=new_account)
            log_audit(actor, "members", member.id, "updated",
                      changes={"account": {"old": old_account, "new": new_account}},
                      metadata={"reason": "reconcile"})
            logger.warning("Member account reconciled", member_id=member.id, old_account=old_account,
                           new_account=new_account)
        return {"member": member.id, "old_account": old_account, "new_account": new_account}

    def member_account_audit(self):
        from members.models import Member
        from transactions.serializers import TransactionSerializer

        totals = {row["member"]: row["total"] for row in
                  self.filter(status="completed").order_by().values("member").annotate(total=Sum("amount"))}
        members = list(Member.objects.all())

        mismatches = []
        for member in members:
            ledger = totals.get(member.id) or 0
            if member.account == ledger:
                continue
            mismatches.append({
                "member": member.id,
                "email": member.email,
                "name": member.full_name(),
                "account": member.account,
                "ledger": ledger,
                "delta": member.account - ledger,
                "transactions": TransactionSerializer(self.filter(member=member), many=True).data,
            })
        mismatches.sort(key=lambda row: abs(row["delta"]), reverse=True)

        return {
            "member_count": len(members),
            "mismatch_count": len(mismatches),
            "mismatches": mismatches,
        }

    def tournament_winnings_audit(self, season):
        from teams.models import Team
        from tournaments.models import Tournament
        from tours.models import TourCard
        from transactions.serializers import TransactionSerializer

        tournaments = Tournament.objects.filter(season=season, status="completed")
        member_ids = sorted(set(TourCard.objects.filter(season=season).values_list("member_id", flat=True)))

        members = []
        mismatch_count = 0
        for member_id in member_ids:
            teams = Team.objects \
                .filter(tour_card__member_id=member_id, tournament__in=tournaments) \
                .select_related("tournament") \
                .order_by("tournament__start_date")
            winnings = self.filter(member_id=member_id, season=season, transaction_type="TournamentWinnings")

            expected = sum(team.earnings or 0 for team in teams)
            actual = winnings.aggregate(total=Sum("amount"))["total"] or 0
            if expected != actual:
                mismatch_count += 1
            members.append({
                "member": member_id,
                "expected": expected,
                "actual": actual,
                "delta": expected - actual,
                "earnings_by_tournament": [{
                    "tournament": team.tournament_id,
                    "name": team.tournament.name,
                    "earnings": team.earnings or 0,
                } for team in teams if team.earnings],
                "winnings_transactions": TransactionSerializer(winnings, many=True).data,
            })

        return {
            "season": season.id,
            "tournament_count": tournaments.count(),
            "member_count": len(member_ids),
            "mismatch_count": mismatch_count,
            "members": members,
        }

    def summary(self, season=None):
        queryset = self.all()
        if season is not None:
            queryset = queryset.filter(season=season)

        by_type = {row["transaction_type"]: row["total"] for row in
                   queryset.order_by().values("transaction_type").annotate(total=Sum("amount"))}
        by_status = {row["status"] or "legacy": row["total"] for row in
                     queryset.order_by().values("status").annotate(total=Sum("amount"))}
        return {
            "season": season.id if season is not None else None,
            "count": queryset.count(),
            "by_type": by_type,
            "by_status": by_status,
            "net_total": queryset.aggregate(total=Sum("amount"))["total"] or 0,
            "completed_total": queryset.filter(status="completed").aggregate(total=Sum("amount"))["total"] or 0,
        }
