from django.db import models
from django.db.models import PROTECT, SET_NULL
from simple_history.models import HistoricalRecords

from transactions.managers import TransactionManager

TRANSACTION_TYPE_CHOICES = (
    ("TourCardFee", "Tour Card Fee"),
    ("TournamentWinnings", "Tournament Winnings"),
    ("Withdrawal", "Withdrawal"),
    ("Deposit", "Deposit"),
    ("LeagueDonation", "League Donation"),
    ("CharityDonation", "Charity Donation"),
    ("Payment", "Payment"),
    ("Refund", "Refund"),
    ("Adjustment", "Adjustment"),
)
STATUS_CHOICES = (
    ("pending", "Pending"),
    ("completed", "Completed"),
    ("failed", "Failed"),
    ("cancelled", "Cancelled"),
)


class Transaction(models.Model):
    member = models.ForeignKey(verbose_name="Member", to="members.Member", null=True, blank=True,
                               on_delete=SET_NULL, related_name="transactions")
    season = models.ForeignKey(verbose_name="Season", to="seasons.Season", on_delete=PROTECT,
                               related_name="transactions")
    amount = models.IntegerField(verbose_name="Amount (cents)")
    transaction_type = models.CharField(verbose_name="Type", max_length=20, choices=TRANSACTION_TYPE_CHOICES)
    status = models.CharField(verbose_name="Status", max_length=10, choices=STATUS_CHOICES, blank=True, null=True)
    payout_email = models.EmailField(verbose_name="Payout email", blank=True, null=True)
    processed_at = models.DateTimeField(verbose_name="Processed", blank=True, null=True)
    created_date = models.DateTimeField(verbose_name="Created", auto_now_add=True)
    updated_at = models.DateTimeField(verbose_name="Updated", auto_now=True)

    objects = TransactionManager()
    history = HistoricalRecords(excluded_fields=["updated_at"])

    class Meta:
        ordering = ["-created_date", "-id"]

    def __str__(self):
        return "{} {} ({})".format(self.transaction_type, self.amount, self.status or "legacy")
