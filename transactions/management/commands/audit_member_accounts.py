from django.core.management.base import BaseCommand

from core.util import format_cents
from members.models import Member
from transactions.models import Transaction


class Command(BaseCommand):
    help = "Compare member account balances with their completed transactions"

    def add_arguments(self, parser):
        parser.add_argument(
            "--fix",
            action="store_true",
            dest="fix",
            help="Reconcile mismatched accounts to the ledger",
        )

    def handle(self, *args, **options):
        report = Transaction.objects.member_account_audit()
        self.stdout.write("Audited %s members, %s mismatched" % (report["member_count"], report["mismatch_count"]))

        for row in report["mismatches"]:
            self.stdout.write(self.style.WARNING("%s: account %s, ledger %s, delta %s" % (
                row["email"], format_cents(row["account"]), format_cents(row["ledger"]), format_cents(row["delta"]))))
            if options["fix"]:
                Transaction.objects.reconcile(Member.objects.get(pk=row["member"]))

        if options["fix"] and report["mismatch_count"]:
            self.stdout.write(self.style.SUCCESS("Reconciled %s accounts" % report["mismatch_count"]))
