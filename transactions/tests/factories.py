import factory
from django.utils import timezone
from factory.django import DjangoModelFactory

from members.tests.factories import MemberFactory
from seasons.tests.factories import SeasonFactory
from transactions.models import Transaction


class TransactionFactory(DjangoModelFactory):
    """Writes the row directly without touching the member account."""

    class Meta:
        model = Transaction

    member = factory.SubFactory(MemberFactory)
    season = factory.SubFactory(SeasonFactory)
    amount = 5000
    transaction_type = "Deposit"
    status = "completed"
    processed_at = factory.LazyFunction(timezone.now)
