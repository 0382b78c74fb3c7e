import factory
from django.contrib.auth.models import User
from factory.django import DjangoModelFactory

from members.models import Member


class UserFactory(DjangoModelFactory):
    class Meta:
        model = User

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.LazyAttribute(lambda u: f"{u.username}@golf.com")
    first_name = "Test"
    last_name = "User"


class MemberFactory(DjangoModelFactory):
    class Meta:
        model = Member

    user = factory.SubFactory(UserFactory)
    email = factory.LazyAttribute(lambda m: m.user.email if m.user else "nobody@golf.com")
    first_name = factory.Sequence(lambda n: f"Player{n}")
    last_name = "Golfer"
    role = "regular"
    account = 0
    is_active = True


class AdminMemberFactory(MemberFactory):
    role = "admin"
