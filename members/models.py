from django.contrib.auth.models import User
from django.db import models
from django.db.models import SET_NULL
from simple_history.models import HistoricalRecords

from members.managers import MemberManager
from members.utils import generate_display_name, generate_full_name

ROLE_CHOICES = (
    ("admin", "Admin"),
    ("moderator", "Moderator"),
    ("regular", "Regular"),
)


class Member(models.Model):
    user = models.OneToOneField(verbose_name="User", to=User, null=True, blank=True, on_delete=SET_NULL,
                                related_name="member")
    email = models.EmailField(verbose_name="Email", unique=True)
    first_name = models.CharField(verbose_name="First name", max_length=50, blank=True, default="")
    last_name = models.CharField(verbose_name="Last name", max_length=50, blank=True, default="")
    display_name = models.CharField(verbose_name="Display name", max_length=100, blank=True, default="")
    is_active = models.BooleanField(verbose_name="Active", null=True, blank=True)
    role = models.CharField(verbose_name="Role", max_length=10, choices=ROLE_CHOICES, default="regular")
    account = models.IntegerField(verbose_name="Account balance (cents)", default=0)
    friends = models.ManyToManyField(verbose_name="Friends", to="self", symmetrical=False, blank=True,
                                     related_name="friend_of")
    last_login_at = models.DateTimeField(verbose_name="Last login", null=True, blank=True)
    created_date = models.DateTimeField(verbose_name="Created", auto_now_add=True)
    updated_at = models.DateTimeField(verbose_name="Updated", auto_now=True)

    objects = MemberManager()
    history = HistoricalRecords(excluded_fields=["last_login_at", "updated_at"])

    class Meta:
        ordering = ["last_name", "first_name"]

    def full_name(self):
        return generate_full_name(self.first_name, self.last_name)

    def effective_display_name(self):
        return generate_display_name(self.display_name, self.first_name, self.last_name, self.email)

    def __str__(self):
        return self.full_name() or self.email
