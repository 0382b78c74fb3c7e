from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.db.models import SET_NULL

AUDIT_ACTION_CHOICES = (
    ("created", "Created"),
    ("updated", "Updated"),
    ("deleted", "Deleted"),
    ("restored", "Restored"),
)


class AuditLog(models.Model):
    member = models.ForeignKey(verbose_name="Member", to="members.Member", null=True, blank=True,
                               on_delete=SET_NULL, related_name="audit_logs")
    entity_type = models.CharField(verbose_name="Entity type", max_length=40)
    entity_id = models.CharField(verbose_name="Entity id", max_length=40)
    action = models.CharField(verbose_name="Action", max_length=10, choices=AUDIT_ACTION_CHOICES)
    changes = models.JSONField(verbose_name="Changes", null=True, blank=True, encoder=DjangoJSONEncoder)
    metadata = models.JSONField(verbose_name="Metadata", null=True, blank=True, encoder=DjangoJSONEncoder)
    ip_address = models.CharField(verbose_name="IP address", max_length=45, null=True, blank=True)
    user_agent = models.CharField(verbose_name="User agent", max_length=255, null=True, blank=True)
    created_date = models.DateTimeField(verbose_name="Created", auto_now_add=True)

    class Meta:
        ordering = ["-created_date", "-id"]
        indexes = [
            models.Index(fields=["entity_type", "entity_id"]),
        ]

    def __str__(self):
        return "{} {} {}".format(self.entity_type, self.entity_id, self.action)
