from django.contrib.auth.models import User, Group
from rest_framework import serializers

from .models import AuditLog


class GroupSerializer(serializers.ModelSerializer):
    class Meta:
        model = Group
        fields = ("name",)


class UserDetailSerializer(serializers.ModelSerializer):
    groups = GroupSerializer(many=True, read_only=True)
    member_id = serializers.SerializerMethodField()
    role = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ("id", "username", "first_name", "last_name", "email",
                  "is_authenticated", "is_staff", "is_active", "groups", "member_id", "role", )
        read_only_fields = ("id", "is_authenticated", "is_staff", "is_active", )

    def get_member_id(self, obj):
        member = getattr(obj, "member", None)
        return member.id if member is not None else None

    def get_role(self, obj):
        member = getattr(obj, "member", None)
        return member.role if member is not None else None

    def update(self, instance, validated_data):
        instance.first_name = validated_data.get("first_name", instance.first_name)
        instance.last_name = validated_data.get("last_name", instance.last_name)
        instance.username = validated_data.get("username", instance.username)
        instance.email = validated_data.get("email", instance.email)
        instance.save()

        member = getattr(instance, "member", None)
        if member is not None:
            member.first_name = instance.first_name
            member.last_name = instance.last_name
            member.save()

        return instance


class AuditLogSerializer(serializers.ModelSerializer):

    class Meta:
        model = AuditLog
        fields = ("id", "member", "entity_type", "entity_id", "action", "changes", "metadata",
                  "ip_address", "user_agent", "created_date", )
