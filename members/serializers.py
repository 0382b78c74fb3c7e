from rest_framework import serializers

from .models import Member


class SimpleMemberSerializer(serializers.ModelSerializer):

    class Meta:
        model = Member
        fields = ("id", "email", "first_name", "last_name", "display_name", "role", )


class MemberSerializer(serializers.ModelSerializer):
    friends = serializers.PrimaryKeyRelatedField(many=True, read_only=True)

    class Meta:
        model = Member
        fields = ("id", "user", "email", "first_name", "last_name", "display_name", "is_active", "role",
                  "account", "friends", "last_login_at", "created_date", "updated_at", )
        read_only_fields = ("id", "user", "friends", "last_login_at", "created_date", "updated_at", )


class MemberCreateSerializer(serializers.Serializer):
    email = serializers.CharField(max_length=254)
    first_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    last_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    display_name = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    role = serializers.ChoiceField(choices=["admin", "moderator", "regular"], default="regular")
    account = serializers.JSONField(required=False, default=0)
    is_active = serializers.BooleanField(required=False, allow_null=True, default=None)

    def create(self, validated_data):
        return Member.objects.create_member(**validated_data)


class MemberMergeSerializer(serializers.Serializer):
    source = serializers.PrimaryKeyRelatedField(queryset=Member.objects.all())
    target = serializers.PrimaryKeyRelatedField(queryset=Member.objects.all())
    overwrite_user = serializers.BooleanField(required=False, default=False)


class MemberDeleteSerializer(serializers.Serializer):
    transfer_to = serializers.PrimaryKeyRelatedField(queryset=Member.objects.all(), required=False, allow_null=True)
    cascade = serializers.BooleanField(required=False, default=False)
    remove_friendships = serializers.BooleanField(required=False, default=False)
