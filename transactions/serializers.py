from rest_framework import serializers

from members.models import Member
from .models import STATUS_CHOICES, TRANSACTION_TYPE_CHOICES, Transaction


class TransactionSerializer(serializers.ModelSerializer):
    member = serializers.PrimaryKeyRelatedField(queryset=Member.objects.all())
    status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False, allow_null=True, default="completed")

    class Meta:
        model = Transaction
        fields = ("id", "member", "season", "amount", "transaction_type", "status", "payout_email", "processed_at",
                  "created_date", "updated_at", )
        read_only_fields = ("id", "processed_at", "created_date", "updated_at", )

    def create(self, validated_data):
        request = self.context.get("request")
        return Transaction.objects.create_transaction(
            member=validated_data["member"],
            season=validated_data["season"],
            amount=validated_data["amount"],
            transaction_type=validated_data["transaction_type"],
            status=validated_data.get("status", "completed"),
            payout_email=validated_data.get("payout_email"),
            actor=request,
        )

    def update(self, instance, validated_data):
        request = self.context.get("request")
        return Transaction.objects.update_transaction(instance, actor=request, **validated_data)


class ReconcileSerializer(serializers.Serializer):
    member = serializers.PrimaryKeyRelatedField(queryset=Member.objects.all())
