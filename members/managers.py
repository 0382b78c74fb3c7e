import structlog

from django.db import models, transaction
from django.utils import timezone

from core.exceptions import DuplicateRecordError, MemberMergeError, ValidationFailedError
from core.validators import collect_errors, string_length, valid_email
from members.utils import normalize_email, normalize_person_name, generate_display_name

logger = structlog.getLogger(__name__)


def validate_member_data(data):
    errors = [valid_email(data.get("email"))]
    for field in ("first_name", "last_name"):
        value = data.get(field)
        if value and len(value.strip()) > 50:
            errors.append(f"{field} must be 50 characters or fewer")
    errors.append(string_length(data.get("display_name") or None, 1, 100, "display_name"))
    account = data.get("account")
    if account is not None and (isinstance(account, bool) or not isinstance(account, int)):
        errors.append("Account balance must be an integer number of cents")
    collect_errors(*errors)


class MemberManager(models.Manager):

    def create_member(self, email, first_name="", last_name="", display_name="", role="regular", account=0,
                      is_active=None, user=None):
        email = normalize_email(email)
        validate_member_data({
            "email": email,
            "first_name": first_name,
            "last_name": last_name,
            "display_name": display_name,
            "account": account,
        })

        if self.filter(email=email).exists():
            raise DuplicateRecordError("Member with this email already exists")
        if user is not None and self.filter(user=user).exists():
            raise DuplicateRecordError("Member with this user already exists")

        member = self.create(
            email=email,
            first_name=normalize_person_name(first_name),
            last_name=normalize_person_name(last_name),
            display_name=(display_name or "").strip(),
            role=role,
            account=account,
            is_active=is_active,
            user=user,
        )
        logger.info("Member created", member_id=member.id, email=member.email)
        return member

    def ensure_for_user(self, user):
        """
        Return the member linked to the user, linking a member with the same email
        or creating a new one when none exists. The login timestamp is refreshed.
        """
        now = timezone.now()
        member = self.filter(user=user).first()
        if member is None and user.email:
            member = self.filter(email=normalize_email(user.email), user__isnull=True).first()
            if member is not None:
                member.user = user
                logger.info("Linked existing member to user", member_id=member.id, user_id=user.id)

        if member is None:
            member = self.create_member(
                email=user.email or f"{user.username}@users.invalid",
                first_name=user.first_name,
                last_name=user.last_name,
                user=user,
            )

        member.last_login_at = now
        member.save()
        return member

    def link_user(self, member, user):
        existing = self.filter(user=user).exclude(pk=member.pk).first()
        if existing is not None:
            raise DuplicateRecordError(f"User is already linked to member {existing.id}")
        member.user = user
        member.save()
        logger.info("Member linked to user", member_id=member.id, user_id=user.id)
        return member

    def merge_preview(self, source, target=None):
        from core.models import AuditLog
        from tours.models import TourCard
        from transactions.models import Transaction

        def summary(member):
            return {
                "id": member.id,
                "user": member.user_id,
                "email": member.email,
                "display_name": member.display_name or None,
                "first_name": member.first_name or None,
                "last_name": member.last_name or None,
                "role": member.role,
                "is_active": member.is_active,
                "account": member.account,
            }

        return {
            "source": summary(source),
            "target": summary(target) if target is not None else None,
            "counts": {
                "tour_cards": TourCard.objects.filter(member=source).count(),
                "transactions": Transaction.objects.filter(member=source).count(),
                "audit_logs": AuditLog.objects.filter(member=source).count(),
                "members_referencing_as_friend": source.friend_of.exclude(pk=source.pk).count(),
            },
            "warnings": {
                "source_missing_user": source.user_id is None,
                "target_has_different_user": target is not None and source.user_id is not None
                and target.user_id is not None and target.user_id != source.user_id,
            },
        }

    @transaction.atomic()
    def merge(self, source, target, overwrite_user=False):
        """
        Fold the source member into the target: balances are summed, the user link and
        all member references move to the target, and the source is deleted.

        Raises:
            MemberMergeError: If the members are the same, the source has no user, or the
                target is linked to a different user and overwrite_user is False.
        """
        from core.models import AuditLog
        from tours.models import TourCard
        from transactions.models import Transaction

        if source.pk == target.pk:
            raise MemberMergeError("Source and target members must be different")
        if source.user_id is None:
            raise MemberMergeError("Source member has no linked user to merge")
        if target.user_id is not None and target.user_id != source.user_id and not overwrite_user:
            raise MemberMergeError("Target member already has a different linked user")

        user = source.user
        source.user = None
        source.save()

        target.user = user
        target.account = target.account + source.account
        target.is_active = bool(target.is_active) or bool(source.is_active)
        if not target.first_name:
            target.first_name = source.first_name
        if not target.last_name:
            target.last_name = source.last_name
        if not target.display_name:
            target.display_name = source.display_name
        target.save()

        moved_tour_cards = TourCard.objects.filter(member=source).update(member=target)
        moved_transactions = Transaction.objects.filter(member=source).update(member=target)
        moved_audit_logs = AuditLog.objects.filter(member=source).update(member=target)

        referencing = list(source.friend_of.exclude(pk__in=[source.pk, target.pk]))
        for member in referencing:
            member.friends.remove(source)
            member.friends.add(target)
        target.friends.remove(source)

        source_friends = source.friends.exclude(pk__in=[source.pk, target.pk])
        target.friends.add(*source_friends)

        source_id = source.id
        source.delete()

        logger.info("Members merged", source_id=source_id, target_id=target.id,
                    tour_cards=moved_tour_cards, transactions=moved_transactions)

        return {
            "target_id": target.id,
            "deleted_source_id": source_id,
            "moved": {
                "tour_cards": moved_tour_cards,
                "transactions": moved_transactions,
                "audit_logs": moved_audit_logs,
                "friend_references": len(referencing),
            },
        }

    @transaction.atomic()
    def delete_member(self, member, transfer_to=None, cascade=False, remove_friendships=False):
        from teams.models import Team
        from tours.models import TourCard
        from transactions.models import Transaction

        transferred = 0
        if transfer_to is not None:
            if transfer_to.pk == member.pk:
                raise ValidationFailedError("Cannot transfer data to the member being deleted")
            transferred = TourCard.objects.filter(member=member).update(member=transfer_to)
            transferred += Transaction.objects.filter(member=member).update(member=transfer_to)
            self.filter(pk=transfer_to.pk).update(account=models.F("account") + member.account)
        elif cascade:
            tour_cards = TourCard.objects.filter(member=member)
            Team.objects.filter(tour_card__in=tour_cards).delete()
            tour_cards.delete()

        if remove_friendships or cascade:
            for other in member.friend_of.exclude(pk=member.pk):
                other.friends.remove(member)

        member_id = member.id
        member.delete()
        logger.info("Member deleted", member_id=member_id, transferred=transferred)
        return {"deleted": True, "transferred_count": transferred}

    def recompute_active_flags(self, today=None):
        """
        A member is active when they hold a tour card in a season of the current or previous
        calendar year, or when they have a linked user and no tour cards at all.
        """
        from tours.models import TourCard

        year = (today or timezone.now()).year
        recent = set(TourCard.objects
                     .filter(season__year__in=[year, year - 1])
                     .values_list("member_id", flat=True))
        with_cards = set(TourCard.objects.values_list("member_id", flat=True))

        updated = activated = deactivated = 0
        for member in self.all():
            should_be_active = member.id in recent or (member.user_id is not None and member.id not in with_cards)
            if member.is_active == should_be_active:
                continue
            if should_be_active:
                activated += 1
            else:
                deactivated += 1
            updated += 1
            self.filter(pk=member.pk).update(is_active=should_be_active)

        logger.info("Member active flags recomputed", updated=updated, activated=activated, deactivated=deactivated)
        return {"updated": updated, "activated": activated, "deactivated": deactivated}

    @transaction.atomic()
    def normalize_names(self, dry_run=False, limit=None):
        from tours.models import TourCard

        changes = []
        members = self.all().order_by("id")
        if limit:
            members = members[:limit]

        for member in members:
            first_name = normalize_person_name(member.first_name)
            last_name = normalize_person_name(member.last_name)
            if first_name != member.first_name or last_name != member.last_name:
                changes.append({
                    "member_id": member.id,
                    "before": {"first_name": member.first_name, "last_name": member.last_name},
                    "after": {"first_name": first_name, "last_name": last_name},
                })
                if not dry_run:
                    self.filter(pk=member.pk).update(first_name=first_name, last_name=last_name)

            display_name = generate_display_name(member.display_name, first_name, last_name, member.email)
            cards = TourCard.objects.filter(member=member).exclude(display_name=display_name)
            for card in cards:
                changes.append({
                    "tour_card_id": card.id,
                    "before": {"display_name": card.display_name},
                    "after": {"display_name": display_name},
                })
            if not dry_run:
                cards.update(display_name=display_name)

        logger.info("Member names normalized", changes=len(changes), dry_run=dry_run)
        return {"dry_run": dry_run, "change_count": len(changes), "changes": changes}
