import structlog
from django.conf import settings
from django.db import models, transaction
from django.db.models import Count

from core.audit import log_audit
from core.exceptions import DuplicateRecordError, TourFullError, ValidationFailedError

logger = structlog.get_logger(__name__)


class TourCardManager(models.Manager):

    def ensure_capacity(self, tour):
        from tours.utils import tour_capacity

        capacity = tour_capacity(tour, settings.DEFAULT_MAX_PARTICIPANTS)
        if self.filter(tour=tour).count() >= capacity:
            raise TourFullError()

    @transaction.atomic()
    def create_card(self, member, tour, season, display_name=None, actor=None, **stats):
        """
        Issue a tour card and charge the tour buy-in. The fee is charged once per member
        and season, so a member who re-joins after switching is not billed twice.
        """
        from transactions.models import Transaction

        if tour.season_id != season.id:
            raise ValidationFailedError("Tour does not belong to the season")
        if self.filter(member=member, season=season).exists():
            raise DuplicateRecordError("Member already has a tour card for this season")
        self.ensure_capacity(tour)

        card = self.create(
            member=member,
            tour=tour,
            season=season,
            display_name=(display_name or "").strip() or member.effective_display_name(),
            **stats,
        )

        fee = None
        already_paid = Transaction.objects.filter(member=member, season=season, transaction_type="TourCardFee",
                                                  status="completed").exists()
        if tour.buy_in > 0 and not already_paid:
            fee = Transaction.objects.create_transaction(member, season, tour.buy_in, "TourCardFee", actor=actor)

        log_audit(actor, "tour_cards", card.id, "created",
                  metadata={"tour": tour.id, "fee_transaction": fee.id if fee is not None else None})
        logger.info("Tour card created", tour_card_id=card.id, member_id=member.id, tour_id=tour.id,
                    fee_charged=fee is not None)
        return card

    @transaction.atomic()
    def switch_tour(self, card, tour, actor=None):
        if tour.season_id != card.season_id:
            raise ValidationFailedError("New tour must be in the same season")
        if tour.id == card.tour_id:
            return card
        self.ensure_capacity(tour)

        previous = card.tour_id
        card.tour = tour
        card.save(update_fields=["tour", "updated_at"])
        log_audit(actor, "tour_cards", card.id, "updated", changes={"tour": {"old": previous, "new": tour.id}})
        return card

    @transaction.atomic()
    def delete_with_fee(self, card, actor=None):
        """
        Delete a tour card with its teams. When the member holds no other card that season,
        the season's tour card fees are removed and the completed total refunded.
        """
        from teams.models import Team
        from transactions.models import Transaction

        member = card.member
        season = card.season
        card_id = card.id

        deleted_teams = Team.objects.filter(tour_card=card).delete()[0]
        card.delete()

        deleted_fees = 0
        refund = 0
        if not self.filter(member=member, season=season).exists():
            fees = list(Transaction.objects.filter(member=member, season=season, transaction_type="TourCardFee"))
            refund = abs(sum(fee.amount for fee in fees if fee.status == "completed"))
            for fee in fees:
                Transaction.objects.delete_transaction(fee, actor=actor)
            deleted_fees = len(fees)

        result = {
            "deleted_tour_card": card_id,
            "deleted_teams": deleted_teams,
            "deleted_fees": deleted_fees,
            "refund": refund,
        }
        log_audit(actor, "tour_cards", card_id, "deleted", metadata=result)
        logger.info("Tour card deleted with fee", **result)
        return result

    @transaction.atomic()
    def recompute_for_season(self, season):
        from teams.models import Team
        from teams.utils import final_position, is_champion_position
        from tours.utils import assign_positions

        cards = list(self.filter(season=season))
        teams_by_card = {}
        for team in Team.objects.filter(tour_card__season=season, tournament__status="completed"):
            teams_by_card.setdefault(team.tour_card_id, []).append(team)

        for card in cards:
            teams = teams_by_card.get(card.id, [])
            positions = [final_position(team.position) for team in teams]
            card.earnings = sum(team.earnings or 0 for team in teams)
            card.points = sum(team.points or 0 for team in teams)
            card.wins = sum(1 for team in teams if is_champion_position(team.position))
            card.top_ten = sum(1 for position in positions if position <= 10)
            card.top_five = sum(1 for position in positions if position <= 5)
            card.made_cut = sum(1 for team in teams if team.make_cut)
            card.appearances = len(teams)

        by_tour = {}
        for card in cards:
            by_tour.setdefault(card.tour_id, []).append(card)
        for tour_cards in by_tour.values():
            positions = assign_positions(tour_cards)
            for card in tour_cards:
                card.current_position = positions[card.id]

        for card in cards:
            card.save()

        logger.info("Tour card standings recomputed", season_id=season.id, tour_cards=len(cards))
        return {"updated": len(cards), "tour_cards": len(cards)}

    def missing_members(self, season):
        from members.models import Member

        with_cards = self.filter(season=season).values_list("member_id", flat=True)
        members = Member.objects \
            .filter(is_active=True) \
            .exclude(id__in=with_cards) \
            .annotate(previous_season_cards=Count("tour_cards"))

        return sorted(members, key=lambda m: (-m.previous_season_cards, m.full_name().lower(), m.email))

    def current_for_member(self, member, year):
        from seasons.models import Season

        season = Season.objects.current_for_year(year)
        if season is None or member is None:
            return None
        return self.filter(member=member, season=season).select_related("tour", "season").first()
