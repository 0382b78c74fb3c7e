import json
from http import HTTPStatus
from types import SimpleNamespace

from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from core.exceptions import DuplicateRecordError, TourFullError, ValidationFailedError
from members.models import Member
from members.tests.factories import AdminMemberFactory, MemberFactory
from seasons.tests.factories import SeasonFactory
from teams.models import Team
from teams.tests.factories import TeamFactory
from tours.models import TourCard
from tours.tests.factories import TourCardFactory, TourFactory
from tours.utils import assign_positions, validate_tour_data
from transactions.models import Transaction


class TourUtilsTests(SimpleTestCase):

    def test_assign_positions_with_ties(self):
        cards = [SimpleNamespace(id=1, points=500), SimpleNamespace(id=2, points=800),
                 SimpleNamespace(id=3, points=500), SimpleNamespace(id=4, points=100)]

        self.assertEqual(assign_positions(cards), {2: "1", 1: "T2", 3: "T2", 4: "4"})

    def test_playoff_spots(self):
        with self.assertRaises(ValidationFailedError):
            validate_tour_data({"name": "Main Tour", "short_form": "MT", "buy_in": 0, "playoff_spots": [0]})
        validate_tour_data({"name": "Main Tour", "short_form": "MT", "buy_in": 0, "playoff_spots": [30, 10]})


class TourCardManagerTests(TestCase):

    def test_create_card_charges_fee_once(self):
        tour = TourFactory(buy_in=10000)
        other_tour = TourFactory(season=tour.season)
        member = MemberFactory(first_name="Ben", last_name="Hogan")

        card = TourCard.objects.create_card(member, tour, tour.season)
        member.refresh_from_db()
        self.assertEqual(card.display_name, "Ben Hogan")
        self.assertEqual(member.account, -10000)

        card.delete()
        card = TourCard.objects.create_card(member, other_tour, tour.season, display_name="Hawk")
        member.refresh_from_db()
        self.assertEqual(Transaction.objects.filter(member=member, transaction_type="TourCardFee").count(), 1)
        self.assertEqual(member.account, -10000)
        self.assertEqual(card.display_name, "Hawk")

    def test_one_card_per_season(self):
        card = TourCardFactory()
        with self.assertRaises(DuplicateRecordError):
            TourCard.objects.create_card(card.member, card.tour, card.season)

    def test_tour_must_match_season(self):
        tour = TourFactory()
        with self.assertRaises(ValidationFailedError):
            TourCard.objects.create_card(MemberFactory(), tour, SeasonFactory())

    def test_capacity(self):
        tour = TourFactory(max_participants=1)
        TourCardFactory(tour=tour)
        with self.assertRaises(TourFullError):
            TourCard.objects.create_card(MemberFactory(), tour, tour.season)

    def test_switch_tour(self):
        card = TourCardFactory()
        full = TourFactory(season=card.season, max_participants=1)
        TourCardFactory(tour=full)
        with self.assertRaises(TourFullError):
            TourCard.objects.switch_tour(card, full)

        open_tour = TourFactory(season=card.season)
        TourCard.objects.switch_tour(card, open_tour)
        self.assertEqual(TourCard.objects.get(pk=card.pk).tour, open_tour)

    def test_delete_with_fee_removes_teams(self):
        team = TeamFactory()
        card = team.tour_card
        Transaction.objects.create_transaction(card.member, card.season, 10000, "TourCardFee")

        card_id = card.id
        result = TourCard.objects.delete_with_fee(card)

        self.assertEqual(result, {"deleted_tour_card": card_id, "deleted_teams": 1, "deleted_fees": 1,
                                  "refund": 10000})
        self.assertFalse(Team.objects.exists())
        self.assertEqual(Member.objects.get(pk=card.member_id).account, 0)

    def test_recompute_for_season(self):
        first = TeamFactory(position="1", points=500, earnings=100000, make_cut=True,
                            tournament__status="completed")
        season = first.tournament.season
        tournament = first.tournament
        tour = first.tour_card.tour
        second = TeamFactory(tournament=tournament, position="T2", points=300, make_cut=True,
                             tour_card=TourCardFactory(tour=tour))
        third = TeamFactory(tournament=tournament, position="T2", points=300, make_cut=True,
                            tour_card=TourCardFactory(tour=tour))

        result = TourCard.objects.recompute_for_season(season)

        self.assertEqual(result["updated"], 3)
        winner = TourCard.objects.get(pk=first.tour_card_id)
        self.assertEqual(winner.wins, 1)
        self.assertEqual(winner.earnings, 100000)
        self.assertEqual(winner.current_position, "1")
        self.assertEqual(TourCard.objects.get(pk=second.tour_card_id).current_position, "T2")
        self.assertEqual(TourCard.objects.get(pk=third.tour_card_id).top_five, 1)

    def test_missing_members(self):
        card = TourCardFactory()
        previous = TourCardFactory()
        MemberFactory(is_active=False)
        result = TourCard.objects.missing_members(card.season)

        self.assertEqual([m.id for m in result][0], previous.member_id)
        self.assertNotIn(card.member_id, [m.id for m in result])


class TourCardViewTests(TestCase):

    def test_member_creates_own_card(self):
        tour = TourFactory(buy_in=5000)
        member = MemberFactory()
        client = APIClient()
        client.force_authenticate(user=member.user)
        data = {"tour": tour.id, "season": tour.season_id, "member": member.id}
        response = client.post("/api/tour-cards/", data=json.dumps(data), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.CREATED)
        self.assertEqual(Member.objects.get(pk=member.pk).account, -5000)

    def test_member_cannot_create_for_someone_else(self):
        tour = TourFactory()
        member = MemberFactory()
        client = APIClient()
        client.force_authenticate(user=member.user)
        data = {"tour": tour.id, "season": tour.season_id, "member": MemberFactory().id}
        response = client.post("/api/tour-cards/", data=json.dumps(data), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

    def test_full_tour_conflicts(self):
        tour = TourFactory(max_participants=1)
        TourCardFactory(tour=tour)
        member = MemberFactory()
        client = APIClient()
        client.force_authenticate(user=member.user)
        data = {"tour": tour.id, "season": tour.season_id, "member": member.id}
        response = client.post("/api/tour-cards/", data=json.dumps(data), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.CONFLICT)

    def test_owner_switches_tour(self):
        card = TourCardFactory()
        target = TourFactory(season=card.season)
        client = APIClient()
        client.force_authenticate(user=card.member.user)
        response = client.put(f"/api/tour-cards/{card.id}/switch/", data=json.dumps({"tour": target.id}),
                              content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.data["tour"], target.id)

    def test_stranger_cannot_switch(self):
        card = TourCardFactory()
        target = TourFactory(season=card.season)
        client = APIClient()
        client.force_authenticate(user=MemberFactory().user)
        response = client.put(f"/api/tour-cards/{card.id}/switch/", data=json.dumps({"tour": target.id}),
                              content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

    def test_current(self):
        season = SeasonFactory(year=timezone.now().year)
        card = TourCardFactory(tour__season=season)
        client = APIClient()
        client.force_authenticate(user=card.member.user)
        response = client.get("/api/tour-cards/current/")

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.data["id"], card.id)

    def test_admin_delete_with_fee(self):
        card = TourCardFactory()
        client = APIClient()
        client.force_authenticate(user=AdminMemberFactory().user)
        response = client.delete(f"/api/tour-cards/{card.id}/delete_with_fee/")

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.data["deleted_fees"], 0)
        self.assertFalse(TourCard.objects.exists())
