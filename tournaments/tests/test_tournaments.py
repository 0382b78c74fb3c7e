import json
from datetime import datetime, timedelta, timezone as dt_timezone
from http import HTTPStatus

from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from core.models import AuditLog
from courses.tests.factories import CourseFactory
from golfers.tests.factories import TournamentGolferFactory
from members.tests.factories import AdminMemberFactory
from teams.models import Team
from teams.tests.factories import TeamFactory
from tiers.tests.factories import TierFactory
from tournaments.models import Tournament
from tournaments.tasks import update_tournament_statuses
from tournaments.tests.factories import TournamentFactory
from tournaments.utils import get_calculated_status, points_before_tournament


class TournamentStatusTests(TestCase):

    def test_calculated_status(self):
        start = datetime(2026, 4, 9, tzinfo=dt_timezone.utc)
        end = datetime(2026, 4, 12, 23, tzinfo=dt_timezone.utc)

        self.assertEqual(get_calculated_status(start, end, now=start - timedelta(days=1)), "upcoming")
        self.assertEqual(get_calculated_status(start, end, now=start + timedelta(days=1)), "active")
        self.assertEqual(get_calculated_status(start, end, now=end + timedelta(days=1)), "completed")
        self.assertEqual(get_calculated_status(start, end, "cancelled", now=start), "cancelled")

    def test_status_task(self):
        now = timezone.now()
        TournamentFactory(start_date=now - timedelta(days=1), end_date=now + timedelta(days=2), status="upcoming")
        TournamentFactory(start_date=now - timedelta(days=9), end_date=now - timedelta(days=5), status="active")
        TournamentFactory(start_date=now - timedelta(days=9), end_date=now - timedelta(days=5), status="cancelled")
        TournamentFactory()

        result = update_tournament_statuses()

        self.assertEqual(result, {"updated": 2, "changes": {"upcoming->active": 1, "active->completed": 1}})
        self.assertEqual(Tournament.objects.filter(status="cancelled").count(), 1)

    def test_points_before_tournament(self):
        earlier = TeamFactory(points=120)
        later_tournament = TournamentFactory(tier=earlier.tournament.tier,
                                             start_date=earlier.tournament.start_date + timedelta(days=7))

        self.assertEqual(points_before_tournament(earlier.tour_card_id, later_tournament), 120)
        self.assertEqual(points_before_tournament(earlier.tour_card_id, earlier.tournament), 0)


class TournamentViewTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=AdminMemberFactory().user)

    def test_create_sets_status_from_dates(self):
        tier = TierFactory()
        course = CourseFactory()
        now = timezone.now()
        data = {
            "name": "The Memorial",
            "start_date": (now - timedelta(days=1)).isoformat(),
            "end_date": (now + timedelta(days=2)).isoformat(),
            "tier": tier.id,
            "course": course.id,
            "season": tier.season_id,
        }
        response = self.client.post("/api/tournaments/", data=json.dumps(data), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.CREATED)
        self.assertEqual(response.data["status"], "active")

    def test_duplicate_name_in_season(self):
        existing = TournamentFactory(name="The Masters")
        data = {
            "name": "The Masters",
            "start_date": "2026-04-09T12:00:00Z",
            "end_date": "2026-04-12T22:00:00Z",
            "tier": existing.tier_id,
            "course": existing.course_id,
            "season": existing.season_id,
        }
        response = self.client.post("/api/tournaments/", data=json.dumps(data), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.CONFLICT)

    def test_end_before_start_rejected(self):
        existing = TournamentFactory()
        response = self.client.patch(f"/api/tournaments/{existing.id}/",
                                     data=json.dumps({"end_date": "2000-01-01T00:00:00Z"}),
                                     content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)

    def test_auto_update_status(self):
        tournament = TournamentFactory()
        now = timezone.now()
        data = {
            "start_date": (now - timedelta(days=10)).isoformat(),
            "end_date": (now - timedelta(days=7)).isoformat(),
            "auto_update_status": True,
        }
        response = self.client.patch(f"/api/tournaments/{tournament.id}/", data=json.dumps(data),
                                     content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.data["status"], "completed")

    def test_soft_delete(self):
        tournament = TournamentFactory()
        response = self.client.delete(f"/api/tournaments/{tournament.id}/?soft=true")

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(Tournament.objects.get(pk=tournament.pk).status, "cancelled")
        entry = AuditLog.objects.get(entity_type="tournaments", entity_id=str(tournament.id))
        self.assertEqual(entry.changes, {"status": {"old": "upcoming", "new": "cancelled"}})

    def test_pick_pool(self):
        tournament = TournamentFactory()
        TournamentGolferFactory(tournament=tournament, group=2, golfer__player_name="Tony Finau",
                                golfer__world_rank=20)
        TournamentGolferFactory(tournament=tournament, group=1, golfer__player_name="Xander Schauffele",
                                golfer__world_rank=3)
        TournamentGolferFactory(tournament=tournament, group=1, golfer__player_name="Scottie Scheffler",
                                golfer__world_rank=1)
        TournamentGolferFactory()

        response = APIClient().get(f"/api/tournaments/{tournament.id}/pick_pool/")

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual([g["player_name"] for g in response.data],
                         ["Scottie Scheffler", "Xander Schauffele", "Tony Finau"])
        self.assertEqual([g["group"] for g in response.data], [1, 1, 2])

    def test_delete_removes_golfers(self):
        golfer = TournamentGolferFactory()
        response = self.client.delete(f"/api/tournaments/{golfer.tournament_id}/")

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.data["deleted_golfers"], 1)
        self.assertFalse(Tournament.objects.exists())

    def test_delete_with_teams_requires_cleanup(self):
        team = TeamFactory()
        response = self.client.delete(f"/api/tournaments/{team.tournament_id}/")
        self.assertEqual(response.status_code, HTTPStatus.CONFLICT)

        response = self.client.delete(f"/api/tournaments/{team.tournament_id}/?cleanup_teams=true")
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertFalse(Team.objects.exists())

    def test_mark_completed(self):
        tournament = TournamentFactory(live_play=True, current_round=3, status="active")
        response = self.client.put(f"/api/tournaments/{tournament.id}/mark_completed/")

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.data["status"], "completed")
        self.assertEqual(response.data["current_round"], 5)
        self.assertFalse(response.data["live_play"])

    def test_leaderboard(self):
        team = TeamFactory(score=-8)
        TournamentGolferFactory(tournament=team.tournament, position="T1", score=-10)
        response = APIClient().get(f"/api/tournaments/{team.tournament_id}/leaderboard/")

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.data["tournament"]["id"], team.tournament_id)
        self.assertEqual(len(response.data["golfers"]), 1)
        self.assertEqual(response.data["teams"][0]["points_before_tournament"], 0)
        self.assertIsNone(response.data["member"])

    def test_filter_has_teams(self):
        team = TeamFactory()
        TournamentFactory()
        response = self.client.get("/api/tournaments/?has_teams=true")

        self.assertEqual([t["id"] for t in response.data], [team.tournament_id])
