import json
from http import HTTPStatus
from io import StringIO
from types import SimpleNamespace

from django.core.management import call_command
from django.test import SimpleTestCase, TestCase
from rest_framework.test import APIClient

from core.exceptions import ValidationFailedError
from golfers.tests.factories import GolferFactory, TournamentGolferFactory
from members.tests.factories import AdminMemberFactory, MemberFactory
from teams.models import Team
from teams.scoring import TeamScorer, half_up, playoff_starting_strokes, tied_award, tied_labels
from teams.tasks import score_live_tournaments
from teams.tests.factories import TeamFactory
from teams.utils import calculate_team_score, final_position, fnv1a_32, is_champion_position, pick_unique, \
    validate_team_data
from tiers.tests.factories import TierFactory
from tournaments.tests.factories import TournamentFactory
from tours.tests.factories import TourCardFactory, TourFactory


class TeamUtilsTests(SimpleTestCase):

    def test_fnv1a(self):
        self.assertEqual(fnv1a_32(""), 2166136261)
        self.assertEqual(fnv1a_32("a"), 0xE40C292C)

    def test_pick_unique_is_deterministic(self):
        pool = list(range(100, 130))
        first = pick_unique(pool, 6, 12345)

        self.assertEqual(first, pick_unique(pool, 6, 12345))
        self.assertEqual(len(set(first)), 6)
        self.assertTrue(set(first) <= set(pool))

    def test_pick_unique_pool_too_small(self):
        with self.assertRaises(ValueError):
            pick_unique([1, 2], 3, 1)

    def test_final_position(self):
        self.assertEqual(final_position("T5"), 5)
        self.assertEqual(final_position("1"), 1)
        self.assertEqual(final_position("CUT"), 999)
        self.assertEqual(final_position(None), 999)
        self.assertTrue(is_champion_position("T1"))
        self.assertFalse(is_champion_position("T10"))

    def test_team_score(self):
        team = SimpleNamespace(round_one=70, round_two=68, round_three=None, round_four=None)
        self.assertEqual(calculate_team_score(team), 138)

    def test_duplicate_golfers_rejected(self):
        with self.assertRaises(ValidationFailedError):
            validate_team_data({"golfer_ids": [1, 2, 2]})


def leaderboard_rows(api_ids, **values):
    return {api_id: {"api_id": api_id, "position": None, "score": 0, "today": None, "thru": None, **values}
            for api_id in api_ids}


def scorer_team(team_id, golfer_ids, bracket=0):
    return {"team_id": team_id, "tour_card_id": team_id, "golfer_ids": list(golfer_ids), "bracket": bracket}


class TeamScorerTests(SimpleTestCase):

    def test_half_up(self):
        self.assertEqual(half_up(2.5), 3)
        self.assertEqual(half_up(-2.5), -2)
        self.assertEqual(half_up(-1.25, 1), -1.2)
        self.assertIsNone(half_up(None))

    def test_tied_labels_and_awards(self):
        entries = [{"team_id": 1, "score": -4}, {"team_id": 2, "score": -2}, {"team_id": 3, "score": -2},
                   {"team_id": 4, "score": 1}, {"team_id": 5, "score": None}]

        self.assertEqual(tied_labels(entries), {1: "1", 2: "T2", 3: "T2", 4: "4"})
        self.assertEqual(tied_award([500, 300, 200], 2, 2), 250)
        self.assertEqual(tied_award([500, 300, 200], 3, 2), 100)

    def test_regular_event_after_the_cut(self):
        golfers = {
            **leaderboard_rows(range(1, 11), round_one=70, round_two=70),
            **leaderboard_rows(range(11, 21), round_one=71, round_two=71),
            **leaderboard_rows(range(21, 31), round_one=71, round_two=71),
            **leaderboard_rows(range(31, 37), position="CUT", round_one=76, round_two=77),
            **leaderboard_rows(range(37, 41), round_one=69, round_two=69),
        }
        teams = [scorer_team(1, range(1, 11)), scorer_team(2, range(11, 21)), scorer_team(3, range(21, 31)),
                 scorer_team(4, range(31, 41))]
        scorer = TeamScorer(teams, golfers, par=72, current_round=3, live=False)

        results = {entry["team_id"]: entry for entry in scorer.score([500, 300, 200], [100000, 50000, 25000])}

        self.assertEqual(results[1]["position"], "1")
        self.assertEqual(results[1]["score"], -4.0)
        self.assertEqual(results[1]["round_one"], 70.0)
        self.assertEqual(results[1]["today"], -2.0)
        self.assertEqual(results[1]["thru"], 18)
        self.assertEqual((results[1]["points"], results[1]["earnings"]), (500, 100000))
        self.assertEqual(results[2]["position"], "T2")
        self.assertEqual(results[3]["position"], "T2")
        self.assertEqual((results[2]["points"], results[2]["earnings"]), (250, 37500))
        self.assertTrue(results[4]["cut"])
        self.assertEqual(results[4]["position"], "CUT")
        self.assertIsNone(results[4]["score"])
        self.assertEqual(results[4]["round_one"], 72.0)
        self.assertEqual((results[4]["points"], results[4]["earnings"]), (0, 0))

    def test_short_handed_team_takes_worst_score(self):
        golfers = {
            **leaderboard_rows(range(1, 11), round_one=73, round_two=73),
            **leaderboard_rows(range(11, 20), round_one=66, round_two=66),
            **leaderboard_rows([20], position="WD", round_one=80),
        }
        teams = [scorer_team(1, range(1, 11)), scorer_team(2, range(11, 21))]
        scorer = TeamScorer(teams, golfers, par=72, current_round=3, live=False)

        results = {entry["team_id"]: entry for entry in scorer.score([500, 300, 200], [100000, 50000, 25000])}

        self.assertFalse(results[2]["cut"])
        self.assertEqual(results[2]["round_one"], 73.0)
        self.assertEqual(results[2]["score"], 2.0)
        self.assertEqual(results[2]["position"], "T1")
        self.assertEqual((results[2]["points"], results[2]["earnings"]), (400, 75000))

    def test_live_round(self):
        golfers = leaderboard_rows(range(1, 11), round_one=70, today=-3, thru=9, score=-5)
        scorer = TeamScorer([scorer_team(1, range(1, 11))], golfers, par=72, current_round=2, live=True)

        entry = scorer.score_team(scorer.teams[0])

        self.assertEqual(entry["round_one"], 70.0)
        self.assertEqual(entry["today"], -3.0)
        self.assertEqual(entry["thru"], 9.0)
        self.assertEqual(entry["score"], -5.0)

    def test_final_playoff_event_pays_each_bracket(self):
        golfers = {
            **leaderboard_rows(range(1, 4), round_one=70, round_two=70, round_three=70, round_four=70),
            **leaderboard_rows(range(4, 7), round_one=71, round_two=71, round_three=71, round_four=71),
        }
        teams = [scorer_team(1, range(1, 4), bracket=1), scorer_team(2, range(4, 7), bracket=2)]
        scorer = TeamScorer(teams, golfers, par=72, current_round=5, live=False, event_index=3,
                            starting_strokes={1: -5, 2: -2})
        payouts = list(range(100, 0, -1))

        results = {entry["team_id"]: entry for entry in scorer.score([500, 300], payouts)}

        self.assertEqual(results[1]["score"], -13.0)
        self.assertEqual(results[2]["score"], -6.0)
        self.assertEqual(results[1]["position"], "1")
        self.assertEqual(results[2]["position"], "1")
        self.assertEqual((results[1]["points"], results[1]["earnings"]), (0, 100))
        self.assertEqual((results[2]["points"], results[2]["earnings"]), (0, 25))

    def test_earlier_playoff_events_pay_nothing(self):
        golfers = leaderboard_rows(range(1, 6), round_one=70, round_two=70, round_three=70, round_four=70)
        scorer = TeamScorer([scorer_team(1, range(1, 6), bracket=1)], golfers, par=72, current_round=5,
                            live=False, event_index=2)

        entry = scorer.score([500], [100000])[0]

        self.assertEqual(entry["position"], "1")
        self.assertEqual((entry["points"], entry["earnings"]), (0, 0))

    def test_playoff_starting_strokes(self):
        cards = [(1, 1, 900), (2, 1, 800), (3, 1, 800), (4, 2, 500), (5, 0, 1000)]
        strokes = playoff_starting_strokes(cards, [-10, -8, -6, -4])

        self.assertEqual(strokes, {1: -10, 2: -7.0, 3: -7.0, 4: -10})


class TeamManagerTests(TestCase):

    def test_seed_random(self):
        tournament = TournamentFactory()
        for _ in range(10):
            TournamentGolferFactory(tournament=tournament)
        tour = TourFactory(season=tournament.season)
        TourCardFactory(tour=tour)
        TourCardFactory(tour=tour)
        existing = TeamFactory(tournament=tournament, tour_card=TourCardFactory(tour=tour))

        preview = Team.objects.seed_random(tournament, dry_run=True)
        self.assertEqual(preview["planned"], 2)
        self.assertEqual(preview["created"], 0)
        self.assertEqual(Team.objects.count(), 1)

        result = Team.objects.seed_random(tournament)
        self.assertEqual(result["created"], 2)
        self.assertEqual(result["teams"], preview["teams"])
        for team in Team.objects.exclude(pk=existing.pk):
            self.assertEqual(len(set(team.golfer_ids)), 6)

    def test_seed_random_small_field(self):
        tournament = TournamentFactory()
        TournamentGolferFactory(tournament=tournament)
        with self.assertRaises(ValidationFailedError):
            Team.objects.seed_random(tournament)

    def test_championships(self):
        major = TeamFactory(position="1", tournament__tier=TierFactory(name="Major"))
        member = major.tour_card.member
        TeamFactory(position="1", tour_card=major.tour_card,
                    tournament=TournamentFactory(tier=major.tournament.tier, name="Players Championship"))
        TeamFactory(position="T1", tour_card=major.tour_card,
                    tournament=TournamentFactory(tier=TierFactory(name="Standard", season=major.tournament.season)))

        result = Team.objects.championships(member)

        self.assertEqual(len(result), 2)
        self.assertEqual(result[0], major)


class TeamViewTests(TestCase):

    def setUp(self):
        self.tournament = TournamentFactory()
        self.tour_card = TourCardFactory(tour__season=self.tournament.season)
        self.data = {"tournament": self.tournament.id, "tour_card": self.tour_card.id,
                     "golfer_ids": [11, 12, 13, 14, 15, 16]}

    def test_owner_creates_team(self):
        client = APIClient()
        client.force_authenticate(user=self.tour_card.member.user)
        response = client.post("/api/teams/", data=json.dumps(self.data), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.CREATED)
        self.assertEqual(response.data["golfer_ids"], [11, 12, 13, 14, 15, 16])

    def test_picks_locked_after_start(self):
        self.tournament.status = "active"
        self.tournament.save()
        client = APIClient()
        client.force_authenticate(user=self.tour_card.member.user)
        response = client.post("/api/teams/", data=json.dumps(self.data), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

    def test_other_member_cannot_create(self):
        client = APIClient()
        client.force_authenticate(user=MemberFactory().user)
        response = client.post("/api/teams/", data=json.dumps(self.data), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

    def test_season_mismatch(self):
        other_card = TourCardFactory()
        client = APIClient()
        client.force_authenticate(user=AdminMemberFactory().user)
        data = {**self.data, "tour_card": other_card.id}
        response = client.post("/api/teams/", data=json.dumps(data), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)

    def test_duplicate_team(self):
        TeamFactory(tournament=self.tournament, tour_card=self.tour_card)
        client = APIClient()
        client.force_authenticate(user=AdminMemberFactory().user)
        response = client.post("/api/teams/", data=json.dumps(self.data), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.CONFLICT)

    def test_owner_cannot_delete(self):
        team = TeamFactory(tournament=self.tournament, tour_card=self.tour_card)
        client = APIClient()
        client.force_authenticate(user=self.tour_card.member.user)
        response = client.delete(f"/api/teams/{team.id}/")

        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

    def test_seed_random_endpoint(self):
        for _ in range(6):
            TournamentGolferFactory(tournament=self.tournament)
        client = APIClient()
        client.force_authenticate(user=AdminMemberFactory().user)
        body = {"tournament": self.tournament.id, "dry_run": True}
        response = client.post("/api/teams/seed_random/", data=json.dumps(body), content_type="application/json")
        self.assertEqual(response.status_code, HTTPStatus.OK)

        body["dry_run"] = False
        response = client.post("/api/teams/seed_random/", data=json.dumps(body), content_type="application/json")
        self.assertEqual(response.status_code, HTTPStatus.CREATED)
        self.assertEqual(Team.objects.filter(tour_card=self.tour_card).count(), 1)

    def test_analytics(self):
        TeamFactory(tournament=self.tournament, tour_card=self.tour_card, points=100, make_cut=True, score=-4)
        client = APIClient()
        client.force_authenticate(user=MemberFactory().user)
        response = client.get(f"/api/teams/analytics/?tournament={self.tournament.id}")

        self.assertEqual(response.data["total_teams"], 1)
        self.assertEqual(response.data["made_cut_percentage"], 100.0)
        self.assertEqual(response.data["top_performer"]["points"], 100)


class ScoreTournamentTests(TestCase):

    def setUp(self):
        self.tournament = TournamentFactory(status="active", current_round=3, live_play=False)
        self.leader = self.team_with_rounds(range(5001, 5011), 70)
        self.chaser = self.team_with_rounds(range(5011, 5021), 71)

    def team_with_rounds(self, api_ids, strokes):
        for api_id in api_ids:
            TournamentGolferFactory(tournament=self.tournament, golfer=GolferFactory(api_id=api_id),
                                    round_one=strokes, round_two=strokes)
        return TeamFactory(tournament=self.tournament, golfer_ids=list(api_ids))

    def test_score_tournament(self):
        result = Team.objects.score_tournament(self.tournament)
        self.assertEqual(result["updated"], 2)

        leader = Team.objects.get(pk=self.leader.pk)
        self.assertEqual(leader.position, "1")
        self.assertEqual(leader.score, -4.0)
        self.assertEqual(leader.round_one, 70.0)
        self.assertEqual(leader.points, 500)
        self.assertEqual(leader.earnings, 100000)
        self.assertTrue(leader.win)
        self.assertTrue(leader.make_cut)

        chaser = Team.objects.get(pk=self.chaser.pk)
        self.assertEqual(chaser.position, "2")
        self.assertEqual(chaser.score, -2.0)
        self.assertEqual(chaser.points, 300)
        self.assertTrue(chaser.top_three)
        self.assertFalse(chaser.win)

    def test_dry_run_writes_nothing(self):
        result = Team.objects.score_tournament(self.tournament, dry_run=True)

        self.assertEqual(result["updated"], 0)
        self.assertEqual(len(result["teams"]), 2)
        self.assertIsNone(Team.objects.get(pk=self.leader.pk).position)

    def test_no_teams(self):
        result = Team.objects.score_tournament(TournamentFactory())
        self.assertEqual(result["updated"], 0)
        self.assertEqual(result["teams"], [])

    def test_command(self):
        out = StringIO()
        call_command("score_teams", str(self.tournament.id), stdout=out)

        self.assertIn("Scored 2 teams", out.getvalue())
        self.assertEqual(Team.objects.get(pk=self.leader.pk).position, "1")

    def test_task_scores_active_tournaments(self):
        result = score_live_tournaments()

        self.assertEqual(result["tournaments"], 1)
        self.assertEqual(result["teams"], {self.tournament.id: 2})

    def test_score_endpoint(self):
        client = APIClient()
        client.force_authenticate(user=MemberFactory().user)
        body = {"tournament": self.tournament.id}
        response = client.post("/api/teams/score/", data=json.dumps(body), content_type="application/json")
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

        client.force_authenticate(user=AdminMemberFactory().user)
        response = client.post("/api/teams/score/", data=json.dumps(body), content_type="application/json")
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.data["updated"], 2)
        self.assertEqual(Team.objects.get(pk=self.chaser.pk).points, 300)
