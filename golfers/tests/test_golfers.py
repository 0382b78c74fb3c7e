import json
from http import HTTPStatus
from unittest import mock

import requests
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient

from golfers.datagolf import DataGolfAPIError, DataGolfAuthError, DataGolfClient
from golfers.models import Golfer, TournamentGolfer
from golfers.services import create_groups, normalize_golfer_names, sync_golfers
from golfers.tests.factories import GolferFactory, TournamentGolferFactory
from golfers.utils import group_index, normalize_country, normalize_player_name, numeric_position, \
    ranking_category, recent_form
from members.tests.factories import AdminMemberFactory, MemberFactory
from tournaments.tests.factories import TournamentFactory


class GolferUtilsTests(SimpleTestCase):

    def test_normalize_player_name(self):
        self.assertEqual(normalize_player_name("Scheffler, Scottie"), "Scottie Scheffler")
        self.assertEqual(normalize_player_name("Love, III, Davis"), "Davis Love III")
        self.assertEqual(normalize_player_name("Fowler, jr., Rickie"), "Rickie Fowler Jr.")
        self.assertEqual(normalize_player_name("  Rory McIlroy "), "Rory McIlroy")
        self.assertEqual(normalize_player_name(""), "")

    def test_normalize_country(self):
        self.assertIsNone(normalize_country(" "))
        self.assertIsNone(normalize_country("Unknown"))
        self.assertEqual(normalize_country(" NIR "), "NIR")

    def test_ranking(self):
        self.assertEqual(ranking_category(None), "unranked")
        self.assertEqual(ranking_category(4), "top10")
        self.assertEqual(ranking_category(75), "top100")
        self.assertEqual(ranking_category(300), "ranked")

    def test_positions_and_form(self):
        self.assertEqual(numeric_position("T12"), 12)
        self.assertIsNone(numeric_position("CUT"))
        self.assertEqual(recent_form(["T3", "1", "CUT"]), "excellent")
        self.assertEqual(recent_form(["CUT", "WD"]), "unknown")

    def test_group_index(self):
        sizes = [0] * 5
        for index in range(20):
            sizes[group_index(index, 20, sizes)] += 1
        self.assertEqual(sizes, [2, 4, 5, 5, 4])

        sizes = [0] * 5
        for index in range(200):
            sizes[group_index(index, 200, sizes)] += 1
        self.assertEqual(sizes[:3], [10, 16, 22])
        self.assertEqual(sum(sizes), 200)


class SyncGolfersTests(TestCase):

    def test_inserts_and_updates(self):
        GolferFactory(api_id=18417, player_name="Scottie Scheffler", country="USA")
        GolferFactory(api_id=10091, player_name="Rory Mcilroy", country="NIR")
        players = [
            {"dg_id": 18417, "player_name": "Scheffler, Scottie", "country": "USA"},
            {"dg_id": 10091, "player_name": "McIlroy, Rory", "country": "NIR"},
            {"dg_id": 22085, "player_name": "Aberg, Ludvig", "country": "SWE"},
            {"dg_id": None, "player_name": "Nobody"},
        ]

        result = sync_golfers(players)

        self.assertEqual(result, {"fetched": 4, "total": 3, "inserted": 1, "updated": 1, "dry_run": False})
        self.assertEqual(Golfer.objects.get(api_id=22085).player_name, "Ludvig Aberg")
        self.assertEqual(Golfer.objects.get(api_id=10091).player_name, "Rory McIlroy")

    def test_dry_run_writes_nothing(self):
        result = sync_golfers([{"dg_id": 1, "player_name": "Woods, Tiger", "country": "USA"}], dry_run=True)

        self.assertEqual(result["inserted"], 1)
        self.assertFalse(Golfer.objects.exists())

    def test_normalize_existing_names(self):
        GolferFactory(player_name="Spieth, Jordan", country="unknown")
        result = normalize_golfer_names()

        self.assertEqual(result["changed"], 1)
        golfer = Golfer.objects.get()
        self.assertEqual(golfer.player_name, "Jordan Spieth")
        self.assertIsNone(golfer.country)


class CreateGroupsTests(TestCase):

    def setUp(self):
        self.tournament = TournamentFactory()
        self.entries = {}
        for rating in (4.0, None, 9.0, 7.5, 1.0, 8.0, 2.5, 6.0, 5.0, 3.0):
            self.entries[rating] = TournamentGolferFactory(tournament=self.tournament, rating=rating, group=1)

    def group_of(self, rating):
        return TournamentGolfer.objects.get(pk=self.entries[rating].pk).group

    def test_create_groups(self):
        result = create_groups(self.tournament)

        self.assertEqual(result["groups"], {"1": 1, "2": 2, "3": 3, "4": 3, "5": 1})
        self.assertEqual(result["changed"], 9)
        self.assertEqual(self.group_of(9.0), 1)
        self.assertEqual(self.group_of(7.5), 2)
        self.assertEqual(self.group_of(1.0), 4)
        self.assertEqual(self.group_of(None), 5)

    def test_dry_run_writes_nothing(self):
        result = create_groups(self.tournament, dry_run=True)

        self.assertEqual(result["changed"], 9)
        self.assertEqual(TournamentGolfer.objects.filter(tournament=self.tournament, group=1).count(), 10)

    def test_endpoint_requires_admin(self):
        client = APIClient()
        client.force_authenticate(user=MemberFactory().user)
        response = client.post(f"/api/tournaments/{self.tournament.id}/create_groups/")
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

        client.force_authenticate(user=AdminMemberFactory().user)
        response = client.post(f"/api/tournaments/{self.tournament.id}/create_groups/")
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(self.group_of(None), 5)

        response = client.get(f"/api/tournaments/{self.tournament.id}/pick_pool/")
        self.assertEqual([g["group"] for g in response.data], [1, 2, 2, 3, 3, 3, 4, 4, 4, 5])


@override_settings(DATAGOLF_API_KEY="test-key")
class DataGolfClientTests(SimpleTestCase):

    def _response(self, status_code, payload=None):
        response = mock.Mock(status_code=status_code, text="error")
        response.json.return_value = payload
        return response

    def test_missing_key(self):
        with override_settings(DATAGOLF_API_KEY=None):
            with self.assertRaises(DataGolfAuthError):
                DataGolfClient()

    def test_player_list(self):
        client = DataGolfClient()
        client.session = mock.Mock()
        client.session.get.return_value = self._response(200, [{"dg_id": 1, "player_name": "Woods, Tiger"}])

        players = client.get_player_list()

        self.assertEqual(len(players), 1)
        args, kwargs = client.session.get.call_args
        self.assertTrue(args[0].endswith("/get-player-list"))
        self.assertEqual(kwargs["params"]["key"], "test-key")

    def test_auth_failure(self):
        client = DataGolfClient()
        client.session = mock.Mock()
        client.session.get.return_value = self._response(401)

        with self.assertRaises(DataGolfAuthError):
            client.get_player_list()

    @mock.patch("golfers.datagolf.time.sleep")
    def test_retries_rate_limit(self, sleep):
        client = DataGolfClient()
        client.session = mock.Mock()
        client.session.get.side_effect = [self._response(429), self._response(200, [])]

        self.assertEqual(client.get_player_list(), [])
        self.assertEqual(client.session.get.call_count, 2)
        sleep.assert_called_once_with(1)

    @mock.patch("golfers.datagolf.time.sleep")
    def test_network_errors_exhaust_retries(self, sleep):
        client = DataGolfClient()
        client.session = mock.Mock()
        client.session.get.side_effect = requests.exceptions.ConnectionError("down")

        with self.assertRaises(DataGolfAPIError):
            client.get_player_list()
        self.assertEqual(client.session.get.call_count, 4)


class GolferViewTests(TestCase):

    def test_upsert_creates_then_updates(self):
        client = APIClient()
        client.force_authenticate(user=MemberFactory(role="moderator").user)

        response = client.post("/api/golfers/upsert/", data=json.dumps({
            "api_id": 22085, "player_name": "Aberg, Ludvig", "country": "SWE"}), content_type="application/json")
        self.assertEqual(response.status_code, HTTPStatus.CREATED)
        self.assertEqual(response.data["player_name"], "Ludvig Aberg")

        response = client.post("/api/golfers/upsert/", data=json.dumps({"api_id": 22085, "world_rank": 3}),
                               content_type="application/json")
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(Golfer.objects.get().world_rank, 3)

    def test_upsert_requires_moderator(self):
        client = APIClient()
        client.force_authenticate(user=MemberFactory().user)
        response = client.post("/api/golfers/upsert/", data=json.dumps({"api_id": 1, "player_name": "Tiger Woods"}),
                               content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

    @mock.patch("golfers.services.DataGolfClient")
    def test_sync(self, client_class):
        client_class.return_value.get_player_list.return_value = [
            {"dg_id": 18417, "player_name": "Scheffler, Scottie", "country": "USA"},
        ]
        client = APIClient()
        client.force_authenticate(user=AdminMemberFactory().user)
        response = client.post("/api/golfers/sync/", data=json.dumps({}), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.data["inserted"], 1)

    @mock.patch("golfers.services.DataGolfClient")
    def test_sync_auth_failure(self, client_class):
        client_class.side_effect = DataGolfAuthError("DataGolf API key not provided")
        client = APIClient()
        client.force_authenticate(user=AdminMemberFactory().user)
        response = client.post("/api/golfers/sync/", data=json.dumps({}), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.SERVICE_UNAVAILABLE)

    def test_tournament_golfer_duplicate(self):
        entry = TournamentGolferFactory()
        client = APIClient()
        client.force_authenticate(user=AdminMemberFactory().user)
        data = {"golfer": entry.golfer_id, "tournament": entry.tournament_id}
        response = client.post("/api/tournament-golfers/", data=json.dumps(data), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.CONFLICT)

    def test_tournament_golfer_filter(self):
        entry = TournamentGolferFactory(group=2)
        TournamentGolferFactory(tournament=entry.tournament, group=1)
        response = APIClient().get(f"/api/tournament-golfers/?tournament={entry.tournament_id}&group=2")

        self.assertEqual([g["id"] for g in response.data], [entry.id])
