import json
from http import HTTPStatus

from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient

from core.exceptions import ValidationFailedError
from courses.models import Course
from courses.tests.factories import CourseFactory
from courses.utils import difficulty_category, format_time_zone, is_international, validate_course_data
from golfers.models import TournamentGolfer
from golfers.tests.factories import TournamentGolferFactory
from members.tests.factories import AdminMemberFactory
from teams.models import Team
from teams.tests.factories import TeamFactory
from tournaments.models import Tournament
from tournaments.tests.factories import TournamentFactory

VALID_COURSE = {
    "api_id": "tpc-sawgrass",
    "name": "TPC Sawgrass",
    "location": "Ponte Vedra Beach, FL",
    "par": 72,
    "front": 36,
    "back": 36,
    "time_zone_offset": -5,
}


class CourseUtilsTests(SimpleTestCase):

    def test_valid_course(self):
        validate_course_data(VALID_COURSE)

    def test_nines_must_add_up(self):
        with self.assertRaises(ValidationFailedError) as ctx:
            validate_course_data({**VALID_COURSE, "front": 35})
        self.assertIn("Front and back nine must add up to par", ctx.exception.errors)

    def test_par_range(self):
        with self.assertRaises(ValidationFailedError):
            validate_course_data({**VALID_COURSE, "par": 100, "front": 50, "back": 50})

    def test_difficulty(self):
        self.assertEqual(difficulty_category(72), "championship")
        self.assertEqual(difficulty_category(71), "standard")
        self.assertEqual(difficulty_category(64), "executive")
        self.assertEqual(difficulty_category(54), "par3")

    def test_format_time_zone(self):
        self.assertEqual(format_time_zone(0), "UTC")
        self.assertEqual(format_time_zone(5), "UTC+5")
        self.assertEqual(format_time_zone(-3.5), "UTC-3.5")

    def test_is_international(self):
        self.assertFalse(is_international("Augusta, GA"))
        self.assertFalse(is_international("Pebble Beach, California, USA"))
        self.assertTrue(is_international("St Andrews, Scotland"))


class CourseViewTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=AdminMemberFactory().user)

    def test_create_course(self):
        response = self.client.post("/api/courses/", data=json.dumps(VALID_COURSE), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.CREATED)
        self.assertEqual(response.data["name"], "TPC Sawgrass")

    def test_duplicate_api_id(self):
        CourseFactory(api_id="tpc-sawgrass")
        response = self.client.post("/api/courses/", data=json.dumps(VALID_COURSE), content_type="application/json")

        self.assertEqual(response.status_code, HTTPStatus.CONFLICT)

    def test_anonymous_cannot_create(self):
        response = APIClient().post("/api/courses/", data=json.dumps(VALID_COURSE), content_type="application/json")

        self.assertIn(response.status_code, (HTTPStatus.UNAUTHORIZED, HTTPStatus.FORBIDDEN))

    def test_statistics_enhancement(self):
        course = CourseFactory(location="St Andrews, Scotland", par=72, time_zone_offset=0)
        TournamentFactory(course=course)
        response = self.client.get(f"/api/courses/?id={course.id}&include_statistics=true")

        self.assertEqual(response.data["statistics"], {
            "tournament_count": 1,
            "difficulty": "championship",
            "time_zone": "UTC",
            "is_international": True,
        })

    def test_delete_in_use(self):
        tournament = TournamentFactory()
        response = self.client.delete(f"/api/courses/{tournament.course_id}/")

        self.assertEqual(response.status_code, HTTPStatus.CONFLICT)
        self.assertTrue(Course.objects.filter(pk=tournament.course_id).exists())

    def test_delete_with_replacement(self):
        tournament = TournamentFactory()
        replacement = CourseFactory()
        response = self.client.delete(f"/api/courses/{tournament.course_id}/?replacement_course={replacement.id}")

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(Tournament.objects.get(pk=tournament.pk).course, replacement)

    def test_delete_with_cascade(self):
        team = TeamFactory()
        tournament = team.tournament
        TournamentGolferFactory(tournament=tournament)
        response = self.client.delete(f"/api/courses/{tournament.course_id}/?cascade=true")

        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertFalse(Tournament.objects.filter(pk=tournament.pk).exists())
        self.assertFalse(Team.objects.exists())
        self.assertFalse(TournamentGolfer.objects.exists())

    @override_settings(TOURNAMENT_DELETE_LIMIT=1)
    def test_cascade_limit(self):
        team = TeamFactory()
        TournamentGolferFactory(tournament=team.tournament)
        response = self.client.delete(f"/api/courses/{team.tournament.course_id}/?cascade=true")

        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertTrue(Team.objects.exists())
