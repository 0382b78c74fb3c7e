from django.test import SimpleTestCase

from core.exceptions import ValidationFailedError
from core.util import format_cents, format_score, group_by, safe_int, sum_values, to_bool
from core.validators import collect_errors, integer_list, number_range, string_length, valid_email, valid_url


class FormattingTests(SimpleTestCase):

    def test_format_cents(self):
        self.assertEqual(format_cents(123456), "$1,234.56")
        self.assertEqual(format_cents(-500), "-$5.00")
        self.assertEqual(format_cents(None), "$0.00")

    def test_format_score(self):
        self.assertEqual(format_score(None), "-")
        self.assertEqual(format_score(0), "E")
        self.assertEqual(format_score(3), "+3")
        self.assertEqual(format_score(-4), "-4")

    def test_to_bool(self):
        self.assertTrue(to_bool("true"))
        self.assertTrue(to_bool("1"))
        self.assertFalse(to_bool("no"))
        with self.assertRaises(ValueError):
            to_bool("maybe")

    def test_safe_int(self):
        self.assertEqual(safe_int("12"), 12)
        self.assertEqual(safe_int("x", 7), 7)

    def test_sum_and_group(self):
        items = [{"k": "a", "v": 1}, {"k": "b", "v": 2}, {"k": "a", "v": 3}]
        self.assertEqual(sum_values([1, None, 2]), 3)
        grouped = group_by(items, lambda i: i["k"])
        self.assertEqual(len(grouped["a"]), 2)


class ValidatorTests(SimpleTestCase):

    def test_string_length_strips(self):
        self.assertIsNotNone(string_length("  a ", 2, 10, "name"))
        self.assertIsNone(string_length(" ab ", 2, 10, "name"))

    def test_number_range(self):
        self.assertIsNone(number_range(5, 1, 10, "n"))
        self.assertEqual(number_range(0, 1, 10, "n"), "n must be between 1 and 10")
        self.assertIsNone(number_range(None, 1, 10, "n"))

    def test_url_and_email(self):
        self.assertIsNone(valid_url("https://pgctour.ca/logo.png", "logo"))
        self.assertIsNotNone(valid_url("ftp://pgctour.ca/logo.png", "logo"))
        self.assertEqual(valid_email("not-an-email"), "Invalid email format")

    def test_integer_list(self):
        self.assertIsNone(integer_list([1, 2], "ids"))
        self.assertIsNotNone(integer_list([], "ids"))
        self.assertIsNotNone(integer_list([1, "2"], "ids"))
        self.assertIsNotNone(integer_list([0], "ids", positive=True))

    def test_collect_errors(self):
        collect_errors(None, None)
        with self.assertRaises(ValidationFailedError) as ctx:
            collect_errors("a is bad", None, "b is bad")
        self.assertEqual(ctx.exception.errors, ["a is bad", "b is bad"])
        self.assertEqual(ctx.exception.status_code, 400)
