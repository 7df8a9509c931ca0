import logging
import os
import sys
import tempfile
import unittest
from datetime import datetime
from decimal import Decimal

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from api.models import (  # noqa: E402
    PLACEHOLDER_IMAGE,
    Category,
    Product,
    UserIdentity,
    parse_ts,
    slugify,
)
from utils.config import Settings  # noqa: E402
from utils import logger as logger_mod  # noqa: E402
from utils.logger import get_logger  # noqa: E402
from utils.pure import (  # noqa: E402
    format_date,
    format_money,
    generate_markdown_table,
    short_id,
)


class SlugTestCase(unittest.TestCase):
    def test_slugify(self):
        self.assertEqual(slugify("AquaJet 100 Self-Priming Pump"), "aquajet-100-self-priming-pump")
        self.assertEqual(slugify("  Pump & Hose (2in)  "), "-pump--hose-2in-")
        self.assertEqual(slugify("Solar   pump"), "solar-pump")

    def test_slug_derived_once_when_missing(self):
        p = Product.from_json({"_id": "p1", "name": "Solar Pump", "price": 1})
        self.assertEqual(p.slug, "solar-pump")

    def test_slug_from_payload_wins(self):
        p = Product.from_json({"_id": "p1", "name": "Solar Pump", "price": 1, "slug": "sp"})
        self.assertEqual(p.slug, "sp")


class ProductTestCase(unittest.TestCase):
    def test_populated_category_and_defaults(self):
        p = Product.from_json(
            {
                "_id": "p1",
                "name": "Pump",
                "price": "19.99",
                "category": {"_id": "c1", "name": "Solar pump"},
                "stock": -4,
            }
        )
        self.assertEqual(p.price, Decimal("19.99"))
        self.assertEqual(p.category, Category(id="c1", name="Solar pump"))
        self.assertEqual(p.category_name, "Solar pump")
        self.assertEqual(p.stock, 0)
        self.assertFalse(p.in_stock)
        self.assertEqual(p.image, PLACEHOLDER_IMAGE)

    def test_plain_category_string(self):
        p = Product.from_json({"_id": "p1", "name": "Pump", "price": 1, "category": "Peripheral"})
        self.assertEqual(p.category_name, "Peripheral")

    def test_bad_payloads(self):
        for bad in (
            {"name": "x", "price": 1},
            {"_id": "", "name": "x", "price": 1},
            {"_id": "p1", "price": 1},
            {"_id": "p1", "name": "x"},
            {"_id": "p1", "name": "x", "price": "cheap"},
            {"_id": "p1", "name": "x", "price": True},
            {"_id": "p1", "name": "x", "price": -1},
        ):
            with self.assertRaises((KeyError, ValueError)):
                Product.from_json(bad)


class UserTestCase(unittest.TestCase):
    def test_round_trip_through_storage_shape(self):
        user = UserIdentity(id="u1", name="Root", email="r@example.com", role="Admin")
        data = user.to_json()
        self.assertTrue(data["isAdmin"])
        self.assertEqual(UserIdentity.from_json(data), user)

    def test_role_defaults_to_user(self):
        user = UserIdentity.from_json({"_id": "u1", "name": "A", "email": "a@b.co"})
        self.assertEqual(user.role, "User")
        self.assertFalse(user.is_admin)


class PureTestCase(unittest.TestCase):
    def test_format_money(self):
        self.assertEqual(format_money(Decimal("1234")), "$1,234.00")
        self.assertEqual(format_money(Decimal("2.675")), "$2.68")

    def test_dates(self):
        self.assertEqual(format_date(datetime(2025, 3, 4)), "March 4, 2025")
        self.assertEqual(format_date(None), "-")
        self.assertEqual(parse_ts("2025-03-04T10:00:00.000Z").year, 2025)
        self.assertIsNone(parse_ts("yesterday"))
        self.assertIsNone(parse_ts(None))

    def test_short_id(self):
        self.assertEqual(short_id("65f1c2d3e4a5b6c7d8e9f0a1"), "D8E9F0A1")
        self.assertEqual(short_id(""), "-")

    def test_markdown_table_escapes_pipes(self):
        md = generate_markdown_table(["A", "B"], [["x|y", 1]], ["l", "r"])
        self.assertEqual(md.splitlines()[1], "| :--- | ---: |")
        self.assertEqual(md.splitlines()[2], "| x\\|y | 1 |")
        self.assertEqual(generate_markdown_table(["A"], []), "")

        with self.assertRaises(ValueError):
            generate_markdown_table(["A", "B"], [["1", "2"]], ["l"])


class SettingsTestCase(unittest.TestCase):
    def setUp(self):
        self._saved = dict(os.environ)

    def tearDown(self):
        os.environ.clear()
        os.environ.update(self._saved)

    def test_defaults(self):
        for key in ("SHOP_API_URL", "SHOP_CART_MERGE_LINES", "SHOP_PRODUCT_LIMIT"):
            os.environ.pop(key, None)
        settings = Settings.from_env()
        self.assertEqual(settings.api_url, "http://localhost:5000/api")
        self.assertTrue(settings.cart_merge_lines)
        self.assertEqual(settings.product_limit, 100)

    def test_overrides(self):
        os.environ["SHOP_API_URL"] = "https://shop.example.com/api/"
        os.environ["SHOP_CART_MERGE_LINES"] = "0"
        os.environ["SHOP_PRODUCT_LIMIT"] = "25"
        settings = Settings.from_env()
        self.assertEqual(settings.api_url, "https://shop.example.com/api")
        self.assertFalse(settings.cart_merge_lines)
        self.assertEqual(settings.product_limit, 25)


class LogFileTestCase(unittest.TestCase):
    def setUp(self):
        self._saved = dict(os.environ)
        self.temp_dir = tempfile.TemporaryDirectory()
        os.environ["SHOP_LOG_FILE"] = os.path.join(self.temp_dir.name, "logs", "shop.log")
        logger_mod._console = None

    def tearDown(self):
        for name in ("shop.test.a", "shop.test.b"):
            logging.getLogger(name).handlers.clear()
        if logger_mod._console is not None:
            logger_mod._console.file.close()
            logger_mod._console = None
        os.environ.clear()
        os.environ.update(self._saved)
        self.temp_dir.cleanup()

    def test_loggers_share_one_log_file_console(self):
        first = get_logger("shop.test.a").handlers[0].console
        second = get_logger("shop.test.b").handlers[0].console

        self.assertIs(first, second)
        self.assertTrue(os.path.exists(os.environ["SHOP_LOG_FILE"]))


if __name__ == "__main__":
    unittest.main()
