import os
import sys
import unittest
from decimal import Decimal

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from api.errors import AuthRequiredError, OutOfStockError  # noqa: E402
from api.models import Product, UserIdentity  # noqa: E402
from store.cart import Cart  # noqa: E402
from store.session import Session  # noqa: E402
from utils.pure import format_money  # noqa: E402


def make_product(pid, price, stock=10, name=None):
    return Product(
        id=pid,
        name=name or f"Product {pid}",
        description="",
        price=Decimal(str(price)),
        category="Peripheral",
        stock=stock,
        slug=pid,
    )


def logged_in_session() -> Session:
    session = Session()
    session.token = "tok"
    session.user = UserIdentity(id="u1", name="Ann", email="ann@example.com")
    return session


SESSION = logged_in_session()


class CartTotalsTestCase(unittest.TestCase):
    def test_subtotal_tax_total(self):
        cart = Cart()
        cart.add_line(make_product("a", 10), 2, session=SESSION)
        cart.add_line(make_product("b", 5), 1, session=SESSION)

        self.assertEqual(cart.subtotal(), Decimal("25"))
        self.assertEqual(cart.tax(), Decimal("2.00"))
        self.assertEqual(cart.total(), Decimal("27.00"))
        self.assertEqual(format_money(cart.total()), "$27.00")
        self.assertEqual(cart.item_count, 3)

    def test_empty_cart_totals_are_zero(self):
        cart = Cart()
        self.assertTrue(cart.is_empty)
        self.assertEqual(cart.subtotal(), Decimal("0"))
        self.assertEqual(cart.total(), Decimal("0"))

    def test_rounding_happens_at_display_time(self):
        cart = Cart()
        cart.add_line(make_product("a", "0.05"), 1, session=SESSION)
        # 0.05 * 0.08 = 0.004 stays exact until rendered
        self.assertEqual(cart.tax(), Decimal("0.0040"))
        self.assertEqual(format_money(cart.tax()), "$0.00")
        self.assertEqual(format_money(Decimal("0.005")), "$0.01")

    def test_order_items_mirror_lines(self):
        cart = Cart()
        cart.add_line(make_product("a", 10, name="Alpha"), 2, session=SESSION)
        items = cart.to_order_items()
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0].product_id, "a")
        self.assertEqual(items[0].to_json()["price"], 10.0)
        self.assertEqual(items[0].quantity, 2)


class CartLinePolicyTestCase(unittest.TestCase):
    def test_merge_bumps_quantity_on_the_same_line(self):
        cart = Cart(merge_lines=True)
        product = make_product("a", 10)
        cart.add_line(product, session=SESSION)
        line = cart.add_line(product, 2, session=SESSION)

        self.assertEqual(len(cart.lines), 1)
        self.assertEqual(line.line_id, "a")
        self.assertEqual(line.quantity, 3)

    def test_duplicate_lines_keep_one_line_per_add(self):
        cart = Cart(merge_lines=False)
        product = make_product("a", 10)
        first = cart.add_line(product, session=SESSION)
        second = cart.add_line(product, session=SESSION)

        self.assertEqual(len(cart.lines), 2)
        self.assertNotEqual(first.line_id, second.line_id)
        self.assertEqual(cart.subtotal(), Decimal("20"))

        cart.remove_line(first.line_id)
        self.assertEqual([line.line_id for line in cart.lines], [second.line_id])

    def test_products_without_id_never_share_a_line(self):
        cart = Cart(merge_lines=True)
        cart.add_line(make_product("", 10, name="Pump A"), session=SESSION)
        cart.add_line(make_product("", 99, name="Pump B"), session=SESSION)

        self.assertEqual([line.name for line in cart.lines], ["Pump A", "Pump B"])
        self.assertEqual(cart.subtotal(), Decimal("109"))

    def test_quantity_is_capped_at_stock(self):
        cart = Cart()
        product = make_product("a", 10, stock=3)
        cart.add_line(product, 2, session=SESSION)
        line = cart.add_line(product, 5, session=SESSION)
        self.assertEqual(line.quantity, 3)

        line = cart.set_quantity("a", 10)
        self.assertEqual(line.quantity, 3)

    def test_out_of_stock_and_bad_quantity_are_rejected(self):
        cart = Cart()
        with self.assertRaises(OutOfStockError):
            cart.add_line(make_product("a", 10, stock=0), session=SESSION)
        with self.assertRaises(ValueError):
            cart.add_line(make_product("b", 10), 0, session=SESSION)
        self.assertTrue(cart.is_empty)


class CartWritesTestCase(unittest.TestCase):
    def setUp(self):
        self.cart = Cart()
        self.cart.add_line(make_product("a", 10), 2, session=SESSION)
        self.cart.add_line(make_product("b", 5), 1, session=SESSION)

    def test_decrement_removes_the_last_unit(self):
        line = self.cart.decrement("a")
        self.assertEqual(line.quantity, 1)
        self.assertIsNone(self.cart.decrement("a"))
        self.assertIsNone(self.cart.get_line("a"))
        self.assertEqual(len(self.cart.lines), 1)

    def test_set_quantity_zero_removes(self):
        self.assertIsNone(self.cart.set_quantity("b", 0))
        self.assertEqual([line.line_id for line in self.cart.lines], ["a"])

    def test_unknown_line_raises(self):
        with self.assertRaises(KeyError):
            self.cart.remove_line("missing")

    def test_lines_are_a_copy(self):
        self.cart.lines.clear()
        self.assertEqual(len(self.cart.lines), 2)

    def test_subscribers_are_called_on_every_change(self):
        calls = []
        unsubscribe = self.cart.subscribe(lambda cart: calls.append(cart.item_count))

        self.cart.add_line(make_product("c", 1), session=SESSION)
        self.cart.decrement("a")
        self.cart.clear()
        # clearing an empty cart is a no-op
        self.cart.clear()
        self.assertEqual(calls, [4, 3, 0])

        unsubscribe()
        self.cart.add_line(make_product("d", 1), session=SESSION)
        self.assertEqual(calls, [4, 3, 0])


class CartAuthTestCase(unittest.TestCase):
    def test_anonymous_add_is_rejected_with_redirect(self):
        cart = Cart()
        calls = []
        cart.subscribe(lambda c: calls.append(c))

        with self.assertRaises(AuthRequiredError) as ctx:
            cart.add_line(make_product("a", 10), session=Session())

        self.assertEqual(ctx.exception.redirect_to, "login")
        self.assertEqual(ctx.exception.redirect_delay, 1.5)
        self.assertIn("log in", ctx.exception.message)
        self.assertTrue(cart.is_empty)
        self.assertEqual(calls, [])

    def test_session_must_be_given(self):
        cart = Cart()
        with self.assertRaises(TypeError):
            cart.add_line(make_product("a", 10))
        with self.assertRaises(AuthRequiredError):
            cart.add_line(make_product("a", 10), session=None)
        self.assertTrue(cart.is_empty)

    def test_logged_in_add_goes_through(self):
        cart = Cart()
        cart.add_line(make_product("a", 10), session=logged_in_session())
        self.assertEqual(cart.item_count, 1)


if __name__ == "__main__":
    unittest.main()
