import json
import os
import sys
import unittest
from decimal import Decimal

import httpx

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from api.client import ApiClient  # noqa: E402
from api.errors import ApiError  # noqa: E402
from api.models import ADMIN_STATUSES, Order, OrderStatus  # noqa: E402
from store.admin import (  # noqa: E402
    ALL,
    IN_STOCK,
    OUT_OF_STOCK,
    CategoryDesk,
    OrderDesk,
    ProductDesk,
    UserDesk,
    summarize_orders,
)
from views.scr_admin_orders import AdminOrdersScreen  # noqa: E402


def order_json(oid, status="pending", total=10, email="ann@example.com", name="Ann Lee",
               user_id="u1", qty=1):
    return {
        "_id": oid,
        "items": [{"productId": "p1", "name": "Pump", "price": total, "quantity": qty}],
        "shippingAddress": {
            "firstName": name.split()[0],
            "lastName": name.split()[-1],
            "address": "1 Main St",
            "city": "Springfield",
            "state": "IL",
            "zipCode": "62701",
        },
        "email": email,
        "phone": "555",
        "subtotal": total,
        "tax": 0,
        "total": total,
        "status": status,
        "user": {"_id": user_id, "name": name, "email": email},
        "createdAt": "2025-03-04T10:00:00.000Z",
    }


class FakeServer:
    """In-memory REST backend behind httpx.MockTransport, records every request."""

    def __init__(self):
        self.orders = [
            order_json("ord-aaa111", "pending", 100, "ann@example.com", "Ann Lee", "u1"),
            order_json("ord-bbb222", "shipped", 50, "bob@example.com", "Bob Ray", "u2"),
            order_json("ord-ccc333", "cancelled", 70, "ann@example.com", "Ann Lee", "u1"),
        ]
        self.products = [
            {"_id": "p1", "name": "Alpha Pump", "price": 10, "stock": 3,
             "category": {"_id": "c1", "name": "Solar pump"}},
            {"_id": "p2", "name": "Beta Hose", "price": 2, "stock": 0},
        ]
        self.categories = [{"_id": "c1", "name": "Solar pump", "description": "sun"}]
        self.users = [
            {"_id": "u1", "name": "Ann Lee", "email": "ann@example.com", "role": "User"},
            {"_id": "u9", "name": "Root", "email": "root@example.com", "role": "Admin"},
        ]
        self.requests = []
        self.fail_writes = False

    def client(self) -> ApiClient:
        return ApiClient("http://shop.test/api", transport=httpx.MockTransport(self.handle))

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        path = request.url.path.removeprefix("/api")
        body = json.loads(request.content) if request.content else {}

        if request.method != "GET" and self.fail_writes:
            return httpx.Response(500, json={"message": "write failed"})

        if request.method == "GET" and path == "/admin/orders":
            return httpx.Response(200, json={"data": {"orders": self.orders}})
        if request.method == "PUT" and path.startswith("/admin/orders/"):
            oid = path.split("/")[3]
            for o in self.orders:
                if o["_id"] == oid:
                    o["status"] = body["status"]
            return httpx.Response(200, json={"success": True})
        if request.method == "DELETE" and path.startswith("/admin/orders/"):
            oid = path.split("/")[3]
            self.orders = [o for o in self.orders if o["_id"] != oid]
            return httpx.Response(204)

        if request.method == "GET" and path == "/products":
            return httpx.Response(200, json={"data": {"products": self.products}})
        if request.method == "PUT" and path.startswith("/products/"):
            pid = path.split("/")[2]
            for p in self.products:
                if p["_id"] == pid:
                    p.update(body)
            return httpx.Response(200, json={"success": True})

        if request.method == "GET" and path == "/categories":
            return httpx.Response(200, json={"data": {"categories": self.categories}})
        if request.method == "POST" and path == "/categories":
            self.categories.append({"_id": f"c{len(self.categories) + 1}", **body})
            return httpx.Response(201, json={"success": True})

        if request.method == "GET" and path == "/admin/users":
            return httpx.Response(200, json={"data": {"users": self.users}})
        if request.method == "PUT" and path.startswith("/admin/users/"):
            uid = path.split("/")[3]
            for u in self.users:
                if u["_id"] == uid:
                    u["role"] = body["role"]
            return httpx.Response(200, json={"success": True})

        return httpx.Response(404, json={"message": "not found"})


class OrderDeskTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.server = FakeServer()
        self.desk = OrderDesk(self.server.client())
        await self.desk.refresh()

    async def test_status_update_refetches_and_patches_open_detail(self):
        self.desk.select("ord-aaa111")
        self.server.requests.clear()

        await self.desk.update_status("ord-aaa111", "shipped")

        self.assertEqual(
            self.server.requests,
            [("PUT", "/api/admin/orders/ord-aaa111/status"), ("GET", "/api/admin/orders")],
        )
        self.assertEqual(self.desk.selected.status, "shipped")
        self.assertEqual(self.desk.find("ord-aaa111").status, "shipped")

    async def test_unknown_status_is_rejected_before_any_call(self):
        self.server.requests.clear()
        with self.assertRaises(ValueError):
            await self.desk.update_status("ord-aaa111", "teleported")
        self.assertEqual(self.server.requests, [])

    async def test_failed_write_leaves_collection_unchanged(self):
        self.desk.select("ord-aaa111")
        self.server.fail_writes = True
        before = list(self.desk.items)

        with self.assertRaises(ApiError):
            await self.desk.update_status("ord-aaa111", "delivered")

        self.assertEqual(self.desk.items, before)
        self.assertEqual(self.desk.selected.status, "pending")

    async def test_filter_by_query_and_status(self):
        self.assertEqual(len(self.desk.filter()), 3)
        self.assertEqual(
            [o.id for o in self.desk.filter("ANN")], ["ord-aaa111", "ord-ccc333"]
        )
        # id suffix, as quoted from a short order reference
        self.assertEqual([o.id for o in self.desk.filter("b222")], ["ord-bbb222"])
        self.assertEqual(
            [o.id for o in self.desk.filter("", "Shipped")], ["ord-bbb222"]
        )
        self.assertEqual([o.id for o in self.desk.filter("bob", "pending")], [])
        self.assertEqual(len(self.desk.filter("", ALL)), 3)

    async def test_confirmed_orders_can_be_filtered_and_updated(self):
        self.server.orders.append(
            order_json("ord-ddd444", "Confirmed", 30, "cy@example.com", "Cy Po", "u3")
        )
        await self.desk.refresh()

        self.assertEqual([o.id for o in self.desk.filter("", "confirmed")], ["ord-ddd444"])
        await self.desk.update_status("ord-ccc333", "confirmed")
        self.assertEqual(
            [o.id for o in self.desk.filter("", "confirmed")], ["ord-ccc333", "ord-ddd444"]
        )

    def test_every_status_is_offered_to_admins(self):
        self.assertEqual(set(ADMIN_STATUSES), {s.value for s in OrderStatus})
        offered = {value for _, value in AdminOrdersScreen.STATUS_OPTIONS}
        self.assertEqual(offered, {ALL} | set(ADMIN_STATUSES))

    async def test_declined_delete_makes_no_call(self):
        self.server.requests.clear()

        async def decline():
            return False

        self.assertFalse(await self.desk.delete("ord-aaa111", decline))
        self.assertEqual(self.server.requests, [])
        self.assertEqual(len(self.desk.items), 3)

    async def test_confirmed_delete_refetches_and_closes_detail(self):
        self.desk.select("ord-bbb222")

        async def accept():
            return True

        self.assertTrue(await self.desk.delete("ord-bbb222", accept))
        self.assertIsNone(self.desk.selected)
        self.assertIsNone(self.desk.find("ord-bbb222"))
        self.assertEqual(len(self.desk.items), 2)


class ProductDeskTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.server = FakeServer()
        self.desk = ProductDesk(self.server.client(), limit=50)
        await self.desk.refresh()

    async def test_stock_filter(self):
        self.assertEqual([p.id for p in self.desk.filter("", IN_STOCK)], ["p1"])
        self.assertEqual([p.id for p in self.desk.filter("", OUT_OF_STOCK)], ["p2"])
        self.assertEqual([p.id for p in self.desk.filter("solar")], ["p1"])

    async def test_only_changed_fields_are_sent(self):
        self.desk.select("p1")
        changed = await self.desk.update_price_stock("p1", Decimal("10"), 7)

        self.assertTrue(changed)
        self.assertEqual(self.server.products[0]["stock"], 7)
        self.assertEqual(self.desk.selected.stock, 7)
        self.assertEqual(self.desk.selected.price, Decimal("10"))

    async def test_nothing_to_update(self):
        self.server.requests.clear()
        self.assertFalse(await self.desk.update_price_stock("p1", Decimal("10"), 3))
        self.assertEqual(self.server.requests, [])

    async def test_negative_values_are_rejected(self):
        with self.assertRaises(ValueError):
            await self.desk.update_price_stock("p1", stock=-1)


class CategoryAndUserDeskTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_create_category(self):
        server = FakeServer()
        desk = CategoryDesk(server.client())
        await desk.create("  Garden  ", "hoses")
        self.assertEqual([c.name for c in desk.items], ["Solar pump", "Garden"])

        with self.assertRaises(ValueError):
            await desk.create("   ")

    async def test_role_change(self):
        server = FakeServer()
        desk = UserDesk(server.client())
        await desk.refresh()
        desk.select("u1")

        await desk.set_role("u1", "Admin")
        self.assertTrue(desk.selected.is_admin)
        self.assertEqual([u.id for u in desk.filter("", "admin")], ["u1", "u9"])

        with self.assertRaises(ValueError):
            await desk.set_role("u1", "Owner")


class SummaryTestCase(unittest.TestCase):
    def test_summarize_orders(self):
        orders = [
            Order.from_json(order_json("1", "pending", 100, qty=2)),
            Order.from_json(order_json("2", "shipped", 50, "bob@example.com", "Bob Ray", "u2")),
            Order.from_json(order_json("3", "cancelled", 70)),
        ]
        summary = summarize_orders(orders)

        self.assertEqual(summary.order_count, 3)
        self.assertEqual(summary.revenue, Decimal("150"))
        self.assertEqual(summary.items_sold, 3)
        self.assertEqual(summary.distinct_customers, 2)
        self.assertEqual(summary.by_status["pending"], 1)
        self.assertEqual(summary.by_status["cancelled"], 1)
        self.assertEqual(summary.by_status["delivered"], 0)

    def test_empty(self):
        summary = summarize_orders([])
        self.assertEqual(summary.order_count, 0)
        self.assertEqual(summary.revenue, Decimal("0"))


if __name__ == "__main__":
    unittest.main()
