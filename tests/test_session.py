import json
import os
import sys
import tempfile
import unittest

import httpx

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from api.client import ApiClient  # noqa: E402
from api.errors import ApiError  # noqa: E402
from api.models import UserIdentity  # noqa: E402
from storage import database as db_database  # noqa: E402
from storage import local_store  # noqa: E402
from store import session as session_ops  # noqa: E402
from store.session import TOKEN_KEY, USER_KEY, Session  # noqa: E402
from utils.config import Settings  # noqa: E402
from utils.state import ShopState  # noqa: E402

ANN = UserIdentity(id="u1", name="Ann Lee", email="ann@example.com", role="User")


class LocalStoreTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        # Point the store to a temporary file and force re-initialization
        self.temp_dir = tempfile.TemporaryDirectory()
        self.db_path = os.path.join(self.temp_dir.name, "nested", "test.sqlite")
        db_database.DB_PATH = self.db_path
        db_database._initialized = False

    def tearDown(self):
        self.temp_dir.cleanup()


class StoreTestCase(LocalStoreTestCase):
    async def test_set_get_overwrite_remove(self):
        self.assertIsNone(await local_store.get_item("k"))
        await local_store.set_item("k", "v1")
        await local_store.set_item("k", "v2")
        self.assertEqual(await local_store.get_item("k"), "v2")

        await local_store.remove_item("k", "missing")
        self.assertIsNone(await local_store.get_item("k"))
        self.assertTrue(os.path.exists(self.db_path))


class HydrateTestCase(LocalStoreTestCase):
    async def test_fresh_store_is_anonymous(self):
        session = Session()
        self.assertFalse(await session.hydrate())
        self.assertIsNone(session.token)
        self.assertIsNone(session.user)

    async def test_establish_persists_and_hydrate_restores(self):
        await Session().establish("tok-1", ANN)

        restored = Session()
        self.assertTrue(await restored.hydrate())
        self.assertEqual(restored.token, "tok-1")
        self.assertEqual(restored.user, ANN)
        self.assertFalse(restored.is_admin)

    async def test_token_without_user_is_cleared(self):
        await local_store.set_item(TOKEN_KEY, "tok-1")

        session = Session()
        self.assertFalse(await session.hydrate())
        self.assertIsNone(await local_store.get_item(TOKEN_KEY))

    async def test_malformed_user_is_cleared(self):
        await local_store.set_item(TOKEN_KEY, "tok-1")
        await local_store.set_item(USER_KEY, "{not json")

        session = Session()
        self.assertFalse(await session.hydrate())
        self.assertFalse(session.is_authenticated)
        self.assertIsNone(await local_store.get_item(TOKEN_KEY))
        self.assertIsNone(await local_store.get_item(USER_KEY))

    async def test_user_missing_fields_is_cleared(self):
        await local_store.set_item(TOKEN_KEY, "tok-1")
        await local_store.set_item(USER_KEY, json.dumps({"name": "No id"}))

        self.assertFalse(await Session().hydrate())
        self.assertIsNone(await local_store.get_item(USER_KEY))

    async def test_clear_forgets_everything_and_notifies(self):
        session = Session()
        seen = []
        unsubscribe = session.subscribe(lambda s: seen.append(s.is_authenticated))

        await session.establish("tok-1", ANN)
        await session.clear()

        self.assertEqual(seen, [True, False])
        self.assertIsNone(await local_store.get_item(TOKEN_KEY))

        unsubscribe()
        await session.establish("tok-2", ANN)
        self.assertEqual(seen, [True, False])


class LoginTestCase(LocalStoreTestCase):
    def make_client(self, handler, session=None) -> ApiClient:
        return ApiClient(
            "http://shop.test/api",
            token_getter=(lambda: session.token) if session else None,
            transport=httpx.MockTransport(handler),
        )

    async def test_login_establishes_session(self):
        seen = []

        def handler(request):
            seen.append(request)
            if request.url.path == "/api/auth/login":
                return httpx.Response(
                    200,
                    json={
                        "token": "jwt-abc",
                        "data": {
                            "_id": "u9",
                            "name": "Root",
                            "email": "root@example.com",
                            "role": "Admin",
                        },
                    },
                )
            return httpx.Response(200, json=[])

        session = Session()
        client = self.make_client(handler, session)
        user = await session_ops.login(client, session, "root@example.com", "pw")

        self.assertTrue(user.is_admin)
        self.assertTrue(session.is_admin)
        self.assertEqual(json.loads(seen[0].content)["email"], "root@example.com")
        self.assertNotIn("authorization", seen[0].headers)

        # later requests carry the bearer token
        await client.get("/orders/my")
        self.assertEqual(seen[1].headers["authorization"], "Bearer jwt-abc")

    async def test_bad_credentials_leave_session_anonymous(self):
        def handler(request):
            return httpx.Response(401, json={"message": "Invalid credentials"})

        session = Session()
        with self.assertRaises(ApiError) as ctx:
            await session_ops.login(self.make_client(handler), session, "a@b.co", "x")

        self.assertTrue(ctx.exception.is_auth_error)
        self.assertEqual(ctx.exception.message, "Invalid credentials")
        self.assertFalse(session.is_authenticated)
        self.assertIsNone(await local_store.get_item(TOKEN_KEY))

    async def test_register(self):
        def handler(request):
            body = json.loads(request.content)
            return httpx.Response(
                201,
                json={
                    "token": "jwt-new",
                    "data": {"_id": "u3", "name": body["name"], "email": body["email"]},
                },
            )

        session = Session()
        user = await session_ops.register(
            self.make_client(handler), session, "Cy", "cy@example.com", "pw"
        )
        self.assertEqual(user.role, "User")
        self.assertEqual(session.token, "jwt-new")


class ShopStateTestCase(LocalStoreTestCase):
    async def test_end_session_empties_cart(self):
        state = ShopState(settings=Settings(db_path=self.db_path, cart_merge_lines=False))
        self.assertFalse(state.cart.merge_lines)
        await state.session.establish("tok", ANN)
        self.assertTrue(await state.start())

        await state.end_session()
        self.assertFalse(state.session.is_authenticated)
        self.assertTrue(state.cart.is_empty)


if __name__ == "__main__":
    unittest.main()
