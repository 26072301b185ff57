import json

from storage_case import StorageTestCase

from db.kv import LocalStorage
from state.session import MalformedSessionError, Session, SessionStore
from utils import config

PAYLOAD = {
    "id": 7,
    "username": "amina",
    "email": "amina@example.com",
    "role": "farmer",
    "token": "tok-123",
}


class SessionStoreTestCase(StorageTestCase):
    async def test_starts_logged_out(self):
        store = SessionStore()
        self.assertIsNone(await store.restore())
        self.assertFalse(store.is_authenticated)
        self.assertIsNone(store.role)
        self.assertIsNone(store.token)

    async def test_login_persists_and_restores_in_fresh_store(self):
        store = SessionStore()
        session = await store.login(PAYLOAD)
        self.assertEqual(session.username, "amina")
        self.assertTrue(store.is_authenticated)
        self.assertTrue(store.has_role("farmer", "admin"))
        self.assertFalse(store.has_role("customer"))

        fresh = SessionStore()
        restored = await fresh.restore()
        self.assertEqual(restored, session)
        self.assertEqual(fresh.token, "tok-123")

    async def test_login_replaces_existing_session(self):
        store = SessionStore()
        await store.login(PAYLOAD)
        await store.login(Session(9, "bo", "bo@example.com", "customer", "tok-9"))
        self.assertEqual(store.current.username, "bo")

        fresh = SessionStore()
        await fresh.restore()
        self.assertEqual(fresh.current.id, 9)

    async def test_logout_clears_memory_and_storage(self):
        store = SessionStore()
        await store.login(PAYLOAD)
        await store.logout()
        self.assertIsNone(store.current)
        self.assertIsNone(await LocalStorage().get_item(config.SESSION_KEY))

        fresh = SessionStore()
        self.assertIsNone(await fresh.restore())

    async def test_logout_when_logged_out_is_noop(self):
        store = SessionStore()
        await store.logout()
        self.assertFalse(store.is_authenticated)

    async def test_restore_discards_invalid_json(self):
        await LocalStorage().set_item(config.SESSION_KEY, "{not json")
        store = SessionStore()
        self.assertIsNone(await store.restore())
        self.assertIsNone(await LocalStorage().get_item(config.SESSION_KEY))

    async def test_restore_discards_partial_session(self):
        partial = dict(PAYLOAD)
        del partial["token"]
        await LocalStorage().set_item(config.SESSION_KEY, json.dumps(partial))
        store = SessionStore()
        self.assertIsNone(await store.restore())
        self.assertFalse(store.is_authenticated)

    async def test_restore_discards_unknown_role(self):
        bad = dict(PAYLOAD, role="superuser")
        await LocalStorage().set_item(config.SESSION_KEY, json.dumps(bad))
        self.assertIsNone(await SessionStore().restore())

    async def test_login_rejects_partial_payload(self):
        store = SessionStore()
        with self.assertRaises(MalformedSessionError):
            await store.login({"username": "x"})
        self.assertFalse(store.is_authenticated)
        self.assertIsNone(await LocalStorage().get_item(config.SESSION_KEY))

    async def test_restore_discards_deeply_nested_record(self):
        await LocalStorage().set_item(config.SESSION_KEY, "[" * 100000 + "]" * 100000)
        store = SessionStore()
        self.assertIsNone(await store.restore())
        self.assertIsNone(await LocalStorage().get_item(config.SESSION_KEY))

    async def test_restore_discards_unusable_id(self):
        bad = dict(PAYLOAD, id=["7"])
        await LocalStorage().set_item(config.SESSION_KEY, json.dumps(bad))
        self.assertIsNone(await SessionStore().restore())

    async def test_restore_from_unreadable_storage_is_logged_out(self):
        self.write_garbage_storage()
        store = SessionStore()
        self.assertIsNone(await store.restore())
        self.assertFalse(store.is_authenticated)
