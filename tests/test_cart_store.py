import json
from decimal import Decimal

from storage_case import StorageTestCase

from api.models import Product
from db.kv import LocalStorage
from state.cart import CartStore, LineItem
from utils import config

TOMATOES = {"id": "p1", "name": "Tomatoes", "price": "3.50", "unit": "kg"}
HONEY = {"id": "p2", "name": "Honey", "price": 12, "unit": "jar"}


class CartStoreTestCase(StorageTestCase):
    async def test_add_then_add_again_merges_quantity(self):
        cart = CartStore()
        await cart.add(TOMATOES)
        item = await cart.add(TOMATOES, 2)

        self.assertEqual(cart.count(), 1)
        self.assertEqual(item.quantity, 3)
        self.assertEqual(cart.total(), Decimal("10.50"))

    async def test_lines_keep_insertion_order(self):
        cart = CartStore()
        await cart.add(HONEY)
        await cart.add(TOMATOES)
        await cart.add(HONEY)
        self.assertEqual([i.id for i in cart.items()], ["p2", "p1"])

    async def test_add_accepts_product_model(self):
        cart = CartStore()
        product = Product(
            id=5,
            name="Maize",
            price=Decimal("1.25"),
            unit="kg",
            category_name="Grains",
            stock_quantity=40,
        )
        item = await cart.add(product, 4)
        self.assertEqual(item.line_total, Decimal("5.00"))
        self.assertEqual(item.extra["category_name"], "Grains")

    async def test_add_ignores_invalid_quantity(self):
        cart = CartStore()
        self.assertIsNone(await cart.add(TOMATOES, 0))
        self.assertIsNone(await cart.add(TOMATOES, -2))
        self.assertIsNone(await cart.add(TOMATOES, True))
        self.assertTrue(cart.is_empty())

    async def test_add_ignores_product_without_price(self):
        cart = CartStore()
        self.assertIsNone(await cart.add({"id": "p9", "name": "Mystery"}))
        self.assertTrue(cart.is_empty())

    async def test_set_quantity(self):
        cart = CartStore()
        await cart.add(TOMATOES, 3)

        item = await cart.set_quantity("p1", 2)
        self.assertEqual(item.quantity, 2)
        self.assertEqual(cart.total(), Decimal("7.00"))

        self.assertIsNone(await cart.set_quantity("p1", 0))
        self.assertTrue(cart.is_empty())

    async def test_set_quantity_negative_removes_line(self):
        cart = CartStore()
        await cart.add(TOMATOES)
        await cart.add(HONEY)
        await cart.set_quantity("p2", -1)
        self.assertEqual([i.id for i in cart.items()], ["p1"])

    async def test_set_quantity_unknown_id_is_noop(self):
        cart = CartStore()
        await cart.add(TOMATOES)
        self.assertIsNone(await cart.set_quantity("nope", 5))
        self.assertEqual(cart.count(), 1)
        self.assertEqual(cart.get("p1").quantity, 1)

    async def test_set_quantity_garbage_keeps_line(self):
        cart = CartStore()
        await cart.add(TOMATOES, 2)
        item = await cart.set_quantity("p1", "lots")
        self.assertEqual(item.quantity, 2)

    async def test_remove_and_clear(self):
        cart = CartStore()
        await cart.add(TOMATOES)
        await cart.add(HONEY)

        await cart.remove("p1")
        await cart.remove("unknown")
        self.assertEqual([i.id for i in cart.items()], ["p2"])

        await cart.clear()
        self.assertTrue(cart.is_empty())
        self.assertEqual(cart.total(), Decimal("0"))

    async def test_state_survives_restart(self):
        cart = CartStore()
        await cart.add(TOMATOES, 2)
        await cart.add(HONEY)

        fresh = CartStore()
        items = await fresh.restore()
        self.assertEqual(items, cart.items())
        self.assertEqual(fresh.total(), Decimal("19.00"))

    async def test_cleared_cart_restores_empty(self):
        cart = CartStore()
        await cart.add(TOMATOES)
        await cart.clear()

        fresh = CartStore()
        self.assertEqual(await fresh.restore(), [])

    async def test_restore_discards_invalid_json(self):
        await LocalStorage().set_item(config.CART_KEY, "not json at all")
        cart = CartStore()
        self.assertEqual(await cart.restore(), [])
        self.assertIsNone(await LocalStorage().get_item(config.CART_KEY))

    async def test_restore_discards_non_list(self):
        await LocalStorage().set_item(config.CART_KEY, json.dumps({"id": "p1"}))
        cart = CartStore()
        self.assertEqual(await cart.restore(), [])

    async def test_restore_drops_bad_entries_and_merges_duplicates(self):
        records = [
            dict(TOMATOES, quantity=1),
            {"id": "p3", "name": "Eggs", "price": "2.00", "quantity": 0},
            "garbage",
            dict(TOMATOES, quantity=2),
            dict(HONEY, quantity=1),
        ]
        await LocalStorage().set_item(config.CART_KEY, json.dumps(records))

        cart = CartStore()
        items = await cart.restore()
        self.assertEqual([i.id for i in items], ["p1", "p2"])
        self.assertEqual(cart.get("p1").quantity, 3)

    async def test_restore_drops_entries_with_unusable_ids(self):
        records = [
            {"id": ["p1"], "name": "x", "price": "1", "quantity": 1},
            {"id": {"k": 1}, "name": "y", "price": "1", "quantity": 1},
            {"id": True, "name": "z", "price": "1", "quantity": 1},
            dict(HONEY, quantity=2),
        ]
        await LocalStorage().set_item(config.CART_KEY, json.dumps(records))

        cart = CartStore()
        items = await cart.restore()
        self.assertEqual([i.id for i in items], ["p2"])

    async def test_restore_discards_deeply_nested_record(self):
        await LocalStorage().set_item(config.CART_KEY, "[" * 100000 + "]" * 100000)
        cart = CartStore()
        self.assertEqual(await cart.restore(), [])
        self.assertIsNone(await LocalStorage().get_item(config.CART_KEY))

    async def test_restore_from_unreadable_storage_is_empty(self):
        self.write_garbage_storage()
        cart = CartStore()
        self.assertEqual(await cart.restore(), [])
        self.assertTrue(cart.is_empty())

    async def test_unusable_ids_never_raise(self):
        cart = CartStore()
        await cart.add(TOMATOES)
        self.assertIsNone(await cart.add({"id": ["p1"], "name": "x", "price": "1"}))
        self.assertIsNone(cart.get(["p1"]))
        self.assertIsNone(await cart.set_quantity(["p1"], 3))
        await cart.remove(["p1"])
        self.assertEqual(cart.count(), 1)

    async def test_add_rejects_unusable_price(self):
        cart = CartStore()
        self.assertIsNone(await cart.add(dict(TOMATOES, price="-1")))
        self.assertIsNone(await cart.add(dict(TOMATOES, price="NaN")))
        self.assertIsNone(
            await cart.add(Product(id=6, name="Odd", price=Decimal("-2.00")))
        )
        self.assertTrue(cart.is_empty())

    async def test_set_quantity_overflow_keeps_line(self):
        cart = CartStore()
        await cart.add(TOMATOES, 2)
        item = await cart.set_quantity("p1", float("inf"))
        self.assertEqual(item.quantity, 2)

    async def test_persisted_price_is_a_number(self):
        cart = CartStore()
        await cart.add(TOMATOES, 3)
        records = json.loads(await LocalStorage().get_item(config.CART_KEY))
        self.assertEqual(records[0]["price"], 3.5)
        self.assertEqual(records[0]["quantity"], 3)

        fresh = CartStore()
        await fresh.restore()
        self.assertEqual(fresh.total(), Decimal("10.50"))

    async def test_separate_keys_are_independent(self):
        a = CartStore(key="cart-a")
        b = CartStore(key="cart-b")
        await a.add(TOMATOES)
        self.assertEqual(await b.restore(), [])


class LineItemTestCase(StorageTestCase):
    def test_record_keeps_unknown_fields(self):
        item = LineItem.from_record(dict(TOMATOES, farmer_username="amina"), quantity=2)
        record = item.to_record()
        self.assertEqual(record["price"], 3.5)
        self.assertEqual(record["quantity"], 2)
        self.assertEqual(record["farmer_username"], "amina")

    def test_rejects_negative_price(self):
        with self.assertRaises(ValueError):
            LineItem.from_record(dict(TOMATOES, price="-1"), quantity=1)
