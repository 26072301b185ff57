import json
import unittest
from decimal import Decimal

import httpx

from storage_case import ROOT  # noqa: F401  (puts src/ on sys.path)

from api.client import AgriHubClient, ApiError
from api.models import ProductDraft
from state.cart import LineItem

BASE = "http://agrihub.test/api"


class ApiClientTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.requests = []
        self.responder = lambda request: httpx.Response(200, json={})

    async def asyncSetUp(self):
        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return self.responder(request)

        self.client = AgriHubClient(base_url=BASE, transport=httpx.MockTransport(handler))

    async def asyncTearDown(self):
        await self.client.aclose()

    async def test_login_posts_credentials(self):
        payload = {"id": 1, "username": "a", "email": "a@x.io", "role": "customer", "token": "t"}
        self.responder = lambda request: httpx.Response(200, json=payload)

        result = await self.client.login("a@x.io", "secret")

        self.assertEqual(result, payload)
        req = self.requests[0]
        self.assertEqual(req.method, "POST")
        self.assertEqual(req.url.path, "/api/auth/login")
        self.assertEqual(json.loads(req.content), {"email": "a@x.io", "password": "secret"})
        self.assertNotIn("authorization", req.headers)

    async def test_error_uses_server_message(self):
        self.responder = lambda request: httpx.Response(
            400, json={"message": "User already exists"}
        )
        with self.assertRaises(ApiError) as ctx:
            await self.client.register("a", "a@x.io", "pw")
        self.assertEqual(ctx.exception.message, "User already exists")
        self.assertEqual(ctx.exception.status, 400)

    async def test_error_without_message_uses_default(self):
        self.responder = lambda request: httpx.Response(500, text="boom")
        with self.assertRaises(ApiError) as ctx:
            await self.client.list_categories()
        self.assertEqual(ctx.exception.message, "Failed to load categories.")
        self.assertEqual(ctx.exception.status, 500)

    async def test_unreachable_server(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        self.responder = refuse
        with self.assertRaises(ApiError) as ctx:
            await self.client.my_orders("tok")
        self.assertEqual(ctx.exception.message, "Failed to fetch orders")
        self.assertIsNone(ctx.exception.status)

    async def test_malformed_body(self):
        self.responder = lambda request: httpx.Response(200, text="<html>")
        with self.assertRaises(ApiError) as ctx:
            await self.client.get_product(3)
        self.assertEqual(ctx.exception.message, "Malformed response from server.")

    async def test_wrong_shape_bodies(self):
        cases = [
            ({"products": []}, self.client.list_products),
            ([{"name": "no id"}], self.client.list_products),
            (["Vegetables"], self.client.list_categories),
            ({"id": 1}, lambda: self.client.my_orders("tok")),
            ([{"id": "o1", "items": {"p1": 2}}], lambda: self.client.all_orders("tok")),
            ([1, 2], lambda: self.client.get_product(3)),
        ]
        for body, call in cases:
            with self.subTest(body=body):
                self.responder = lambda request, body=body: httpx.Response(200, json=body)
                with self.assertRaises(ApiError) as ctx:
                    await call()
                self.assertEqual(ctx.exception.message, "Malformed response from server.")
                self.assertEqual(ctx.exception.status, 200)

    async def test_empty_product_body(self):
        self.responder = lambda request: httpx.Response(204)
        with self.assertRaises(ApiError) as ctx:
            await self.client.get_product(3)
        self.assertEqual(ctx.exception.message, "Malformed response from server.")

    async def test_place_order_reply_without_id(self):
        items = [LineItem(id="p1", name="Tomatoes", price=Decimal("3.50"), quantity=1)]
        for body in ([], {"message": "Order placed"}):
            with self.subTest(body=body):
                self.responder = lambda request, body=body: httpx.Response(201, json=body)
                self.assertIsNone(
                    await self.client.place_order("tok", items, "1 Farm Rd", "cod")
                )

    async def test_list_products_filters_by_category(self):
        self.responder = lambda request: httpx.Response(
            200,
            json=[
                {
                    "id": 3,
                    "name": "Kale",
                    "price": "2.40",
                    "unit": "bunch",
                    "category_name": "Vegetables",
                    "stock_quantity": 0,
                    "farmer_id": 7,
                    "farmer_username": "amina",
                }
            ],
        )

        products = await self.client.list_products(category=4, token="tok")

        self.assertEqual(self.requests[0].url.params["category"], "4")
        self.assertEqual(self.requests[0].headers["authorization"], "Bearer tok")
        self.assertEqual(products[0].price, Decimal("2.40"))
        self.assertEqual(products[0].stock_label, "Out of Stock")

    async def test_list_products_without_category(self):
        self.responder = lambda request: httpx.Response(200, json=[])
        self.assertEqual(await self.client.list_products(), [])
        self.assertNotIn("category", self.requests[0].url.params)

    async def test_product_crud_paths(self):
        draft = ProductDraft(
            name="Kale",
            description="Fresh",
            price=Decimal("2.5"),
            unit="bunch",
            category_id=4,
            stock_quantity=10,
        )
        self.responder = lambda request: httpx.Response(204)

        await self.client.create_product("tok", draft)
        await self.client.update_product("tok", 3, draft)
        await self.client.delete_product("tok", 3)

        self.assertEqual(
            [(r.method, r.url.path) for r in self.requests],
            [
                ("POST", "/api/products"),
                ("PUT", "/api/products/3"),
                ("DELETE", "/api/products/3"),
            ],
        )
        body = json.loads(self.requests[0].content)
        self.assertEqual(body["price"], 2.5)
        self.assertEqual(body["stock_quantity"], 10)

    async def test_place_order_payload(self):
        self.responder = lambda request: httpx.Response(
            201, json={"message": "Order placed", "orderId": "abc123"}
        )
        items = [
            LineItem(id="p1", name="Tomatoes", price=Decimal("3.50"), quantity=3),
            LineItem(id="p2", name="Honey", price=Decimal("12"), quantity=1),
        ]

        order_id = await self.client.place_order("tok", items, "1 Farm Rd", "m-pesa")

        self.assertEqual(order_id, "abc123")
        req = self.requests[0]
        self.assertEqual(req.url.path, "/api/orders")
        self.assertEqual(req.headers["authorization"], "Bearer tok")
        self.assertEqual(
            json.loads(req.content),
            {
                "orderItems": [
                    {"productId": "p1", "quantity": 3},
                    {"productId": "p2", "quantity": 1},
                ],
                "shippingAddress": "1 Farm Rd",
                "paymentMethod": "m-pesa",
            },
        )

    async def test_orders_are_parsed(self):
        self.responder = lambda request: httpx.Response(
            200,
            json=[
                {
                    "id": "0f3c2a9e-1111-2222",
                    "status": "shipped",
                    "total_amount": "10.50",
                    "order_date": "2024-05-01",
                    "items": [{"product_name": "Tomatoes", "quantity": 3, "price": "3.50"}],
                }
            ],
        )

        orders = await self.client.all_orders("tok")

        self.assertEqual(self.requests[0].url.path, "/api/orders")
        self.assertEqual(orders[0].short_id, "0f3c2a9e")
        self.assertEqual(orders[0].items[0].quantity, 3)

    async def test_update_order_status(self):
        await self.client.update_order_status("tok", "o1", "delivered")
        req = self.requests[0]
        self.assertEqual((req.method, req.url.path), ("PUT", "/api/orders/o1/status"))
        self.assertEqual(json.loads(req.content), {"status": "delivered"})
