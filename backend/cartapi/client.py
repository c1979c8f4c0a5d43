"""
Cart API — HTTP Client and Smoke Run
=====================================

What:  Async client for the Cart API plus an end-to-end smoke sequence.
How:   httpx.AsyncClient with HTTP Basic auth. Methods return the decoded JSON
       body whatever the status, so callers can inspect error bodies too.

Usage:
    CARTAPI_URL=http://localhost:8080 API_USER=... API_PASSWORD=... \\
        python -m cartapi.client [dbType]
"""

import asyncio
import json
import logging
import os
import sys
from typing import Any, Dict, Optional

import httpx

from cartapi import sample_data
from cartapi.config import settings

logger = logging.getLogger(__name__)


class CartApiClient:
    """Thin wrapper over the REST surface; one method per verb and resource."""

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        user: Optional[str] = None,
        password: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            auth=(user or settings.api_user, password or settings.api_password),
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "CartApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, body: Any = None) -> Any:
        response = await self._client.request(method, path, json=body)
        logger.debug("%s %s → %d", method, path, response.status_code)
        return response.json()

    # ── Carts ─────────────────────────────────────────────────────────────
    async def create_cart(self, db_type: str, cart: Dict[str, Any]) -> Any:
        return await self._request("POST", f"/{db_type}/cart", cart)

    async def read_cart(self, db_type: str, cart_id: str) -> Any:
        return await self._request("GET", f"/{db_type}/cart/{cart_id}")

    async def update_cart(self, db_type: str, cart_id: str, item: Dict[str, Any]) -> Any:
        return await self._request("PATCH", f"/{db_type}/cart/{cart_id}", item)

    async def delete_cart(self, db_type: str, cart_id: str) -> Any:
        return await self._request("DELETE", f"/{db_type}/cart/{cart_id}")

    # ── Products ──────────────────────────────────────────────────────────
    async def create_product(self, db_type: str, product: Dict[str, Any]) -> Any:
        return await self._request("POST", f"/{db_type}/product", product)

    async def read_product(self, db_type: str, sku: str) -> Any:
        return await self._request("GET", f"/{db_type}/product/{sku}")

    async def update_product(self, db_type: str, sku: str, updates: Dict[str, Any]) -> Any:
        return await self._request("PATCH", f"/{db_type}/product/{sku}", updates)

    async def delete_product(self, db_type: str, sku: str) -> Any:
        return await self._request("DELETE", f"/{db_type}/product/{sku}")

    # ── Users ─────────────────────────────────────────────────────────────
    async def create_user(self, db_type: str, user: Dict[str, Any]) -> Any:
        return await self._request("POST", f"/{db_type}/user", user)

    async def read_user(self, db_type: str, user_id: str) -> Any:
        return await self._request("GET", f"/{db_type}/user/{user_id}")

    async def update_user(self, db_type: str, user_id: str, updates: Dict[str, Any]) -> Any:
        return await self._request("PATCH", f"/{db_type}/user/{user_id}", updates)

    async def delete_user(self, db_type: str, user_id: str) -> Any:
        return await self._request("DELETE", f"/{db_type}/user/{user_id}")


async def run_smoke(client: CartApiClient, db_type: str = "redis") -> Dict[str, Any]:
    """
    Exercise every endpoint once and return each step's response body.

    Sequence: product create/read/update, user create/read/update, cart
    create/read, add a second product, change its quantity, remove it with
    quantity 0, then delete cart, user and product.
    """
    steps: Dict[str, Any] = {}

    product = sample_data.generate_product()
    sku = (await client.create_product(db_type, product))["sku"]
    steps["product_created"] = sku
    steps["product_read"] = await client.read_product(db_type, sku)
    steps["product_updated"] = await client.update_product(
        db_type, sku, {"description": "Metal Spatula", "price": 50}
    )

    user = sample_data.generate_user()
    user_id = (await client.create_user(db_type, user))["userID"]
    steps["user_created"] = user_id
    steps["user_read"] = await client.read_user(db_type, user_id)
    steps["user_updated"] = await client.update_user(db_type, user_id, {"street": "Random Street"})

    cart = sample_data.generate_cart(user, [product])
    cart_id = (await client.create_cart(db_type, cart))["cartID"]
    steps["cart_created"] = cart_id
    steps["cart_read"] = await client.read_cart(db_type, cart_id)

    other_sku = sample_data.generate_product()["sku"]
    await client.update_cart(db_type, cart_id, {"sku": other_sku, "quantity": 1})
    steps["cart_item_added"] = await client.read_cart(db_type, cart_id)
    await client.update_cart(db_type, cart_id, {"sku": other_sku, "quantity": 7})
    steps["cart_item_changed"] = await client.read_cart(db_type, cart_id)
    await client.update_cart(db_type, cart_id, {"sku": other_sku, "quantity": 0})
    steps["cart_item_removed"] = await client.read_cart(db_type, cart_id)

    steps["cart_deleted"] = await client.delete_cart(db_type, cart_id)
    steps["user_deleted"] = await client.delete_user(db_type, user_id)
    steps["product_deleted"] = await client.delete_product(db_type, sku)
    return steps


async def _main(db_type: str) -> None:
    base_url = os.environ.get("CARTAPI_URL", f"http://localhost:{settings.backend_port}")
    async with CartApiClient(base_url=base_url) as client:
        steps = await run_smoke(client, db_type)
    for name, body in steps.items():
        print(f"{name}: {json.dumps(body, indent=4)}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_main(sys.argv[1] if len(sys.argv) > 1 else "redis"))
