"""
Cart API — Sample Document Generator
=====================================

What:  Random product, user and cart documents for demos, smoke runs and tests.
How:   uuid4 identifiers plus Faker-generated names, addresses and
       descriptions. Cart quantities are 1-9; prices are 2-decimal floats
       in [10, 500).
"""

import random
import uuid
from typing import Any, Dict, Iterable

from faker import Faker

fake = Faker()

STATES = ["CO", "WY", "MT", "ID", "OR"]


def random_price(low: float = 10, high: float = 500) -> float:
    return round(random.uniform(low, high), 2)


def generate_product() -> Dict[str, Any]:
    """Product document: {sku, description, price}."""
    return {
        "sku": str(uuid.uuid4()),
        "description": f"{fake.color_name()} {fake.word().capitalize()}",
        "price": random_price(),
    }


def generate_user() -> Dict[str, Any]:
    """User document with name and postal address."""
    return {
        "userID": str(uuid.uuid4()),
        "lastName": fake.last_name(),
        "firstName": fake.first_name(),
        "street": fake.street_address(),
        "city": fake.city(),
        "state": random.choice(STATES),
        "zip": fake.zipcode(),
    }


def generate_cart(user: Dict[str, Any], products: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Cart for `user` holding one line per product, in the given order."""
    return {
        "cartID": str(uuid.uuid4()),
        "userID": user["userID"],
        "items": [
            {"sku": product["sku"], "quantity": random.randint(1, 9)}
            for product in products
        ],
    }
