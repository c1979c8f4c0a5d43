"""
Cart API — Sample Data Generator Tests
=======================================
"""

import uuid

from cartapi import sample_data


def test_product_shape():
    product = sample_data.generate_product()

    assert set(product) == {"sku", "description", "price"}
    uuid.UUID(product["sku"])
    assert 10 <= product["price"] <= 500
    assert round(product["price"], 2) == product["price"]


def test_user_shape():
    user = sample_data.generate_user()

    assert set(user) == {"userID", "lastName", "firstName", "street", "city", "state", "zip"}
    assert user["state"] in sample_data.STATES


def test_identifiers_are_unique():
    skus = {sample_data.generate_product()["sku"] for _ in range(50)}

    assert len(skus) == 50


def test_cart_references_user_and_products():
    user = sample_data.generate_user()
    products = [sample_data.generate_product() for _ in range(3)]

    cart = sample_data.generate_cart(user, products)

    assert cart["userID"] == user["userID"]
    assert [item["sku"] for item in cart["items"]] == [p["sku"] for p in products]
    assert all(1 <= item["quantity"] <= 9 for item in cart["items"])


def test_empty_cart():
    cart = sample_data.generate_cart(sample_data.generate_user(), [])

    assert cart["items"] == []
