from __future__ import annotations

import threading
from typing import List, Optional

from pydantic import BaseModel, Field


class Product(BaseModel):
    id: str
    name: str
    description: str
    price: str = Field(..., description="Display price, e.g. '$10.00'")
    discount: str = Field(..., description="Display discount, e.g. '10% off'")
    image: str


class OrderItem(BaseModel):
    name: str
    price: str


class Order(BaseModel):
    id: str
    date: str = Field(..., description="ISO-8601 timestamp")
    status: str
    total: str
    items: List[OrderItem]


PRODUCTS: List[Product] = [
    Product(
        id="1",
        name="Sample Product 1",
        description="This is a sample product.",
        price="$10.00",
        discount="10% off",
        image="https://via.placeholder.com/200x200?text=Product+1",
    ),
    Product(
        id="2",
        name="Sample Product 2",
        description="Another sample product.",
        price="$20.00",
        discount="15% off",
        image="https://via.placeholder.com/200x200?text=Product+2",
    ),
    Product(
        id="3",
        name="Sample Product 3",
        description="Yet another sample product.",
        price="$30.00",
        discount="20% off",
        image="https://via.placeholder.com/200x200?text=Product+3",
    ),
]

ORDERS: List[Order] = [
    Order(
        id="ORD001",
        date="2024-01-15T10:30:00Z",
        status="Delivered",
        total="$25.00",
        items=[
            OrderItem(name="Sample Product 1", price="$10.00"),
            OrderItem(name="Sample Product 2", price="$15.00"),
        ],
    ),
    Order(
        id="ORD002",
        date="2024-01-20T14:45:00Z",
        status="Shipped",
        total="$45.00",
        items=[
            OrderItem(name="Sample Product 3", price="$30.00"),
            OrderItem(name="Sample Product 1", price="$10.00"),
            OrderItem(name="Sample Product 2", price="$5.00"),
        ],
    ),
]

_cart: List[Product] = []
_cart_lock = threading.Lock()


def list_products() -> List[Product]:
    return list(PRODUCTS)


def get_product(product_id: str) -> Optional[Product]:
    for product in PRODUCTS:
        if product.id == product_id:
            return product
    return None


def list_cart() -> List[Product]:
    with _cart_lock:
        return list(_cart)


def add_to_cart(product_id: str) -> Optional[Product]:
    product = get_product(product_id)
    if product is None:
        return None
    with _cart_lock:
        _cart.append(product)
    return product


def remove_from_cart(product_id: str) -> bool:
    """Remove one cart entry for ``product_id``; False if there was none."""
    with _cart_lock:
        for idx, product in enumerate(_cart):
            if product.id == product_id:
                del _cart[idx]
                return True
    return False


def clear_cart() -> None:
    with _cart_lock:
        _cart.clear()


def list_orders() -> List[Order]:
    return list(ORDERS)


def get_order(order_id: str) -> Optional[Order]:
    for order in ORDERS:
        if order.id == order_id:
            return order
    return None
