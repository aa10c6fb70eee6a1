from datetime import date
from decimal import Decimal
from typing import List

from pydantic import BaseModel, ConfigDict, Field

# --- Fixture Models ---
class UserIn(BaseModel):
    """A user row as written by the seeding routine."""
    user_id: int
    username: str = Field(max_length=50)
    email: str = Field(max_length=100)

class ProductIn(BaseModel):
    """A product row as written by the seeding routine."""
    product_id: int
    product_name: str = Field(max_length=100)
    price: Decimal = Field(max_digits=10, decimal_places=2)

class OrderIn(BaseModel):
    """An order row; user_id and product_id are checked by the database, not here."""
    order_id: int
    user_id: int
    product_id: int
    quantity: int
    order_date: date

class Dataset(BaseModel):
    """A complete set of fixture rows, inserted users first, orders last."""
    users: List[UserIn]
    products: List[ProductIn]
    orders: List[OrderIn]


# --- Report Models ---
class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    username: str
    email: str

class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    product_name: str
    price: Decimal

class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_id: int
    user_id: int
    product_id: int
    quantity: int
    order_date: date

class OrderDetail(BaseModel):
    """An order flattened with the names of its user and product."""
    order_id: int
    username: str
    product_name: str
    quantity: int
    order_date: date

class UserOrderCount(BaseModel):
    username: str
    total_orders: int

class UserSpend(BaseModel):
    username: str
    total_spent: Decimal

class ProductSales(BaseModel):
    product_name: str
    total_sold: int

class Report(BaseModel):
    """Every report, computed inside one read transaction."""
    tables: List[str]
    users: List[UserOut]
    products: List[ProductOut]
    orders: List[OrderOut]
    products_above_price: List[ProductOut]
    order_details: List[OrderDetail]
    order_counts: List[UserOrderCount]
    total_spent: List[UserSpend]
    total_sold: List[ProductSales]
    order_counts_in_range: List[UserOrderCount]
