from sqlalchemy import Column, Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from .database import Base # Import the Base class from our database setup

# Defines the ORM model for a customer account.
class User(Base):
    # The name of the database table.
    __tablename__ = "users"

    # Define the table columns.
    user_id = Column(Integer, primary_key=True) # Fixed identifier, not auto-generated.
    username = Column(String(50)) # Display name, unique by convention only.
    email = Column(String(100)) # Contact address.

    orders = relationship("Order", back_populates="user")


# Defines the ORM model for a catalogue product.
class Product(Base):
    __tablename__ = "products"

    product_id = Column(Integer, primary_key=True)
    product_name = Column(String(100))
    price = Column(Numeric(10, 2)) # Unit price with two fractional digits.

    orders = relationship("Order", back_populates="product")


# Defines the ORM model for an order line: one user buying one product.
class Order(Base):
    __tablename__ = "orders"

    order_id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.user_id")) # Must reference an existing user.
    product_id = Column(Integer, ForeignKey("products.product_id")) # Must reference an existing product.
    quantity = Column(Integer) # Units ordered.
    order_date = Column(Date) # Calendar day the order was placed.

    user = relationship("User", back_populates="orders")
    product = relationship("Product", back_populates="orders")
