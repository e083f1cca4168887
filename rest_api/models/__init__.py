"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class and AuditMixin
- restaurant: Restaurant, Branch
- user: User, Credential, AuthSession
- menu: Menu, Category, MenuItem, MenuTheme
- order: Order, OrderItem
- billing: Plan, WebpayTransaction
"""

# Base classes
from .base import Base, AuditMixin, BigIntPK

# Core tenant models
from .restaurant import Restaurant, Branch

# Users, credentials and sessions
from .user import User, Credential, AuthSession

# Menu structure
from .menu import Menu, Category, MenuItem, MenuTheme

# Orders
from .order import Order, OrderItem

# Plans and payments
from .billing import Plan, WebpayTransaction

__all__ = [
    # Base
    "Base",
    "AuditMixin",
    "BigIntPK",
    # Tenant
    "Restaurant",
    "Branch",
    # User
    "User",
    "Credential",
    "AuthSession",
    # Menu
    "Menu",
    "Category",
    "MenuItem",
    "MenuTheme",
    # Orders
    "Order",
    "OrderItem",
    # Billing
    "Plan",
    "WebpayTransaction",
]
