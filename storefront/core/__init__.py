"""Core storefront policy - cart, pricing, sizes, order status, permissions."""

from storefront.core.cart import CartStore, CartValidationError
from storefront.core.order_status import InvalidStatusTransitionError
from storefront.core.permissions import Actor, AppRole, PermissionDeniedError, RoleSet
from storefront.core.pricing import ShippingQuote, compute_shipping, summarize

__all__ = [
    "Actor",
    "AppRole",
    "CartStore",
    "CartValidationError",
    "InvalidStatusTransitionError",
    "PermissionDeniedError",
    "RoleSet",
    "ShippingQuote",
    "compute_shipping",
    "summarize",
]
