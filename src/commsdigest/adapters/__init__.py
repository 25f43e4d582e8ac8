"""Remote service adapters for commsdigest."""

from commsdigest.adapters.attrove import AttroveAdapter, AttroveAdminAdapter
from commsdigest.adapters.base import (
    AdapterError,
    ApiError,
    AuthenticationError,
    BaseAdapter,
    DeliveryError,
    RateLimitError,
)
from commsdigest.adapters.resend import ResendAdapter

__all__ = [
    # Base
    "BaseAdapter",
    "AdapterError",
    "ApiError",
    "AuthenticationError",
    "DeliveryError",
    "RateLimitError",
    # Adapters
    "AttroveAdapter",
    "AttroveAdminAdapter",
    "ResendAdapter",
]
