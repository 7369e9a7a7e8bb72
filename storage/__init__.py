"""Storage backends."""

from .abstract_storage import AbstractUserStore
from .handle import StoreHandle, get_user_store
from .otp_store import OtpStore
from .sql_user_store import SqlUserStore
from .ttl_store import TTLStore

__all__ = [
    "AbstractUserStore",
    "OtpStore",
    "SqlUserStore",
    "StoreHandle",
    "TTLStore",
    "get_user_store",
]
