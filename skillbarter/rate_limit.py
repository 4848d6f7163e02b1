"""Shared slowapi limiter: a global default plus tighter per-route write limits."""
import os

from slowapi import Limiter
from slowapi.util import get_remote_address

from skillbarter.constants import GLOBAL_RATE_LIMIT

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[GLOBAL_RATE_LIMIT],
    enabled=os.getenv("RATE_LIMIT_ENABLED", "true").lower() != "false",
)
