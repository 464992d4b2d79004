"""Shared counter store adapters."""

from analytics_api.adapters.store.redis_store import (
    CounterStore,
    close_counter_store,
    get_counter_store,
)

__all__ = ["CounterStore", "close_counter_store", "get_counter_store"]
