"""
Distribution strategy selection.

Maps a service name onto the rule used to spread its subscribers over the
service's credential pool. Rules are checked in order against the lower-cased
service name by substring containment; the first match wins.
"""

from typing import NamedTuple, Optional, Tuple

from ..constants import DEFAULT_BUCKET_LIMIT, ServiceKeyword
from ..enums import StrategyType


class Strategy(NamedTuple):
    """A distribution strategy and its capacity parameter (bucket only)."""

    type: StrategyType
    limit: Optional[int] = None

    @classmethod
    def single(cls) -> "Strategy":
        return cls(StrategyType.SINGLE)

    @classmethod
    def round_robin(cls) -> "Strategy":
        return cls(StrategyType.ROUND_ROBIN)

    @classmethod
    def bucket(cls, limit: int) -> "Strategy":
        if limit < 1:
            raise ValueError("bucket limit must be at least 1")
        return cls(StrategyType.BUCKET, limit)

    def capacity(self, pool_size: int) -> Optional[int]:
        """Total subscribers the pool holds before overflow; None when unbounded."""
        if self.type != StrategyType.BUCKET:
            return None
        return pool_size * self.limit


STRATEGY_RULES: Tuple[Tuple[str, Strategy], ...] = (
    (ServiceKeyword.VIKI.value, Strategy.bucket(4)),
    (ServiceKeyword.KOCOWA.value, Strategy.bucket(5)),
    (ServiceKeyword.IQIYI.value, Strategy.round_robin()),
    (ServiceKeyword.WETV.value, Strategy.single()),
)

DEFAULT_STRATEGY = Strategy.bucket(DEFAULT_BUCKET_LIMIT)


def select_strategy(service_name: str) -> Strategy:
    """Return the strategy for a service; unmatched services get the default bucket."""
    name = service_name.lower()
    for keyword, strategy in STRATEGY_RULES:
        if keyword in name:
            return strategy
    return DEFAULT_STRATEGY
