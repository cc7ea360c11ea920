"""
Lock modes and the lock conflict table.

The table mirrors the engine's lock compatibility matrix entry for entry. It is
not symmetric in general and must not be derived from any other rule.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple, Union

from .exceptions import UnknownLockMode


class LockMode(Enum):
    ACCESS_SHARE = "AccessShareLock"
    ROW_SHARE = "RowShareLock"
    ROW_EXCLUSIVE = "RowExclusiveLock"
    SHARE_UPDATE_EXCLUSIVE = "ShareUpdateExclusiveLock"
    SHARE = "ShareLock"
    SHARE_ROW_EXCLUSIVE = "ShareRowExclusiveLock"
    EXCLUSIVE = "ExclusiveLock"
    ACCESS_EXCLUSIVE = "AccessExclusiveLock"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: Union[str, "LockMode"]) -> "LockMode":
        """Map a pg_locks mode string to a LockMode, raising UnknownLockMode."""
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise UnknownLockMode(str(name)) from None


_M = LockMode

CONFLICT_TABLE: Mapping[LockMode, Tuple[LockMode, ...]] = MappingProxyType({
    _M.ACCESS_SHARE: (
        _M.ACCESS_EXCLUSIVE,
    ),
    _M.ROW_SHARE: (
        _M.EXCLUSIVE,
        _M.ACCESS_EXCLUSIVE,
    ),
    _M.ROW_EXCLUSIVE: (
        _M.SHARE,
        _M.SHARE_ROW_EXCLUSIVE,
        _M.EXCLUSIVE,
        _M.ACCESS_EXCLUSIVE,
    ),
    _M.SHARE_UPDATE_EXCLUSIVE: (
        _M.SHARE_UPDATE_EXCLUSIVE,
        _M.SHARE,
        _M.SHARE_ROW_EXCLUSIVE,
        _M.EXCLUSIVE,
        _M.ACCESS_EXCLUSIVE,
    ),
    _M.SHARE: (
        _M.ROW_EXCLUSIVE,
        _M.SHARE_UPDATE_EXCLUSIVE,
        _M.SHARE_ROW_EXCLUSIVE,
        _M.EXCLUSIVE,
        _M.ACCESS_EXCLUSIVE,
    ),
    _M.SHARE_ROW_EXCLUSIVE: (
        _M.SHARE,
        _M.ROW_EXCLUSIVE,
        _M.SHARE_UPDATE_EXCLUSIVE,
        _M.SHARE_ROW_EXCLUSIVE,
        _M.EXCLUSIVE,
        _M.ACCESS_EXCLUSIVE,
    ),
    _M.EXCLUSIVE: (
        _M.ROW_SHARE,
        _M.SHARE,
        _M.ROW_EXCLUSIVE,
        _M.SHARE_UPDATE_EXCLUSIVE,
        _M.SHARE_ROW_EXCLUSIVE,
        _M.EXCLUSIVE,
        _M.ACCESS_EXCLUSIVE,
    ),
    _M.ACCESS_EXCLUSIVE: (
        _M.ACCESS_SHARE,
        _M.ROW_SHARE,
        _M.SHARE,
        _M.ROW_EXCLUSIVE,
        _M.SHARE_UPDATE_EXCLUSIVE,
        _M.SHARE_ROW_EXCLUSIVE,
        _M.EXCLUSIVE,
        _M.ACCESS_EXCLUSIVE,
    ),
})

del _M


def conflicts_with(mode: Union[str, LockMode]) -> Tuple[LockMode, ...]:
    """
    Get the modes a request for ``mode`` conflicts with.

    Args:
        mode: LockMode or its pg_locks name

    Returns:
        Tuple of conflicting held modes, in table order

    Raises:
        UnknownLockMode: If the mode has no entry in the conflict table
    """
    lock_mode = LockMode.parse(mode)
    try:
        return CONFLICT_TABLE[lock_mode]
    except KeyError:
        raise UnknownLockMode(lock_mode.value) from None
