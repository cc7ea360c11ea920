import pytest

from gp_deadlock_system.core.exceptions import UnknownLockMode
from gp_deadlock_system.core.lock_modes import CONFLICT_TABLE, LockMode, conflicts_with


def names(modes):
    return {mode.value for mode in modes}


class TestConflictTable:

    def test_every_mode_has_an_entry(self):
        assert set(CONFLICT_TABLE) == set(LockMode)

    def test_access_share_only_conflicts_with_access_exclusive(self):
        assert names(conflicts_with('AccessShareLock')) == {'AccessExclusiveLock'}

    def test_row_share(self):
        assert names(conflicts_with('RowShareLock')) == {'ExclusiveLock', 'AccessExclusiveLock'}

    def test_row_exclusive(self):
        assert names(conflicts_with('RowExclusiveLock')) == {
            'ShareLock', 'ShareRowExclusiveLock', 'ExclusiveLock', 'AccessExclusiveLock',
        }

    def test_share_update_exclusive_is_self_conflicting(self):
        assert LockMode.SHARE_UPDATE_EXCLUSIVE in conflicts_with(LockMode.SHARE_UPDATE_EXCLUSIVE)

    def test_share_does_not_conflict_with_share(self):
        assert LockMode.SHARE not in conflicts_with(LockMode.SHARE)
        assert names(conflicts_with('ShareLock')) == {
            'RowExclusiveLock', 'ShareUpdateExclusiveLock', 'ShareRowExclusiveLock',
            'ExclusiveLock', 'AccessExclusiveLock',
        }

    def test_share_row_exclusive(self):
        assert names(conflicts_with('ShareRowExclusiveLock')) == {
            'ShareLock', 'RowExclusiveLock', 'ShareUpdateExclusiveLock',
            'ShareRowExclusiveLock', 'ExclusiveLock', 'AccessExclusiveLock',
        }

    def test_exclusive_allows_only_access_share(self):
        assert set(LockMode) - set(conflicts_with('ExclusiveLock')) == {LockMode.ACCESS_SHARE}

    def test_access_exclusive_conflicts_with_everything(self):
        assert set(conflicts_with('AccessExclusiveLock')) == set(LockMode)

    def test_table_cannot_be_modified(self):
        with pytest.raises(TypeError):
            CONFLICT_TABLE[LockMode.SHARE] = ()


class TestLockModeParsing:

    def test_parse_round_trips_pg_names(self):
        for mode in LockMode:
            assert LockMode.parse(mode.value) is mode
            assert str(mode) == mode.value

    def test_parse_accepts_members(self):
        assert LockMode.parse(LockMode.EXCLUSIVE) is LockMode.EXCLUSIVE

    @pytest.mark.parametrize('mode', ['SIReadLock', 'sharelock', ''])
    def test_unknown_mode_is_rejected(self, mode):
        with pytest.raises(UnknownLockMode) as excinfo:
            conflicts_with(mode)
        assert excinfo.value.mode == mode
