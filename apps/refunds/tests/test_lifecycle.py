import pytest
from apps.finance.exceptions import IllegalTransitionError
from apps.refunds.lifecycle import (
    RefundAction,
    RefundStatus,
    available_actions,
    can_transition,
    ensure_can_transition,
)


class TestTransitions:
    """pending -> approved -> processing -> completed, with cancel and fail exits."""

    @pytest.mark.parametrize('current, target', [
        ('pending', 'approved'),
        ('pending', 'cancelled'),
        ('approved', 'processing'),
        ('approved', 'completed'),
        ('approved', 'failed'),
        ('approved', 'cancelled'),
        ('processing', 'completed'),
        ('processing', 'failed'),
    ])
    def test_allowed(self, current, target):
        assert can_transition(current, target)
        ensure_can_transition(current, target)

    @pytest.mark.parametrize('current, target', [
        ('pending', 'processing'),
        ('pending', 'completed'),
        ('approved', 'approved'),
        ('processing', 'cancelled'),
        ('processing', 'approved'),
    ])
    def test_out_of_order(self, current, target):
        assert not can_transition(current, target)
        with pytest.raises(IllegalTransitionError) as exc_info:
            ensure_can_transition(current, target)
        assert exc_info.value.field == 'status'
        assert 'cannot move' in str(exc_info.value)

    @pytest.mark.parametrize('terminal', ['completed', 'cancelled', 'failed'])
    def test_terminal_statuses_are_final(self, terminal):
        for target in RefundStatus.values:
            assert not can_transition(terminal, target)

        with pytest.raises(IllegalTransitionError) as exc_info:
            ensure_can_transition(terminal, RefundStatus.APPROVED)
        assert str(exc_info.value) == f'Refund is already {terminal}'


class TestAvailableActions:

    @pytest.mark.parametrize('status, expected', [
        (RefundStatus.PENDING, [RefundAction.APPROVE, RefundAction.CANCEL]),
        (RefundStatus.APPROVED, [RefundAction.PROCESS, RefundAction.CANCEL]),
        (RefundStatus.PROCESSING, [RefundAction.PROCESS]),
        (RefundStatus.COMPLETED, []),
        (RefundStatus.CANCELLED, []),
        (RefundStatus.FAILED, []),
    ])
    def test_actions(self, status, expected):
        assert available_actions(status) == expected

    def test_plain_strings_accepted(self):
        assert available_actions('pending') == ['approve', 'cancel']
