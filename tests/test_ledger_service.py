"""
Tests for ledger writes: earn, redeem, transfer, reverse and expiry
"""
from datetime import timedelta

import pytest
from django.contrib.auth import get_user_model
from django.test import TestCase
from django.utils import timezone

from apps.rewards.exceptions import (
    AlreadyReversed, InsufficientBalance, InvalidRecipient, InvalidReversal, NotFound
)
from apps.rewards.models import RewardTransaction
from apps.rewards.services import BalanceService, LedgerService, TierEngine
from apps.rewards.utils import user_pk
from tests.factories import BookingFactory, UserFactory, create_user_with_points

User = get_user_model()


def balance_of(user):
    return User.objects.get(pk=user.pk).reward_points


class LedgerScenarioTest(TestCase):
    """The reference scenarios for the ledger"""

    def setUp(self):
        self.user = UserFactory()

    def test_earn_updates_balance_and_tier(self):
        LedgerService.record_earn(self.user, 500, 'booking #1')

        balance = balance_of(self.user)
        self.assertEqual(balance, 500)
        self.assertEqual(self.user.reward_points, 500)
        self.assertEqual(TierEngine.tier_for(balance).name, 'silver')
        self.assertEqual(TierEngine.next_tier(balance).name, 'gold')
        self.assertEqual(TierEngine.progress_to_next(balance), 50.0)

    def test_overdraw_redeem_rejected(self):
        LedgerService.record_earn(self.user, 500, 'booking #1')

        with self.assertRaises(InsufficientBalance) as ctx:
            LedgerService.record_redeem(self.user, 600, 'x')

        self.assertEqual(ctx.exception.requested, 600)
        self.assertEqual(ctx.exception.available, 500)
        self.assertEqual(balance_of(self.user), 500)
        self.assertFalse(RewardTransaction.objects.filter(kind=RewardTransaction.KIND_REDEEM).exists())

    def test_transfer_creates_linked_pair(self):
        sender = create_user_with_points(1000)
        recipient = UserFactory()

        outgoing, incoming = LedgerService.record_transfer(sender, recipient, 300, 'gift')

        self.assertEqual(balance_of(sender), 700)
        self.assertEqual(balance_of(recipient), 300)
        self.assertEqual(outgoing.kind, RewardTransaction.KIND_TRANSFER)
        self.assertEqual(outgoing.direction, RewardTransaction.DIRECTION_OUT)
        self.assertEqual(outgoing.counterparty_id, recipient.pk)
        self.assertEqual(incoming.direction, RewardTransaction.DIRECTION_IN)
        self.assertEqual(incoming.user_id, recipient.pk)
        self.assertEqual(incoming.counterparty_id, sender.pk)
        self.assertEqual(outgoing.description, f"Transfer to {recipient.email}: gift")
        self.assertEqual(incoming.description, f"Received from {sender.email}: gift")
        self.assertIsNone(outgoing.expiry_date)
        self.assertGreater(incoming.expiry_date, timezone.now() + timedelta(days=364))

    def test_expiring_soon_report(self):
        expiry = timezone.now() + timedelta(days=10)
        LedgerService.record_earn(self.user, 200, 'booking #2', expiry_date=expiry)

        report = BalanceService.get_expiring_soon(self.user, 30)

        self.assertEqual(report['total_expiring'], 200)
        self.assertEqual(report['nearest_expiry'], expiry)

    def test_reverse_is_not_repeatable(self):
        LedgerService.record_earn(self.user, 400, 'earlier stay')
        earn = LedgerService.record_earn(self.user, 100, 'booking #3')

        deduct = LedgerService.reverse(earn.pk)

        self.assertEqual(balance_of(self.user), 400)
        earn.refresh_from_db()
        self.assertEqual(earn.status, RewardTransaction.STATUS_REVERSED)
        self.assertEqual(deduct.kind, RewardTransaction.KIND_DEDUCT)
        self.assertEqual(deduct.reversal_of_id, earn.pk)
        self.assertEqual(deduct.points, 100)

        with self.assertRaises(AlreadyReversed):
            LedgerService.reverse(earn.pk)
        self.assertEqual(balance_of(self.user), 400)


class LedgerValidationTest(TestCase):

    def setUp(self):
        self.user = create_user_with_points(500)

    def test_non_positive_points_rejected(self):
        for points in (0, -5):
            with self.assertRaises(ValueError):
                LedgerService.record_earn(self.user, points, 'bad')
            with self.assertRaises(ValueError):
                LedgerService.record_redeem(self.user, points, 'bad')
        with self.assertRaises(ValueError):
            LedgerService.record_earn(self.user, 10.5, 'fractional')
        self.assertEqual(balance_of(self.user), 500)

    def test_earn_for_missing_user(self):
        with self.assertRaises(NotFound):
            LedgerService.record_earn(987654, 10, 'ghost')

    def test_redeem_exact_balance(self):
        LedgerService.record_redeem(self.user, 500, 'everything')
        self.assertEqual(balance_of(self.user), 0)

    def test_transfer_to_self_rejected(self):
        with self.assertRaises(InvalidRecipient):
            LedgerService.record_transfer(self.user, self.user, 10, 'me')
        self.assertEqual(balance_of(self.user), 500)

    def test_transfer_to_missing_recipient(self):
        with self.assertRaises(InvalidRecipient):
            LedgerService.record_transfer(self.user, None, 10, 'nobody')
        with self.assertRaises(InvalidRecipient):
            LedgerService.record_transfer(self.user, 987654, 10, 'nobody')
        self.assertEqual(balance_of(self.user), 500)
        self.assertEqual(RewardTransaction.objects.filter(kind=RewardTransaction.KIND_TRANSFER).count(), 0)

    def test_transfer_overdraw_leaves_both_untouched(self):
        recipient = UserFactory()
        with self.assertRaises(InsufficientBalance):
            LedgerService.record_transfer(self.user, recipient, 501, 'too much')
        self.assertEqual(balance_of(self.user), 500)
        self.assertEqual(balance_of(recipient), 0)
        self.assertFalse(RewardTransaction.objects.filter(kind=RewardTransaction.KIND_TRANSFER).exists())

    def test_transfer_without_expiry(self):
        recipient = UserFactory()
        with self.settings(REWARDS_CONFIG={'TRANSFER_EXPIRY_DAYS': None}):
            _, incoming = LedgerService.record_transfer(self.user, recipient, 50, 'no expiry')
        self.assertIsNone(incoming.expiry_date)

    def test_long_transfer_descriptions_fit_column(self):
        recipient = UserFactory(email='r' * 100 + '@example.com')
        max_length = RewardTransaction._meta.get_field('description').max_length

        outgoing, incoming = LedgerService.record_transfer(self.user, recipient, 10, 'x' * 150)

        outgoing.refresh_from_db()
        incoming.refresh_from_db()
        self.assertLessEqual(len(outgoing.description), max_length)
        self.assertLessEqual(len(incoming.description), max_length)
        self.assertTrue(outgoing.description.startswith(f"Transfer to {recipient.email}: xxx"))
        self.assertTrue(outgoing.description.endswith('…'))
        self.assertEqual(balance_of(recipient), 10)

    def test_redeem_linked_to_booking(self):
        booking = BookingFactory(user=self.user)

        entry = LedgerService.record_redeem(
            self.user, 100, f"Redeemed 100 points for booking #{booking.pk}", related_booking=booking
        )

        entry.refresh_from_db()
        self.assertEqual(entry.related_booking_id, booking.pk)
        self.assertEqual(entry.description, f"Redeemed 100 points for booking #{booking.pk}")
        self.assertEqual(balance_of(self.user), 400)

    def test_user_or_bare_pk_accepted(self):
        LedgerService.record_redeem(self.user.pk, 100, 'by id')
        self.assertEqual(BalanceService.get_balance(self.user.pk), 400)
        self.assertEqual(user_pk(self.user), user_pk(self.user.pk))


class ReversalRulesTest(TestCase):

    def setUp(self):
        self.user = UserFactory()

    def test_debit_cannot_be_reversed(self):
        LedgerService.record_earn(self.user, 100, 'stay')
        redeem = LedgerService.record_redeem(self.user, 40, 'coffee')

        with self.assertRaises(InvalidReversal):
            LedgerService.reverse(redeem.pk)
        self.assertEqual(balance_of(self.user), 60)

    def test_missing_transaction(self):
        with self.assertRaises(NotFound):
            LedgerService.reverse(424242)

    def test_spent_points_block_reversal(self):
        earn = LedgerService.record_earn(self.user, 100, 'stay')
        LedgerService.record_redeem(self.user, 80, 'dinner')

        with self.assertRaises(InsufficientBalance):
            LedgerService.reverse(earn.pk)

        earn.refresh_from_db()
        self.assertEqual(earn.status, RewardTransaction.STATUS_ACTIVE)
        self.assertEqual(balance_of(self.user), 20)
        self.assertFalse(RewardTransaction.objects.filter(kind=RewardTransaction.KIND_DEDUCT).exists())

    def test_incoming_transfer_can_be_reversed(self):
        sender = create_user_with_points(300)
        _, incoming = LedgerService.record_transfer(sender, self.user, 100, 'gift')

        LedgerService.reverse(incoming.pk, description='Chargeback')

        self.assertEqual(balance_of(self.user), 0)
        self.assertEqual(
            RewardTransaction.objects.get(reversal_of=incoming).description, 'Chargeback'
        )


class ListForUserTest(TestCase):

    def setUp(self):
        self.user = create_user_with_points(300)
        LedgerService.record_redeem(self.user, 50, 'snacks')
        LedgerService.record_earn(self.user, 20, 'review')

    def test_newest_first(self):
        entries = list(LedgerService.list_for_user(self.user))
        self.assertEqual([entry.points for entry in entries], [20, 50, 300])

    def test_kind_filter(self):
        redeems = LedgerService.list_for_user(self.user, kind=RewardTransaction.KIND_REDEEM)
        self.assertEqual(redeems.count(), 1)
        self.assertEqual(redeems.first().description, 'snacks')

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            LedgerService.list_for_user(self.user, kind='bonus')

    def test_other_users_are_excluded(self):
        create_user_with_points(999)
        self.assertEqual(LedgerService.list_for_user(self.user).count(), 3)


class ExpirePointsTest(TestCase):

    def setUp(self):
        self.user = UserFactory()
        self.past = timezone.now() - timedelta(days=1)

    def test_expired_credit_is_reversed(self):
        earn = LedgerService.record_earn(self.user, 150, 'old stay', expiry_date=self.past)
        LedgerService.record_earn(self.user, 50, 'no expiry')

        results = LedgerService.expire_points()

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0][1], 150)
        earn.refresh_from_db()
        self.assertEqual(earn.status, RewardTransaction.STATUS_REVERSED)
        self.assertEqual(balance_of(self.user), 50)
        self.assertTrue(BalanceService.reconcile(self.user)['is_consistent'])

    def test_partially_spent_credit_deducts_remaining(self):
        LedgerService.record_earn(self.user, 100, 'old stay', expiry_date=self.past)
        LedgerService.record_redeem(self.user, 60, 'spa')

        results = LedgerService.expire_points()

        self.assertEqual(results[0][1], 40)
        self.assertEqual(balance_of(self.user), 0)
        self.assertTrue(BalanceService.reconcile(self.user)['is_consistent'])

    def test_fully_spent_credit_creates_no_deduct(self):
        earn = LedgerService.record_earn(self.user, 100, 'old stay', expiry_date=self.past)
        LedgerService.record_redeem(self.user, 100, 'spa')

        results = LedgerService.expire_points()

        self.assertEqual(results, [(earn, 0)])
        self.assertFalse(RewardTransaction.objects.filter(kind=RewardTransaction.KIND_DEDUCT).exists())

    def test_future_expiry_untouched(self):
        LedgerService.record_earn(self.user, 100, 'recent', expiry_date=timezone.now() + timedelta(days=5))
        self.assertEqual(LedgerService.expire_points(), [])
        self.assertEqual(balance_of(self.user), 100)

    def test_user_scope(self):
        other = UserFactory()
        LedgerService.record_earn(self.user, 10, 'mine', expiry_date=self.past)
        LedgerService.record_earn(other, 20, 'theirs', expiry_date=self.past)

        LedgerService.expire_points(user=self.user)

        self.assertEqual(balance_of(self.user), 0)
        self.assertEqual(balance_of(other), 20)

    def test_second_sweep_is_a_no_op(self):
        LedgerService.record_earn(self.user, 10, 'old', expiry_date=self.past)
        LedgerService.expire_points()
        self.assertEqual(LedgerService.expire_points(), [])


class LedgerAuditLogTest(TestCase):

    def test_writes_are_logged(self):
        user = UserFactory()
        with self.assertLogs('apps.rewards', level='INFO') as logs:
            LedgerService.record_earn(user, 25, 'audit me')
        self.assertTrue(any('points=+25' in line for line in logs.output))

    def test_rejections_are_logged_as_warnings(self):
        user = UserFactory()
        with self.assertLogs('apps.rewards', level='WARNING') as logs:
            with pytest.raises(InsufficientBalance):
                LedgerService.record_redeem(user, 5, 'nothing to spend')
        self.assertIn('Redeem rejected', logs.output[0])
