"""
Tests for the expire_points and reconcile_points commands
"""
from datetime import timedelta
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

from apps.rewards.services import BalanceService, LedgerService
from tests.factories import UserFactory, create_user_with_points

User = get_user_model()


class ExpirePointsCommandTest(TestCase):

    def test_expires_all_users(self):
        user = UserFactory()
        LedgerService.record_earn(user, 30, 'old', expiry_date=timezone.now() - timedelta(days=2))
        out = StringIO()

        call_command('expire_points', stdout=out)

        self.assertIn('1 credits expired, 30 points deducted', out.getvalue())
        self.assertEqual(BalanceService.get_balance(user), 0)

    def test_single_user(self):
        user = UserFactory()
        other = UserFactory()
        past = timezone.now() - timedelta(days=2)
        LedgerService.record_earn(user, 30, 'old', expiry_date=past)
        LedgerService.record_earn(other, 40, 'old', expiry_date=past)
        out = StringIO()

        call_command('expire_points', user_id=user.pk, stdout=out)

        self.assertIn(f'user {user.username}', out.getvalue())
        self.assertEqual(BalanceService.get_balance(other), 40)

    def test_unknown_user(self):
        out = StringIO()
        call_command('expire_points', user_id=99999, stdout=out)
        self.assertIn('not found', out.getvalue())


class ReconcilePointsCommandTest(TestCase):

    def setUp(self):
        self.user = create_user_with_points(250)
        User.objects.filter(pk=self.user.pk).update(reward_points=10)

    def test_reports_drift(self):
        out = StringIO()
        call_command('reconcile_points', stdout=out)
        self.assertIn('1 inconsistent', out.getvalue())
        self.assertEqual(BalanceService.get_balance(self.user), 10)

    def test_repair(self):
        out = StringIO()
        call_command('reconcile_points', '--repair', user_id=self.user.pk, stdout=out)
        self.assertIn('repaired', out.getvalue())
        self.assertEqual(BalanceService.get_balance(self.user), 250)
