"""
API tests for /api/rewards/
"""
from datetime import timedelta
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from django.utils import timezone
from rest_framework import status

from apps.rewards.models import RewardTransaction
from apps.rewards.services import BalanceService, LedgerService
from tests.factories import BookingFactory, PropertyAdminFactory, UserFactory, create_user_with_points

pytestmark = pytest.mark.django_db

POINTS_URL = '/api/rewards/points/'
TRANSACTIONS_URL = '/api/rewards/transactions/'
EXPIRING_URL = '/api/rewards/expiring/'
REDEEM_URL = '/api/rewards/redeem/'
TRANSFER_URL = '/api/rewards/transfer/'
RECONCILE_URL = '/api/rewards/reconcile/'


class TestAccessControl:

    def test_anonymous_rejected(self, api_client):
        response = api_client.get(POINTS_URL)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 401
        assert response.data['msg'] == 'Authentication required'

    def test_non_customer_rejected(self, api_client):
        api_client.force_authenticate(user=PropertyAdminFactory())
        response = api_client.get(POINTS_URL)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_reconcile_requires_staff(self, customer_client):
        response = customer_client.get(RECONCILE_URL)
        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestPointsOverview:

    def test_empty_balance(self, customer_client):
        response = customer_client.get(POINTS_URL)

        assert response.status_code == status.HTTP_200_OK
        data = response.data['data']
        assert data['points'] == 0
        assert data['tier']['name'] == 'silver'
        assert data['next_tier']['points_needed'] == 1000
        assert data['progress'] == 0.0
        assert data['statistics']['transaction_count'] == 0

    def test_funded_balance(self, api_client, funded_customer):
        api_client.force_authenticate(user=funded_customer)
        response = api_client.get(POINTS_URL)

        data = response.data['data']
        assert data['points'] == 1000
        assert data['tier']['name'] == 'gold'
        assert data['tier']['discount_percent'] == 10
        assert data['statistics']['total_earned'] == 1000


class TestTransactionList:

    def test_pagination_and_filter(self, api_client, funded_customer):
        for i in range(3):
            LedgerService.record_redeem(funded_customer, 10, f'treat {i}')
        api_client.force_authenticate(user=funded_customer)

        response = api_client.get(TRANSACTIONS_URL, {'page_size': 2})
        data = response.data['data']
        assert response.status_code == status.HTTP_200_OK
        assert len(data['transactions']) == 2
        assert data['transactions'][0]['description'] == 'treat 2'
        assert data['transactions'][0]['signed_points'] == -10
        assert data['pagination'] == {'page': 1, 'page_size': 2, 'total': 4, 'has_next': True}

        response = api_client.get(TRANSACTIONS_URL, {'type': 'earn'})
        transactions = response.data['data']['transactions']
        assert [tx['kind'] for tx in transactions] == ['earn']

    def test_invalid_type(self, customer_client):
        response = customer_client.get(TRANSACTIONS_URL, {'type': 'bonus'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'type' in response.data['errors']

    def test_transfer_shows_counterparty(self, api_client, funded_customer, other_customer):
        LedgerService.record_transfer(funded_customer, other_customer, 100, 'split bill')
        api_client.force_authenticate(user=other_customer)

        transaction = api_client.get(TRANSACTIONS_URL).data['data']['transactions'][0]
        assert transaction['kind'] == 'transfer'
        assert transaction['direction'] == 'in'
        assert transaction['counterparty_email'] == funded_customer.email


class TestExpiring:

    def test_expiring_report(self, api_client, customer):
        LedgerService.record_earn(customer, 75, 'promo', expiry_date=timezone.now() + timedelta(days=5))
        api_client.force_authenticate(user=customer)

        response = api_client.get(EXPIRING_URL, {'days': 7})
        data = response.data['data']
        assert response.status_code == status.HTTP_200_OK
        assert data['total_expiring'] == 75
        assert data['within_days'] == 7
        assert data['transactions'][0]['points'] == 75

    @pytest.mark.parametrize('days', ['abc', '0', '1000'])
    def test_invalid_days(self, customer_client, days):
        response = customer_client.get(EXPIRING_URL, {'days': days})
        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestRedeem:

    def test_redeem_success(self, api_client, funded_customer):
        api_client.force_authenticate(user=funded_customer)
        response = api_client.post(REDEEM_URL, {'points': 400, 'description': 'Room upgrade'}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['data']['points'] == 600
        assert response.data['data']['transaction']['kind'] == 'redeem'
        assert BalanceService.get_balance(funded_customer) == 600

    def test_redeem_insufficient(self, api_client, funded_customer):
        api_client.force_authenticate(user=funded_customer)
        response = api_client.post(REDEEM_URL, {'points': 1001}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['errors'] == {'error': 'insufficient_balance'}
        assert BalanceService.get_balance(funded_customer) == 1000

    @pytest.mark.parametrize('payload', [{}, {'points': 0}, {'points': -5}, {'points': 'many'}])
    def test_redeem_invalid_payload(self, customer_client, payload):
        response = customer_client.post(REDEEM_URL, payload, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'points' in response.data['errors']

    def test_default_description(self, api_client, funded_customer):
        api_client.force_authenticate(user=funded_customer)
        api_client.post(REDEEM_URL, {'points': 1}, format='json')
        entry = RewardTransaction.objects.get(kind=RewardTransaction.KIND_REDEEM)
        assert entry.description == 'Points redemption'

    def test_storage_failure_is_503(self, api_client, funded_customer):
        api_client.force_authenticate(user=funded_customer)
        with patch(
            'apps.rewards.views.ledger_views.LedgerService.record_redeem',
            side_effect=DatabaseError('connection lost'),
        ):
            response = api_client.post(REDEEM_URL, {'points': 10}, format='json')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.data['errors'] == {'error': 'service_unavailable'}

    def test_redeem_for_booking(self, api_client, funded_customer):
        booking = BookingFactory(user=funded_customer)
        api_client.force_authenticate(user=funded_customer)
        response = api_client.post(REDEEM_URL, {'points': 150, 'booking_id': booking.pk}, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['data']['transaction']['related_booking'] == booking.pk
        entry = RewardTransaction.objects.get(kind=RewardTransaction.KIND_REDEEM)
        assert entry.related_booking_id == booking.pk
        assert entry.description == f"Redeemed 150 points for booking #{booking.pk}"

    def test_redeem_for_someone_elses_booking(self, api_client, funded_customer):
        booking = BookingFactory()
        api_client.force_authenticate(user=funded_customer)
        response = api_client.post(REDEEM_URL, {'points': 150, 'booking_id': booking.pk}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['errors'] == {'error': 'not_found'}
        assert BalanceService.get_balance(funded_customer) == 1000
        assert not RewardTransaction.objects.filter(kind=RewardTransaction.KIND_REDEEM).exists()


class TestTransfer:

    def test_transfer_success(self, api_client, funded_customer, other_customer):
        api_client.force_authenticate(user=funded_customer)
        response = api_client.post(TRANSFER_URL, {
            'points': 250,
            'recipient_email': other_customer.email.upper(),
            'description': 'birthday',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['data']['points'] == 750
        assert response.data['data']['recipient_email'] == other_customer.email
        assert BalanceService.get_balance(other_customer) == 250

    def test_unknown_recipient(self, api_client, funded_customer):
        api_client.force_authenticate(user=funded_customer)
        response = api_client.post(TRANSFER_URL, {
            'points': 10, 'recipient_email': 'nobody@example.com'
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['errors'] == {'error': 'invalid_recipient'}

    def test_inactive_recipient(self, api_client, funded_customer):
        inactive = UserFactory(is_active=False)
        api_client.force_authenticate(user=funded_customer)
        response = api_client.post(TRANSFER_URL, {
            'points': 10, 'recipient_email': inactive.email
        }, format='json')
        assert response.data['errors'] == {'error': 'invalid_recipient'}

    def test_self_transfer(self, api_client, funded_customer):
        api_client.force_authenticate(user=funded_customer)
        response = api_client.post(TRANSFER_URL, {
            'points': 10, 'recipient_email': funded_customer.email
        }, format='json')
        assert response.data['errors'] == {'error': 'invalid_recipient'}

    def test_transfer_insufficient(self, api_client, customer, other_customer):
        api_client.force_authenticate(user=customer)
        response = api_client.post(TRANSFER_URL, {
            'points': 10, 'recipient_email': other_customer.email
        }, format='json')
        assert response.data['errors'] == {'error': 'insufficient_balance'}
        assert BalanceService.get_balance(other_customer) == 0

    def test_invalid_email(self, customer_client):
        response = customer_client.post(TRANSFER_URL, {'points': 10, 'recipient_email': 'not-an-email'}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'recipient_email' in response.data['errors']

    def test_long_recipient_email_and_description(self, api_client, funded_customer):
        recipient = UserFactory(email='r' * 100 + '@example.com')
        api_client.force_authenticate(user=funded_customer)
        response = api_client.post(TRANSFER_URL, {
            'points': 25, 'recipient_email': recipient.email, 'description': 'x' * 150,
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        for entry in RewardTransaction.objects.filter(kind=RewardTransaction.KIND_TRANSFER):
            assert len(entry.description) <= 255
        assert BalanceService.get_balance(recipient) == 25


class TestReconcileEndpoint:

    def test_staff_reconcile(self, api_client, staff_user):
        user = create_user_with_points(300)
        api_client.force_authenticate(user=staff_user)

        response = api_client.get(RECONCILE_URL, {'user_id': user.pk})
        data = response.data['data']
        assert response.status_code == status.HTTP_200_OK
        assert data['cached_balance'] == 300
        assert data['is_consistent'] is True

    def test_unknown_user(self, api_client, staff_user):
        api_client.force_authenticate(user=staff_user)
        response = api_client.get(RECONCILE_URL, {'user_id': 999999})
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['errors'] == {'error': 'not_found'}
