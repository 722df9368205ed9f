"""
Test configuration for the stay server.
"""
import os

import pytest


def pytest_configure():
    """Point Django at the test settings."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'stay_server.settings.test')
    os.environ.setdefault('ENVIRONMENT', 'test')


@pytest.fixture
def api_client():
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def customer():
    """A customer with an empty balance."""
    from tests.factories import UserFactory
    return UserFactory()


@pytest.fixture
def other_customer():
    from tests.factories import UserFactory
    return UserFactory()


@pytest.fixture
def funded_customer():
    """A customer holding 1000 earned points."""
    from tests.factories import create_user_with_points
    return create_user_with_points(1000)


@pytest.fixture
def staff_user():
    from tests.factories import StaffUserFactory
    return StaffUserFactory()


@pytest.fixture
def customer_client(api_client, customer):
    api_client.force_authenticate(user=customer)
    return api_client
