"""
Rewards views module.
"""
from .balance_views import PointsOverviewView, TransactionListView, ExpiringPointsView
from .ledger_views import RedeemPointsView, TransferPointsView
from .admin_views import ReconcileView

__all__ = [
    'PointsOverviewView',
    'TransactionListView',
    'ExpiringPointsView',
    'RedeemPointsView',
    'TransferPointsView',
    'ReconcileView',
]
