"""
Rewards services module.

Ledger writes, balance reads and tier lookups are all exported here.
"""
from .tier_engine import Tier, TierEngine
from .ledger_service import LedgerService
from .balance_service import BalanceService
from .integration_service import RewardsIntegrationService

__all__ = [
    'Tier',
    'TierEngine',
    'LedgerService',
    'BalanceService',
    'RewardsIntegrationService',
]
