"""
Balance aggregator: read-side statistics over the ledger.

Nothing here writes, except ``reconcile(repair=True)`` which rewrites a
drifted cached balance from the ledger history.
"""
import logging
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Count, IntegerField, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from ..conf import get_rewards_setting
from ..exceptions import NotFound
from ..models import RewardTransaction
from ..utils import user_pk
from .tier_engine import TierEngine

logger = logging.getLogger(__name__)


def _sum(**filters):
    return Coalesce(Sum('points', filter=Q(**filters)), 0, output_field=IntegerField())


class BalanceService:
    """Statistics, expiry reports and reconciliation"""

    @staticmethod
    def get_balance(user):
        """Cached balance from the user row"""
        User = get_user_model()
        balance = User.objects.filter(pk=user_pk(user)).values_list('reward_points', flat=True).first()
        if balance is None:
            raise NotFound("User not found")
        return balance

    @staticmethod
    def get_statistics(user):
        active = RewardTransaction.STATUS_ACTIVE
        totals = RewardTransaction.objects.filter(user_id=user_pk(user)).aggregate(
            total_earned=_sum(status=active, kind=RewardTransaction.KIND_EARN),
            total_redeemed=_sum(status=active, kind=RewardTransaction.KIND_REDEEM),
            total_transferred_in=_sum(
                status=active, kind=RewardTransaction.KIND_TRANSFER,
                direction=RewardTransaction.DIRECTION_IN,
            ),
            total_transferred_out=_sum(
                status=active, kind=RewardTransaction.KIND_TRANSFER,
                direction=RewardTransaction.DIRECTION_OUT,
            ),
            total_deducted=_sum(status=active, kind=RewardTransaction.KIND_DEDUCT),
            transaction_count=Count('id'),
        )
        return totals

    @staticmethod
    def get_expiring_soon(user, within_days=None):
        """
        Active credits expiring between now and ``within_days`` from now.

        Entries come back soonest first, ties by id.
        """
        if within_days is None:
            within_days = get_rewards_setting('EXPIRING_WINDOW_DAYS')
        now = timezone.now()
        entries = list(
            RewardTransaction.objects.filter(
                user_id=user_pk(user),
                status=RewardTransaction.STATUS_ACTIVE,
                direction=RewardTransaction.DIRECTION_IN,
                expiry_date__gte=now,
                expiry_date__lte=now + timedelta(days=within_days),
            ).order_by('expiry_date', 'id')
        )
        return {
            'total_expiring': sum(entry.points for entry in entries),
            'nearest_expiry': entries[0].expiry_date if entries else None,
            'within_days': within_days,
            'transactions': entries,
        }

    @staticmethod
    def get_ledger_balance(user):
        """Balance recomputed from every entry: credits minus debits"""
        totals = RewardTransaction.objects.filter(user_id=user_pk(user)).aggregate(
            credits=_sum(direction=RewardTransaction.DIRECTION_IN),
            debits=_sum(direction=RewardTransaction.DIRECTION_OUT),
        )
        return totals['credits'] - totals['debits']

    @staticmethod
    def reconcile(user, repair=False):
        """
        Compare the cached balance with the ledger.

        With ``repair=True`` a drifted cached balance is overwritten with
        the ledger value while the user row is locked.
        """
        User = get_user_model()
        user_id = user_pk(user)

        with transaction.atomic():
            if repair:
                list(User.objects.select_for_update().filter(pk=user_id))
            cached = BalanceService.get_balance(user_id)
            ledger = BalanceService.get_ledger_balance(user_id)
            difference = cached - ledger
            repaired = False

            if difference:
                logger.warning(
                    f"Balance drift user={user_id} cached={cached} ledger={ledger} difference={difference}"
                )
                if repair:
                    User.objects.filter(pk=user_id).update(reward_points=ledger)
                    repaired = True
                    logger.info(f"Balance repaired user={user_id} {cached} -> {ledger}")

        return {
            'user_id': user_id,
            'cached_balance': cached,
            'ledger_balance': ledger,
            'difference': difference,
            'is_consistent': difference == 0,
            'repaired': repaired,
        }

    @staticmethod
    def get_overview(user):
        """Balance, tier standing and statistics in one payload"""
        balance = BalanceService.get_balance(user)
        tier = TierEngine.tier_for(balance)
        upcoming = TierEngine.next_tier(balance)
        expiring = BalanceService.get_expiring_soon(user)

        next_tier = None
        if upcoming is not None:
            next_tier = upcoming.to_dict()
            next_tier['points_needed'] = TierEngine.points_to_next(balance)

        return {
            'points': balance,
            'tier': tier.to_dict(),
            'next_tier': next_tier,
            'progress': TierEngine.progress_to_next(balance),
            'statistics': BalanceService.get_statistics(user),
            'expiring_soon': {
                'total_expiring': expiring['total_expiring'],
                'nearest_expiry': expiring['nearest_expiry'],
                'within_days': expiring['within_days'],
            },
        }
