"""
Ledger store: the only writer of reward transactions and of the cached
``User.reward_points`` balance.

Every write runs in a single database transaction. User rows are locked in
ascending primary key order, and debits go through a conditional UPDATE so
the balance can never drop below zero even if two requests race.
"""
import logging
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ..conf import get_rewards_setting
from ..exceptions import (
    AlreadyReversed,
    InsufficientBalance,
    InvalidRecipient,
    InvalidReversal,
    NotFound,
)
from ..models import RewardTransaction
from ..utils import ledger_description, user_pk

logger = logging.getLogger(__name__)


class LedgerService:
    """Append-only ledger operations"""

    @staticmethod
    def _validate_points(points):
        if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
            raise ValueError("Points must be a positive integer")

    @staticmethod
    def _lock_users(*user_ids):
        """Lock the given user rows in ascending pk order and return them by pk"""
        User = get_user_model()
        locked = User.objects.select_for_update().filter(pk__in=sorted(set(user_ids))).order_by('pk')
        return {user.pk: user for user in locked}

    @staticmethod
    def _credit(user_id, points):
        User = get_user_model()
        User.objects.filter(pk=user_id).update(reward_points=F('reward_points') + points)

    @staticmethod
    def _debit(user_id, points):
        User = get_user_model()
        updated = User.objects.filter(pk=user_id, reward_points__gte=points).update(
            reward_points=F('reward_points') - points
        )
        if not updated:
            available = User.objects.filter(pk=user_id).values_list('reward_points', flat=True).first()
            raise InsufficientBalance(requested=points, available=available or 0)

    @staticmethod
    def _sync(*users):
        # Keep caller-held instances in step with the row
        for user in users:
            if hasattr(user, 'refresh_from_db'):
                user.refresh_from_db(fields=['reward_points'])

    @staticmethod
    def record_earn(user, points, description, related_booking=None,
                    related_reservation=None, expiry_date=None):
        """Credit ``points`` to the user and return the new earn entry"""
        LedgerService._validate_points(points)
        user_id = user_pk(user)

        with transaction.atomic():
            if user_id not in LedgerService._lock_users(user_id):
                raise NotFound("User not found")
            entry = RewardTransaction.objects.create(
                user_id=user_id,
                points=points,
                kind=RewardTransaction.KIND_EARN,
                direction=RewardTransaction.DIRECTION_IN,
                description=ledger_description(description),
                related_booking=related_booking,
                related_reservation=related_reservation,
                expiry_date=expiry_date,
            )
            LedgerService._credit(user_id, points)

        logger.info(f"Earn tx={entry.pk} user={user_id} points=+{points} description={description!r}")
        LedgerService._sync(user)
        return entry

    @staticmethod
    def record_redeem(user, points, description, related_booking=None):
        """
        Debit ``points`` from the user; raises InsufficientBalance on overdraw.

        ``related_booking`` links the redemption to the booking it discounted.
        """
        LedgerService._validate_points(points)
        user_id = user_pk(user)

        try:
            with transaction.atomic():
                if user_id not in LedgerService._lock_users(user_id):
                    raise NotFound("User not found")
                LedgerService._debit(user_id, points)
                entry = RewardTransaction.objects.create(
                    user_id=user_id,
                    points=points,
                    kind=RewardTransaction.KIND_REDEEM,
                    direction=RewardTransaction.DIRECTION_OUT,
                    description=ledger_description(description),
                    related_booking=related_booking,
                )
        except InsufficientBalance as e:
            logger.warning(f"Redeem rejected user={user_id}: {e}")
            raise

        logger.info(f"Redeem tx={entry.pk} user={user_id} points=-{points} description={description!r}")
        LedgerService._sync(user)
        return entry

    @staticmethod
    def record_transfer(sender, recipient, points, description):
        """
        Move ``points`` from sender to recipient.

        Creates the sender's outgoing entry and the recipient's incoming
        entry together; the incoming side expires after TRANSFER_EXPIRY_DAYS.
        Returns ``(outgoing, incoming)``.
        """
        LedgerService._validate_points(points)
        if recipient is None:
            raise InvalidRecipient("Recipient not found")

        sender_id = user_pk(sender)
        recipient_id = user_pk(recipient)
        if sender_id == recipient_id:
            raise InvalidRecipient("Cannot transfer points to yourself")

        expiry_days = get_rewards_setting('TRANSFER_EXPIRY_DAYS')
        expiry_date = timezone.now() + timedelta(days=expiry_days) if expiry_days else None

        try:
            with transaction.atomic():
                locked = LedgerService._lock_users(sender_id, recipient_id)
                if sender_id not in locked:
                    raise NotFound("User not found")
                if recipient_id not in locked:
                    raise InvalidRecipient("Recipient not found")
                sender_user = locked[sender_id]
                recipient_user = locked[recipient_id]

                LedgerService._debit(sender_id, points)
                LedgerService._credit(recipient_id, points)

                outgoing = RewardTransaction.objects.create(
                    user_id=sender_id,
                    points=points,
                    kind=RewardTransaction.KIND_TRANSFER,
                    direction=RewardTransaction.DIRECTION_OUT,
                    description=ledger_description(f"Transfer to {recipient_user.email}: {description}"),
                    counterparty_id=recipient_id,
                )
                incoming = RewardTransaction.objects.create(
                    user_id=recipient_id,
                    points=points,
                    kind=RewardTransaction.KIND_TRANSFER,
                    direction=RewardTransaction.DIRECTION_IN,
                    description=ledger_description(f"Received from {sender_user.email}: {description}"),
                    counterparty_id=sender_id,
                    expiry_date=expiry_date,
                )
        except (InsufficientBalance, InvalidRecipient) as e:
            logger.warning(f"Transfer rejected sender={sender_id} recipient={recipient_id}: {e}")
            raise

        logger.info(
            f"Transfer tx={outgoing.pk}/{incoming.pk} sender={sender_id} "
            f"recipient={recipient_id} points={points}"
        )
        LedgerService._sync(sender, recipient)
        return outgoing, incoming

    @staticmethod
    def reverse(transaction_id, description=None):
        """
        Void an active credit by recording an offsetting deduct.

        The original entry is marked reversed and kept for the audit trail.
        A second call raises AlreadyReversed; debits raise InvalidReversal.
        If the points have already been spent the reversal is refused with
        InsufficientBalance and nothing changes.
        """
        try:
            with transaction.atomic():
                try:
                    entry = RewardTransaction.objects.select_for_update().get(pk=transaction_id)
                except RewardTransaction.DoesNotExist:
                    raise NotFound(f"Transaction {transaction_id} not found")

                if entry.status != RewardTransaction.STATUS_ACTIVE:
                    raise AlreadyReversed(f"Transaction {transaction_id} has already been reversed")
                if entry.direction != RewardTransaction.DIRECTION_IN:
                    raise InvalidReversal(f"Transaction {transaction_id} is not a credit")

                LedgerService._lock_users(entry.user_id)
                LedgerService._debit(entry.user_id, entry.points)

                entry.status = RewardTransaction.STATUS_REVERSED
                entry.save(update_fields=['status'])
                deduct = RewardTransaction.objects.create(
                    user_id=entry.user_id,
                    points=entry.points,
                    kind=RewardTransaction.KIND_DEDUCT,
                    direction=RewardTransaction.DIRECTION_OUT,
                    description=ledger_description(description or f"Reversal: {entry.description}"),
                    related_booking_id=entry.related_booking_id,
                    related_reservation_id=entry.related_reservation_id,
                    reversal_of=entry,
                )
        except (AlreadyReversed, InvalidReversal, InsufficientBalance) as e:
            logger.warning(f"Reversal rejected tx={transaction_id}: {e}")
            raise

        logger.info(
            f"Reverse tx={entry.pk} deduct={deduct.pk} user={entry.user_id} points=-{entry.points}"
        )
        return deduct

    @staticmethod
    def list_for_user(user, kind=None):
        """All of a user's entries, newest first, optionally filtered by kind"""
        queryset = RewardTransaction.objects.filter(user_id=user_pk(user)).select_related('counterparty')
        if kind:
            valid_kinds = dict(RewardTransaction.KIND_CHOICES)
            if kind not in valid_kinds:
                raise ValueError(f"Unknown transaction type: {kind}")
            queryset = queryset.filter(kind=kind)
        return queryset.order_by('-created_at', '-id')

    @staticmethod
    def expire_points(now=None, user=None):
        """
        Reverse active credits whose expiry date has passed.

        Each expired credit is marked reversed and offset by a deduct of
        ``min(points, balance)``, so the balance never goes negative when
        some of the points were already spent. Returns a list of
        ``(credit, deducted_points)`` pairs.
        """
        now = now or timezone.now()
        candidates = RewardTransaction.objects.filter(
            status=RewardTransaction.STATUS_ACTIVE,
            direction=RewardTransaction.DIRECTION_IN,
            expiry_date__isnull=False,
            expiry_date__lt=now,
        )
        if user is not None:
            candidates = candidates.filter(user_id=user_pk(user))

        results = []
        for entry_id in list(candidates.order_by('expiry_date', 'id').values_list('pk', flat=True)):
            result = LedgerService._expire_entry(entry_id)
            if result is not None:
                results.append(result)
        return results

    @staticmethod
    def _expire_entry(entry_id):
        with transaction.atomic():
            entry = RewardTransaction.objects.select_for_update().get(pk=entry_id)
            # Reversed concurrently since the candidate query ran
            if entry.status != RewardTransaction.STATUS_ACTIVE:
                return None

            locked = LedgerService._lock_users(entry.user_id)
            balance = locked[entry.user_id].reward_points
            deducted = min(entry.points, balance)

            entry.status = RewardTransaction.STATUS_REVERSED
            entry.save(update_fields=['status'])
            if deducted > 0:
                LedgerService._debit(entry.user_id, deducted)
                RewardTransaction.objects.create(
                    user_id=entry.user_id,
                    points=deducted,
                    kind=RewardTransaction.KIND_DEDUCT,
                    direction=RewardTransaction.DIRECTION_OUT,
                    description=ledger_description(f"Expired: {entry.description}"),
                    reversal_of=entry,
                )

        logger.info(
            f"Expire tx={entry.pk} user={entry.user_id} points=-{deducted} of {entry.points}"
        )
        return entry, deducted
