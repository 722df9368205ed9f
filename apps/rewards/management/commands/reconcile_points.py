from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from apps.rewards.services import BalanceService


class Command(BaseCommand):
    help = 'Compare cached reward balances with the ledger and optionally repair drift'

    def add_arguments(self, parser):
        parser.add_argument(
            '--user-id',
            type=int,
            help='Reconcile a specific user ID only',
        )
        parser.add_argument(
            '--repair',
            action='store_true',
            help='Overwrite drifted cached balances with the ledger value',
        )

    def handle(self, *args, **options):
        User = get_user_model()
        users = User.objects.order_by('pk')
        if options.get('user_id'):
            users = users.filter(pk=options['user_id'])
            if not users.exists():
                self.stdout.write(self.style.ERROR(f"User with ID {options['user_id']} not found"))
                return

        checked = 0
        drifted = 0
        for user_id in users.values_list('pk', flat=True):
            result = BalanceService.reconcile(user_id, repair=options['repair'])
            checked += 1
            if not result['is_consistent']:
                drifted += 1
                action = 'repaired' if result['repaired'] else 'drift'
                self.stdout.write(self.style.WARNING(
                    f"User {user_id}: cached={result['cached_balance']} "
                    f"ledger={result['ledger_balance']} ({action})"
                ))

        style = self.style.SUCCESS if not drifted else self.style.WARNING
        self.stdout.write(style(f'Reconciled {checked} users, {drifted} inconsistent'))
