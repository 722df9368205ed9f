from django.core.management.base import BaseCommand
from apps.rewards.services import LedgerService


class Command(BaseCommand):
    help = 'Reverse reward credits that are past their expiry date'

    def add_arguments(self, parser):
        parser.add_argument(
            '--user-id',
            type=int,
            help='Expire points for specific user ID only',
        )

    def handle(self, *args, **options):
        user_id = options.get('user_id')

        if user_id:
            from django.contrib.auth import get_user_model
            User = get_user_model()

            try:
                user = User.objects.get(id=user_id)
            except User.DoesNotExist:
                self.stdout.write(
                    self.style.ERROR(f'User with ID {user_id} not found')
                )
                return
            results = LedgerService.expire_points(user=user)
            scope = f'user {user.username}'
        else:
            self.stdout.write('Starting points expiration for all users...')
            results = LedgerService.expire_points()
            scope = 'all users'

        total_expired = sum(deducted for _, deducted in results)
        self.stdout.write(
            self.style.SUCCESS(
                f'Points expiration complete for {scope}. '
                f'{len(results)} credits expired, {total_expired} points deducted'
            )
        )
