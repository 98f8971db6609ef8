import random

from django.core.management.base import BaseCommand, CommandError

from apps.customers.seed import SeedError, seed_sample_customers


class Command(BaseCommand):
    help = 'Insert synthetic customers into the "default" branch'

    def add_arguments(self, parser):
        parser.add_argument('--random-seed', type=int, default=None, help='Seed for reproducible data')

    def handle(self, *args, **options):
        rng = random.Random(options['random_seed'])
        try:
            count, summary = seed_sample_customers(rng=rng)
        except SeedError as e:
            raise CommandError(str(e))

        for label, value in summary.items():
            self.stdout.write(f"  {label}: {value}")
        self.stdout.write(self.style.SUCCESS(f"Created {count} sample customers"))
