import time

from django.conf import settings
from django.core.management.base import BaseCommand
from inventory.services import expire_old_reservations


class Command(BaseCommand):
    help = "Mark held stock reservations that have passed their expires_at timestamp as expired."

    def add_arguments(self, parser):
        parser.add_argument(
            "--interval",
            type=int,
            default=None,
            help="Keep sweeping every N seconds instead of running once; 0 uses STOCK_EXPIRY_SWEEP_INTERVAL_SECONDS.",
        )
        parser.add_argument(
            "--max-runs",
            type=int,
            default=None,
            help="Stop after this many sweeps when --interval is set.",
        )

    def handle(self, *args, **options):
        interval = options["interval"]
        if interval is None:
            count = expire_old_reservations()
            self.stdout.write(self.style.SUCCESS(f"Expired reservations: {count}"))
            return

        interval = interval or getattr(settings, "STOCK_EXPIRY_SWEEP_INTERVAL_SECONDS", 60)
        max_runs = options["max_runs"]
        runs = 0
        try:
            while max_runs is None or runs < max_runs:
                count = expire_old_reservations()
                runs += 1
                self.stdout.write(self.style.SUCCESS(f"Expired reservations: {count}"))
                if max_runs is not None and runs >= max_runs:
                    break
                time.sleep(interval)
        except KeyboardInterrupt:
            self.stdout.write("Sweeper stopped.")
