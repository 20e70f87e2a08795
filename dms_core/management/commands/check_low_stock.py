from django.core.management.base import BaseCommand

from dms_core.stock_scanner import check_low_stock


class Command(BaseCommand):
    help = "Open low-stock alerts for spares at or below minimum stock"

    def add_arguments(self, parser):
        parser.add_argument(
            "--multiplier",
            type=int,
            default=None,
            help="Reorder multiplier (defaults to DMS_REORDER_MULTIPLIER)",
        )

    def handle(self, *args, **options):
        result = check_low_stock(multiplier=options["multiplier"])
        self.stdout.write(
            self.style.SUCCESS(
                f"{result['low']} low, {result['opened']} opened, {result['resolved']} resolved"
            )
        )
