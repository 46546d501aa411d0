from django.core.management.base import BaseCommand

from equipment.management.reporting import write_report
from equipment.models import MaintenanceControl
from equipment.services.checks import check_controls


class Command(BaseCommand):
    help = "Raise alerts for maintenance controls that are due or coming due."

    def add_arguments(self, parser):
        parser.add_argument("--three-minutes", action="store_true",
                            help="only check 3-minute test cycles")

    def handle(self, *args, **opts):
        types = [MaintenanceControl.TYPE_3_MINUTES] if opts["three_minutes"] else None
        write_report(self, check_controls(control_types=types))
