from django.core.management.base import BaseCommand

from equipment.management.reporting import write_report
from equipment.services.checks import check_schedules


class Command(BaseCommand):
    help = "Raise alerts for pending maintenance schedules."

    def add_arguments(self, parser):
        parser.add_argument("--type", action="append", dest="types", metavar="TYPE",
                            help="restrict to a schedule type, e.g. 3-month (repeatable)")

    def handle(self, *args, **opts):
        write_report(self, check_schedules(schedule_types=opts["types"]))
