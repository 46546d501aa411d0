from django.core.management.base import BaseCommand

from equipment.management.reporting import write_report
from equipment.services.checks import send_maintenance_notifications


class Command(BaseCommand):
    help = "Email each technician the digest of their overdue and upcoming controls."

    def handle(self, *args, **opts):
        write_report(self, send_maintenance_notifications())
