from django.core.management.base import BaseCommand

from equipment.management.reporting import write_report
from equipment.services.checks import check_intervention_reminders


class Command(BaseCommand):
    help = "Remind technicians of interventions whose follow-up control is due."

    def handle(self, *args, **opts):
        write_report(self, check_intervention_reminders())
