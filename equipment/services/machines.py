from __future__ import annotations

import logging

from django.db import transaction

from equipment.models import Machine

logger = logging.getLogger(__name__)

_RELATED = (
    ('faults', 'fault(s)'),
    ('alerts', 'alert(s)'),
    ('maintenance_schedules', 'maintenance schedule(s)'),
    ('maintenance_controls', 'maintenance control(s)'),
)


class MachineInUse(Exception):
    def __init__(self, machine: Machine, counts: dict):
        self.machine = machine
        self.counts = counts
        items = ', '.join(f"{counts[attr]} {label}" for attr, label in _RELATED if counts[attr])
        super().__init__(
            f'Cannot delete machine "{machine.name}" because it has related data: {items}. '
            f'Please remove or reassign these items first.'
        )


def related_counts(machine: Machine) -> dict:
    return {attr: getattr(machine, attr).count() for attr, _ in _RELATED}


def delete_machine(machine: Machine, *, force: bool = False) -> dict:
    """Delete a machine, refusing when dependent rows exist unless ``force``.

    With ``force`` the alerts, controls, schedules and faults go with it
    in one transaction.  Returns the per-kind counts removed.
    """
    counts = related_counts(machine)
    if any(counts.values()) and not force:
        raise MachineInUse(machine, counts)
    with transaction.atomic():
        for attr, _ in _RELATED:
            getattr(machine, attr).all().delete()
        machine.delete()
    logger.info("machine %s deleted (force=%s, related=%s)", machine.name, force, counts)
    return counts
