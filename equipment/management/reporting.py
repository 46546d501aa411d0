def write_report(command, report) -> None:
    """Print a check report the way the check commands share."""
    for item in report.created:
        command.stdout.write(f"  + [{item['priority']}] {item['message']}")
    for item in report.advanced:
        command.stdout.write(f"  > {item['kind']} #{item['id']} next due {item['nextDue']}")
    for item in report.emails:
        state = 'sent' if item['success'] else f"failed ({item['error']})"
        command.stdout.write(f"  @ {item['technician']} <{item['email']}>: {state}")
    for item in report.failures:
        command.stderr.write(f"  ! {item['kind']} #{item['id']}: {item['error']}")
    summary = (f"{report.name}: {report.checked} checked, {report.alerts_created} alerts created, "
               f"{report.duplicates} duplicates skipped")
    style = command.style.WARNING if report.failures else command.style.SUCCESS
    command.stdout.write(style(summary))
