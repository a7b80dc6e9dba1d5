"""Handlers for 'apptboard lifecycle' commands."""

from apptboard.cli._common import config_or_die, error, output_json
from apptboard.lifecycle import Status, allowed_targets, next_status, transition_table


def lifecycle_targets(args) -> int:
    """List the statuses reachable from STATUS and the guards on each."""
    config = config_or_die(args.config, args.json)
    try:
        status = Status(args.status)
    except ValueError:
        error(f"unknown status {args.status!r}; expected one of {', '.join(s.value for s in Status)}", args.json)

    table = transition_table(config.policy)
    targets = [
        {"status": target.value, "guards": [name for name, _ in table[(status, target)]]}
        for target in allowed_targets(status, config.policy)
    ]
    upcoming = next_status(status, config.policy)

    if args.json:
        output_json(
            {
                "status": status.value,
                "terminal": status.terminal,
                "next": upcoming.value if upcoming else None,
                "targets": targets,
            }
        )
        return 0

    if not targets:
        print(f"{status.label} is terminal")
        return 0
    for t in targets:
        marker = "*" if upcoming and t["status"] == upcoming.value else " "
        guards = ", ".join(t["guards"]) or "no guard"
        print(f"{marker} {t['status']:<12} {guards}")
    return 0
