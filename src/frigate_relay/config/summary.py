"""
Configuration Summary - human-readable view of routing and schedules.

Printed at startup and by --summary / --validate.
"""

import sys

from ..utils.constants import DEFAULT_SCHEDULE_END, DEFAULT_SCHEDULE_START
from .resolver import ScheduleResolver
from .schemas import Config


# ANSI color codes for terminal output
class Colors:
    GREEN = "\033[92m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"
    BOLD = "\033[1m"
    RESET = "\033[0m"

    @classmethod
    def disable(cls):
        """Disable colors for non-TTY output."""
        cls.GREEN = cls.RED = cls.YELLOW = cls.CYAN = ""
        cls.GRAY = cls.BOLD = cls.RESET = ""


# Disable colors if not a TTY
if not sys.stdout.isatty():
    Colors.disable()


def format_config_summary(config: Config, resolver: ScheduleResolver | None = None) -> str:
    """
    Build the configuration summary text.

    Camera groups show their effective (resolved) schedule; a trailing `*`
    marks a camera-specific group override.
    """
    resolver = resolver or ScheduleResolver(config)
    lines = []

    lines.append(f"{Colors.BOLD}Configuration Summary{Colors.RESET}")
    lines.append("=" * 60)
    lines.append(f"  Frigate API: {config.frigate_api_url}")
    lines.append(f"  Poll Interval: {config.poll_interval_seconds:g}s")
    lines.append(f"  Webhook: {config.webhook_url or 'Not configured'}")
    lines.append(
        f"  Media Retries: {config.media_retry_attempts} "
        f"(delay {config.media_retry_delay_seconds:g}s x attempt)"
    )
    default = config.default_schedule
    default_start = default.start_time or DEFAULT_SCHEDULE_START
    default_end = default.end_time or DEFAULT_SCHEDULE_END
    lines.append(f"  Default Schedule: {default_start} - {default_end}")

    lines.append(f"\n{Colors.CYAN}Groups:{Colors.RESET}")
    for name, group in config.groups.items():
        if group.enabled:
            status = f"{Colors.GREEN}+{Colors.RESET}"
        else:
            status = f"{Colors.RED}-{Colors.RESET}"
        always = " [ALWAYS SEND]" if group.always_send else ""
        if group.schedule:
            # A missing boundary comes from the default schedule
            start = group.schedule.start_time or default_start
            end = group.schedule.end_time or default_end
            schedule = f" ({start} - {end})"
        else:
            schedule = " (uses default schedule)"
        lines.append(f"  {status} {name}: {group.chat_id or '<no chat_id>'}{always}{schedule}")
        if group.description:
            lines.append(f"      {Colors.GRAY}{group.description}{Colors.RESET}")

    lines.append(f"\n{Colors.CYAN}Cameras:{Colors.RESET}")
    lines.append(f"  Default Groups: {', '.join(config.default_groups or ['all'])}")

    if not config.cameras:
        lines.append("  No camera-specific configurations (using defaults)")
        return "\n".join(lines)

    for camera_name, camera in config.cameras.items():
        camera_schedule = resolver.camera_schedule(camera_name)
        if camera.labels is None:
            labels = "all"
        else:
            labels = ", ".join(camera.labels) or "none"
        lines.append(f"\n  {Colors.BOLD}{camera_name}{Colors.RESET}")
        lines.append(f"    Camera Schedule: {camera_schedule.describe()}")
        lines.append(f"    Labels: {labels}")
        lines.append("    Groups:")
        for group_name in resolver.group_names_for_camera(camera_name):
            effective = resolver.resolve(camera_name, group_name)
            marker = " *" if resolver.has_override(camera_name, group_name) else ""
            lines.append(f"      - {group_name}: {effective.describe()}{marker}")

    lines.append(f"\n  {Colors.GRAY}(* = camera-specific group schedule override){Colors.RESET}")
    return "\n".join(lines)


def print_config_summary(config: Config, resolver: ScheduleResolver | None = None) -> None:
    """Print the configuration summary."""
    print()
    print(format_config_summary(config, resolver))
    print()


def print_validation_result(valid: bool, message: str | None = None) -> None:
    """Print validation result."""
    print()
    print(f"{Colors.BOLD}Configuration Validation{Colors.RESET}")
    print("=" * 60)

    if valid:
        print(f"\n{Colors.GREEN}✓ Configuration is valid{Colors.RESET}")
    else:
        print(f"\n{Colors.RED}✗ Configuration has errors{Colors.RESET}")
        if message:
            print(f"\n{Colors.RED}Errors:{Colors.RESET}")
            for line in message.splitlines():
                print(f"  {line}")

    print()
