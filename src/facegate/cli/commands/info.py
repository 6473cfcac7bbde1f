"""Info command for facegate CLI.

Shows version and the effective settings after environment overrides.
"""

from dataclasses import fields

from facegate import __version__
from facegate.cli.utils import BOLD, DIM, RESET


def run_info(args):
    """Show effective settings."""
    settings = args.settings
    print(f"{BOLD}facegate {__version__}{RESET}")
    print("=" * 40)
    for f in fields(settings):
        value = getattr(settings, f.name)
        if f.name == "store_path":
            value = settings.resolved_store_path()
        print(f"  {f.name:<18}{value}")

    policy = settings.liveness_policy()
    weights = ", ".join(f"{s.value}={w}" for s, w in policy.weights.items())
    print()
    print(f"{BOLD}Liveness policy{RESET}  {policy.name}")
    print(f"  {DIM}weights: {weights}{RESET}")
    print(f"  {DIM}threshold: {policy.threshold} · texture required: {policy.require_texture}{RESET}")
