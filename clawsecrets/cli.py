"""
clawsecrets CLI — entry point for all operations.

Usage:
    clawsecrets init                          # First-time setup of every secret
    clawsecrets rotate --all                  # Rotate every secret, reload the service
    clawsecrets rotate --secret-name NAME     # Rotate one secret
    clawsecrets check-expiry [--json]         # Exit 1 when secrets are overdue
    clawsecrets status                        # Show secrets, backups and expiry
    clawsecrets version                       # Show version
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from clawsecrets.config import Config, get_config
from clawsecrets.credentials import CREDENTIALS, credential_names
from clawsecrets.errors import (
    LedgerCorrupt,
    RotationAborted,
    RotationFailed,
    SecretsError,
    Uninitialized,
)
from clawsecrets.ledger import MetadataLedger
from clawsecrets.prompt import SecretPrompt
from clawsecrets.reload import ComposeReloadTrigger, NullReloadTrigger, ReloadTrigger
from clawsecrets.store import SecretStore

EXIT_INTERRUPTED = 130

RULE = "═" * 67


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="clawsecrets",
        description="Initialize, rotate and track expiry of OpenClaw API keys and bot token.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command")

    # init
    init_parser = subparsers.add_parser("init", help="Collect and store every secret")
    init_parser.add_argument(
        "--force",
        "--yes",
        "-y",
        dest="force",
        action="store_true",
        help="Overwrite existing secrets without asking",
    )

    # rotate
    rotate_parser = subparsers.add_parser("rotate", help="Rotate one or all secrets")
    mode = rotate_parser.add_mutually_exclusive_group()
    mode.add_argument("--all", action="store_true", help="Rotate every secret")
    mode.add_argument(
        "--secret-name", choices=credential_names(), metavar="NAME", help="Rotate one secret"
    )
    rotate_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")
    rotate_parser.add_argument(
        "--no-reload", action="store_true", help="Don't restart the service afterwards"
    )

    # check-expiry
    expiry_parser = subparsers.add_parser("check-expiry", help="Report rotation status")
    expiry_parser.add_argument("--json", action="store_true", help="Machine-readable output")

    # status
    subparsers.add_parser("status", help="Show secrets, backups and expiry")

    # version
    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if args.version or args.command == "version":
        from clawsecrets import __version__

        print(f"clawsecrets {__version__}")
        return 0

    if args.command == "init":
        return _cmd_init(args)
    elif args.command == "rotate":
        return _cmd_rotate(args)
    elif args.command == "check-expiry":
        return _cmd_check_expiry(args)
    elif args.command == "status":
        return _cmd_status(args)
    else:
        parser.print_help()
        return 0


# ─── Component wiring (patched in tests) ────────────────────────────────


def _make_prompt() -> SecretPrompt:
    return SecretPrompt()


def _make_reload_trigger(cfg: Config, no_reload: bool = False) -> ReloadTrigger:
    if no_reload:
        return NullReloadTrigger()
    return ComposeReloadTrigger(cfg.reload)


def _components(cfg: Config, create: bool = True) -> tuple[SecretStore, MetadataLedger]:
    store = SecretStore(cfg.secrets_dir, create=create)
    ledger = MetadataLedger(cfg.metadata_file, rotation_days=cfg.rotation_days)
    return store, ledger


def _banner(title: str) -> None:
    print(RULE)
    print(title)
    print(RULE)
    print()


# ─── Commands ───────────────────────────────────────────────────────────


def _cmd_init(args: argparse.Namespace) -> int:
    from clawsecrets.setup import run_init

    cfg = get_config()
    store, ledger = _components(cfg)
    _banner("OpenClaw Secrets Initialization")

    try:
        result = run_init(
            store, ledger, _make_prompt(), force=args.force, lock_path=cfg.lock_file
        )
    except (KeyboardInterrupt, EOFError):
        print("\nAborted. No secrets were written.")
        return EXIT_INTERRUPTED
    except (SecretsError, OSError) as e:
        print(f"Error: {e}")
        return 1

    if not result.performed:
        return 0

    print()
    _banner("Secrets initialized successfully!")
    print(f"Secrets stored in: {store.secrets_dir}")
    for name in result.written:
        print(f"  - {name}.txt")
    if result.backups:
        print("Previous values backed up to:")
        for path in result.backups:
            print(f"  - {path}")
    print()
    print(f"Metadata: {ledger.path}")
    print(f"  Created: {result.created_at}")
    print(f"  Rotate by: {result.rotate_by} ({ledger.rotation_days} days)")
    print()
    print("Maintenance:")
    print("  - Check expiry: clawsecrets check-expiry")
    print("  - Rotate secrets: clawsecrets rotate --all")
    print("  - Weekly cron: 0 9 * * 1 clawsecrets check-expiry")
    return 0


def _cmd_rotate(args: argparse.Namespace) -> int:
    from clawsecrets.expiry import evaluate_expiry
    from clawsecrets.rotation import RotationOrchestrator

    cfg = get_config()
    store, ledger = _components(cfg, create=False)
    prompt = _make_prompt()
    _banner("OpenClaw Secrets Rotation")

    try:
        report = evaluate_expiry(ledger)
    except (Uninitialized, LedgerCorrupt) as e:
        print(f"Error: {e}")
        return 1

    print("Current rotation status:")
    _print_expiry(report)
    print()

    try:
        rotate_all = args.all
        name = args.secret_name
        if not rotate_all and not name:
            print("Rotation modes:")
            print("  1. Rotate all secrets (recommended every 90 days)")
            print("  2. Rotate specific secret")
            rotate_all = prompt.confirm("Rotate all secrets?")
            if not rotate_all:
                print("Available secrets:")
                for c in CREDENTIALS:
                    print(f"  - {c.name}")
                name = prompt.ask_line("Enter secret name to rotate")

        if not args.yes:
            print("This will update secrets while the service is running (zero-downtime rotation)")
            if not prompt.confirm("Continue?"):
                print("Aborted")
                return 0

        orchestrator = RotationOrchestrator(
            store,
            ledger,
            prompt,
            _make_reload_trigger(cfg, args.no_reload),
            service=cfg.reload.service,
            health_timeout=cfg.reload.health_timeout,
            lock_path=cfg.lock_file,
        )
        summary = orchestrator.rotate_all() if rotate_all else orchestrator.rotate_one(name)

    except (KeyboardInterrupt, EOFError):
        print("\nAborted. Existing secrets are unchanged.")
        return EXIT_INTERRUPTED
    except RotationAborted as e:
        print(f"\n{e}. The interrupted secret is unchanged.")
        if e.summary and e.summary.rotated:
            print(f"Already rotated in this run: {', '.join(e.summary.names)}")
        return EXIT_INTERRUPTED
    except RotationFailed as e:
        print(f"Error: {e}")
        if e.summary and e.summary.rotated:
            print(f"Already rotated in this run (kept): {', '.join(e.summary.names)}")
        print("The failed secret keeps its previous value. Fix the problem and retry.")
        return 1
    except (SecretsError, OSError) as e:
        print(f"Error: {e}")
        return 1

    print()
    _banner("Secret rotation complete!")
    print("Rotated:")
    for r in summary.rotated:
        print(f"  - {r.name} (expires {r.expires})")
        print(f"    backup: {r.backup_path}")
    print(f"Next rotation: {summary.rotate_by or 'see clawsecrets check-expiry'}")
    if summary.reload and summary.reload.warning:
        print(f"Warning: {summary.reload.warning}")
    print()
    print(f"Old secrets in {store.backup_dir} should be securely deleted after verification")
    return 0


def _print_expiry(report) -> None:
    print(f"Created: {report.created_at}")
    print(f"Rotate by: {report.rotate_by}")
    print(f"Days remaining: {report.days_remaining}")
    print(report.message)


def _cmd_check_expiry(args: argparse.Namespace) -> int:
    from clawsecrets.expiry import evaluate_expiry

    cfg = get_config()
    ledger = MetadataLedger(cfg.metadata_file, rotation_days=cfg.rotation_days)
    try:
        report = evaluate_expiry(ledger)
    except (Uninitialized, LedgerCorrupt) as e:
        print(f"Error: {e}")
        return 1

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
        return report.exit_code

    print("Secret Rotation Status")
    print("======================")
    _print_expiry(report)
    print()
    for s in report.secrets:
        print(f"  {s.name:<20} {s.expires}  {s.days_remaining:>4}d  {s.status.value}")
    return report.exit_code


def _cmd_status(args: argparse.Namespace) -> int:
    from clawsecrets import __version__
    from clawsecrets.expiry import evaluate_expiry

    cfg = get_config()
    store, ledger = _components(cfg, create=False)
    print(f"clawsecrets v{__version__}")
    print()
    print(f"  Secrets dir: {store.secrets_dir}")
    print(f"  Initialized: {'yes' if store.is_initialized() else 'no'}")

    expiry = {}
    try:
        report = evaluate_expiry(ledger)
        expiry = {s.name: s for s in report.secrets}
        print(f"  Rotate by:   {report.rotate_by} ({report.status.value})")
    except (Uninitialized, LedgerCorrupt) as e:
        print(f"  Ledger:      {e}")
    print()

    for c in CREDENTIALS:
        present = store.exists(c.name)
        mark = "+" if present else "x"
        backups = len(store.list_backups(c.name))
        s = expiry.get(c.name)
        detail = f"{s.status.value}, {s.days_remaining}d left" if s else "no ledger entry"
        print(f"  {mark} {c.name:<20} {c.service:<18} backups={backups}  {detail}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
