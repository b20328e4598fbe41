"""Command line entry point for Provider Registry.

Usage:
    python -m provider_registry register --record provider.json
    python -m provider_registry resume --record provider.json --account 0x...
    python -m provider_registry update weather-api --price 0.02
    python -m provider_registry lookup weather-api
    python -m provider_registry encode-notes --record provider.json

The signing key is read from PROVIDER_REGISTRY_PRIVATE_KEY. A .env file in
the working directory is loaded first.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
import threading
from pathlib import Path

from dotenv import load_dotenv

from provider_registry.config import ENV_PREFIX, RegistryConfig
from provider_registry.features.lookup import AccountLookupService
from provider_registry.features.registration import (
    RegistrationOrchestrator,
    notes_payload,
)
from provider_registry.features.update import UpdateOrchestrator
from provider_registry.provider import (
    DESCRIPTION_KEY,
    INSTRUCTIONS_KEY,
    PRICE_KEY,
    PROVIDER_ID_KEY,
    WALLET_KEY,
    NoteSet,
    ProviderRecord,
)
from provider_registry.shared.logging import (
    format_error_for_user,
    get_logger,
    setup_logging,
)
from provider_registry.shared.network import NetworkError
from provider_registry.transaction import TransactionManager

logger = get_logger(__name__)


def _load_record(path: str) -> ProviderRecord:
    with open(Path(path), encoding="utf-8") as f:
        return ProviderRecord.from_dict(json.load(f))


def _transaction_manager(config: RegistryConfig) -> TransactionManager:
    private_key = os.getenv(f"{ENV_PREFIX}_PRIVATE_KEY")
    if not private_key:
        print(f"{ENV_PREFIX}_PRIVATE_KEY is not set")
        sys.exit(1)
    return TransactionManager.from_private_key(private_key, config=config)


class _Outcome:
    """Blocks the CLI until an orchestrator reports a terminal result."""

    def __init__(self):
        self.done = threading.Event()
        self.result = None
        self.error: str | None = None

    def complete(self, result) -> None:
        self.result = result
        self.done.set()

    def fail(self, message: str) -> None:
        self.error = message
        self.done.set()


def _wait(outcome: _Outcome) -> int:
    outcome.done.wait()
    if outcome.error:
        print(f"Error: {outcome.error}")
        return 1
    return 0


def cmd_register(args, config: RegistryConfig) -> int:
    record = _load_record(args.record)
    outcome = _Outcome()
    orchestrator = RegistrationOrchestrator(
        _transaction_manager(config),
        config=config,
        on_complete=outcome.complete,
        on_error=outcome.fail,
    )

    print(f"Registering {record.name}.{config.provider_namespace}...")
    started = orchestrator.start_registration(record)
    if not started and not outcome.done.is_set():
        print("Registration was not started")
        return 1

    code = _wait(outcome)
    if code == 0:
        print(f"Provider registered. Token-bound account: {outcome.result}")
    orchestrator.shutdown(wait=False)
    return code


def cmd_resume(args, config: RegistryConfig) -> int:
    record = _load_record(args.record)
    outcome = _Outcome()
    orchestrator = RegistrationOrchestrator(
        _transaction_manager(config),
        config=config,
        on_complete=outcome.complete,
        on_error=outcome.fail,
    )

    print(f"Writing notes for {record.name} on {args.account}...")
    started = orchestrator.resume_registration(record, args.account)
    if not started and not outcome.done.is_set():
        print("Registration was not resumed")
        return 1

    code = _wait(outcome)
    if code == 0:
        print(f"Notes written. Token-bound account: {outcome.result}")
    orchestrator.shutdown(wait=False)
    return code


def _notes_from_args(args) -> NoteSet:
    pairs = []
    for key, value in (
        (PROVIDER_ID_KEY, args.provider_id),
        (WALLET_KEY, args.wallet),
        (DESCRIPTION_KEY, args.description),
        (INSTRUCTIONS_KEY, args.instructions),
        (PRICE_KEY, args.price),
    ):
        if value is not None:
            pairs.append((key, value))
    return NoteSet.of(*pairs)


def cmd_update(args, config: RegistryConfig) -> int:
    account = args.account
    if not account:
        try:
            account = AccountLookupService(config=config).lookup_account(args.name)
        except NetworkError as e:
            print(f"Error: {format_error_for_user(e)}")
            return 1
    if not account:
        print(f"No token-bound account found for {args.name}")
        return 1

    notes = _notes_from_args(args)
    outcome = _Outcome()
    orchestrator = UpdateOrchestrator(
        _transaction_manager(config),
        config=config,
        on_update_complete=outcome.complete,
        on_update_error=outcome.fail,
    )

    print(f"Updating {len(notes)} note(s) on {account}...")
    if not orchestrator.update_notes(account, notes) and not outcome.done.is_set():
        print("Update was not started")
        return 1

    code = _wait(outcome)
    if code == 0:
        print("Notes updated.")
    orchestrator.shutdown(wait=False)
    return code


def cmd_lookup(args, config: RegistryConfig) -> int:
    service = AccountLookupService(config=config)
    try:
        info = service.fetch_account(args.name)
    except NetworkError as e:
        print(f"Error: {format_error_for_user(e)}")
        return 1

    if info is None:
        print(f"No token-bound account found for {service.entry_path(args.name)}")
        return 1
    print(json.dumps(info.to_dict(), indent=2))
    return 0


def cmd_encode_notes(args, config: RegistryConfig) -> int:
    """Print the notes calldata without sending anything."""
    record = _load_record(args.record)
    print("0x" + notes_payload(record, config).hex())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="provider-registry",
        description="Register and update providers on Hypermap",
    )
    parser.add_argument("--rpc-url", help="Override the RPC endpoint")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register = subparsers.add_parser("register", help="Mint a provider entry and write its notes")
    register.add_argument("--record", required=True, help="Path to a provider JSON record")
    register.set_defaults(func=cmd_register)

    resume = subparsers.add_parser("resume", help="Write notes for an already minted entry")
    resume.add_argument("--record", required=True, help="Path to a provider JSON record")
    resume.add_argument("--account", required=True, help="Token-bound account address")
    resume.set_defaults(func=cmd_resume)

    update = subparsers.add_parser("update", help="Rewrite notes on a registered provider")
    update.add_argument("name", help="Provider name or full entry path")
    update.add_argument("--account", help="Token-bound account (skips the lookup)")
    update.add_argument("--provider-id")
    update.add_argument("--wallet")
    update.add_argument("--description")
    update.add_argument("--instructions")
    update.add_argument("--price")
    update.set_defaults(func=cmd_update)

    lookup = subparsers.add_parser("lookup", help="Resolve a provider's token-bound account")
    lookup.add_argument("name", help="Provider name or full entry path")
    lookup.set_defaults(func=cmd_lookup)

    encode = subparsers.add_parser("encode-notes", help="Print the notes calldata for a record")
    encode.add_argument("--record", required=True, help="Path to a provider JSON record")
    encode.set_defaults(func=cmd_encode_notes)

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    setup_logging()

    args = build_parser().parse_args(argv)
    config = RegistryConfig.from_environment()
    if args.rpc_url:
        config = config.with_overrides(rpc_url=args.rpc_url)

    logger.debug("Running %s against %s", args.command, config.rpc_url)
    return args.func(args, config)


if __name__ == "__main__":
    sys.exit(main())
