"""
Jingui Admin CLI — manage vaults, items, instances and debug policies.

Usage:
    jingui-admin configure --endpoint URL --token TOKEN
    jingui-admin status                      # Ping the configured server
    jingui-admin logout                      # Forget stored credentials
    jingui-admin vaults list
    jingui-admin vaults create ID NAME
    jingui-admin vaults delete ID --cascade
    jingui-admin items put VAULT SECTION KEY=VALUE ...
    jingui-admin instances list
    jingui-admin access grant VAULT FID
    jingui-admin debug-policy set VAULT FID off
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from jingui_admin.app import AdminApp
from jingui_admin.errors import JinguiError, Unconfigured, describe_error
from jingui_admin.formatting import format_date, format_datetime, mask_value, truncate
from jingui_admin.models import InstanceRequest, InstanceUpdateRequest
from jingui_admin.notifications import Notification, NotificationKind
from jingui_admin.queries import fetch_view

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNCONFIGURED = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jingui-admin",
        description="Jingui Admin — manage secrets vaults, items and TEE instances.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command")

    # configure / logout / status
    cfg = subparsers.add_parser("configure", help="Store the server endpoint and token")
    cfg.add_argument("--endpoint", required=True, help="Server URL, e.g. https://jingui.example.com")
    cfg.add_argument("--token", required=True, help="Admin bearer token")
    cfg.add_argument(
        "--check", action="store_true", help="Ping the server before saving"
    )
    subparsers.add_parser("logout", help="Forget the stored endpoint and token")
    subparsers.add_parser("status", help="Test the connection to the configured server")

    # vaults
    vaults = subparsers.add_parser("vaults", help="Manage vaults")
    vaults_sub = vaults.add_subparsers(dest="action")
    vaults_sub.add_parser("list", help="List vaults")
    v_show = vaults_sub.add_parser("show", help="Show one vault")
    v_show.add_argument("vault")
    v_create = vaults_sub.add_parser("create", help="Create a vault")
    v_create.add_argument("vault")
    v_create.add_argument("name")
    v_rename = vaults_sub.add_parser("rename", help="Rename a vault")
    v_rename.add_argument("vault")
    v_rename.add_argument("name")
    v_delete = vaults_sub.add_parser("delete", help="Delete a vault")
    v_delete.add_argument("vault")
    v_delete.add_argument(
        "--cascade", action="store_true", help="Also delete items, grants and debug policies"
    )

    # items
    items = subparsers.add_parser("items", help="Manage vault items")
    items_sub = items.add_subparsers(dest="action")
    i_list = items_sub.add_parser("list", help="List items of a vault")
    i_list.add_argument("vault")
    i_show = items_sub.add_parser("show", help="Show one item and its fields")
    i_show.add_argument("vault")
    i_show.add_argument("section")
    i_show.add_argument("--reveal", action="store_true", help="Print field values in clear")
    i_put = items_sub.add_parser("put", help="Create or update item fields")
    i_put.add_argument("vault")
    i_put.add_argument("section")
    i_put.add_argument("fields", nargs="*", metavar="KEY=VALUE")
    i_put.add_argument(
        "--delete", action="append", default=[], metavar="KEY", help="Remove a field"
    )
    i_delete = items_sub.add_parser("delete", help="Delete an item")
    i_delete.add_argument("vault")
    i_delete.add_argument("section")
    i_delete.add_argument(
        "--cascade", action="store_true", help="Also delete instances bound to the item"
    )

    # instances
    instances = subparsers.add_parser("instances", help="Manage TEE instances")
    inst_sub = instances.add_subparsers(dest="action")
    inst_sub.add_parser("list", help="List instances")
    n_show = inst_sub.add_parser("show", help="Show one instance")
    n_show.add_argument("fid")
    n_register = inst_sub.add_parser("register", help="Register an instance")
    n_register.add_argument("--public-key", required=True)
    n_register.add_argument("--vault", required=True, help="Bound vault")
    n_register.add_argument("--item", required=True, help="Bound item section")
    n_register.add_argument("--app-id", required=True, help="Bound attestation app id")
    n_register.add_argument("--label", default="")
    n_update = inst_sub.add_parser("update", help="Update an instance")
    n_update.add_argument("fid")
    n_update.add_argument("--app-id", required=True, help="Bound attestation app id")
    n_update.add_argument("--label", default="")
    n_delete = inst_sub.add_parser("delete", help="Delete an instance")
    n_delete.add_argument("fid")

    # access
    access = subparsers.add_parser("access", help="Manage vault access grants")
    access_sub = access.add_subparsers(dest="action")
    a_list = access_sub.add_parser("list", help="List instances with access to a vault")
    a_list.add_argument("vault")
    for name, text in (("grant", "Grant an instance access"), ("revoke", "Revoke access")):
        a = access_sub.add_parser(name, help=text)
        a.add_argument("vault")
        a.add_argument("fid")

    # debug-policy
    debug = subparsers.add_parser("debug-policy", help="Manage plaintext debug reads")
    debug_sub = debug.add_subparsers(dest="action")
    d_show = debug_sub.add_parser("show", help="Show the policy for (vault, instance)")
    d_show.add_argument("vault")
    d_show.add_argument("fid")
    d_set = debug_sub.add_parser("set", help="Enable or disable debug reads")
    d_set.add_argument("vault")
    d_set.add_argument("fid")
    d_set.add_argument("state", choices=["on", "off"])

    # version
    subparsers.add_parser("version", help="Show version")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version or args.command == "version":
        from jingui_admin import __version__

        print(f"jingui-admin {__version__}")
        return EXIT_OK

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    if args.command in _GROUPS and args.action is None:
        parser.parse_args([args.command, "--help"])

    from jingui_admin.config import get_config

    level = "DEBUG" if args.verbose else get_config().log_level
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    return asyncio.run(_run(args))


async def _run(args: argparse.Namespace) -> int:
    async with AdminApp() as app:
        printer = _NotificationPrinter()
        app.bus.subscribe(printer)

        if args.command == "configure":
            return await _cmd_configure(app, args)
        if args.command == "logout":
            app.logout()
            print("Credentials cleared")
            return EXIT_OK

        if not app.configured:
            print(describe_error(Unconfigured()), file=sys.stderr)
            return EXIT_UNCONFIGURED

        handler = _GROUPS.get(args.command, _cmd_status)
        try:
            return await handler(app, args)
        except Unconfigured as e:
            printer.report(describe_error(e))
            return EXIT_UNCONFIGURED
        except (JinguiError, ValueError) as e:
            # ValueError: request validation or an empty identifier, before anything is sent
            logger.debug("Command failed: %r", e)
            printer.report(describe_error(e))
            return EXIT_ERROR


class _NotificationPrinter:
    """Bus observer that prints each notification once, when it is posted.

    report() prints a command failure unless a mutation already posted it.
    """

    def __init__(self) -> None:
        self._seen: set[int] = set()
        self._errors: set[str] = set()

    def __call__(self, items: tuple[Notification, ...]) -> None:
        for n in items:
            if n.id in self._seen:
                continue
            self._seen.add(n.id)
            if n.kind == NotificationKind.ERROR:
                self._errors.add(n.message)
                print(n.message, file=sys.stderr)
            else:
                print(n.message)

    def report(self, message: str) -> None:
        if message not in self._errors:
            print(message, file=sys.stderr)


def _report(error: str) -> int:
    print(error, file=sys.stderr)
    return EXIT_ERROR


# ─── Commands ────────────────────────────────────────────────────────────


async def _cmd_configure(app: AdminApp, args: argparse.Namespace) -> int:
    if args.check:
        try:
            await app.test_connection(args.endpoint, args.token)
        except JinguiError as e:
            return _report(f"Connection failed: {describe_error(e)}")
    try:
        pair = app.configure(args.endpoint, args.token)
    except ValueError as e:
        return _report(str(e))
    print(f"Configured {pair.endpoint}")
    return EXIT_OK


async def _cmd_status(app: AdminApp, args: argparse.Namespace) -> int:
    pair = app.store.read()
    try:
        await app.test_connection()
    except Unconfigured:
        raise
    except JinguiError as e:
        return _report(f"Connection failed: {describe_error(e)}")
    print(f"Connected to {pair.endpoint if pair else '?'}")
    return EXIT_OK


async def _cmd_vaults(app: AdminApp, args: argparse.Namespace) -> int:
    if args.action == "list":
        view = await fetch_view(app.queries.vaults())
        if not view.ok:
            return _report(view.error)
        if not view.data:
            print("No vaults")
        for v in view.data:
            print(f"{v.id:<24} {truncate(v.name, 40):<41} {format_date(v.created_at)}")
    elif args.action == "show":
        view = await fetch_view(app.queries.vault(args.vault))
        if not view.ok:
            return _report(view.error)
        print(f"ID:       {view.data.id}")
        print(f"Name:     {view.data.name}")
        print(f"Created:  {format_datetime(view.data.created_at)}")
    elif args.action == "create":
        await app.mutations.create_vault(args.vault, args.name)
    elif args.action == "rename":
        await app.mutations.update_vault(args.vault, args.name)
    elif args.action == "delete":
        await app.mutations.delete_vault(args.vault, cascade=args.cascade)
    return EXIT_OK


def _parse_fields(pairs: list[str]) -> dict[str, str]:
    fields: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got {pair!r}")
        fields[key] = value
    return fields


async def _cmd_items(app: AdminApp, args: argparse.Namespace) -> int:
    if args.action == "list":
        view = await fetch_view(app.queries.items(args.vault))
        if not view.ok:
            return _report(view.error)
        if not view.data:
            print("No items")
        for item in view.data:
            print(f"{item.section:<32} {format_datetime(item.updated_at)}")
    elif args.action == "show":
        view = await fetch_view(app.queries.item(args.vault, args.section))
        if not view.ok:
            return _report(view.error)
        for key, value in sorted(view.data.fields.items()):
            print(f"{key:<24} {mask_value(value, reveal=args.reveal)}")
    elif args.action == "put":
        try:
            fields = _parse_fields(args.fields)
        except ValueError as e:
            return _report(str(e))
        if not fields and not args.delete:
            return _report("Nothing to change: give KEY=VALUE pairs or --delete KEY")
        await app.mutations.put_item(args.vault, args.section, fields, args.delete)
    elif args.action == "delete":
        await app.mutations.delete_item(args.vault, args.section, cascade=args.cascade)
    return EXIT_OK


def _print_instance_row(inst) -> None:
    label = truncate(inst.label, 20) if inst.label else "-"
    print(f"{inst.fid:<24} {inst.bound_vault}/{inst.bound_item:<24} {label:<21} "
          f"{format_date(inst.last_used_at)}")


async def _cmd_instances(app: AdminApp, args: argparse.Namespace) -> int:
    if args.action == "list":
        view = await fetch_view(app.queries.instances())
        if not view.ok:
            return _report(view.error)
        if not view.data:
            print("No instances")
        for inst in view.data:
            _print_instance_row(inst)
    elif args.action == "show":
        view = await fetch_view(app.queries.instance(args.fid))
        if not view.ok:
            return _report(view.error)
        inst = view.data
        print(f"FID:        {inst.fid}")
        print(f"Label:      {inst.label or '-'}")
        print(f"Vault:      {inst.bound_vault}")
        print(f"Item:       {inst.bound_item}")
        print(f"App ID:     {inst.bound_attestation_app_id}")
        print(f"Public key: {truncate(inst.public_key, 48)}")
        print(f"Created:    {format_datetime(inst.created_at)}")
        print(f"Last used:  {format_datetime(inst.last_used_at)}")
    elif args.action == "register":
        req = InstanceRequest(
            public_key=args.public_key,
            bound_vault=args.vault,
            bound_item=args.item,
            bound_attestation_app_id=args.app_id,
            label=args.label,
        )
        res = await app.mutations.register_instance(req)
        if res is not None and res.fid:
            print(res.fid)
    elif args.action == "update":
        req = InstanceUpdateRequest(bound_attestation_app_id=args.app_id, label=args.label)
        await app.mutations.update_instance(args.fid, req)
    elif args.action == "delete":
        await app.mutations.delete_instance(args.fid)
    return EXIT_OK


async def _cmd_access(app: AdminApp, args: argparse.Namespace) -> int:
    if args.action == "list":
        view = await fetch_view(app.queries.vault_instances(args.vault))
        if not view.ok:
            return _report(view.error)
        if not view.data:
            print("No instances have access")
        for inst in view.data:
            _print_instance_row(inst)
    elif args.action == "grant":
        await app.mutations.grant_access(args.vault, args.fid)
    elif args.action == "revoke":
        await app.mutations.revoke_access(args.vault, args.fid)
    return EXIT_OK


async def _cmd_debug_policy(app: AdminApp, args: argparse.Namespace) -> int:
    if args.action == "show":
        view = await fetch_view(app.queries.debug_policy(args.vault, args.fid))
        if not view.ok:
            return _report(view.error)
        policy = view.data
        state = "enabled" if policy.allow_read else "disabled"
        print(f"Debug read {state} ({policy.source})")
    elif args.action == "set":
        await app.mutations.update_debug_policy(args.vault, args.fid, args.state == "on")
    return EXIT_OK


_GROUPS = {
    "vaults": _cmd_vaults,
    "items": _cmd_items,
    "instances": _cmd_instances,
    "access": _cmd_access,
    "debug-policy": _cmd_debug_policy,
}


if __name__ == "__main__":
    sys.exit(main())
