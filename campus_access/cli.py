# =======================================================================================
# campus_access/cli.py - Command Line Front End
# =======================================================================================
"""Command-line interface for the campus access service and scanning station."""
import argparse
import asyncio
import logging
import sys
from datetime import date
from getpass import getpass
from typing import Optional, Sequence

from .config import config
from .models.enums import EVENT_KINDS, ROLES
from .utils.exceptions import ApiError, CampusAccessError, DecoderUnavailable

logger = logging.getLogger("campus_access.cli")


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="campus-access", description="Campus access control")
    parser.add_argument("--api-url", default=config.API_BASE_URL, help="Backend base URL")
    parser.add_argument("--debug", action="store_true", default=config.API_DEBUG)
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Start the HTTP API")
    serve.add_argument("--host", default=config.API_HOST)
    serve.add_argument("--port", type=int, default=config.API_PORT)

    subparsers.add_parser("init-db", help="Create the database tables")

    register = subparsers.add_parser("register", help="Register a new user")
    register.add_argument("--nombre", required=True)
    register.add_argument("--correo", required=True)
    register.add_argument("--codigo", required=True, help="Barcode identifier")
    register.add_argument("--carrera", required=True)
    register.add_argument("--rol", choices=ROLES, default="member")

    login = subparsers.add_parser("login", help="Log in and store the session")
    login.add_argument("--correo", required=True)

    subparsers.add_parser("logout", help="Forget the stored session")
    subparsers.add_parser("profile", help="Show the logged-in account")

    scan = subparsers.add_parser("scan", help="Scan badges with the camera")
    scan.add_argument("--kind", choices=EVENT_KINDS, required=True)
    scan.add_argument("--camera", type=int, default=config.CAMERA_INDEX)
    scan.add_argument("--continuous", action="store_true", help="Re-arm after every outcome")

    history = subparsers.add_parser("history", help="List access events")
    history.add_argument("--start", type=date.fromisoformat, default=None)
    history.add_argument("--end", type=date.fromisoformat, default=None)
    history.add_argument("--type", choices=(*EVENT_KINDS, "all"), default="all")
    history.add_argument("--page", type=int, default=1)
    history.add_argument("--mine", action="store_true", help="Only the logged-in user's events")
    history.add_argument("--mock", action="store_true", help="Use generated sample data")

    return parser.parse_args(argv)


# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------
def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("campus_access.main:app", host=args.host, port=args.port, log_level="debug" if args.debug else "info")
    return 0


def _init_db() -> int:
    from .database import db_manager

    db_manager.initialize()
    print("Database ready.")
    return 0


async def _register(args: argparse.Namespace, session) -> int:
    from .client import ApiGateway

    password = getpass("Password (min. 8 characters): ")
    async with ApiGateway(args.api_url, session=session) as gateway:
        user = await gateway.register(args.nombre, args.correo, args.codigo, args.carrera, args.rol, password)
    session.save(user)
    print(f"Registered {user.nombre} with code {user.codigo_barra}.")
    return 0


async def _login(args: argparse.Namespace, session) -> int:
    from .client import ApiGateway

    password = getpass("Password: ")
    async with ApiGateway(args.api_url, session=session) as gateway:
        result = await gateway.login(args.correo, password)
    session.save(result.usuario, result.token)
    print(f"Welcome, {result.usuario.nombre}.")
    return 0


def _profile(session) -> int:
    from .client import AccountView

    for label, value in AccountView(session).summary().items():
        print(f"{label:>8}: {value}")
    return 0


async def _scan(args: argparse.Namespace, session) -> int:
    from .client import ApiGateway
    from .scanner import ScanCoordinator
    from .workers import CameraBarcodeDecoder

    outcomes: asyncio.Queue = asyncio.Queue()
    async with ApiGateway(args.api_url, session=session) as gateway:
        coordinator = ScanCoordinator(
            gateway,
            CameraBarcodeDecoder(camera_index=args.camera),
            on_outcome=outcomes.put_nowait,
            on_progress=lambda msg: print(f"  {msg}"),
            on_failure=outcomes.put_nowait,
        )
        coordinator.select_kind(args.kind)
        try:
            while True:
                await coordinator.start()
                outcome = await outcomes.get()
                if isinstance(outcome, CampusAccessError):
                    raise outcome
                print(("OK    " if outcome.ok else "FAILED") + f" {outcome.message}")
                if not args.continuous:
                    return 0 if outcome.ok else 1
        finally:
            coordinator.stop()


async def _history(args: argparse.Namespace, session) -> int:
    from .client import (
        AccessHistoryViewModel, AccountView, ApiGateway, GatewayHistorySource,
        HistoryFilter, MockHistorySource,
    )

    flt = HistoryFilter(start_date=args.start, end_date=args.end, kind=args.type)
    async with ApiGateway(args.api_url, session=session) as gateway:
        if args.mock:
            source = MockHistorySource()
        else:
            code = AccountView(session).current_user().codigo_barra if args.mine else None
            source = GatewayHistorySource(gateway, user_code=code)

        view = AccessHistoryViewModel(source)
        await view.apply_filter(flt)
        if args.page > 1 and not await view.change_page(args.page - 1):
            print(f"Page {args.page} is out of range (1-{view.total_pages}).")
            return 1

    if view.error:
        print(view.error)
        return 1
    if not view.items:
        print("No records found for the selected filters.")
    for item in view.items:
        where = f" - {item.location}" if item.location else ""
        print(f"{item.occurred_at:%Y-%m-%d %H:%M}  {item.kind:<5}{where}")
    print(f"Page {view.current_page}/{view.total_pages} ({view.total} records)")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        return _serve(args)
    if args.command == "init-db":
        return _init_db()

    from .client import SessionStore

    session = SessionStore(config.SESSION_FILE)
    try:
        if args.command == "register":
            return asyncio.run(_register(args, session))
        if args.command == "login":
            return asyncio.run(_login(args, session))
        if args.command == "logout":
            session.clear()
            print("Logged out.")
            return 0
        if args.command == "profile":
            return _profile(session)
        if args.command == "scan":
            return asyncio.run(_scan(args, session))
        if args.command == "history":
            return asyncio.run(_history(args, session))
    except DecoderUnavailable as e:
        print(f"Scanner unavailable: {e.hint}", file=sys.stderr)
        return 2
    except ApiError as e:
        print(f"Error ({e.status}): {e.message}", file=sys.stderr)
        return 1
    except CampusAccessError as e:
        print(str(e), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
