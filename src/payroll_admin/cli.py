"""Payroll administration command line interface.

Usage:
    payroll-admin init-db
    payroll-admin generate 2025 6
    payroll-admin preview <employee-id> 2025 6
    payroll-admin serve
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Callable
from uuid import UUID

from payroll_admin.config import get_settings
from payroll_admin.database import create_schema, dispose_db, get_session, init_db
from payroll_admin.exceptions import PayrollAdminError
from payroll_admin.logging_config import configure_logging
from payroll_admin.services.payroll_service import PayrollService


def parse_uuid(s: str) -> UUID:
    """Parse UUID string."""
    return UUID(s)


class PayrollCli:
    """Payroll administration command line interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="payroll-admin",
            description="Payroll administration tools",
        )
        parser.add_argument(
            "--log-level",
            default=None,
            help="Override LOG_LEVEL from the environment",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        subparsers.add_parser("init-db", help="Create database tables")
        subparsers.add_parser("serve", help="Run the HTTP API")

        generate = subparsers.add_parser(
            "generate",
            help="Regenerate payroll snapshots for a month",
        )
        generate.add_argument("year", type=int)
        generate.add_argument("month", type=int)

        preview = subparsers.add_parser(
            "preview",
            help="Calculate one employee's gross pay without storing it",
        )
        preview.add_argument("employee_id", type=parse_uuid)
        preview.add_argument("year", type=int)
        preview.add_argument("month", type=int)

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)
        configure_logging(parsed.log_level or get_settings().log_level)

        if not parsed.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        handlers: dict[str, Callable[[argparse.Namespace], int]] = {
            "init-db": self._cmd_init_db,
            "serve": self._cmd_serve,
            "generate": self._cmd_generate,
            "preview": self._cmd_preview,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1

        try:
            return handler(parsed)
        except PayrollAdminError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    def _cmd_init_db(self, args: argparse.Namespace) -> int:
        async def _run() -> None:
            engine, _ = init_db()
            try:
                await create_schema(engine)
            finally:
                await dispose_db()

        asyncio.run(_run())
        print("Database schema created")
        return 0

    def _cmd_serve(self, args: argparse.Namespace) -> int:
        from payroll_admin.__main__ import main as serve

        serve()
        return 0

    def _cmd_generate(self, args: argparse.Namespace) -> int:
        async def _run() -> tuple[bool, int, list[str]]:
            try:
                async with get_session() as session:
                    service = PayrollService(session)
                    result = await service.generate_monthly_snapshot_set(args.year, args.month)
                    failures = [f"{f.employee_number}: {f.error}" for f in result.failures]
                    return service.is_successful(result), result.success_count, failures
            finally:
                await dispose_db()

        ok, count, failures = asyncio.run(_run())
        print(f"Generated {count} snapshots for {args.year:04d}-{args.month:02d}")
        for line in failures:
            print(f"  skipped {line}")
        return 0 if ok else 1

    def _cmd_preview(self, args: argparse.Namespace) -> int:
        async def _run() -> dict[str, object]:
            try:
                async with get_session() as session:
                    calculation = await PayrollService(session).preview_gross_pay(
                        args.employee_id, args.year, args.month
                    )
                    return calculation.to_canonical_dict() | {
                        "department_incentive_amount": str(
                            calculation.department_incentive_amount
                        ),
                        "service_years_incentive_amount": str(
                            calculation.service_years_incentive_amount
                        ),
                        "attendance_adjustment_amount": str(
                            calculation.attendance_adjustment_amount
                        ),
                        "gross_salary": str(calculation.gross_salary),
                    }
            finally:
                await dispose_db()

        print(json.dumps(asyncio.run(_run()), indent=2))
        return 0


def main() -> int:
    """CLI entry point."""
    cli = PayrollCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
