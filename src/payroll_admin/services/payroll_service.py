"""Payroll snapshot calculation, persistence and retrieval."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from payroll_admin.calculators.engine import PayrollCalculator, validate_period
from payroll_admin.calculators.types import (
    BatchCalculationResult,
    EmployeeFailure,
    SnapshotCalculation,
)
from payroll_admin.database import advisory_lock, period_lock_key, supports_advisory_locks
from payroll_admin.exceptions import (
    DuplicatePeriodError,
    NotFoundError,
    PayrollAdminError,
    PeriodLockedError,
)
from payroll_admin.models import Department, Employee, PayrollSnapshot
from payroll_admin.models.base import utc_now
from payroll_admin.services.period_lock import PeriodLockRegistry, period_locks

logger = logging.getLogger(__name__)


class PayrollService:
    """Owns the payroll snapshot store.

    Snapshots are written only here: one row per (employee, year, month),
    overwritten on recalculation.
    """

    def __init__(
        self,
        session: AsyncSession,
        lock_registry: PeriodLockRegistry | None = None,
    ):
        self.session = session
        self.calculator = PayrollCalculator(session)
        self.settings = self.calculator.settings
        self.locks = lock_registry or period_locks

    # ------------------------------------------------------------------
    # Calculation
    # ------------------------------------------------------------------

    async def preview_gross_pay(
        self, employee_id: UUID, year: int, month: int
    ) -> SnapshotCalculation:
        """Calculate without writing a snapshot."""
        return await self.calculator.calculate(employee_id, year, month)

    async def calculate_gross_pay(
        self,
        employee_id: UUID,
        year: int,
        month: int,
        regenerate: bool = True,
    ) -> PayrollSnapshot:
        """Calculate and persist one employee's snapshot for a month.

        Raises:
            DuplicatePeriodError: If a snapshot exists and regenerate is False
            NotFoundError: If the employee or their salary is missing
        """
        validate_period(year, month)
        if not regenerate and await self.snapshot_exists(employee_id, year, month):
            raise DuplicatePeriodError(employee_id, year, month)

        calculation = await self.calculator.calculate(employee_id, year, month)
        return await self.upsert_snapshot(calculation)

    async def calculate_gross_pay_for_all(
        self,
        year: int,
        month: int,
        cancel_event: asyncio.Event | None = None,
    ) -> BatchCalculationResult:
        """Calculate and persist snapshots for every active employee.

        Failures are reported per employee and never abort the batch.
        """
        validate_period(year, month)
        return await self._run_batch(year, month, cancel_event, commit_each=False)

    async def generate_monthly_snapshots(
        self,
        year: int,
        month: int,
        cancel_event: asyncio.Event | None = None,
    ) -> bool:
        """Regenerate the period and report whether enough employees succeeded."""
        result = await self.generate_monthly_snapshot_set(year, month, cancel_event)
        return self.is_successful(result)

    def is_successful(self, result: BatchCalculationResult) -> bool:
        return (
            not result.cancelled
            and result.success_ratio >= self.settings.snapshot_success_ratio
        )

    async def generate_monthly_snapshot_set(
        self,
        year: int,
        month: int,
        cancel_event: asyncio.Event | None = None,
    ) -> BatchCalculationResult:
        """Replace the snapshot set of a period.

        Runs under the period lock and commits after each employee. When the
        run completes, snapshots of employees that produced none this time are
        removed, so running twice yields the same set. A cancelled run keeps
        what it committed and leaves older rows in place.

        Raises:
            PeriodLockedError: If another process is generating the same period
        """
        validate_period(year, month)

        async with self.locks.lock_for(year, month):
            engine = self.session.bind
            if engine is not None and supports_advisory_locks(engine):
                async with advisory_lock(engine, period_lock_key(year, month)) as acquired:
                    if not acquired:
                        raise PeriodLockedError(year, month)
                    return await self._generate(year, month, cancel_event)
            return await self._generate(year, month, cancel_event)

    async def _generate(
        self,
        year: int,
        month: int,
        cancel_event: asyncio.Event | None,
    ) -> BatchCalculationResult:
        logger.info("Generating payroll snapshots for %04d-%02d", year, month)
        result = await self._run_batch(year, month, cancel_event, commit_each=True)

        if result.cancelled:
            logger.warning(
                "Generation for %04d-%02d cancelled after %d of %d employees",
                year,
                month,
                result.success_count + result.failure_count,
                result.total_employees,
            )
            return result

        removed = await self._delete_stale_snapshots(
            year, month, {s.employee_id for s in result.snapshots}
        )
        await self.session.commit()

        logger.info(
            "Generated %d payroll snapshots for %04d-%02d (%d failed, %d stale removed)",
            result.success_count,
            year,
            month,
            result.failure_count,
            removed,
        )
        return result

    async def _run_batch(
        self,
        year: int,
        month: int,
        cancel_event: asyncio.Event | None,
        commit_each: bool,
    ) -> BatchCalculationResult:
        employees = await self.calculator.employees.list_active()
        tables = await self.calculator.load_rate_tables()
        result = BatchCalculationResult(year=year, month=month, total_employees=len(employees))

        for employee in employees:
            if cancel_event is not None and cancel_event.is_set():
                result.cancelled = True
                break

            try:
                async with self.session.begin_nested():
                    calculation = await self.calculator.calculate_for_employee(
                        employee, year, month, tables
                    )
                    snapshot = await self.upsert_snapshot(calculation)
            except PayrollAdminError as e:
                logger.warning(
                    "Skipping employee %s for %04d-%02d: %s",
                    employee.employee_number,
                    year,
                    month,
                    e,
                )
                result.failures.append(
                    EmployeeFailure(
                        employee_id=employee.employee_id,
                        employee_number=employee.employee_number,
                        error=str(e),
                        code=e.code,
                    )
                )
                continue
            except Exception as e:
                logger.exception(
                    "Unexpected error calculating employee %s for %04d-%02d",
                    employee.employee_number,
                    year,
                    month,
                )
                result.failures.append(
                    EmployeeFailure(
                        employee_id=employee.employee_id,
                        employee_number=employee.employee_number,
                        error=f"Calculation error: {e}",
                        code="INTERNAL_ERROR",
                    )
                )
                continue

            result.snapshots.append(snapshot)
            if commit_each:
                await self.session.commit()

        return result

    # ------------------------------------------------------------------
    # Snapshot store
    # ------------------------------------------------------------------

    async def upsert_snapshot(self, calculation: SnapshotCalculation) -> PayrollSnapshot:
        """Insert or overwrite the snapshot for the calculation's period."""
        snapshot = await self._find_snapshot(
            calculation.employee_id, calculation.year, calculation.month
        )
        if snapshot is None:
            snapshot = PayrollSnapshot(
                employee_id=calculation.employee_id,
                year=calculation.year,
                month=calculation.month,
            )
            self.session.add(snapshot)

        snapshot.base_salary = calculation.base_salary
        snapshot.department_incentive_percentage = calculation.department_incentive_percentage
        snapshot.department_incentive_amount = calculation.department_incentive_amount
        snapshot.service_years_incentive_percentage = (
            calculation.service_years_incentive_percentage
        )
        snapshot.service_years_incentive_amount = calculation.service_years_incentive_amount
        snapshot.attendance_adjustment_percentage = (
            calculation.attendance_adjustment_percentage
        )
        snapshot.attendance_adjustment_amount = calculation.attendance_adjustment_amount
        snapshot.gross_salary = calculation.gross_salary
        snapshot.absence_days = calculation.absence_days
        snapshot.years_of_service = calculation.years_of_service
        snapshot.calculation_version = self.settings.engine_version
        snapshot.inputs_fingerprint = self.calculator.inputs_fingerprint(calculation)
        snapshot.calculated_at = utc_now()

        await self.session.flush()
        return snapshot

    async def snapshot_exists(self, employee_id: UUID, year: int, month: int) -> bool:
        return await self._find_snapshot(employee_id, year, month) is not None

    async def _find_snapshot(
        self, employee_id: UUID, year: int, month: int
    ) -> PayrollSnapshot | None:
        result = await self.session.execute(
            select(PayrollSnapshot).where(
                PayrollSnapshot.employee_id == employee_id,
                PayrollSnapshot.year == year,
                PayrollSnapshot.month == month,
            )
        )
        return result.scalar_one_or_none()

    async def _delete_stale_snapshots(
        self, year: int, month: int, keep: set[UUID]
    ) -> int:
        stmt = delete(PayrollSnapshot).where(
            PayrollSnapshot.year == year,
            PayrollSnapshot.month == month,
        )
        if keep:
            stmt = stmt.where(PayrollSnapshot.employee_id.not_in(list(keep)))
        result = await self.session.execute(
            stmt, execution_options={"synchronize_session": False}
        )
        return result.rowcount or 0

    # ------------------------------------------------------------------
    # Retrieval (reads only, never recalculates)
    # ------------------------------------------------------------------

    async def query_snapshots(
        self,
        year: int | None = None,
        month: int | None = None,
        employee_id: UUID | None = None,
        department_id: UUID | None = None,
    ) -> Sequence[PayrollSnapshot]:
        """Snapshots of non-deleted employees matching every given filter."""
        query = (
            select(PayrollSnapshot)
            .join(Employee, Employee.employee_id == PayrollSnapshot.employee_id)
            .options(
                selectinload(PayrollSnapshot.employee).selectinload(Employee.department)
            )
            .where(Employee.is_deleted.is_(False))
        )
        if year is not None:
            query = query.where(PayrollSnapshot.year == year)
        if month is not None:
            query = query.where(PayrollSnapshot.month == month)
        if employee_id is not None:
            query = query.where(PayrollSnapshot.employee_id == employee_id)
        if department_id is not None:
            query = query.where(Employee.department_id == department_id)

        query = query.order_by(
            PayrollSnapshot.year.desc(),
            PayrollSnapshot.month.desc(),
            Employee.employee_number,
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def get_snapshots(self, year: int, month: int) -> Sequence[PayrollSnapshot]:
        validate_period(year, month)
        return await self.query_snapshots(year=year, month=month)

    async def get_snapshots_for_employee(self, employee_id: UUID) -> Sequence[PayrollSnapshot]:
        await self.calculator.employees.require(employee_id)
        return await self.query_snapshots(employee_id=employee_id)

    async def get_snapshot(self, employee_id: UUID, year: int, month: int) -> PayrollSnapshot:
        validate_period(year, month)
        snapshots = await self.query_snapshots(
            year=year, month=month, employee_id=employee_id
        )
        if not snapshots:
            raise NotFoundError("PayrollSnapshot", f"{employee_id}/{year:04d}-{month:02d}")
        return snapshots[0]

    async def get_snapshots_by_department(
        self, department_id: UUID, year: int, month: int
    ) -> Sequence[PayrollSnapshot]:
        validate_period(year, month)
        if await self.session.get(Department, department_id) is None:
            raise NotFoundError("Department", department_id)
        return await self.query_snapshots(
            year=year, month=month, department_id=department_id
        )
