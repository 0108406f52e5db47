from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .anomalies.mysql_anomaly_repository import MySQLAnomalyRepository
from .anomalies.repository import AnomalyRepository
from .anomalies.service import AnomalyService
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import (
    MySQLBreakRepository,
    MySQLClockEventRepository,
    MySQLOvertimeRepository,
)
from .attendance.repository import BreakRepository, ClockEventRepository, OvertimeRepository
from .attendance.service import AttendanceService
from .core.settings import TimbratureSettings
from .corrections.mysql_correction_repository import MySQLCorrectionRepository
from .corrections.repository import CorrectionRepository
from .corrections.service import CorrectionService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_directory_repository import MySQLDirectoryRepository
from .employees.repository import DirectoryRepository
from .hours.service import HoursService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .wellbeing.service import WellbeingService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    settings: TimbratureSettings

    shifts_repo: ShiftRepository
    directory_repo: DirectoryRepository
    clock_events_repo: ClockEventRepository
    breaks_repo: BreakRepository
    overtime_repo: OvertimeRepository
    anomalies_repo: AnomalyRepository
    corrections_repo: CorrectionRepository

    hours_service: HoursService
    attendance_service: AttendanceService
    anomaly_service: AnomalyService
    correction_service: CorrectionService
    wellbeing_service: WellbeingService


def assemble(
    *,
    shifts_repo: ShiftRepository,
    directory_repo: DirectoryRepository,
    clock_events_repo: ClockEventRepository,
    breaks_repo: BreakRepository,
    overtime_repo: OvertimeRepository,
    anomalies_repo: AnomalyRepository,
    corrections_repo: CorrectionRepository,
    settings: Optional[TimbratureSettings] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL in the app, fakes in tests)."""

    settings = settings or TimbratureSettings()

    hours_service = HoursService(shifts_repo, clock_events_repo, breaks_repo, corrections_repo)
    attendance_service = AttendanceService(
        shifts_repo,
        directory_repo,
        clock_events_repo,
        breaks_repo,
        overtime_repo,
        hours_service,
        settings=settings,
        strategy_factory=AttendanceStrategyFactory(),
    )
    anomaly_service = AnomalyService(
        shifts_repo,
        directory_repo,
        clock_events_repo,
        anomalies_repo,
        hours_service,
        settings=settings,
    )
    correction_service = CorrectionService(shifts_repo, clock_events_repo, corrections_repo, settings=settings)
    wellbeing_service = WellbeingService(hours_service, directory_repo, settings=settings)

    return Container(
        conn=conn,
        settings=settings,
        shifts_repo=shifts_repo,
        directory_repo=directory_repo,
        clock_events_repo=clock_events_repo,
        breaks_repo=breaks_repo,
        overtime_repo=overtime_repo,
        anomalies_repo=anomalies_repo,
        corrections_repo=corrections_repo,
        hours_service=hours_service,
        attendance_service=attendance_service,
        anomaly_service=anomaly_service,
        correction_service=correction_service,
        wellbeing_service=wellbeing_service,
    )


def build_container(*, db_config: dict, settings: Optional[TimbratureSettings] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return assemble(
        shifts_repo=MySQLShiftRepository(conn),
        directory_repo=MySQLDirectoryRepository(conn),
        clock_events_repo=MySQLClockEventRepository(conn),
        breaks_repo=MySQLBreakRepository(conn),
        overtime_repo=MySQLOvertimeRepository(conn),
        anomalies_repo=MySQLAnomalyRepository(conn),
        corrections_repo=MySQLCorrectionRepository(conn),
        settings=settings,
        conn=conn,
    )
