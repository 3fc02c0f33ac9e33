"""
Bonus router.
Yearly bonus sheet and its Excel export.
"""
from fastapi import APIRouter, Depends, Query, Path
from fastapi.responses import StreamingResponse
from typing import Dict, Any, Optional
import logging

from texawave.database import Database, Collections
from texawave.repositories.attendance_repository import AttendanceRepository
from texawave.repositories.employee_repository import EmployeeRepository
from texawave.services.bonus_service import BonusService
from texawave.utils.dependencies import get_current_user, require_feature

logger = logging.getLogger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


async def get_bonus_service() -> BonusService:
    """Get bonus service with injected dependencies."""
    db = Database.get_db()
    return BonusService(
        AttendanceRepository(db[Collections.ATTENDANCE]),
        EmployeeRepository(db[Collections.EMPLOYEES])
    )


@router.get(
    "/{year}",
    response_model=Dict[str, Any],
    summary="Yearly bonus",
    description="Bonus calculation for every active employee"
)
async def get_bonus_sheet(
    year: int = Path(..., ge=2000, le=2100),
    department: Optional[str] = Query(None, description="Filter by department"),
    search: Optional[str] = Query(None, description="Search by name or employee code"),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: BonusService = Depends(get_bonus_service)
) -> Dict[str, Any]:
    """
    Yearly bonus calculation.

    Leaves per month count Absent and Leave as 1, Half Day as 0.5, and a
    missing record on a working day as absent. Fewer than 30 leaves earn
    one month's gross; otherwise CTC × (355 − leaves) / 355 / 12.

    **Returns:**
    - rows: One row per employee with monthly leaves and bonus figures
    - summary: Totals
    """
    return await service.calculate_year(year, department, search)


@router.get(
    "/{year}/export",
    summary="Export bonus sheet",
    description="Download the yearly bonus sheet as .xlsx",
    dependencies=[Depends(require_feature("excel_export"))]
)
async def export_bonus_sheet(
    year: int = Path(..., ge=2000, le=2100),
    department: Optional[str] = Query(None),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: BonusService = Depends(get_bonus_service)
) -> StreamingResponse:
    output = await service.export_year(year, department)
    headers = {"Content-Disposition": f'attachment; filename="Bonus_Calculation_{year}_Yearly.xlsx"'}
    return StreamingResponse(output, media_type=XLSX_MEDIA_TYPE, headers=headers)
