"""
Employee master routes. Deleting deactivates; records are never removed.
"""
from fastapi import APIRouter, Depends, Query, Path, status
from typing import List, Dict, Any, Optional
import logging

from texawave.database import Database, Collections
from texawave.repositories.employee_repository import EmployeeRepository
from texawave.services.employee_service import EmployeeService
from texawave.models.employee import EmployeeCreate, EmployeeUpdate, EmployeeStats
from texawave.utils.dependencies import get_current_user, get_current_admin_user, pagination_params

logger = logging.getLogger(__name__)

router = APIRouter()


async def get_employee_service() -> EmployeeService:
    return EmployeeService(EmployeeRepository(Database.get_db()[Collections.EMPLOYEES]))


@router.post(
    "",
    response_model=Dict[str, str],
    status_code=status.HTTP_201_CREATED,
    summary="Create employee",
    description="Create a new employee record"
)
async def create_employee(
    employee_data: EmployeeCreate,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service)
) -> Dict[str, str]:
    """The code is stored upper-cased; a taken code answers 409."""
    employee_id = await service.create_employee(
        employee_data=employee_data,
        user_id=current_user["user_id"]
    )

    return {
        "message": "Employee created successfully",
        "employee_id": employee_id
    }


@router.get(
    "",
    response_model=List[Dict[str, Any]],
    summary="List employees",
    description="Get list of employees with optional filters"
)
async def list_employees(
    current_user: Dict[str, Any] = Depends(get_current_user),
    pagination: Dict[str, Any] = Depends(pagination_params),
    department: Optional[str] = Query(None, description="Filter by department"),
    status_filter: Optional[str] = Query(None, alias="status", description="Active, Inactive or Resigned"),
    search: Optional[str] = Query(None, description="Search by name or employee code"),
    service: EmployeeService = Depends(get_employee_service)
) -> List[Dict[str, Any]]:
    return await service.list_employees(
        department=department,
        status=status_filter,
        search=search,
        skip=pagination["skip"],
        limit=pagination["limit"]
    )


@router.get(
    "/stats",
    response_model=EmployeeStats,
    summary="Get employee statistics",
    description="Headcount by department and monthly payroll"
)
async def get_employee_stats(
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service)
) -> Dict[str, Any]:
    return await service.get_employee_stats()


@router.get(
    "/{employee_id}",
    response_model=Dict[str, Any],
    summary="Get employee",
    description="Get employee by ID"
)
async def get_employee(
    employee_id: str = Path(..., description="Employee ID"),
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service)
) -> Dict[str, Any]:
    return await service.get_employee(employee_id)


@router.put(
    "/{employee_id}",
    status_code=status.HTTP_200_OK,
    summary="Update employee",
    description="Update employee record"
)
async def update_employee(
    employee_id: str = Path(..., description="Employee ID"),
    update_data: EmployeeUpdate = ...,
    current_user: Dict[str, Any] = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service)
) -> Dict[str, str]:
    """Partial update. Leaving (Inactive or Resigned) stamps relieving_date when absent."""
    await service.update_employee(employee_id, update_data)
    return {"message": "Employee updated successfully"}


@router.delete(
    "/{employee_id}",
    status_code=status.HTTP_200_OK,
    summary="Deactivate employee (Admin only)",
    description="Mark employee Inactive; history is kept"
)
async def delete_employee(
    employee_id: str = Path(..., description="Employee ID"),
    admin_user: Dict[str, Any] = Depends(get_current_admin_user),
    service: EmployeeService = Depends(get_employee_service)
) -> Dict[str, str]:
    logger.warning(f"Admin {admin_user['user_id']} deactivating employee: {employee_id}")
    await service.delete_employee(employee_id)
    return {"message": "Employee deactivated successfully"}
