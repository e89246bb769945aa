'''
API endpoints for the student roster.
'''
from typing import Annotated, Any
from fastapi import APIRouter, Depends

from ..models import students as student_models
from ..services.student_service import StudentService

class StudentsAPI:
    """
    A class to encapsulate the read-only roster endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/students",
            tags=["Students"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_students,
                methods=["GET"],
                response_model=list[student_models.StudentRead])

    async def list_students(
        self,
        student_service: Annotated[StudentService, Depends(StudentService)]
    ) -> list[Any]:
        """
        Retrieves the roster sorted by payment health, most urgent first.
        """
        return await student_service.list_students_with_payment_health()

# Instantiate the class and export its router
students_api = StudentsAPI()
router = students_api.router
