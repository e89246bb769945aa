'''
Read-side roster listing for the admin dashboard.
'''
from typing import Annotated

from fastapi import Depends

from ..database.queries import RecordQueries
from ..core.payment_health import calculate_payment_health, payment_health_sort_key
from ..models import students as student_models
from ..common.logger import log


class StudentService:
    def __init__(self, queries: Annotated[RecordQueries, Depends(RecordQueries)]):
        self.queries = queries

    async def list_students_with_payment_health(self) -> list[student_models.StudentRead]:
        """
        Every roster row with its derived payment health, most urgent first.
        Ties keep name order.
        """
        students = await self.queries.list_students_with_subscription()

        roster = []
        for student in students:
            snapshot = student_models.StudentSnapshot.model_validate(student)
            roster.append(student_models.StudentRead(
                **snapshot.model_dump(),
                date_of_birth=student.date_of_birth,
                school_name=student.school_name,
                payment_health=calculate_payment_health(snapshot)
            ))

        roster.sort(key=lambda s: (payment_health_sort_key(s.payment_health), s.name.lower()))
        log.info(f"Listed {len(roster)} students with payment health.")
        return roster
