'''
API endpoints for teachers, enrollments, guardian/sibling relationships and billing assignments.
'''
from typing import Annotated, Any
from uuid import UUID
from fastapi import APIRouter, Depends, status

from ..models import roster as roster_models
from ..services.roster_service import RosterService

class RosterAPI:
    """
    A class to encapsulate the validated roster mutation endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            tags=["Roster"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/teachers",
                self.create_teacher,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=roster_models.TeacherRead)
        self.router.add_api_route(
                "/teacher-assignments",
                self.assign_teacher,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=roster_models.TeacherAssignmentRead)
        self.router.add_api_route(
                "/enrollments",
                self.create_enrollment,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=roster_models.EnrollmentRead)
        self.router.add_api_route(
                "/guardian-relationships",
                self.create_guardian_relationship,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=roster_models.GuardianRelationshipRead)
        self.router.add_api_route(
                "/siblings/{person_id}",
                self.link_siblings,
                methods=["POST"],
                response_model=roster_models.LinkSiblingsResult)
        self.router.add_api_route(
                "/siblings/{person_id}",
                self.list_siblings,
                methods=["GET"],
                response_model=list[roster_models.SiblingRead])
        self.router.add_api_route(
                "/siblings/{person_id}/suggestions",
                self.suggest_siblings,
                methods=["GET"],
                response_model=list[roster_models.SiblingSuggestion])
        self.router.add_api_route(
                "/billing-assignments",
                self.upsert_billing_assignment,
                methods=["PUT"],
                response_model=roster_models.BillingAssignmentRead)

    async def create_teacher(
        self,
        teacher_data: roster_models.TeacherCreate,
        roster_service: Annotated[RosterService, Depends(RosterService)]
    ) -> Any:
        """
        Promotes an existing person to teacher.
        """
        return await roster_service.create_teacher(teacher_data.person_id)

    async def assign_teacher(
        self,
        assignment_data: roster_models.TeacherAssignmentCreate,
        roster_service: Annotated[RosterService, Depends(RosterService)]
    ) -> Any:
        """
        Assigns a teacher to a Dugsi student for one shift.
        """
        return await roster_service.assign_teacher(
            assignment_data.program_profile_id,
            assignment_data.teacher_id,
            assignment_data.shift
        )

    async def create_enrollment(
        self,
        enrollment_data: roster_models.EnrollmentCreate,
        roster_service: Annotated[RosterService, Depends(RosterService)]
    ) -> Any:
        return await roster_service.create_enrollment(**enrollment_data.model_dump())

    async def create_guardian_relationship(
        self,
        relationship_data: roster_models.GuardianRelationshipCreate,
        roster_service: Annotated[RosterService, Depends(RosterService)]
    ) -> Any:
        return await roster_service.create_guardian_relationship(
            relationship_data.guardian_id,
            relationship_data.dependent_id,
            relationship_data.role
        )

    async def link_siblings(
        self,
        person_id: UUID,
        link_data: roster_models.SiblingLinkRequest,
        roster_service: Annotated[RosterService, Depends(RosterService)]
    ) -> Any:
        """
        Links several siblings at once. Individual failures are reported in
        the response body, not as an error status.
        """
        return await roster_service.link_siblings(person_id, link_data.sibling_ids)

    async def list_siblings(
        self,
        person_id: UUID,
        roster_service: Annotated[RosterService, Depends(RosterService)]
    ) -> list[Any]:
        return await roster_service.get_siblings(person_id)

    async def suggest_siblings(
        self,
        person_id: UUID,
        roster_service: Annotated[RosterService, Depends(RosterService)]
    ) -> list[Any]:
        """
        Lists people who may be siblings of this person, most likely first.
        Nothing is linked until the suggestion is confirmed through POST /siblings.
        """
        return await roster_service.detect_potential_siblings(person_id)

    async def upsert_billing_assignment(
        self,
        billing_data: roster_models.BillingAssignmentUpsert,
        roster_service: Annotated[RosterService, Depends(RosterService)]
    ) -> Any:
        """
        Creates or updates how much of a subscription covers one profile.
        Over-allocation is logged, never rejected.
        """
        return await roster_service.upsert_billing_assignment(**billing_data.model_dump())

# Instantiate the class and export its router
roster_api = RosterAPI()
router = roster_api.router
