'''
API endpoints for finding and resolving duplicate student records.
'''
from typing import Annotated, Any
from fastapi import APIRouter, Depends

from ..models import students as student_models
from ..services.duplicate_service import DuplicateService

class DuplicatesAPI:
    """
    A class to encapsulate the duplicate detection endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/duplicates",
            tags=["Duplicates"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_duplicate_groups,
                methods=["GET"],
                response_model=list[student_models.DuplicateGroup])
        self.router.add_api_route(
                "/resolve",
                self.resolve_duplicates,
                methods=["POST"],
                response_model=student_models.DuplicateResolutionResult)
        self.router.add_api_route(
                "/batch-resolve",
                self.batch_resolve_duplicates,
                methods=["POST"],
                response_model=student_models.BatchResolutionResult)
        self.router.add_api_route(
                "/check",
                self.check_duplicate,
                methods=["POST"],
                response_model=student_models.DuplicateCheckResult)

    async def list_duplicate_groups(
        self,
        duplicate_service: Annotated[DuplicateService, Depends(DuplicateService)]
    ) -> list[Any]:
        """
        Groups students sharing an email or phone, with the suggested record to keep.
        """
        return await duplicate_service.find_duplicate_groups()

    async def resolve_duplicates(
        self,
        resolution: student_models.DuplicateResolutionRequest,
        duplicate_service: Annotated[DuplicateService, Depends(DuplicateService)]
    ) -> Any:
        return await duplicate_service.resolve_duplicates(
            resolution.keep_id,
            resolution.delete_ids,
            resolution.merge_data
        )

    async def batch_resolve_duplicates(
        self,
        batch_request: student_models.BatchResolutionRequest,
        duplicate_service: Annotated[DuplicateService, Depends(DuplicateService)]
    ) -> Any:
        """
        Resolves several groups; a failing group is reported and the rest still run.
        """
        return await duplicate_service.batch_resolve_duplicates(
            batch_request.duplicate_groups,
            batch_request.merge_data
        )

    async def check_duplicate(
        self,
        check_request: student_models.DuplicateCheckRequest,
        duplicate_service: Annotated[DuplicateService, Depends(DuplicateService)]
    ) -> Any:
        return await duplicate_service.check_duplicate(
            check_request.program,
            email=check_request.email,
            phone=check_request.phone
        )

# Instantiate the class and export its router
duplicates_api = DuplicatesAPI()
router = duplicates_api.router
