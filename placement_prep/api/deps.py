"""
Service providers for route injection.

Routes never build services themselves; tests swap the gateway and the judge
through app.dependency_overrides[get_gateway] / [get_code_judge].
"""

from fastapi import Depends

from placement_prep.services.coding_evaluator import CodingEvaluator
from placement_prep.services.llm_client import CodeJudge, get_code_judge
from placement_prep.services.mongo_service import PersistenceGateway, get_gateway
from placement_prep.services.progress_service import ProgressService
from placement_prep.services.submission_orchestrator import TaskSubmissionOrchestrator


def get_progress_service(gateway: PersistenceGateway = Depends(get_gateway)) -> ProgressService:
    return ProgressService(gateway)


def get_submission_orchestrator(
    gateway: PersistenceGateway = Depends(get_gateway),
    judge: CodeJudge = Depends(get_code_judge)
) -> TaskSubmissionOrchestrator:
    return TaskSubmissionOrchestrator(gateway, CodingEvaluator(judge))
