"""
Survey Analytics - API Endpoints.

REST API for questionnaire definitions, survey submission, public
dashboards and the bearer-authenticated admin surface.

Architecture Layer: Infrastructure (API)
Principles: Clean API Design, Request Validation, Explicit Capabilities
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field
import structlog

from .domain.aggregations import TimeWindow
from .domain.collector import ResponseCollector
from .domain.dashboard import (
    DashboardService, MentalHealthDashboard, PhobiaDashboard, PhobiaOverviewDashboard,
)
from .domain.questionnaires import PHOBIA_CATALOG, questions_for
from .domain.scoring import phobia_guidance, wellness_recommendations
from .domain.summary import AdminSummary, AdminSummaryComposer
from .exceptions import SurveyError, ValidationError
from .export import ExportFormat, ExportService
from .infrastructure.repository import RecordStore
from .schemas import PhobiaType, RiskLevel, SurveyType
from .security import AdminCapability, IdentityProvider

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/surveys", tags=["surveys"])

_bearer_scheme = HTTPBearer(auto_error=False)

_record_store: RecordStore | None = None
_dashboard_service: DashboardService | None = None
_summary_composer: AdminSummaryComposer | None = None
_export_service: ExportService | None = None
_identity_provider: IdentityProvider | None = None


def _require(dependency: Any, name: str) -> Any:
    if dependency is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name} not initialized",
        )
    return dependency


def get_store() -> RecordStore:
    """Dependency to get the record store."""
    return _require(_record_store, "Record store")


def get_dashboard_service() -> DashboardService:
    """Dependency to get the dashboard service."""
    return _require(_dashboard_service, "Dashboard service")


def get_summary_composer() -> AdminSummaryComposer:
    """Dependency to get the admin summary composer."""
    return _require(_summary_composer, "Summary composer")


def get_export_service() -> ExportService:
    """Dependency to get the export service."""
    return _require(_export_service, "Export service")


def get_identity_provider() -> IdentityProvider:
    """Dependency to get the identity provider."""
    return _require(_identity_provider, "Identity provider")


def set_dependencies(
    store: RecordStore | None,
    dashboard_service: DashboardService | None,
    summary_composer: AdminSummaryComposer | None,
    export_service: ExportService | None,
    identity_provider: IdentityProvider | None,
) -> None:
    """Set global dependencies for API routes."""
    global _record_store, _dashboard_service, _summary_composer, _export_service, _identity_provider
    _record_store = store
    _dashboard_service = dashboard_service
    _summary_composer = summary_composer
    _export_service = export_service
    _identity_provider = identity_provider


async def get_admin_capability(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> AdminCapability | None:
    """Resolve the bearer token to an admin capability, or None when absent or invalid."""
    token = credentials.credentials if credentials else None
    return provider.authenticate(token)


def _raise_http(error: SurveyError) -> NoReturn:
    headers = {"WWW-Authenticate": "Bearer"} if error.http_status == status.HTTP_401_UNAUTHORIZED else None
    raise HTTPException(status_code=error.http_status, detail=error.to_dict()["error"], headers=headers)


class MentalHealthSubmission(BaseModel):
    """Request model for a mental-wellness submission."""
    answers: dict[str, int] = Field(description="Question id to response value (1-5)")
    region: str = Field(default="", max_length=200)
    age_group: str = Field(default="")


class PhobiaSubmission(MentalHealthSubmission):
    """Request model for a phobia-intensity submission."""
    duration_months: int | None = Field(default=None)


class SubmissionResponse(BaseModel):
    """Response model for an accepted submission."""
    survey_type: SurveyType
    phobia_type: PhobiaType | None = None
    score: int
    category: str
    guidance: list[str]


class QuestionnaireResponse(BaseModel):
    """Response model for a question set."""
    survey_type: SurveyType
    questions: list[dict[str, Any]]


async def _collect_and_submit(collector: ResponseCollector, submission: MentalHealthSubmission,
                              duration_months: int | None = None) -> SubmissionResponse:
    try:
        for question in questions_for(collector.survey_type):
            if question.id not in submission.answers:
                break
            collector.answer(submission.answers[question.id])
        pending = collector.current_question
        if pending is not None:
            raise ValidationError("Response set is incomplete", field=pending.id)
        collector.set_demographics(submission.region, submission.age_group, duration_months)
        result = await collector.submit()
    except SurveyError as e:
        _raise_http(e)

    if collector.survey_type == SurveyType.MENTAL_HEALTH:
        guidance = wellness_recommendations(result.score)
    else:
        guidance = phobia_guidance(RiskLevel(result.category))
    return SubmissionResponse(
        survey_type=collector.survey_type,
        phobia_type=collector.phobia_type,
        score=result.score,
        category=result.label,
        guidance=guidance,
    )


@router.get("/questionnaires/mental-health", response_model=QuestionnaireResponse)
async def get_mental_health_questionnaire() -> QuestionnaireResponse:
    """Mental-wellness question set."""
    return QuestionnaireResponse(
        survey_type=SurveyType.MENTAL_HEALTH,
        questions=[q.to_dict() for q in questions_for(SurveyType.MENTAL_HEALTH)],
    )


@router.get("/questionnaires/phobia", response_model=QuestionnaireResponse)
async def get_phobia_questionnaire() -> QuestionnaireResponse:
    """Phobia-intensity question set, shared by all variants."""
    return QuestionnaireResponse(
        survey_type=SurveyType.PHOBIA,
        questions=[q.to_dict() for q in questions_for(SurveyType.PHOBIA)],
    )


@router.get("/phobia-types", response_model=list[dict[str, Any]])
async def list_phobia_types() -> list[dict[str, Any]]:
    """Phobia variant catalog."""
    return [PHOBIA_CATALOG[p].to_dict() for p in PhobiaType]


@router.post("/mental-health", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_mental_health(
    submission: MentalHealthSubmission,
    store: RecordStore = Depends(get_store),
) -> SubmissionResponse:
    """Score and persist a mental-wellness response set."""
    collector = ResponseCollector(SurveyType.MENTAL_HEALTH, store)
    return await _collect_and_submit(collector, submission)


@router.post("/phobia/{phobia_type}", response_model=SubmissionResponse,
             status_code=status.HTTP_201_CREATED)
async def submit_phobia(
    phobia_type: PhobiaType,
    submission: PhobiaSubmission,
    store: RecordStore = Depends(get_store),
) -> SubmissionResponse:
    """Score and persist a phobia-intensity response set."""
    collector = ResponseCollector(SurveyType.PHOBIA, store, phobia_type=phobia_type)
    return await _collect_and_submit(collector, submission, submission.duration_months)


@router.get("/dashboard/mental-health", response_model=MentalHealthDashboard)
async def get_mental_health_dashboard(
    window: TimeWindow = Query(default=TimeWindow.ALL),
    dashboards: DashboardService = Depends(get_dashboard_service),
) -> MentalHealthDashboard:
    """Mental-wellness statistics for a time window."""
    logger.info("dashboard_request", survey_type="mental_health", window=window.value)
    return await dashboards.mental_health(window)


@router.get("/dashboard/phobia", response_model=PhobiaOverviewDashboard)
async def get_phobia_overview(
    window: TimeWindow = Query(default=TimeWindow.ALL),
    dashboards: DashboardService = Depends(get_dashboard_service),
) -> PhobiaOverviewDashboard:
    """Statistics for every phobia variant with responses."""
    logger.info("dashboard_request", survey_type="phobia", window=window.value)
    return await dashboards.phobia_overview(window)


@router.get("/dashboard/phobia/{phobia_type}", response_model=PhobiaDashboard)
async def get_phobia_dashboard(
    phobia_type: PhobiaType,
    window: TimeWindow = Query(default=TimeWindow.ALL),
    dashboards: DashboardService = Depends(get_dashboard_service),
) -> PhobiaDashboard:
    """Statistics for a single phobia variant."""
    logger.info("dashboard_request", survey_type="phobia", phobia_type=phobia_type.value,
                window=window.value)
    return await dashboards.phobia(phobia_type, window)


@router.get("/admin/summary", response_model=AdminSummary)
async def get_admin_summary(
    since: datetime | None = Query(default=None, description="Only count records submitted since (UTC)"),
    capability: AdminCapability | None = Depends(get_admin_capability),
    composer: AdminSummaryComposer = Depends(get_summary_composer),
) -> AdminSummary:
    """Admin overview across all survey collections."""
    try:
        return await composer.compose(capability, since=since)
    except SurveyError as e:
        _raise_http(e)


@router.get("/admin/export/{data_type}")
async def export_data(
    data_type: str,
    format: ExportFormat = Query(default=ExportFormat.CSV),
    capability: AdminCapability | None = Depends(get_admin_capability),
    exporter: ExportService = Depends(get_export_service),
) -> Response:
    """Download a raw survey table as CSV or JSON."""
    try:
        payload = await exporter.export(capability, data_type, format)
    except SurveyError as e:
        _raise_http(e)
    return Response(
        content=payload.content,
        media_type=payload.media_type,
        headers={"Content-Disposition": f'attachment; filename="{payload.filename}"'},
    )
