"""Endpoints implementing the dashboard data source contract."""

import logging

from fastapi import APIRouter, Depends

from stackdriver_datasource.api.dependencies import get_datasource
from stackdriver_datasource.datasource import StackdriverDatasource
from stackdriver_datasource.schema import (
    Annotation,
    AnnotationQueryRequest,
    DataQueryRequest,
    DataQueryResponse,
    MetricDescriptor,
    MetricFindValue,
    SelectableValue,
    TestResult,
    VariableQueryData,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/datasource", tags=["datasource"])


@router.post(
    "/query", response_model=DataQueryResponse, response_model_exclude_none=True
)
async def query(
    body: DataQueryRequest,
    datasource: StackdriverDatasource = Depends(get_datasource),
) -> DataQueryResponse:
    """Run the panel targets and return dashboard series."""
    return await datasource.query(body)


@router.post(
    "/annotations", response_model=list[Annotation], response_model_exclude_none=True
)
async def annotations(
    body: AnnotationQueryRequest,
    datasource: StackdriverDatasource = Depends(get_datasource),
) -> list[Annotation]:
    """Run an annotation query."""
    return await datasource.annotation_query(body)


@router.post("/variable", response_model=list[MetricFindValue])
async def variable(
    body: VariableQueryData,
    datasource: StackdriverDatasource = Depends(get_datasource),
) -> list[MetricFindValue]:
    """Resolve the options of a template variable."""
    return await datasource.metric_find_query(body)


@router.get("/test", response_model=TestResult)
async def test_connection(
    datasource: StackdriverDatasource = Depends(get_datasource),
) -> TestResult:
    """Check connectivity with the Stackdriver API."""
    return await datasource.test_datasource()


@router.get("/projects", response_model=list[SelectableValue])
async def projects(
    datasource: StackdriverDatasource = Depends(get_datasource),
) -> list[SelectableValue]:
    return await datasource.get_projects()


@router.get("/metric-descriptors", response_model=list[MetricDescriptor])
async def metric_descriptors(
    project: str,
    datasource: StackdriverDatasource = Depends(get_datasource),
) -> list[MetricDescriptor]:
    return await datasource.get_metric_types(project)


@router.get("/slo-services", response_model=list[SelectableValue])
async def slo_services(
    project: str,
    datasource: StackdriverDatasource = Depends(get_datasource),
) -> list[SelectableValue]:
    return await datasource.get_slo_services(project)


@router.get("/slos", response_model=list[SelectableValue])
async def service_level_objectives(
    project: str,
    service: str,
    datasource: StackdriverDatasource = Depends(get_datasource),
) -> list[SelectableValue]:
    return await datasource.get_service_level_objectives(project, service)
