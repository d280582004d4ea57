import logging
import os
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ..core.analytics import AnalyticsService
from ..core.errors import DivisionByZeroError, WindowError
from ..utils.config import Config, ConfigurationError
from ..utils.logging_utils import setup_logging

logger = logging.getLogger(__name__)

app = FastAPI(title="Traffic Analytics API")

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Created on first request
service: Optional[AnalyticsService] = None


class BucketModel(BaseModel):
    name: str
    req: int
    error: int


class NodeModel(BaseModel):
    name: str
    index: int


class LinkModel(BaseModel):
    source: int
    target: int
    value: int


class SankeyModel(BaseModel):
    nodes: List[NodeModel]
    links: List[LinkModel]


class MetricModel(BaseModel):
    subject: str
    description: str
    actual: str
    value: float
    cap: float


class AnalyticsResponse(BaseModel):
    endpointAreaChart: List[BucketModel]
    endpointSankeyChart: SankeyModel
    endpointRadialChart: List[MetricModel]


class ThresholdsResponse(BaseModel):
    RPS: float
    Uptime: float
    Success: float
    Latency: float
    Builders: float
    Inventory: float


def load_config() -> Config:
    """Configuration from the file named by TRAFFIC_ANALYTICS_CONFIG, if any"""
    return Config(os.getenv("TRAFFIC_ANALYTICS_CONFIG"))


def get_service() -> AnalyticsService:
    """Create and cache the analytics service"""
    global service
    if service is not None:
        return service

    try:
        service = AnalyticsService.from_config(load_config())
    except (ConfigurationError, FileNotFoundError) as e:
        logger.error(f"Cannot start analytics service: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e

    logger.info(
        f"Analytics service ready with {len(service.store)} records "
        f"for {len(service.store.hostnames())} hosts"
    )
    return service


@app.get("/manage/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    period: Optional[str] = None,
    host: Optional[str] = None,
    start_date: Optional[float] = Query(None, alias="startDate"),
    end_date: Optional[float] = Query(None, alias="endDate"),
    analytics: AnalyticsService = Depends(get_service),
):
    """Area, sankey and radar chart data for one period"""
    try:
        report = analytics.report(period=period, host=host, start=start_date, end=end_date)
    except WindowError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except DivisionByZeroError as e:
        logger.info(f"No analytics for period={period} host={host}: {e}")
        raise HTTPException(status_code=422, detail=str(e)) from e

    return report.to_dict()


@app.get("/manage/thresholds", response_model=ThresholdsResponse)
async def get_thresholds(analytics: AnalyticsService = Depends(get_service)):
    """Health metric thresholds in effect"""
    return analytics.thresholds.as_dict()


def start():
    """Run the API server with uvicorn"""
    import uvicorn

    config = load_config()
    setup_logging(
        level=config.get("logging.level", "INFO"),
        log_file=config.get("logging.file"),
        json_format=config.get("logging.json_format", False),
        app_name="traffic-analytics",
    )
    uvicorn.run(app, host=config.get("server.host"), port=config.get("server.port"))


if __name__ == "__main__":
    start()
