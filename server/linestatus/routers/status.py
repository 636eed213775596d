from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from ..config import Settings, get_settings
from ..fetcher import FetchError, fetch_account_info
from ..logging_utils import get_logger
from ..metrics import DOWNLOAD_METRIC, KNOWN_METRICS, UPLOAD_METRIC, MetricsError, MetricsSender, build_sender
from ..models import AccountRecord
from ..report import render_report

router = APIRouter(tags=["status"])
logger = get_logger("status")


def _sender_or_none(settings: Settings) -> Optional[MetricsSender]:
    try:
        return build_sender(settings)
    except MetricsError as exc:
        logger.error("Failed to set up CloudWatch sender: %s", exc)
        return None


def _graph_or_none(sender: MetricsSender, metric: str) -> Optional[str]:
    try:
        return sender.widget_image_base64(metric)
    except MetricsError as exc:
        logger.error("Failed to retrieve CloudWatch image metric=%s: %s", metric, exc)
        return None


def _record_and_plot(record: AccountRecord, settings: Settings) -> tuple:
    sender = _sender_or_none(settings)
    if sender is None:
        return None, None

    try:
        sender.put_rates(record)
    except MetricsError as exc:
        logger.error("Failed to log rates to CloudWatch: %s", exc)

    return _graph_or_none(sender, UPLOAD_METRIC), _graph_or_none(sender, DOWNLOAD_METRIC)


@router.get("/favicon.ico", include_in_schema=False)
def favicon() -> Response:
    return PlainTextResponse("404 page not found", status_code=status.HTTP_404_NOT_FOUND)


@router.get("/", response_class=HTMLResponse, summary="Render the line status report")
def line_status(settings: Settings = Depends(get_settings)) -> Response:
    try:
        record = fetch_account_info(settings.credentials(), url=settings.account_info_url)
    except FetchError as exc:
        logger.error("Unable to retrieve account info: %s", exc, exc_info=exc.__cause__ is not None)
        return PlainTextResponse(str(exc), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    upload_image, download_image = _record_and_plot(record, settings)

    logger.info(
        "Line info upload(rx)=%s download(tx)=%s tx_rate_adjusted=%s",
        record.rx_rate,
        record.tx_rate,
        record.tx_rate_adjusted,
    )
    return HTMLResponse(render_report(record, upload_image=upload_image, download_image=download_image))


@router.get("/graphs/{metric}.png", summary="CloudWatch history graph for one rate")
def graph(metric: str, settings: Settings = Depends(get_settings)) -> Response:
    if metric not in KNOWN_METRICS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown metric")

    if not settings.metrics_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Metrics are not enabled")

    sender = _sender_or_none(settings)
    if sender is None:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Metrics backend unavailable")

    try:
        image = sender.widget_image(metric)
    except MetricsError as exc:
        logger.error("Failed to retrieve CloudWatch image metric=%s: %s", metric, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to retrieve graph") from exc

    return Response(content=image, media_type="image/png")
