from __future__ import annotations

import base64
import json
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import Settings
from .logging_utils import get_logger
from .models import AccountRecord

logger = get_logger("metrics")

UPLOAD_METRIC = "upload"
DOWNLOAD_METRIC = "download"
KNOWN_METRICS = (UPLOAD_METRIC, DOWNLOAD_METRIC)

GRAPH_PERIOD_SECONDS = 3600
GRAPH_STAT = "Minimum"
GRAPH_START = "-P10M"


class MetricsError(Exception):
    pass


def _parse_rate(name: str, value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise MetricsError(f"failed to parse {name}={value!r}, missing value?") from exc


class MetricsSender:
    """Pushes line rates to CloudWatch and pulls back history graphs."""

    def __init__(self, client: Any, *, namespace: str, graph_title: str) -> None:
        self._client = client
        self.namespace = namespace
        self.graph_title = graph_title

    @classmethod
    def from_settings(cls, settings: Settings) -> "MetricsSender":
        try:
            session = boto3.Session(profile_name=settings.aws_profile or None)
            client = session.client("cloudwatch", region_name=settings.aws_region)
        except BotoCoreError as exc:
            raise MetricsError(f"could not create AWS session: {exc}") from exc
        return cls(client, namespace=settings.metrics_namespace, graph_title=settings.graph_title)

    def put_rates(self, record: AccountRecord) -> None:
        # rx is what the line sends (upload), tx what it receives (download)
        upload = _parse_rate("rx_rate", record.rx_rate)
        download = _parse_rate("tx_rate", record.tx_rate)
        try:
            self._client.put_metric_data(
                Namespace=self.namespace,
                MetricData=[
                    {"MetricName": UPLOAD_METRIC, "Unit": "Bits/Second", "Value": upload, "Dimensions": []},
                    {"MetricName": DOWNLOAD_METRIC, "Unit": "Bits/Second", "Value": download, "Dimensions": []},
                ],
            )
        except (BotoCoreError, ClientError) as exc:
            raise MetricsError(f"failed to put metric data: {exc}") from exc
        logger.info("Put rates namespace=%s upload=%s download=%s", self.namespace, upload, download)

    def widget_definition(self, metric: str) -> Dict[str, Any]:
        return {
            "metrics": [
                [self.namespace, metric, {"period": GRAPH_PERIOD_SECONDS, "stat": GRAPH_STAT}],
            ],
            "yAxis": {"left": {"min": 0}},
            "start": GRAPH_START,
            "title": self.graph_title.format(metric=metric),
        }

    def widget_image(self, metric: str) -> bytes:
        if metric not in KNOWN_METRICS:
            raise MetricsError(f"unknown metric {metric!r}")

        logger.info("Creating plot metric=%s", metric)
        try:
            response = self._client.get_metric_widget_image(
                MetricWidget=json.dumps(self.widget_definition(metric)),
                OutputFormat="png",
            )
        except (BotoCoreError, ClientError) as exc:
            raise MetricsError(f"failed to retrieve widget image for {metric}: {exc}") from exc
        return response["MetricWidgetImage"]

    def widget_image_base64(self, metric: str) -> str:
        return base64.b64encode(self.widget_image(metric)).decode("ascii")


def build_sender(settings: Settings) -> Optional[MetricsSender]:
    """A sender when metrics are switched on, otherwise ``None``."""
    if not settings.metrics_enabled:
        return None
    return MetricsSender.from_settings(settings)
