import math
import re
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .models import AccountRecord

_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

BITS_PER_MEGABIT = 1_000_000
BYTES_PER_GIGABYTE = 1_000_000_000
_INTEGER = re.compile(r"[+-]?[0-9]+")
_DECIMAL = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


def format_rate(num: str) -> str:
    """Bits per second as megabits, e.g. ``"100000000"`` -> ``"100.00 Mb/s"``."""
    value = float(num) if isinstance(num, str) and _DECIMAL.fullmatch(num) else 0.0
    if not math.isfinite(value):
        value = 0.0
    return f"{value / BITS_PER_MEGABIT:.2f} Mb/s"


def format_quota(num: str) -> str:
    """Bytes as whole gigabytes, truncated toward zero."""
    value = int(num) if isinstance(num, str) and _INTEGER.fullmatch(num) else 0
    gigabytes = abs(value) // BYTES_PER_GIGABYTE
    if value < 0:
        gigabytes = -gigabytes
    return f"{gigabytes} GB"


def _build_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape(["html"]),
    )
    env.filters["format_rate"] = format_rate
    env.filters["format_quota"] = format_quota
    return env


_ENV = _build_environment()


def render_report(
    record: AccountRecord,
    *,
    upload_image: Optional[str] = None,
    download_image: Optional[str] = None,
) -> str:
    template = _ENV.get_template("index.html")
    return template.render(info=record, upload_image=upload_image, download_image=download_image)
