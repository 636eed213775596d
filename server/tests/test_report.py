import pytest

from linestatus.models import AccountRecord
from linestatus.report import format_quota, format_rate, render_report


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("100000000", "100.00 Mb/s"),
        ("79999000", "80.00 Mb/s"),
        ("1234567", "1.23 Mb/s"),
        ("", "0.00 Mb/s"),
        ("n/a", "0.00 Mb/s"),
        ("1_000_000", "0.00 Mb/s"),
        (" 1000000 ", "0.00 Mb/s"),
        ("nan", "0.00 Mb/s"),
        ("inf", "0.00 Mb/s"),
        ("1e400", "0.00 Mb/s"),
        ("1.5e6", "1.50 Mb/s"),
        ("-2000000", "-2.00 Mb/s"),
    ],
)
def test_format_rate(raw, expected):
    assert format_rate(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("500000000000", "500 GB"),
        ("1999999999", "1 GB"),
        ("999999999", "0 GB"),
        ("-1500000000", "-1 GB"),
        ("", "0 GB"),
        ("12.5", "0 GB"),
        ("lots", "0 GB"),
    ],
)
def test_format_quota_truncates(raw, expected):
    assert format_quota(raw) == expected


def _record(**overrides) -> AccountRecord:
    fields = {
        "ID": "12345",
        "login": "user@a.1",
        "postcode": "TR1 1AA",
        "tx_rate": "79999000",
        "rx_rate": "19999000",
        "tx_rate_adjusted": "76000000",
        "quota_monthly": "500000000000",
        "quota_remaining": "123456789012",
        "quota_timestamp": "2026-10-01 00:00:00",
    }
    fields.update(overrides)
    return AccountRecord.model_validate(fields)


def test_render_report_formats_rates_and_quota():
    html = render_report(_record())

    assert "80.00 Mb/s" in html
    assert "20.00 Mb/s" in html
    assert "76.00 Mb/s" in html
    assert "123 GB of 500 GB" in html
    assert "TR1 1AA" in html
    assert "<img" not in html


def test_render_report_embeds_graphs():
    html = render_report(_record(), upload_image="VVBMT0FE", download_image="RE9XTkxPQUQ=")

    assert 'id="upload-graph"' in html
    assert "data:image/png;base64,VVBMT0FE" in html
    assert "data:image/png;base64,RE9XTkxPQUQ=" in html


def test_render_report_escapes_upstream_text():
    html = render_report(_record(login="<script>alert(1)</script>"))

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html


def test_render_report_with_unknown_numbers():
    html = render_report(_record(tx_rate="", quota_remaining=""))

    assert "0.00 Mb/s" in html
    assert "0 GB of 500 GB" in html
