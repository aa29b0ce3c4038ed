"""
Summary e-mail rendering: placeholder substitution plus an HTML
table with one row per due item.
"""

import re
from dataclasses import dataclass

from django.conf import settings
from django.utils import dateformat
from django.utils.html import format_html, format_html_join

from .items import Counts

PLACEHOLDER_RE = re.compile(r"\{+(totalCount|expiringCount|expiredCount|reportDate)\}+")

TEST_PREFIX = "[TEST] "

COLOR_OVERDUE = "#ef4444"
COLOR_SOON = "#f59e0b"
COLOR_LATER = "#22c55e"
SOON_DAYS = 7

CELL_STYLE = "border: 1px solid #e5e7eb; padding: 10px;"
BADGE_STYLE = "background-color: {}; color: white; padding: 2px 8px; border-radius: 4px; font-size: 12px;"


@dataclass(frozen=True)
class RenderedMessage:
    subject: str
    body: str


def format_date(value):
    return dateformat.format(value, settings.REMINDER_DATE_FORMAT)


def count_items(due_items):
    expired = sum(1 for d in due_items if d.days_until < 0)
    return Counts(
        total=len(due_items),
        expiring=len(due_items) - expired,
        expired=expired,
    )


def substitute(text, counts, report_date):
    values = {
        "totalCount": str(counts.total),
        "expiringCount": str(counts.expiring),
        "expiredCount": str(counts.expired),
        "reportDate": report_date,
    }
    return PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], text or "")


def days_label(days):
    unit = "day" if abs(days) == 1 else "days"
    if days < 0:
        return f"{abs(days)} {unit} overdue"
    return f"{days} {unit}"


def badge_color(days):
    if days < 0:
        return COLOR_OVERDUE
    if days <= SOON_DAYS:
        return COLOR_SOON
    return COLOR_LATER


# ============================================================
# TABLE
# ============================================================

def _row(due):
    item = due.item
    return (
        item.subject_name,
        item.detail or "-",
        item.type_name,
        item.facility or "-",
        format_date(item.target_date),
        badge_color(due.days_until),
        days_label(due.days_until),
    )


def render_table(due_items, columns, empty_message="Nothing to report."):
    if not due_items:
        return format_html("<p>{}</p>", empty_message)

    header = format_html_join(
        "",
        '<th style="' + CELL_STYLE + ' text-align: left;">{}</th>',
        (
            (label,)
            for label in (
                columns.subject,
                columns.detail,
                columns.type,
                columns.facility,
                columns.date,
                columns.days,
            )
        ),
    )

    rows = format_html_join(
        "\n",
        "<tr>"
        '<td style="' + CELL_STYLE + '">{}</td>'
        '<td style="' + CELL_STYLE + '">{}</td>'
        '<td style="' + CELL_STYLE + '">{}</td>'
        '<td style="' + CELL_STYLE + '">{}</td>'
        '<td style="' + CELL_STYLE + '">{}</td>'
        '<td style="' + CELL_STYLE + ' text-align: center;">'
        '<span style="' + BADGE_STYLE + '">{}</span>'
        "</td>"
        "</tr>",
        (_row(due) for due in due_items),
    )

    return format_html(
        '<table style="border-collapse: collapse; width: 100%; margin-top: 20px;">'
        '<thead><tr style="background-color: #f3f4f6;">{}</tr></thead>'
        "<tbody>\n{}\n</tbody>"
        "</table>",
        header,
        rows,
    )


# ============================================================
# MESSAGE
# ============================================================

def render_message(subject_template, body_template, due_items, columns, today,
                   test_mode=False, empty_message="Nothing to report."):
    counts = count_items(due_items)
    report_date = format_date(today)

    subject = substitute(subject_template, counts, report_date)
    if test_mode:
        subject = TEST_PREFIX + subject

    body = substitute(body_template, counts, report_date).replace("\n", "<br>")
    body += render_table(due_items, columns, empty_message)

    return RenderedMessage(subject=subject, body=body)
