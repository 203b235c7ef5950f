"""Text and CSV rendering of cookbook reports."""

from __future__ import annotations

import csv
import io
from typing import TextIO

from jinja2 import Template

from src.reporting.errors import ErrorKind
from src.reporting.models import CookbookRecord, CookbooksReport

SUMMARY_TEMPLATE = Template(
    "{{ record.name }} ({{ record.version }}) "
    "{{ record.num_offenses() }} violations, "
    "{{ record.num_correctable() }} auto-correctable, "
    "{{ record.nodes | length }} nodes affected"
    "{% if notice %}\n{{ notice }}{% endif %}"
)

DETAILED_TEMPLATE = Template(
    """
Cookbook: {{ record.name }} ({{ record.version }})
Violations: {{ record.num_offenses() }}
Auto correctable: {{ record.num_correctable() }}
Nodes affected: {{ record.sorted_nodes() | join(', ') if record.nodes else 'none' }}
Files and offenses:
{% for file in record.files if file.offenses %}
 - {{ file.path }}:
{% for offense in file.offenses %}
	{{ ('line ' ~ offense.line ~ ': ') if offense.line else '' }}{{ offense.cop_name }} ({{ offense.correctable | lower }}) {{ offense.message }}
{% endfor %}
{% endfor %}
{% if notice %}
{{ notice }}
{% endif %}
""".strip(),
    trim_blocks=True,
    lstrip_blocks=True,
)

ERROR_SUMMARY_TEMPLATE = Template(
    """
* ERROR(s) DETAILS:
{% for title, records in groups %}
{{ title }}:
{% for record in records %}
 - {{ record.name }} ({{ record.version }}): {{ record.error }}
{% endfor %}
{% endfor %}
""".strip(),
    trim_blocks=True,
    lstrip_blocks=True,
)

ERROR_NOTICES = {
    ErrorKind.DOWNLOAD: "ERROR: could not download cookbook (see end of report)",
    ErrorKind.ANALYSIS: "ERROR: could not run cookstyle (see end of report)",
    ErrorKind.USAGE_LOOKUP: "ERROR: could not determine nodes affected (see end of report)",
}

ERROR_TITLES = {
    ErrorKind.DOWNLOAD: "Cookbook download errors",
    ErrorKind.ANALYSIS: "Cookstyle errors",
    ErrorKind.USAGE_LOOKUP: "Node usage lookup errors",
}

CSV_HEADER = [
    "Cookbook Name",
    "Version",
    "File",
    "Offense",
    "Automatically Correctable",
    "Message",
    "Nodes",
]


def error_notice(record: CookbookRecord) -> str:
    """Inline notice for a failed record, empty for a successful one."""
    error = record.error
    if error is None:
        return ""
    return ERROR_NOTICES[error.kind]


def render_record(record: CookbookRecord, detailed: bool = False) -> str:
    template = DETAILED_TEMPLATE if detailed else SUMMARY_TEMPLATE
    return template.render(record=record, notice=error_notice(record)).rstrip("\n")


def render_cookbooks(
    report: CookbooksReport, skip_unused: bool = False, detailed: bool = False
) -> str:
    """Render every displayable record, one block per cookbook version."""
    separator = "\n\n" if detailed else "\n"
    return separator.join(
        render_record(record, detailed=detailed)
        for record in report.displayable(skip_unused)
    )


def render_error_summary(report: CookbooksReport) -> str:
    """Consolidated failures grouped by stage; empty when nothing failed."""
    grouped = report.errors_by_kind()
    if not grouped:
        return ""
    groups = [(ERROR_TITLES[kind], records) for kind, records in grouped.items()]
    return ERROR_SUMMARY_TEMPLATE.render(groups=groups).rstrip("\n")


def _correctable_flag(correctable: bool) -> str:
    return "Y" if correctable else "N"


def write_cookbooks_csv(
    report: CookbooksReport, stream: TextIO, skip_unused: bool = False
) -> None:
    """Write one row per offense.

    The first row of a cookbook version carries its name, version and nodes;
    further offenses of the same version are continuation rows. A version
    without offenses still gets its identity row.
    """
    writer = csv.writer(stream)
    writer.writerow(CSV_HEADER)

    for record in report.displayable(skip_unused):
        nodes = " ".join(record.sorted_nodes())
        offenses = list(record.iter_offenses())
        if not offenses:
            writer.writerow([record.name, record.version, "", "", "", "", nodes])
            continue

        for index, (file_offenses, offense) in enumerate(offenses):
            if index == 0:
                identity = [record.name, record.version]
                trailing = [nodes]
            else:
                identity = ["", ""]
                trailing = [""]
            writer.writerow(
                identity
                + [
                    file_offenses.path,
                    offense.cop_name,
                    _correctable_flag(offense.correctable),
                    offense.message,
                ]
                + trailing
            )


def render_cookbooks_csv(report: CookbooksReport, skip_unused: bool = False) -> str:
    buffer = io.StringIO()
    write_cookbooks_csv(report, buffer, skip_unused=skip_unused)
    return buffer.getvalue()
