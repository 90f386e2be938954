"""
Members directory document

A printable A4 listing of the (filtered) member registry: organization header,
report info, the filters that produced the list, and a table of members. Rows
are paginated here rather than by the browser so every continuation page gets
its own "(continued)" heading, repeated column headers and a numbered footer.
"""

from datetime import datetime
from html import escape
from typing import List, Optional, Sequence

from credensuite.models.member import Member
from credensuite.schemas.member import MemberFilter
from credensuite.services.badge_template import ORGANIZATION_PLACEHOLDER, format_date

DIRECTORY_TITLE = "MEMBERS DIRECTORY"
# Rows are single-line (cells never wrap) so a fixed count fills a page
FIRST_PAGE_ROWS = 22
CONTINUATION_PAGE_ROWS = 32

DIRECTORY_COLUMNS = ("ID", "Name", "Role", "Contact", "Joining Date", "Status")

SEARCH_MODE_LABELS = {
    "search": "Search",
    "phone": "Phone",
    "joining_date": "Joining Date",
    "emergency_name": "Emergency Contact",
    "emergency_phone": "Emergency Phone",
}

_STYLES = """
  * { box-sizing: border-box; -webkit-print-color-adjust: exact; print-color-adjust: exact; }
  @page { size: A4; margin: 0; }
  html, body { margin: 0; padding: 0; }
  body { font-family: Helvetica, Arial, sans-serif; color: #111827; font-size: 10px; }
  .directory-page { width: 210mm; height: 297mm; padding: 0 15mm; position: relative; overflow: hidden; page-break-after: always; }
  .directory-page:last-child { page-break-after: auto; }
  .org-header { margin: 0 -15mm; padding: 8mm 15mm; background: #3b82f6; color: #ffffff; }
  .org-header h1 { margin: 0 0 2mm; font-size: 18px; }
  .org-header div { font-size: 10px; line-height: 1.4; }
  .continued { margin: 0 -15mm; padding: 5mm 15mm; background: #3b82f6; color: #ffffff; font-size: 13px; font-weight: 700; }
  h2 { margin: 8mm 0 3mm; font-size: 16px; }
  .report-info div, .filters li { line-height: 1.5; }
  .filters { margin-top: 3mm; }
  .filters ul { margin: 1mm 0 0; padding-left: 6mm; }
  table { width: 100%; margin-top: 5mm; border-collapse: collapse; table-layout: fixed; }
  th { text-align: left; font-size: 10px; padding: 2mm 1mm; border-top: 1px solid #6b7280; border-bottom: 1px solid #6b7280; }
  td { font-size: 9px; padding: 1.6mm 1mm; white-space: nowrap; overflow: hidden; text-overflow: ellipsis; }
  tr.group-end td { border-bottom: 1px solid #e5e7eb; }
  col.id { width: 18%; } col.name { width: 27%; } col.role { width: 15%; }
  col.contact { width: 16%; } col.joined { width: 14%; } col.status { width: 10%; }
  .footer { position: absolute; left: 15mm; right: 15mm; bottom: 10mm; padding-top: 2mm; border-top: 1px solid #e5e7eb; display: flex; justify-content: space-between; font-size: 8px; color: #6b7280; }
"""


def _text(value) -> str:
    return "" if value is None else escape(str(value))


def _role(designation) -> str:
    return str(getattr(designation, "value", designation) or "").title()


def format_report_date(value: datetime) -> str:
    """e.g. ``March 1, 2024``"""
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def filter_summary(filters: Optional[MemberFilter]) -> List[str]:
    """Human readable lines for the filters that narrowed the list"""
    if filters is None:
        return []
    lines = []
    mode = filters.search_mode()
    if mode is not None:
        name, value = mode
        shown = format_date(value) if name == "joining_date" else value
        lines.append(f'{SEARCH_MODE_LABELS[name]}: "{shown}"')
    if filters.designation is not None:
        lines.append(f"Role: {filters.designation.value.title()}")
    if filters.status is not None:
        lines.append(f"Status: {filters.status.value.title()}")
    return lines


def paginate(members: Sequence[Member]) -> List[Sequence[Member]]:
    """Split rows over pages; an empty list still yields one page"""
    pages = [members[:FIRST_PAGE_ROWS]]
    rest = members[FIRST_PAGE_ROWS:]
    while rest:
        pages.append(rest[:CONTINUATION_PAGE_ROWS])
        rest = rest[CONTINUATION_PAGE_ROWS:]
    return pages


def _org_header(org_settings) -> str:
    name = getattr(org_settings, "organization_name", None) or ORGANIZATION_PLACEHOLDER
    lines = [
        ("Phone", getattr(org_settings, "phone_number", None)),
        ("Email", getattr(org_settings, "email_address", None)),
        ("Website", getattr(org_settings, "website", None)),
        ("Address", getattr(org_settings, "address", None)),
    ]
    details = "".join(f"<div>{label}: {_text(value)}</div>" for label, value in lines if value)
    return f'<div class="org-header"><h1>{_text(name)}</h1>{details}</div>'


def _table(rows: Sequence[Member], offset: int) -> str:
    cols = "".join(f'<col class="{c}" />' for c in ("id", "name", "role", "contact", "joined", "status"))
    head = "".join(f"<th>{escape(title)}</th>" for title in DIRECTORY_COLUMNS)
    body = []
    for index, member in enumerate(rows, start=offset):
        # Light rule after every fifth member
        css = ' class="group-end"' if (index + 1) % 5 == 0 else ""
        body.append(
            f"<tr{css}>"
            f"<td>{_text(member.member_id)}</td>"
            f"<td>{_text(member.full_name)}</td>"
            f"<td>{_text(_role(member.designation))}</td>"
            f"<td>{_text(member.contact_number)}</td>"
            f"<td>{escape(format_date(member.joining_date))}</td>"
            f"<td>{'Active' if member.is_active else 'Inactive'}</td>"
            "</tr>"
        )
    return (
        f"<table><colgroup>{cols}</colgroup>"
        f"<thead><tr>{head}</tr></thead>"
        f"<tbody>{''.join(body)}</tbody></table>"
    )


def build_directory_html(
    members: Sequence[Member],
    org_settings=None,
    filters: Optional[MemberFilter] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Printable members directory for ``members``, in the order given"""
    generated_at = generated_at or datetime.utcnow()
    org_name = getattr(org_settings, "organization_name", None) or ORGANIZATION_PLACEHOLDER
    members = list(members)
    pages = paginate(members)

    filters_html = ""
    summary = filter_summary(filters)
    if summary:
        items = "".join(f"<li>{escape(line)}</li>" for line in summary)
        filters_html = f'<div class="filters"><strong>Applied Filters:</strong><ul>{items}</ul></div>'

    sections = []
    offset = 0
    for number, rows in enumerate(pages, start=1):
        if number == 1:
            top = (
                f"{_org_header(org_settings)}"
                f"<h2>{DIRECTORY_TITLE}</h2>"
                '<div class="report-info">'
                f"<div>Generated on: {format_report_date(generated_at)}</div>"
                f"<div>Total Members: {len(members)}</div>"
                "</div>"
                f"{filters_html}"
            )
        else:
            top = f'<div class="continued">{DIRECTORY_TITLE} (continued)</div>'
        sections.append(
            f'<div class="directory-page">{top}{_table(rows, offset)}'
            f'<div class="footer"><span>Page {number} of {len(pages)}</span>'
            f"<span>Generated by {_text(org_name)}</span></div></div>"
        )
        offset += len(rows)

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8" />
  <title>Members Directory - {_text(org_name)}</title>
  <style>{_STYLES}</style>
</head>
<body>
{''.join(sections)}
</body>
</html>"""
