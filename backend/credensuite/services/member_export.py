"""
Members CSV export
"""

import csv
import io
import re
from typing import Iterable

from credensuite.models.member import Member
from credensuite.services.badge_template import format_date

CSV_COLUMNS = [
    ("Member ID", lambda m: m.member_id),
    ("Full Name", lambda m: m.full_name),
    ("Designation", lambda m: m.designation),
    ("Joining Date", lambda m: format_date(m.joining_date)),
    ("Contact Number", lambda m: m.contact_number),
    ("Blood Group", lambda m: m.blood_group or ""),
    ("Emergency Contact Name", lambda m: m.emergency_contact_name or ""),
    ("Emergency Contact Number", lambda m: m.emergency_contact_number or ""),
    ("Status", lambda m: "Active" if m.is_active else "Inactive"),
]

# Leading characters that spreadsheet apps evaluate as formulas
_FORMULA_PREFIXES = ("=", "@", "\t", "\r")
# Sign prefixes are only dangerous when the rest is not a plain number
_SIGN_PREFIXES = ("+", "-")
_PHONE_LIKE = re.compile(r"^[+\-]?[\d\s().-]+$")


def _cell(value) -> str:
    text = "" if value is None else str(value)
    if text.startswith(_FORMULA_PREFIXES):
        return "'" + text
    if text.startswith(_SIGN_PREFIXES) and not _PHONE_LIKE.match(text):
        return "'" + text
    return text


def members_to_csv(members: Iterable[Member]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow([title for title, _ in CSV_COLUMNS])
    for member in members:
        writer.writerow([_cell(getter(member)) for _, getter in CSV_COLUMNS])
    return output.getvalue()
