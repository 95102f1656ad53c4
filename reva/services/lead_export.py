"""
CSV export and plain-text copy formatting for saved leads.
"""

import csv
import io
from typing import Iterable

from reva.models.entities.lead import Lead

CSV_HEADER = ("Business Name", "Industry", "Reasoning", "Contact")
CSV_FILENAME = "reva-leads.csv"


def leads_to_csv(leads: Iterable[Lead]) -> str:
    """
    Every cell is double-quoted with embedded quotes doubled; rows are
    joined with a bare newline and there is no trailing newline.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for lead in leads:
        writer.writerow((lead.business_name, lead.industry, lead.rationale, lead.email or ""))
    return buffer.getvalue()[:-1]


def leads_to_text(leads: Iterable[Lead]) -> str:
    text = "REVA Generated Leads:\n\n"
    for index, lead in enumerate(leads, start=1):
        text += f"{index}. {lead.business_name}\n"
        text += f"   Industry: {lead.industry}\n"
        text += f"   Reasoning: {lead.rationale}\n"
        text += f"   Contact: {lead.email}\n"
        if lead.phone:
            text += f"   Phone: {lead.phone}\n"
        text += "\n"
    return text
