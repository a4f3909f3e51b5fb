"""Text reports for search results, company details and query rows."""

import json
from typing import Any, Dict, List, Optional, Sequence

from ..common.schemas import CompanyMatch, CompanyRecord

RULE = "=" * 80
SNIPPET_CHARS = 150
CHUNKS_PER_COMPANY = 2
NO_DATA = "No data to display"
NO_DETAILS = "No company details available."


def format_search_results(matches: Optional[Sequence[CompanyMatch]], query: str) -> str:
    """Format ranked companies for an agent.

    Output format:
        # Found 2 matching companies:

        ## Result #1: Acme Lending
        Company ID: 42
        Industry: Fintech
        Match Score: 91.23%

        ### Matching content:
        • Acme provides small-business loans...

        To see full details, use the get_company_details tool with company_id: 42

        ---
    """
    if not matches or not isinstance(matches, (list, tuple)):
        return f"No matching companies found for '{query}'"

    lines = [f"# Found {len(matches)} matching companies:", ""]

    for i, company in enumerate(matches, 1):
        lines.append(f"## Result #{i}: {company.company_name}")
        lines.append(f"Company ID: {company.company_id}")
        lines.append(f"Industry: {company.industry or 'N/A'}")
        lines.append(f"Match Score: {company.score * 100:.2f}%")
        lines.append("")

        lines.append("### Matching content:")
        for chunk in company.top_chunks(CHUNKS_PER_COMPANY):
            lines.append(f"• {(chunk.content or '')[:SNIPPET_CHARS]}...")
            lines.append("")

        lines.append(
            f"To see full details, use the get_company_details tool with company_id: {company.company_id}"
        )
        lines.append("")
        lines.append("---")
        lines.append("")

    lines.append("To view full details of a company, use the get_company_details tool with the company ID.")
    return "\n".join(lines)


def format_company_detail(record: CompanyRecord) -> str:
    """Fixed-layout report of one company and its contacts."""
    if not isinstance(record, CompanyRecord):
        return NO_DETAILS

    lines = [
        f"# COMPANY DETAILS: {record.company_name or 'Unknown Company'}",
        RULE,
        "",
        f"Company ID: {record.id}",
        f"Industry: {record.industry or 'N/A'}",
        f"Website: {record.website or 'N/A'}",
        f"Business Model: {record.business_model or 'N/A'}",
        f"Location: {record.location or 'N/A'}",
        "",
        "## Description",
        record.description or "No description available.",
        "",
        "## Contacts",
    ]

    if record.contacts:
        for contact in record.contacts:
            lines.append(f"• {contact.full_name}")
            lines.append(f"  Position: {contact.designation or 'N/A'}")
            lines.append(f"  Email: {contact.email or 'N/A'}")
            lines.append(f"  Phone: {contact.phone_country_code or ''} {contact.phone_number or 'N/A'}")
            lines.append("")
    else:
        lines.append("No contacts available.")

    lines.append(RULE)
    return "\n".join(lines) + "\n"


def _cell(value: Any) -> str:
    if value is None:
        text = ""
    elif isinstance(value, str):
        text = value
    elif isinstance(value, (dict, list, tuple, bool)):
        text = json.dumps(value, separators=(",", ":"), default=str)
    else:
        text = str(value)

    # Pipes and newlines would break the table row
    text = text.replace("\r\n", " ").replace("\n", " ")
    return text.replace("|", "\\|")


def format_rows(rows: Optional[Sequence[Dict[str, Any]]]) -> str:
    """Render uniform rows as a markdown table keyed by the first row's columns."""
    if not isinstance(rows, (list, tuple)) or not rows or not isinstance(rows[0], dict) or not rows[0]:
        return NO_DATA

    headers = list(rows[0].keys())

    lines = [
        "| " + " | ".join(_cell(h) for h in headers) + " |",
        "| " + " | ".join("---" for _ in headers) + " |",
    ]
    for row in rows:
        if not isinstance(row, dict):
            row = {}
        lines.append("| " + " | ".join(_cell(row.get(h)) for h in headers) + " |")

    return "\n".join(lines) + "\n"


def format_table_list(tables: List[str]) -> str:
    """Markdown index of the public tables, linking to their schema resources."""
    lines = ["# Supabase Database Schema", "", "## Available Tables", ""]

    if not tables or not isinstance(tables, (list, tuple)):
        lines.append("No tables found in the database.")
    else:
        for table in tables:
            lines.append(f"- [{table}](supabase://tables/{table})")

    return "\n".join(lines) + "\n"


def format_table_schema(table_name: str, columns: List[Dict[str, Any]]) -> str:
    """Markdown column listing for one table."""
    lines = [
        f"# Table: {table_name}",
        "",
        "## Schema",
        "",
        "| Column | Type | Nullable | Default |",
        "| ------ | ---- | -------- | ------- |",
    ]

    if not isinstance(columns, (list, tuple)):
        columns = []
    columns = [c for c in columns if isinstance(c, dict)]
    if not columns:
        lines.append("| No columns found | | | |")
    else:
        for column in columns:
            nullable = "YES" if column.get("is_nullable") == "YES" else "NO"
            lines.append(
                f"| {_cell(column.get('column_name'))} | {_cell(column.get('data_type'))} "
                f"| {nullable} | {_cell(column.get('column_default'))} |"
            )

    return "\n".join(lines) + "\n"
