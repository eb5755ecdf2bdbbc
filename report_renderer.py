"""
ICSR Causality Bridge | Report Renderer (Code Only)
======================================================
Converts gateway results (or a classified error) -> Markdown report.
No LLM calls. Optional .docx conversion with python-docx.
"""

import os
import re
from datetime import datetime

from docx import Document as DocxDocument
from docx.shared import Pt

from config import REPORTS_PATH
from models import IndividualAssessment, InteractionPair, Severity

DISCLAIMER = "This tool is for informational purposes only and does not constitute medical advice."

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


# ==========================================================================
# Style keys (mirrors the badge colours of the web form)
# ==========================================================================

def category_style(category: str) -> str:
    """Substring match, so model variants like 'Likely' still get a style."""
    cat = (category or "").lower()
    if "probable" in cat or ("likely" in cat and "unlikely" not in cat):
        return "probable"
    if "possible" in cat:
        return "possible"
    if "unlikely" in cat:
        return "unlikely"
    if "unrelated" in cat or "not related" in cat:
        return "not_related"
    return "default"


def severity_style(level: Severity) -> str:
    if level is Severity.OTHER:
        return "default"
    return level.value.lower()


_BADGES = {
    "probable": "🟢",
    "possible": "🔵",
    "unlikely": "🟡",
    "not_related": "🔴",
    "major": "🔴",
    "moderate": "🟠",
    "minor": "🔵",
    "default": "⚪",
}


# ==========================================================================
# Section Renderers
# ==========================================================================

def render_assessment_markdown(result: list[IndividualAssessment]) -> str:
    lines = ["## Detailed Causality Assessments\n"]
    if not result:
        lines.append("### Assessment Incomplete\n")
        lines.append(
            "The AI was unable to generate a specific causality assessment for the "
            "provided data. Please check the inputs or try again.\n"
        )
        return "\n".join(lines)

    for i, a in enumerate(result, 1):
        badge = _BADGES[category_style(a.causality_category)]
        lines.append(f"### {i}. {a.drug_name} → {a.adverse_event}\n")
        lines.append(f"**Drug:** {a.drug_name} | **Event:** {a.adverse_event}\n")
        lines.append(f"**Causality:** {badge} {a.causality_category}\n")
        lines.append("**Rationale**\n")
        lines.append(f"{a.rationale}\n")
    return "\n".join(lines)


def render_interactions_markdown(result: list[InteractionPair]) -> str:
    lines = ["## Drug Interaction Report\n"]
    if not result:
        lines.append("### No Significant Interactions Found\n")
        lines.append(
            "The AI did not identify any clinically significant interactions among "
            "the provided medications.\n"
        )
        return "\n".join(lines)

    for pair in result:
        badge = _BADGES[severity_style(pair.severity_level)]
        lines.append(f"### {pair.drug_a} + {pair.drug_b}\n")
        lines.append(f"**Severity:** {badge} {pair.severity}\n")
        lines.append(f"{pair.description}\n")
    return "\n".join(lines)


def render_error_markdown(message: str, title: str = "An Error Occurred") -> str:
    return f"## {title}\n\n> {message}\n"


def _header(case_id: str, timestamp: str) -> str:
    return (
        f"# ICSR Causality Assessment Report\n\n"
        f"**Case:** {case_id} | **Generated:** {timestamp}\n\n"
        f"---\n"
    )


def _footer() -> str:
    return f"\n---\n\n*{DISCLAIMER}*\n"


def report_stem(case_id: str) -> str:
    """Filesystem-safe file stem for a case id; never leaves the output dir."""
    name = os.path.basename(str(case_id).replace("\\", "/"))
    name = _UNSAFE_FILENAME_RE.sub("_", name).strip("._")
    return name or "case"


# ==========================================================================
# Files
# ==========================================================================

def render_report(
    case_id: str,
    assessment: list[IndividualAssessment] | None = None,
    assessment_error: str | None = None,
    interactions: list[InteractionPair] | None = None,
    interaction_error: str | None = None,
    output_dir: str = REPORTS_PATH,
) -> str:
    """
    Render one case to Markdown. Each result slot renders independently:
    result, error, or nothing if it was never requested.
    Returns the filepath of the generated report.
    """
    os.makedirs(output_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M")

    parts = [_header(case_id, timestamp)]
    if assessment_error is not None:
        parts.append(render_error_markdown(assessment_error))
    elif assessment is not None:
        parts.append(render_assessment_markdown(assessment))

    if interaction_error is not None:
        parts.append(render_error_markdown(interaction_error, title="Interaction Check Failed"))
    elif interactions is not None:
        parts.append(render_interactions_markdown(interactions))
    parts.append(_footer())

    filepath = os.path.join(output_dir, f"{report_stem(case_id)}.md")
    with open(filepath, "w", encoding="utf-8") as f:
        f.write("\n".join(parts))
    return filepath


def render_docx(md_path: str) -> str:
    """Convert a Markdown report to a Word document next to it."""
    with open(md_path, "r", encoding="utf-8") as f:
        lines = f.readlines()

    doc = DocxDocument()

    for line in lines:
        line = line.rstrip("\n")

        if line.strip() == "---":
            continue

        if line.startswith("# "):
            doc.add_heading(line[2:].strip(), level=1)
        elif line.startswith("## "):
            doc.add_heading(line[3:].strip(), level=2)
        elif line.startswith("### "):
            doc.add_heading(line[4:].strip(), level=3)
        # Blockquotes -> italic paragraph (error messages)
        elif line.startswith("> "):
            run = doc.add_paragraph().add_run(line[2:].strip())
            run.italic = True
        elif line.startswith("**") and line.count("**") == 2 and line.endswith("**"):
            run = doc.add_paragraph().add_run(line.strip("*").strip())
            run.bold = True
        # Italic footer
        elif line.startswith("*") and line.endswith("*"):
            run = doc.add_paragraph().add_run(line.strip("*").strip())
            run.italic = True
            run.font.size = Pt(9)
        elif line.strip():
            doc.add_paragraph(line.replace("**", ""))

    docx_path = md_path[:-3] + ".docx" if md_path.endswith(".md") else md_path + ".docx"
    doc.save(docx_path)
    return docx_path
