from __future__ import annotations  # PDF rendering for finished practice sessions

from datetime import datetime
from typing import Any, List, Optional, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from interview.errors import SummaryUnavailableError
from interview.models import Answer, Session, SessionSummary


ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
SOFT_ACCENT_BG = (243, 248, 255)  # Highlight background


def _format_datetime(value: Optional[datetime]) -> str:  # Format timestamp for display
    if not value:
        return "-"
    return value.strftime("%d %b %Y, %I:%M %p").lstrip("0").replace(" 0", " ")


def _effective_width(pdf: FPDF) -> float:  # Compute effective page width
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


class SessionPDF(FPDF):  # Core-font PDF with banner header and page footer
    def __init__(self, *args, title: str = "Visa Interview Practice Report", **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.header_title = title

    def _prepare_text(self, text: Any) -> str:  # Core fonts only cover latin-1
        value = "" if text is None else str(text)
        cleaned = value.replace("•", "-").replace("’", "'").replace("“", '"').replace("”", '"')
        return cleaned.encode("latin-1", "ignore").decode("latin-1")

    def line_text(self, height: float, text: str, *, bold: bool = False, size: int = 11, color=TEXT) -> None:
        self.set_x(self.l_margin)
        self.set_text_color(*color)
        self.set_font("Helvetica", "B" if bold else "", size)
        self.multi_cell(_effective_width(self), height, self._prepare_text(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    def header(self) -> None:  # Render header banner
        if self.page_no() == 1:
            self.set_fill_color(*ACCENT)
            self.rect(0, 0, self.w, 22, style="F")
            self.set_text_color(255, 255, 255)
            self.set_font("Helvetica", "B", 16)
            self.set_xy(self.l_margin, 7)
            self.cell(0, 8, self._prepare_text(self.header_title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            self.set_y(26)
        else:
            self.set_text_color(80, 80, 80)
            self.set_font("Helvetica", "B", 12)
            self.set_xy(self.l_margin, 8)
            self.cell(0, 6, self._prepare_text(self.header_title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            mark = self.get_y()
            self.set_draw_color(*ACCENT)
            self.set_line_width(0.4)
            self.line(self.l_margin, mark + 1, self.w - self.r_margin, mark + 1)
            self.ln(4)
        self.set_text_color(*TEXT)

    def footer(self) -> None:  # Render footer with pagination
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font("Helvetica", "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _section_title(pdf: SessionPDF, title: str) -> None:  # Render styled section title
    pdf.ln(2)
    pdf.line_text(9, title, bold=True, size=13)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_rows(session: Session, summary: SessionSummary) -> List[Tuple[str, str]]:
    return [
        ("Session ID", session.id),
        ("Level", session.level or "-"),
        ("Status", session.status),
        ("Questions graded", str(summary.total_questions)),
        ("Started", _format_datetime(session.created_at)),
        ("Completed", _format_datetime(summary.completed_at)),
    ]


def _render_summary(pdf: SessionPDF, summary: SessionSummary) -> None:
    pdf.set_fill_color(*SOFT_ACCENT_BG)
    pdf.rect(pdf.l_margin, pdf.get_y(), _effective_width(pdf), 16, style="F")
    pdf.set_xy(pdf.l_margin + 6, pdf.get_y() + 4)
    pdf.set_text_color(*ACCENT)
    pdf.set_font("Helvetica", "B", 14)
    pdf.cell(0, 8, f"Grade {summary.overall_grade}  |  Average {summary.average_score:.1f} / 15", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(6)
    pdf.line_text(6, summary.recommendation)
    for label, items in (
        ("Strong areas", summary.strong_areas),
        ("Weak areas", summary.weak_areas),
        ("Red flags", summary.common_red_flags),
    ):
        pdf.line_text(6, f"{label}: {', '.join(items) if items else 'none'}", color=MUTED, size=10)


def _render_answer(pdf: SessionPDF, index: int, answer: Answer) -> None:
    pdf.line_text(6, f"Q{index}. {answer.question_text}", bold=True)
    pdf.line_text(6, answer.text, color=MUTED, size=10)
    analysis = answer.analysis
    if analysis is None:
        pdf.line_text(6, "Not graded: the grader was unavailable for this answer.", size=10)
        pdf.ln(2)
        return
    scores = analysis.scores
    pdf.line_text(
        6,
        f"{analysis.classification} ({scores.total_score}/15): migration intent {scores.migration_intent}, "
        f"goal understanding {scores.goal_understanding}, answer length {scores.answer_length}",
        size=10,
    )
    if analysis.feedback.overall:
        pdf.line_text(6, analysis.feedback.overall, size=10)
    for item in analysis.feedback.improvements:
        pdf.line_text(6, f"- {item}", size=10)
    pdf.ln(2)


def render_summary_pdf(session: Session) -> bytes:
    """Render a finished session with its summary and per-answer verdicts.

    Raises:
        SummaryUnavailableError: If the session carries no summary.
    """

    summary = session.summary
    if summary is None:
        raise SummaryUnavailableError(f"session {session.id} has no summary", in_progress=session.is_active)

    pdf = SessionPDF()
    pdf.alias_nb_pages()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    _section_title(pdf, "Session Overview")
    for label, value in _meta_rows(session, summary):
        pdf.line_text(6, f"{label}: {value}", size=10)

    _section_title(pdf, "Assessment")
    _render_summary(pdf, summary)

    _section_title(pdf, "Answers")
    for index, answer in enumerate(session.answers, start=1):
        _render_answer(pdf, index, answer)

    return bytes(pdf.output())


__all__ = ["SessionPDF", "render_summary_pdf"]
