"""Printable reports for finished practice sessions."""

from .pdf import SessionPDF, render_summary_pdf

__all__ = ["SessionPDF", "render_summary_pdf"]
