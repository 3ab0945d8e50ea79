import os
from datetime import datetime

import pdfkit
from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger

from portal.core.config import settings
from portal.core.errors import PortalError

# -----------------------------
# Setup Jinja2 Environment
# -----------------------------
BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
template_dir = os.path.join(BASE_DIR, "templates", "pdf")

pdf_env = Environment(
    loader=FileSystemLoader(template_dir),
    autoescape=select_autoescape(["html", "xml"])
)

# -----------------------------
# PDF Configuration
# -----------------------------
pdf_options = {
    "page-size": "A4",
    "margin-top": "15mm",
    "margin-right": "14mm",
    "margin-bottom": "15mm",
    "margin-left": "14mm",
    "encoding": "UTF-8",
    "no-outline": None,
}


def _pdf_config():
    # Without an explicit path pdfkit looks wkhtmltopdf up on PATH
    if settings.WKHTMLTOPDF_PATH:
        return pdfkit.configuration(wkhtmltopdf=settings.WKHTMLTOPDF_PATH)
    return pdfkit.configuration()


def render_credit_classes_html(classes: list[dict], department_name: str, academic_year: str, semester: str) -> str:
    template = pdf_env.get_template("credit_classes.html")
    return template.render(
        classes=classes,
        department_name=department_name,
        academic_year=academic_year or "All",
        semester=semester or "All",
        generated_on=datetime.now().strftime("%B %d, %Y %H:%M"),
    )


def credit_classes_filename(academic_year: str, semester: str) -> str:
    today = datetime.now().strftime("%Y-%m-%d")
    return f"Credit_Classes_Report_{academic_year or 'All'}_Semester_{semester or 'All'}_{today}.pdf"


def generate_credit_classes_pdf(classes: list[dict], department_name: str, academic_year: str, semester: str) -> bytes:
    html_content = render_credit_classes_html(classes, department_name, academic_year, semester)

    try:
        return pdfkit.from_string(html_content, False, options=pdf_options, configuration=_pdf_config())
    except OSError as e:
        logger.error(f"PDF generation failed: {e}")
        raise PortalError(
            f"PDF generation failed. Ensure wkhtmltopdf is installed. Error: {e}",
            status_code=500,
        )
