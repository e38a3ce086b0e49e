"""
MJML Email Templates
Staff notification for new booking submissions
"""

import html
from typing import Optional

THEME = {
    "primary": "#0d6efd",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "border": "#e2e8f0",
}

FONT_FAMILY = "Helvetica, Arial, sans-serif"

# (record field, label) in the order they appear in the notification
NOTIFICATION_FIELDS = [
    ("department", "Reparto"),
    ("treatment", "Trattamento"),
    ("service", "Servizio Richiesto"),
    ("name", "Nome"),
    ("email", "Email"),
    ("phone", "Telefono"),
    ("mobile", "Cellulare"),
    ("appointmentdate", "Data"),
    ("appointmenttime", "Ora"),
    ("age", "Età"),
    ("address", "Indirizzo"),
    ("branch", "Filiale"),
    ("message", "Messaggio"),
]


def _detail_row(label: str, value: str) -> str:
    return f"""
          <mj-text font-family="{FONT_FAMILY}" color="{THEME['text_secondary']}" font-size="15px" padding="4px 0">
            <strong>{label}:</strong> {html.escape(value)}
          </mj-text>"""


def get_base_template(title: str, preview_text: str, content_sections: str) -> str:
    """Base MJML template wrapper"""
    return f"""
<mjml>
  <mj-head>
    <mj-title>{html.escape(title)}</mj-title>
    <mj-preview>{html.escape(preview_text)}</mj-preview>
  </mj-head>
  <mj-body background-color="{THEME['background']}">
    <mj-section background-color="{THEME['card_bg']}" border="1px solid {THEME['border']}" padding="24px">
      <mj-column>
        <mj-text font-family="{FONT_FAMILY}" color="{THEME['primary']}" font-size="20px" font-weight="700" padding="0 0 12px 0">
          {html.escape(title)}
        </mj-text>
        {content_sections}
      </mj-column>
    </mj-section>
  </mj-body>
</mjml>
"""


def booking_notification_template(
    form_label: str, name: str, fields: dict[str, str], display_date: Optional[str] = None
) -> str:
    """
    Notification sent to clinic staff for each accepted booking.

    ``name`` is the patient name shown as "Nome", which is always listed;
    other fields only when non-empty. ``display_date`` replaces the stored
    ISO appointment date when given.
    """
    title = f"Nuova Prenotazione - {form_label}"

    values = dict(fields)
    values["name"] = name
    if display_date:
        values["appointmentdate"] = display_date

    rows = []
    for key, label in NOTIFICATION_FIELDS:
        value = values.get(key, "")
        if value or key == "name":
            rows.append(_detail_row(label, value))

    return get_base_template(
        title=title,
        preview_text=f"{title}: {name}" if name else title,
        content_sections="".join(rows),
    )
