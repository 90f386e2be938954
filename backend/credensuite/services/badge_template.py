"""
Badge HTML Template Builder

Two steps. ``prepare_badge_assets`` does the I/O: it reads local
``/uploads/...`` images with aiofiles and inlines them as base64 data URIs,
and encodes the verification QR code in a worker thread, so the event loop is
never held by disk reads or PNG encoding. ``build_badge_html`` is then a pure
``(member, settings, template, assets) -> html`` for a two-page ID card (front
and back). Remote ``http(s)`` URLs are left as they are.
"""

import asyncio
import base64
import io
from dataclasses import dataclass
from datetime import date, datetime
from html import escape
from pathlib import Path
from typing import List, Optional, Union

import aiofiles
import qrcode
from qrcode.constants import ERROR_CORRECT_M

from credensuite.core.config import settings as app_settings
from credensuite.core.logging_config import get_logger

logger = get_logger(__name__)

DATE_PLACEHOLDER = "MM/DD/YYYY"
ORGANIZATION_PLACEHOLDER = "Your Organization"
EMPTY_FIELD = "—"
BLOOD_GROUP_PLACEHOLDER = "N/A"

# Header color, light accent background, accent border
COLOR_SCHEMES = {
    "blue": ("#1d4ed8", "#eff6ff", "#bfdbfe"),
    "green": ("#047857", "#ecfdf5", "#bbf7d0"),
    "red": ("#b91c1c", "#fef2f2", "#fecaca"),
    "purple": ("#6d28d9", "#f5f3ff", "#ddd6fe"),
    "gray": ("#374151", "#f9fafb", "#e5e7eb"),
}
DEFAULT_COLOR_SCHEME = "green"

IMAGE_MIME_TYPES = {
    ".png": "image/png",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}


class AssetResolver:
    """
    Turns stored image references into something the badge page can load.

    - ``http://`` / ``https://`` / ``data:`` references pass through.
    - ``/uploads/<name>`` is read from the uploads directory and inlined.
    - Anything unreadable falls back to the original reference.
    """

    def __init__(self, uploads_dir: Union[str, Path, None] = None):
        self.uploads_dir = Path(uploads_dir or app_settings.UPLOADS_DIR).resolve()

    def local_path(self, ref: str) -> Optional[Path]:
        """Filesystem path for an ``/uploads/...`` reference, None if outside the uploads dir"""
        relative = ref.lstrip("/")
        if relative.startswith("uploads/"):
            relative = relative[len("uploads/"):]
        candidate = (self.uploads_dir / relative).resolve()
        if self.uploads_dir not in candidate.parents:
            return None
        return candidate

    async def resolve(self, ref: Optional[str]) -> Optional[str]:
        if not ref:
            return None
        if ref.startswith(("http://", "https://", "data:")):
            return ref

        path = self.local_path(ref)
        if path is None:
            logger.warning(f"Asset reference outside uploads directory: {ref}")
            return ref
        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except OSError as e:
            logger.warning(f"Could not inline asset {ref}: {e}")
            return ref

        mime = IMAGE_MIME_TYPES.get(path.suffix.lower(), "image/jpeg")
        return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"

    async def resolve_all(self, *refs: Optional[str]) -> List[Optional[str]]:
        """Resolve several references concurrently, in order"""
        return list(await asyncio.gather(*(self.resolve(ref) for ref in refs)))


@dataclass(frozen=True)
class BadgeAssets:
    """Image sources ready to drop into the badge markup"""
    photo: Optional[str] = None
    logo: Optional[str] = None
    signature: Optional[str] = None
    qr_code: Optional[str] = None


def format_date(value: Union[date, datetime, str, None]) -> str:
    """MM/DD/YYYY, or the literal placeholder when missing or unparseable"""
    if value is None or value == "":
        return DATE_PLACEHOLDER
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value[:10])
        except ValueError:
            return DATE_PLACEHOLDER
    return value.strftime("%m/%d/%Y")


def verification_url(member, settings) -> Optional[str]:
    """Member verification link built from the organization's QR pattern"""
    pattern = getattr(settings, "qr_code_pattern", None) if settings is not None else None
    if not pattern:
        return None
    if "{id}" in pattern:
        return pattern.replace("{id}", member.member_id)
    return f"{pattern.rstrip('/')}/{member.member_id}"


def qr_code_data_uri(data: str) -> str:
    """PNG QR code for ``data`` as a base64 data URI"""
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_M,
        box_size=8,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return f"data:image/png;base64,{base64.b64encode(buffer.getvalue()).decode('ascii')}"


async def render_qr_code(data: str) -> str:
    """``qr_code_data_uri`` in a worker thread"""
    return await asyncio.get_event_loop().run_in_executor(None, qr_code_data_uri, data)


async def prepare_badge_assets(member, settings=None, resolver: Optional[AssetResolver] = None) -> BadgeAssets:
    """Read every image the badge needs and encode its QR code"""
    resolver = resolver or AssetResolver()
    photo, logo, signature = await resolver.resolve_all(
        member.photo_url,
        getattr(settings, "logo_url", None),
        getattr(settings, "signature_url", None),
    )
    verify = verification_url(member, settings)
    qr_code = await render_qr_code(verify) if verify else None
    return BadgeAssets(photo=photo, logo=logo, signature=signature, qr_code=qr_code)


def _text(value, placeholder: str = "") -> str:
    if value is None or value == "":
        return escape(placeholder)
    return escape(str(value))


def _img(src: Optional[str], alt: str) -> str:
    if not src:
        return ""
    return f'<img src="{escape(src)}" alt="{escape(alt)}" />'


def _styles(header: str, accent_bg: str, accent_border: str, font: str) -> str:
    return f"""
      * {{ box-sizing: border-box; -webkit-print-color-adjust: exact; print-color-adjust: exact; }}
      html, body {{ margin: 0; padding: 0; }}
      body {{ background: #ffffff; color: #0f172a; font-family: '{font}', Arial, sans-serif; }}
      .card-page {{ width: {app_settings.PDF_CARD_WIDTH}; height: {app_settings.PDF_CARD_HEIGHT}; position: relative; overflow: hidden; page-break-after: always; }}
      .card-page:last-child {{ page-break-after: auto; }}
      .card {{ width: 100%; height: 100%; background: #ffffff; position: relative; }}
      .header {{ position: relative; height: 80px; background: {header}; color: #ffffff; display: flex; align-items: center; justify-content: center; text-align: center; }}
      .header h4 {{ margin: 0; font-size: 14px; line-height: 1.1; font-weight: 700; padding: 0 8px; }}
      .header .subtitle {{ font-size: 10px; opacity: 0.9; }}
      .photo-wrap {{ margin-top: -20px; display: flex; justify-content: center; position: relative; }}
      .photo {{ width: 80px; height: 80px; border-radius: 9999px; overflow: hidden; background: #f1f5f9; border: 3px solid #ffffff; box-shadow: 0 0 0 2px #fbbf24; }}
      .photo img {{ width: 100%; height: 100%; object-fit: cover; display: block; }}
      .placeholder {{ width: 100%; height: 100%; background: #e2e8f0; }}
      .name {{ margin-top: 8px; padding: 0 12px; text-align: center; font-size: 14px; font-weight: 700; white-space: nowrap; overflow: hidden; text-overflow: ellipsis; }}
      .role {{ text-align: center; font-size: 11px; font-weight: 600; color: {header}; text-transform: uppercase; }}
      .list {{ margin-top: 10px; padding: 0 12px; display: flex; flex-direction: column; gap: 4px; }}
      .row {{ display: flex; justify-content: space-between; font-size: 10px; background: #f8fafc; padding: 3px 8px; border-radius: 4px; }}
      .layout-vertical .row {{ flex-direction: column; align-items: center; }}
      .row .label {{ color: #64748b; }}
      .row .value {{ font-weight: 600; }}
      .back-header {{ padding: 8px 12px; text-align: center; background: {accent_bg}; border-bottom: 1px solid {accent_border}; }}
      .back-header h4 {{ margin: 0; font-size: 12px; font-weight: 700; }}
      .back-header .small {{ font-size: 9px; color: #475569; line-height: 1.2; }}
      .section {{ padding: 8px; display: flex; flex-direction: column; gap: 6px; }}
      .emergency {{ background: #fef2f2; border: 1px solid #fecaca; border-radius: 6px; padding: 6px; }}
      .emergency .title {{ font-size: 10px; font-weight: 700; color: #b91c1c; margin-bottom: 2px; }}
      .emergency .row {{ background: transparent; padding: 0; color: #b91c1c; }}
      .property {{ display: flex; gap: 8px; align-items: center; background: {accent_bg}; border: 1px solid {accent_border}; border-radius: 6px; padding: 6px; font-size: 10px; }}
      .property .sub {{ color: #64748b; }}
      .logo-box {{ flex: none; width: 32px; height: 32px; border-radius: 6px; background: #ffffff; border: 1px solid {accent_border}; display: flex; align-items: center; justify-content: center; overflow: hidden; }}
      .logo-box img {{ width: 28px; height: 28px; object-fit: contain; }}
      .qr {{ display: flex; justify-content: center; }}
      .qr img {{ width: 56px; height: 56px; }}
      .signatures {{ display: grid; grid-template-columns: 1fr 1fr; gap: 8px; }}
      .sig-label {{ font-size: 9px; color: #475569; font-weight: 500; }}
      .sig-line {{ height: 16px; border-bottom: 1px dotted #cbd5e1; }}
      .sig-line img {{ height: 100%; object-fit: contain; }}
      .footer {{ position: absolute; bottom: 6px; left: 0; right: 0; text-align: center; font-size: 9px; color: #64748b; font-style: italic; }}
    """


def build_badge_html(member, settings=None, template=None, assets: Optional[BadgeAssets] = None) -> str:
    """
    Render the badge for ``member``.

    ``settings`` is the organization profile and ``template`` the active card
    template; either may be None. ``assets`` comes from ``prepare_badge_assets``;
    without it the badge has no images and no QR code. Missing optional values
    render as fixed placeholders, never as empty markup.
    """
    assets = assets or BadgeAssets()

    org_name = _text(getattr(settings, "organization_name", None), ORGANIZATION_PLACEHOLDER)
    address = _text(getattr(settings, "address", None))
    phone = _text(getattr(settings, "phone_number", None))
    email = getattr(settings, "email_address", None)
    contact_line = f"{phone} &bull; {escape(email)}" if email else phone

    scheme = getattr(template, "color_scheme", None) or DEFAULT_COLOR_SCHEME
    header, accent_bg, accent_border = COLOR_SCHEMES.get(scheme, COLOR_SCHEMES[DEFAULT_COLOR_SCHEME])
    font = escape(getattr(template, "font_style", None) or "Inter")
    layout = escape(getattr(template, "layout_style", None) or "horizontal")

    photo_html = _img(assets.photo, "Member photo") or '<div class="placeholder"></div>'

    qr_html = ""
    if assets.qr_code:
        qr_html = f'<div class="qr">{_img(assets.qr_code, "Verification QR code")}</div>'

    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8" />
  <title>ID Card - {_text(member.full_name)}</title>
  <style>{_styles(header, accent_bg, accent_border, font)}</style>
</head>
<body>
  <div class="card-page front">
    <div class="card layout-{layout}">
      <div class="header">
        <div>
          <h4>{org_name}</h4>
          <div class="subtitle">Identification Card</div>
        </div>
      </div>
      <div class="photo-wrap"><div class="photo">{photo_html}</div></div>
      <div class="name">{_text(member.full_name)}</div>
      <div class="role">{_text(member.designation)}</div>
      <div class="list">
        <div class="row"><span class="label">Member ID</span><span class="value">{_text(member.member_id)}</span></div>
        <div class="row"><span class="label">Join Date</span><span class="value">{escape(format_date(member.joining_date))}</span></div>
        <div class="row"><span class="label">Phone</span><span class="value">{_text(member.contact_number, EMPTY_FIELD)}</span></div>
        <div class="row"><span class="label">Blood Group</span><span class="value">{_text(member.blood_group, BLOOD_GROUP_PLACEHOLDER)}</span></div>
      </div>
    </div>
  </div>
  <div class="card-page back">
    <div class="card layout-{layout}">
      <div class="back-header">
        <h4>{org_name}</h4>
        <div class="small">{address}</div>
        <div class="small">{contact_line}</div>
      </div>
      <div class="section">
        <div class="emergency">
          <div class="title">Emergency Contact</div>
          <div class="row"><span class="label">Name</span><span class="value">{_text(member.emergency_contact_name, EMPTY_FIELD)}</span></div>
          <div class="row"><span class="label">Phone</span><span class="value">{_text(member.emergency_contact_number, EMPTY_FIELD)}</span></div>
        </div>
        <div class="property">
          <div class="text">
            <div><strong>Property of {org_name}</strong></div>
            <div class="sub">If found, please return to the above address.</div>
          </div>
          <div class="logo-box">{_img(assets.logo, "Logo")}</div>
        </div>
        {qr_html}
        <div class="signatures">
          <div class="sig">
            <div class="sig-label">Authorized Signatory</div>
            <div class="sig-line">{_img(assets.signature, "Signature")}</div>
          </div>
          <div class="sig">
            <div class="sig-label">Member Signature</div>
            <div class="sig-line"></div>
          </div>
        </div>
      </div>
      <div class="footer">Valid with authorized signature only</div>
    </div>
  </div>
</body>
</html>"""
