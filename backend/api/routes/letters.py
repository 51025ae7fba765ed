"""
Blind message API routes.

Letters are never stored: every endpoint works from the share token alone.
"""
import asyncio
import logging

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from domain.errors import RenderFailure
from domain.models import LetterRecord
from services.layout_engine import OG_PREVIEW, SHARE_CARD, compute_card_layout, get_variant, resolve_header
from services.letter_codec import decode_letter, decode_letter_or_empty, encode_letter
from services.letter_page import build_letter_page_html, letter_view_url, og_image_url, share_url
from services.qr_card import compute_qr_card_layout
from services.render_canvas import render_card_data_url
from services.render_svg import render_preview_png
from services.themes import get_theme_by_id, is_known_theme
from settings import settings

router = APIRouter()
logger = logging.getLogger(__name__)


class LetterCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_name: str = Field("", alias="from")
    to_name: str = Field("", alias="to")
    message: str = ""
    theme: str = ""


class LetterCreateResponse(BaseModel):
    token: str
    theme: str
    share_url: str
    view_url: str
    og_image_url: str


class LetterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_name: str = Field(serialization_alias="from")
    to_name: str = Field(serialization_alias="to")
    message: str
    theme: str
    theme_known: bool
    theme_name: str
    theme_emoji: str
    header: str


class CardResponse(BaseModel):
    variant: str
    width: int
    height: int
    data_url: str


class QrCardResponse(BaseModel):
    width: int
    height: int
    letter_url: str
    data_url: str


@router.post("/letters", response_model=LetterCreateResponse)
async def create_letter(body: LetterCreate):
    """Encode a composed letter into its share token."""
    # theme is opaque here; unknown ids fall back only when displayed
    record = LetterRecord(
        from_name=body.from_name,
        to_name=body.to_name,
        message=body.message,
        theme=body.theme,
    )
    token = encode_letter(record)
    return LetterCreateResponse(
        token=token,
        theme=record.theme,
        share_url=share_url(token),
        view_url=letter_view_url(token),
        og_image_url=og_image_url(token),
    )


@router.get("/letters/{token}", response_model=LetterResponse, response_model_by_alias=True)
async def read_letter(token: str):
    """Decode a share token; 404 when it is not a valid letter."""
    record = decode_letter(token)
    if record is None:
        raise HTTPException(status_code=404, detail="Message not found")
    theme = get_theme_by_id(record.theme)
    return LetterResponse(
        from_name=record.from_name,
        to_name=record.to_name,
        message=record.message,
        theme=record.theme,
        theme_known=is_known_theme(record.theme),
        theme_name=theme.name,
        theme_emoji=theme.emoji,
        header=resolve_header(record, get_variant(OG_PREVIEW).style),
    )


@router.get("/og-image")
async def og_image(d: str | None = Query(None)):
    """
    Link-preview PNG for a share token.

    A token that fails to decode still renders the placeholder card.
    """
    if not d:
        raise HTTPException(status_code=400, detail="Missing data parameter")

    record = decode_letter_or_empty(d)
    layout = compute_card_layout(record, get_variant(OG_PREVIEW))
    try:
        png = await asyncio.wait_for(
            asyncio.to_thread(render_preview_png, layout),
            timeout=settings.RENDER_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error("[og-image] render timed out after %ss", settings.RENDER_TIMEOUT_SECONDS)
        raise HTTPException(status_code=500, detail="Image generation failed")
    except RenderFailure as exc:
        logger.error("[og-image] render failed: %s", exc.__cause__ or exc)
        raise HTTPException(status_code=500, detail="Image generation failed")

    max_age = settings.OG_CACHE_MAX_AGE
    return Response(
        content=png,
        media_type="image/png",
        headers={"Cache-Control": f"public, max-age={max_age}, s-maxage={max_age}"},
    )


@router.get("/card", response_model=CardResponse)
async def share_card(d: str | None = Query(None), variant: str = Query(SHARE_CARD)):
    """Downloadable card as a PNG data URL."""
    try:
        card_variant = get_variant(variant)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Unknown card variant: {variant}")

    layout = compute_card_layout(decode_letter_or_empty(d), card_variant)
    try:
        data_url = await asyncio.wait_for(
            asyncio.to_thread(render_card_data_url, layout),
            timeout=settings.RENDER_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error("[card] render timed out after %ss", settings.RENDER_TIMEOUT_SECONDS)
        raise HTTPException(status_code=500, detail="Image generation failed")
    except Exception:
        logger.exception("[card] render failed variant=%s", variant)
        raise HTTPException(status_code=500, detail="Image generation failed")

    return CardResponse(variant=card_variant.name, width=layout.width, height=layout.height, data_url=data_url)


@router.get("/v", response_class=HTMLResponse)
async def letter_page(d: str | None = Query(None)):
    """Share-link landing page with Open Graph tags."""
    if not d:
        return RedirectResponse(url=f"{settings.SITE_URL}/m.html", status_code=307)

    record = decode_letter(d)
    preview = compute_card_layout(record or LetterRecord.empty(), get_variant(OG_PREVIEW))
    max_age = settings.VIEW_CACHE_MAX_AGE
    return HTMLResponse(
        content=build_letter_page_html(d, record, preview),
        headers={"Cache-Control": f"public, max-age={max_age}, s-maxage={max_age}"},
    )


@router.get("/qr-card", response_model=QrCardResponse)
async def qr_card(d: str | None = Query(None)):
    """Printable card whose QR code opens the letter; 404 for an undecodable token."""
    if not d:
        raise HTTPException(status_code=400, detail="Missing data parameter")
    record = decode_letter(d)
    if record is None:
        raise HTTPException(status_code=404, detail="Message not found")

    layout = compute_qr_card_layout(record, d)
    try:
        data_url = await asyncio.wait_for(
            asyncio.to_thread(render_card_data_url, layout),
            timeout=settings.RENDER_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error("[qr-card] render timed out after %ss", settings.RENDER_TIMEOUT_SECONDS)
        raise HTTPException(status_code=500, detail="Image generation failed")
    except Exception:
        logger.exception("[qr-card] render failed")
        raise HTTPException(status_code=500, detail="Image generation failed")

    return QrCardResponse(
        width=layout.width,
        height=layout.height,
        letter_url=letter_view_url(d),
        data_url=data_url,
    )
