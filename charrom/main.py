"""charrom microservice -- FastAPI application.

Endpoints:
    POST /rom/parse           -- Decode base64 ROM bytes into glyphs
    POST /rom/serialize       -- Encode glyphs into a raw .bin ROM image
    POST /sets/serialize      -- Glyph set to storage envelope
    POST /sets/deserialize    -- Storage envelope to glyph set
    POST /recognize           -- Extract glyphs from an uploaded image
    POST /recognize/overlay   -- PNG preview with the sampling grid drawn on
    POST /recognize/suggest   -- Likely glyph sizes for an uploaded image
    POST /text/parse          -- Byte values pasted as source code text
    GET  /systems/{system_id} -- Character ROM layout of a known system
    GET  /health              -- Health check
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel, Field, ValidationError

from .errors import FileTooLargeError, UnsupportedFormatError
from .imaging import MAX_IMAGE_BYTES, PixelBuffer, decode_image_file, encode_pixel_buffer
from .model import (
    BitOrder,
    ByteOrder,
    GlyphSet,
    GlyphSetConfig,
    Padding,
    ReadingOrder,
    RecognitionConfig,
)
from .reading_order import reorder_glyphs
from .recognizer import recognize, rotate_buffer, suggest_dimensions
from .renderer import render_grid_overlay
from .rom import parse_rom, serialize_rom
from .systems import (
    binary_format_source,
    config_for_system,
    resolve_character_rom,
    select_system,
)
from .textimport import parse_text_to_glyphs, summarize
from .transport import (
    decode_base64,
    deserialize_set,
    encode_base64,
    envelope_from_dict,
    envelope_to_dict,
    serialize_set,
)

structlog.configure(
    processors=[
        structlog.dev.ConsoleRenderer(),
    ],
)

logger = structlog.get_logger(__name__)

SERVICE_NAME = "charrom"
SERVICE_VERSION = "0.1.0"
SUPPORTED_CONTENT_TYPES = (
    "image/png",
    "image/jpeg",
    "image/gif",
    "image/webp",
    "image/bmp",
)

app = FastAPI(
    title=SERVICE_NAME,
    description="Character ROM bitmap font codec and glyph recognition engine",
    version=SERVICE_VERSION,
)


# --------------------------------------------------------------------------
# Request / Response models
# --------------------------------------------------------------------------


class GlyphConfigModel(BaseModel):
    """Binary layout, in the camelCase form used by the storage envelope."""

    width: int = Field(..., ge=1, description="Glyph width in pixels", examples=[8])
    height: int = Field(..., ge=1, description="Glyph height in pixels", examples=[8])
    bitOrder: BitOrder = Field(default=BitOrder.MSB, description="msb or lsb")
    padding: Padding = Field(default=Padding.RIGHT, description="left or right")
    byteOrder: ByteOrder | None = Field(
        default=None,
        description="big or little; omitted means big",
    )

    def to_config(self) -> GlyphSetConfig:
        return GlyphSetConfig.from_dict(self.model_dump(exclude_none=True))


class RomParseRequest(BaseModel):
    """Request body for /rom/parse."""

    config: GlyphConfigModel
    data: str = Field(..., description="Base64-encoded ROM bytes", examples=["AH5CQn4AAAA="])


class GlyphListResponse(BaseModel):
    """Response body for /rom/parse."""

    count: int
    glyphs: list[list[list[bool]]]


class RomSerializeRequest(BaseModel):
    """Request body for /rom/serialize."""

    config: GlyphConfigModel
    glyphs: list[list[list[bool]]] = Field(default_factory=list)


class GlyphSetModel(BaseModel):
    """Request body for /sets/serialize."""

    metadata: dict[str, Any] = Field(default_factory=dict)
    config: GlyphConfigModel
    glyphs: list[list[list[bool]]] = Field(default_factory=list)


class EnvelopeModel(BaseModel):
    """Storage envelope ``{metadata, config, binaryData}``."""

    metadata: dict[str, Any] = Field(default_factory=dict)
    config: GlyphConfigModel
    binaryData: str


# Response configs use the envelope dict form (byteOrder omitted when absent)


class EnvelopeResponse(BaseModel):
    """Response body for /sets/serialize."""

    metadata: dict[str, Any]
    config: dict[str, Any]
    binaryData: str


class GlyphSetResponse(BaseModel):
    """Response body for /sets/deserialize."""

    metadata: dict[str, Any]
    config: dict[str, Any]
    glyphs: list[list[list[bool]]]


class RecognitionOptions(BaseModel):
    """JSON form field sent alongside the image on /recognize."""

    char_width: int = Field(default=8, ge=1)
    char_height: int = Field(default=8, ge=1)
    offset_x: int = Field(default=0, ge=0)
    offset_y: int = Field(default=0, ge=0)
    pixel_width: int = Field(default=1, ge=1)
    pixel_height: int = Field(default=1, ge=1)
    gap_x: int = Field(default=0, ge=0)
    gap_y: int = Field(default=0, ge=0)
    force_columns: int = Field(default=0, ge=0, description="0 = auto-detect")
    force_rows: int = Field(default=0, ge=0, description="0 = auto-detect")
    threshold: float = Field(default=128, ge=0, le=255)
    invert: bool = False
    rotation_degrees: float = Field(default=0.0, ge=-2.0, le=2.0)
    order: ReadingOrder = Field(default=ReadingOrder.LTR_TTB)
    logical_order: bool = Field(
        default=False,
        description="Return glyphs permuted into logical order instead of raster order",
    )

    def to_config(self) -> RecognitionConfig:
        return RecognitionConfig(
            reading_order=self.order,
            **self.model_dump(exclude={"order", "logical_order"}),
        )


class RecognizeResponse(BaseModel):
    """Response body for /recognize."""

    columns: int
    rows: int
    image_width: int
    image_height: int
    glyphs: list[list[list[bool]]]


class SuggestionModel(BaseModel):
    width: int
    height: int
    columns: int
    rows: int


class TextParseRequest(BaseModel):
    """Request body for /text/parse."""

    text: str = Field(..., examples=["0x00, 0x7E, 0x42, 0x42, 0x7E, 0x00, 0x00, 0x00"])
    config: GlyphConfigModel = Field(
        default_factory=lambda: GlyphConfigModel(width=8, height=8),
    )


class TextParseResponse(BaseModel):
    """Response body for /text/parse."""

    data: str = Field(description="Parsed bytes, base64-encoded")
    detected_format: str
    invalid_count: int
    summary: str
    glyphs: list[list[list[bool]]]


class SystemResponse(BaseModel):
    """Response body for /systems/{system_id}."""

    id: str
    name: str
    manufacturer: str
    config: dict[str, Any] | None = Field(
        default=None,
        description="Envelope-form config, or null when the character ROM is unknown",
    )
    glyph_count: int | None = None
    format_source: str


class HealthResponse(BaseModel):
    """Response body for /health."""

    status: str
    service: str
    version: str


# --------------------------------------------------------------------------
# Helpers
# --------------------------------------------------------------------------


def _parse_options(options: str) -> RecognitionOptions:
    try:
        return RecognitionOptions.model_validate_json(options)
    except ValidationError as e:
        logger.warning("recognition_options_rejected", errors=e.error_count())
        raise HTTPException(status_code=422, detail=f"Invalid options: {e}")


async def _read_upload(file: UploadFile) -> PixelBuffer:
    if file.content_type and file.content_type not in SUPPORTED_CONTENT_TYPES:
        raise HTTPException(
            status_code=415,
            detail=(
                f"Unsupported image type: {file.content_type}. "
                "Use PNG, JPEG, GIF, WebP or BMP."
            ),
        )

    image_bytes = await file.read()
    try:
        return decode_image_file(image_bytes, MAX_IMAGE_BYTES)
    except FileTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except UnsupportedFormatError as e:
        raise HTTPException(status_code=415, detail=str(e))


# --------------------------------------------------------------------------
# Endpoints
# --------------------------------------------------------------------------


@app.post("/rom/parse", response_model=GlyphListResponse)
async def parse_rom_endpoint(request: RomParseRequest) -> GlyphListResponse:
    """Decode a base64 ROM image into glyphs."""
    try:
        config = request.config.to_config()
        glyphs = parse_rom(decode_base64(request.data), config)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("parse_rom_failed", error=str(e))
        raise HTTPException(status_code=500, detail="ROM parsing failed")

    return GlyphListResponse(count=len(glyphs), glyphs=glyphs)


@app.post(
    "/rom/serialize",
    response_class=Response,
    responses={
        200: {"content": {"application/octet-stream": {}}, "description": "Raw ROM image"},
        422: {"description": "Invalid input"},
    },
)
async def serialize_rom_endpoint(request: RomSerializeRequest) -> Response:
    """Encode glyphs into a raw ROM byte stream."""
    try:
        data = serialize_rom(request.glyphs, request.config.to_config())
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("serialize_rom_failed", error=str(e))
        raise HTTPException(status_code=500, detail="ROM serialization failed")

    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={"Content-Disposition": 'attachment; filename="charset.bin"'},
    )


@app.post("/sets/serialize", response_model=EnvelopeResponse)
async def serialize_set_endpoint(request: GlyphSetModel) -> dict[str, Any]:
    """Project a glyph set onto its storage envelope."""
    try:
        glyph_set = GlyphSet(
            metadata=request.metadata,
            config=request.config.to_config(),
            glyphs=request.glyphs,
        )
        return envelope_to_dict(serialize_set(glyph_set))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("serialize_set_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Serialization failed")


@app.post("/sets/deserialize", response_model=GlyphSetResponse)
async def deserialize_set_endpoint(request: EnvelopeModel) -> dict[str, Any]:
    """Rebuild a glyph set from its storage envelope."""
    try:
        payload = {
            "metadata": request.metadata,
            "config": request.config.model_dump(exclude_none=True),
            "binaryData": request.binaryData,
        }
        glyph_set = deserialize_set(envelope_from_dict(payload))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("deserialize_set_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Deserialization failed")

    return {
        "metadata": glyph_set.metadata,
        "config": glyph_set.config.to_dict(),
        "glyphs": glyph_set.glyphs,
    }


@app.post("/recognize", response_model=RecognizeResponse)
async def recognize_endpoint(
    file: UploadFile = File(...),
    options: str = Form(default="{}"),
) -> RecognizeResponse:
    """Extract a glyph grid from an uploaded image."""
    opts = _parse_options(options)
    buffer = await _read_upload(file)

    try:
        config = opts.to_config()
        result = recognize(buffer, config)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("recognize_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Recognition failed")

    glyphs = result.glyphs
    if opts.logical_order:
        glyphs = reorder_glyphs(glyphs, result.rows, result.columns, config.reading_order)

    return RecognizeResponse(
        columns=result.columns,
        rows=result.rows,
        image_width=result.image_width,
        image_height=result.image_height,
        glyphs=glyphs,
    )


@app.post(
    "/recognize/overlay",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}, "description": "Image with sampling grid"},
        422: {"description": "Invalid input"},
    },
)
async def recognize_overlay(
    file: UploadFile = File(...),
    options: str = Form(default="{}"),
) -> Response:
    """Render the (rotated) upload with the sampling grid drawn on top."""
    opts = _parse_options(options)
    buffer = await _read_upload(file)

    try:
        config = opts.to_config()
        preview = render_grid_overlay(rotate_buffer(buffer, config.rotation_degrees), config)
        png_bytes = encode_pixel_buffer(preview)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.error("recognize_overlay_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Preview failed")

    return Response(content=png_bytes, media_type="image/png")


@app.post("/recognize/suggest", response_model=list[SuggestionModel])
async def suggest_endpoint(file: UploadFile = File(...)) -> list[SuggestionModel]:
    """Suggest glyph sizes that tile the uploaded image."""
    buffer = await _read_upload(file)
    return [
        SuggestionModel(width=s.width, height=s.height, columns=s.columns, rows=s.rows)
        for s in suggest_dimensions(buffer.width, buffer.height)
    ]


@app.post("/text/parse", response_model=TextParseResponse)
async def parse_text_endpoint(request: TextParseRequest) -> TextParseResponse:
    """Parse byte values pasted as C, assembler or JavaScript source."""
    try:
        result = parse_text_to_glyphs(request.text, request.config.to_config())
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    if result.parsed.error:
        logger.warning("text_parse_rejected", error=result.parsed.error)
        raise HTTPException(status_code=422, detail=result.parsed.error)

    return TextParseResponse(
        data=encode_base64(result.parsed.data),
        detected_format=result.parsed.detected_format,
        invalid_count=result.parsed.invalid_count,
        summary=summarize(result.parsed, len(result.glyphs)),
        glyphs=result.glyphs,
    )


@app.get("/systems/{system_id}", response_model=SystemResponse)
async def system_endpoint(system_id: str) -> SystemResponse:
    """Resolved character ROM layout of a known computer system."""
    try:
        system = select_system(system_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    rom = resolve_character_rom(system.character_rom)
    config = config_for_system(system.id).to_dict() if rom is not None else None

    return SystemResponse(
        id=system.id,
        name=system.name,
        manufacturer=system.manufacturer,
        config=config,
        glyph_count=rom.count if rom is not None else None,
        format_source=binary_format_source(system),
    )


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint for Docker and load balancer probes."""
    return HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
    )
