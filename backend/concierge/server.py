"""FastAPI server for the listing concierge."""

import os
from typing import Any, Literal

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .agent import ListingConcierge
from .config import Settings
from .data.store import create_listing_store
from .errors import AssistantError, MalformedInput
from .utils.logging import logger


class ConversationTurn(BaseModel):
    """A prior chat turn held by the client."""

    model_config = ConfigDict(extra="allow")

    role: Literal["user", "assistant"] = Field(..., description="Turn author")
    text: str = Field(
        "",
        validation_alias=AliasChoices("text", "parts", "content"),
        description="Turn text",
    )

    @field_validator("role", mode="before")
    @classmethod
    def normalize_role(cls, value: Any) -> Any:
        # Web clients label model turns "model"
        if isinstance(value, str) and value.strip().lower() == "model":
            return "assistant"
        return value


class AssistantMessageRequest(BaseModel):
    """Input for POST /assistant/message."""

    model_config = ConfigDict(extra="allow")

    message: str | None = Field(None, description="The user's question")
    # Accepted but not used for grounding: every request stands alone
    history: list[ConversationTurn] | None = Field(None, description="Client-side transcript")


class AssistantMessageResponse(BaseModel):
    text: str


class LedgerEntryOut(BaseModel):
    title: str
    type: str
    displayPrice: str
    location: str
    normalizedPrice: int
    description: str


class InventoryPreview(BaseModel):
    count: int
    entries: list[LedgerEntryOut]
    ledger: str


app = FastAPI(
    title="Listing Concierge API",
    description="Inventory-grounded real estate assistant",
    version="1.0.0",
)

cors_origins = os.getenv("CORS_ORIGINS", "*")
cors_origins_list = [origin.strip() for origin in cors_origins.split(",")] if cors_origins != "*" else ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_settings: Settings | None = None
_concierge: ListingConcierge | None = None


def get_settings() -> Settings:
    """Load settings once per process."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        if not _settings.has_credential:
            logger.warning("OPENAI_API_KEY is not set; assistant requests will fail until it is configured")
    return _settings


def get_concierge() -> ListingConcierge:
    """Get or create the concierge instance."""
    global _concierge
    if _concierge is None:
        settings = get_settings()
        _concierge = ListingConcierge(settings, create_listing_store(settings))
    return _concierge


def reset_concierge() -> None:
    """Drop cached settings and concierge (useful for testing)."""
    global _settings, _concierge
    _settings = None
    _concierge = None


@app.exception_handler(AssistantError)
async def assistant_error_handler(request: Request, exc: AssistantError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("[%s] %s: %s", request.url.path, exc.code, exc, exc_info=exc.__cause__)
    else:
        logger.info("[%s] rejected: %s", request.url.path, exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("[%s] invalid body: %s", request.url.path, exc.errors())
    return await assistant_error_handler(request, MalformedInput("Request body failed validation"))


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("[%s] unexpected failure", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=AssistantError().to_payload())


@app.post("/assistant/message", response_model=AssistantMessageResponse)
async def assistant_message(
    request: AssistantMessageRequest,
    concierge: ListingConcierge = Depends(get_concierge),
):
    """
    Answer a question about available properties.

    Each request is grounded in a fresh inventory snapshot; ``history`` is
    accepted for client compatibility but not folded into the prompt.
    """
    if request.message is None or not request.message.strip():
        raise MalformedInput("Missing message")

    logger.info(
        "[/assistant/message] message=%r history_turns=%s",
        request.message[:100],
        len(request.history or []),
    )

    try:
        text = await concierge.respond(request.message)
    except AssistantError:
        raise
    except Exception as exc:
        raise AssistantError("Unexpected assistant failure") from exc

    return AssistantMessageResponse(text=text)


@app.get("/assistant/inventory", response_model=InventoryPreview)
async def assistant_inventory(concierge: ListingConcierge = Depends(get_concierge)):
    """Show the ledger the assistant would currently be grounded on."""
    entries, ledger = await concierge.preview_inventory()
    return InventoryPreview(
        count=len(entries),
        entries=[
            LedgerEntryOut(
                title=entry.title,
                type=entry.type,
                displayPrice=entry.display_price,
                location=entry.location,
                normalizedPrice=entry.normalized_price,
                description=entry.description,
            )
            for entry in entries
        ],
        ledger=ledger,
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "listing-concierge"}


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Listing Concierge API",
        "version": "1.0.0",
        "endpoints": {
            "/assistant/message": "POST - Ask the assistant about available properties",
            "/assistant/inventory": "GET - Preview the ledger the assistant is grounded on",
            "/health": "GET - Health check",
        },
    }
