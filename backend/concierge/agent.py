"""LangGraph pipeline: fetch inventory, compile ledger, assemble prompt, generate."""

import asyncio
from typing import Any

from langgraph.graph import END, StateGraph
from typing_extensions import TypedDict

from .config import Settings
from .data.store import ListingRecord, ListingStore
from .errors import BackendError, MalformedInput
from .generation import GenerationClient
from .ledger import LedgerEntry, audit_grounding, compile_ledger, render_ledger
from .prompt_builder import build_grounding_prompt
from .utils.logging import logger


class AssistantState(TypedDict, total=False):
    """Per-request pipeline state. Nothing here outlives the request."""

    message: str
    records: list[ListingRecord]
    entries: list[LedgerEntry]
    ledger: str
    prompt: str
    text: str


def create_assistant_graph(
    settings: Settings,
    store: ListingStore,
    generator: GenerationClient,
):
    """Create the linear assistant graph."""

    async def fetch_inventory(state: AssistantState) -> dict[str, Any]:
        records = await store.list_active_listings(settings.snapshot_limit)
        logger.debug("[fetch_inventory] %s listings in snapshot", len(records))
        return {"records": records}

    def compile_context(state: AssistantState) -> dict[str, Any]:
        entries = compile_ledger(state["records"], settings.description_budget)
        return {
            "entries": entries,
            "ledger": render_ledger(entries, settings.currency_symbol),
        }

    def assemble_prompt(state: AssistantState) -> dict[str, Any]:
        return {"prompt": build_grounding_prompt(state["ledger"], state["message"], settings)}

    async def generate(state: AssistantState) -> dict[str, Any]:
        text = await generator.generate(state["prompt"])

        if settings.strict_grounding:
            ungrounded = audit_grounding(text, state["entries"])
            if ungrounded:
                logger.warning("[generate] Reply bolds phrases absent from the ledger: %s", ungrounded)

        return {"text": text}

    workflow = StateGraph(AssistantState)

    workflow.add_node("fetch_inventory", fetch_inventory)
    workflow.add_node("compile_context", compile_context)
    workflow.add_node("assemble_prompt", assemble_prompt)
    workflow.add_node("generate", generate)

    workflow.set_entry_point("fetch_inventory")
    workflow.add_edge("fetch_inventory", "compile_context")
    workflow.add_edge("compile_context", "assemble_prompt")
    workflow.add_edge("assemble_prompt", "generate")
    workflow.add_edge("generate", END)

    return workflow.compile()


class ListingConcierge:
    """High-level wrapper for the assistant pipeline."""

    def __init__(
        self,
        settings: Settings,
        store: ListingStore,
        generator: GenerationClient | None = None,
    ):
        """
        Initialize the concierge.

        Args:
            settings: Explicit runtime configuration.
            store: Listing store to snapshot on every request.
            generator: Generation client; built from settings when omitted.
        """
        self.settings = settings
        self.store = store
        self.generator = generator or GenerationClient(settings)
        self.graph = create_assistant_graph(settings, store, self.generator)

    async def run(self, message: str) -> AssistantState:
        """Run the full pipeline and return its final state."""
        if not isinstance(message, str) or not message.strip():
            raise MalformedInput("Empty message")

        # Credential is checked before the store or the backend are touched
        self.settings.require_credential()

        try:
            return await asyncio.wait_for(
                self.graph.ainvoke({"message": message}),
                timeout=self.settings.pipeline_timeout or None,
            )
        except asyncio.TimeoutError as exc:
            logger.error("Assistant pipeline exceeded %ss", self.settings.pipeline_timeout)
            raise BackendError("Assistant pipeline timed out") from exc

    async def respond(self, message: str) -> str:
        """Answer one user message, grounded only in the current inventory."""
        state = await self.run(message)
        return state["text"]

    async def preview_inventory(self) -> tuple[list[LedgerEntry], str]:
        """Compile the current snapshot without calling the backend."""
        records = await self.store.list_active_listings(self.settings.snapshot_limit)
        entries = compile_ledger(records, self.settings.description_budget)
        return entries, render_ledger(entries, self.settings.currency_symbol)
