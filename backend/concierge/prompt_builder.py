"""Grounding prompt builder for the listing concierge."""

from .config import Settings

PERSONA_TEMPLATE = """You are a friendly and professional Real Estate Concierge for '{business_name}' agency.
Your goal is to help users find properties from our inventory."""

NO_MATCH_TEMPLATE = (
    "I don't see anything like that right now, but please contact us on "
    "{contact_channel} for upcoming listings."
)

LANGUAGE_RULE = (
    "LANGUAGE ADAPTATION: Always reply in the same language the user uses. If the user "
    "writes in another language or script (for example Marathi in Devanagari script), you "
    "MUST reply in that same language and script, while keeping property details such as "
    "prices, numbers and property names exactly as listed."
)

RULES_TEMPLATE = """RULES:
1. ONLY recommend properties from the inventory above. If a user asks for something we don't have, say "{no_match}" Do not invent properties.
2. FORMATTING RULES (CRITICAL):
   - ALWAYS use bullet points for list items.
   - **Bold** the Property Title and Price.
   - Keep property descriptions short (1 sentence max).
   - Use polite, professional spacing.
3. Prices are in {currency_name} ({currency_symbol}). RawValue is the plain number to use when comparing prices.
4. If asked about contact info, provide only {contact_channel}. Never claim to have any other phone number, email or address.
5. {language_rule}"""


def build_persona(settings: Settings) -> str:
    return PERSONA_TEMPLATE.format(business_name=settings.business_name)


def build_no_match_message(settings: Settings) -> str:
    """Fixed redirect used when nothing in the inventory fits."""
    return NO_MATCH_TEMPLATE.format(contact_channel=settings.contact_channel)


def build_rules(settings: Settings) -> str:
    """Build the numbered rules block."""
    return RULES_TEMPLATE.format(
        no_match=build_no_match_message(settings),
        currency_name=settings.currency_name,
        currency_symbol=settings.currency_symbol,
        contact_channel=settings.contact_channel,
        language_rule=LANGUAGE_RULE,
    )


def build_grounding_prompt(ledger_text: str, message: str, settings: Settings) -> str:
    """
    Assemble persona, ledger, rules and the user's message, in that order.

    The message is inserted verbatim.
    """
    return f"""{build_persona(settings)}

HERE IS OUR CURRENT INVENTORY:
{ledger_text}

{build_rules(settings)}

User Message: {message}"""
