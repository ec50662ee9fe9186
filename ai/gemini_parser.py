"""
ai/gemini_parser.py
-------------------
Uses Google Gemini to turn a free-text message into structured
transaction fields.

Responsibilities:
    - Understand short messages such as "lunch 45k cash" or "salary 8.5m to BCA".
    - Extract: type, amount, admin_fee, category, wallet, notes, date.
    - Never raise: any failure comes back as {"error": ..., "question": ...}
      so callers can fall back to manual entry.
"""

import json
from datetime import date

import google.generativeai as genai

from config import GEMINI_API_KEY, GEMINI_MODEL
from utils.logger import get_logger

logger = get_logger(__name__)

# Configure the Gemini client once at module level
genai.configure(api_key=GEMINI_API_KEY)

_model = genai.GenerativeModel(GEMINI_MODEL)

# ── System prompt for the AI ─────────────────────────────

_SYSTEM_PROMPT = """You are a personal finance assistant. Your only job is to turn the
user's message into JSON describing ONE financial transaction.

Today's date: {today}
The user's wallets: {wallets}
The user's expense categories: {categories}

## Rules:

1. **type**: "expense" for spending (bought, paid, bill, rent...), "income" for money
   received (salary, got paid, refund, transfer in...). With no clear verb, use "expense".
2. **amount**: the number before fees. Expand shorthand: "45k" = 45000, "8.5m" = 8500000.
3. **admin_fee**: a fee mentioned explicitly ("fee 2500", "admin 6.5k"), otherwise 0.
4. **category**: for expenses, the closest name from the category list, copied exactly.
   Omit for income.
5. **wallet**: the wallet name from the list if one is mentioned, copied exactly, else null.
6. **date**: YYYY-MM-DD. No date mentioned → today. "yesterday" → one day before today.
7. **notes**: a short description.

## Examples:
- "lunch 45k cash" → {{"type":"expense","amount":45000,"admin_fee":0,"category":"Food","wallet":"Cash","notes":"Lunch","date":"{today}"}}
- "salary 8.5m to BCA fee 6500" → {{"type":"income","amount":8500000,"admin_fee":6500,"wallet":"BCA","notes":"Salary","date":"{today}"}}

## Format:
Return JSON only, no explanation or markdown:
{{"type":"expense|income","amount":<number>,"admin_fee":<number>,"category":"<name>","wallet":"<name>|null","notes":"<text>","date":"YYYY-MM-DD"}}

If the message is not a transaction or is too vague: {{"error":"unclear","question":"<short clarifying question>"}}
"""


def _strip_fences(raw: str) -> str:
    """Remove markdown code fences Gemini sometimes wraps JSON in."""
    raw = raw.strip()
    if raw.startswith("```"):
        raw = raw.split("\n", 1)[1] if "\n" in raw else raw[3:]
    if raw.endswith("```"):
        raw = raw[:-3]
    return raw.strip()


def parse_transaction(
    text: str,
    wallet_names: list[str] | None = None,
    category_names: list[str] | None = None,
) -> dict:
    """
    Send a natural-language financial message to Gemini and get structured data back.

    Args:
        text: The raw text from the user, e.g. "coffee 25k gopay".
        wallet_names: The user's wallet names, offered to the model verbatim.
        category_names: The user's category names, offered to the model verbatim.

    Returns:
        A dict with keys: type, amount, admin_fee, category, wallet, notes, date.
        OR a dict with keys: error, question (unclear message or API failure).
    """
    prompt = _SYSTEM_PROMPT.format(
        today=date.today().isoformat(),
        wallets=", ".join(wallet_names or []) or "(none)",
        categories=", ".join(category_names or []) or "(none)",
    )

    raw = ""
    try:
        response = _model.generate_content(
            [
                {"role": "user", "parts": [{"text": prompt}]},
                {"role": "user", "parts": [{"text": text}]},
            ],
            generation_config=genai.GenerationConfig(
                temperature=0.1,
                max_output_tokens=300,
            ),
        )
        raw = _strip_fences(response.text)
        result = json.loads(raw)
        if not isinstance(result, dict):
            raise json.JSONDecodeError("not an object", raw, 0)
        logger.info(f"Gemini parsed: {result}")
        return result

    except json.JSONDecodeError:
        logger.warning(f"Gemini returned non-JSON: {raw!r}")
        return {"error": "parse_failed", "question": "I didn't understand that. Could you rephrase it?"}
    except Exception as e:
        logger.error(f"Gemini API error: {e}")
        return {"error": "api_error", "question": "The assistant is unavailable right now."}
