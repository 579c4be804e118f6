import logging
from typing import List, Optional

import google.generativeai as genai

from tinigom.core.config import Settings
from tinigom.models.finance import Person

logger = logging.getLogger(__name__)


class QuoteGenerationError(Exception):
    pass


class QuoteGenerator:
    """
    Turns a prompt into quote text using OpenAI (if configured) or Gemini.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def configured(self) -> bool:
        return self.settings.has_generation_credential

    def generate(self, prompt: str) -> str:
        openai_key = self.settings.OPENAI_API_KEY
        gemini_key = self.settings.GEMINI_API_KEY

        # --- OPENAI FIRST WHEN THERE IS A KEY ---
        if openai_key:
            try:
                from openai import OpenAI
                client = OpenAI(api_key=openai_key)
                response = client.chat.completions.create(
                    model=self.settings.OPENAI_MODEL,
                    messages=[
                        {"role": "system", "content": "You write short motivational savings quotes."},
                        {"role": "user", "content": prompt},
                    ],
                )
                text = (response.choices[0].message.content or "").strip()
                if text:
                    return text
                logger.warning("[QUOTES] OpenAI returned an empty quote")
            except Exception as e:
                logger.warning(f"[QUOTES] OpenAI error: {e}")

        # --- FALLBACK TO GEMINI ---
        if not gemini_key:
            raise QuoteGenerationError("No generation API key configured (Gemini/OpenAI)")

        try:
            genai.configure(api_key=gemini_key)
            model = genai.GenerativeModel(self.settings.GEMINI_MODEL)
            response = model.generate_content(prompt)
            text = response.text.strip()
        except Exception as e:
            error_msg = str(e)
            if "429" in error_msg or "ResourceExhausted" in error_msg:
                raise QuoteGenerationError("Gemini quota exhausted") from e
            raise QuoteGenerationError(f"Gemini error: {error_msg}") from e

        if not text:
            raise QuoteGenerationError("Gemini returned an empty quote")
        return text


def clean_quote(text: str) -> str:
    """Drop surrounding whitespace and the quote marks models like to wrap answers in."""
    return text.strip().strip("\"'“”‘’`").strip()


_TONES = {
    Person.NUONE: (
        "Mature, wise, motivational tone",
        [
            'Nuone, at {pct}% - think twice, your peace depends on it',
            'Nuone, do you really need that? Your future self will thank you',
        ],
    ),
    Person.KATE: (
        "Gen Z girly tone but with depth and meaning, mixing Gen Z slang with meaningful advice",
        [
            'Kate bestie, think twice before buying - your mental health at {pct}% says yes!',
            'Kate queen, do you really need that? Saving is self-care periodt!',
        ],
    ),
}


def build_quote_prompt(person: Person, percentage: float, avoid: Optional[List[str]] = None) -> str:
    tone, examples = _TONES[person]
    pct = round(percentage)
    example_text = " or ".join(f'"{e.format(pct=pct)}"' for e in examples)

    prompt = f"""Generate a deeply meaningful and motivational savings quote for {person.value} that addresses both financial and mental wellness.

Context:
- They are {percentage:.1f}% toward their savings goal

Requirements:
- Maximum 12-15 words for meaningful impact
- Include "{person.value}" naturally in the quote
- {tone}
- Include themes like: think twice before buying, do you really need that, mindful spending, mental health benefits of saving, delayed gratification, financial peace
- Reference progress or give practical wisdom
- Examples: {example_text}
"""
    if avoid:
        previous = "\n".join(f"- {q}" for q in avoid)
        prompt += f"""
Do NOT repeat or closely paraphrase any of these recent quotes:
{previous}
"""
    prompt += "\nReturn ONLY the quote, nothing else."
    return prompt
