"""
Motivational quote cache.

Two cache models live side by side and are picked with QUOTE_STRATEGY:

- "single": one shared quote, valid for QUOTE_TTL_HOURS. The person it talks
  to alternates every QUOTE_TURN_HOURS, computed from the wall clock only.
  Expired rows are deleted whenever a new quote is written.
- "dual": one fresh quote per person on every call (the dashboard polls on a
  timer). Each prompt carries that person's last QUOTE_HISTORY_LIMIT quotes
  so the model does not repeat itself; older history is pruned.

There is no locking around read-then-generate. Two concurrent misses can both
generate and insert; reads always take the newest row, so the only cost is
an extra generation call.

Generation problems never reach the caller: they turn into the fallback quote
with an "error" field for the logs.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from tinigom.core.config import Settings
from tinigom.core.progress import (
    compute_contribution_percentage,
    compute_grand_total,
    compute_progress_percentage,
    compute_user_totals,
)
from tinigom.core.timeutils import utcnow
from tinigom.models.finance import MotivationalQuote, Person
from tinigom.services.ai_service import QuoteGenerationError, QuoteGenerator, build_quote_prompt, clean_quote
from tinigom.services.gateway import PersistenceGateway, StorageUnavailableError

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1)


def turn_person(now: datetime, bucket_hours: int = 6) -> Person:
    """Whose turn the shared quote is: even buckets -> Nuone, odd -> Kate."""
    bucket = int((now - EPOCH).total_seconds() // (bucket_hours * 3600))
    return Person.NUONE if bucket % 2 == 0 else Person.KATE


class QuoteStrategy(ABC):
    name = ""

    def __init__(self, gateway: PersistenceGateway, generator: QuoteGenerator, settings: Settings):
        self.gateway = gateway
        self.generator = generator
        self.settings = settings

    @abstractmethod
    def get_quote(self, now: datetime) -> Dict:
        """Quote payload for the dashboard at `now`."""

    def _user_totals(self):
        goal = self.gateway.get_settings().savings_goal
        totals = compute_user_totals(self.gateway.transactions.list())
        return goal, totals


class SingleSharedQuoteStrategy(QuoteStrategy):
    name = "single"

    def _fallback(self, error: Optional[str] = None) -> Dict:
        payload = {"quote": self.settings.FALLBACK_QUOTE, "cached": False, "fallback": True}
        if error:
            payload["error"] = error
        return payload

    def _cached(self, now: datetime) -> Optional[MotivationalQuote]:
        try:
            rows = self.gateway.quotes.list(
                filters=[MotivationalQuote.expires_at > now],
                order_by=[MotivationalQuote.created_at.desc(), MotivationalQuote.id.desc()],
                limit=1,
            )
        except StorageUnavailableError as e:
            logger.error(f"[QUOTES] Error fetching cached quote: {e}")
            return None
        return rows[0] if rows else None

    def get_quote(self, now: datetime) -> Dict:
        try:
            cached = self._cached(now)
            if cached:
                return {
                    "quote": cached.quote,
                    "cached": True,
                    "expires_at": cached.expires_at.isoformat(),
                }

            if not self.generator.configured:
                return self._fallback()

            person = turn_person(now, self.settings.QUOTE_TURN_HOURS)
            goal, totals = self._user_totals()
            percentage = compute_progress_percentage(compute_grand_total(totals), goal)

            quote = clean_quote(self.generator.generate(build_quote_prompt(person, percentage)))
            if not quote:
                raise QuoteGenerationError("Generated quote was empty")

            expires_at = now + timedelta(hours=self.settings.QUOTE_TTL_HOURS)

            try:
                removed = self.gateway.quotes.delete_where([MotivationalQuote.expires_at < now])
                if removed:
                    logger.info(f"[QUOTES] Pruned {removed} expired quotes")
            except StorageUnavailableError as e:
                logger.error(f"[QUOTES] Error pruning expired quotes: {e}")

            try:
                self.gateway.quotes.insert({
                    "quote": quote,
                    "target_user": person,
                    "created_at": now,
                    "expires_at": expires_at,
                })
            except StorageUnavailableError as e:
                # The quote is still good, it just won't be cached
                logger.error(f"[QUOTES] Error caching quote: {e}")

            logger.info(f"[QUOTES] Generated shared quote for {person.value}")
            return {
                "quote": quote,
                "cached": False,
                "generated": True,
                "expires_at": expires_at.isoformat(),
            }
        except Exception as e:
            logger.error(f"[QUOTES] Error generating quote: {e}")
            return self._fallback(str(e))


class DualQuoteStrategy(QuoteStrategy):
    name = "dual"

    def _fallback(self, now: datetime, error: Optional[str] = None) -> Dict:
        payload = {
            "nuoneQuote": self.settings.FALLBACK_QUOTE,
            "kateQuote": self.settings.FALLBACK_QUOTE,
            "fallback": True,
            "created_at": now.isoformat(),
        }
        if error:
            payload["error"] = error
        return payload

    def recent_quotes(self, person: Person) -> List[str]:
        rows = self.gateway.quotes.list(
            filters=[MotivationalQuote.target_user == person],
            order_by=[MotivationalQuote.created_at.desc(), MotivationalQuote.id.desc()],
            limit=self.settings.QUOTE_HISTORY_LIMIT,
        )
        return [row.quote for row in rows]

    def _prune_history(self, person: Person) -> None:
        stale = self.gateway.quotes.list(
            filters=[MotivationalQuote.target_user == person],
            order_by=[MotivationalQuote.created_at.desc(), MotivationalQuote.id.desc()],
            offset=self.settings.QUOTE_HISTORY_LIMIT,
        )
        if stale:
            self.gateway.quotes.delete_where([MotivationalQuote.id.in_([row.id for row in stale])])

    def get_quote(self, now: datetime) -> Dict:
        if not self.generator.configured:
            return self._fallback(now)

        try:
            goal, totals = self._user_totals()

            quotes = {}
            for person in Person:
                percentage = compute_contribution_percentage(totals[person], goal)
                prompt = build_quote_prompt(person, percentage, self.recent_quotes(person))
                quote = clean_quote(self.generator.generate(prompt))
                if not quote:
                    raise QuoteGenerationError(f"Generated quote for {person.value} was empty")
                quotes[person] = quote

            # Persist only once both quotes exist
            for person, quote in quotes.items():
                self.gateway.quotes.insert({"quote": quote, "target_user": person, "created_at": now})
                self._prune_history(person)

            logger.info("[QUOTES] Generated quotes for Nuone and Kate")
            return {
                "nuoneQuote": quotes[Person.NUONE],
                "kateQuote": quotes[Person.KATE],
                "generated": True,
                "created_at": now.isoformat(),
            }
        except Exception as e:
            logger.error(f"[QUOTES] Error generating quotes: {e}")
            return self._fallback(now, str(e))


STRATEGIES = {
    SingleSharedQuoteStrategy.name: SingleSharedQuoteStrategy,
    DualQuoteStrategy.name: DualQuoteStrategy,
}


class QuoteService:
    def __init__(self, gateway: PersistenceGateway, generator: QuoteGenerator, settings: Settings):
        try:
            strategy_cls = STRATEGIES[settings.QUOTE_STRATEGY]
        except KeyError:
            raise ValueError(f"Unknown QUOTE_STRATEGY {settings.QUOTE_STRATEGY!r}, expected one of {sorted(STRATEGIES)}")
        self.strategy = strategy_cls(gateway, generator, settings)

    def get_quote(self, now: Optional[datetime] = None) -> Dict:
        return self.strategy.get_quote(now or utcnow())
