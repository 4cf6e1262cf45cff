"""Generation orchestrator: one guarded, time-bounded call per plan."""
from __future__ import annotations

import asyncio
import logging
from time import perf_counter
from typing import Awaitable, Callable, List, Optional, Tuple

from plans.models import GroundingSource, Plan, clean_sources
from plans.parser import parse_plan
from shared.errors import GenerationError, GenerationInProgressError, ValidationError
from .state import GenerationResult

_logger = logging.getLogger("advisor")

PlanGenerator = Callable[[str], Awaitable[GenerationResult]]

EMPTY_DESCRIPTION_MESSAGE = "Por favor, describe tu negocio."


class PlanOrchestrator:
    """Calls the plan-generation collaborator and normalizes its result.

    Only one generation may be in flight at a time. The collaborator is
    called exactly once per accepted request, never retried, and bounded by
    ``timeout`` seconds.
    """

    def __init__(self, generator: PlanGenerator, *, timeout: Optional[float] = 180.0):
        self.generator = generator
        self.timeout = timeout
        self.is_loading = False

    def check_request(self, business_description: str) -> None:
        """Raise ValidationError if a generation for this input must not start."""
        if not business_description or not business_description.strip():
            raise ValidationError(EMPTY_DESCRIPTION_MESSAGE)
        if self.is_loading:
            raise GenerationInProgressError()

    async def generate(self, business_description: str) -> Tuple[Plan, List[GroundingSource]]:
        """Generate and parse a plan.

        Raises:
            ValidationError: blank description or a generation already running.
            GenerationError: the collaborator failed, timed out or returned
                something other than a GenerationResult.
        """
        self.check_request(business_description)

        self.is_loading = True
        start = perf_counter()
        _logger.info("GENERATE START | description=%s", business_description[:200])
        try:
            result = await asyncio.wait_for(self.generator(business_description), timeout=self.timeout)
            plan = parse_plan(result.raw)
            sources = clean_sources(list(result.sources or []))
        except asyncio.TimeoutError as e:
            _logger.error("GENERATE TIMEOUT after %.1fs", perf_counter() - start)
            raise GenerationError() from e
        except Exception as e:
            _logger.error("GENERATE FAILED after %.1fs: %r", perf_counter() - start, e)
            raise GenerationError() from e
        finally:
            self.is_loading = False

        _logger.info(
            "GENERATE DONE | duration=%.2fs | empty=%s | sources=%d",
            perf_counter() - start,
            plan.is_empty(),
            len(sources),
        )
        return plan, sources
