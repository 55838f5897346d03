"""Estimation orchestrator for Costeo AI.

Turns free-text contract descriptions into a priced plan:

    sources -> size policy -> (condensation) -> structured generation
            -> two-stage decode -> plan normalization -> totals

Condensation mode (source over the direct-call ceiling):
- The source is split into fixed-size character chunks
- Each chunk gets an independent extraction call (bounded concurrency)
- One merge call joins the partial extractions into a deduplicated summary
- The summary replaces the source in the final structured call

The orchestrator keeps no state across requests and never retries the
oracle; any oracle failure reaches the caller as an OracleError.
"""

import asyncio
import re
import time
from typing import Any, Dict, List, Mapping, Optional, Union
from uuid import uuid4

import structlog

from config.errors import CosteoError, InputTooLarge, OracleUnavailable
from config.settings import Settings, settings as default_settings
from models.costing import (
    CatalogSamples,
    CostParameters,
    EstimationMeta,
    EstimationMode,
    EstimationResult,
    EstimationSources,
    PLAN_OUTPUT_SCHEMA,
)
from services.llm_service import LLMService
from services.output_parser import decode_plan_output
from services.plan_normalizer import normalize_plan
from services.prompts import (
    CHUNK_EXTRACTION_SYSTEM_PROMPT,
    MERGE_SYSTEM_PROMPT,
    PARTIAL_SEPARATOR,
    PLAN_SYSTEM_PROMPT,
    build_plan_prompt,
)
from services.totals_engine import compute_totals
from utils.pipeline_logger import (
    log_condensation,
    log_estimation_complete,
    log_estimation_failed,
    log_estimation_start,
)

logger = structlog.get_logger()

_WHITESPACE = re.compile(r"\s+")

# (label, EstimationSources attribute) in prompt order
SOURCE_SECTIONS = (
    ("OBJETO", "object_text"),
    ("NOTAS", "notes"),
    ("METODOLOGÍA (texto)", "methodology_text"),
    ("TDR (texto)", "tdr_text"),
    ("METODOLOGÍA (PDF extraído)", "methodology_pdf_text"),
    ("TDR (PDF extraído)", "tdr_pdf_text"),
)


def assemble_source_text(sources: EstimationSources) -> str:
    """Join the non-empty sources under labels and collapse whitespace."""
    parts = []
    for label, attr in SOURCE_SECTIONS:
        text = (getattr(sources, attr) or "").strip()
        if text:
            parts.append(f"{label}: {text}")
    return _WHITESPACE.sub(" ", " ".join(parts)).strip()


def chunk_text(text: str, chunk_chars: int) -> List[str]:
    """Split text into consecutive chunks of at most chunk_chars characters."""
    if chunk_chars <= 0:
        raise ValueError("chunk_chars must be positive")
    return [text[i:i + chunk_chars] for i in range(0, len(text), chunk_chars)]


class EstimationOrchestrator:
    """Drives the oracle to produce a priced estimation plan.

    Catalogs arrive as plain input; storage is the caller's business.
    """

    def __init__(
        self,
        llm_service: Optional[LLMService] = None,
        settings: Optional[Settings] = None
    ):
        """Initialize EstimationOrchestrator.

        Args:
            llm_service: Oracle client (default built from settings).
            settings: Limits and tuning (default module settings).
        """
        self.settings = settings or default_settings
        self.llm = llm_service or LLMService(
            model=self.settings.llm_model,
            temperature=self.settings.llm_temperature,
            api_key=self.settings.openai_api_key,
            timeout_seconds=self.settings.llm_timeout_seconds,
            max_tokens=self.settings.llm_max_tokens,
        )

    def check_source_size(self, source_chars: int) -> EstimationMode:
        """Apply the size policy.

        Args:
            source_chars: Length of the assembled source text.

        Returns:
            The mode the source will be processed in.

        Raises:
            InputTooLarge: Over the hard ceiling, or over the direct-call
                ceiling with condensation disabled.
        """
        cfg = self.settings
        if source_chars > cfg.max_source_chars:
            raise InputTooLarge(source_chars, cfg.max_source_chars)
        if source_chars <= cfg.direct_max_chars:
            return EstimationMode.DIRECT
        if not cfg.condensation_enabled:
            raise InputTooLarge(source_chars, cfg.direct_max_chars)
        return EstimationMode.CONDENSED

    async def estimate(
        self,
        sources: Union[EstimationSources, Mapping[str, Any]],
        catalogs: Union[CatalogSamples, Mapping[str, Any], None] = None,
        params: Union[CostParameters, Mapping[str, Any], None] = None
    ) -> EstimationResult:
        """Produce a normalized plan and its cost breakdown.

        Args:
            sources: Contract texts (objeto, metodologia, TDR, notes).
            catalogs: Professional and material catalog records used as
                pricing reference.
            params: Financial parameters; totals always use these, never
                values echoed by the oracle.

        Returns:
            EstimationResult with plan, totals and run metadata.

        Raises:
            InputTooLarge: Source over the configured ceiling.
            OracleUnavailable: No oracle credential.
            OracleError: Oracle call failure or malformed output.
        """
        if not isinstance(sources, EstimationSources):
            sources = EstimationSources.model_validate(dict(sources))
        if catalogs is None:
            catalogs = CatalogSamples()
        elif not isinstance(catalogs, CatalogSamples):
            catalogs = CatalogSamples.model_validate(dict(catalogs))
        if params is None:
            params = CostParameters()
        elif not isinstance(params, CostParameters):
            params = CostParameters.model_validate(dict(params))

        request_id = f"cst-{uuid4().hex[:12]}"
        source_text = assemble_source_text(sources)
        mode = self.check_source_size(len(source_text))

        if not self.llm.configured:
            raise OracleUnavailable()

        meta = EstimationMeta(mode=mode, source_chars=len(source_text))
        start = time.monotonic()
        log_estimation_start(request_id, len(source_text), mode.value)

        try:
            context = source_text
            if mode == EstimationMode.CONDENSED:
                context = await self._condense(source_text, meta)
                log_condensation(request_id, meta.chunk_count, len(context))

            result = await self._generate_plan(context, catalogs, params, meta)
        except CosteoError as e:
            log_estimation_failed(request_id, e.code, e.message)
            raise

        result.meta.duration_ms = int((time.monotonic() - start) * 1000)
        log_estimation_complete(
            request_id,
            result.totals.to_dict(),
            result.meta.duration_ms,
            result.meta.tokens_used
        )
        return result

    async def _call(self, system_prompt: str, user_message: str, meta: EstimationMeta) -> str:
        response = await self.llm.generate_with_system_prompt(system_prompt, user_message)
        meta.oracle_calls += 1
        meta.tokens_used += response.get("tokens_used", 0)
        return response.get("content") or ""

    async def _condense(self, source_text: str, meta: EstimationMeta) -> str:
        """Extract requirements per chunk, then merge them into one summary."""
        chunks = chunk_text(source_text, self.settings.condense_chunk_chars)
        meta.chunk_count = len(chunks)

        # Partial extractions are independent; cap concurrency for rate limits
        semaphore = asyncio.Semaphore(self.settings.condense_concurrency)

        async def extract(index: int, chunk: str) -> str:
            async with semaphore:
                logger.debug("chunk_extraction_started", chunk=index, chars=len(chunk))
                return await self._call(CHUNK_EXTRACTION_SYSTEM_PROMPT, chunk, meta)

        tasks = [asyncio.ensure_future(extract(i, chunk)) for i, chunk in enumerate(chunks)]
        try:
            partials = await asyncio.gather(*tasks)
        except BaseException:
            # First failure wins; stop the remaining extractions
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        logger.info("chunk_extractions_complete", chunks=len(chunks))

        return await self._call(
            MERGE_SYSTEM_PROMPT,
            PARTIAL_SEPARATOR.join(partials),
            meta
        )

    async def _generate_plan(
        self,
        context: str,
        catalogs: CatalogSamples,
        params: CostParameters,
        meta: EstimationMeta
    ) -> EstimationResult:
        sample_size = self.settings.catalog_sample_size
        prompt = build_plan_prompt(
            context,
            params,
            catalogs.professionals[:sample_size],
            catalogs.materials[:sample_size],
        )

        response = await self.llm.generate_structured(
            PLAN_SYSTEM_PROMPT,
            prompt,
            PLAN_OUTPUT_SCHEMA,
            schema_name="cost_plan"
        )
        meta.oracle_calls += 1
        meta.tokens_used += response.get("tokens_used", 0)

        decoded = decode_plan_output(response.get("content"))
        plan = normalize_plan(decoded)
        totals = compute_totals(plan.professionals, plan.materials, params)

        logger.info(
            "plan_generated",
            professionals=len(plan.professionals),
            materials=len(plan.materials),
            assumptions=len(plan.assumptions),
            total_production=totals.total_production
        )

        return EstimationResult(plan=plan, totals=totals, meta=meta)


def describe_estimate(result: EstimationResult, params: CostParameters) -> Dict[str, Any]:
    """API response body for a successful estimate."""
    body = result.to_dict()
    return {
        "status": "ok",
        "plan": body["plan"],
        "totals": body["totals"],
        "input": params.model_dump(by_alias=True),
        "meta": body["meta"],
    }
