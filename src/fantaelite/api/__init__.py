"""REST API for the fantaelite roster generator."""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from functools import partial
from typing import Optional, Tuple

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from fantaelite.allocator import (
    AllocationResult,
    CatalogInsufficientError,
    allocate,
    allocate_pair,
    cheapest_composition,
)
from fantaelite.api.schemas import (
    BudgetCheckResponse,
    CatalogPreviewResponse,
    DiversityResponse,
    GenerateRequest,
    GenerateResponse,
    MissingPriceResponse,
    RosterResponse,
    RosterSlotResponse,
    RosterSummaryResponse,
    RosterWarningsResponse,
)
from fantaelite.catalog import Catalog, CatalogCache, build_catalog
from fantaelite.config import AllocationSpec, Settings, build_spec, load_settings
from fantaelite.ingest import SchemaError, load_catalog_csv, normalize_rows, parse_rows_csv
from fantaelite.models import ROLE_ORDER
from fantaelite.report import missing_prices, summarize_result


logger = logging.getLogger(__name__)

SERVICE_NAME = "fantaelite"


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _require_api_key(request: Request, settings: Settings) -> None:
    token = _bearer_token(request)
    if token is None:
        raise HTTPException(status_code=401, detail="Missing Authorization header (Bearer ...)")
    if not settings.api_key:
        raise HTTPException(status_code=503, detail="API key not configured")
    if not secrets.compare_digest(token, settings.api_key):
        raise HTTPException(status_code=403, detail="Invalid API key")


def _result_to_response(result: AllocationResult, spec: AllocationSpec) -> RosterResponse:
    summary = summarize_result(result, spec)
    diversity = None
    if result.diversity is not None:
        diversity = DiversityResponse(
            overlap=result.diversity.overlap,
            overlap_fraction=result.diversity.overlap_fraction,
            max_overlap_fraction=result.diversity.max_overlap_fraction,
            satisfied=result.diversity.satisfied,
            budget_widened=result.diversity.budget_widened,
            attempts=result.diversity.attempts,
        )
    return RosterResponse(
        seed=result.seed,
        satisfied_tolerance=result.satisfied_tolerance.value,
        used_fallback=result.used_fallback,
        fallback=result.fallback.value if result.fallback is not None else None,
        attempts=result.attempts,
        players=[
            RosterSlotResponse(
                role=record.role.value,
                name=record.name,
                team=record.team,
                fantasy_rating=record.fantasy_rating,
                appearances=record.appearances,
                price=record.price,
            )
            for record in result.roster.flatten()
        ],
        summary=RosterSummaryResponse(
            counts=summary.counts,
            total=summary.total,
            spend_per_role=summary.spend_per_role,
            percent_per_role=summary.percent_per_role,
        ),
        budget=BudgetCheckResponse(
            min=summary.budget_min,
            max=summary.budget_max,
            total=summary.total,
            within_range=summary.within_range,
            diff_from_min=summary.diff_from_min,
            diff_from_max=summary.diff_from_max,
        ),
        diversity=diversity,
        warnings=RosterWarningsResponse(
            missing_prices=[
                MissingPriceResponse(role=record.role.value, name=record.name, team=record.team)
                for record in missing_prices(result)
            ],
        ),
    )


def _run_generation(
    catalog: Catalog,
    payload: GenerateRequest,
    spec: AllocationSpec,
    settings: Settings,
) -> Tuple[AllocationResult, Optional[AllocationResult], AllocationSpec]:
    if payload.paired:
        spec_b = build_spec(
            spec.mode,
            budget_min=spec.budget_min,
            budget_max=spec.budget_max,
            seed=f"{spec.seed}/b",
        )
        first, second = allocate_pair(
            catalog,
            spec,
            spec_b,
            payload.min_distinct_fraction,
            max_tries=settings.max_tries,
            top_k=settings.top_k,
        )
        return first, second, spec_b
    if payload.cheapest:
        return cheapest_composition(catalog, spec), None, spec
    return allocate(catalog, spec, max_tries=settings.max_tries, top_k=settings.top_k), None, spec


def _default_cache(settings: Settings) -> CatalogCache:
    if settings.catalog_path is None:
        return CatalogCache(refresh_seconds=settings.catalog_refresh_seconds)
    path = settings.catalog_path

    def loader() -> Catalog:
        catalog, report = load_catalog_csv(path)
        if report.dropped:
            logger.info(
                "Catalog %s: dropped %s/%s rows %s",
                path,
                report.dropped,
                report.total_rows,
                report.dropped_by_reason,
            )
        return catalog

    return CatalogCache(loader, refresh_seconds=settings.catalog_refresh_seconds)


def create_app(settings: Settings | None = None, cache: CatalogCache | None = None) -> FastAPI:
    settings = settings or load_settings()
    cache = cache or _default_cache(settings)
    app = FastAPI(title="fantaelite roster generator")
    app.state.settings = settings
    app.state.catalog_cache = cache

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "time": datetime.now(timezone.utc).isoformat(),
        }

    @app.post("/api/generate", response_model=GenerateResponse)
    async def generate(request: Request, payload: GenerateRequest):
        _require_api_key(request, settings)

        try:
            catalog = await run_in_threadpool(cache.get)
        except LookupError as exc:
            raise HTTPException(status_code=503, detail="Catalog not available") from exc
        except SchemaError as exc:
            logger.error("Catalog schema error: %s", exc)
            raise HTTPException(status_code=500, detail=f"Catalog schema error: {exc}") from exc

        try:
            spec = build_spec(
                payload.mode,
                budget_min=payload.budget_min,
                budget_max=payload.budget_max,
                seed=payload.seed,
            )
        except KeyError as exc:
            raise HTTPException(status_code=400, detail=f"Unknown mode {payload.mode!r}") from exc
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        try:
            first, second, spec_b = await run_in_threadpool(
                partial(_run_generation, catalog, payload, spec, settings)
            )
        except CatalogInsufficientError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc

        return GenerateResponse(
            mode=spec.mode,
            email=payload.email,
            seed=spec.seed,
            generated_at=datetime.now(timezone.utc),
            roster=_result_to_response(first, spec),
            second_roster=_result_to_response(second, spec_b) if second is not None else None,
        )

    @app.post("/api/catalog/preview", response_model=CatalogPreviewResponse)
    async def preview_catalog(request: Request, catalog: UploadFile = File(...)):
        _require_api_key(request, settings)
        contents = await catalog.read()
        if not contents.strip():
            raise HTTPException(status_code=400, detail="catalog file is empty")
        try:
            text = contents.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise HTTPException(status_code=400, detail="catalog file must be UTF-8 text") from exc
        headers, rows = parse_rows_csv(text)
        try:
            result = normalize_rows(rows, headers=headers)
        except SchemaError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        preview = build_catalog(result.candidates)
        report = result.report
        return CatalogPreviewResponse(
            total_rows=report.total_rows,
            accepted=report.accepted,
            dropped=report.dropped,
            dropped_by_reason=report.dropped_by_reason,
            columns=report.columns,
            role_counts={role.value: preview.size(role) for role in ROLE_ORDER},
        )

    return app
