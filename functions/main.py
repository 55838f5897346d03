"""HTTP entry points for Costeo AI.

Provides endpoints for:
- AI costing of a proposal (POST /ai/costeo)
- Professional and material catalogs (CRUD, search, Excel import)
- Saved costings (CRUD, recomputed totals)
- Service descriptor and health check

The composition root: stores and the estimation orchestrator are created
here and injected into the handlers.
"""

import asyncio
import json
from dataclasses import dataclass, field
from datetime import datetime, date, timezone
from typing import Any, Callable, Dict, List, Optional, Type

import structlog
from flask import Flask, Response, request
from flask_cors import CORS
from pydantic import BaseModel, ValidationError as PydanticValidationError
from werkzeug.exceptions import RequestEntityTooLarge

from config.settings import Settings, settings as default_settings
from config.errors import CosteoError, ErrorCode, ValidationError
from models.catalog import CostingRecord, MaterialRecord, ProfessionalRecord
from models.costing import CatalogSamples
from services.catalog_import import import_materials, import_professionals
from services.catalog_search import search_records
from services.document_text import extract_pdf_text
from services.estimation_orchestrator import EstimationOrchestrator, describe_estimate
from services.plan_normalizer import normalize_plan
from services.record_store import InMemoryRecordStore, RecordStore
from services.totals_engine import compute_totals
from validators.costing_validator import extract_params, parse_cost_parameters, parse_sources

logger = structlog.get_logger()

# Multipart fields that carry JSON; every other field is free text
JSON_FORM_FIELDS = ("params", "catalogs", "professionals", "materials", "assumptions")

COSTINGS_LIST_LIMIT = 50


# ============================================================================
# Helper Functions
# ============================================================================


def success_response(data: Dict[str, Any]) -> Dict[str, Any]:
    """Build success response."""
    return {"status": "ok", **data}


def error_response(code: str, message: str, details: Dict[str, Any] = None) -> Dict[str, Any]:
    """Build error response."""
    return {
        "status": "error",
        "error": {
            "code": code,
            "message": message,
            "details": details or {}
        }
    }


def _json_default(o: Any):
    """JSON serializer for objects not serializable by default."""
    if isinstance(o, (datetime, date)):
        return o.isoformat()
    if isinstance(o, BaseModel):
        return o.model_dump(by_alias=True)
    return str(o)


def _json_response(data: dict, status: int = 200) -> Response:
    """Return JSON response."""
    return Response(
        json.dumps(data, default=_json_default, ensure_ascii=False),
        status=status,
        mimetype="application/json"
    )


def get_request_data() -> Dict[str, Any]:
    """Extract the request body as a dict (JSON or form fields).

    Only the structured form fields in JSON_FORM_FIELDS are decoded;
    source-text fields pass through untouched.

    Raises:
        ValidationError: If a JSON body is invalid.
    """
    if request.mimetype == "application/json" or not (request.form or request.files):
        if not request.get_data():
            return {}
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError(message="Request body must be a JSON object")
        return data

    data: Dict[str, Any] = request.form.to_dict()
    for key in JSON_FORM_FIELDS:
        if key not in data:
            continue
        stripped = data[key].strip()
        if stripped:
            try:
                data[key] = json.loads(stripped)
            except json.JSONDecodeError as e:
                raise ValidationError(f"Invalid JSON in form field: {e}", field=key) from e
    return data


def _listed(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _read_upload(name: str) -> Optional[bytes]:
    upload = request.files.get(name)
    if upload is None or not upload.filename:
        return None
    return upload.read()


def _build_record(model: Type[BaseModel], data: Dict[str, Any], record_id: Optional[str] = None):
    """Validate a catalog record body."""
    payload = {k: v for k, v in data.items() if k not in ("id", "createdAt", "updatedAt")}
    if record_id is not None:
        payload["id"] = record_id
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise ValidationError("Invalid record", details={"errors": errors}) from e


def _costing_from_body(data: Dict[str, Any], record_id: Optional[str] = None) -> CostingRecord:
    """Normalize a saved-costing body (lines, params, objeto)."""
    plan = normalize_plan(data)
    params = parse_cost_parameters(extract_params(data))
    return CostingRecord(
        id=record_id,
        objeto=str(data.get("objeto") or data.get("objectText") or "").strip(),
        assumptions=plan.assumptions,
        professionals=plan.professionals,
        materials=plan.materials,
        params=params,
    )


def _costing_view(record: CostingRecord) -> Dict[str, Any]:
    """Saved costing with totals recomputed from its lines and params."""
    totals = compute_totals(record.professionals, record.materials, record.params)
    return {
        **record.model_dump(by_alias=True),
        "totals": totals.to_dict(),
    }


# ============================================================================
# Composition root
# ============================================================================


@dataclass
class Stores:
    """Record stores owned by the application."""

    professionals: RecordStore = field(default_factory=lambda: InMemoryRecordStore("professionals"))
    materials: RecordStore = field(default_factory=lambda: InMemoryRecordStore("materials"))
    costings: RecordStore = field(default_factory=lambda: InMemoryRecordStore("costings"))


def _catalog_samples(stores: Stores, limit: int) -> CatalogSamples:
    return CatalogSamples(
        professionals=[
            r.model_dump(by_alias=True, exclude={"id"}) for r in stores.professionals.list()[:limit]
        ],
        materials=[
            r.model_dump(by_alias=True, exclude={"id"}) for r in stores.materials.list()[:limit]
        ],
    )


def create_app(
    stores: Optional[Stores] = None,
    orchestrator: Optional[EstimationOrchestrator] = None,
    app_settings: Optional[Settings] = None
) -> Flask:
    """Build the Flask application.

    Args:
        stores: Record stores (default: fresh in-memory stores).
        orchestrator: Estimation orchestrator (default built from settings).
        app_settings: Settings (default module settings).

    Returns:
        Configured Flask app.
    """
    cfg = app_settings or default_settings
    stores = stores or Stores()
    orchestrator = orchestrator or EstimationOrchestrator(settings=cfg)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = cfg.max_content_length
    CORS(app)

    app.extensions["costeo_stores"] = stores
    app.extensions["costeo_orchestrator"] = orchestrator

    @app.errorhandler(CosteoError)
    def handle_costeo_error(e: CosteoError):
        logger.warning("request_failed", code=e.code, status=e.http_status, path=request.path)
        return _json_response(error_response(e.code, e.message, e.details), status=e.http_status)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(e: RequestEntityTooLarge):
        return _json_response(
            error_response(
                ErrorCode.INPUT_TOO_LARGE,
                "Request body too large",
                {"max_bytes": cfg.max_content_length}
            ),
            status=413
        )

    # ------------------------------------------------------------------
    # Service
    # ------------------------------------------------------------------

    @app.get("/")
    def root():
        return _json_response(success_response({
            "message": "Costeo AI API",
            "docs": {
                "health": "GET /health",
                "aiCosteo": "POST /ai/costeo (JSON or multipart: metodologia_pdf, tdr_pdf + fields)",
                "professionals": "GET|POST /professionals, GET|PUT|DELETE /professionals/<id>",
                "professionalsSearch": "GET /professionals/search?q=...",
                "professionalsLoad": "POST /professionals/load (multipart: excel)",
                "materials": "GET|POST /materials, GET|PUT|DELETE /materials/<id>",
                "materialsSearch": "GET /materials/search?q=...",
                "materialsLoad": "POST /materials/load (multipart: excel)",
                "costingsSave": "POST /costings/save",
                "costingsList": "GET /costings/list",
                "costingsCompute": "POST /costings/compute",
                "costing": "GET|PUT|DELETE /costings/<id>",
            },
            "openaiConfigured": orchestrator.llm.configured,
        }))

    @app.get("/health")
    def health():
        return _json_response({"ok": True, "ts": datetime.now(timezone.utc).isoformat()})

    # ------------------------------------------------------------------
    # AI costing
    # ------------------------------------------------------------------

    @app.post("/ai/costeo")
    def ai_costeo():
        """Estimate a plan and its totals from contract texts.

        Request body (JSON or multipart form):
        {
            "objectText": "...", "methodologyText": "...",
            "tdrText": "...", "notes": "...",
            "params": {"factorPrestacional": 1.58, "imprevistosPct": 5,
                       "margenPct": 30, "presupuestoFijo": 0},
            "catalogs": {"professionals": [...], "materials": [...]}  // optional
        }
        """
        data = get_request_data()

        methodology_pdf = _read_upload("metodologia_pdf")
        tdr_pdf = _read_upload("tdr_pdf")
        sources = parse_sources(
            data,
            methodology_pdf_text=extract_pdf_text(methodology_pdf, "metodologia_pdf") if methodology_pdf else "",
            tdr_pdf_text=extract_pdf_text(tdr_pdf, "tdr_pdf") if tdr_pdf else "",
        )
        params = parse_cost_parameters(extract_params(data))

        catalogs = data.get("catalogs")
        if isinstance(catalogs, dict):
            catalogs = CatalogSamples(
                professionals=[p for p in _listed(catalogs.get("professionals")) if isinstance(p, dict)],
                materials=[m for m in _listed(catalogs.get("materials")) if isinstance(m, dict)],
            )
        else:
            catalogs = _catalog_samples(stores, cfg.catalog_sample_size)

        logger.info(
            "costeo_request_received",
            has_methodology_pdf=bool(methodology_pdf),
            has_tdr_pdf=bool(tdr_pdf),
            catalog_professionals=len(catalogs.professionals),
            catalog_materials=len(catalogs.materials),
        )

        result = asyncio.run(orchestrator.estimate(sources, catalogs, params))
        return _json_response(describe_estimate(result, params))

    # ------------------------------------------------------------------
    # Catalogs
    # ------------------------------------------------------------------

    _register_catalog_routes(app, "professionals", stores.professionals, ProfessionalRecord,
                             import_professionals, cfg.search_limit)
    _register_catalog_routes(app, "materials", stores.materials, MaterialRecord,
                             import_materials, cfg.search_limit)

    # ------------------------------------------------------------------
    # Saved costings
    # ------------------------------------------------------------------

    @app.post("/costings/save")
    def costings_save():
        record = stores.costings.put(_costing_from_body(get_request_data()))
        logger.info("costing_saved", costing_id=record.id)
        return _json_response(success_response({"id": record.id, "item": _costing_view(record)}), status=201)

    @app.get("/costings/list")
    def costings_list():
        records: List[CostingRecord] = stores.costings.list()
        items = [r.summary() for r in records[-COSTINGS_LIST_LIMIT:]]
        items.reverse()
        return _json_response(success_response({"items": items}))

    @app.post("/costings/compute")
    def costings_compute():
        record = _costing_from_body(get_request_data())
        return _json_response(success_response(_costing_view(record)))

    @app.get("/costings/<costing_id>")
    def costings_get(costing_id: str):
        record = stores.costings.require(costing_id)
        return _json_response(success_response({"item": _costing_view(record)}))

    @app.put("/costings/<costing_id>")
    def costings_update(costing_id: str):
        existing = stores.costings.require(costing_id)
        record = _costing_from_body(get_request_data(), record_id=costing_id)
        record.created_at = existing.created_at
        record = stores.costings.put(record)
        logger.info("costing_updated", costing_id=costing_id)
        return _json_response(success_response({"item": _costing_view(record)}))

    @app.delete("/costings/<costing_id>")
    def costings_delete(costing_id: str):
        stores.costings.require(costing_id)
        stores.costings.delete(costing_id)
        logger.info("costing_deleted", costing_id=costing_id)
        return _json_response(success_response({"id": costing_id}))

    return app


def _register_catalog_routes(
    app: Flask,
    name: str,
    store: RecordStore,
    model: Type[BaseModel],
    importer: Callable[[bytes], list],
    search_limit: int
) -> None:
    """Register list/create/search/load/get/update/delete routes for a catalog."""

    def list_records():
        return _json_response(success_response({"items": store.list()}))

    def create_record():
        record = store.put(_build_record(model, get_request_data()))
        return _json_response(success_response({"item": record}), status=201)

    def search():
        query = request.args.get("q", "")
        limit = request.args.get("limit", type=int) or search_limit
        items = search_records(query, store.list(), limit=min(limit, search_limit))
        return _json_response({"items": items})

    def load():
        content = _read_upload("excel")
        if content is None:
            raise ValidationError("Missing excel file", field="excel")
        records = importer(content)
        replace = request.form.get("mode", "replace") != "append"
        if replace:
            store.replace_all(records)
        else:
            for record in records:
                store.put(record)
        logger.info("catalog_loaded", catalog=name, loaded=len(records), replace=replace)
        return _json_response(success_response({"loaded": len(records), "total": len(store.list())}))

    def get_record(record_id: str):
        return _json_response(success_response({"item": store.require(record_id)}))

    def update_record(record_id: str):
        store.require(record_id)
        record = store.put(_build_record(model, get_request_data(), record_id=record_id))
        return _json_response(success_response({"item": record}))

    def delete_record(record_id: str):
        store.require(record_id)
        store.delete(record_id)
        return _json_response(success_response({"id": record_id}))

    app.add_url_rule(f"/{name}", f"{name}_list", list_records, methods=["GET"])
    app.add_url_rule(f"/{name}", f"{name}_create", create_record, methods=["POST"])
    app.add_url_rule(f"/{name}/search", f"{name}_search", search, methods=["GET"])
    app.add_url_rule(f"/{name}/load", f"{name}_load", load, methods=["POST"])
    app.add_url_rule(f"/{name}/<record_id>", f"{name}_get", get_record, methods=["GET"])
    app.add_url_rule(f"/{name}/<record_id>", f"{name}_update", update_record, methods=["PUT"])
    app.add_url_rule(f"/{name}/<record_id>", f"{name}_delete", delete_record, methods=["DELETE"])
