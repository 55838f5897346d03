"""Prompt templates for the estimation pipeline.

Source documents are Spanish-language tenders, so prompts are in Spanish.
"""

import json
from typing import Any, Dict, List

from models.costing import CostParameters

CHUNK_EXTRACTION_SYSTEM_PROMPT = (
    "Resume en español, en máximo 12 viñetas, solo requisitos operativos: "
    "actividades, entregables, perfiles requeridos y materiales/equipos."
)

MERGE_SYSTEM_PROMPT = (
    "Fusiona estos resúmenes en uno solo, sin repetir, manteniendo requisitos "
    "y necesidades de personal/materiales."
)

PARTIAL_SEPARATOR = "\n\n---\n\n"

PLAN_SYSTEM_PROMPT = "Eres un analista de costos. Respondes SOLO JSON."

PLAN_USER_PROMPT = """Necesito que armes un costeo preliminar para una propuesta.
Parámetros financieros:
- factor_prestacional = {factor_prestacional}
- imprevistos_pct = {imprevistos_pct}
- margen_pct = {margen_pct}
- presupuesto_fijo = {presupuesto_fijo}

Reglas:
1) Profesionales: define role (cargo), profile (perfil/experiencia), quantity, months, dedication (0 a 1; 1 = tiempo completo) y monthlyValue (valor mensual sin factor prestacional).
2) monthlyValue: si encuentras un match aproximado en el catálogo de profesionales, úsalo e indícalo en justification. Si no, estímalo según la complejidad y escribe "estimado" en justification.
3) Materiales: lista items (software, hardware, papelería, desplazamientos, viáticos, etc.) con name, unit, quantity y unitPrice. Si el precio no está en el catálogo, escribe "pendiente de cotización" en justification.
4) assumptions: supuestos que tomaste para dimensionar el equipo y los materiales.
5) No calcules totales; solo las líneas.
6) Devuelve SOLO JSON válido, sin texto adicional.

Contexto:
{context}

Catálogo de profesionales (muestra, para aproximar valores mensuales):
{professionals_sample}

Catálogo de materiales (muestra, para aproximar precios unitarios):
{materials_sample}
"""


def build_plan_prompt(
    context: str,
    params: CostParameters,
    professionals_sample: List[Dict[str, Any]],
    materials_sample: List[Dict[str, Any]]
) -> str:
    """Fill the plan template with parameters, context and catalog samples."""
    return PLAN_USER_PROMPT.format(
        factor_prestacional=params.factor_prestacional,
        imprevistos_pct=params.imprevistos_pct,
        margen_pct=params.margen_pct,
        presupuesto_fijo=params.presupuesto_fijo if params.presupuesto_fijo else "no definido",
        context=context,
        professionals_sample=json.dumps(professionals_sample, ensure_ascii=False, default=str),
        materials_sample=json.dumps(materials_sample, ensure_ascii=False, default=str),
    ).strip()
