"""
Run an AI costing from local text/PDF files and write the result to JSON.

Useful for trying prompts and limits without the HTTP server.

Usage:
  export OPENAI_API_KEY=...
  python scripts/estimate_from_files.py --objeto "Interventoría vial" \\
      --tdr tdr.pdf --metodologia metodologia.txt --margen-pct 25 --out costeo.json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.errors import CosteoError  # noqa: E402
from config.settings import settings  # noqa: E402
from services.document_text import extract_pdf_text  # noqa: E402
from services.estimation_orchestrator import EstimationOrchestrator, describe_estimate  # noqa: E402
from utils.logging_config import configure_logging  # noqa: E402
from validators.costing_validator import parse_cost_parameters, parse_sources  # noqa: E402


def _read_source(path: Optional[str]) -> tuple[str, str]:
    """Return (plain_text, pdf_text) for a source file."""
    if not path:
        return "", ""
    file_path = Path(path)
    if file_path.suffix.lower() == ".pdf":
        return "", extract_pdf_text(file_path.read_bytes(), file_path.name)
    return file_path.read_text(encoding="utf-8"), ""


def main() -> int:
    parser = argparse.ArgumentParser(description="Estimate proposal production costs from local files")
    parser.add_argument("--objeto", default="", help="Contract object text")
    parser.add_argument("--notas", default="", help="Analyst notes")
    parser.add_argument("--metodologia", help="Methodology file (.txt or .pdf)")
    parser.add_argument("--tdr", help="Terms of reference file (.txt or .pdf)")
    parser.add_argument("--factor-prestacional", type=float)
    parser.add_argument("--imprevistos-pct", type=float)
    parser.add_argument("--margen-pct", type=float)
    parser.add_argument("--presupuesto-fijo", type=float)
    parser.add_argument("--no-condense", action="store_true", help="Reject oversized input instead of condensing")
    parser.add_argument("--out", help="Output file path (defaults to stdout)")
    args = parser.parse_args()

    configure_logging(settings.log_level)
    if args.no_condense:
        settings.condensation_enabled = False

    methodology_text, methodology_pdf = _read_source(args.metodologia)
    tdr_text, tdr_pdf = _read_source(args.tdr)

    try:
        sources = parse_sources(
            {
                "objeto": args.objeto,
                "notas": args.notas,
                "metodologiaText": methodology_text,
                "tdrText": tdr_text,
            },
            methodology_pdf_text=methodology_pdf,
            tdr_pdf_text=tdr_pdf,
        )
        params = parse_cost_parameters({
            "factorPrestacional": args.factor_prestacional,
            "imprevistosPct": args.imprevistos_pct,
            "margenPct": args.margen_pct,
            "presupuestoFijo": args.presupuesto_fijo,
        })
        result = asyncio.run(EstimationOrchestrator().estimate(sources, None, params))
    except CosteoError as e:
        print(json.dumps(e.to_dict(), indent=2, ensure_ascii=False), file=sys.stderr)
        return 2

    output = json.dumps(describe_estimate(result, params), indent=2, ensure_ascii=False)
    if args.out:
        Path(args.out).write_text(output, encoding="utf-8")
        print(f"Wrote {args.out}")
    else:
        print(output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
