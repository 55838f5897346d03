"""Costeo AI - Proposal Production Cost Estimator.

This package contains the Flask service that drafts staffing and materials
plans for consulting proposals from free-text contract descriptions and
prices them with a deterministic totals engine.

Architecture:
- Estimation orchestrator: size policy, condensation, structured generation
- Plan normalizer + totals engine: untrusted plan in, exact breakdown out
- Record stores: professional and material catalogs, saved costings
"""

__version__ = "1.0.0"
