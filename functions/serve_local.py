#!/usr/bin/env python3
"""Local development server for Costeo AI.

Usage:
    cd functions
    source venv/bin/activate
    python serve_local.py

Starts the Flask app on PORT (default 10000). Configuration comes from the
environment or a .env file (OPENAI_API_KEY, OPENAI_MODEL, limits, ...).
"""

import structlog

from config.settings import settings
from main import create_app
from utils.logging_config import configure_logging

configure_logging(settings.log_level)
settings.validate()

logger = structlog.get_logger()

app = create_app()


if __name__ == '__main__':
    print(f"""
╔══════════════════════════════════════════════════════════════╗
║           Costeo AI - Local Development Server               ║
╠══════════════════════════════════════════════════════════════╣
║  Server running on: http://localhost:{settings.port:<24}║
║                                                              ║
║  Endpoints:                                                  ║
║    POST /ai/costeo                                           ║
║    GET  /professionals/search?q=...                          ║
║    POST /professionals/load                                  ║
║    GET  /materials/search?q=...                              ║
║    POST /costings/save                                       ║
║    GET  /costings/list                                       ║
╚══════════════════════════════════════════════════════════════╝
""")
    logger.info(
        "server_starting",
        port=settings.port,
        model=settings.llm_model,
        openai_configured=bool(settings.openai_api_key)
    )
    app.run(host='0.0.0.0', port=settings.port, debug=False)
