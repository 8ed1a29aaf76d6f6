#!/usr/bin/env python3
"""
run_server.py

Notes / How to run
- Container entrypoint command should be:
    python /app/run_server.py [uvicorn args...]
- This script delegates to webui_launcher.launch_supervisor to:
  1) validate DATABASE_URL (exit 1 on a bad connection string)
  2) derive host/port/pool settings and provision WEBUI_SECRET_KEY if unset
  3) exec uvicorn with the Open WebUI app in place of this process
- With no args, uvicorn gets --workers $UVICORN_WORKERS --loop uvloop
  --timeout-keep-alive 65. Any args given replace those defaults.

Env vars
- DATABASE_URL (required)
- PORT (default: 8080)
- UVICORN_WORKERS (default: 2)
- DATABASE_POOL_SIZE / DATABASE_POOL_MAX_OVERFLOW (default: 5 / 5)
- VECTOR_DB (default: pgvector)
- APP_MODULE (default: open_webui.main:app)
- WEBUI_SECRET_KEY / WEBUI_JWT_SECRET_KEY
"""
from pathlib import Path

from webui_launcher.launch_supervisor import main

# The app package lives beside this script
APP_DIR = Path(__file__).resolve().parent


if __name__ == "__main__":
    raise SystemExit(main(app_dir=str(APP_DIR)))
