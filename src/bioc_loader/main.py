# src/bioc_loader/main.py
import uvicorn

from bioc_loader.core.config import settings
from bioc_loader.core.logging_config import configure_logging

def run() -> None:
    configure_logging(settings.LOG_LEVEL)
    # In production, run via the command line or Docker CMD:
    # uvicorn bioc_loader.api.loader_api:app --host 0.0.0.0 --port 8000
    uvicorn.run("bioc_loader.api.loader_api:app", host="0.0.0.0", port=8000)

if __name__ == "__main__":
    run()
