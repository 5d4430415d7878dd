"""AML Transaction Screening API.

Exposes the screening core as JSON endpoints: screen transactions, look up
filed SARs, inspect recent customer activity and read aggregate
statistics. Sanctions data is loaded once at startup from data/.

Run with:
    python3 -m uvicorn amlscreen.main:app --host 0.0.0.0 --port 8000
"""

import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict

from fastapi import FastAPI
from pydantic import ValidationError

from amlscreen.errors import SanctionListError
from amlscreen.models import AMLConfig, SanctionLists
from amlscreen.routes import rules, sars, screening, statistics, transactions
from amlscreen.screening.engine import AMLEngine
from amlscreen.settings import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def load_sanction_lists(data_dir: Path) -> SanctionLists:
    """Read the sanctions snapshot written by the external list loader."""
    path = data_dir / "sanctions_lists.json"
    try:
        with open(path, "r") as f:
            return SanctionLists(**json.load(f))
    except (OSError, ValueError, ValidationError) as exc:
        raise SanctionListError(f"Cannot load sanctions lists from {path}: {exc}") from exc


def load_config(data_dir: Path) -> AMLConfig:
    """Load tunable thresholds, or fall back to defaults."""
    path = data_dir / "aml_config.json"
    if path.exists():
        with open(path, "r") as f:
            return AMLConfig(**json.load(f))
    return AMLConfig()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load reference data, build the engine and run the alert worker."""
    logger.info("Starting AML screening service...")

    sanction_lists = load_sanction_lists(settings.data_dir)
    config = load_config(settings.data_dir)
    engine = AMLEngine(sanction_lists=sanction_lists, config=config)
    await engine.alerter.start()

    app.state.engine = engine
    logger.info(
        f"Loaded {len(sanction_lists.individuals)} individuals, "
        f"{len(sanction_lists.entities)} entities, "
        f"{len(sanction_lists.countries)} high-risk countries"
    )

    yield

    logger.info("Shutting down AML screening service...")
    await engine.alerter.stop()


app = FastAPI(
    title="AML Transaction Screening API",
    description=(
        "Near-real-time anti-money-laundering screening. Checks sanctions "
        "lists, high-risk countries, large amounts, transaction velocity "
        "and structuring patterns, and files Suspicious Activity Reports."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(screening.router)
app.include_router(sars.router)
app.include_router(statistics.router)
app.include_router(transactions.router)
app.include_router(rules.router)


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "healthy"}
