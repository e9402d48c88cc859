"""POST /api/generate — generate model packages for one or more tables."""
import logging
from typing import Optional
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from tablegen.core.orchestrator import generate as run_generation
from tablegen.errors import ConfigurationError, DatabaseConnectionError
from tablegen.models.connection import ConnectionRequest
from tablegen.models.generation import BatchReport

router = APIRouter()
logger = logging.getLogger(__name__)


class GenerateRequest(BaseModel):
    connection: ConnectionRequest
    tables: list[str] = []
    all_tables: bool = False            # True = every table in the database
    name_funcs: bool = False
    follow_dependencies: bool = False   # also generate tables referenced by foreign keys
    output_dir: Optional[str] = None
    workers: Optional[int] = None


@router.post("/generate", response_model=BatchReport)
def generate(req: GenerateRequest):
    try:
        return run_generation(
            req.connection,
            tables=req.tables,
            all_tables=req.all_tables,
            output_dir=req.output_dir,
            name_funcs=req.name_funcs,
            workers=req.workers,
            follow_dependencies=req.follow_dependencies,
        )
    except (ConfigurationError, DatabaseConnectionError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Generation failed")
        raise HTTPException(status_code=500, detail=f"Generation error: {e}")
