"""POST /api/inspect — resolved fields and key set for one table; nothing is written."""
import logging
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from tablegen.core.db_connector import create_engine_from_request
from tablegen.core.orchestrator import TableModel, build_generator
from tablegen.errors import DatabaseConnectionError, NoSuchTable, ProbeError
from tablegen.models.connection import ConnectionRequest

router = APIRouter()
logger = logging.getLogger(__name__)


class InspectRequest(BaseModel):
    connection: ConnectionRequest
    table_name: str
    include_source: bool = False


class InspectResponse(BaseModel):
    model: TableModel
    source: str = ""


@router.post("/inspect", response_model=InspectResponse)
def inspect_table(req: InspectRequest):
    try:
        engine = create_engine_from_request(req.connection)
    except DatabaseConnectionError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        generator = build_generator(engine, req.connection.database)
        model = generator.inspect(req.table_name)
        source = generator.render(model) if req.include_source else ""
    except NoSuchTable as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DatabaseConnectionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProbeError as e:
        raise HTTPException(status_code=500, detail=str(e))
    finally:
        engine.dispose()
    return InspectResponse(model=model, source=source)
