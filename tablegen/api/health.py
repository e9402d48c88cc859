"""GET /api/health — generator dependency check."""
import logging
import shutil
from fastapi import APIRouter

from tablegen import __version__
from tablegen.config import settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check():
    formatter = _check_formatter()
    overall = "ok" if formatter["status"] in ("up", "disabled") else "degraded"
    return {
        "status": overall,
        "version": __version__,
        "services": {
            "formatter": formatter,
        },
    }


def _check_formatter() -> dict:
    argv = settings.formatter_argv
    if not argv:
        return {"status": "disabled", "error": None}
    path = shutil.which(argv[0])
    if path is None:
        return {"status": "down", "error": f"{argv[0]} not found on PATH"}
    return {"status": "up", "error": None, "path": path}
