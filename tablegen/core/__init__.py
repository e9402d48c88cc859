from tablegen.core.db_connector import create_engine_from_request  # noqa: F401
from tablegen.core.catalog import catalog_for  # noqa: F401
from tablegen.core.type_resolver import resolve, resolve_columns  # noqa: F401
from tablegen.core.key_analyzer import analyze  # noqa: F401
from tablegen.core.synthesizer import render_base  # noqa: F401
from tablegen.core.scaffold import FileScaffolder, apply_policy, plan_artifacts  # noqa: F401
from tablegen.core.orchestrator import GenerationRun, ModelGenerator, generate  # noqa: F401
