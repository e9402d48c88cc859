"""
Generation orchestrator — runs the per-table pipeline and fans a batch of tables
over a bounded pool of worker threads.

Per table the steps are strictly sequential:
  descriptors -> resolve -> key analysis -> synthesize -> scaffold
Across tables there is no ordering. The processed set, counters and error list
belong to GenerationRun and only change under its lock.
"""
import logging
import queue
import threading
import time
from typing import Iterable, Optional

from pydantic import BaseModel
from sqlalchemy.engine import Engine

from tablegen.config import settings
from tablegen.core.catalog import CatalogReader, catalog_for
from tablegen.core.db_connector import create_engine_from_request, identifier_quote
from tablegen.core.key_analyzer import analyze
from tablegen.core.scaffold import FileScaffolder, apply_policy, plan_artifacts
from tablegen.core.synthesizer import render_base
from tablegen.core.type_resolver import resolve_columns
from tablegen.errors import ConfigurationError
from tablegen.models.column import ForeignKey, KeySet, ResolvedField
from tablegen.models.connection import ConnectionRequest
from tablegen.models.generation import BatchReport, GenerationResult

logger = logging.getLogger(__name__)


class TableModel(BaseModel):
    """Everything known about one table before any source is rendered."""
    table_name: str
    fields: list[ResolvedField]
    keys: KeySet
    foreign_keys: list[ForeignKey] = []


class ModelGenerator:
    """Single-table pipeline. Raises on failure; nothing is written until synthesis succeeds."""

    def __init__(
        self,
        catalog: CatalogReader,
        scaffolder: FileScaffolder,
        output_dir: str,
        models_package: str = "models",
        name_funcs: bool = False,
        quote_char: str = "`",
    ):
        self.catalog = catalog
        self.scaffolder = scaffolder
        self.output_dir = output_dir
        self.models_package = models_package
        self.name_funcs = name_funcs
        self.quote_char = quote_char

    def inspect(self, table: str) -> TableModel:
        columns = self.catalog.columns(table)
        fields = resolve_columns(columns, lambda column: self.catalog.distinct_values(table, column))
        return TableModel(
            table_name=table,
            fields=fields,
            keys=analyze(fields),
            foreign_keys=self.catalog.foreign_keys(table),
        )

    def render(self, model: TableModel) -> str:
        return render_base(
            model.table_name,
            self.catalog.database,
            model.fields,
            model.keys,
            foreign_keys=model.foreign_keys,
            name_funcs=self.name_funcs,
            quote_char=self.quote_char,
            models_package=self.models_package,
        )

    def generate_table(self, table: str) -> GenerationResult:
        logger.info("Building package: %s", table)
        model = self.inspect(table)
        source = self.render(model)
        artifacts = plan_artifacts(table, source, self.output_dir, self.models_package, self.name_funcs)
        written = apply_policy(artifacts, self.scaffolder)
        return GenerationResult(
            table_name=table,
            status="success",
            files=written,
            dependencies=sorted({fk.referred_table for fk in model.foreign_keys} - {table}),
        )


class GenerationRun:
    """One batch: a work queue, a fixed pool of workers and the shared run state."""

    def __init__(self, generator: ModelGenerator, workers: int = 8, follow_dependencies: bool = False):
        if workers < 1:
            raise ConfigurationError("workers must be at least 1")
        self.generator = generator
        self.workers = workers
        self.follow_dependencies = follow_dependencies
        self._queue: "queue.Queue[Optional[str]]" = queue.Queue()
        self._lock = threading.Lock()
        self._seen: set[str] = set()
        self._results: list[GenerationResult] = []
        self._errors: list[str] = []
        self._processed = 0
        self._errored = 0

    def submit(self, table: str) -> bool:
        """Queue a table unless this run has already taken it."""
        with self._lock:
            if table in self._seen:
                return False
            self._seen.add(table)
        self._queue.put(table)
        return True

    def _record(self, result: GenerationResult) -> None:
        with self._lock:
            self._results.append(result)
            self._processed += 1
            if result.status != "success":
                self._errored += 1
                message = result.error or "unknown error"
                if not message.startswith(f"{result.table_name}: "):
                    message = f"{result.table_name}: {message}"
                self._errors.append(message)
            logger.info("Progress.. %d/%d", self._processed, len(self._seen))

    def _worker(self) -> None:
        while True:
            table = self._queue.get()
            try:
                if table is None:
                    return
                try:
                    result = self.generator.generate_table(table)
                except Exception as e:
                    logger.warning("Generation failed for %s: %s", table, e)
                    result = GenerationResult(table_name=table, status="error", error=str(e))
                # Dependencies are queued before this task is marked done so join() waits for them.
                if self.follow_dependencies:
                    for dep in result.dependencies:
                        self.submit(dep)
                self._record(result)
            finally:
                self._queue.task_done()

    def run(self, tables: Iterable[str]) -> BatchReport:
        t0 = time.time()
        threads = [
            threading.Thread(target=self._worker, name=f"tablegen-worker-{i}", daemon=True)
            for i in range(self.workers)
        ]
        for t in threads:
            t.start()
        for table in tables:
            self.submit(table)
        logger.info("Waiting for workers to finish...")
        self._queue.join()
        for _ in threads:
            self._queue.put(None)
        for t in threads:
            t.join()

        with self._lock:
            results = sorted(self._results, key=lambda r: r.table_name)
            return BatchReport(
                database=self.generator.catalog.database,
                processed=self._processed,
                errored=self._errored,
                total=len(self._seen),
                duration_seconds=round(time.time() - t0, 2),
                results=results,
                errors=list(self._errors),
            )


# ── Entry point shared by the CLI and the API ─────────────────────────────────

def build_generator(
    engine: Engine,
    database: str,
    output_dir: Optional[str] = None,
    models_package: Optional[str] = None,
    name_funcs: bool = False,
    formatter_argv: Optional[list[str]] = None,
) -> ModelGenerator:
    return ModelGenerator(
        catalog=catalog_for(engine, database),
        scaffolder=FileScaffolder(settings.formatter_argv if formatter_argv is None else formatter_argv),
        output_dir=output_dir or settings.OUTPUT_DIR,
        models_package=models_package or settings.MODELS_PACKAGE,
        name_funcs=name_funcs,
        quote_char=identifier_quote(engine),
    )


def generate(
    req: ConnectionRequest,
    tables: Optional[list[str]] = None,
    all_tables: bool = False,
    output_dir: Optional[str] = None,
    models_package: Optional[str] = None,
    name_funcs: bool = False,
    workers: Optional[int] = None,
    follow_dependencies: bool = False,
    formatter_argv: Optional[list[str]] = None,
) -> BatchReport:
    """
    Generate models for `tables` (or every table when `all_tables` is set).
    Setup problems raise before any table work starts; per-table failures are
    collected in the returned report.
    """
    wanted = [t.strip() for t in (tables or []) if t and t.strip()]
    if not wanted and not all_tables:
        raise ConfigurationError("You must name at least one table or ask for all tables")

    engine = create_engine_from_request(req)
    try:
        generator = build_generator(engine, req.database, output_dir, models_package, name_funcs, formatter_argv)
        if all_tables:
            wanted = generator.catalog.list_tables()
            logger.info("Discovered %d tables in %s", len(wanted), req.database)
        run = GenerationRun(generator, workers or settings.WORKERS, follow_dependencies)
        report = run.run(wanted)
    finally:
        engine.dispose()

    logger.info(
        "Processed %d table(s) in %.2fs, %d error(s)",
        report.processed, report.duration_seconds, report.errored,
    )
    return report
