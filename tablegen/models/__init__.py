from tablegen.models.connection import ConnectionRequest  # noqa: F401
from tablegen.models.column import ColumnDescriptor, ForeignKey, KeyRole, KeySet, ResolvedField, TargetType  # noqa: F401
from tablegen.models.generation import BatchReport, GeneratedArtifact, GenerationResult  # noqa: F401
