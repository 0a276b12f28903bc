"""k1s0 schema_proxy library."""

from .client import RegistryClient, RegistryResponse
from .compatibility import CompatibilityResolver
from .config import ClusterSection, ProxyConfig, RegistrySection
from .enrichment import SchemaEnrichmentPipeline
from .exceptions import (
    ClusterNotFoundError,
    CompatibilityUnresolvedError,
    ConfigError,
    ConfigErrorCodes,
    DuplicateSchemaError,
    InvalidSchemaError,
    RegistryUnavailableError,
    SchemaNotFoundError,
    SchemaProxyError,
    SchemaProxyErrorCodes,
)
from .http_client import HttpRegistryClient
from .loader import load
from .logger import new_logger
from .memory import InMemoryRegistryClient
from .models import (
    LATEST,
    Cluster,
    CompatibilityCheckResult,
    CompatibilityLevel,
    NewSchemaRequest,
    SchemaType,
    SchemaVersionRecord,
    normalize_schema_type,
    wire_schema_type,
)
from .registration import RegistrationWorkflow
from .resolver import ClusterResolver, ClustersStorage, InMemoryClustersStorage
from .service import SchemaRegistryService

__all__ = [
    "SchemaRegistryService",
    "SchemaEnrichmentPipeline",
    "RegistrationWorkflow",
    "CompatibilityResolver",
    "ClusterResolver",
    "ClustersStorage",
    "InMemoryClustersStorage",
    "RegistryClient",
    "RegistryResponse",
    "HttpRegistryClient",
    "InMemoryRegistryClient",
    "LATEST",
    "Cluster",
    "SchemaType",
    "CompatibilityLevel",
    "SchemaVersionRecord",
    "NewSchemaRequest",
    "CompatibilityCheckResult",
    "normalize_schema_type",
    "wire_schema_type",
    "ProxyConfig",
    "ClusterSection",
    "RegistrySection",
    "load",
    "new_logger",
    "SchemaProxyError",
    "SchemaProxyErrorCodes",
    "ClusterNotFoundError",
    "SchemaNotFoundError",
    "DuplicateSchemaError",
    "InvalidSchemaError",
    "RegistryUnavailableError",
    "CompatibilityUnresolvedError",
    "ConfigError",
    "ConfigErrorCodes",
]
