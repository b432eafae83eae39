"""Constants for the Phare Operator."""

# API Group
API_GROUP = "phare.localcorp.internal"
API_VERSION = "v1beta1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Parent resource
KIND_PHARE = "Phare"

# Child resource kinds
KIND_CONFIG_MAP = "ConfigMap"
KIND_SERVICE = "Service"
KIND_DEPLOYMENT = "Deployment"
KIND_STATEFUL_SET = "StatefulSet"
KIND_HTTP_ROUTE = "HTTPRoute"
KIND_HEALTH_CHECK_POLICY = "HealthCheckPolicy"
KIND_GCP_BACKEND_POLICY = "GCPBackendPolicy"

# Controller identity
CONTROLLER_ID = "phare-controller"
FIELD_MANAGER = CONTROLLER_ID

# Labels
LABEL_APP = "app"
LABEL_CREATED_BY = "app.kubernetes.io/created-by"

# Annotations
ANNOTATION_CONFIG_HASH = "checksum/config-files"
ANNOTATION_REALLOCATE_NODE_PORT = f"{API_GROUP}/reallocate-nodeport"
TRUTHY_TOKENS = frozenset({"1", "true", "yes", "on"})

# Managed config volume
CONFIG_NAME_SUFFIX = "-config"
CONFIG_VOLUME_NAME = "config-volume"
CONFIG_VOLUME_MOUNT_PATH = "/etc/phare/config"
DEFAULT_VOLUME_MODE = 420

# Status phases
PHASE_RECONCILING = "Reconciling"
PHASE_ACTIVE = "Active"
PHASE_FAILED = "Failed"

# Event types
EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"

# Event Reasons
EVENT_REASON_CREATED = "CreatedResource"
EVENT_REASON_UPDATED = "UpdatedResource"
EVENT_REASON_DELETED = "DeletedResource"
EVENT_REASON_IMMUTABLE_FIELD = "ImmutableField"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"

# Conflict handling
DEFAULT_CONFLICT_RETRY_ATTEMPTS = 3
