from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from typing import Annotated, Any, Dict, List, Literal, Optional

# ----------------------------
# Option catalogue
# ----------------------------
LANGUAGES = ["go", "node", "python"]
FRAMEWORKS_BY_LANGUAGE: Dict[str, List[str]] = {
    "go": ["gin", "fiber"],
    "node": ["express", "fastify"],
    "python": ["fastapi", "django"],
}
DEFAULT_FRAMEWORK = {"go": "fiber", "node": "express", "python": "fastapi"}
ARCHITECTURES = ["mvp", "clean", "hexagonal", "modular-monolith", "microservices"]
DATABASES = ["postgresql", "mysql", "mongodb", "none"]
SERVICE_COMMUNICATION = ["none", "http", "grpc"]
FIELD_TYPES = ["string", "int", "float", "bool", "datetime"]
MAX_SERVICES = 5
MIN_MICROSERVICES = 2

INFRA_LABELS = {"redis": "Redis", "kafka": "Kafka", "nats": "NATS"}
FEATURE_LABELS = {
    "jwt_auth": "JWT Auth",
    "swagger": "Swagger / OpenAPI",
    "github_actions_ci": "GitHub Actions CI",
    "makefile": "Makefile",
    "logger": "Logger Setup",
    "global_error_handler": "Global Error Handler",
    "health_endpoint": "Health Endpoint",
    "sample_test": "Sample Test File",
}
FILE_TOGGLE_LABELS = {
    "env": ".env File",
    "gitignore": ".gitignore File",
    "dockerfile": "Dockerfile",
    "docker_compose": "docker-compose.yaml",
    "readme": "README.md",
    "config_loader": "Config Loader",
    "logger": "Logger Setup",
    "base_route": "Root Routes",
    "example_crud": "Demo CRUD Endpoint",
    "health_check": "Health Check",
}


def _none_to_list(v: Any) -> Any:
    # the generation service encodes empty slices as null
    return [] if v is None else v


StringList = Annotated[List[str], BeforeValidator(_none_to_list)]


# ----------------------------
# Configuration pieces
# ----------------------------
class Service(BaseModel):
    name: str
    port: int


class SchemaField(BaseModel):
    name: str = ""
    type: str = "string"


class SchemaModel(BaseModel):
    name: str = ""
    fields: List[SchemaField] = Field(default_factory=list)


class CustomFileEntry(BaseModel):
    path: str = ""
    content: str = ""


class InfraOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    redis: bool = False
    kafka: bool = False
    nats: bool = False


class FeatureOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    jwt_auth: bool = False
    swagger: bool = True
    github_actions_ci: bool = True
    makefile: bool = True
    logger: bool = True
    global_error_handler: bool = True
    health_endpoint: bool = True
    sample_test: bool = True


class FileToggleOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    env: bool = True
    gitignore: bool = True
    dockerfile: bool = True
    docker_compose: bool = True
    readme: bool = True
    config_loader: bool = True
    logger: bool = True
    base_route: bool = True
    example_crud: bool = True
    health_check: bool = True


class RootSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    mode: Literal["new", "existing"] = "new"
    name: str = "my-stacksprint-app"
    path: str = "."
    git_init: bool = True
    module: str = "github.com/example/my-stacksprint-app"


def default_services() -> List[Service]:
    return [Service(name="users", port=8081), Service(name="orders", port=8082)]


def default_schema_models() -> List[SchemaModel]:
    return [SchemaModel(name="Item", fields=[SchemaField(name="id", type="int"), SchemaField(name="name", type="string")])]


def blank_custom_files() -> List[CustomFileEntry]:
    return [CustomFileEntry()]


class ConfigurationState(BaseModel):
    """Mutable source of truth for one configuration session (raw form values)."""

    language: str = "go"
    framework: str = "fiber"
    architecture: str = "mvp"
    db: str = "postgresql"
    use_orm: bool = True
    service_communication: str = "none"
    services: List[Service] = Field(default_factory=default_services)
    infra: InfraOptions = Field(default_factory=InfraOptions)
    features: FeatureOptions = Field(default_factory=FeatureOptions)
    file_toggles: FileToggleOptions = Field(default_factory=FileToggleOptions)
    root: RootSettings = Field(default_factory=RootSettings)
    custom_folders: str = ""
    remove_folders: str = ""
    remove_files: str = ""
    schema_models: List[SchemaModel] = Field(default_factory=default_schema_models)
    custom_file_entries: List[CustomFileEntry] = Field(default_factory=blank_custom_files)


# ----------------------------
# Canonical request payload
# ----------------------------
class CustomOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")

    add_folders: List[str] = Field(default_factory=list)
    remove_folders: List[str] = Field(default_factory=list)
    remove_files: List[str] = Field(default_factory=list)
    add_files: List[CustomFileEntry] = Field(default_factory=list)
    models: List[SchemaModel] = Field(default_factory=list)


class GenerationRequest(BaseModel):
    """Normalized body of POST /generate. Recomputed, never mutated."""

    model_config = ConfigDict(frozen=True)

    language: str
    framework: str
    architecture: str
    services: List[Service]
    db: str
    use_orm: bool
    service_communication: str
    infra: InfraOptions
    features: FeatureOptions
    file_toggles: FileToggleOptions
    custom: CustomOptions
    root: RootSettings


# ----------------------------
# Generation service response
# ----------------------------
class GenerationWarning(BaseModel):
    code: str = "legacy"
    severity: str = "warning"
    message: str
    reason: str = ""


class ComplexityReport(BaseModel):
    score: int = Field(..., ge=0, le=100)
    architecture_weight: int = 0
    infra_weight: int = 0
    service_weight: int = 0
    model_weight: int = 0
    risk_level: Literal["low", "moderate", "high"]
    notes: StringList = Field(default_factory=list)


class GenerationResult(BaseModel):
    bash_script: str = ""
    powershell_script: str = ""
    file_paths: StringList = Field(default_factory=list)
    warnings: List[GenerationWarning] = Field(default_factory=list)
    complexity_report: Optional[ComplexityReport] = None

    @field_validator("warnings", mode="before")
    @classmethod
    def _upgrade_legacy_warnings(cls, v: Any) -> Any:
        if v is None:
            return []
        if not isinstance(v, list):
            return v
        out = []
        for w in v:
            if isinstance(w, str):
                out.append({"code": "legacy", "severity": "warning", "message": w, "reason": ""})
            else:
                out.append(w)
        return out

    @field_validator("powershell_script", mode="before")
    @classmethod
    def _script_none(cls, v: Any) -> Any:
        return "" if v is None else v


# ----------------------------
# Presets
# ----------------------------
class Preset(BaseModel):
    name: str
    version: int = 1
    config: Dict[str, Any]


class CustomSnapshot(BaseModel):
    """`custom` block of a preset; None means the field was omitted."""

    model_config = ConfigDict(extra="forbid")

    add_folders: Optional[List[str]] = None
    remove_folders: Optional[List[str]] = None
    remove_files: Optional[List[str]] = None
    add_files: Optional[List[CustomFileEntry]] = None
    models: Optional[List[SchemaModel]] = None


class PresetSnapshot(BaseModel):
    """
    Versioned, sparse configuration snapshot accepted by apply_preset.

    Every field is optional: omitted fields fall back to the session defaults.
    Toggle groups and root settings may themselves be partial. Unknown keys
    are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    language: Optional[str] = None
    framework: Optional[str] = None
    architecture: Optional[str] = None
    services: Optional[List[Service]] = None
    db: Optional[str] = None
    use_orm: Optional[bool] = None
    service_communication: Optional[str] = None
    infra: Optional[InfraOptions] = None
    features: Optional[FeatureOptions] = None
    file_toggles: Optional[FileToggleOptions] = None
    custom: Optional[CustomSnapshot] = None
    root: Optional[RootSettings] = None
