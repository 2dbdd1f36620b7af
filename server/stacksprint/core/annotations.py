# stacksprint/core/annotations.py
"""
File explanations for the generated project tree.

Rules are ordered (predicate, explanation) pairs. Architecture-scoped rules
are checked first, then the universal rules; within a chain the first match
wins and nothing accumulates. A path without any match has no explanation.

Paths are compared lower-cased with a leading "/" so that top-level segments
match the same way nested ones do.
"""
import re
from typing import Callable, Dict, List, Optional, Tuple

Predicate = Callable[[str], bool]
Rule = Tuple[Predicate, str]


def _segment(*names: str) -> Predicate:
    needles = [f"/{n}/" for n in names]
    return lambda p: any(n in p for n in needles)


def _contains(*parts: str) -> Predicate:
    return lambda p: any(part in p for part in parts)


_MODULE_SCOPE = re.compile(r"/internal/[a-z0-9_]+/")


def _in_module(sub: Predicate) -> Predicate:
    return lambda p: ("/modules/" in p or bool(_MODULE_SCOPE.search(p))) and sub(p)


HEXAGONAL_RULES: List[Rule] = [
    (_segment("adapters", "adapter"),
     "Concrete implementations for external communication (HTTP, Databases, Message Brokers)."),
    (_segment("ports", "port"),
     "Interfaces defining how the core domain expects to communicate with the outside world."),
    (_segment("core", "domain"),
     "Enterprise business rules and entities, completely isolated from external dependencies."),
    (_segment("services"),
     "Application specific business logic coordinating the domain entities and ports."),
]

# usecases -> repositories -> entities/domain -> delivery/controllers/handlers
CLEAN_RULES: List[Rule] = [
    (_segment("usecases", "usecase"),
     "Application specific business rules. Orchestrates the flow of data to and from entities."),
    (_segment("repositories", "repository"),
     "Data access layer bridging domain entities strictly to storage engines."),
    (_segment("entities", "entity", "domain"),
     "Core enterprise business objects and crucial rules. The most stable layer."),
    (_segment("delivery", "controllers", "handlers"),
     "Interface adapters. Converts data from the format most convenient for the use cases "
     "to the format for external agency (e.g. Web)."),
]

MODULAR_MONOLITH_RULES: List[Rule] = [
    (_in_module(_segment("handlers")),
     "Module-specific HTTP controllers and request parsers."),
    (_in_module(_contains("/service.go", "/service.ts", "/service.py")),
     "Module-specific business logic boundary."),
    (_in_module(_contains("/repository")),
     "Module-specific data access layer."),
    (_segment("shared", "pkg"),
     "Shared utilities and cross-cutting concerns (logging, errors) utilized by all modules."),
]

MICROSERVICES_RULES: List[Rule] = [
    (lambda p: "/pb/" in p or ".proto" in p,
     "Protocol Buffers definition. The RPC contract describing how services communicate."),
    (_segment("config"),
     "Service-specific configuration loading (handling environment vars globally)."),
    (_segment("clients"),
     "gRPC or HTTP client stubs used to talk to other internal microservices."),
    (_segment("handlers"),
     "Entry point controllers processing transport representations (HTTP/gRPC/Kafka)."),
    (_segment("repository"),
     "The persistence layer owned exclusively by this microservice. No DB sharing."),
]

MVP_RULES: List[Rule] = [
    (_segment("handlers", "controllers"),
     "Route handlers managing incoming requests and dispatching responsibilities."),
    (_segment("models"),
     "Database schema representations and basic data validation forms."),
    (_segment("routes"),
     "Application routing declarations binding URLs to handlers."),
]

UNIVERSAL_RULES: List[Rule] = [
    (_contains("docker-compose.yaml"),
     "Container orchestration configuration to spin up your databases and dependencies locally."),
    (_contains("makefile"),
     "Convenience scripts and aliases for building, testing, and running the project."),
    (_contains("go.mod", "package.json", "requirements.txt"),
     "Dependency tracking and package manager descriptor."),
    (_contains(".env.example"),
     "Template for environment variables required by the application runtime."),
    (_segment("models"),
     "Data representations and database schema definitions."),
    (_contains(".gitkeep"),
     "A placeholder file ensuring the empty directory structure is committed to version control."),
    (lambda p: any(s in p for s in ("database.go", "database.ts", "database.py", "/db/")),
     "Database connection pooling and initialization logic."),
    (_contains("schema.prisma"),
     "Prisma ORM schema definition declaring your database shapes and relations."),
]

ARCHITECTURE_RULES: Dict[str, List[Rule]] = {
    "hexagonal": HEXAGONAL_RULES,
    "clean": CLEAN_RULES,
    "modular-monolith": MODULAR_MONOLITH_RULES,
    "microservices": MICROSERVICES_RULES,
    "mvp": MVP_RULES,
}


def _first_match(rules: List[Rule], path: str) -> Optional[str]:
    for predicate, explanation in rules:
        if predicate(path):
            return explanation
    return None


def explain(path: str, architecture: str) -> Optional[str]:
    if not path:
        return None
    p = "/" + path.strip().replace("\\", "/").lower().lstrip("/")
    scoped = ARCHITECTURE_RULES.get(architecture)
    if scoped:
        found = _first_match(scoped, p)
        if found:
            return found
    return _first_match(UNIVERSAL_RULES, p)
