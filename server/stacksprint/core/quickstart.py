# stacksprint/core/quickstart.py
"""Built-in one-click starting points, expressed as sparse preset snapshots."""
from typing import Any, Dict, List, Optional

from stacksprint.models import PresetSnapshot

QUICKSTART_PRESETS: List[Dict[str, Any]] = [
    {
        "name": "API Service",
        "description": "Go · Fiber · PostgreSQL",
        "config": {
            "language": "go", "framework": "fiber", "architecture": "clean", "db": "postgresql",
            "use_orm": True, "service_communication": "none",
            "infra": {"redis": False, "kafka": False, "nats": False},
            "features": {"makefile": True},
            "root": {"mode": "new", "name": "api-service", "module": "github.com/user/api-service"},
        },
    },
    {
        "name": "Web Backend",
        "description": "Node · Express · Modular",
        "config": {
            "language": "node", "framework": "express", "architecture": "modular-monolith", "db": "postgresql",
            "use_orm": True, "service_communication": "none",
            "infra": {"redis": True, "kafka": False, "nats": False},
            "features": {"makefile": False},
            "root": {"mode": "new", "name": "web-backend", "module": ""},
        },
    },
    {
        "name": "Python API",
        "description": "FastAPI · Clean · PG",
        "config": {
            "language": "python", "framework": "fastapi", "architecture": "clean", "db": "postgresql",
            "use_orm": True, "service_communication": "none",
            "infra": {"redis": False, "kafka": False, "nats": False},
            "features": {"makefile": True},
            "root": {"mode": "new", "name": "python-api", "module": ""},
        },
    },
    {
        "name": "Microservices",
        "description": "Go · Kafka · gRPC",
        "config": {
            "language": "go", "framework": "fiber", "architecture": "microservices", "db": "postgresql",
            "use_orm": False, "service_communication": "grpc",
            "infra": {"redis": True, "kafka": True, "nats": False},
            "features": {"makefile": True},
            "services": [{"name": "auth-svc", "port": 8081}, {"name": "user-svc", "port": 8082}],
            "root": {"mode": "new", "name": "platform", "module": "github.com/user/platform"},
        },
    },
]


def get_quickstart(name: str) -> Optional[PresetSnapshot]:
    for tile in QUICKSTART_PRESETS:
        if tile["name"].lower() == name.strip().lower():
            return PresetSnapshot.model_validate(tile["config"])
    return None
