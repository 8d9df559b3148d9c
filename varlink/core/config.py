import json
import os
from pydantic import BaseModel, Field
from varlink.core.logging import get_logger

logger = get_logger(__name__)

class OracleConfig(BaseModel):
    """Configuration of the satisfiability oracle."""
    solver_name: str = "glucose4"
    # 0 disables memoization of query results
    cache_max_entries: int = Field(default=100_000, ge=0)

    @classmethod
    def from_env_or_file(cls) -> "OracleConfig":
        # 1. Try Env Var
        env_solver = os.environ.get("VARLINK_SOLVER")
        if env_solver:
            return cls(solver_name=env_solver)

        # 2. Try Config Path
        config_path = os.environ.get("VARLINK_CONFIG_PATH")
        if config_path and os.path.exists(config_path):
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    return cls.model_validate(json.load(f))
            except (OSError, ValueError) as e:
                logger.warning(f"Ignoring unreadable config {config_path}: {e}")

        return cls()
