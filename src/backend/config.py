import os
from pydantic import BaseModel

class BackendConfig(BaseModel):
    """Configuration for the FastAPI backend."""
    
    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    
    # CORS settings
    cors_origins: list = ["http://localhost:3000"]

    # Load every embedding model at startup instead of on first request
    preload_models: bool = False
    
    @classmethod
    def from_env(cls) -> "BackendConfig":
        """Create config from environment variables."""
        return cls(
            host=os.getenv("BACKEND_HOST", "0.0.0.0"),
            port=int(os.getenv("BACKEND_PORT", "8000")),
            debug=os.getenv("BACKEND_DEBUG", "false").lower() == "true",
            cors_origins=os.getenv("CORS_ORIGINS", "http://localhost:3000").split(","),
            preload_models=os.getenv("BACKEND_PRELOAD_MODELS", "false").lower() == "true",
        )

# Global config instance
config = BackendConfig.from_env()
