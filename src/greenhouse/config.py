import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load the appropriate .env file on module import
env = os.environ.get("GREENHOUSE_ENV", "development").lower()
env_file = f".env.{env}"
if os.path.exists(env_file):
    load_dotenv(env_file)
else:
    # Fall back to the default .env file
    load_dotenv()


@dataclass
class Config:
    environment: str
    database_url: str
    collection_name: str
    pool_min_size: int
    pool_max_size: int
    host: str
    port: int
    log_level: str

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            environment=env,
            database_url=os.environ.get(
                "DATABASE_URL", f"postgresql://localhost:5432/greenhouse_{env}"
            ),
            collection_name=os.environ.get("GREENHOUSE_COLLECTION", "plants"),
            pool_min_size=int(os.environ.get("DB_POOL_MIN_SIZE", "1")),
            pool_max_size=int(os.environ.get("DB_POOL_MAX_SIZE", "20")),
            host=os.environ.get("GREENHOUSE_HOST", "127.0.0.1"),
            port=int(os.environ.get("GREENHOUSE_PORT", "8081")),
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )


config = Config.from_env()
