import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def get_env(key: str, default: any = None, cast_type: type = str):
    value = os.getenv(key)
    if value is None:
        return default

    if cast_type == bool:
        return value.lower() in ("true", "1", "t", "yes", "on")
    try:
        return cast_type(value)
    except (ValueError, TypeError):
        return default


class AppConfigs:
    def __init__(self):
        self.name = get_env("APP_NAME", "EIP-1967 Proxy Resolver")
        self.debug = get_env("DEBUG", False, bool)
        self.log_level = get_env("LOG_LEVEL", "DEBUG" if self.debug else "WARNING")


class EthereumConfigs:
    def __init__(self):
        # Comma-separated list, later URIs are failover targets
        self.rpc_provider_uris = get_env("RPC_PROVIDER_URIS", "https://ethereum.publicnode.com")
        self.rpc_max_retries = get_env("RPC_MAX_RETRIES", 3, int)
        self.rpc_timeout_seconds = get_env("RPC_TIMEOUT_SECONDS", 30, int)
        self.rpc_min_interval = get_env("RPC_MIN_INTERVAL", 0.15, float)
        self.batch_max_concurrency = get_env("BATCH_MAX_CONCURRENCY", 4, int)


class SystemConfigs:
    def __init__(self):
        self.app = AppConfigs()
        self.ethereum = EthereumConfigs()

# Singleton instance
configs = SystemConfigs()
