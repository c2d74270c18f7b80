"""
Token system wiring and caller-identity dependencies
"""

from typing import Optional

from fastapi import Header

from ..config import AyaConfig, get_config
from ..logging_config import setup_logging
from ..storage import InMemoryStorage, SQLiteStorage, StorageInterface
from ..token import AyaToken


class TokenSystem:
    """Storage backend plus the deployed token, opened or deployed from config"""

    def __init__(self, settings: Optional[AyaConfig] = None,
                 storage: Optional[StorageInterface] = None):
        self.settings = settings or get_config()

        if storage is None:
            if self.settings.storage_backend == "memory":
                storage = InMemoryStorage()
            else:
                storage = SQLiteStorage(self.settings.database_path)
        self.storage = storage

        token = AyaToken(storage, settings=self.settings)
        if not token.is_deployed:
            token = AyaToken.deploy(storage, owner=self.settings.owner_address, settings=self.settings)
        self.token = token


_token_system: Optional[TokenSystem] = None


def get_token_system() -> TokenSystem:
    """Dependency returning the process-wide token system, created on first use"""
    global _token_system
    if _token_system is None:
        settings = get_config()
        setup_logging(settings.log_level, "aya", settings.log_format)
        _token_system = TokenSystem(settings)
    return _token_system


def get_caller(x_caller: str = Header(..., description="Authenticated caller account")) -> str:
    """Caller identity as established by the authentication layer in front of the API"""
    return x_caller
