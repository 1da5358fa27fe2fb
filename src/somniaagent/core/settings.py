"""
SDK Configuration

Pydantic Settings for environment variable management.
"""
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """SDK settings loaded from environment variables and .env"""

    # Signing
    private_key: Optional[str] = Field(
        default=None,
        repr=False,
        validation_alias=AliasChoices("PRIVATE_KEY", "SOMNIA_PRIVATE_KEY"),
    )

    # Network
    default_network: str = Field(
        default="testnet", validation_alias=AliasChoices("SOMNIA_NETWORK")
    )
    testnet_rpc: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SOMNIA_TESTNET_RPC")
    )
    mainnet_rpc: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SOMNIA_MAINNET_RPC")
    )
    rpc_account: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SOMNIA_RPC_ACCOUNT")
    )
    rpc_timeout: float = Field(
        default=30.0, validation_alias=AliasChoices("SOMNIA_RPC_TIMEOUT")
    )

    # AI
    ai_endpoint: str = Field(
        default="http://localhost:11434", validation_alias=AliasChoices("SOMNIA_AI_ENDPOINT")
    )
    ai_model: str = Field(default="llama3", validation_alias=AliasChoices("SOMNIA_AI_MODEL"))
    openai_api_key: Optional[str] = Field(
        default=None, repr=False, validation_alias=AliasChoices("OPENAI_API_KEY")
    )

    # Logging
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("SOMNIA_LOG_LEVEL"))

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    def rpc_override(self, network_key: str) -> Optional[str]:
        """Return the RPC URL override for a registry key, if any"""
        return {
            "testnet": self.testnet_rpc,
            "mainnet": self.mainnet_rpc,
        }.get(network_key.lower())


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
