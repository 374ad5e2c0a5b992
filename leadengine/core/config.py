"""
Application configuration.
Secrets can be loaded from Azure Key Vault (when KEY_VAULT_NAME is set) via
Managed Identity at startup, then fall back to environment variables /
.env file so local development works without Key Vault access.
"""
import os
import logging
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Key Vault → environment variable mapping
# Secret names in Key Vault use lowercase-dashes; env vars use UPPER_SNAKE.
# ---------------------------------------------------------------------------
_KV_TO_ENV: dict[str, str] = {
    "database-url":           "DATABASE_URL",
    "webhook-secret":         "WEBHOOK_SECRET",
    "openai-api-key":         "OPENAI_API_KEY",
    "hubspot-access-token":   "HUBSPOT_ACCESS_TOKEN",
    "twilio-account-sid":     "TWILIO_ACCOUNT_SID",
    "twilio-auth-token":      "TWILIO_AUTH_TOKEN",
    "twilio-whatsapp-from":   "TWILIO_WHATSAPP_FROM",
    "twilio-whatsapp-to":     "TWILIO_WHATSAPP_TO",
    "meta-verify-token":      "META_VERIFY_TOKEN",
    "meta-app-secret":        "META_APP_SECRET",
    "meta-page-access-token": "META_PAGE_ACCESS_TOKEN",
    "proxycurl-api-key":      "PROXYCURL_API_KEY",
}


def _load_from_key_vault(vault_name: str) -> int:
    """
    Fetch secrets from Azure Key Vault and inject them into os.environ.
    Returns the number of secrets successfully loaded.
    """
    try:
        from azure.identity import ManagedIdentityCredential, DefaultAzureCredential
        from azure.keyvault.secrets import SecretClient
        from azure.core.exceptions import ResourceNotFoundError

        vault_url = f"https://{vault_name}.vault.azure.net/"

        try:
            credential = ManagedIdentityCredential()
            credential.get_token("https://vault.azure.net/.default")
        except Exception:
            credential = DefaultAzureCredential()

        client = SecretClient(vault_url=vault_url, credential=credential)
        loaded = 0

        for kv_name, env_name in _KV_TO_ENV.items():
            try:
                secret = client.get_secret(kv_name)
                if secret.value:
                    os.environ[env_name] = secret.value
                    loaded += 1
            except ResourceNotFoundError:
                pass
            except Exception as e:
                logger.warning("KV: could not load '%s': %s", kv_name, e)

        return loaded

    except ImportError:
        logger.warning("azure-keyvault-secrets / azure-identity not installed; skipping Key Vault load.")
        return 0
    except Exception as e:
        logger.warning("Key Vault load failed (%s); falling back to environment / .env file.", e)
        return 0


_kv_name = os.environ.get("KEY_VAULT_NAME", "")
if _kv_name:
    _n = _load_from_key_vault(_kv_name)
    if _n:
        logger.info("Loaded %d secrets from Key Vault '%s'", _n, _kv_name)


class Settings(BaseSettings):
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    DATABASE_URL: str = "sqlite+aiosqlite:///./leadengine.db"
    KEY_VAULT_NAME: str = ""

    # Pipeline tuning
    DEDUPLICATION_HOURS: int = 2
    DEDUPLICATION_THRESHOLD: float = 0.85
    MAX_PROCESSING_RETRIES: int = 3
    QUEUE_BATCH_SIZE: int = 10
    QUEUE_RETRY_BASE_MINUTES: int = 5
    FAILED_SYNC_RETRY_MINUTES: int = 5
    ENABLE_AUTO_REPLY: bool = False
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Worker trigger shared secret
    WEBHOOK_SECRET: str = ""

    # OpenAI
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o"
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_TEMPERATURE: float = 0.3

    # HubSpot
    HUBSPOT_ACCESS_TOKEN: str = ""
    HUBSPOT_DEAL_STAGE: str = "appointmentscheduled"
    HUBSPOT_PIPELINE_ID: str = "default"
    HUBSPOT_PORTAL_ID: str = ""

    # Twilio WhatsApp
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_WHATSAPP_FROM: str = ""
    TWILIO_WHATSAPP_TO: str = ""

    # Meta (Facebook / Instagram)
    META_VERIFY_TOKEN: str = ""
    META_APP_SECRET: str = ""
    META_PAGE_ACCESS_TOKEN: str = ""
    META_GRAPH_API_VERSION: str = "v18.0"

    # Proxycurl (LinkedIn search)
    PROXYCURL_API_KEY: str = ""

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
