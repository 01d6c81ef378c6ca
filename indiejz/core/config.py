from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env fica na raiz do projeto: indiejz/core/config.py -> indiejz/core -> indiejz -> raiz
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"

# Chaves secretas da Stripe começam com sk_ (sk_test_ / sk_live_)
STRIPE_KEY_PREFIX = "sk_"


class Settings(BaseSettings):
    secret_key: str = "change-me-in-production"
    database_url: str = "sqlite:///./indiejz.db"
    # CORS: lista de origins separada por vírgula; em produção https://seudominio.com
    cors_origins: str = "*"
    rate_limit_per_minute: int = 60
    # Validação de cupom: limite próprio para dificultar tentativa e erro de códigos
    rate_limit_coupon_per_minute: int = 20
    rate_limit_checkout_per_minute: int = 10
    rate_limit_register_per_minute: int = 3
    # Stripe Checkout (sessão hospedada): valor em centavos, moeda BRL
    stripe_secret_key: str = ""
    stripe_currency: str = "brl"
    stripe_api_version: str = "2023-10-16"
    # Página do site para onde a Stripe devolve o comprador (success/canceled na query)
    frontend_url: str = "http://127.0.0.1:8080"
    admin_secret: str = ""            # Painel admin: header X-Admin-Secret
    admin_email: str = ""             # Recebe o alerta de nova venda
    environment: str = "development"
    # E-mail (alerta de venda, recibo, agradecimento de doação): SMTP
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = "noreply@indiejz.dev"
    smtp_from_name: str = "IndieJZ CyberLab"
    smtp_use_tls: bool = True
    # Fila de notificações: tentativas e espera base (segundos, dobra a cada falha)
    notification_max_attempts: int = 5
    notification_backoff_seconds: int = 60

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator("stripe_secret_key", "admin_secret", mode="before")
    @classmethod
    def strip_secret(cls, v: str | None) -> str:
        """Evita erro por espaço/quebra de linha copiados junto com a chave."""
        return (v or "").strip()

    @field_validator("stripe_currency", mode="before")
    @classmethod
    def lower_currency(cls, v: str | None) -> str:
        return (v or "brl").strip().lower()


settings = Settings()


def is_stripe_configured() -> bool:
    """Existe uma chave secreta da Stripe válida?"""
    key = settings.stripe_secret_key or ""
    return bool(key) and key.startswith(STRIPE_KEY_PREFIX)
