import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    API_KEY: str = os.getenv("API_KEY", "")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    # Single fixed key holding the last validated CPF (the "remembered" session)
    SESSION_IDENTIFIER_KEY: str = os.getenv("SESSION_IDENTIFIER_KEY", "cpf")

    # Remote Gateway (one JSON POST per action: check / status / withdraw)
    WEBHOOK_URL: str = os.getenv(
        "WEBHOOK_URL", "https://weebkarasek.farolbase.com/webhook/paranaappgrana"
    )
    GATEWAY_TIMEOUT_SEC: float = float(os.getenv("GATEWAY_TIMEOUT_SEC", "15"))

    # Deep links
    WHATSAPP_URL: str = os.getenv("WHATSAPP_URL", "https://wa.me/18998008009")
    REFERRAL_MESSAGE: str = os.getenv(
        "REFERRAL_MESSAGE",
        "Oi! Usei o app GranaCred para consultar/sacar FGTS. Recomendo! ✅",
    )
    HOWTO_IMAGE_URL: str = os.getenv(
        "HOWTO_IMAGE_URL",
        "https://gpakoffbuypbmfiwewka.supabase.co/storage/v1/object/public/Farol/"
        "Imagens%20de%20envio/Como%20autorizar%20aplicativo.jpg",
    )

    # Withdrawal form: DDD + number, zero-padded on the wire
    PHONE_MIN_DIGITS: int = int(os.getenv("PHONE_MIN_DIGITS", "10"))
    PHONE_PAD_LENGTH: int = int(os.getenv("PHONE_PAD_LENGTH", "11"))

    # Observability
    ENABLE_PII_REDACTION: bool = os.getenv("ENABLE_PII_REDACTION", "true").lower() == "true"
    ENABLE_METRICS: bool = os.getenv("ENABLE_METRICS", "true").lower() == "true"

    # Admin surface (/admin/*)
    ADMIN_RBAC_ENABLED: bool = os.getenv("ADMIN_RBAC_ENABLED", "true").lower() == "true"
    ADMIN_API_KEY: str = os.getenv("ADMIN_API_KEY", "")

settings = Settings()
