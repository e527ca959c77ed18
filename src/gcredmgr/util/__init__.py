from .paths import ADC_FILE_NAME, CREDENTIALS_ENV_VAR, default_gcloud_creds_path
from .time import as_utc, expiry_from_ttl, now_utc, ttl_from_expiry

__all__ = [
    "ADC_FILE_NAME",
    "CREDENTIALS_ENV_VAR",
    "default_gcloud_creds_path",
    "now_utc",
    "as_utc",
    "expiry_from_ttl",
    "ttl_from_expiry",
]
