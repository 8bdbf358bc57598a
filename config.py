import os

# --- Server ---
PORT = int(os.getenv("PORT", "3001"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
STATIC_DIR = os.getenv("STATIC_DIR", "public")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# --- Provider calls ---
# Seconds to wait on the upstream text-generation API before giving up.
PROVIDER_TIMEOUT_SECONDS = float(os.getenv("PROVIDER_TIMEOUT_SECONDS", "60"))

# --- Uploads ---
PPTX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
MAX_TEMPLATE_BYTES = int(os.getenv("MAX_TEMPLATE_BYTES", str(50 * 1024 * 1024)))
