"""
Application Configuration and Constants
=======================================

This module contains all global configuration values, constants, and defaults used
throughout the SEO Vision engine. It serves as a single source of truth for:

- Provider identifiers and the default attempt plan
- Stock platforms and the metadata fields each one accepts
- Network timeouts and image size limits
- Default generation constraints

Note:
    All constants use UPPER_SNAKE_CASE naming convention. Modify these values to
    change engine-wide behavior without touching business logic.
"""

# ============================================================================
# APPLICATION SETTINGS
# ============================================================================

APP_NAME = "SEO Vision Pro"

# Sent to OpenRouter as HTTP-Referer (identifies the calling application)
APP_URL = "https://github.com/seo-vision/seo-vision"

# ============================================================================
# PROVIDERS
# ============================================================================
# Provider identifiers. These are the keys of the credential store and of the
# capability table in src/integrations/providers.py.

PROVIDER_GEMINI = "gemini"
PROVIDER_GROQ = "groq"
PROVIDER_OPENAI = "openai"
PROVIDER_OPENROUTER = "openrouter"
PROVIDER_DEEPSEEK = "deepseek"

ALL_PROVIDERS = (
    PROVIDER_GEMINI,
    PROVIDER_GROQ,
    PROVIDER_OPENAI,
    PROVIDER_OPENROUTER,
    PROVIDER_DEEPSEEK,
)

# Environment variables consulted for credentials (comma separated for rotation)
PROVIDER_ENV_VARS = {
    PROVIDER_GEMINI: "GEMINI_API_KEY",
    PROVIDER_GROQ: "GROQ_API_KEY",
    PROVIDER_OPENAI: "OPENAI_API_KEY",
    PROVIDER_OPENROUTER: "OPENROUTER_API_KEY",
    PROVIDER_DEEPSEEK: "DEEPSEEK_API_KEY",
}

# ============================================================================
# DEFAULT ATTEMPT PLAN
# ============================================================================
# Ordered (model, provider) pairs. The cheapest and most reliable choices come
# first; the engine stops at the first successful attempt.

DEFAULT_ATTEMPT_PLAN = (
    ("gemini-2.0-flash", PROVIDER_GEMINI),
    ("llama-3.2-90b-vision-preview", PROVIDER_GROQ),
    ("gpt-4o-mini", PROVIDER_OPENAI),
    ("google/gemini-2.0-flash-001", PROVIDER_OPENROUTER),
    ("deepseek-chat", PROVIDER_DEEPSEEK),
    ("gpt-4o", PROVIDER_OPENAI),
)

# ============================================================================
# STOCK PLATFORMS
# ============================================================================
# Which metadata fields each platform accepts. Fields marked False are left out
# of the prompt, the response schema and the final metadata.

PLATFORM_GENERIC = "Generic"
PLATFORM_SHUTTERSTOCK = "Shutterstock"
PLATFORM_ADOBE_STOCK = "Adobe Stock"
PLATFORM_FREEPIK = "Freepik"
PLATFORM_VECTEEZY = "Vecteezy"
PLATFORM_POND5 = "Pond5"

PLATFORM_FIELDS = {
    PLATFORM_GENERIC: {"title": True, "description": True, "keywords": True},
    PLATFORM_SHUTTERSTOCK: {"title": True, "description": True, "keywords": True},
    PLATFORM_ADOBE_STOCK: {"title": True, "description": False, "keywords": True},
    PLATFORM_FREEPIK: {"title": True, "description": False, "keywords": True},
    PLATFORM_VECTEEZY: {"title": True, "description": False, "keywords": True},
    PLATFORM_POND5: {"title": True, "description": True, "keywords": True},
}

# Extra instruction injected into the prompt for each platform
PLATFORM_RULES = {
    PLATFORM_ADOBE_STOCK: "Adobe Stock Rule: Title must be highly descriptive and literal. Focus everything into the title.",
    PLATFORM_SHUTTERSTOCK: "Shutterstock Rule: Provide clear title and context-rich description.",
    PLATFORM_FREEPIK: "Freepik Rule: Catchy but descriptive titles.",
}
DEFAULT_PLATFORM_RULE = "Standard microstock metadata rules apply."

IMAGE_KINDS = ("None", "Photo", "Vector", "Illustration")

# ============================================================================
# GENERATION DEFAULTS
# ============================================================================

DEFAULT_MAX_TITLE_CHARS = 200
DEFAULT_MAX_DESC_CHARS = 200
DEFAULT_KEYWORD_COUNT = 50
DEFAULT_IMAGE_KIND = "Photo"
DEFAULT_PLATFORM = PLATFORM_GENERIC

# Sampling temperature sent to every provider
GENERATION_TEMPERATURE = 0.1

# ============================================================================
# NETWORK CONFIGURATION
# ============================================================================

# Maximum time to wait for a single provider response
REQUEST_TIMEOUT_SECONDS = 60

# Worker threads used when several images are analyzed at once
BATCH_MAX_WORKERS = 3

# ============================================================================
# IMAGE INPUT CONFIGURATION
# ============================================================================

# Maximum file size for images (providers reject very large inline payloads)
MAX_IMAGE_SIZE_MB = 20

# Pillow format name -> MIME type accepted by the providers
SUPPORTED_IMAGE_FORMATS = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
}
