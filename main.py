"""
SEO Vision - Stock Metadata Generator
=====================================

Command line entry point. Generates stock-photography metadata (title,
optional description, keywords) for one or more images by walking the
provider fallback plan until one provider succeeds.

Keys are read from the settings file (``~/.seo_vision_config.json``) and the
provider environment variables (GEMINI_API_KEY, GROQ_API_KEY, OPENAI_API_KEY,
OPENROUTER_API_KEY, DEEPSEEK_API_KEY). Command line options override the
stored constraints.

Usage:
    python main.py photo.jpg --platform "Adobe Stock" --keywords 30
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from src.core import config
from src.core.engine import InferenceEngine
from src.core.processing import STATUS_COMPLETED, BatchProcessor
from src.integrations.adapter import ProviderAdapter
from src.utils.config_manager import (
    constraints_from_settings,
    credentials_from_settings,
    load_settings,
)
from src.utils.logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate stock metadata for images using vision language models."
    )
    parser.add_argument("images", nargs="+", help="Image files to analyze")
    parser.add_argument("--platform", choices=sorted(config.PLATFORM_FIELDS), help="Target stock platform")
    parser.add_argument("--max-title", type=int, help="Maximum title length in characters")
    parser.add_argument("--max-desc", type=int, help="Maximum description length in characters")
    parser.add_argument("--keywords", type=int, help="Number of keywords to generate")
    parser.add_argument("--image-kind", choices=config.IMAGE_KINDS, help="Kind of image")
    parser.add_argument("--prefix", help="Text placed before every title")
    parser.add_argument("--suffix", help="Text placed after every title")
    parser.add_argument("--exclude-title-words", help="Comma separated words to keep out of titles")
    parser.add_argument("--exclude-keywords", help="Comma separated keywords to drop")
    parser.add_argument("--relay-url", help="Relay endpoint for provider requests")
    parser.add_argument("--settings", type=Path, help="Settings file (default: ~/.seo_vision_config.json)")
    parser.add_argument("--timeout", type=float, default=config.REQUEST_TIMEOUT_SECONDS,
                        help="Per-request timeout in seconds")
    parser.add_argument("--workers", type=int, default=config.BATCH_MAX_WORKERS,
                        help="Images analyzed in parallel")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug output on the console")
    return parser


def apply_overrides(settings: dict, args: argparse.Namespace) -> dict:
    """Fold command line options into the loaded settings."""
    c = settings["constraints"]
    if args.platform:
        c["selectedPlatform"] = args.platform
    if args.max_title is not None:
        c["maxTitleChars"] = args.max_title
    if args.max_desc is not None:
        c["maxDescChars"] = args.max_desc
    if args.keywords is not None:
        c["keywordCount"] = args.keywords
    if args.image_kind:
        c["imageType"] = args.image_kind
    if args.prefix is not None:
        c["prefix"], c["prefixEnabled"] = args.prefix, bool(args.prefix)
    if args.suffix is not None:
        c["suffix"], c["suffixEnabled"] = args.suffix, bool(args.suffix)
    if args.exclude_title_words is not None:
        c["negWordsTitle"], c["negWordsTitleEnabled"] = args.exclude_title_words, True
    if args.exclude_keywords is not None:
        c["negKeywords"], c["negKeywordsEnabled"] = args.exclude_keywords, True
    if args.relay_url is not None:
        settings["relay_url"] = args.relay_url
    return settings


def format_result(result) -> dict:
    output = {"file": str(result.path), "status": result.status}
    if result.status == STATUS_COMPLETED:
        output["provider"] = result.resolution.provider
        output["model"] = result.resolution.model
        output.update(result.metadata.to_dict())
    else:
        output["error"] = result.error
    return output


def main(argv=None) -> int:
    """
    Run the CLI.

    Returns:
        0 when every image succeeded, 1 otherwise (2 for invalid settings).
    """
    args = build_parser().parse_args(argv)
    setup_logging(console_level=logging.DEBUG if args.verbose else logging.WARNING)
    logger = logging.getLogger(__name__)

    settings = apply_overrides(load_settings(args.settings), args)
    try:
        constraints = constraints_from_settings(settings)
    except ValueError as e:
        logger.error(f"Invalid constraints: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 2

    credentials = credentials_from_settings(settings)
    if not credentials:
        logger.warning("No provider keys configured; every image will fail")

    adapter = ProviderAdapter(relay_url=settings["relay_url"] or None)
    engine = InferenceEngine(adapter, request_timeout=args.timeout)
    processor = BatchProcessor(
        engine,
        constraints,
        credentials,
        log_callback=logger.info,
        max_workers=args.workers,
    )

    try:
        results = processor.run(args.images)
    except KeyboardInterrupt:
        processor.abort()
        logger.warning("Interrupted by user")
        return 1
    finally:
        adapter.close()

    for result in results:
        print(json.dumps(format_result(result), ensure_ascii=False))

    return 0 if all(r.status == STATUS_COMPLETED for r in results) else 1


# ============================================================================
# APPLICATION ENTRY POINT
# ============================================================================
if __name__ == "__main__":
    sys.exit(main())
