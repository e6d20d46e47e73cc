"""
Prompt and Response Schema Construction
=======================================

Turns ``GenerationConstraints`` into the instruction text sent with the image,
and into the JSON schema used by providers that accept a structured output hint.
Fields the platform does not accept (e.g. description on Adobe Stock) are left
out of both.
"""

from typing import Any, Dict

from . import config
from .models import GenerationConstraints


def build_prompt(constraints: GenerationConstraints) -> str:
    """
    Build the metadata generation prompt for one image.

    Args:
        constraints: Target platform, limits and exclusions.

    Returns:
        The prompt text, asking for a strict JSON object.
    """
    fields = constraints.fields
    platform_rule = config.PLATFORM_RULES.get(constraints.platform, config.DEFAULT_PLATFORM_RULE)

    lines = [
        "Analyze this commercial stock image. Provide metadata optimized for "
        f"{constraints.platform}.",
        "",
        "STRICT CONSTRAINTS:",
        f"- {platform_rule}",
        f"- Title: Max {constraints.max_title_length} characters. Literal description of the scene.",
    ]
    if constraints.excluded_title_words:
        lines.append(
            "- DO NOT include any of the following words in the TITLE: "
            + ", ".join(constraints.excluded_title_words)
        )
    if fields["description"]:
        lines.append(f"- Description: Max {constraints.max_description_length} characters.")
    else:
        lines.append("- Skip Description.")
    lines.append(
        f"- Keywords: Exactly {constraints.target_keyword_count} relevant keywords, most important first."
    )
    if constraints.excluded_keywords:
        lines.append(
            "- DO NOT include any of the following KEYWORDS: "
            + ", ".join(constraints.excluded_keywords)
        )
    lines.append("- Style: Commercial, non-subjective.")
    lines.append(f"- Image Type: {constraints.image_kind}")
    lines.append("")
    lines.append("Return ONLY a valid JSON object, no additional text:")
    lines.append("{")
    lines.append('  "title": "string",')
    if fields["description"]:
        lines.append('  "description": "string",')
    lines.append('  "keywords": ["string"]')
    lines.append("}")
    return "\n".join(lines)


def build_response_schema(platform: str) -> Dict[str, Any]:
    """
    JSON schema (OpenAPI subset) describing the expected response object.

    ``title`` and ``keywords`` are always required; ``description`` is
    present and required only when the platform accepts it.
    """
    fields = config.PLATFORM_FIELDS[platform]
    properties: Dict[str, Any] = {
        "title": {"type": "STRING"},
        "keywords": {"type": "ARRAY", "items": {"type": "STRING"}},
    }
    required = ["title", "keywords"]
    if fields["description"]:
        properties["description"] = {"type": "STRING"}
        required.append("description")
    return {"type": "OBJECT", "properties": properties, "required": required}
