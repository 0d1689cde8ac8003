from __future__ import annotations

NO_INGREDIENTS_SENTINEL = "No ingredients found"

VIDEO_SYSTEM_PROMPT = (
    "You are a helpful assistant that extracts ingredients from cooking videos. "
    "Only mention ingredients that are explicitly shown or mentioned in the video content."
)

RECIPE_SYSTEM_PROMPT = (
    "You are a helpful assistant that extracts ingredients from recipe text. "
    "Only mention ingredients that are explicitly listed in the recipe."
)

VIDEO_PROMPT_TEMPLATE = """Analyze the following video description and extract ONLY the ingredients that are explicitly mentioned or shown in the video.

Video Description: {context}

Instructions:
1. Only list ingredients that are clearly mentioned or visible in the video
2. Do not invent or add ingredients that aren't in the video
3. Return ingredients as a simple list, one per line
4. If no ingredients are mentioned, return "{sentinel}"
5. Focus only on food ingredients, not cooking utensils or equipment

Please provide the ingredients:"""

RECIPE_PROMPT_TEMPLATE = """Extract ONLY the ingredients from the following recipe text. Focus on food ingredients and ignore cooking instructions, steps, or equipment.

Recipe Text: {context}

Instructions:
1. Only list food ingredients that are mentioned in the recipe
2. Do not include cooking instructions, steps, or equipment
3. Return ingredients as a simple list, one per line
4. If no ingredients are mentioned, return "{sentinel}"
5. Clean up ingredient names (remove measurements if they're not part of the ingredient name)

Please provide the ingredients:"""

GENERIC_VIDEO_CONTEXT = "Extract the ingredients shown or mentioned in this cooking video."

PLACEHOLDER_TEMPLATE = (
    "{platform} video content is not available in detail. "
    "Please provide a description of the ingredients shown in the video."
)
PLATFORM_LABELS = {
    "youtube": "YouTube",
    "instagram": "Instagram",
}


def build_video_prompt(context: str) -> str:
    return VIDEO_PROMPT_TEMPLATE.format(context=context.strip(), sentinel=NO_INGREDIENTS_SENTINEL)


def build_recipe_prompt(context: str) -> str:
    return RECIPE_PROMPT_TEMPLATE.format(context=context.strip(), sentinel=NO_INGREDIENTS_SENTINEL)


def build_placeholder_description(platform: str) -> str:
    label = PLATFORM_LABELS.get(platform)
    if not label:
        return "Detailed video content is not available. Please provide a description of the ingredients shown in the video."
    return PLACEHOLDER_TEMPLATE.format(platform=label)
