"""
Design analysis prompts for the Claude API

Builds the full-analysis prompt (exactly 7 ranked recommendations) and the
single-replacement prompt used when a downvoted recommendation is replaced.
Both builders are pure: the same inputs always produce the same string.
"""

import json
from typing import Any, Dict, Iterable, Optional

RECOMMENDATION_COUNT = 7

RECOMMENDATION_SCHEMA = (
    '{ "id":"REC-1","category":"ui|ux|product","title":"max 8 words",'
    '"impact":"high|medium|low","confidence":"high|medium|low",'
    '"why_it_matters":"max 36 words","what_to_change":["max 18 words","max 18 words"],'
    '"acceptance_criteria":["max 18 words","max 18 words"],'
    '"analytics":["max 9 words"],"anchors":[] }'
)

PRIORITY_RULE = (
    "Priority = (impact high=3, medium=2, low=1) + "
    "(confidence high=0.3, medium=0.2, low=0.1). Sort DESC by score."
)

SPECIFICITY_GUIDE = """CRITICAL: Make recommendations DETAILED and ACTIONABLE. No generic advice.

For each recommendation:
- title: Specific, concrete action (e.g., "Add sticky CTA to product images" not "Improve buttons")
- why_it_matters: Specific business impact with metrics and detailed explanation (e.g., "Increases conversion by 15-25% based on ecommerce benchmarks because users can purchase without scrolling back to find the button")
- what_to_change: Exact UI elements to modify with implementation details (e.g., ["Add floating CTA button that appears after 50% scroll", "Implement size selector with visual feedback and hover states"])
- acceptance_criteria: Measurable outcomes with specific metrics (e.g., ["CTA visible on scroll after 50% page height", "Size selection completed in under 2 clicks with visual confirmation"])

Examples of GOOD vs BAD:
BAD: "Improve mobile responsiveness" (generic)
GOOD: "Fix overlapping text in mobile header that covers the logo" (specific to what you see)

BAD: "Better color scheme" (generic)
GOOD: "Increase contrast between white text and light blue background in hero section" (specific to screenshot)

BAD: "Improve navigation" (generic)
GOOD: "Make navigation menu items larger and add hover states as they're too small to click easily" (specific to screenshot)"""


def serialize_context(context: Optional[Dict[str, Any]]) -> str:
    """Stable JSON rendering of the user context (sorted keys, 2-space indent)."""
    return json.dumps(context or {}, indent=2, sort_keys=True, ensure_ascii=False, default=str)


def build_design_prompt(context: Optional[Dict[str, Any]], prefix: str = "") -> str:
    """
    Generate the full design analysis prompt.

    Args:
        context: Free-form key/value context (industry, screen purpose,
                 optimization goal, free-text expectation, ...)
        prefix: Static text from configuration placed before everything else

    Returns:
        Complete prompt string asking for exactly 7 ranked recommendations.
    """
    return f"""{prefix}

Context:
{serialize_context(context)}

You are analyzing a REAL website screenshot. Look at the actual visual elements, layout, colors, typography, and user interface in the provided image(s).

CRITICAL: Base your recommendations on what you ACTUALLY SEE in the screenshot, not generic advice.

MANDATORY: You MUST reference specific visual elements from the screenshot in your recommendations. If you cannot see the screenshot clearly, say so in your summary.

Analyze the specific visual elements you observe:
- What does the hero section look like?
- How is the navigation structured?
- What colors and typography are used?
- Are there any obvious usability issues?
- What specific UI elements need improvement?

Return ONLY JSON with exactly:
{{
  "summary": "max 25 words",
  "recommendations_all": [
    {RECOMMENDATION_SCHEMA}
  ]
}}

{SPECIFICITY_GUIDE}

Hard constraints:
- recommendations_all has EXACTLY {RECOMMENDATION_COUNT} items.
- Every item has every field shown above; list fields are arrays of strings.
- Base EVERY recommendation on what you actually see in the provided screenshot(s).
- Be SPECIFIC about visual elements, colors, layout issues you observe in the image.
- Rank highest priority first. {PRIORITY_RULE}
- Be SPECIFIC and ACTIONABLE. Give concrete, implementable changes with exact UI elements, components, or features to modify.
- JSON only. No code fences. No extra keys.
"""


def build_replacement_prompt(
    context: Optional[Dict[str, Any]],
    existing_titles: Iterable[str],
    prefix: str = "",
) -> str:
    """
    Generate a prompt asking for exactly one new recommendation.

    Args:
        context: Context map of the original analysis
        existing_titles: Titles of the recommendations still active, which the
                         new recommendation must not repeat or overlap with
        prefix: Static text from configuration

    Returns:
        Prompt string asking for {"recommendation": {...}}
    """
    avoid = "\n".join(f"- {title}" for title in existing_titles if title) or "- (none)"
    return f"""{prefix}

Context:
{serialize_context(context)}

You are reviewing the same website screenshot as before. The user rejected one of your design recommendations. Suggest ONE new recommendation based on what you actually see in the screenshot(s).

It MUST NOT repeat or overlap with any of these existing recommendations:
{avoid}

Return ONLY JSON with exactly:
{{
  "recommendation": {RECOMMENDATION_SCHEMA}
}}

{SPECIFICITY_GUIDE}

Hard constraints:
- Exactly ONE recommendation.
- Every field shown above is present; list fields are arrays of strings.
- {PRIORITY_RULE}
- JSON only. No code fences. No extra keys.
"""
