from analyzer.prompts import (
    RECOMMENDATION_COUNT,
    build_design_prompt,
    build_replacement_prompt,
)


def test_prompt_is_deterministic():
    context = {"industry": "ecommerce", "optimize_for": "conversion"}
    assert build_design_prompt(context, "PREFIX") == build_design_prompt(dict(context), "PREFIX")


def test_prompt_ignores_context_key_order():
    first = {"industry": "ecommerce", "screen_purpose": "product page"}
    second = {"screen_purpose": "product page", "industry": "ecommerce"}
    assert build_design_prompt(first) == build_design_prompt(second)


def test_prompt_contents():
    prompt = build_design_prompt({"industry": "ecommerce"}, prefix="You are a senior designer.")

    assert prompt.startswith("You are a senior designer.")
    assert '"industry": "ecommerce"' in prompt
    assert f"EXACTLY {RECOMMENDATION_COUNT} items" in prompt
    assert "high=3, medium=2, low=1" in prompt
    assert "high=0.3, medium=0.2, low=0.1" in prompt
    assert "Sort DESC by score" in prompt
    for field in (
        "summary",
        "recommendations_all",
        "category",
        "why_it_matters",
        "what_to_change",
        "acceptance_criteria",
        "analytics",
        "anchors",
    ):
        assert f'"{field}"' in prompt
    assert "BAD:" in prompt and "GOOD:" in prompt


def test_prompt_with_empty_context():
    prompt = build_design_prompt(None)
    assert "Context:\n{}" in prompt


def test_replacement_prompt_lists_existing_titles():
    prompt = build_replacement_prompt(
        {"industry": "saas"}, ["Add sticky CTA", "Shorten signup form"]
    )

    assert "- Add sticky CTA" in prompt
    assert "- Shorten signup form" in prompt
    assert '"recommendation"' in prompt
    assert "Exactly ONE recommendation" in prompt
    assert build_replacement_prompt({"industry": "saas"}, ["Add sticky CTA", "Shorten signup form"]) == prompt
