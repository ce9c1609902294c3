"""Phase-specific assistant instructions and discovery questions."""

from typing import Iterable, List

from casual_creator.workflow.phases import (
    BRAND_VOICE,
    CONTENT_DRAFTING,
    DEVELOPING_IDEAS,
    DISCOVERY,
    FINALIZATION,
    IDEA_GENERATION,
)

PHASE_GUIDANCE = {
    DISCOVERY: """Focus on getting to know the user personally:
- Ask for their name if not provided
- Discover their content niche and expertise areas through thoughtful questions
- Understand their primary social media platform preferences
- Learn about their target audience and business goals
- If they mention using Instagram, ask for their handle so their profile can be analyzed
- Users can also request analysis of competitor accounts by mentioning specific handles
DO NOT suggest content ideas yet. Focus on discovery and building rapport.""",
    BRAND_VOICE: """Help clarify their brand identity and voice:
- Explore how they want to be perceived by their audience
- Understand their unique value proposition and expertise
- Identify content topics they want to avoid or embrace
- Clarify their brand personality (playful, authoritative, inspirational)
- Ask about successful content they've created before
Still avoid specific content ideas. Focus on the brand foundation.""",
    IDEA_GENERATION: """Start collaborative content ideation:
- Present 2-3 tailored content themes based on their profile
- Give a brief rationale for each suggestion
- Ask which ideas resonate and invite them to modify or reject them
Do not write finished posts or captions yet.""",
    DEVELOPING_IDEAS: """Develop the ideas they've shown interest in:
- Ask about preferred formats (carousel, video, reel, infographic)
- Explore different angles (educational, story-driven, promotional)
- Provide content outlines and key points
- Suggest specific hooks and engagement strategies""",
    CONTENT_DRAFTING: """Create actual content drafts for their approval:
- Write specific captions, scripts, or post content
- Offer style options (long vs short, formal vs casual)
- Ask for feedback and be ready to iterate
- Include calls-to-action tailored to their goals""",
    FINALIZATION: """Help finalize and optimize their content:
- Add platform-specific hashtags and optimization
- Suggest posting times for their platform and audience
- Provide cross-platform adaptation suggestions
- Offer scheduling and batch creation tips""",
}

DEFAULT_GUIDANCE = (
    "Stay in discovery mode and focus on getting to know the user better "
    "through natural conversation."
)

# Keyed by the lower-cased label or alias of a missing field
DISCOVERY_QUESTIONS = {
    "name": "What's your name?",
    "content niche": "What type of content do you create?",
    "primary platform": "Which social media platform do you post on most?",
    "target audience": "Who is your ideal audience?",
    "brand voice": "How would you describe the tone of your brand?",
    "business type": "What kind of business or services do you offer?",
    "content goals": "What do you want your content to achieve?",
}

DEFAULT_SUGGESTED_PROMPTS = ["What's your name?", "What type of content do you create?"]


def phase_guidance(phase_name: str) -> str:
    return PHASE_GUIDANCE.get(phase_name, DEFAULT_GUIDANCE)


def suggested_prompts(missing: Iterable[str], limit: int = 2) -> List[str]:
    """Turn missing-field labels into up to ``limit`` discovery questions."""
    aliases = {"niche": "content niche", "platform": "primary platform", "audience": "target audience"}
    prompts: List[str] = []

    for label in missing:
        key = label.strip().lower()
        key = aliases.get(key, key)
        question = DISCOVERY_QUESTIONS.get(key)
        if question and question not in prompts:
            prompts.append(question)
        if len(prompts) >= limit:
            break

    return prompts
