"""
Prompts for the unified intent classifier.

The system prompt enumerates trigger and non-trigger heuristics for each
decision type and asks for a condensed JSON object that only carries the
decisions that fired.
"""

import json
from datetime import date
from typing import Optional, Sequence

from casual_creator.models import ConversationMessage, UserProfile
from casual_creator.workflow import calculate_profile_completeness, populated_fields

UNIFIED_INTENT_PROMPT = """You are a unified intent classifier for a content-creation assistant. Use semantic understanding to detect user intent across all languages.

Date: {today}

INTENT DETECTION:

1. WEB SEARCH - Need for current information:
- Questions about recent events, prices, status, or trends
- Website or competitor website analysis requests ("read my website", "check this site")
- Fact verification needs
- Do NOT search for greetings, small talk, or questions answerable from the profile
Use "grok" for X/Twitter content and handles, "perplexity" for the general web.

2. INSTAGRAM ANALYSIS - Profile examination:
- "Analyze @username", "check my Instagram", or competitor research
- Distinguish own profile from competitor:
  - Own: "my Instagram", "my profile", or the handle matches the stored own handle
  - Competitor: "competitor", "check @brand", "analyze @other"

3. INSTAGRAM HASHTAG SEARCH - Content inspiration:
- "show me #fitness posts", "get ideas from #marketing", trending content by hashtag

4. BLOG ANALYSIS - Writing style and content strategy:
- ONLY for explicit blog analysis ("analyze my blog", "review my writing style") or explicit blog post URLs
- General website reading is a web search, not blog analysis

5. WORKFLOW PHASE - Where the user is in their journey:
{phase_rules}

6. PROFILE UPDATE - Be conservative:
- Trigger for explicit update requests ("update my profile", "change my business type")
- Or when the user shares concrete NEW information that fills a field marked Missing
- Do NOT trigger for casual chat, acknowledgements, or discussion of content ideas

STRICT VALIDATION RULES:
- Extract usernames without the @ symbol, and only if explicitly mentioned
- Extract hashtags without the # symbol
- Do NOT hallucinate URLs, usernames, or requests that were not mentioned
- When in doubt, do not trigger an action

SEARCH QUERY RULES:
- Website analysis: "site:domain.com" ONLY, with no extra keywords
- X/Twitter content: "site:x.com [topic]" or grok with socialHandles
- General facts: natural language with key terms
- Trends: include time indicators ("latest", "recent")

Return a single JSON object. Only include a key when that decision is triggered, except workflowPhase which is always present:
{{
"webSearch": {{"refinedQuery": "string", "searchService": "perplexity|grok", "recency": "hour|day|week|month|year", "domains": [], "socialHandles": [], "confidence": 0.9}},
"instagramAnalysis": {{"username": "string", "isOwnProfile": true, "confidence": 0.9}},
"instagramHashtagSearch": {{"hashtag": "string", "confidence": 0.9}},
"blogAnalysis": {{"urls": ["url"], "confidence": 0.9}},
"profileUpdate": {{"expectedFields": ["field"], "reason": "string", "confidence": 0.9}},
"workflowPhase": {{"currentPhase": "phase name", "missingFields": ["field"], "suggestedPrompts": ["prompt"], "readyToAdvance": false, "shouldBlockContentGeneration": true, "confidence": 0.9}}
}}

MISSING FIELDS:
- ONLY list a field in "missingFields" if it is marked Missing in the profile status
- NEVER list a field that is marked present
- Only suggest prompts for missing fields"""

PHASE_RULES = """- Discovery & Personalization (0-35%): needs name, content niche, and platform to exit. Block content generation.
- Brand Voice & Positioning (35-55%): understand audience, voice, and business. Block content generation.
- Collaborative Idea Generation (50-60%): content themes and ideas only, no full drafts.
- Developing Chosen Ideas (60-75%): outlines and drafts allowed.
- Content Drafting & Iterative Review (75-90%): needs target audience. Full drafts allowed.
- Finalization & Scheduling (90-100%): needs target audience and brand voice.
Check BOTH the completeness score AND the required fields; a missing required field blocks advancement."""

CLASSIFIER_USER_PROMPT = """{profile_status}

RECENT CONVERSATION:
{conversation}

Analyze this conversation and return the JSON decision object.
- Blog analysis: only with actual http(s) URLs or an explicit blog analysis request
- Instagram analysis: only with an @username mention or an explicit request about an Instagram account
- Do not use stored memories or earlier sessions to infer analysis requests"""


def _status_line(present: bool, label: str, value: str) -> str:
    return f"{'✅' if present else '❌'} {label}: {value if present else 'Missing'}"


def build_profile_status(profile: Optional[UserProfile]) -> str:
    """Render the per-field present/missing status block the classifier reasons over."""
    if profile is None:
        return "CURRENT USER PROFILE STATUS:\n❌ No user profile available - stay in Discovery phase"

    data = profile.profile_data
    present = populated_fields(profile)
    score = calculate_profile_completeness(profile)
    name = " ".join(part for part in (profile.first_name, profile.last_name) if part)
    platforms = ", ".join(profile.primary_platforms) or (profile.primary_platform or "")
    goals = data.get("content_goals") or []
    if isinstance(goals, str):
        goals = [goals]

    lines = [
        "CURRENT USER PROFILE STATUS:",
        f"PROFILE COMPLETENESS SCORE: {score}%",
        "",
        "INDIVIDUAL FIELD STATUS:",
        _status_line("first_name" in present, "Name", name),
        _status_line("content_niche" in present, "Content Niche", ", ".join(profile.content_niche)),
        _status_line("primary_platform" in present, "Primary Platform(s)", platforms),
        _status_line("target_audience" in present, "Target Audience", str(data.get("target_audience", ""))),
        _status_line("brand_voice" in present, "Brand Voice", str(data.get("brand_voice", ""))),
        _status_line("content_goals" in present, "Content Goals", ", ".join(map(str, goals))),
        _status_line("business_type" in present, "Business Type", str(data.get("business_type", ""))),
    ]

    own_handle = data.get("own_instagram_username")
    if own_handle:
        lines.append(f"Own Instagram handle: @{own_handle}")

    return "\n".join(lines)


def build_classifier_system_prompt(today: Optional[date] = None) -> str:
    return UNIFIED_INTENT_PROMPT.format(
        today=(today or date.today()).isoformat(), phase_rules=PHASE_RULES
    )


def build_classifier_user_prompt(
    messages: Sequence[ConversationMessage], profile: Optional[UserProfile]
) -> str:
    conversation = "\n".join(f"{message.role}: {message.content}" for message in messages)
    return CLASSIFIER_USER_PROMPT.format(
        profile_status=build_profile_status(profile), conversation=conversation
    )


def dump_profile(profile: UserProfile) -> str:
    """Compact JSON view of the profile's editable fields."""
    return json.dumps(
        {
            "first_name": profile.first_name,
            "content_niche": profile.content_niche,
            "primary_platform": profile.primary_platform,
            "primary_platforms": profile.primary_platforms,
            "profile_data": {
                key: value
                for key, value in profile.profile_data.items()
                if key in ("target_audience", "brand_voice", "business_type", "content_goals", "business_location")
            },
        },
        ensure_ascii=False,
    )
