"""Short factual statements derived from provider results, stored as memories."""

import re
from typing import List

from casual_creator.actions.models import BlogProfile, HashtagSearchResult, InstagramProfile

_CONTACT_PATTERNS = [
    re.compile(r"📞\s*[\d\s+-]+"),
    re.compile(r"📨\s*\S+@\S+"),
    re.compile(r"\S+@\S+\.\w+"),
    re.compile(r"https?://\S+"),
    re.compile(r"www\.\S+"),
]
_DECORATIONS = re.compile(r"[⭐👉]+")

SAMPLE_COUNT = 3
SAMPLE_MAX_CHARS = 200
SAMPLE_MIN_CHARS = 20


def sanitize_post_text(text: str) -> str:
    """Strip contact details, links and bullet decorations from a caption sample."""
    clean = text
    for pattern in _CONTACT_PATTERNS:
        clean = pattern.sub("", clean)
    clean = _DECORATIONS.sub("", clean).split("|")[0].strip()
    clean = re.sub(r"\s+", " ", clean)
    if len(clean) > SAMPLE_MAX_CHARS:
        clean = clean[:SAMPLE_MAX_CHARS] + "..."
    return clean


def instagram_facts(profile: InstagramProfile) -> List[str]:
    username = profile.username
    samples = [sanitize_post_text(text) for text in profile.post_texts[:SAMPLE_COUNT]]
    samples = [sample for sample in samples if len(sample) > SAMPLE_MIN_CHARS]

    if samples:
        style = f"Content style samples for {username}: {' | '.join(samples)}"
    else:
        style = f"Content style for {username}: {', '.join(profile.top_hashtags[:3])} focused content"

    similar = ", ".join(
        f"{account.username} ({account.followers} followers)" for account in profile.similar_accounts
    )

    facts = [
        f"Instagram profile analysis for {username}: {profile.followers} followers, "
        f"{profile.engagement_rate:.2f}% engagement rate",
        f"Top hashtags for {username}: {', '.join(profile.top_hashtags)}" if profile.top_hashtags else "",
        style,
        f"Similar accounts to {username}: {similar}" if similar else "",
    ]
    return [fact for fact in facts if fact]


def hashtag_facts(result: HashtagSearchResult) -> List[str]:
    hashtag = result.hashtag
    top_posts = result.posts[:5]

    facts = [
        f"Instagram hashtag search for #{hashtag}: Found {result.total_posts} trending posts "
        f"with high engagement",
    ]
    if top_posts:
        facts.append(
            f"Top content creators for #{hashtag}: "
            f"{', '.join(post.username for post in top_posts)} are creating popular content"
        )
        facts.append(
            f"Popular post examples for #{hashtag}: "
            f"{', '.join(f'{post.username} ({post.like_count} likes)' for post in top_posts)}"
        )
    else:
        facts.append(f"Hashtag #{hashtag} content analyzed")
    return facts


def blog_facts(profile: BlogProfile) -> List[str]:
    facts = [
        f"Blog writing style: {profile.writing_style}, average post length: {profile.average_post_length}",
        f"Blog content themes: {', '.join(profile.content_themes)}" if profile.content_themes else "",
        f"Blog tone characteristics: {', '.join(profile.tone_keywords)}" if profile.tone_keywords else "",
        f"Blog target audience: {profile.target_audience or 'not specified'}",
    ]
    return [fact for fact in facts if fact]
