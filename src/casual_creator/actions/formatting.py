"""Markdown summaries of action results for the generation prompt."""

from casual_creator.actions.models import BlogProfile, HashtagSearchResult, InstagramProfile

_MEDIA_TYPES = {1: "photos", 2: "videos", 8: "carousels"}


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def format_instagram_analysis(analysis: InstagramProfile, cached: bool = False) -> str:
    cache_note = " (from recent analysis)" if cached else ""
    lines = [
        f"**Instagram Analysis for @{analysis.username}**{cache_note}",
        "",
        "**Audience & Reach:**",
        f"- {analysis.followers:,} followers",
        f"- {analysis.following:,} following",
        f"- {analysis.posts:,} posts",
        "",
        "**Engagement:**",
        f"- {analysis.engagement_rate:.2f}% engagement rate",
        f"- {round(analysis.avg_likes):,} avg likes per post",
        f"- {round(analysis.avg_comments):,} avg comments per post",
    ]

    if analysis.top_hashtags:
        lines += ["", "**Top Hashtags:**", " - ".join(f"#{tag}" for tag in analysis.top_hashtags[:5])]
    if analysis.post_texts:
        lines += ["", "**Content Style:**"]
        lines += [f'"{_truncate(text, 100)}"' for text in analysis.post_texts[:2]]
    if analysis.similar_accounts:
        lines += [
            "",
            "**Similar Accounts:**",
            " - ".join(
                f"@{account.username} ({account.followers:,} followers)"
                for account in analysis.similar_accounts[:3]
            ),
        ]
    if analysis.biography:
        lines += ["", f"**Bio:** {analysis.biography}"]

    return "\n".join(lines)


def format_hashtag_results(result: HashtagSearchResult, cached: bool = False) -> str:
    if not result.posts:
        return "No posts were found for this hashtag."

    cache_note = " (from recent search)" if cached else ""
    top_posts = result.posts[:8]
    lines = [f"**Hashtag Content Ideas: #{result.hashtag}**{cache_note}", "", "**Top Performing Posts:**"]

    for index, post in enumerate(top_posts, start=1):
        caption = _truncate(post.caption, 80) if post.caption else "No caption"
        lines += [
            f"{index}. @{post.username} ({post.engagement:,} total engagement)",
            f'   "{caption}"',
            f"   {post.like_count:,} likes, {post.comment_count:,} comments",
        ]

    media = sorted({_MEDIA_TYPES.get(post.media_type, "carousels") for post in top_posts})
    creators = list(dict.fromkeys(post.username for post in top_posts))
    lines += [
        "",
        "**Patterns:**",
        f"- Engagement leaders: {', '.join(f'@{name}' for name in creators[:3])}",
        f"- Content variety: {' and '.join(media)}",
    ]
    return "\n".join(lines)


def format_blog_analysis(analysis: BlogProfile, cached: bool = False) -> str:
    cache_note = " (from recent analysis)" if cached else ""
    lines = [
        f"**Blog Content Analysis**{cache_note}",
        "",
        "**Writing Style & Tone:**",
        f"- Writing style: {analysis.writing_style}",
        f"- Brand voice: {analysis.brand_voice}",
        f"- Average post length: {analysis.average_post_length}",
        "",
        "**Content Insights:**",
        f"- Main themes: {', '.join(analysis.content_themes) or 'none identified'}",
        f"- Common topics: {', '.join(analysis.common_topics[:5]) or 'none identified'}",
        f"- Tone keywords: {', '.join(analysis.tone_keywords[:5]) or 'none identified'}",
        "",
        f"- Target audience: {analysis.target_audience or 'Not clearly defined'}",
    ]
    if analysis.posting_pattern:
        lines.append(f"- Content pattern: {analysis.posting_pattern}")
    lines.append(f"\nAnalyzed {len(analysis.analyzed_urls)} blog post(s).")
    return "\n".join(lines)
