"""
External actions: web search, Instagram profile and hashtag analysis, and
blog writing-style analysis, dispatched from a classifier decision bundle.
"""

from casual_creator.actions.blog import BlogAnalyzer, normalize_url
from casual_creator.actions.facts import blog_facts, hashtag_facts, instagram_facts, sanitize_post_text
from casual_creator.actions.formatting import (
    format_blog_analysis,
    format_hashtag_results,
    format_instagram_analysis,
)
from casual_creator.actions.models import (
    ActionContext,
    BlogOutcome,
    BlogProfile,
    HashtagOutcome,
    HashtagPost,
    HashtagSearchResult,
    InstagramOutcome,
    InstagramProfile,
    SearchOutcome,
    SearchResult,
    SimilarAccount,
)
from casual_creator.actions.providers import (
    BlogContentAnalyzer,
    HashtagSearchProvider,
    InstagramProfileProvider,
    SearchProvider,
)
from casual_creator.actions.router import SEARCH_CONTEXT_PROMPT, ExternalActionRouter
from casual_creator.actions.search import GrokSearchProvider, PerplexitySearchProvider

__all__ = [
    "BlogAnalyzer",
    "normalize_url",
    "blog_facts",
    "hashtag_facts",
    "instagram_facts",
    "sanitize_post_text",
    "format_blog_analysis",
    "format_hashtag_results",
    "format_instagram_analysis",
    "ActionContext",
    "BlogOutcome",
    "BlogProfile",
    "HashtagOutcome",
    "HashtagPost",
    "HashtagSearchResult",
    "InstagramOutcome",
    "InstagramProfile",
    "SearchOutcome",
    "SearchResult",
    "SimilarAccount",
    "BlogContentAnalyzer",
    "HashtagSearchProvider",
    "InstagramProfileProvider",
    "SearchProvider",
    "SEARCH_CONTEXT_PROMPT",
    "ExternalActionRouter",
    "GrokSearchProvider",
    "PerplexitySearchProvider",
]
