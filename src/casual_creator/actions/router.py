"""
External action router.

Dispatches the triggered decisions of a bundle to their providers, one
action type after another. Every action checks its cache first; fresh
results are written into the profile extension map (under the user's write
lock) and distilled into a few factual memories. A failing action is logged
and omitted from the turn's context; it never aborts the turn.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from casual_creator.actions.facts import blog_facts, hashtag_facts, instagram_facts
from casual_creator.actions.models import (
    ActionContext,
    BlogOutcome,
    BlogProfile,
    HashtagOutcome,
    HashtagSearchResult,
    InstagramOutcome,
    InstagramProfile,
    SearchOutcome,
)
from casual_creator.actions.providers import (
    BlogContentAnalyzer,
    HashtagSearchProvider,
    InstagramProfileProvider,
    SearchProvider,
)
from casual_creator.cache import CacheRegistry, build_cache_key
from casual_creator.config import EngineSettings
from casual_creator.errors import ProviderNotConfiguredError
from casual_creator.intent.models import (
    BlogAnalysisDecision,
    DecisionBundle,
    InstagramAnalysisDecision,
    InstagramHashtagDecision,
    WebSearchDecision,
)
from casual_creator.intent.validation import classify_instagram_ownership
from casual_creator.memory import MemoryService
from casual_creator.models import ConversationMessage, MemorySource, UserProfile
from casual_creator.storage import ProfileStore
from casual_creator.utils import UserLockRegistry, with_retry

logger = logging.getLogger(__name__)

SEARCH_CONTEXT_PROMPT = (
    "Provide current, relevant information that would help a social media content strategist "
    "give accurate advice. Focus on recent trends, current events, or factual data mentioned "
    "in the query."
)


def _handle_key(handle: str) -> str:
    return handle.strip().lstrip("@#").lower()


def _is_fresh(cached_at: Optional[datetime], ttl_seconds: float, now: datetime) -> bool:
    if cached_at is None:
        return False
    if cached_at.tzinfo is not None:
        cached_at = cached_at.replace(tzinfo=None)
    return now - cached_at < timedelta(seconds=ttl_seconds)


class ExternalActionRouter:
    """
    Runs the external actions a decision bundle asks for.

    Args:
        profile_store: Where provider results are persisted
        memory_service: Where derived factual statements are upserted
        search_providers: Search providers keyed by service name
            ("perplexity", "grok")
        instagram_provider: Instagram profile analysis provider
        hashtag_provider: Instagram hashtag search provider
        blog_analyzer: Blog writing-style analyzer
        caches: Provider caches (one per action type)
        settings: Engine settings (gates, thresholds, limits)
        locks: Per-user write locks shared with post-processing
    """

    def __init__(
        self,
        profile_store: ProfileStore,
        memory_service: MemoryService,
        search_providers: Optional[Dict[str, SearchProvider]] = None,
        instagram_provider: Optional[InstagramProfileProvider] = None,
        hashtag_provider: Optional[HashtagSearchProvider] = None,
        blog_analyzer: Optional[BlogContentAnalyzer] = None,
        caches: Optional[CacheRegistry] = None,
        settings: Optional[EngineSettings] = None,
        locks: Optional[UserLockRegistry] = None,
    ):
        self.profile_store = profile_store
        self.memory_service = memory_service
        self.search_providers = dict(search_providers or {})
        self.instagram_provider = instagram_provider
        self.hashtag_provider = hashtag_provider
        self.blog_analyzer = blog_analyzer
        self.settings = settings or EngineSettings()
        self.caches = caches or CacheRegistry(self.settings)
        self.locks = locks or UserLockRegistry()

    async def _call(self, operation, description: str):
        return await with_retry(
            operation,
            attempts=self.settings.PROVIDER_RETRY_ATTEMPTS,
            base_delay=self.settings.PROVIDER_RETRY_DELAY,
            description=description,
        )

    async def _remember_facts(
        self,
        user_id: str,
        facts: List[str],
        source: MemorySource,
        threshold: float,
        metadata: Dict[str, Any],
    ) -> int:
        stored = 0
        for fact in facts:
            try:
                result = await self.memory_service.remember(
                    user_id,
                    fact,
                    metadata={"source": source, **metadata},
                    similarity_threshold=threshold,
                )
            except Exception as e:
                logger.error(f"Failed to store {source} memory for {user_id}: {e}")
                continue
            if result is not None:
                stored += 1
        logger.info(f"Stored {stored}/{len(facts)} {source} memories for {user_id}")
        return stored

    def _current_profile(self, user_id: str) -> UserProfile:
        return self.profile_store.get_profile(user_id) or UserProfile(user_id=user_id)

    async def dispatch(
        self,
        user_id: str,
        bundle: DecisionBundle,
        messages: Sequence[ConversationMessage] = (),
    ) -> ActionContext:
        """
        Run every triggered action in order: search, Instagram, hashtag, blog.

        Returns:
            ActionContext with one outcome per attempted action
        """
        context = ActionContext()
        if bundle.is_fallback:
            return context

        if bundle.web_search is not None:
            try:
                context.search = await self.run_web_search(bundle.web_search, messages)
                if context.search is not None:
                    context.performed.append("web_search")
            except Exception as e:
                logger.warning(f"Web search omitted: {e}")
                context.omitted["web_search"] = str(e)

        if bundle.instagram_analysis is not None:
            decision = bundle.instagram_analysis
            try:
                context.instagram = await self.analyze_instagram(user_id, decision)
                context.performed.append("instagram_analysis")
            except Exception as e:
                logger.warning(f"Instagram analysis of @{decision.username} omitted: {e}")
                context.instagram = InstagramOutcome(
                    username=decision.username,
                    is_own_profile=bool(decision.is_own_profile),
                    error=str(e),
                )
                context.omitted["instagram_analysis"] = str(e)

        if bundle.instagram_hashtag_search is not None:
            decision = bundle.instagram_hashtag_search
            try:
                context.hashtag = await self.search_hashtag(user_id, decision)
                context.performed.append("instagram_hashtag_search")
            except Exception as e:
                logger.warning(f"Hashtag search for #{decision.hashtag} omitted: {e}")
                context.hashtag = HashtagOutcome(hashtag=decision.hashtag, error=str(e))
                context.omitted["instagram_hashtag_search"] = str(e)

        if bundle.blog_analysis is not None:
            decision = bundle.blog_analysis
            try:
                context.blog = await self.analyze_blog(user_id, decision)
                context.performed.append("blog_analysis")
            except Exception as e:
                logger.warning(f"Blog analysis omitted: {e}")
                context.blog = BlogOutcome(urls=list(decision.urls), error=str(e))
                context.omitted["blog_analysis"] = str(e)

        return context

    async def run_web_search(
        self, decision: WebSearchDecision, messages: Sequence[ConversationMessage] = ()
    ) -> Optional[SearchOutcome]:
        """
        Search when the decision clears the confidence gate.

        Returns:
            SearchOutcome, or None when gated out or there is nothing to search
        """
        gate = self.settings.WEB_SEARCH_CONFIDENCE_GATE
        if decision.confidence < gate:
            logger.info(f"Web search skipped: confidence {decision.confidence:.2f} below {gate}")
            return None

        query = decision.refined_query.strip()
        if not query:
            last_user = next((m for m in reversed(list(messages)) if m.role == "user"), None)
            query = last_user.content.strip() if last_user else ""
        if not query:
            logger.info("Web search skipped: no query and no user message to fall back on")
            return None

        service = decision.search_service
        if service not in self.search_providers:
            service = "perplexity"
        provider = self.search_providers.get(service)
        if provider is None:
            raise ProviderNotConfiguredError(service)

        handles = list(decision.social_handles) if service == "grok" else []
        key = build_cache_key(
            query,
            recency=decision.recency,
            domains=decision.domains,
            system_prompt=SEARCH_CONTEXT_PROMPT,
            extra={"handles": sorted(handles)} if handles else None,
        )
        cache = self.caches.get(service)
        entry = cache.get_entry(key)
        if entry is not None:
            logger.info(f"Web search cache hit ({service}): {query}")
            return SearchOutcome(
                query=query,
                service=service,
                content=entry.payload,
                citations=list(entry.citations),
                cached=True,
            )

        result = await self._call(
            lambda: provider.search(
                query,
                system_prompt=SEARCH_CONTEXT_PROMPT,
                recency=decision.recency,
                domains=decision.domains or None,
                social_handles=handles or None,
            ),
            description=f"{service} search",
        )
        cache.set(key, result.content, citations=result.citations)
        logger.info(f"Web search via {service} returned {len(result.citations)} citations")
        return SearchOutcome(
            query=query, service=service, content=result.content, citations=list(result.citations)
        )

    async def analyze_instagram(
        self, user_id: str, decision: InstagramAnalysisDecision
    ) -> InstagramOutcome:
        """
        Analyze an Instagram account and file it as the user's own or a competitor's.

        The first analyzed account defaults to the user's own; an account
        stored as a competitor is migrated once it is confirmed as own.
        """
        username = _handle_key(decision.username)
        cache = self.caches.get("instagram")
        key = f"{user_id}|{username}"
        profile = self._current_profile(user_id)

        cached = cache.get(key) or self._stored_instagram(profile, username, cache.ttl_seconds)
        if cached is not None:
            logger.info(f"Instagram analysis cache hit for @{username}")
            is_own = await self._migrate_if_own(user_id, username, cached)
            return InstagramOutcome(username=username, is_own_profile=is_own, analysis=cached, cached=True)

        if self.instagram_provider is None:
            raise ProviderNotConfiguredError("instagram")

        analysis = await self._call(
            lambda: self.instagram_provider.analyze_profile(username),
            description=f"Instagram analysis of @{username}",
        )
        cache.set(key, analysis)

        async with self.locks.lock_for(user_id):
            profile = self._current_profile(user_id)
            is_own = classify_instagram_ownership(username, profile)
            self.profile_store.merge_profile(
                user_id, {"profile_data": self._instagram_patch(profile, username, analysis, is_own)}
            )

        logger.info(
            f"Stored Instagram analysis for @{username} as {'own profile' if is_own else 'competitor'}"
        )
        await self._remember_facts(
            user_id,
            instagram_facts(analysis),
            source="instagram_analysis",
            threshold=self.settings.PROFILE_ANALYSIS_MEMORY_THRESHOLD,
            metadata={"username": username, "analysis_date": analysis.cached_at.isoformat()},
        )
        return InstagramOutcome(username=username, is_own_profile=is_own, analysis=analysis)

    async def _migrate_if_own(self, user_id: str, username: str, analysis: InstagramProfile) -> bool:
        """Move a competitor entry confirmed as the user's own handle; return ownership."""
        async with self.locks.lock_for(user_id):
            profile = self._current_profile(user_id)
            is_own = classify_instagram_ownership(username, profile)
            competitors = profile.profile_data.get("competitor_analyses") or {}
            if is_own and username in competitors:
                self.profile_store.merge_profile(
                    user_id, {"profile_data": self._instagram_patch(profile, username, analysis, True)}
                )
        return is_own

    def _stored_instagram(
        self, profile: UserProfile, username: str, ttl_seconds: float
    ) -> Optional[InstagramProfile]:
        data = profile.profile_data
        candidates = []
        own = data.get("instagram_profile")
        if isinstance(own, dict) and _handle_key(own.get("username", "")) == username:
            candidates.append(own)
        competitor = (data.get("competitor_analyses") or {}).get(username)
        if isinstance(competitor, dict):
            candidates.append(competitor)

        now = datetime.now()
        for stored in candidates:
            analysis = InstagramProfile.model_validate(stored)
            if _is_fresh(analysis.cached_at, ttl_seconds, now):
                return analysis
        return None

    @staticmethod
    def _instagram_patch(
        profile: UserProfile, username: str, analysis: InstagramProfile, is_own: bool
    ) -> Dict[str, Any]:
        competitors = dict(profile.profile_data.get("competitor_analyses") or {})
        dumped = analysis.model_dump(mode="json")

        if is_own:
            patch: Dict[str, Any] = {
                "instagram_profile": dumped,
                "own_instagram_username": username,
            }
            if username in competitors:
                del competitors[username]
                patch["competitor_analyses"] = competitors
                logger.info(f"Migrated @{username} from competitor analyses to own profile")
            return patch

        competitors[username] = dumped
        return {"competitor_analyses": competitors}

    async def search_hashtag(
        self, user_id: str, decision: InstagramHashtagDecision
    ) -> HashtagOutcome:
        """Search a hashtag; the per-user history keeps the most recent searches only."""
        hashtag = _handle_key(decision.hashtag)
        cache = self.caches.get("hashtag")
        key = f"{user_id}|{hashtag}"

        cached = cache.get(key)
        if cached is None:
            stored = (self._current_profile(user_id).profile_data.get("hashtag_searches") or {}).get(hashtag)
            if isinstance(stored, dict):
                candidate = HashtagSearchResult.model_validate(stored)
                if _is_fresh(candidate.cached_at, cache.ttl_seconds, datetime.now()):
                    cached = candidate
        if cached is not None:
            logger.info(f"Hashtag search cache hit for #{hashtag}")
            return HashtagOutcome(hashtag=hashtag, result=cached, cached=True)

        if self.hashtag_provider is None:
            raise ProviderNotConfiguredError("hashtag")

        result = await self._call(
            lambda: self.hashtag_provider.search_hashtag(hashtag, self.settings.HASHTAG_POST_LIMIT),
            description=f"hashtag search for #{hashtag}",
        )
        cache.set(key, result)

        async with self.locks.lock_for(user_id):
            profile = self._current_profile(user_id)
            searches = self._capped_searches(
                profile.profile_data.get("hashtag_searches") or {}, hashtag
            )
            searches[hashtag] = result.model_dump(mode="json")
            self.profile_store.merge_profile(user_id, {"profile_data": {"hashtag_searches": searches}})

        await self._remember_facts(
            user_id,
            hashtag_facts(result),
            source="hashtag_search",
            threshold=self.settings.HASHTAG_MEMORY_THRESHOLD,
            metadata={"hashtag": hashtag, "search_date": result.cached_at.isoformat()},
        )
        return HashtagOutcome(hashtag=hashtag, result=result)

    def _capped_searches(self, existing: Dict[str, Any], hashtag: str) -> Dict[str, Any]:
        """Copy of the search history with room for ``hashtag``; the oldest entry is evicted."""
        searches = dict(existing)
        limit = self.settings.HASHTAG_HISTORY_LIMIT
        while len(searches) >= limit and hashtag not in searches:
            oldest = min(searches, key=lambda name: str(searches[name].get("cached_at", "")))
            del searches[oldest]
            logger.debug(f"Evicted oldest hashtag search #{oldest}")
        return searches

    async def analyze_blog(self, user_id: str, decision: BlogAnalysisDecision) -> BlogOutcome:
        """
        Analyze the user's blog writing style.

        A fresh analysis that covers any of the requested URLs is reused.
        """
        urls = list(decision.urls)[: self.settings.BLOG_MAX_URLS]
        cache = self.caches.get("blog")

        cached = cache.get(user_id)
        if cached is None:
            stored = self._current_profile(user_id).profile_data.get("blog_profile")
            if isinstance(stored, dict):
                candidate = BlogProfile.model_validate(stored)
                if _is_fresh(candidate.cached_at, cache.ttl_seconds, datetime.now()):
                    cached = candidate
        if cached is not None and set(urls) & set(cached.analyzed_urls):
            logger.info("Blog analysis cache hit")
            return BlogOutcome(urls=urls, analysis=cached, cached=True)

        if self.blog_analyzer is None:
            raise ProviderNotConfiguredError("blog")

        analysis = await self.blog_analyzer.analyze(urls)
        cache.set(user_id, analysis)

        async with self.locks.lock_for(user_id):
            self.profile_store.merge_profile(
                user_id, {"profile_data": {"blog_profile": analysis.model_dump(mode="json")}}
            )

        await self._remember_facts(
            user_id,
            blog_facts(analysis),
            source="blog_analysis",
            threshold=self.settings.BLOG_MEMORY_THRESHOLD,
            metadata={"urls": urls, "analysis_date": analysis.cached_at.isoformat()},
        )
        return BlogOutcome(urls=urls, analysis=analysis)
