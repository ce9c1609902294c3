import logging

from casual_llm import LLMProvider, SystemMessage, UserMessage

from casual_creator.extractors.prompts import PROFILE_EXTRACTION_PROMPT
from casual_creator.intent.normalizer import normalize_profile_patch
from casual_creator.intent.prompts import dump_profile
from casual_creator.models import UserProfile
from casual_creator.profile_merge import ProfilePatch, has_updates
from casual_creator.utils.json_parsing import parse_json_object

logger = logging.getLogger(__name__)


class ProfileExtracter:
    """
    Extracts new or changed profile fields from one exchange.

    The returned patch uses profile field names (extension values nested
    under ``profile_data``) and is empty when nothing new was found. Blog
    analysis results are never accepted from extraction.
    """

    def __init__(self, llm_provider: LLMProvider):
        self.llm_provider = llm_provider

    async def extract(
        self, user_message: str, assistant_response: str, profile: UserProfile
    ) -> ProfilePatch:
        llm_messages = [
            SystemMessage(content=PROFILE_EXTRACTION_PROMPT.format(profile=dump_profile(profile))),
            UserMessage(
                content=(
                    f"User message: {user_message}\n\n"
                    f"Assistant response: {assistant_response}\n\n"
                    "Extract new or changed business info from both sources."
                )
            ),
        ]

        try:
            response = await self.llm_provider.chat(
                messages=llm_messages, response_format="json", temperature=0.1, max_tokens=1000
            )
            raw = parse_json_object(response.content or "")
        except ValueError as e:
            logger.warning(f"Failed to parse profile extraction JSON: {e}")
            return {}
        except Exception as e:
            logger.error(f"Profile extraction LLM failed: {e}")
            return {}

        patch = normalize_profile_patch(raw)
        if not has_updates(patch):
            return {}

        logger.info(f"Extracted profile fields for {profile.user_id}: {sorted(patch)}")
        return patch
