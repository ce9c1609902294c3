"""
Per-turn conversation pipeline: prompt assembly, streamed generation and
fault-isolated post-processing.
"""

from casual_creator.pipeline.chat import ChatPipeline, ChatTurn
from casual_creator.pipeline.generation import OpenAIChatGenerator, TextGenerator
from casual_creator.pipeline.post_processing import (
    CompletedTurn,
    PostProcessingReport,
    PostProcessor,
    combine_patches,
)
from casual_creator.pipeline.prompt_builder import (
    build_generation_messages,
    build_system_prompt,
    profile_snapshot,
)

__all__ = [
    "ChatPipeline",
    "ChatTurn",
    "OpenAIChatGenerator",
    "TextGenerator",
    "CompletedTurn",
    "PostProcessingReport",
    "PostProcessor",
    "combine_patches",
    "build_generation_messages",
    "build_system_prompt",
    "profile_snapshot",
]
