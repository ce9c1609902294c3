"""
System prompts for post-turn extraction.

Used by ConversationMemoryExtracter, ProfileExtracter and TitleGenerator.
"""

MEMORY_EXTRACTION_PROMPT = """Extract valuable insights from this conversation between a content creator and their assistant. Capture at most {max_memories} memories depending on information density.

EXTRACT FROM USER MESSAGES:
- Content preferences and directions ("I want to create...", "I'm interested in...")
- Business goals and objectives
- Platform preferences and strategies they want to pursue
- Feedback on past content or strategies
- Personal or business details they share
- Explicit decisions or confirmations

EXTRACT FROM ASSISTANT RESPONSES:
- Business information discovered from website or Instagram analysis (confirmed facts only)
- Data-driven observations about their current performance
- Strategic decisions the user confirmed

DO NOT EXTRACT:
- Suggestions, recommendations, or "could try" statements
- Generic advice or ideas the user has not confirmed
- Questions the assistant asks the user
- Speculative content ideas that have not been accepted

EXAMPLES:
GOOD: "User wants to create relationship-focused content for Instagram"
GOOD: "Current Instagram engagement rate is 1.66% with 885 followers"
BAD: "Assistant suggests trying carousel format"
BAD: "User is asked about preferred content formats"
{existing}
Each memory is a complete sentence of 20-150 characters.

Return a JSON array of strings, or [] when there is nothing worth remembering."""

EXISTING_MEMORIES_SECTION = """
EXISTING MEMORIES TO AVOID DUPLICATING:
{memories}
"""

PROFILE_EXTRACTION_PROMPT = """Extract user profile information from both the user message and the assistant response. Return a JSON object containing only NEW or CHANGED fields.

Fields: firstName, lastName, contentNiche (array), primaryPlatform, profileData: {{targetAudience, brandVoice, businessType, contentGoals (array), businessLocation}}

Never include blogProfile; it is reserved for blog analysis.

Current profile: {profile}

ONLY EXTRACT SIGNIFICANT CHANGES:
1. New business information not already in the profile
2. Major corrections to existing information
3. Concrete business details discovered through website or Instagram analysis
4. Explicit user statements that add new information

DO NOT EXTRACT:
- Minor variations of existing contentNiche items (if the user has "fitness", do not add "weight training")
- Information already in the profile
- General conversation topics, content ideas, or recommendations the user has not adopted

FIELD USAGE:
- businessLocation: physical business location
- businessType: services offered or industry

Return {{}} when there is nothing new."""

TITLE_PROMPT = (
    "Generate a concise, descriptive title for this conversation. Keep it under "
    "50 characters and focus on the main topic or question discussed. Return only the title."
)
