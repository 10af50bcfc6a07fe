"""Instruction composition for content generation.

Deterministic string builders; they never raise, including for unmapped
length tags (the medium word range is used as display text).
"""

from content_studio.domain.pricing import word_range

CONTENT_TYPES: dict[str, str] = {
    "blog-post": "Blog Post",
    "social-media": "Social Media Post",
    "email": "Email",
    "product-description": "Product Description",
    "article": "Article",
    "story": "Story",
}

TONES: dict[str, str] = {
    "professional": "Professional",
    "casual": "Casual",
    "friendly": "Friendly",
    "formal": "Formal",
    "creative": "Creative",
    "humorous": "Humorous",
}

SYSTEM_PROMPT: str = (
    "You are a professional content writer. Generate high-quality, engaging "
    "content based on the user's requirements."
)

DEMO_SYSTEM_PROMPT: str = (
    "You are a professional content writer. Generate high-quality, engaging "
    "content based on the user's requirements. Keep the content concise and engaging."
)

_CLOSING_PARAGRAPH: str = (
    "Make sure the content is engaging, well-structured, and appropriate for "
    "the specified tone and length."
)


def compose_instruction(
    content_type: str,
    topic: str,
    tone: str,
    length: str,
    additional_context: str | None = None,
) -> str:
    """Build the user instruction for a metered generation.

    Args:
        content_type: e.g. "blog-post" (unknown values are embedded as-is)
        topic: Subject of the content, quoted in the instruction
        tone: Tone descriptor, e.g. "professional"
        length: Length tag; unmapped tags read as the medium word range
        additional_context: Optional extra guidance, appended as its own paragraph

    Returns:
        Instruction string
    """
    instruction = (
        f'Create a {tone} {content_type} about "{topic}". '
        f"The content should be {word_range(length)}."
    )

    if additional_context and additional_context.strip():
        instruction += f"\n\nAdditional context: {additional_context.strip()}"

    instruction += f"\n\n{_CLOSING_PARAGRAPH}"
    return instruction


def compose_demo_instruction(content_type: str, topic: str, tone: str) -> str:
    """Build the short instruction used by the unmetered demo endpoint."""
    return (
        f'Create a {content_type} about "{topic}" with a {tone} tone. '
        "The content should be engaging, well-structured, and appropriate for "
        "the specified content type and tone. Keep it concise and impactful."
    )
