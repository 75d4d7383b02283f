"""Prompt templates for the text generation capabilities."""

CHAT_SYSTEM_PROMPT = (
    "You are a helpful WhatsApp assistant. Be concise, friendly, and helpful. "
    "Respond in a conversational manner suitable for messaging."
)

SUMMARY_MAX_WORDS = 150


def summarize_prompt(text: str, max_words: int = SUMMARY_MAX_WORDS) -> str:
    """Build a summarisation prompt."""
    return (
        f"Please summarize the following text in a concise manner, "
        f"keeping it under {max_words} words:\n\n{text}"
    )


def translate_prompt(text: str, target_language: str) -> str:
    """Build a translation prompt."""
    return f"Translate the following text to {target_language}:\n\n{text}"


def joke_prompt(topic: str) -> str:
    """Build a joke prompt."""
    return f"Tell a clean, funny joke about {topic}."


def story_prompt(topic: str, length: str = "medium") -> str:
    """Build a short story prompt."""
    return f"Write a {length} creative story about {topic} for a general audience."


def question_prompt(question: str) -> str:
    """Build a question answering prompt."""
    return f"Please answer this question clearly and concisely: {question}"


def image_prompt(description: str) -> str:
    """Build a prompt asking for a detailed image generation prompt.

    :param description: What the user asked to see.
    :returns: Prompt for the text generator.
    """
    return (
        f'Create a detailed, artistic image generation prompt based on this description: '
        f'"{description}". Make it suitable for AI image generation with specific details '
        f"about style, lighting, composition, and quality. Reply with the prompt only."
    )
