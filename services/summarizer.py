import logging
import re

import google.generativeai as genai # Genai model imported here
from flask import current_app

from errors import ApiError

logger = logging.getLogger(__name__)

GENERATION_CONFIG = {
    "temperature": 0.2,
    "top_k": 40,
    "top_p": 0.95,
    "max_output_tokens": 400,
}


class SummarizerUnavailable(ApiError):
    status = 503


def get_model():
    """Configures Gemini from the app config and returns the model handle."""
    api_key = current_app.config.get('API_KEY')
    if not api_key:
        raise SummarizerUnavailable("Summarization is not configured on this server.")
    genai.configure(api_key=api_key)
    return genai.GenerativeModel(current_app.config['GEMINI_MODEL'],
                                 generation_config=GENERATION_CONFIG)


def clean_markdown_logic(text):
    """
    Removes Markdown symbols (*, **, ##) so the reply can be shown as plain text.
    """
    if not text: return ""

    #Removes Markdown bold/italic/headers
    text = re.sub(r'\*\*|__|\*|`', '', text)
    text = re.sub(r'^\s*#+\s+', '', text, flags=re.MULTILINE)

    return text.strip()


def _generate(prompt):
    model = get_model()
    try:
        response = model.generate_content(prompt)
        return clean_markdown_logic(response.text)
    except Exception:
        # The client library raises a wide range of its own error types
        logger.exception("Gemini request failed")
        raise ApiError("Failed to generate a response. Please try again later.")


def summarize(content, max_words=100):
    if not content or not content.strip():
        return ""
    prompt = (
        f"Please create a concise summary of the following blog post content. "
        f"The summary should be approximately {max_words} words.\n\n"
        f"Content: {content}"
    )
    return _generate(prompt)


def chat(message, history=()):
    """Answers ``message`` with earlier turns of the conversation as context."""
    context = ""
    if history:
        context = "Previous conversation:\n"
        for turn in history:
            speaker = "User" if turn.role == "user" else "Assistant"
            context += f"{speaker}: {turn.content}\n"
        context += "\nCurrent message:\n"
    return _generate(context + message)
