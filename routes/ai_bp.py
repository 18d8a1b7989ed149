from flask import Blueprint, jsonify

from database import get_db
from errors import BadRequest, NotFound
from schemas import ChatRequest, SummarizeRequest, parse_body
from services import summarizer

"""
-----------------------Over here in this file the Gemini powered features are exposed:
post summaries for readers and the assistant chat.

"""

ai_bp = Blueprint('ai', __name__)#Blueprint registered here to be registered in app.py


@ai_bp.route('/ai/summarize', methods=['POST'])
def summarize_post():
    """Summarizes either raw ``content`` or a stored post given by ``postId``."""
    body = parse_body(SummarizeRequest)

    content = body.content
    if not content and body.postId is not None:
        row = get_db().execute('SELECT content FROM posts WHERE id = ?', (body.postId,)).fetchone()
        if row is None:
            raise NotFound('Post not found')
        content = row['content']
    if not content or not content.strip():
        raise BadRequest('No content provided')

    return jsonify({"summary": summarizer.summarize(content, body.maxWords)})


@ai_bp.route('/chat', methods=['POST'])
def chat():
    body = parse_body(ChatRequest)
    return jsonify({"message": summarizer.chat(body.message, body.history)})
