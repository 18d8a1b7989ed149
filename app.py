import logging
import sqlite3

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import Config
from database import close_db, init_db
from errors import ApiError
from routes.ai_bp import ai_bp
from routes.auth_bp import auth_bp
from routes.bookmarks_bp import bookmarks_bp
from routes.comments_bp import comments_bp
from routes.posts_bp import posts_bp
from routes.subscribers_bp import subscribers_bp
from routes.users_bp import users_bp

#Here the blueprints would be imported from other modules so they can be registered

logging.basicConfig(level=Config.LOG_LEVEL,
                    format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = Flask(__name__)# Creates the central application object and flask app is initialized.
app.config.from_object(Config)

# The single-page front end is served from a different origin
CORS(app, resources={r"/api/*": {"origins": Config.CORS_ORIGINS}})

app.teardown_appcontext(close_db)


""" Here we are registering blueprints
Every JSON endpoint lives under the '/api' url prefix.
"""
app.register_blueprint(auth_bp, url_prefix='/api')
app.register_blueprint(posts_bp, url_prefix='/api')#Posts, likes and views
app.register_blueprint(comments_bp, url_prefix='/api')
app.register_blueprint(bookmarks_bp, url_prefix='/api')
app.register_blueprint(subscribers_bp, url_prefix='/api')
app.register_blueprint(users_bp, url_prefix='/api')
app.register_blueprint(ai_bp, url_prefix='/api')# Gemini summaries and chat


# --- ERROR HANDLERS ---

@app.errorhandler(ApiError)
def handle_api_error(e):
    return jsonify({"error": e.message}), e.status


@app.errorhandler(sqlite3.Error)
def handle_db_error(e):
    app.logger.exception("Database error: %s", e)
    return jsonify({"error": "Internal server error"}), 500


@app.errorhandler(HTTPException)
def handle_http_error(e):
    return jsonify({"error": e.description}), e.code


@app.errorhandler(Exception)
def handle_unexpected(e):
    app.logger.exception("Unhandled error")
    return jsonify({"error": "Internal server error"}), 500


@app.cli.command('init-db')
def init_db_command():
    """Create the tables if they do not exist yet."""
    init_db(app.config['DB_PATH'])


@app.route('/api/health')
def health():
    return jsonify({"status": "ok"})


if __name__ == '__main__':

    """
    Over here database is initialized and it
     Ensures the SQLite schema exists before the server starts accepting requests.
    """
    init_db(app.config['DB_PATH'])

    app.run(host="0.0.0.0")
