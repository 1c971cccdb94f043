from dataclasses import replace

from flask import Flask, abort, jsonify, request

from marko_media.config import load_options, parse_references
from marko_media.errors import MediaConfigError
from marko_media.md_parser import make_markdown

# Options come from MEDIA_CONTROLS, MEDIA_ATTRS and MEDIA_REFERENCES_FILE
options = load_options()

app = Flask(__name__)

@app.errorhandler(400)
def bad_request_error(error):
    return jsonify(error=error.description), 400

@app.errorhandler(404)
def not_found_error(error):
    return jsonify(error=error.description), 404

@app.errorhandler(500)
def internal_error(error):
    app.logger.error(f"Render failed: {error}")
    return jsonify(error="Internal server error"), 500

def read_markdown():
    """Get the markdown text and any per-request references from the request body"""
    if not request.is_json:
        return request.get_data(as_text=True), None

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, "Expected a JSON object")
    markdown = data.get('markdown')
    if not isinstance(markdown, str):
        abort(400, "'markdown' must be a string")
    return markdown, data.get('references')

def request_options(references):
    """Layer per-request references over the configured ones"""
    if references is None:
        return options
    try:
        extra = parse_references(references)
    except MediaConfigError as e:
        app.logger.warning(f"Rejected references: {e}")
        abort(400, str(e))
    return replace(options, references={**options.references, **extra})

@app.route('/render', methods=['POST'])
def render():
    markdown, references = read_markdown()
    # Markdown instances keep state while rendering so each request gets its own
    parser = make_markdown(request_options(references))
    html = parser.convert(markdown)
    app.logger.debug(f"Rendered {len(markdown)} chars of markdown")
    return html, 200, {'Content-Type': 'text/html; charset=utf-8'}

@app.route('/health')
def health():
    return jsonify(status='ok')


if __name__ == '__main__':
    app.run()
