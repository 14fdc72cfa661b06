"""
Practice lookup API

Read-only JSON endpoints over the cached practice dataset:

- ``GET /api/practices``                      all practices
- ``GET /api/practice/<code>``                one practice by ODS code
- ``GET /api/search?query=<text>``            up to 10 matching practices
- ``GET /api/practice/<code>/projection``     earnings projection (``?prevalence=0-3``)

The dataset is loaded on the first request and kept for the process lifetime.
"""

from typing import Iterable, Optional

from flask import Flask, jsonify, request
from loguru import logger

from src.acquisition.practice_loader import LoadError, PracticeDataCache, get_default_cache
from src.analysis.practice_lookup import PracticeLookup
from src.modeling.earnings_projection import (
    VALID_PREVALENCE_LEVELS,
    EarningsProjectionEngine,
    validate_prevalence_level,
)
from src.utils.serialization import convert_to_json_serializable


def create_app(
    cache: Optional[PracticeDataCache] = None,
    max_results: int = 10,
    prevalence_levels: Iterable[int] = VALID_PREVALENCE_LEVELS,
    default_prevalence: int = 1,
) -> Flask:
    """
    Build the Flask application.

    Args:
        cache: Dataset cache to serve from (defaults to the process-wide cache)
        max_results: Search result limit
        prevalence_levels: Prevalence levels the projection endpoint accepts
        default_prevalence: Level used when the request gives none
    """
    app = Flask(__name__)
    app.json.sort_keys = False
    data_cache = cache or get_default_cache()
    engine = EarningsProjectionEngine()
    allowed_levels = list(prevalence_levels)

    def lookup() -> PracticeLookup:
        return PracticeLookup(data_cache.get_store(), max_results=max_results)

    @app.after_request
    def add_cors_headers(response):
        response.headers['Access-Control-Allow-Origin'] = '*'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type'
        response.headers['Access-Control-Allow-Methods'] = 'GET, OPTIONS'
        return response

    @app.route('/api/practices')
    def list_practices():
        try:
            return jsonify(convert_to_json_serializable(lookup().store.records))
        except LoadError as e:
            logger.error(f"Failed to load practice data: {e}")
            return jsonify({'error': 'Failed to fetch practice data'}), 500

    @app.route('/api/practice/<code>')
    def get_practice(code):
        try:
            practice = lookup().find_by_code(code)
        except LoadError as e:
            logger.error(f"Failed to load practice data: {e}")
            return jsonify({'error': 'Failed to fetch practice data'}), 500

        if practice is None:
            return jsonify({'error': 'Practice not found'}), 404
        return jsonify(convert_to_json_serializable(practice))

    @app.route('/api/search')
    def search_practices():
        query = request.args.get('query')
        try:
            service = lookup()
        except LoadError as e:
            logger.error(f"Failed to load practice data: {e}")
            return jsonify({'error': 'Failed to search practices'}), 500

        if not query:
            return jsonify({'error': 'Search query is required'}), 400

        return jsonify(convert_to_json_serializable(service.search(query)))

    @app.route('/api/practice/<code>/projection')
    def get_projection(code):
        try:
            level = validate_prevalence_level(
                request.args.get('prevalence', str(default_prevalence)), allowed_levels
            )
        except ValueError as e:
            return jsonify({'error': str(e)}), 400

        try:
            practice = lookup().find_by_code(code)
        except LoadError as e:
            logger.error(f"Failed to load practice data: {e}")
            return jsonify({'error': 'Failed to fetch practice data'}), 500

        if practice is None:
            return jsonify({'error': 'Practice not found'}), 404

        projection = engine.project(practice, level)
        return jsonify(convert_to_json_serializable(projection.to_dict()))

    return app
