"""
AWS Lambda / API Gateway adapter.

Maps a JSON request body to a list of files, runs the batch scheduler and
returns word statistics as an API Gateway proxy response.
"""

import os
import json
import logging
import tempfile
from typing import List

from wordflux.aggregator import top_words
from wordflux.config import Settings
from wordflux.scheduler import BatchScheduler

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'Content-Type',
    'Access-Control-Allow-Methods': 'POST, OPTIONS',
}


class BadRequest(Exception):
    pass


def _response(status_code: int, payload) -> dict:
    headers = {'Content-Type': 'application/json'}
    headers.update(CORS_HEADERS)
    return {
        'statusCode': status_code,
        'headers': headers,
        'body': json.dumps(payload, indent=2, ensure_ascii=False),
    }


def _parse_body(event) -> dict:
    body = (event or {}).get('body')
    if body is None:
        return {}
    if isinstance(body, str):
        try:
            body = json.loads(body) if body.strip() else {}
        except json.JSONDecodeError as e:
            raise BadRequest(f"Request body is not valid JSON: {e}")
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object")
    return body


def _write_temp_text(text: str, label: str) -> str:
    fd, path = tempfile.mkstemp(prefix=f"text-{label}-", suffix='.txt')
    with os.fdopen(fd, 'w', encoding='utf-8') as f:
        f.write(text)
    return path


def _collect_files(body: dict, created: List[str]) -> List[str]:
    files = []

    paths = body.get('files')
    if isinstance(paths, list):
        base_dir = os.environ.get('LAMBDA_TASK_ROOT') or os.getcwd()
        for path in paths:
            if not isinstance(path, str):
                continue
            absolute = os.path.abspath(os.path.join(base_dir, path))
            if os.path.isfile(absolute):
                files.append(absolute)
            else:
                logger.warning(f"File not found: {path}")

    texts = body.get('texts')
    if isinstance(texts, list):
        for i, text in enumerate(texts):
            if isinstance(text, str) and text:
                path = _write_temp_text(text, str(i))
                created.append(path)
                files.append(path)

    # Single text field, kept for older clients
    if not files:
        text = body.get('text') or body.get('content')
        if isinstance(text, str) and text:
            path = _write_temp_text(text, 'single')
            created.append(path)
            files.append(path)

    return files


def _int_field(body: dict, name: str, default):
    value = body.get(name, default)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"'{name}' must be an integer")


def handler(event, context=None) -> dict:
    """Lambda entry point"""
    created: List[str] = []
    try:
        settings = Settings.from_env()
        body = _parse_body(event)
        top_n = _int_field(body, 'topN', None)
        if top_n is None:
            top_n = settings.top_n
        max_workers = _int_field(body, 'maxWorkers', settings.max_workers)
        if top_n < 0:
            raise BadRequest("'topN' must be >= 0")
        if max_workers is not None and max_workers < 1:
            raise BadRequest("'maxWorkers' must be a positive integer")

        files = _collect_files(body, created)
        if not files:
            return _response(400, {
                'error': 'Bad Request',
                'message': 'No valid files or text content were provided.',
                'example': {
                    'files': ['data/file1.txt'],
                    'texts': ['Text 1...', 'Text 2...'],
                },
            })

        logger.info(f"Processing {len(files)} files in parallel")
        scheduler = BatchScheduler(
            max_workers=max_workers,
            progress_interval=settings.worker_progress_interval,
            timeout=settings.timeout,
        )
        results = scheduler.run(files)

        return _response(200, {
            'success': True,
            'summary': {
                'totalFiles': len(files),
                'successful': len(results.successful),
                'failed': len(results.failed),
                'totalDuration': round(results.duration_seconds, 3),
                'totalWords': results.total_words,
                'uniqueWords': results.total_unique_words,
                'linesProcessed': results.total_lines_processed,
            },
            'results': {
                'successful': [{
                    'file': os.path.basename(r.path),
                    'duration': round(r.duration_seconds, 3),
                    'totalWords': r.total_words,
                    'uniqueWords': r.unique_words,
                    'linesProcessed': r.lines_processed,
                } for r in results.successful],
                'failed': [{
                    'file': os.path.basename(f.path),
                    'error': f.error.message,
                    'kind': f.error.kind.value,
                } for f in results.failed],
            },
            'topWords': [{'word': w, 'count': c}
                         for w, c in top_words(results.combined_frequency_map, top_n)],
        })

    except BadRequest as e:
        return _response(400, {'error': 'Bad Request', 'message': str(e)})
    except Exception as e:
        logger.exception("Unhandled error in lambda handler")
        return _response(500, {'error': 'Internal Server Error', 'message': str(e)})
    finally:
        for path in created:
            try:
                os.remove(path)
            except OSError as e:
                logger.warning(f"Could not remove temporary file {path}: {e}")


def options_handler(event, context=None) -> dict:
    """CORS preflight"""
    headers = dict(CORS_HEADERS)
    headers['Access-Control-Max-Age'] = '86400'
    return {'statusCode': 200, 'headers': headers, 'body': ''}
