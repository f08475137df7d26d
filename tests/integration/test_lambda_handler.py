"""
Tests for the API Gateway / Lambda adapter
"""

import os
import json
import tempfile
import pytest
from unittest.mock import patch

from wordflux.lambda_handler import handler, options_handler


@pytest.fixture
def isolated_tmp(monkeypatch, temp_dir):
    """Route temporary text files into temp_dir so cleanup can be checked"""
    monkeypatch.setattr(tempfile, 'tempdir', temp_dir)
    return temp_dir


@pytest.mark.integration
class TestLambdaHandler:

    def test_raw_texts_are_counted(self, isolated_tmp):
        event = {'body': json.dumps({
            'texts': ["Hola mundo esto es una prueba",
                      "Hola mundo esto es otra prueba diferente"],
            'topN': 2,
            'maxWorkers': 2,
        })}

        response = handler(event)

        assert response['statusCode'] == 200
        assert response['headers']['Access-Control-Allow-Origin'] == '*'
        body = json.loads(response['body'])
        assert body['success'] is True
        assert body['summary']['totalFiles'] == 2
        assert body['summary']['totalWords'] == 13
        assert body['summary']['uniqueWords'] == 8
        assert body['topWords'] == [{'word': 'es', 'count': 2}, {'word': 'esto', 'count': 2}]
        assert os.listdir(isolated_tmp) == []

    def test_files_relative_to_task_root(self, monkeypatch, make_text_file, temp_dir):
        make_text_file('book.txt', "alpha beta alpha\n")
        monkeypatch.setenv('LAMBDA_TASK_ROOT', temp_dir)

        response = handler({'body': {'files': ['book.txt', 'missing.txt']}})

        body = json.loads(response['body'])
        assert response['statusCode'] == 200
        assert body['summary']['totalFiles'] == 1
        assert body['results']['successful'][0]['file'] == 'book.txt'
        assert body['topWords'][0] == {'word': 'alpha', 'count': 2}

    def test_single_text_fallback(self, isolated_tmp):
        response = handler({'body': json.dumps({'text': 'one one two'})})

        body = json.loads(response['body'])
        assert response['statusCode'] == 200
        assert body['summary']['totalWords'] == 3
        assert os.listdir(isolated_tmp) == []

    def test_nothing_to_process_is_bad_request(self):
        response = handler({'body': json.dumps({'files': []})})

        assert response['statusCode'] == 400
        body = json.loads(response['body'])
        assert body['error'] == 'Bad Request'
        assert 'example' in body

    def test_missing_body_is_bad_request(self):
        assert handler({})['statusCode'] == 400

    def test_invalid_json_is_bad_request(self):
        response = handler({'body': '{not json'})
        assert response['statusCode'] == 400

    def test_negative_top_n_is_bad_request(self):
        response = handler({'body': {'text': 'a b', 'topN': -1}})
        assert response['statusCode'] == 400

    def test_unexpected_failure_is_server_error(self, isolated_tmp):
        with patch('wordflux.lambda_handler.BatchScheduler') as mock_scheduler:
            mock_scheduler.return_value.run.side_effect = RuntimeError("pool exploded")
            response = handler({'body': {'texts': ['some text']}})

        assert response['statusCode'] == 500
        body = json.loads(response['body'])
        assert body['error'] == 'Internal Server Error'
        assert body['message'] == 'pool exploded'
        assert os.listdir(isolated_tmp) == []

    @pytest.mark.parametrize('name, value', [
        ('WORDFLUX_TOP_N', 'ten'),
        ('WORDFLUX_MAX_WORKERS', '0'),
    ])
    def test_bad_environment_is_server_error(self, monkeypatch, isolated_tmp, name, value):
        monkeypatch.setenv(name, value)

        with patch('wordflux.lambda_handler.BatchScheduler') as mock_scheduler:
            response = handler({'body': json.dumps({'texts': ['some text']})})

        assert response['statusCode'] == 500
        assert response['headers']['Access-Control-Allow-Origin'] == '*'
        body = json.loads(response['body'])
        assert body['error'] == 'Internal Server Error'
        assert name in body['message']
        mock_scheduler.assert_not_called()
        assert os.listdir(isolated_tmp) == []

    def test_options_preflight(self):
        response = options_handler({})

        assert response['statusCode'] == 200
        assert response['body'] == ''
        assert response['headers']['Access-Control-Max-Age'] == '86400'
