"""
Unit tests for pipeline request/response values and the sample handler.
"""

import pytest

from funcgate.exceptions import HandlerFault
from funcgate.functions import make_update_pet
from funcgate.pipeline import HeaderMap, Request, Response, fallback_response


class TestRequest:
    """Test the immutable request value."""

    def test_headers_are_case_insensitive(self):
        request = Request(method='get', path='/api/Function1', headers={'Content-Type': 'text/plain'})

        assert request.headers['content-type'] == 'text/plain'
        assert request.headers['CONTENT-TYPE'] == 'text/plain'
        assert 'Content-type' in request.headers
        assert list(request.headers) == ['Content-Type']

    def test_method_upper_cased(self):
        assert Request(method='post', path='/').method == 'POST'

    def test_request_is_frozen(self):
        request = Request(method='GET', path='/')

        with pytest.raises(AttributeError):
            request.path = '/other'

    def test_headers_are_read_only(self):
        request = Request(method='GET', path='/', headers={'X-A': '1'})

        with pytest.raises(TypeError):
            request.headers['X-A'] = '2'

    def test_query_is_read_only(self):
        request = Request(method='GET', path='/', query={'id': '7'})

        assert request.query['id'] == '7'
        with pytest.raises(TypeError):
            request.query['id'] = '8'

    def test_caller_mapping_changes_do_not_leak(self):
        headers = {'X-A': '1'}
        request = Request(method='GET', path='/', headers=headers)
        headers['X-A'] = '2'

        assert request.headers['X-A'] == '1'

    def test_create_response(self):
        response = Request(method='GET', path='/').create_response(201)

        assert isinstance(response, Response)
        assert response.status_code == 201


class TestResponse:
    """Test the response builder."""

    def test_write_string_appends(self):
        response = Response().write_string("Hello, ").write_string("world")

        assert response.body == b"Hello, world"

    def test_content_type(self):
        response = Response().set_header('Content-Type', 'text/plain; charset=utf-8')

        assert response.content_type == 'text/plain; charset=utf-8'

    def test_fallback_response(self):
        response = fallback_response()

        assert response.status_code == 500
        assert response.body == b""
        assert fallback_response() is not response


class TestHeaderMap:
    def test_empty(self):
        assert len(HeaderMap()) == 0

    def test_missing_key(self):
        with pytest.raises(KeyError):
            HeaderMap({'A': '1'})['b']


class TestUpdatePetHandler:
    """Test the sample handler."""

    def test_faults_by_default(self):
        handler = make_update_pet()

        with pytest.raises(HandlerFault, match="Ooops"):
            handler(Request(method='GET', path='/api/Function1'))

    def test_welcome_response_when_not_faulting(self):
        handler = make_update_pet(always_fault=False)

        response = handler(Request(method='POST', path='/api/Function1'))

        assert response.status_code == 200
        assert response.content_type == 'text/plain; charset=utf-8'
        assert response.body == b"Welcome to the function gateway!"
