import json
import logging

import pytest

from eduverse.errors import ErrorKind, ServiceResult
from eduverse.responses import INTERNAL_ERROR_TEXT, STATUS_BY_KIND, StatusTranslator

LOGGER_NAME = "tests.translator"


@pytest.fixture
def translator():
    return StatusTranslator(logging.getLogger(LOGGER_NAME))


def _translate(translator, call, **kwargs):
    kwargs.setdefault('success_message', 'Thing created successfully')
    kwargs.setdefault('failure_message', 'Failed to create thing')
    resp = translator.translate(call, **kwargs)
    return resp.status_code, json.loads(resp.body)


def test_every_error_kind_has_a_status():
    assert set(STATUS_BY_KIND) == set(ErrorKind)


def test_success_uses_fixed_data(translator):
    status, body = _translate(translator, lambda: ServiceResult.success(object()), data='created')
    assert status == 200
    assert body == {
        'status': 'success',
        'httpStatus': 200,
        'message': 'Thing created successfully',
        'data': 'created',
        'error': None,
    }


def test_success_renders_value(translator):
    status, body = _translate(translator, lambda: ServiceResult.success({'n': 1}), render=lambda v: v['n'] + 1)
    assert status == 200
    assert body['data'] == 2


@pytest.mark.parametrize("kind,expected", [
    (ErrorKind.DUPLICATE_KEY, 400),
    (ErrorKind.INTEGRITY_VIOLATION, 400),
    (ErrorKind.NOT_FOUND, 404),
    (ErrorKind.UNKNOWN, 500),
])
def test_error_kinds_map_to_status(translator, kind, expected):
    status, body = _translate(translator, lambda: ServiceResult.failure(kind, 'detail text'))
    assert status == expected
    assert body['httpStatus'] == expected
    assert body['status'] == 'error'
    assert body['data'] is None


def test_bad_request_message_carries_detail(translator):
    _, body = _translate(translator, lambda: ServiceResult.failure(ErrorKind.DUPLICATE_KEY, "Thing 'x' already exists"))
    assert body['message'] == "Failed to create thing: Thing 'x' already exists"
    assert body['error'] == "Thing 'x' already exists"


def test_not_found_uses_specific_message(translator):
    _, body = _translate(
        translator,
        lambda: ServiceResult.failure(ErrorKind.NOT_FOUND),
        not_found_message='Thing not found with ID: 7',
    )
    assert body['message'] == 'Thing not found with ID: 7'


def test_expected_rejections_are_not_logged(translator, caplog):
    caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
    for kind in (ErrorKind.DUPLICATE_KEY, ErrorKind.INTEGRITY_VIOLATION, ErrorKind.NOT_FOUND):
        _translate(translator, lambda: ServiceResult.failure(kind, 'x'))
    assert not [r for r in caplog.records if r.name == LOGGER_NAME]


def test_unknown_result_is_logged_but_hidden(translator, caplog):
    caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
    status, body = _translate(translator, lambda: ServiceResult.failure(ErrorKind.UNKNOWN, 'deadlock on table pathway'))
    assert status == 500
    assert body['error'] == INTERNAL_ERROR_TEXT
    assert any('deadlock on table pathway' in r.getMessage() for r in caplog.records if r.name == LOGGER_NAME)


def test_raised_exception_never_escapes(translator, caplog):
    caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)

    def explode():
        raise KeyError('internal')

    status, body = _translate(translator, explode)
    assert status == 500
    assert body['message'] == 'Failed to create thing'
    assert body['error'] == INTERNAL_ERROR_TEXT
    records = [r for r in caplog.records if r.name == LOGGER_NAME]
    assert records and records[0].exc_info is not None
