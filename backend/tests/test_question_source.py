import pytest
import requests

from santa_quiz.services.quiz.errors import MalformedResponseError, TransientFetchError
from santa_quiz.services.quiz.question_source import HttpQuestionSource


VALID = {
    'question': 'Which collection does not allow duplicates?',
    'options': ['List', 'Set', 'ArrayList', 'Vector'],
    'correctIndex': 1,
    'explanation': 'A Set holds unique elements.',
    'topic': 'Collections Framework',
    'hasCode': False,
}


class FakeResponse:
    def __init__(self, status_code=200, payload=None, bad_json=False):
        self.status_code = status_code
        self._payload = payload
        self._bad_json = bad_json

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._bad_json:
            raise ValueError('Expecting value')
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.requests.append({'url': url, 'json': json, 'headers': headers, 'timeout': timeout})
        if self.error is not None:
            raise self.error
        return self.response


def make_source(**kwargs):
    session = FakeSession(**kwargs)
    return HttpQuestionSource('http://qs.test/generate-question', api_key='anon-key', session=session), session


def test_fetch_posts_request_body_and_parses_question():
    source, session = make_source(response=FakeResponse(payload=VALID))
    question = source.fetch('hard', 3)
    sent = session.requests[0]
    assert sent['json'] == {'difficulty': 'hard', 'questionNumber': 3, 'topics': None}
    assert sent['headers']['Authorization'] == 'Bearer anon-key'
    assert question.text == VALID['question']
    assert question.options == tuple(VALID['options'])
    assert question.correct_index == 1
    assert question.topic == 'Collections Framework'
    assert question.difficulty == 'hard'


def test_non_2xx_is_transient():
    body = {'error': 'AI gateway error: 500', 'fallback': VALID}
    source, _ = make_source(response=FakeResponse(status_code=500, payload=body))
    with pytest.raises(TransientFetchError):
        source.fetch('low', 1)


def test_error_field_in_success_body_is_transient():
    source, _ = make_source(response=FakeResponse(payload={'error': 'Rate limits exceeded', 'fallback': VALID}))
    with pytest.raises(TransientFetchError):
        source.fetch('low', 1)


def test_network_error_is_transient():
    source, _ = make_source(error=requests.ConnectionError('refused'))
    with pytest.raises(TransientFetchError):
        source.fetch('medium', 2)


def test_invalid_json_is_malformed():
    source, _ = make_source(response=FakeResponse(bad_json=True))
    with pytest.raises(MalformedResponseError):
        source.fetch('medium', 2)


@pytest.mark.parametrize('patch', [
    {'options': ['a', 'b', 'c']},
    {'options': 'abcd'},
    {'correctIndex': 4},
    {'correctIndex': '1'},
    {'question': ''},
])
def test_bad_shape_is_malformed(patch):
    payload = dict(VALID, **patch)
    source, _ = make_source(response=FakeResponse(payload=payload))
    with pytest.raises(MalformedResponseError):
        source.fetch('medium', 2)
