import requests

from .errors import MalformedResponseError, TransientFetchError
from .round_state import Question


FALLBACK_QUESTION = Question(
    text="Which keyword is used to create a subclass in Java?",
    options=("extends", "implements", "inherits", "super"),
    correct_index=0,
    explanation="The 'extends' keyword is used to create a subclass (child class) from a superclass (parent class) in Java.",
    topic="OOPs - Inheritance",
    has_code=False,
)


class HttpQuestionSource:
    """Client for the remote `POST /generate-question` endpoint.

    `fetch` returns a validated `Question` or raises a `QuestionSourceError`
    subclass; choosing the fallback is up to the caller.
    """

    def __init__(self, url, api_key=None, timeout=None, session=None):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, difficulty: str, question_number: int) -> Question:
        headers = {'Content-Type': 'application/json'}
        if self.api_key:
            headers['Authorization'] = f"Bearer {self.api_key}"
        body = {'difficulty': difficulty, 'questionNumber': question_number, 'topics': None}
        try:
            res = self.session.post(self.url, json=body, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransientFetchError(f"question source unreachable: {exc}") from exc
        if not res.ok:
            raise TransientFetchError(f"question source returned HTTP {res.status_code}")
        try:
            data = res.json()
        except ValueError as exc:
            raise MalformedResponseError('question source returned invalid JSON') from exc
        if isinstance(data, dict) and data.get('error'):
            raise TransientFetchError(f"question source error: {data['error']}")
        try:
            return Question.from_payload(data, difficulty=difficulty)
        except ValueError as exc:
            raise MalformedResponseError(str(exc)) from exc
