from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class RoundStatus(str, Enum):
    LOADING = 'loading'
    ACTIVE = 'active'
    EVALUATING = 'evaluating'
    FINISHED = 'finished'


class Mood(str, Enum):
    IDLE = 'idle'
    THINKING = 'thinking'
    HAPPY = 'happy'
    SAD = 'sad'


@dataclass(frozen=True)
class Question:
    text: str
    options: tuple
    correct_index: int
    explanation: str = ''
    topic: str = ''
    has_code: bool = False
    difficulty: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any], difficulty: Optional[str] = None) -> 'Question':
        """Build from the generator's JSON shape; raises ValueError on bad shape."""
        if not isinstance(data, dict):
            raise ValueError('question payload is not an object')
        text = data.get('question')
        options = data.get('options')
        correct_index = data.get('correctIndex')
        if not isinstance(text, str) or not text.strip():
            raise ValueError('question text missing')
        if not isinstance(options, list) or len(options) != 4 or not all(isinstance(o, str) for o in options):
            raise ValueError('options must be a list of 4 strings')
        if isinstance(correct_index, bool) or not isinstance(correct_index, int) or not 0 <= correct_index <= 3:
            raise ValueError('correctIndex must be an integer in 0..3')
        return cls(
            text=text,
            options=tuple(options),
            correct_index=correct_index,
            explanation=str(data.get('explanation') or ''),
            topic=str(data.get('topic') or ''),
            has_code=bool(data.get('hasCode', False)),
            difficulty=difficulty,
        )

    def with_difficulty(self, difficulty: str) -> 'Question':
        return Question(self.text, self.options, self.correct_index, self.explanation,
                        self.topic, self.has_code, difficulty)

    def to_dict(self, reveal: bool = False) -> Dict[str, Any]:
        data = {
            'question': self.text,
            'options': list(self.options),
            'topic': self.topic,
            'has_code': self.has_code,
            'difficulty': self.difficulty,
        }
        if reveal:
            data['correct_index'] = self.correct_index
            data['explanation'] = self.explanation
        return data


@dataclass
class AnswerRecord:
    question_number: int
    selected_index: int
    is_correct: bool
    time_remaining: float
    elapsed: float
    points: int
    coins: int


@dataclass
class RoundState:
    """Mutable per-round accumulators, owned by one controller."""
    difficulty: str = 'medium'
    question_number: int = 1
    score: int = 0
    coins: int = 0
    correct_answers: int = 0
    wrong_answers: int = 0
    total_time_seconds: float = 0.0
    mood: Mood = Mood.THINKING
    answers: List[AnswerRecord] = field(default_factory=list)

    @property
    def answered(self) -> int:
        return self.correct_answers + self.wrong_answers


@dataclass(frozen=True)
class QuizResults:
    score: int
    coins: int
    correct_answers: int
    wrong_answers: int
    total_time: float
    difficulty: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
