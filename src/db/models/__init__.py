from .profile import Profile
from .period import EvaluationPeriodRow
from .question import QuestionCategory, QuestionRow
from .evaluation import Evaluation
