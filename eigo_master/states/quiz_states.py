from enum import Enum


class QuizState(str, Enum):
    IDLE = "idle"
    AWAITING_ANSWER = "awaiting_answer"
    SHOWING_FEEDBACK = "showing_feedback"
    FINISHED = "finished"


class Feedback(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
