class QuizStateError(Exception):
    """
    Throw an exception when a quiz operation does not fit the quiz's current state.
    """


class RoundTransitionError(Exception):
    """
    Throw an exception when a mock-interview round could not be scored or the next round could not be loaded.
    """


class InvalidGoalError(Exception):
    """
    Throw an exception when a goal request cannot be turned into a goal.
    """


class AIServiceError(Exception):
    """
    Throw an exception when the generative-AI service could not be reached or refused the request.
    """


class InvalidQuizSelectionError(Exception):
    """
    Throw an exception when a quiz cannot be started from the requested selection.
    """
