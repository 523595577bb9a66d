def error_message_detail(error, error_detail=None):
    """Build an error message that points at the script and line that raised."""
    if error_detail is None:
        return str(error)

    _, _, exc_tb = error_detail.exc_info()
    if exc_tb is None:
        return str(error)

    while exc_tb.tb_next is not None:
        exc_tb = exc_tb.tb_next
    file_name = exc_tb.tb_frame.f_code.co_filename
    return "Error occurred in python script name [{0}] line number [{1}] error message [{2}]".format(
        file_name, exc_tb.tb_lineno, str(error)
    )


class CustomException(Exception):
    """Base error for every failure surfaced by svmlab."""

    def __init__(self, error_message, error_detail=None):
        self.error_message = error_message_detail(error_message, error_detail=error_detail)
        super().__init__(self.error_message)

    def __str__(self):
        return self.error_message


class ValidationError(CustomException):
    """Options or data do not have the shape the pipeline needs."""


class ModelTrainingError(CustomException):
    """The SVM solver failed to fit."""


class ModelEvaluationError(CustomException):
    """Metrics could not be computed for a trained model."""


class PredictionError(CustomException):
    """A prediction request could not be served."""
