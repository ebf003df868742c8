"""Custom exception classes for the projection engine.

The engine raises these as plain exceptions; ``cashflow.main`` turns them into
JSON error responses using the carried ``status_code``.
"""

from fastapi import status


class CashFlowError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str = "Cash flow projection failed"):
        super().__init__(detail)
        self.detail = detail


class MissingDataError(CashFlowError):
    status_code = status.HTTP_424_FAILED_DEPENDENCY

    def __init__(self, collection: str = "Data"):
        super().__init__(f"{collection} could not be loaded")
        self.collection = collection


class InvalidParameterError(CashFlowError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, parameter: str, detail: str = "invalid value"):
        super().__init__(f"{parameter}: {detail}")
        self.parameter = parameter
