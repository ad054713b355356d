from formassist_api.models.ask import AskRequest, AskResponse, TableReferenceIn

__all__ = ["AskRequest", "AskResponse", "TableReferenceIn"]
