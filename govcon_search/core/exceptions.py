"""
Search Exceptions
Error types raised inside the search and suggestion subsystem
"""


class SearchError(Exception):
    """Base class for search subsystem errors"""


class StoreError(SearchError):
    """The contract store could not answer a query"""


class PhraseSearchUnavailableError(StoreError):
    """The store's phrase / full-text capability is missing or failed"""


class EmbeddingProviderError(SearchError):
    """An embedding backend failed (network, auth, rate limit, bad response)"""


class SuggestionsUnavailableError(SearchError):
    """
    Suggestions could not be generated

    Distinct from an empty suggestion list: callers must report
    "suggestions unavailable", never "no related terms".
    """
