"""
Search executor: pairs a compiled request body with its index target and
hands it to the search transport.
"""

from typing import Any, Dict, List, Union

from elastic_fluent.transport.base import ISearchTransport, InvalidQueryError
from elastic_fluent.utils.logger import LoggerMixin


def resolve_index(indices: Union[str, List[str], None]) -> str:
    """Turn an index name or list of names into an index pattern."""
    if isinstance(indices, str):
        names = [indices]
    elif isinstance(indices, (list, tuple)):
        names = list(indices)
    else:
        raise InvalidQueryError("An index or list of indices is required")

    if not names or not all(isinstance(name, str) and name.strip() for name in names):
        raise InvalidQueryError(f"Invalid index target: {indices!r}")
    return ",".join(names)


class SearchExecutor(LoggerMixin):
    """Dispatches compiled queries; responses are returned exactly as received."""

    def __init__(self, transport: ISearchTransport):
        self.transport = transport

    def execute(self, indices: Union[str, List[str]], body: Dict[str, Any]) -> Dict[str, Any]:
        index = resolve_index(indices)
        self.logger.info(f"Executing search on '{index}'")
        self.logger.debug(f"Search body: {body}")
        return self.transport.search(index, body)
