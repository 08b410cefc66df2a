"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The server only ever answers with three statuses. The reason phrase is
part of the wire format and clients compare it byte for byte, so the
phrases are spelled exactly as they go out:

    HTTP/1.1 200 OK
    HTTP/1.1 201 CREATED
    HTTP/1.1 404 NOT FOUND
             ─── ─────────
              │      │
              │      └── Reason phrase (upper-case on the wire)
              └───────── Status code

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Extends IntEnum, so a status compares equal to its integer code:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'NOT FOUND'
    """

    OK = 200           # Request handled, optional body follows
    CREATED = 201      # File written by POST /files/<name>
    NOT_FOUND = 404    # Every routing miss and filesystem failure

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "CREATED",
    HTTPStatus.NOT_FOUND: "NOT FOUND",
}
